"""Parser for FASTA formatted alignments."""

import os
import re
import typing
from functools import singledispatch

from alnkit.parse.record import RecordError
from alnkit.util.io import open_

_white_space = re.compile(r"\s+")

RenamerType = typing.Callable[[str], str]
PathOrIterableType = typing.Union[os.PathLike, str, list[str], tuple[str]]


@singledispatch
def _prep_data(data) -> typing.Iterable[str]:
    return data


@_prep_data.register
def _(data: str):
    with open_(data) as infile:
        return infile.read().splitlines()


@_prep_data.register
def _(data: os.PathLike):
    return _prep_data(str(data))


def _strict_parser(
    data: typing.Iterable[str],
    label_to_name: RenamerType,
    label_char: str,
) -> typing.Iterable[tuple[str, str]]:
    seq: list[str] = []
    label: str | None = None
    for line in data:
        line = line.strip()
        if not line or line.startswith("#"):
            # ignore empty or comment lines
            continue

        if line[0] in label_char:
            if label is not None:
                if not seq:
                    msg = f"{label} has no data"
                    raise RecordError(msg)
                yield label_to_name(label), _white_space.sub("", "".join(seq))
            elif seq:
                msg = "missing a label"
                raise RecordError(msg)

            label = line[1:].strip()
            seq = []
        else:
            seq.append(line)

    if label is None:
        msg = "missing a label" if seq else "no sequences found"
        raise RecordError(msg)
    if not seq:
        msg = f"{label} has no data"
        raise RecordError(msg)

    yield label_to_name(label), _white_space.sub("", "".join(seq))


def _lenient_parser(
    data: typing.Iterable[str],
    label_to_name: RenamerType,
    label_char: str,
) -> typing.Iterable[tuple[str, str]]:
    # records without sequence are kept
    seq: list[str] = []
    label: str | None = None
    for line in data:
        line = line.strip()
        if not line or line.startswith("#"):
            continue

        if line[0] in label_char:
            if label is not None:
                yield label_to_name(label), _white_space.sub("", "".join(seq))
            label = line[1:].strip()
            seq = []
        elif label is None:
            raise RecordError("missing a label")
        else:
            seq.append(line)

    if label is None:
        raise RecordError("no sequences found")
    yield label_to_name(label), _white_space.sub("", "".join(seq))


def MinimalFastaParser(
    path: PathOrIterableType,
    strict: bool = True,
    label_to_name: RenamerType = str,
    label_characters: str = ">",
) -> typing.Iterable[tuple[str, str]]:
    """
    Yields successive sequences from path as (label, seq) tuples.

    Parameters
    ----------
    path
        a file path or a series of lines
    strict
        raise an exception for records without sequence, otherwise they
        are yielded with an empty sequence
    label_to_name
        function for converting a label to a name
    label_characters
        character(s) at the start of a label line

    Raises
    ------
    RecordError
        if there is sequence data before the first label, no records at
        all, or strict and a label without sequence data
    """
    data = _prep_data(path)
    parser = _strict_parser if strict else _lenient_parser
    yield from parser(data, label_to_name, set(label_characters))


def first_word(label: str) -> str:
    """the label up to the first white space"""
    parts = label.split(None, 1)
    return parts[0] if parts else label


def fasta_to_seqs(
    path: PathOrIterableType, gap_char: str = "-"
) -> tuple[list[str], list[str]]:
    """names and sequences from a FASTA alignment

    Notes
    -----
    A name is the first word of its label. Sequences shorter than the
    longest, including records with no sequence, are padded at the end
    with gap_char.
    """
    names, seqs = [], []
    for name, seq in MinimalFastaParser(path, strict=False, label_to_name=first_word):
        names.append(name)
        seqs.append(seq)
    length = max(len(s) for s in seqs)
    seqs = [s.ljust(length, gap_char) for s in seqs]
    return names, seqs
