"""Loading alignments, features and category maps from files."""

from __future__ import annotations

import typing

import numpy
from scitrack import get_text_hexdigest

from alnkit.core.alignment import Alignment, AlignmentError
from alnkit.core.alphabet import AlphabetError, MsaAlphabet
from alnkit.core.category_map import CategoryMap
from alnkit.format.alignment import format_for_suffix, get_format
from alnkit.parse.fasta import fasta_to_seqs
from alnkit.parse.gff import load_gff
from alnkit.parse.maf import maf_to_seqs
from alnkit.parse.phylip import MinimalMpmParser, MinimalPhylipParser
from alnkit.parse.record import FileFormatError, RecordError
from alnkit.parse.ss import ss_parser
from alnkit.util.io import PathType, open_

if typing.TYPE_CHECKING:  # pragma: no cover
    from collections.abc import Iterable, Sequence

    from scitrack import CachingLogger

    from alnkit.core.features import FeatureSet

AlphabetType = typing.Union[MsaAlphabet, str, None]


def _resolve_format(path: PathType, format: str | None) -> str:
    fmt = get_format(format) if format else format_for_suffix(path)
    if fmt is None:
        msg = f"cannot infer the format of {str(path)!r}, specify it"
        raise FileFormatError(msg)
    return fmt


def _read_lines(path: PathType) -> list[str]:
    with open_(path) as infile:
        return infile.read().splitlines()


def _make_alphabet(alphabet: AlphabetType) -> MsaAlphabet:
    if alphabet is None:
        return MsaAlphabet()
    return MsaAlphabet(alphabet) if isinstance(alphabet, str) else alphabet


def _parse_alignment(lines: Iterable[str], fmt: str, alphabet: AlphabetType) -> Alignment:
    if fmt == "ss":
        aln = ss_parser(lines)
        if alphabet is not None:
            aln.alphabet = _make_alphabet(alphabet).copy()
        return aln

    alpha = _make_alphabet(alphabet)
    idx_offset = 0
    if fmt == "fasta":
        names, seqs = fasta_to_seqs(lines, gap_char=alpha.gap_char)
    elif fmt == "maf":
        names, seqs, idx_offset = maf_to_seqs(lines, gap_char=alpha.gap_char)
    else:
        parser = MinimalPhylipParser if fmt == "phylip" else MinimalMpmParser
        records = parser(lines)
        names = [n for n, _ in records]
        seqs = [s for _, s in records]

    try:
        return Alignment(seqs, names, alphabet=alpha, idx_offset=idx_offset)
    except AlphabetError as err:
        raise RecordError(str(err)) from err


def load_alignment(
    path: PathType,
    format: str | None = None,
    alphabet: AlphabetType = None,
) -> Alignment:
    """loads an alignment from a, possibly compressed, file

    Parameters
    ----------
    path
        the file path
    format
        fasta, phylip, mpm, ss or maf, inferred from the filename suffix
        if not provided
    alphabet
        an MsaAlphabet or string of symbols, defaults to DNA. For the ss
        format, defaults to the alphabet recorded in the file.

    Raises
    ------
    FileFormatError
        if the format is not known
    RecordError
        if the content is malformed or contains an invalid character
    """
    fmt = _resolve_format(path, format)
    return _parse_alignment(_read_lines(path), fmt, alphabet)


def load_features(path: PathType) -> FeatureSet:
    """features from a GFF file, coordinates are 1-based"""
    return load_gff(path)


def load_category_map(path: PathType) -> CategoryMap:
    return CategoryMap.from_string(_read_lines(path))


def concat_from_files(
    paths: Iterable[PathType],
    names: Sequence[str],
    format: str | None = None,
    alphabet: AlphabetType = None,
    logger: CachingLogger | None = None,
) -> Alignment:
    """concatenates alignments read from paths

    Parameters
    ----------
    paths
        alignment files, concatenated in this order
    names
        the rows of the result, a sequence absent from a file is all gaps
        over the columns from that file
    format
        format of every file, inferred from each suffix if not provided
    alphabet
        the alphabet of every file
    logger
        records every input path and its md5 sum

    Raises
    ------
    AlignmentError
        if a file has a sequence not in names
    """
    names = list(names)
    alpha = _make_alphabet(alphabet)
    result = Alignment.empty(names, alphabet=alpha)
    for path in paths:
        fmt = _resolve_format(path, format)
        with open_(path) as infile:
            text = infile.read()
        if logger is not None:
            logger.log_message(str(path), label="input")
            logger.log_message(get_text_hexdigest(text), label="input md5sum")

        aln = _parse_alignment(text.splitlines(), fmt, alpha)
        unknown = [n for n in aln.names if n not in names]
        if unknown:
            msg = f"{str(path)!r} has sequences {unknown} not in the name list"
            raise AlignmentError(msg)

        source = aln._explicit_array()
        data = numpy.full((len(names), aln.length), alpha.gap_code, dtype=numpy.uint8)
        for i, name in enumerate(names):
            j = aln.get_seq_idx(name)
            if j >= 0:
                data[i] = source[j]
        result.concatenate(Alignment(data, names, alphabet=alpha))
    return result
