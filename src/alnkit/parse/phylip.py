"""Parsers for PHYLIP and MPM alignment formats.

Both start with a header line giving the number of sequences and the
alignment length. In PHYLIP each sequence is preceded by its name, the
sequence starting on the name line or the next line and continuing over
as many lines as needed. MPM lists all the names first, one per line,
followed by the sequences in the same order.
"""

import re
import typing

from alnkit.parse.record import RecordError

_white_space = re.compile(r"\s+")


def _get_header_info(line: str) -> tuple[int, int]:
    """number of sequences and the sequence length"""
    parts = line.split()
    try:
        num_seqs, length = (int(v) for v in parts[:2])
    except ValueError as err:
        msg = f"missing initial length declaration in {line!r}"
        raise RecordError(msg) from err
    if num_seqs < 0 or length < 0:
        msg = f"invalid length declaration {line!r}"
        raise RecordError(msg)
    return num_seqs, length


def _non_blank(data: typing.Iterable[str]) -> typing.Iterator[str]:
    for line in data:
        line = line.strip()
        if line:
            yield line


def _read_seq(lines: typing.Iterator[str], name: str, length: int, seq: str = "") -> str:
    """consumes lines until seq has length characters"""
    parts = [seq]
    size = len(seq)
    while size < length:
        line = next(lines, None)
        if line is None:
            break
        line = _white_space.sub("", line)
        parts.append(line)
        size += len(line)
    if size != length:
        msg = (
            f"Length of sequence {name!r} is not the same as in header. "
            f"Found {size}, Expected {length}"
        )
        raise RecordError(msg)
    return "".join(parts)


def _get_name(lines: typing.Iterator[str], num_seqs: int, found: int) -> str:
    line = next(lines, None)
    if line is None:
        msg = f"expected {num_seqs} sequences, found {found}"
        raise RecordError(msg)
    return line


def _check_end(lines: typing.Iterator[str], num_seqs: int) -> None:
    if next(lines, None) is not None:
        msg = f"data found after {num_seqs} sequences"
        raise RecordError(msg)


def MinimalPhylipParser(data: typing.Iterable[str]) -> list[tuple[str, str]]:
    """(name, seq) pairs from PHYLIP formatted lines

    Raises
    ------
    RecordError
        if the header is malformed or the sequence count or any sequence
        length differs from the header
    """
    lines = _non_blank(data)
    header = next(lines, None)
    if header is None:
        raise RecordError("empty PHYLIP file")
    num_seqs, length = _get_header_info(header)

    records = []
    for i in range(num_seqs):
        name, *seq = _get_name(lines, num_seqs, i).split(None, 1)
        seq = _white_space.sub("", "".join(seq))
        records.append((name, _read_seq(lines, name, length, seq)))
    _check_end(lines, num_seqs)
    return records


def MinimalMpmParser(data: typing.Iterable[str]) -> list[tuple[str, str]]:
    """(name, seq) pairs from MPM formatted lines"""
    lines = _non_blank(data)
    header = next(lines, None)
    if header is None:
        raise RecordError("empty MPM file")
    num_seqs, length = _get_header_info(header)

    names = [_get_name(lines, num_seqs, i) for i in range(num_seqs)]
    records = [(name, _read_seq(lines, name, length)) for name in names]
    _check_end(lines, num_seqs)
    return records
