"""Parser for the sufficient statistics (SS) text format.

The file starts with ``KEY = value`` header lines (NSEQS, LENGTH,
TUPLE_SIZE, NTUPLES, NAMES, ALPHABET, IDX_OFFSET, NCATS), then a blank
line and one line per tuple::

    <tuple index>\\t<characters>\\t<count>[\\t<category counts>]

The characters of a tuple are those of every sequence in the first column
of the tuple, then the second and so on. If the alignment is ordered, the
tuple index of each column follows after another blank line.
"""

import typing

import numpy

from alnkit.core.alignment import Alignment
from alnkit.core.suff_stats import SufficientStats
from alnkit.parse.record import RecordError

_required = ("NSEQS", "LENGTH", "TUPLE_SIZE", "NTUPLES", "NAMES")
_int_keys = ("NSEQS", "LENGTH", "TUPLE_SIZE", "NTUPLES", "IDX_OFFSET", "NCATS")


def _parse_header(lines: typing.Iterator[str]) -> dict[str, typing.Any]:
    header: dict[str, typing.Any] = {}
    for line in lines:
        line = line.strip()
        if not line:
            if header:
                break
            continue
        key, sep, value = line.partition("=")
        if not sep:
            msg = f"expected KEY = value, got {line!r}"
            raise RecordError(msg)
        header[key.strip().upper()] = value.strip()

    for key in _required:
        if key not in header:
            msg = f"SS header lacks {key}"
            raise RecordError(msg)
    for key in _int_keys:
        if key in header:
            try:
                header[key] = int(header[key])
            except ValueError as err:
                msg = f"{key} must be an integer, not {header[key]!r}"
                raise RecordError(msg) from err
    header["NAMES"] = [n.strip() for n in header["NAMES"].split(",")]
    if len(header["NAMES"]) != header["NSEQS"]:
        msg = f"NSEQS = {header['NSEQS']} but {len(header['NAMES'])} names"
        raise RecordError(msg)
    return header


def ss_parser(data: typing.Iterable[str]) -> Alignment:
    """an alignment represented by its compressed view

    Raises
    ------
    RecordError
        for a malformed header, tuple line or column index
    """
    lines = iter(data)
    header = _parse_header(lines)
    nseqs = header["NSEQS"]
    tuple_size = header["TUPLE_SIZE"]
    ntuples = header["NTUPLES"]
    ncats = header.get("NCATS", -1)

    col_tuples = numpy.empty((ntuples, tuple_size, nseqs), dtype=numpy.uint8)
    counts = numpy.zeros(ntuples, dtype=float)
    cat_counts = numpy.zeros((ncats + 1, ntuples), dtype=float) if ncats >= 0 else None
    seen = 0
    for line in lines:
        line = line.strip()
        if not line:
            if seen:
                break
            continue
        fields = line.split("\t")
        try:
            index = int(fields[0])
            chars = fields[1]
            values = [float(v) for v in fields[2:]]
        except (IndexError, ValueError) as err:
            msg = f"malformed tuple line {line!r}"
            raise RecordError(msg) from err
        if not 0 <= index < ntuples or len(chars) != tuple_size * nseqs or not values:
            msg = f"malformed tuple line {line!r}"
            raise RecordError(msg)
        col_tuples[index] = numpy.frombuffer(
            chars.encode("ascii"), dtype=numpy.uint8
        ).reshape(tuple_size, nseqs)
        counts[index] = values[0]
        if cat_counts is not None and len(values) > 1:
            cat_counts[: len(values) - 1, index] = values[1 : ncats + 2]
        seen += 1

    if seen != ntuples:
        msg = f"NTUPLES = {ntuples} but {seen} tuples found"
        raise RecordError(msg)

    tokens = " ".join(lines).split()
    tuple_idx = None
    if tokens:
        try:
            tuple_idx = numpy.array([int(t) for t in tokens], dtype=numpy.int64)
        except ValueError as err:
            raise RecordError("column tuple indices must be integers") from err
        if len(tuple_idx) != header["LENGTH"]:
            msg = f"LENGTH = {header['LENGTH']} but {len(tuple_idx)} column indices"
            raise RecordError(msg)
        if len(tuple_idx) and (tuple_idx.min() < 0 or tuple_idx.max() >= ntuples):
            raise RecordError("column tuple index out of range")

    ss = SufficientStats(col_tuples, counts, tuple_idx=tuple_idx, cat_counts=cat_counts)
    aln = Alignment.from_suff_stats(
        ss,
        header["NAMES"],
        alphabet=header.get("ALPHABET") or None,
        idx_offset=header.get("IDX_OFFSET", 0),
    )
    aln.ncats = ncats
    return aln
