from __future__ import annotations

import functools
import io
import pathlib
import typing
from collections.abc import Iterable

from alnkit.core.features import Feature, FeatureSet
from alnkit.parse.record import RecordError
from alnkit.util.io import PathType, open_


def _optional(value: str, convert: typing.Callable) -> typing.Any:
    return None if value == "." else convert(value)


def _make_feature(line: str) -> Feature:
    cols = [c.strip() for c in line.split("\t")]
    # the final column (attributes) may be empty
    if len(cols) == 8:
        cols.append("")
    if len(cols) != 9:
        msg = f"expected 9 tab separated fields, got {len(cols)} in {line!r}"
        raise RecordError(msg)
    seqname, source, feature, start, end, score, strand, frame, attribute = cols
    try:
        start, end = int(start), int(end)
        score = _optional(score, float)
        frame = _optional(frame, int)
    except ValueError as err:
        msg = f"invalid numeric field in {line!r}"
        raise RecordError(msg) from err
    if strand not in ("+", "-", "."):
        msg = f"invalid strand {strand!r}"
        raise RecordError(msg)
    if frame is not None and frame not in (0, 1, 2):
        msg = f"invalid frame {frame}"
        raise RecordError(msg)
    return Feature(
        seqname=seqname,
        source=source,
        feature=feature,
        start=start,
        end=end,
        score=score,
        strand=strand,
        frame=frame,
        attribute=attribute,
    )


@functools.singledispatch
def gff_parser(
    f: PathType | typing.IO[str] | Iterable[str],
    seqids: str | Iterable[str] | None = None,
) -> Iterable[Feature]:
    """parses a GFF file, coordinates remain 1-based and inclusive

    Parameters
    -----------
    f
        accepts string path or pathlib.Path or file-like object (e.g. StringIO)
        or a series of lines
    seqids
        only records matching these sequence names are returned
    """
    yield from _gff_parser(f, seqids=seqids)


@gff_parser.register
def _(f: pathlib.Path, seqids: str | Iterable[str] | None = None) -> Iterable[Feature]:
    with open_(f) as infile:
        yield from _gff_parser(infile, seqids=seqids)


@gff_parser.register
def _(f: str, seqids: str | Iterable[str] | None = None) -> Iterable[Feature]:
    with open_(f) as infile:
        yield from _gff_parser(infile, seqids=seqids)


@gff_parser.register
def _(f: io.IOBase, seqids: str | Iterable[str] | None = None) -> Iterable[Feature]:
    yield from _gff_parser(f, seqids=seqids)


def _gff_parser(
    f: Iterable[str], seqids: str | Iterable[str] | None = None
) -> Iterable[Feature]:
    seqids = seqids or set()
    seqids = {seqids} if isinstance(seqids, str) else set(seqids)
    for line in f:
        # comments and blank lines
        line = line.split("#", 1)[0].strip()
        if not line:
            continue
        feat = _make_feature(line)
        if seqids and feat.seqname not in seqids:
            continue
        yield feat


def load_gff(
    f: PathType | typing.IO[str] | Iterable[str],
    seqids: str | Iterable[str] | None = None,
) -> FeatureSet:
    """a FeatureSet from a GFF source"""
    return FeatureSet(gff_parser(f, seqids=seqids))
