"""Writer for GFF features"""

from __future__ import annotations

import typing

from alnkit.util.io import PathType, atomic_write

if typing.TYPE_CHECKING:  # pragma: no cover
    from collections.abc import Iterable

    from alnkit.core.features import Feature


def _field(value) -> str:
    if value is None:
        return "."
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def feature_to_gff(feat: Feature) -> str:
    """a single tab separated GFF line, without line ending"""
    return "\t".join(
        [
            feat.seqname,
            feat.source,
            feat.feature,
            str(feat.start),
            str(feat.end),
            _field(feat.score),
            feat.strand,
            _field(feat.frame),
            feat.attribute,
        ]
    )


def features_to_gff(features: Iterable[Feature]) -> str:
    lines = [feature_to_gff(f) for f in features]
    if lines:
        lines.append("")
    return "\n".join(lines)


def save_features(features: Iterable[Feature], filename: PathType) -> None:
    """writes features to filename in GFF, a compression suffix compresses
    the output"""
    with atomic_write(filename, mode="wt") as f:
        f.write(features_to_gff(features))
