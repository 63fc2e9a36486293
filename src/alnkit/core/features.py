"""GFF style features in 1-based, inclusive coordinates."""

from __future__ import annotations

import re
import typing

from typing_extensions import Self

if typing.TYPE_CHECKING:  # pragma: no cover
    from collections.abc import Iterable, Iterator


def _get_attribute(attribute: str, tag: str) -> str | None:
    """value of tag in a GFF2 (tag "value") or GFF3 (tag=value) attribute
    field"""
    pattern = re.compile(rf'(?:^|;)\s*{re.escape(tag)}(?:\s+|=)"?([^";]+)"?')
    if match := pattern.search(attribute):
        return match.group(1).strip()
    return None


class Feature:
    """a single GFF record

    Notes
    -----
    start and end are 1-based and inclusive, frame is None when
    unspecified ('.').
    """

    __slots__ = (
        "seqname",
        "source",
        "feature",
        "start",
        "end",
        "score",
        "strand",
        "frame",
        "attribute",
    )

    def __init__(
        self,
        seqname: str,
        source: str,
        feature: str,
        start: int,
        end: int,
        score: float | None = None,
        strand: str = ".",
        frame: int | None = None,
        attribute: str = "",
    ) -> None:
        self.seqname = seqname
        self.source = source
        self.feature = feature
        self.start = start
        self.end = end
        self.score = score
        self.strand = strand
        self.frame = frame
        self.attribute = attribute

    def __repr__(self) -> str:
        name = self.__class__.__name__
        return (
            f"{name}(seqname={self.seqname!r}, feature={self.feature!r}, "
            f"start={self.start}, end={self.end}, strand={self.strand!r}, "
            f"frame={self.frame})"
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Feature):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __len__(self) -> int:
        return self.end - self.start + 1

    def get_attribute(self, tag: str) -> str | None:
        return _get_attribute(self.attribute, tag)

    def to_dict(self) -> dict[str, typing.Any]:
        return {k: getattr(self, k) for k in self.__slots__}

    def copy(self) -> Self:
        return self.__class__(**self.to_dict())


def reverse_strand_only(features: Iterable[Feature]) -> bool:
    """True if at least one feature is on the '-' strand and none are on '+'"""
    strands = {f.strand for f in features}
    return "-" in strands and "+" not in strands


class FeatureGroup:
    """features sharing a value for the grouping tag"""

    __slots__ = ("name", "features")

    def __init__(self, name: str | None, features: list[Feature] | None = None):
        self.name = name
        self.features = features or []

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}(name={self.name!r}, start={self.start}, "
            f"end={self.end}, num={len(self.features)})"
        )

    @property
    def start(self) -> int:
        return min(f.start for f in self.features)

    @property
    def end(self) -> int:
        return max(f.end for f in self.features)

    def reverse_strand_only(self) -> bool:
        return reverse_strand_only(self.features)

    def reverse_compl(self, start: int | None = None, end: int | None = None) -> None:
        """reflects features about the interval start-end (1-based,
        inclusive), swapping strands and reversing their order"""
        start = self.start if start is None else start
        end = self.end if end is None else end
        for feat in self.features:
            feat.start, feat.end = start + end - feat.end, start + end - feat.start
            feat.strand = {"+": "-", "-": "+"}.get(feat.strand, feat.strand)
        self.features.reverse()


class FeatureSet:
    """an ordered collection of features, optionally grouped"""

    def __init__(self, features: Iterable[Feature] = ()):
        self.features: list[Feature] = list(features)
        self.groups: list[FeatureGroup] | None = None
        self.group_tag: str | None = None

    def __repr__(self) -> str:
        grouped = f", group_tag={self.group_tag!r}" if self.groups is not None else ""
        return f"{self.__class__.__name__}(num={len(self)}{grouped})"

    def __len__(self) -> int:
        return len(self.features)

    def __iter__(self) -> Iterator[Feature]:
        yield from self.features

    def __getitem__(self, index: int) -> Feature:
        return self.features[index]

    def append(self, feature: Feature) -> None:
        self.features.append(feature)
        self.ungroup()

    def group(self, tag: str = "transcript_id") -> None:
        """groups features by the value of the attribute tag

        Features without the tag each form a group of their own. Groups are
        ordered by their first feature.
        """
        groups: dict[str, FeatureGroup] = {}
        result = []
        for feat in self.features:
            name = feat.get_attribute(tag)
            if name is None:
                result.append(FeatureGroup(None, [feat]))
                continue
            if name not in groups:
                groups[name] = FeatureGroup(name)
                result.append(groups[name])
            groups[name].features.append(feat)
        self.groups = result
        self.group_tag = tag

    def ungroup(self) -> None:
        self.groups = None
        self.group_tag = None

    def add_offset(self, offset: int) -> None:
        for feat in self.features:
            feat.start += offset
            feat.end += offset

    def filter_by_type(self, types: Iterable[str]) -> Self:
        types = set(types)
        return self.__class__(f.copy() for f in self.features if f.feature in types)

    def copy(self) -> Self:
        return self.__class__(f.copy() for f in self.features)
