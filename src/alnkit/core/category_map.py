"""Mapping of feature types to integer column categories.

A category map file has the form::

    NCATS = 4
    CDS         1-3     # codon positions
    intron      4
    LABELLING_PRECEDENCE = CDS,intron

Category 0 is the background, named ``background``. A feature type
assigned a range of categories is cyclic: successive columns of a feature
cycle through the range. Categories listed in LABELLING_PRECEDENCE take
precedence in the listed order, earlier wins. Unlisted categories have no
precedence and are always overwritten.
"""

from __future__ import annotations

import typing
from dataclasses import dataclass

from alnkit.parse.record import FileFormatError

BACKGROUND = "background"
NO_PRECEDENCE = -1


@dataclass(frozen=True, slots=True)
class CategoryRange:
    """categories start to end inclusive"""

    start: int
    end: int

    def __post_init__(self):
        if self.start < 0 or self.end < self.start:
            msg = f"invalid category range {self.start}-{self.end}"
            raise ValueError(msg)

    @property
    def is_cyclic(self) -> bool:
        return self.end > self.start

    @property
    def size(self) -> int:
        return self.end - self.start + 1


@typing.runtime_checkable
class SupportsCategories(typing.Protocol):
    """what column labelling requires of a category map"""

    ncats: int

    def get_category(self, name: str) -> int:
        """first category of the named feature type, 0 if unknown"""
        ...

    def get_range(self, cat: int) -> CategoryRange: ...

    def labelling_precedence(self, cat: int) -> int:
        """precedence of cat, lower wins, NO_PRECEDENCE if none"""
        ...


class CategoryMap:
    """feature type names mapped to category ranges

    Parameters
    ----------
    ncats
        the largest category id
    ranges
        {feature type: CategoryRange}
    precedence
        {category: precedence}, lower values take precedence
    """

    def __init__(
        self,
        ncats: int,
        ranges: dict[str, CategoryRange],
        precedence: dict[int, int] | None = None,
    ):
        self.ncats = ncats
        self._ranges = {BACKGROUND: CategoryRange(0, 0)}
        self._by_cat: dict[int, CategoryRange] = {0: self._ranges[BACKGROUND]}
        self._cat_names = {0: BACKGROUND}
        for name, rng in ranges.items():
            if name == BACKGROUND:
                continue
            if rng.end > ncats or rng.start == 0:
                msg = f"range {rng.start}-{rng.end} of {name!r} outside 1-{ncats}"
                raise ValueError(msg)
            for cat in range(rng.start, rng.end + 1):
                if self._by_cat.get(cat, rng) != rng:
                    msg = f"category {cat} assigned to overlapping ranges"
                    raise ValueError(msg)
                self._by_cat[cat] = rng
                self._cat_names.setdefault(cat, name)
            self._ranges[name] = rng
        self._precedence = dict(precedence or {})

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(ncats={self.ncats}, names={self.names})"

    @classmethod
    def from_string(cls, text: str | typing.Iterable[str]) -> CategoryMap:
        """parses the category map format"""
        lines = text.splitlines() if isinstance(text, str) else text
        ncats = None
        ranges: dict[str, CategoryRange] = {}
        precedence_line = None
        for line in lines:
            line = line.split("#", 1)[0].strip()
            if not line:
                continue
            if "=" in line:
                key, value = (v.strip() for v in line.split("=", 1))
                key = key.upper()
                if key == "NCATS":
                    ncats = _as_int(value, line)
                elif key == "LABELLING_PRECEDENCE":
                    precedence_line = value
                else:
                    msg = f"unrecognised category map setting {key!r}"
                    raise FileFormatError(msg)
                continue

            fields = line.split()
            if len(fields) != 2:
                msg = f"cannot parse category map line {line!r}"
                raise FileFormatError(msg)
            name, cats = fields
            ranges[name] = _parse_range(cats, line)

        if ncats is None:
            raise FileFormatError("category map lacks NCATS")
        try:
            cmap = cls(ncats, ranges)
        except ValueError as err:
            raise FileFormatError(str(err)) from err
        if precedence_line:
            cmap.set_precedence([v.strip() for v in precedence_line.split(",")])
        return cmap

    @property
    def names(self) -> list[str]:
        return list(self._ranges)

    def get_category(self, name: str) -> int:
        rng = self._ranges.get(name)
        return 0 if rng is None else rng.start

    def get_range(self, cat: int) -> CategoryRange:
        return self._by_cat[cat]

    def get_name(self, cat: int) -> str | None:
        """feature type assigned cat"""
        return self._cat_names.get(cat)

    def labelling_precedence(self, cat: int) -> int:
        return self._precedence.get(cat, NO_PRECEDENCE)

    def set_precedence(self, order: typing.Sequence[str | int]) -> None:
        """order lists feature types, categories or category ranges from
        highest to lowest precedence"""
        precedence = {}
        for rank, item in enumerate(order):
            if isinstance(item, int):
                cats = range(item, item + 1)
            elif item in self._ranges:
                rng = self._ranges[item]
                cats = range(rng.start, rng.end + 1)
            else:
                rng = _parse_range(item, item)
                cats = range(rng.start, rng.end + 1)
            for cat in cats:
                precedence.setdefault(cat, rank)
        self._precedence = precedence

    def to_string(self) -> str:
        lines = [f"NCATS = {self.ncats}", ""]
        for name, rng in self._ranges.items():
            if name == BACKGROUND:
                continue
            cats = str(rng.start) if not rng.is_cyclic else f"{rng.start}-{rng.end}"
            lines.append(f"{name:<15} {cats}")
        if self._precedence:
            by_rank: dict[int, list[int]] = {}
            for cat, rank in self._precedence.items():
                by_rank.setdefault(rank, []).append(cat)
            order = []
            for rank in sorted(by_rank):
                cats = sorted(by_rank[rank])
                if cats[-1] - cats[0] == len(cats) - 1 and len(cats) > 1:
                    order.append(f"{cats[0]}-{cats[-1]}")
                else:
                    order.extend(map(str, cats))
            lines.extend(["", f"LABELLING_PRECEDENCE = {','.join(order)}"])
        lines.append("")
        return "\n".join(lines)


def _as_int(value: str, line: str) -> int:
    try:
        return int(value)
    except ValueError as err:
        msg = f"expected an integer in {line!r}"
        raise FileFormatError(msg) from err


def _parse_range(cats: str, line: str) -> CategoryRange:
    start, _, end = cats.partition("-")
    start = _as_int(start, line)
    end = _as_int(end, line) if end else start
    try:
        return CategoryRange(start, end)
    except ValueError as err:
        raise FileFormatError(str(err)) from err
