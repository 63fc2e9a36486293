"""Mapping between the ungapped coordinates of one sequence and the
columns of an alignment.

Anchors are stored 0-based. The public methods take and return 1-based
positions and signal positions without a counterpart with NOT_FOUND.
"""

from __future__ import annotations

import typing
from dataclasses import dataclass, field

import numba
import numpy
import numpy.typing as npt
from typing_extensions import Self

if typing.TYPE_CHECKING:  # pragma: no cover
    from alnkit.core.alignment import Alignment

NumpyIntArrayType = npt.NDArray[numpy.int64]

NOT_FOUND = -1


@numba.jit(cache=True)
def _anchor_scan(
    row: npt.NDArray[numpy.uint8], gap_code: int
) -> tuple[NumpyIntArrayType, NumpyIntArrayType, int]:  # pragma: no cover
    """alignment and sequence index of every non-gap character that follows
    a gap or the start of row, plus the number of non-gap characters"""
    num = len(row)
    msa_anchors = numpy.empty(num, dtype=numpy.int64)
    seq_anchors = numpy.empty(num, dtype=numpy.int64)
    count = 0
    seq_pos = 0
    last_is_gap = True
    for i in range(num):
        if row[i] == gap_code:
            last_is_gap = True
            continue
        if last_is_gap:
            msa_anchors[count] = i
            seq_anchors[count] = seq_pos
            count += 1
            last_is_gap = False
        seq_pos += 1
    return msa_anchors[:count], seq_anchors[:count], seq_pos


@dataclass(slots=True)
class CoordinateMap:
    """anchors for translating positions of one aligned sequence

    Notes
    -----
    The map is not updated when the alignment changes, build a new one.
    """

    msa_anchors: NumpyIntArrayType = field(
        default_factory=lambda: numpy.empty(0, dtype=numpy.int64)
    )
    seq_anchors: NumpyIntArrayType = field(
        default_factory=lambda: numpy.empty(0, dtype=numpy.int64)
    )
    seq_len: int = 0
    msa_len: int = 0

    def __post_init__(self):
        self.msa_anchors = numpy.asarray(self.msa_anchors, dtype=numpy.int64)
        self.seq_anchors = numpy.asarray(self.seq_anchors, dtype=numpy.int64)
        if len(self.msa_anchors) != len(self.seq_anchors):
            raise ValueError("anchor lists must have the same length")

    @classmethod
    def from_alignment(cls, aln: Alignment, row: int) -> Self:
        """builds the map for row (0-based) of aln"""
        aln._check_row(row)
        data = aln._explicit_array()[row]
        msa_anchors, seq_anchors, seq_len = _anchor_scan(data, aln.alphabet.gap_code)
        return cls(
            msa_anchors=msa_anchors,
            seq_anchors=seq_anchors,
            seq_len=int(seq_len),
            msa_len=aln.length,
        )

    @classmethod
    def empty(cls) -> Self:
        return cls()

    def __len__(self) -> int:
        return len(self.msa_anchors)

    @property
    def msa_list(self) -> list[int]:
        """1-based alignment positions of the anchors"""
        return (self.msa_anchors + 1).tolist()

    @property
    def seq_list(self) -> list[int]:
        """1-based sequence positions of the anchors"""
        return (self.seq_anchors + 1).tolist()

    def seq_to_msa(self, pos: int) -> int:
        """alignment position of 1-based sequence position pos"""
        if pos < 1 or pos > self.seq_len:
            return NOT_FOUND
        pos -= 1
        idx = numpy.searchsorted(self.seq_anchors, pos, side="right") - 1
        return int(self.msa_anchors[idx] + pos - self.seq_anchors[idx]) + 1

    def msa_to_seq(self, pos: int) -> int:
        """sequence position of 1-based alignment position pos

        A position within a gap maps to the sequence position preceding
        the gap. Positions before the first character are NOT_FOUND.
        """
        if pos < 1 or pos > self.msa_len:
            return NOT_FOUND
        pos -= 1
        idx = numpy.searchsorted(self.msa_anchors, pos, side="right") - 1
        if idx < 0:
            return NOT_FOUND
        next_seq = (
            self.seq_anchors[idx + 1] if idx + 1 < len(self.seq_anchors) else self.seq_len
        )
        seq_pos = self.seq_anchors[idx] + pos - self.msa_anchors[idx]
        return int(min(seq_pos, next_seq - 1)) + 1

    def to_table(self) -> str:
        """tab delimited anchors, with the length of the gap preceding each"""
        lines = ["seq_pos\tmsa_pos\tgap_len"]
        prev_msa = prev_seq = 0
        for msa_pos, seq_pos in zip(self.msa_list, self.seq_list):
            gap_len = (msa_pos - prev_msa) - (seq_pos - prev_seq)
            lines.append(f"{seq_pos}\t{msa_pos}\t{gap_len}")
            prev_msa, prev_seq = msa_pos, seq_pos
        return "\n".join(lines)


def map_seq_to_seq(
    from_map: CoordinateMap | None, to_map: CoordinateMap | None, pos: int
) -> int:
    """translates pos between two sequence frames via the alignment

    A map of None means the alignment frame.
    """
    msa_pos = pos if from_map is None else from_map.seq_to_msa(pos)
    if msa_pos == NOT_FOUND:
        return NOT_FOUND
    return msa_pos if to_map is None else to_map.msa_to_seq(msa_pos)
