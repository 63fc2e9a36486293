"""The compressed representation of an alignment.

Each column is described by a tuple of ``tuple_size`` consecutive columns
ending at it (positions before the start of the alignment are gaps).
Identical tuples are stored once with a multiplicity. An ordered view also
records, for every column, the index of its tuple.
"""

from __future__ import annotations

import numpy
import numpy.typing as npt
from numpy.lib.stride_tricks import sliding_window_view
from typing_extensions import Self

NumpyIntArrayType = npt.NDArray[numpy.integer]
NumpyUint8ArrayType = npt.NDArray[numpy.uint8]


def _unique_tuples(
    windows: numpy.ndarray,
) -> tuple[numpy.ndarray, NumpyIntArrayType, numpy.ndarray]:
    """returns unique windows in order of first occurrence, the index of
    each window's tuple and the counts"""
    num, tuple_size, nseqs = windows.shape
    if num == 0:
        return (
            numpy.empty((0, tuple_size, nseqs), dtype=numpy.uint8),
            numpy.empty(0, dtype=numpy.int64),
            numpy.empty(0, dtype=float),
        )
    flat = windows.reshape(num, tuple_size * nseqs)
    uniq, first, inverse, counts = numpy.unique(
        flat, axis=0, return_index=True, return_inverse=True, return_counts=True
    )
    inverse = inverse.reshape(-1)
    order = numpy.argsort(first, kind="stable")
    rank = numpy.empty(len(order), dtype=numpy.int64)
    rank[order] = numpy.arange(len(order))
    tuples = uniq[order].reshape(len(order), tuple_size, nseqs)
    return tuples, rank[inverse], counts[order].astype(float)


class SufficientStats:
    """unique column tuples of an alignment with their counts

    Attributes
    ----------
    col_tuples
        uint8 array of shape (ntuples, tuple_size, nseqs), slot
        tuple_size - 1 is the column itself, earlier slots the preceding
        columns
    counts
        number of columns with each tuple
    tuple_idx
        tuple index for every column, None when the view is unordered
    cat_counts
        (ncats + 1, ntuples) counts of each tuple per category, or None
    """

    __slots__ = ("tuple_size", "col_tuples", "counts", "tuple_idx", "cat_counts")

    def __init__(
        self,
        col_tuples: numpy.ndarray,
        counts: numpy.ndarray,
        tuple_idx: NumpyIntArrayType | None = None,
        cat_counts: numpy.ndarray | None = None,
    ):
        col_tuples = numpy.asarray(col_tuples, dtype=numpy.uint8)
        if col_tuples.ndim != 3:
            msg = f"col_tuples must be 3D, not {col_tuples.ndim}D"
            raise ValueError(msg)
        if len(counts) != len(col_tuples):
            msg = "number of counts does not match number of tuples"
            raise ValueError(msg)
        self.col_tuples = col_tuples
        self.tuple_size = col_tuples.shape[1]
        self.counts = numpy.asarray(counts, dtype=float)
        self.tuple_idx = tuple_idx
        self.cat_counts = cat_counts

    @classmethod
    def from_rows(
        cls,
        rows: NumpyUint8ArrayType,
        tuple_size: int = 1,
        store_order: bool = True,
        categories: NumpyIntArrayType | None = None,
        ncats: int = -1,
        gap_code: int = ord("-"),
        start: int = 0,
        end: int | None = None,
    ) -> Self:
        """compresses columns [start, end) of rows

        Parameters
        ----------
        rows
            (nseqs, length) uint8 array
        tuple_size
            number of consecutive columns per tuple
        store_order
            record the tuple index of every column
        categories
            category of every column of rows, used for per category counts
        ncats
            the largest category id
        gap_code
            character code used for context before the first column
        start, end
            the columns to include, preceding columns are used as context
        """
        if tuple_size < 1:
            raise ValueError(f"tuple_size must be >= 1, not {tuple_size}")
        rows = numpy.asarray(rows, dtype=numpy.uint8)
        nseqs, length = rows.shape
        end = length if end is None else end
        pad = numpy.full((nseqs, tuple_size - 1), gap_code, dtype=numpy.uint8)
        padded = numpy.concatenate([pad, rows[:, :end]], axis=1)
        if end - start > 0:
            # (nseqs, ncols, tuple_size) -> (ncols, tuple_size, nseqs)
            windows = sliding_window_view(padded, tuple_size, axis=1)[:, start:end]
            windows = windows.transpose(1, 2, 0)
        else:
            windows = numpy.empty((0, tuple_size, nseqs), dtype=numpy.uint8)

        tuples, index, counts = _unique_tuples(windows)
        result = cls(tuples, counts, tuple_idx=index if store_order else None)
        if categories is not None and ncats >= 0:
            result.set_cat_counts(numpy.asarray(categories)[start:end], ncats, index)
        return result

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}(ntuples={self.ntuples}, "
            f"tuple_size={self.tuple_size}, nseqs={self.nseqs}, "
            f"ordered={self.ordered})"
        )

    @property
    def ntuples(self) -> int:
        return self.col_tuples.shape[0]

    @property
    def nseqs(self) -> int:
        return self.col_tuples.shape[2]

    @property
    def ordered(self) -> bool:
        return self.tuple_idx is not None

    @property
    def length(self) -> int:
        """number of columns represented"""
        if self.ordered:
            return len(self.tuple_idx)
        return int(round(self.counts.sum()))

    def _require_order(self) -> None:
        if not self.ordered:
            raise ValueError("operation requires an ordered representation")

    def set_cat_counts(
        self,
        categories: NumpyIntArrayType,
        ncats: int,
        tuple_idx: NumpyIntArrayType | None = None,
    ) -> None:
        """counts tuples per category, categories has one entry per column"""
        tuple_idx = self.tuple_idx if tuple_idx is None else tuple_idx
        if tuple_idx is None:
            self._require_order()
        cat_counts = numpy.zeros((ncats + 1, self.ntuples), dtype=float)
        numpy.add.at(cat_counts, (numpy.asarray(categories), tuple_idx), 1)
        self.cat_counts = cat_counts

    def to_rows(self) -> NumpyUint8ArrayType:
        """the explicit (nseqs, length) matrix"""
        self._require_order()
        current = self.col_tuples[:, self.tuple_size - 1, :]
        return numpy.ascontiguousarray(current[self.tuple_idx].T)

    def get_char_pos(self, col: int, row: int, offset: int = 0) -> str:
        """character of row at column col + offset, offset <= 0"""
        self._require_order()
        return self.get_char_tuple(int(self.tuple_idx[col]), row, offset)

    def get_char_tuple(self, tup: int, row: int, offset: int = 0) -> str:
        """character of row in tuple tup, offset <= 0 selects preceding columns"""
        if offset > 0 or -offset >= self.tuple_size:
            msg = f"offset {offset} outside tuple of size {self.tuple_size}"
            raise IndexError(msg)
        return chr(self.col_tuples[tup, self.tuple_size - 1 + offset, row])

    def reorder_rows(self, new_to_old: list[int], missing_code: int) -> None:
        """rows become new_to_old, -1 entries are filled with missing_code"""
        ntuples, tuple_size, _ = self.col_tuples.shape
        result = numpy.full(
            (ntuples, tuple_size, len(new_to_old)), missing_code, dtype=numpy.uint8
        )
        for new, old in enumerate(new_to_old):
            if old >= 0:
                result[:, :, new] = self.col_tuples[:, :, old]
        self.col_tuples = result

    def sub_alignment(
        self,
        rows: list[int],
        start: int,
        end: int,
        store_order: bool = True,
        gap_code: int = ord("-"),
    ) -> Self:
        """compressed view of rows over columns [start, end)"""
        self._require_order()
        full = self.to_rows()[rows]
        return self.__class__.from_rows(
            full,
            tuple_size=self.tuple_size,
            store_order=store_order,
            gap_code=gap_code,
            start=start,
            end=end,
        )

    def drop_tuples(self, mask: numpy.ndarray) -> None:
        """removes tuples where mask is True, only valid when unordered"""
        if self.ordered:
            raise ValueError("cannot drop tuples from an ordered representation")
        keep = ~numpy.asarray(mask, dtype=bool)
        self.col_tuples = self.col_tuples[keep]
        self.counts = self.counts[keep]
        if self.cat_counts is not None:
            self.cat_counts = self.cat_counts[:, keep]

    def copy(self) -> Self:
        return self.__class__(
            self.col_tuples.copy(),
            self.counts.copy(),
            tuple_idx=None if self.tuple_idx is None else self.tuple_idx.copy(),
            cat_counts=None if self.cat_counts is None else self.cat_counts.copy(),
        )
