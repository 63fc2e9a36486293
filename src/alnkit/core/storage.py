"""Owned, growable storage for the rows of an alignment."""

from __future__ import annotations

import numpy
import numpy.typing as npt
from typing_extensions import Self

NumpyUint8ArrayType = npt.NDArray[numpy.uint8]
_MIN_CAPACITY = 16


class AlignedRows:
    """a (nseqs, capacity) uint8 buffer of which the first length columns
    are in use

    All rows share the same logical length. Capacity grows geometrically
    on append and is never reduced.
    """

    __slots__ = ("_data", "_length")

    def __init__(self, data: NumpyUint8ArrayType):
        """takes ownership of data, a 2D uint8 array, without copying it"""
        data = numpy.asarray(data)
        if data.ndim != 2:
            msg = f"expected 2D array, not {data.ndim}D"
            raise ValueError(msg)
        if data.dtype != numpy.uint8:
            data = data.astype(numpy.uint8)
        self._data = data
        self._length = data.shape[1]

    @classmethod
    def empty(cls, nseqs: int, capacity: int = _MIN_CAPACITY) -> Self:
        rows = cls(numpy.empty((nseqs, capacity), dtype=numpy.uint8))
        rows._length = 0
        return rows

    def __len__(self) -> int:
        return self._length

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}(nseqs={self.nseqs}, "
            f"length={self._length}, capacity={self.capacity})"
        )

    @property
    def nseqs(self) -> int:
        return self._data.shape[0]

    @property
    def capacity(self) -> int:
        return self._data.shape[1]

    @property
    def array(self) -> NumpyUint8ArrayType:
        """view of the used columns"""
        return self._data[:, : self._length]

    def row(self, index: int) -> NumpyUint8ArrayType:
        return self._data[index, : self._length]

    def row_str(self, index: int) -> str:
        return self.row(index).tobytes().decode("ascii")

    def _reserve(self, needed: int) -> None:
        if needed <= self.capacity:
            return
        new_cap = max(needed, 2 * self.capacity, _MIN_CAPACITY)
        data = numpy.empty((self.nseqs, new_cap), dtype=numpy.uint8)
        data[:, : self._length] = self.array
        self._data = data

    def append(self, columns: NumpyUint8ArrayType) -> None:
        """appends columns, a (nseqs, n) array, growing the buffer as needed"""
        columns = numpy.asarray(columns, dtype=numpy.uint8)
        if columns.ndim != 2 or columns.shape[0] != self.nseqs:
            msg = f"cannot append {columns.shape} columns to {self.nseqs} rows"
            raise ValueError(msg)
        num = columns.shape[1]
        self._reserve(self._length + num)
        self._data[:, self._length : self._length + num] = columns
        self._length += num

    def take(self, columns: numpy.ndarray) -> None:
        """keeps only the selected columns

        Parameters
        ----------
        columns
            boolean mask of length len(self) or an array of column indices
        """
        self.set_array(self.array[:, columns])

    def set_array(self, data: NumpyUint8ArrayType) -> None:
        """replaces the content with data, which must have nseqs rows"""
        data = numpy.asarray(data, dtype=numpy.uint8)
        if data.shape[0] != self.nseqs:
            msg = f"expected {self.nseqs} rows, got {data.shape[0]}"
            raise ValueError(msg)
        self._reserve(data.shape[1])
        self._data[:, : data.shape[1]] = data
        self._length = data.shape[1]

    def copy(self) -> Self:
        return self.__class__(self.array.copy())
