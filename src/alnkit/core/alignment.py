"""The alignment object.

An alignment holds the explicit character matrix, a compressed
SufficientStats view, or both. When both are present they describe the same
data. Transforms that edit the explicit rows are declared with
``explicit_transform`` which materialises the rows from an ordered compressed
view, discards the compressed view before the edit and optionally rebuilds it
afterwards.
"""

from __future__ import annotations

import enum
import functools
import os
import typing
import warnings

import numpy
import numpy.typing as npt
from numpy.lib.stride_tricks import sliding_window_view
from typing_extensions import Self

from alnkit.core.alphabet import _UPPER, COMPLEMENT, MsaAlphabet
from alnkit.core.storage import AlignedRows
from alnkit.core.suff_stats import SufficientStats

if typing.TYPE_CHECKING:  # pragma: no cover
    from collections.abc import Iterable, Sequence

NumpyIntArrayType = npt.NDArray[numpy.integer]
NumpyUint8ArrayType = npt.NDArray[numpy.uint8]


class AlignmentError(ValueError):
    pass


class RepresentationError(AlignmentError):
    pass


class Representation(enum.Flag):
    EXPLICIT = enum.auto()
    COMPRESSED = enum.auto()
    BOTH = EXPLICIT | COMPRESSED


def explicit_transform(rebuild_compressed: bool = False) -> typing.Callable:
    """declares a function that edits the explicit rows of the alignment
    passed as its first argument

    Parameters
    ----------
    rebuild_compressed
        if the alignment had a compressed view, rebuild it with the same
        tuple size and ordering after the edit

    Notes
    -----
    If only an ordered compressed view exists, the explicit rows are
    created from it. An unordered compressed view raises a
    RepresentationError. The compressed view is always discarded before
    the wrapped function is called.
    """

    def decorator(func):
        @functools.wraps(func)
        def wrapper(aln, *args, **kwargs):
            previous = aln._prepare_explicit_edit(func.__name__)
            result = func(aln, *args, **kwargs)
            if rebuild_compressed and previous is not None:
                aln.build_suff_stats(*previous)
            return result

        wrapper.representation = Representation.EXPLICIT
        wrapper.rebuilds_compressed = rebuild_compressed
        return wrapper

    return decorator


def _as_alphabet(alphabet: MsaAlphabet | str | None) -> MsaAlphabet:
    if alphabet is None:
        return MsaAlphabet()
    if isinstance(alphabet, str):
        return MsaAlphabet(alphabet)
    return alphabet.copy()


class Alignment:
    """a gapped multiple sequence alignment

    Parameters
    ----------
    seqs
        a 2D uint8 array of character codes (used without copying),
        an AlignedRows instance, or a series of equal length strings
    names
        one name per row
    alphabet
        an MsaAlphabet or string of symbols, copied
    categories
        category id per column
    ncats
        the largest category id, -1 if undefined
    idx_offset
        offset of column 0 in an external coordinate system
    """

    def __init__(
        self,
        seqs: NumpyUint8ArrayType | AlignedRows | Sequence[str],
        names: Sequence[str],
        alphabet: MsaAlphabet | str | None = None,
        categories: NumpyIntArrayType | None = None,
        ncats: int = -1,
        idx_offset: int = 0,
    ):
        self.alphabet = _as_alphabet(alphabet)
        self.names = list(names)
        if isinstance(seqs, AlignedRows):
            rows = seqs
        elif isinstance(seqs, numpy.ndarray):
            rows = AlignedRows(seqs)
        else:
            rows = self._encode(seqs)

        if rows.nseqs != len(self.names):
            msg = f"{rows.nseqs} sequences but {len(self.names)} names"
            raise AlignmentError(msg)

        self._rows: AlignedRows | None = rows
        self._ss: SufficientStats | None = None
        self.idx_offset = idx_offset
        self.is_informative: numpy.ndarray | None = None
        self.categories: NumpyIntArrayType | None = None
        self.ncats = -1
        if categories is not None:
            self.set_categories(categories, ncats)

    def _encode(self, seqs: Sequence[str]) -> AlignedRows:
        seqs = list(seqs)
        if not seqs:
            return AlignedRows.empty(0, 0)
        lengths = {len(s) for s in seqs}
        if len(lengths) != 1:
            msg = f"sequences have different lengths {sorted(lengths)}"
            raise AlignmentError(msg)
        data = numpy.empty((len(seqs), lengths.pop()), dtype=numpy.uint8)
        for i, seq in enumerate(seqs):
            name = self.names[i] if i < len(self.names) else None
            data[i] = self.alphabet.sanitise(seq, name=name)
        return AlignedRows(data)

    @classmethod
    def empty(cls, names: Sequence[str], alphabet: MsaAlphabet | str | None = None) -> Self:
        """a zero length alignment with the named rows"""
        return cls(AlignedRows.empty(len(names)), names, alphabet=alphabet)

    @classmethod
    def from_suff_stats(
        cls,
        ss: SufficientStats,
        names: Sequence[str],
        alphabet: MsaAlphabet | str | None = None,
        idx_offset: int = 0,
    ) -> Self:
        """an alignment represented only by its compressed view"""
        if ss.nseqs != len(names):
            msg = f"{ss.nseqs} sequences but {len(names)} names"
            raise AlignmentError(msg)
        aln = cls.__new__(cls)
        aln.alphabet = _as_alphabet(alphabet)
        aln.names = list(names)
        aln._rows = None
        aln._ss = ss
        aln.idx_offset = idx_offset
        aln.is_informative = None
        aln.categories = None
        aln.ncats = -1
        return aln

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}(nseqs={self.nseqs}, length={self.length}, "
            f"representation={self.representation.name})"
        )

    def __len__(self) -> int:
        return self.length

    @property
    def nseqs(self) -> int:
        return len(self.names)

    @property
    def length(self) -> int:
        if self._rows is not None:
            return len(self._rows)
        return self._ss.length

    @property
    def rows(self) -> AlignedRows | None:
        """the explicit rows, None if only the compressed view exists"""
        return self._rows

    @property
    def ss(self) -> SufficientStats | None:
        """the compressed view, None if not built"""
        return self._ss

    @property
    def representation(self) -> Representation:
        if self._rows is not None and self._ss is not None:
            return Representation.BOTH
        if self._rows is not None:
            return Representation.EXPLICIT
        return Representation.COMPRESSED

    def _prepare_explicit_edit(self, operation: str) -> tuple[int, bool] | None:
        ss = self._ss
        if ss is None:
            return None
        if self._rows is None:
            if not ss.ordered:
                msg = f"{operation!r} requires an explicit or ordered alignment"
                raise RepresentationError(msg)
            self._rows = AlignedRows(ss.to_rows())
        self._ss = None
        return ss.tuple_size, ss.ordered

    def _explicit_array(self) -> NumpyUint8ArrayType:
        """the character matrix, decoded from an ordered compressed view if
        required, without changing the representation"""
        if self._rows is not None:
            return self._rows.array
        if not self._ss.ordered:
            raise RepresentationError("operation requires an ordered alignment")
        return self._ss.to_rows()

    def _check_row(self, row: int) -> None:
        if not 0 <= row < self.nseqs:
            msg = f"row index {row} out of bounds for {self.nseqs} sequences"
            raise AlignmentError(msg)

    def _check_col(self, col: int) -> None:
        if not 0 <= col < self.length:
            msg = f"column index {col} out of bounds for length {self.length}"
            raise AlignmentError(msg)

    def materialise_rows(self) -> None:
        """creates the explicit rows from an ordered compressed view, both
        views are retained"""
        if self._rows is None:
            self._rows = AlignedRows(self._explicit_array())

    def build_suff_stats(self, tuple_size: int = 1, store_order: bool = True) -> None:
        """(re)builds the compressed view from the explicit rows"""
        self.materialise_rows()
        self._ss = SufficientStats.from_rows(
            self._rows.array,
            tuple_size=tuple_size,
            store_order=store_order,
            categories=self.categories,
            ncats=self.ncats,
            gap_code=self.alphabet.gap_code,
        )

    def clear_suff_stats(self) -> None:
        """releases the compressed view, creating the explicit rows first if
        needed"""
        if self._ss is None:
            return
        self.materialise_rows()
        self._ss = None

    def get_char(self, row: int, col: int) -> str:
        """character at row, col whichever view is present"""
        self._check_row(row)
        self._check_col(col)
        if self._rows is not None:
            return chr(self._rows.array[row, col])
        if not self._ss.ordered:
            raise RepresentationError("get_char requires an ordered alignment")
        return self._ss.get_char_pos(col, row)

    def get_row(self, row: int) -> str:
        self._check_row(row)
        return self._explicit_array()[row].tobytes().decode("ascii")

    def to_dict(self) -> dict[str, str]:
        arr = self._explicit_array()
        return {n: arr[i].tobytes().decode("ascii") for i, n in enumerate(self.names)}

    def seq_len(self, row: int) -> int:
        """number of non-gap characters in row"""
        self._check_row(row)
        return int((self._explicit_array()[row] != self.alphabet.gap_code).sum())

    def get_seq_idx(self, name: str) -> int:
        """index of the first row named name, -1 if absent"""
        try:
            return self.names.index(name)
        except ValueError:
            return -1

    def seq_indices(self, names: Iterable[str | int]) -> list[int]:
        """0-based indices for sequence names or 1-based integer indices

        Names without a match are skipped with a warning.
        """
        result = []
        for name in names:
            if isinstance(name, int) or (isinstance(name, str) and name.isdigit()):
                idx = int(name)
                if not 0 < idx <= self.nseqs:
                    msg = f"sequence index {idx} is out of bounds"
                    raise AlignmentError(msg)
                result.append(idx - 1)
                continue
            idx = self.get_seq_idx(name)
            if idx < 0:
                warnings.warn(f"no match for name {name!r} in alignment", stacklevel=2)
                continue
            result.append(idx)
        return result

    def set_informative(self, not_informative: Iterable[str | int]) -> None:
        """flags the named rows as excluded from informative site counts"""
        self.is_informative = numpy.ones(self.nseqs, dtype=bool)
        self.is_informative[self.seq_indices(not_informative)] = False

    def set_categories(self, categories: NumpyIntArrayType | None, ncats: int = -1) -> None:
        """assigns a category to every column, updating compressed counts"""
        if categories is None:
            self.categories = None
            self.ncats = -1
            return
        categories = numpy.array(categories, dtype=numpy.int64)
        if categories.shape != (self.length,):
            msg = f"{len(categories)} categories for alignment of length {self.length}"
            raise AlignmentError(msg)
        if len(categories) and categories.min() < 0:
            raise AlignmentError("category ids must be non-negative")
        ncats = max(ncats, int(categories.max()) if len(categories) else 0)
        self.categories = categories
        self.ncats = ncats
        self._update_cat_counts()

    def _update_cat_counts(self) -> None:
        if self._ss is None or not self._ss.ordered:
            return
        if self.categories is None:
            self._ss.cat_counts = None
        else:
            self._ss.set_cat_counts(self.categories, self.ncats)

    def copy(self, suff_stats_only: bool = False) -> Self:
        """deep copy

        Parameters
        ----------
        suff_stats_only
            only copy the compressed view, requires one to exist
        """
        if suff_stats_only and self._ss is None:
            raise RepresentationError("alignment has no compressed view to copy")
        new = self.__class__.__new__(self.__class__)
        new.alphabet = self.alphabet.copy()
        new.names = list(self.names)
        new._rows = None if suff_stats_only or self._rows is None else self._rows.copy()
        new._ss = None if self._ss is None else self._ss.copy()
        new.idx_offset = self.idx_offset
        new.is_informative = (
            None if self.is_informative is None else self.is_informative.copy()
        )
        new.categories = None if self.categories is None else self.categories.copy()
        new.ncats = self.ncats
        return new

    def toupper(self) -> None:
        """upper cases all characters and the alphabet"""
        self.alphabet.to_upper()
        if self._rows is not None:
            self._rows.set_array(_UPPER[self._rows.array])
        if self._ss is not None:
            self._ss.col_tuples = _UPPER[self._ss.col_tuples]

    def remove_symbol(self, char: str = "N") -> None:
        self.alphabet.remove_symbol(char)

    def reset_alphabet(self, symbols: str) -> None:
        self.alphabet.reset(symbols)

    def has_lowercase(self) -> bool:
        return self.alphabet.has_lowercase()

    @explicit_transform()
    def keep_columns(self, columns: numpy.ndarray) -> None:
        """retains only the selected columns, categories follow

        Parameters
        ----------
        columns
            boolean mask over columns or an array of column indices
        """
        self._rows.take(columns)
        if self.categories is not None:
            self.categories = self.categories[columns]

    def _gap_columns(self, cols: numpy.ndarray, mode: str) -> numpy.ndarray:
        """cols is (ncols, nseqs)"""
        is_gap = cols == self.alphabet.gap_code
        if mode == "all":
            return is_gap.all(axis=1)
        if mode == "any":
            return is_gap.any(axis=1)
        msg = f"gap strip mode must be 'all' or 'any', not {mode!r}"
        raise AlignmentError(msg)

    def strip_gaps(self, mode: str = "all") -> None:
        """removes columns that are all gaps or that contain any gap

        Parameters
        ----------
        mode
            'all' or 'any'
        """
        if self._rows is None and not self._ss.ordered:
            current = self._ss.col_tuples[:, self._ss.tuple_size - 1, :]
            self._ss.drop_tuples(self._gap_columns(current, mode))
            return
        strip = self._gap_columns(self._explicit_array().T, mode)
        if strip.any():
            self.keep_columns(~strip)

    def project(self, row: int) -> None:
        """removes every column in which row has a gap"""
        self._check_row(row)
        keep = self._explicit_array()[row] != self.alphabet.gap_code
        if not keep.all():
            self.keep_columns(keep)

    def sub_alignment(
        self,
        rows: Sequence[int] | None = None,
        include: bool = True,
        start: int = 0,
        end: int | None = None,
    ) -> Self:
        """a new alignment of the selected rows over columns [start, end)

        Parameters
        ----------
        rows
            row indices, all rows if None
        include
            if False, rows lists those to exclude
        start, end
            half-open column range
        """
        end = self.length if end is None else end
        if not 0 <= start < end <= self.length:
            msg = f"invalid column range [{start}, {end}) for length {self.length}"
            raise AlignmentError(msg)
        if rows is None:
            selected = list(range(self.nseqs))
        else:
            for row in rows:
                self._check_row(row)
            if include:
                selected = list(rows)
            else:
                excluded = set(rows)
                selected = [i for i in range(self.nseqs) if i not in excluded]

        names = [self.names[i] for i in selected]
        if self._rows is not None:
            data = self._rows.array[selected, start:end].copy()
            new = self.__class__(data, names, alphabet=self.alphabet)
        else:
            if not self._ss.ordered:
                raise RepresentationError("sub_alignment requires an ordered alignment")
            ss = self._ss.sub_alignment(
                selected, start, end, gap_code=self.alphabet.gap_code
            )
            new = self.__class__.from_suff_stats(ss, names, alphabet=self.alphabet)

        if self.categories is not None:
            new.set_categories(self.categories[start:end], self.ncats)
        if self.is_informative is not None:
            new.is_informative = self.is_informative[selected].copy()
        new.idx_offset = self.idx_offset + start
        return new

    @explicit_transform()
    def concatenate(self, other: Alignment) -> None:
        """appends the columns of other, rows are matched by position

        Categories are joined if both alignments have them, otherwise
        they are discarded.
        """
        if other.nseqs != self.nseqs:
            msg = f"cannot concatenate {other.nseqs} sequences onto {self.nseqs}"
            raise AlignmentError(msg)
        self._rows.append(other._explicit_array())
        if self.categories is not None and other.categories is not None:
            self.categories = numpy.concatenate([self.categories, other.categories])
            self.ncats = max(self.ncats, other.ncats)
        else:
            self.categories = None
            self.ncats = -1

    def _reverse_complement_cols(
        self, start: int, end: int, aux: Iterable[numpy.ndarray]
    ) -> None:
        parallel = list(aux)
        for arr in parallel:
            if len(arr) != self.length:
                msg = f"auxiliary array of length {len(arr)} != {self.length}"
                raise AlignmentError(msg)
        if self.categories is not None:
            parallel.append(self.categories)
        data = self._rows.array
        data[:, start:end] = COMPLEMENT[data[:, start:end][:, ::-1]]
        for arr in parallel:
            arr[start:end] = arr[start:end][::-1].copy()

    @explicit_transform(rebuild_compressed=True)
    def reverse_complement(self, aux: Iterable[numpy.ndarray] = ()) -> None:
        """reverse complements every row, categories and aux arrays are
        reversed in place"""
        self._reverse_complement_cols(0, self.length, aux)

    @explicit_transform(rebuild_compressed=True)
    def reverse_complement_segment(
        self, start: int, end: int, aux: Iterable[numpy.ndarray] = ()
    ) -> None:
        """reverse complements columns start to end

        Parameters
        ----------
        start, end
            1-based, inclusive
        aux
            per column arrays reversed over the same segment
        """
        if not 1 <= start <= end <= self.length:
            msg = f"invalid segment {start}-{end} for length {self.length}"
            raise AlignmentError(msg)
        self._reverse_complement_cols(start - 1, end, aux)

    def reorder_rows(self, target_order: Sequence[str]) -> None:
        """reorders rows to match target_order

        Names in target_order absent from the alignment become rows of
        missing data. Every existing row must appear exactly once.
        """
        new_to_old = [self.get_seq_idx(n) for n in target_order]
        covered = numpy.zeros(self.nseqs, dtype=int)
        for old in new_to_old:
            if old >= 0:
                covered[old] += 1
        if (covered > 1).any():
            dupes = [self.names[i] for i in numpy.flatnonzero(covered > 1)]
            msg = f"names {dupes} occur more than once in reorder list"
            raise AlignmentError(msg)
        if not covered.all():
            missing = [self.names[i] for i in numpy.flatnonzero(covered == 0)]
            msg = f"names {missing} missing from reorder list"
            raise AlignmentError(msg)

        missing_code = self.alphabet.missing_code
        if self._rows is not None:
            self._ss = None
            current = self._rows.array
            data = numpy.full((len(new_to_old), self.length), missing_code, dtype=numpy.uint8)
            for new, old in enumerate(new_to_old):
                if old >= 0:
                    data[new] = current[old]
            self._rows = AlignedRows(data)
        else:
            self._ss.reorder_rows(new_to_old, missing_code)

        if self.is_informative is not None:
            self.is_informative = numpy.array(
                [self.is_informative[o] if o >= 0 else True for o in new_to_old],
                dtype=bool,
            )
        self.names = list(target_order)

    @explicit_transform()
    def permute(self, rng: numpy.random.Generator | None = None) -> None:
        """randomly permutes the columns, categories follow"""
        rng = numpy.random.default_rng() if rng is None else rng
        order = rng.permutation(self.length)
        self._rows.take(order)
        if self.categories is not None:
            self.categories = self.categories[order]

    def partition_by_category(
        self, cats: Iterable[int] | None = None, tuple_size: int = 1
    ) -> dict[int, Self]:
        """splits columns into one alignment per category

        Parameters
        ----------
        cats
            categories to include, defaults to all
        tuple_size
            tuple_size - 1 columns of missing data separate non-adjacent
            runs of columns
        """
        if self.categories is None:
            raise AlignmentError("alignment has no categories")
        data = self._explicit_array()
        ncats = int(self.categories.max()) + 1 if self.length else 0
        cats = range(ncats) if cats is None else cats
        spacer = numpy.full((self.nseqs, tuple_size - 1), self.alphabet.missing_code, dtype=numpy.uint8)
        result = {}
        for cat in cats:
            cols = numpy.flatnonzero(self.categories == cat)
            pieces = []
            for i, col in enumerate(cols):
                if i and col != cols[i - 1] + 1 and tuple_size > 1:
                    pieces.append(spacer)
                pieces.append(data[:, col : col + 1])
            block = (
                numpy.concatenate(pieces, axis=1)
                if pieces
                else numpy.empty((self.nseqs, 0), dtype=numpy.uint8)
            )
            result[cat] = self.__class__(block, self.names, alphabet=self.alphabet)
        return result

    def _current_columns(
        self, start: int | None = None, end: int | None = None, cat: int = -1
    ) -> tuple[numpy.ndarray, numpy.ndarray]:
        """(ncols, nseqs) characters and a weight per column

        Uses the compressed view when the whole alignment is requested.
        """
        if self._ss is not None and start is None and end is None:
            ss = self._ss
            if cat >= 0:
                if ss.cat_counts is None or cat >= len(ss.cat_counts):
                    raise AlignmentError(f"no counts for category {cat}")
                weights = ss.cat_counts[cat]
            else:
                weights = ss.counts
            return ss.col_tuples[:, ss.tuple_size - 1, :], weights

        if self._rows is None and (not self._ss.ordered):
            raise RepresentationError("column range requires an ordered alignment")
        start = 0 if start is None else start
        end = self.length if end is None else end
        cols = self._explicit_array()[:, start:end].T
        weights = numpy.ones(len(cols), dtype=float)
        if cat >= 0:
            if self.categories is None:
                raise AlignmentError("alignment has no categories")
            weights = (self.categories[start:end] == cat).astype(float)
        return cols, weights

    def base_freqs(self, start: int | None = None, end: int | None = None) -> numpy.ndarray:
        """frequencies of alphabet symbols, ignoring gaps and missing data

        Parameters
        ----------
        start, end
            half-open column range, defaults to the whole alignment
        """
        cols, weights = self._current_columns(start, end)
        real = self.alphabet.is_real[cols]
        index = self.alphabet.inv_lookup[cols]
        counts = numpy.bincount(
            index[real],
            weights=numpy.broadcast_to(weights[:, None], cols.shape)[real],
            minlength=len(self.alphabet),
        )
        total = counts.sum()
        return counts / total if total else numpy.zeros(len(self.alphabet))

    def base_freqs_tuples(self, k: int, cat: int = -1) -> numpy.ndarray:
        """frequencies of k-tuples of alphabet symbols in each row, tuples
        with a gap or symbol outside the alphabet are ignored

        The tuple index is the base-len(alphabet) number formed by the
        symbol indices, first symbol most significant.
        """
        alpha_size = len(self.alphabet)
        powers = alpha_size ** numpy.arange(k - 1, -1, -1)
        lookup = self.alphabet.inv_lookup
        if self._ss is not None:
            if self._ss.tuple_size != k:
                msg = f"compressed view has tuple size {self._ss.tuple_size}, not {k}"
                raise AlignmentError(msg)
            _, weights = self._current_columns(cat=cat)
            # (ntuples, nseqs, k)
            windows = lookup[self._ss.col_tuples].transpose(0, 2, 1)
            weights = numpy.broadcast_to(weights[:, None], windows.shape[:2])
        else:
            if self.length < k:
                return numpy.zeros(alpha_size**k)
            idx = lookup[self._explicit_array()]
            windows = sliding_window_view(idx, k, axis=1).transpose(1, 0, 2)
            weights = numpy.ones(windows.shape[:2])
            if cat >= 0:
                if self.categories is None:
                    raise AlignmentError("alignment has no categories")
                use = self.categories[k - 1 :] == cat
                weights = weights * use[:, None]

        valid = (windows >= 0).all(axis=-1)
        codes = (windows * powers).sum(axis=-1)
        freqs = numpy.bincount(codes[valid], weights=weights[valid], minlength=alpha_size**k)
        total = freqs.sum()
        return freqs / total if total else freqs

    def num_gapped_cols(
        self, mode: str = "all", start: int | None = None, end: int | None = None
    ) -> int:
        """number of columns that are all gaps, or contain any gap"""
        cols, weights = self._current_columns(start, end)
        return int(round(weights[self._gap_columns(cols, mode)].sum()))

    def ninformative_sites(self, cat: int = -1) -> int:
        """number of columns with at least two characters that are neither
        gap nor missing data, rows flagged as not informative are ignored"""
        cols, weights = self._current_columns(cat=cat)
        real = self.alphabet.is_real[cols]
        if self.is_informative is not None:
            real = real[:, self.is_informative]
        return int(round(weights[real.sum(axis=1) >= 2].sum()))

    def missing_col(self, ref_row: int | None, pos: int) -> bool:
        """True if every row other than ref_row has missing data at pos"""
        self._check_col(pos)
        col = self._explicit_array()[:, pos]
        missing = self.alphabet.is_missing[col]
        if ref_row is not None:
            missing[ref_row] = True
        return bool(missing.all())

    def find_noaln(self, ref_row: int | None, min_block_size: int) -> numpy.ndarray:
        """marks columns in runs of at least min_block_size where only
        ref_row has data

        Returns
        -------
        boolean array, True where there is no alignment information
        """
        data = self._explicit_array()
        missing = self.alphabet.is_missing[data]
        if ref_row is not None:
            missing[ref_row] = True
        allbutref = missing.all(axis=0)
        noaln = numpy.zeros(self.length, dtype=bool)
        run_start = -1
        for j, flag in enumerate(allbutref):
            if flag and run_start < 0:
                run_start = j
            elif not flag and run_start >= 0:
                if j - run_start >= min_block_size:
                    noaln[run_start:j] = True
                run_start = -1
        # a run at the end is flagged whatever its size
        if run_start >= 0:
            noaln[run_start:] = True
        return noaln

    def stats_header(self) -> str:
        cols = [f"{'descrip.':<20}"]
        cols.extend(f"{c:>10}" for c in self.alphabet)
        cols.extend(f"{c:>10}" for c in ("G+C", "length", "all_gaps", "some_gaps"))
        return " ".join(cols)

    def stats_line(self, label: str, start: int | None = None, end: int | None = None) -> str:
        """summary of base composition and gaps over [start, end)"""
        freqs = self.base_freqs(start, end)
        gc = sum(f for c, f in zip(self.alphabet, freqs) if c in "GC")
        length = end - start if start is not None and end is not None else self.length
        cols = [f"{label:<20}"]
        cols.extend(f"{f:10.4f}" for f in freqs)
        cols.append(f"{gc:10.4f}")
        cols.append(f"{length:10d}")
        cols.append(f"{self.num_gapped_cols('all', start, end):10d}")
        cols.append(f"{self.num_gapped_cols('any', start, end):10d}")
        return " ".join(cols)

    def to_format(self, format: str = "fasta", pretty: bool = False) -> str:
        """the alignment as a string in the named format"""
        from alnkit.format.alignment import format_alignment

        return format_alignment(self, format, pretty=pretty)

    def write(
        self, filename: str | os.PathLike, format: str | None = None, pretty: bool = False
    ) -> None:
        """writes to filename, format defaults to the filename suffix"""
        from alnkit.format.alignment import save_to_filename

        save_to_filename(self, filename, format=format, pretty=pretty)


def make_alignment(
    data: dict[str, str] | Sequence[tuple[str, str]],
    alphabet: MsaAlphabet | str | None = None,
) -> Alignment:
    """an alignment from {name: seq} or [(name, seq), ...]"""
    items = list(data.items()) if isinstance(data, dict) else list(data)
    names = [n for n, _ in items]
    return Alignment([s for _, s in items], names, alphabet=alphabet)

