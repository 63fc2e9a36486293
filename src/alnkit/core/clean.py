"""Cleaning transforms that mask or remove unreliable alignment columns."""

from __future__ import annotations

import typing

import numba
import numpy
import numpy.typing as npt

from alnkit.core.alignment import AlignmentError, explicit_transform
from alnkit.core.alphabet import _UPPER

if typing.TYPE_CHECKING:  # pragma: no cover
    from alnkit.core.alignment import Alignment

NumpyUint8ArrayType = npt.NDArray[numpy.uint8]

_START = b"ATG"
_STOPS = frozenset((b"TAA", b"TAG", b"TGA"))


class CodingCleanError(AlignmentError):
    """the alignment was rejected by coding_clean, it is unchanged"""

    def __init__(self, messages: list[str]):
        self.messages = list(messages)
        super().__init__(" ".join(self.messages))


def _codon(row: NumpyUint8ArrayType, i: int) -> bytes:
    return row[i : i + 3].tobytes()


def _all_have(rows: NumpyUint8ArrayType, i: int, codons: frozenset[bytes]) -> bool:
    return all(_codon(row, i) in codons for row in rows)


def _find_cds_bounds(
    ref: NumpyUint8ArrayType, gap: int, keep_stop_codons: bool
) -> tuple[int, int, list[str]]:
    """first and last column of the reference coding sequence, the last
    column is the final base of the stop codon if it is kept, otherwise
    the base preceding it"""
    length = len(ref)
    errors = []
    codon = bytearray(3)

    beg = i = 0
    for pos in range(3):
        while i < length and ref[i] == gap:
            i += 1
        if i == length:
            break
        if pos == 0:
            beg = i
        codon[pos] = ref[i]
        i += 1
    if i == length or bytes(codon) != _START:
        errors.append("Reference sequence does not begin with start codon.")

    codon = bytearray(3)
    end = i = length - 1
    # one extra step locates the last base preceding the stop codon
    for pos in range(2, -1 if keep_stop_codons else -2, -1):
        while i > beg and ref[i] == gap:
            i -= 1
        if i == beg:
            break
        if pos == (2 if keep_stop_codons else -1):
            end = i
        if pos >= 0:
            codon[pos] = ref[i]
            i -= 1
    if i == beg or bytes(codon) not in _STOPS:
        errors.append("Reference sequence does not end with stop codon.")
    return beg, end, errors


def coding_clean(
    aln: Alignment,
    ref_row: int,
    min_ncodons: int,
    keep_stop_codons: bool = True,
) -> list[tuple[int, int]]:
    """reduces an alignment of coding sequences to gapless, in-frame codon
    blocks

    Parameters
    ----------
    aln
        alignment of coding sequences
    ref_row
        index of a row that begins with a start codon and ends with a stop
        codon, gaps are allowed within both
    min_ncodons
        minimum number of codons in a retained block
    keep_stop_codons
        whether the terminal stop codon is retained

    Returns
    -------
    the retained blocks as 0-based, inclusive (start, end) columns of the
    original alignment

    Raises
    ------
    CodingCleanError
        if the reference lacks start or stop codons, no block remains, or
        a frame shift or in-frame stop codon occurs before the last 20% of
        the reference coding sequence. The alignment is not modified.

    Notes
    -----
    Blocks at the start (end) of the coding sequence must contain a start
    (stop) codon in every row. A retained block must have, in every row,
    a number of gaps since the previous retained block congruent modulo 3
    to that of the reference. A frame shift or in-frame stop in the last
    20% truncates the alignment at that point.
    """
    aln._check_row(ref_row)
    data = _UPPER[aln._explicit_array()]
    gap = aln.alphabet.gap_code
    length = data.shape[1]
    ref = data[ref_row]
    is_gap = data == gap
    gapped_col = is_gap.any(axis=0)

    beg, end, errors = _find_cds_bounds(ref, gap, keep_stop_codons)
    if errors:
        raise CodingCleanError(errors)

    def ref_has_base(i: int) -> bool:
        return i >= length or ref[i] != gap

    blocks: list[tuple[int, int]] = []
    ngaps = numpy.zeros(aln.nseqs, dtype=int)
    trunc = None
    i = beg
    frame = 0
    while i <= end:
        # next gapless codon column in frame with the reference
        gapless = True
        while i <= end:
            ngaps += is_gap[:, i]
            if gapped_col[i]:
                gapless = False
            if gapless and frame == 2:
                break
            i += 1
            if ref_has_base(i):
                frame += 1
                if frame == 3:
                    frame = 0
                    gapless = True

        if i > end:
            break

        blk_beg = i - 2
        i += 1
        while i <= end and not gapped_col[i]:
            i += 1
        blk_size = (i - blk_beg) // 3
        blk_end = blk_beg + blk_size * 3 - 1
        i = blk_end + 1
        frame = 0 if ref_has_base(i) else 2

        if blk_size < min_ncodons:
            continue
        if blk_beg == beg and not _all_have(data, blk_beg, frozenset((_START,))):
            continue
        if keep_stop_codons and blk_end == end and not _all_have(data, blk_end - 2, _STOPS):
            continue

        if blocks and (ngaps % 3 != ngaps[ref_row] % 3).any():
            trunc = blocks[-1][1] + 1

        if trunc is None:
            for j in range(blk_beg, blk_end - 1, 3):
                if keep_stop_codons and j == end - 2:
                    break
                if any(_codon(row, j) in _STOPS for row in data):
                    trunc = blk_end = j + 2 if keep_stop_codons else j - 1
                    break

        if trunc is None or trunc > blk_beg:
            blocks.append((blk_beg, blk_end))
        if trunc is not None:
            break
        ngaps[:] = 0

    if not blocks:
        errors.append("Nothing left after cleaning.")

    if trunc is not None and trunc < beg + (end - beg + 1) * 0.8:
        errors.append(
            "In-frame stop codon or frame shift not in last 20% of alignment.  "
            f"See approx. position {trunc + 1}."
        )

    if errors:
        raise CodingCleanError(errors)

    columns = numpy.concatenate([numpy.arange(s, e + 1) for s, e in blocks])
    aln.keep_columns(columns)
    return blocks


@numba.jit(cache=True)
def _mask_indel_borders(
    row: NumpyUint8ArrayType,
    gap_code: int,
    missing_code: int,
    indel_border: int,
    min_nbases: int,
) -> None:  # pragma: no cover
    """masks, in place, characters within indel_border of a gap and the
    remainder of gapless runs between two gaps shorter than min_nbases"""
    length = len(row)
    i = 0
    first_base = -1
    while True:
        while i < length and row[i] != gap_code:
            i += 1
        if i == length:
            break

        if first_base >= 0 and i - first_base < min_nbases:
            for k in range(first_base + indel_border, i):
                row[k] = missing_code
        else:
            k = 1
            while k <= indel_border and i - k >= 0 and row[i - k] != gap_code:
                row[i - k] = missing_code
                k += 1

        while i < length and row[i] == gap_code:
            i += 1
        if i == length:
            break

        k = 0
        while k < indel_border and i + k < length and row[i + k] != gap_code:
            row[i + k] = missing_code
            k += 1

        first_base = i


@numba.jit(cache=True)
def _collapse_empty(empty: numpy.ndarray, max_run: int) -> numpy.ndarray:  # pragma: no cover
    """columns to keep when runs of empty columns are shortened to max_run
    and leading and trailing empty runs are removed"""
    length = len(empty)
    keep = numpy.zeros(length, dtype=numpy.bool_)
    nempty = 0
    nkept = 0
    for i in range(length):
        if empty[i]:
            nempty += 1
        else:
            nempty = 0
        if nempty <= max_run and not (empty[i] and nkept == 0):
            keep[i] = True
            nkept += 1
    i = length - 1
    while i >= 0 and empty[i]:
        keep[i] = False
        i -= 1
    return keep


@explicit_transform()
def indel_clean(
    aln: Alignment,
    indel_border: int,
    min_nbases: int,
    min_nseqs: int,
    tuple_size: int = 1,
    missing_char: str | None = None,
) -> None:
    """masks characters adjacent to indels and removes columns with too
    little data

    Parameters
    ----------
    aln
        alignment, modified in place
    indel_border
        number of characters either side of each gap to mask
    min_nbases
        gapless runs between two gaps shorter than this are masked
    min_nseqs
        columns with fewer rows having a character that is neither gap nor
        missing data are emptied
    tuple_size
        runs of empty columns are reduced to tuple_size - 1 columns of
        missing data, leading and trailing runs are removed
    missing_char
        the masking character, defaults to the alphabet's first missing
        data character
    """
    if tuple_size < 1:
        raise AlignmentError(f"tuple_size must be >= 1, not {tuple_size}")
    alpha = aln.alphabet
    missing_code = alpha.missing_code if missing_char is None else ord(missing_char)
    data = aln.rows.array.copy()
    for row in data:
        _mask_indel_borders(row, alpha.gap_code, missing_code, indel_border, min_nbases)

    real = alpha.is_real[data]
    real &= data != missing_code
    empty = real.sum(axis=0) < min_nseqs
    data[:, empty] = missing_code
    aln.rows.set_array(data)
    aln.keep_columns(_collapse_empty(empty, tuple_size - 1))


@numba.jit(cache=True)
def _mask_long_gaps(row: NumpyUint8ArrayType, gap_code: int, missing_code: int, k: int) -> None:  # pragma: no cover
    length = len(row)
    run = 0
    for i in range(length + 1):
        if i < length and row[i] == gap_code:
            run += 1
            continue
        if run > k:
            for j in range(i - run, i):
                row[j] = missing_code
        run = 0


@explicit_transform(rebuild_compressed=True)
def mask_macro_indels(aln: Alignment, k: int, ref_row: int | None = None) -> None:
    """replaces gap runs longer than k with missing data

    Parameters
    ----------
    aln
        alignment, modified in place, a compressed view is rebuilt
    k
        longest run of gaps left unmasked
    ref_row
        row left unchanged
    """
    if ref_row is not None:
        aln._check_row(ref_row)
    data = aln.rows.array
    for i, row in enumerate(data):
        if i == ref_row:
            continue
        _mask_long_gaps(row, aln.alphabet.gap_code, aln.alphabet.missing_code, k)


def _missing_to_gaps(
    data: numpy.ndarray,
    alpha,
    ref_mask: numpy.ndarray,
    rng: numpy.random.Generator,
) -> numpy.ndarray:
    """data with missing data characters replaced, where ref_mask is True
    'N' becomes a random base"""
    missing = alpha.is_missing[data]
    random_base = missing & ref_mask & (data == ord("N"))
    result = numpy.where(missing, numpy.uint8(alpha.gap_code), data)
    if random_base.any():
        bases = numpy.frombuffer(alpha.symbols[:4].encode("ascii"), dtype=numpy.uint8)
        result[random_base] = rng.choice(bases, size=int(random_base.sum()))
    return result.astype(numpy.uint8)


@explicit_transform(rebuild_compressed=True)
def _missing_to_gaps_explicit(aln: Alignment, ref_row: int | None, rng) -> None:
    data = aln.rows.array
    ref_mask = numpy.zeros(data.shape, dtype=bool)
    if ref_row is not None:
        ref_mask[ref_row] = True
    aln.rows.set_array(_missing_to_gaps(data, aln.alphabet, ref_mask, rng))


def missing_to_gaps(
    aln: Alignment,
    ref_row: int | None = None,
    rng: numpy.random.Generator | None = None,
) -> None:
    """converts missing data to gaps, except 'N' in ref_row which becomes a
    randomly chosen base from the first four alphabet symbols

    Notes
    -----
    An unordered compressed alignment is edited in place, otherwise the
    explicit rows are edited and any compressed view is rebuilt.
    """
    if ref_row is not None:
        aln._check_row(ref_row)
    rng = numpy.random.default_rng() if rng is None else rng
    ss = aln.ss
    if aln.rows is not None or ss.ordered:
        _missing_to_gaps_explicit(aln, ref_row, rng)
        return

    ref_mask = numpy.zeros(ss.col_tuples.shape, dtype=bool)
    if ref_row is not None:
        ref_mask[:, :, ref_row] = True
    ss.col_tuples = _missing_to_gaps(ss.col_tuples, aln.alphabet, ref_mask, rng)
