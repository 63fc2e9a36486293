"""Writer for the sufficient statistics (SS) text format, see
alnkit.parse.ss for the layout."""

from __future__ import annotations

import typing

if typing.TYPE_CHECKING:  # pragma: no cover
    from alnkit.core.alignment import Alignment

_INDICES_PER_LINE = 20


def _number(value: float) -> str:
    return str(int(value)) if float(value).is_integer() else repr(float(value))


def alignment_to_ss(aln: Alignment, store_order: bool = True) -> str:
    """the compressed view of aln in SS format

    Parameters
    ----------
    aln
        if it lacks a compressed view, one with tuple size 1 is written
    store_order
        write the tuple index of every column, ignored if the compressed
        view is unordered
    """
    ss = aln.ss
    if ss is None:
        # a temporary view so aln is unchanged
        aln = aln.copy()
        aln.build_suff_stats(tuple_size=1, store_order=store_order)
        ss = aln.ss

    header = [
        f"NSEQS = {aln.nseqs}",
        f"LENGTH = {aln.length}",
        f"TUPLE_SIZE = {ss.tuple_size}",
        f"NTUPLES = {ss.ntuples}",
        f"NAMES = {','.join(aln.names)}",
        f"ALPHABET = {aln.alphabet.symbols}",
        f"IDX_OFFSET = {aln.idx_offset}",
        f"NCATS = {-1 if ss.cat_counts is None else len(ss.cat_counts) - 1}",
        "",
    ]

    lines = []
    for i in range(ss.ntuples):
        fields = [str(i), ss.col_tuples[i].tobytes().decode("ascii"), _number(ss.counts[i])]
        if ss.cat_counts is not None:
            fields.extend(_number(c) for c in ss.cat_counts[:, i])
        lines.append("\t".join(fields))

    if store_order and ss.ordered:
        lines.append("")
        idx = [str(i) for i in ss.tuple_idx]
        for start in range(0, len(idx), _INDICES_PER_LINE):
            lines.append(" ".join(idx[start : start + _INDICES_PER_LINE]))

    lines.append("")
    return "\n".join(header + lines)
