"""Feature sets overlaid on alignments: column labelling, projection
between coordinate frames and strand normalisation."""

from __future__ import annotations

import typing
import warnings

import numpy

from alnkit.core.alignment import AlignmentError, RepresentationError
from alnkit.core.category_map import BACKGROUND, NO_PRECEDENCE
from alnkit.core.coord_map import NOT_FOUND, CoordinateMap, map_seq_to_seq

if typing.TYPE_CHECKING:  # pragma: no cover
    from collections.abc import Iterable

    from alnkit.core.alignment import Alignment
    from alnkit.core.category_map import SupportsCategories
    from alnkit.core.features import Feature, FeatureSet

ALIGNMENT_FRAME = 0
INFER_FRAME = -1

# feature types whose length is held fixed when projection changes it,
# measured from the start (left) or the end (right) on the + strand
LEFT_ANCHORED = frozenset({"5'splice", "start_codon", "stop_codon", "cds3'ss"})
RIGHT_ANCHORED = frozenset({"3'splice", "cds5'ss", "prestart"})


def label_categories(aln: Alignment, features: FeatureSet, cmap: SupportsCategories) -> None:
    """labels every column of aln with a category from features

    Parameters
    ----------
    aln
        the features must be in the coordinate frame of the alignment
    features
        features with types unknown to cmap are ignored, except the
        background type
    cmap
        the category map

    Notes
    -----
    Columns not covered by a feature are category 0. Where features
    overlap a column keeps its label unless it has no precedence, or the
    new category has a numerically lower precedence.
    """
    labels = numpy.zeros(aln.length, dtype=numpy.int64)
    precedence = numpy.array(
        [cmap.labelling_precedence(c) for c in range(cmap.ncats + 1)], dtype=int
    )
    for feat in features:
        cat = cmap.get_category(feat.feature)
        if cat == 0 and feat.feature != BACKGROUND:
            continue

        if feat.start < 1 or feat.end < feat.start or feat.end > aln.length:
            warnings.warn(f"ignoring out-of-range feature {feat!r}", stacklevel=2)
            continue

        cols = numpy.arange(feat.start - 1, feat.end)
        rng = cmap.get_range(cat)
        if rng.is_cyclic:
            frame = feat.frame if feat.frame in (0, 1, 2) else 0
            if feat.strand == "-":
                offsets = feat.end - 1 - cols
            else:
                offsets = cols - (feat.start - 1)
            new = rng.start + (offsets + frame) % rng.size
        else:
            new = numpy.full(len(cols), cat, dtype=numpy.int64)

        # columns within one feature are distinct
        old_prec = precedence[labels[cols]]
        new_prec = precedence[new]
        update = (old_prec == NO_PRECEDENCE) | (
            (new_prec != NO_PRECEDENCE) & (new_prec < old_prec)
        )
        labels[cols[update]] = new[update]

    aln.set_categories(labels, cmap.ncats)


def _infer_row(aln: Alignment, name: str, cache: dict[str, int]) -> int | None:
    """1-based row for name, ALIGNMENT_FRAME for 'MSA', None if unknown"""
    if name.upper() == "MSA":
        return ALIGNMENT_FRAME
    if name not in cache:
        idx = aln.get_seq_idx(name)
        cache[name] = idx + 1 if idx >= 0 else None
    return cache[name]


def _keep_span(feat: Feature, orig_span: int) -> None:
    left = feat.feature in LEFT_ANCHORED
    right = feat.feature in RIGHT_ANCHORED
    if (left and feat.strand == "+") or (right and feat.strand == "-"):
        feat.end = feat.start + orig_span
    elif (right and feat.strand == "+") or (left and feat.strand == "-"):
        feat.start = feat.end - orig_span


def map_feature_coords(
    aln: Alignment,
    features: FeatureSet,
    from_row: int,
    to_row: int,
    offset: int = 0,
) -> None:
    """converts feature coordinates between frames of reference

    Parameters
    ----------
    aln
        the alignment defining the frames
    features
        modified in place, any grouping is discarded
    from_row, to_row
        1-based row index, 0 for the alignment frame or -1 to infer the
        row of each feature from its seqname ('MSA' meaning the
        alignment frame)
    offset
        added to every converted coordinate

    Notes
    -----
    Features with neither end in range are dropped. A feature with one end
    out of range is truncated to the frame boundary. Features of
    LEFT_ANCHORED or RIGHT_ANCHORED types keep their original length.
    """
    for row in (from_row, to_row):
        if row != INFER_FRAME and not 0 <= row <= aln.nseqs:
            msg = f"row {row} out of range for {aln.nseqs} sequences"
            raise AlignmentError(msg)

    if from_row == to_row:
        features.add_offset(offset)
        features.ungroup()
        return

    maps: dict[int, CoordinateMap] = {}
    rows_by_name: dict[str, int] = {}
    kept = []
    for feat in features:
        fseq, tseq = from_row, to_row
        if INFER_FRAME in (from_row, to_row):
            inferred = _infer_row(aln, feat.seqname, rows_by_name)
            if inferred is None:
                warnings.warn(
                    f"no sequence named {feat.seqname!r}, dropping feature",
                    stacklevel=2,
                )
                continue
            if from_row == INFER_FRAME:
                fseq = inferred
            else:
                tseq = inferred

        for row in (fseq, tseq):
            if row != ALIGNMENT_FRAME and row not in maps:
                maps[row] = CoordinateMap.from_alignment(aln, row - 1)
        from_map = maps.get(fseq)
        to_map = maps.get(tseq)

        orig_span = feat.end - feat.start
        start = map_seq_to_seq(from_map, to_map, feat.start)
        end = map_seq_to_seq(from_map, to_map, feat.end)
        if start == NOT_FOUND and end == NOT_FOUND:
            continue

        feat.start = (1 if start == NOT_FOUND else start) + offset
        if end == NOT_FOUND:
            end = aln.length if to_map is None else to_map.seq_len
        feat.end = end + offset

        if feat.end - feat.start != orig_span:
            _keep_span(feat, orig_span)
        kept.append(feat)

    features.features = kept
    features.ungroup()


def reverse_compl_feats(
    aln: Alignment | None,
    features: FeatureSet,
    aux: Iterable[numpy.ndarray] = (),
) -> None:
    """reverse complements the span of each group of features that lies on
    the reverse strand only

    Parameters
    ----------
    aln
        alignment in whose frame the features lie, if None only the
        features and aux are changed
    features
        must be grouped, groups should not overlap
    aux
        per column arrays reversed in step with the alignment

    Notes
    -----
    Feature coordinates and strands within the affected groups are updated.
    """
    if not len(features):
        return
    if features.groups is None:
        raise AlignmentError("reverse complementing by feature requires grouped features")
    if aln is not None and aln.ss is not None and aln.rows is None and not aln.ss.ordered:
        raise RepresentationError("reverse_compl_feats requires an ordered alignment")

    aux = list(aux)
    for group in features.groups:
        if not group.reverse_strand_only():
            continue
        start, end = group.start, group.end
        if aln is not None:
            aln.reverse_complement_segment(start, end, aux=aux)
        else:
            for arr in aux:
                arr[start - 1 : end] = arr[start - 1 : end][::-1].copy()
        group.reverse_compl(start, end)
