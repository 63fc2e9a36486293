import numpy
import pytest

from alnkit.core.alignment import AlignmentError, make_alignment
from alnkit.core.category_map import CategoryMap
from alnkit.core.features import Feature, FeatureSet
from alnkit.core.overlay import (
    label_categories,
    map_feature_coords,
    reverse_compl_feats,
)


def _feat(start, end, strand="+", feature="CDS", frame=None, seqname="x", tid="t1"):
    return Feature(
        seqname,
        "test",
        feature,
        start,
        end,
        strand=strand,
        frame=frame,
        attribute=f'transcript_id "{tid}";',
    )


@pytest.fixture
def cmap():
    return CategoryMap.from_string(
        "NCATS = 4\nCDS 1-3\nintron 4\nLABELLING_PRECEDENCE = CDS,intron\n"
    )


def test_label_categories(cmap):
    aln = make_alignment({"x": "ACGT" * 3})
    fs = FeatureSet(
        [
            _feat(1, 6, frame=0),
            _feat(5, 8, feature="intron"),
            _feat(10, 12, strand="-", frame=1),
            _feat(2, 3, feature="exon"),
        ]
    )
    label_categories(aln, fs, cmap)
    assert aln.categories.tolist() == [1, 2, 3, 1, 2, 3, 4, 4, 0, 1, 3, 2]
    assert aln.ncats == 4


def test_label_categories_warns_out_of_range(cmap):
    aln = make_alignment({"x": "ACGT"})
    fs = FeatureSet([_feat(3, 5), _feat(0, 2), _feat(1, 2, feature="intron")])
    with pytest.warns(UserWarning, match="out-of-range"):
        label_categories(aln, fs, cmap)
    assert aln.categories.tolist() == [4, 4, 0, 0]


@pytest.mark.parametrize("intron_first", (False, True))
def test_label_categories_precedence_any_order(cmap, intron_first):
    aln = make_alignment({"x": "ACGT"})
    feats = [_feat(1, 3, frame=0), _feat(1, 4, feature="intron")]
    if intron_first:
        feats.reverse()
    label_categories(aln, FeatureSet(feats), cmap)
    assert aln.categories.tolist() == [1, 2, 3, 4]


def test_label_categories_no_precedence_overwritten():
    cmap = CategoryMap.from_string("NCATS = 2\nCDS 1\nintron 2\n")
    aln = make_alignment({"x": "ACGT"})
    fs = FeatureSet([_feat(1, 3), _feat(2, 4, feature="intron")])
    label_categories(aln, fs, cmap)
    assert aln.categories.tolist() == [1, 2, 2, 2]


def test_label_categories_updates_compressed(cmap):
    aln = make_alignment({"x": "AAAA"})
    aln.build_suff_stats()
    label_categories(aln, FeatureSet([_feat(1, 2, feature="intron")]), cmap)
    assert aln.ss.cat_counts[4].sum() == 2
    assert aln.ss.cat_counts[0].sum() == 2


@pytest.fixture
def aln():
    return make_alignment({"x": "AC--GT-A", "y": "--ACGTTA"})


def test_map_to_alignment_and_back(aln):
    fs = FeatureSet([_feat(3, 4)])
    map_feature_coords(aln, fs, 1, 0)
    assert (fs[0].start, fs[0].end) == (5, 6)
    map_feature_coords(aln, fs, 0, 1)
    assert (fs[0].start, fs[0].end) == (3, 4)


def test_map_between_rows(aln):
    fs = FeatureSet([_feat(3, 4)])
    map_feature_coords(aln, fs, 1, 2)
    assert (fs[0].start, fs[0].end) == (3, 4)


def test_map_infers_rows(aln):
    fs = FeatureSet([_feat(3, 4), _feat(5, 5, seqname="msa"), _feat(1, 2, seqname="zz")])
    with pytest.warns(UserWarning, match="zz"):
        map_feature_coords(aln, fs, -1, 2)
    assert len(fs) == 2
    assert (fs[0].start, fs[0].end) == (3, 4)
    assert (fs[1].start, fs[1].end) == (3, 3)


def test_map_truncates_and_drops(aln):
    fs = FeatureSet([_feat(4, 7), _feat(6, 7)])
    map_feature_coords(aln, fs, 1, 0)
    assert len(fs) == 1
    assert (fs[0].start, fs[0].end) == (6, 8)


def test_map_anchored_type_keeps_span(aln):
    fs = FeatureSet([_feat(2, 4, feature="start_codon"), _feat(2, 4, strand="-", feature="3'splice")])
    map_feature_coords(aln, fs, 1, 0)
    assert (fs[0].start, fs[0].end) == (2, 4)
    assert (fs[1].start, fs[1].end) == (2, 4)


def test_map_offset_and_ungroups(aln):
    fs = FeatureSet([_feat(3, 4)])
    fs.group()
    map_feature_coords(aln, fs, 1, 0, offset=100)
    assert (fs[0].start, fs[0].end) == (105, 106)
    assert fs.groups is None
    map_feature_coords(aln, fs, 0, 0, offset=-100)
    assert (fs[0].start, fs[0].end) == (5, 6)


@pytest.mark.parametrize("rows", ((3, 0), (0, -2)))
def test_map_invalid_rows(aln, rows):
    with pytest.raises(AlignmentError):
        map_feature_coords(aln, FeatureSet([_feat(1, 2)]), *rows)


def test_reverse_compl_feats():
    aln = make_alignment({"a": "AACGTT", "b": "AAGGTT"})
    aln.set_categories([0, 1, 2, 3, 0, 0])
    aux = numpy.arange(6)
    fs = FeatureSet([_feat(2, 4, strand="-"), _feat(5, 6, tid="t2")])
    fs.group()
    reverse_compl_feats(aln, fs, aux=[aux])
    assert aln.get_row(0) == "ACGTTT"
    assert aln.get_row(1) == "ACCTTT"
    assert aln.categories.tolist() == [0, 3, 2, 1, 0, 0]
    assert aux.tolist() == [0, 3, 2, 1, 4, 5]
    assert (fs[0].start, fs[0].end, fs[0].strand) == (2, 4, "+")
    assert fs[1].strand == "+"


def test_reverse_compl_feats_features_only():
    aux = numpy.arange(6)
    fs = FeatureSet([_feat(2, 3, strand="-"), _feat(5, 6, strand="-")])
    fs.group()
    reverse_compl_feats(None, fs, aux=[aux])
    assert aux.tolist() == [0, 5, 4, 3, 2, 1]
    assert [(f.start, f.end, f.strand) for f in fs] == [(5, 6, "+"), (2, 3, "+")]


def test_reverse_compl_feats_requires_groups():
    aln = make_alignment({"a": "AACGTT"})
    with pytest.raises(AlignmentError):
        reverse_compl_feats(aln, FeatureSet([_feat(2, 4, strand="-")]))
