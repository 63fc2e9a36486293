import numpy
import pytest

from alnkit.core.suff_stats import SufficientStats


def _rows(*seqs):
    return numpy.array([list(s.encode("ascii")) for s in seqs], dtype=numpy.uint8)


@pytest.fixture
def rows():
    return _rows("AAC-", "AAG-")


def test_from_rows_counts(rows):
    ss = SufficientStats.from_rows(rows)
    assert ss.ntuples == 3
    assert ss.nseqs == 2
    assert ss.counts.tolist() == [2, 1, 1]
    assert ss.tuple_idx.tolist() == [0, 0, 1, 2]
    assert ss.length == 4
    assert ss.ordered


def test_round_trip_to_rows(rows):
    ss = SufficientStats.from_rows(rows, tuple_size=3)
    assert (ss.to_rows() == rows).all()


def test_unordered(rows):
    ss = SufficientStats.from_rows(rows, store_order=False)
    assert not ss.ordered
    assert ss.length == 4
    with pytest.raises(ValueError):
        ss.to_rows()


def test_tuple_context_uses_gaps_before_start():
    ss = SufficientStats.from_rows(_rows("AAC", "AAG"), tuple_size=2)
    assert ss.ntuples == 3
    assert ss.get_char_pos(0, 0, offset=-1) == "-"
    assert ss.get_char_pos(2, 1) == "G"
    assert ss.get_char_pos(2, 1, offset=-1) == "A"
    with pytest.raises(IndexError):
        ss.get_char_pos(2, 1, offset=-2)


def test_sub_range_uses_real_context():
    rows = _rows("ACGT", "ACGA")
    ss = SufficientStats.from_rows(rows, tuple_size=2, start=2, end=4)
    assert ss.length == 2
    assert ss.get_char_pos(0, 0, offset=-1) == "C"


def test_cat_counts(rows):
    ss = SufficientStats.from_rows(rows, categories=numpy.array([0, 1, 1, 0]), ncats=1)
    # tuple 0 (AA) once in each category
    assert ss.cat_counts.tolist() == [[1, 0, 1], [1, 1, 0]]


def test_reorder_rows(rows):
    ss = SufficientStats.from_rows(rows)
    ss.reorder_rows([1, -1, 0], ord("*"))
    assert ss.to_rows().tobytes() == b"AAG-" + b"****" + b"AAC-"


def test_sub_alignment(rows):
    ss = SufficientStats.from_rows(rows)
    sub = ss.sub_alignment([1], 1, 3)
    assert sub.to_rows().tobytes() == b"AG"


def test_drop_tuples_requires_unordered(rows):
    ss = SufficientStats.from_rows(rows)
    with pytest.raises(ValueError):
        ss.drop_tuples(numpy.array([False, False, True]))
    ss = SufficientStats.from_rows(rows, store_order=False)
    ss.drop_tuples(numpy.array([False, False, True]))
    assert ss.length == 3


def test_copy_is_independent(rows):
    ss = SufficientStats.from_rows(rows)
    new = ss.copy()
    new.col_tuples[0, 0, 0] = ord("T")
    assert ss.get_char_tuple(0, 0) == "A"
