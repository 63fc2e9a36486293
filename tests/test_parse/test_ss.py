import numpy
import pytest

from alnkit.core.alignment import Representation, make_alignment
from alnkit.format.ss import alignment_to_ss
from alnkit.parse.record import RecordError
from alnkit.parse.ss import ss_parser

SS_TEXT = """NSEQS = 2
LENGTH = 4
TUPLE_SIZE = 1
NTUPLES = 3
NAMES = a,b
ALPHABET = ACGT
IDX_OFFSET = 10
NCATS = 1

0\tAA\t2\t2\t0
1\tCC\t1\t0\t1
2\tG-\t1\t0\t1

0 1
2 0
"""


def test_ss_parser():
    aln = ss_parser(SS_TEXT.splitlines())
    assert aln.representation is Representation.COMPRESSED
    assert aln.names == ["a", "b"]
    assert aln.length == 4
    assert aln.idx_offset == 10
    assert aln.ncats == 1
    assert aln.alphabet.symbols == "ACGT"
    assert aln.get_char(1, 2) == "-"
    assert aln.to_dict() == {"a": "ACGA", "b": "AC-A"}
    assert aln.ss.counts.tolist() == [2, 1, 1]
    assert aln.ss.cat_counts.tolist() == [[2, 0, 0], [0, 1, 1]]


def test_ss_parser_unordered():
    text = SS_TEXT.split("\n\n0 1")[0]
    aln = ss_parser(text.splitlines())
    assert not aln.ss.ordered
    assert aln.length == 4


def test_round_trip_tuples():
    orig = make_alignment({"x": "ACGTTGCA", "y": "AC-TTGCA", "z": "NCGTAGCA"})
    orig.build_suff_stats(tuple_size=3)
    got = ss_parser(alignment_to_ss(orig).splitlines())
    assert got.ss.tuple_size == 3
    numpy.testing.assert_array_equal(got.ss.col_tuples, orig.ss.col_tuples)
    for row in range(3):
        for col in range(orig.length):
            assert got.get_char(row, col) == orig.get_char(row, col)


@pytest.mark.parametrize(
    "text,msg",
    (
        ("NSEQS = 1\nLENGTH = 1\nTUPLE_SIZE = 1\nNTUPLES = 1\n", "lacks NAMES"),
        ("NSEQS = x\nLENGTH = 1\nTUPLE_SIZE = 1\nNTUPLES = 1\nNAMES = a", "integer"),
        ("NSEQS = 2\nLENGTH = 1\nTUPLE_SIZE = 1\nNTUPLES = 1\nNAMES = a", "1 names"),
        ("NSEQS 1", "KEY = value"),
        (
            "NSEQS = 1\nLENGTH = 1\nTUPLE_SIZE = 1\nNTUPLES = 1\nNAMES = a\n\n1\tA\t1",
            "malformed tuple",
        ),
        (
            "NSEQS = 1\nLENGTH = 1\nTUPLE_SIZE = 1\nNTUPLES = 1\nNAMES = a\n\n0\tAC\t1",
            "malformed tuple",
        ),
        (
            "NSEQS = 1\nLENGTH = 1\nTUPLE_SIZE = 1\nNTUPLES = 1\nNAMES = a\n\n0\tA",
            "malformed tuple",
        ),
        (
            "NSEQS = 1\nLENGTH = 2\nTUPLE_SIZE = 1\nNTUPLES = 2\nNAMES = a\n\n0\tA\t2",
            "NTUPLES = 2 but 1",
        ),
        (
            "NSEQS = 1\nLENGTH = 2\nTUPLE_SIZE = 1\nNTUPLES = 1\nNAMES = a\n\n0\tA\t2\n\n0",
            "LENGTH = 2 but 1",
        ),
        (
            "NSEQS = 1\nLENGTH = 1\nTUPLE_SIZE = 1\nNTUPLES = 1\nNAMES = a\n\n0\tA\t1\n\n3",
            "out of range",
        ),
    ),
)
def test_ss_parser_invalid(text, msg):
    with pytest.raises(RecordError, match=msg):
        ss_parser(text.splitlines())
