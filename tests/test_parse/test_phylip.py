import pytest

from alnkit.parse.phylip import MinimalMpmParser, MinimalPhylipParser
from alnkit.parse.record import RecordError

EXPECT = [
    ("human", "ATGCTGGA--CTAAGT"),
    ("mouse", "ATGCAGGACACTAAGT"),
    ("rat", "ATGCAGGAC-CTNAGT"),
]


def test_phylip(DATA_DIR):
    with open(DATA_DIR / "brca1_5.ph") as infile:
        got = MinimalPhylipParser(infile)
    assert got == EXPECT


def test_mpm(DATA_DIR):
    with open(DATA_DIR / "brca1_5.mpm") as infile:
        got = MinimalMpmParser(infile)
    assert got == EXPECT


def test_phylip_spaces_in_sequence():
    got = MinimalPhylipParser(["2 6", "a ACG TT", "A", "b", "CCC", "GGG"])
    assert got == [("a", "ACGTTA"), ("b", "CCCGGG")]


@pytest.mark.parametrize(
    "data,msg",
    (
        ([], "empty"),
        (["x 4"], "missing initial length"),
        (["2 4", "a ACGT"], "expected 2 sequences"),
        (["1 4", "a ACG"], "Found 3, Expected 4"),
        (["1 4", "a ACGTA"], "Found 5, Expected 4"),
        (["1 4", "a ACGT", "b"], "data found after"),
    ),
)
def test_phylip_invalid(data, msg):
    with pytest.raises(RecordError, match=msg):
        MinimalPhylipParser(data)


@pytest.mark.parametrize(
    "data,msg",
    (
        ([], "empty"),
        (["2 4", "a"], "expected 2 sequences"),
        (["2 4", "a", "b", "ACGT", "AC"], "Found 2, Expected 4"),
    ),
)
def test_mpm_invalid(data, msg):
    with pytest.raises(RecordError, match=msg):
        MinimalMpmParser(data)
