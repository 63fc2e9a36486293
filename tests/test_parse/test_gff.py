import io

import pytest

from alnkit.parse.gff import gff_parser, load_gff
from alnkit.parse.record import RecordError


def test_gff_path(DATA_DIR):
    feats = list(gff_parser(DATA_DIR / "features.gff"))
    assert len(feats) == 4
    first = feats[0]
    assert (first.seqname, first.feature, first.start, first.end) == ("human", "CDS", 1, 6)
    assert first.score is None
    assert first.frame == 0
    assert first.get_attribute("gene_id") == "g1"
    assert feats[1].frame is None
    assert feats[2].score == 0.5
    assert feats[3].strand == "-"


def test_gff_str_path_and_seqids(DATA_DIR):
    feats = list(gff_parser(str(DATA_DIR / "features.gff"), seqids="mouse"))
    assert [f.seqname for f in feats] == ["mouse"]


def test_gff_file_object():
    data = io.StringIO("x\tsrc\texon\t2\t5\t.\t.\t.\n")
    feats = list(gff_parser(data))
    assert feats[0].attribute == ""
    assert feats[0].strand == "."


def test_load_gff(DATA_DIR):
    fs = load_gff(DATA_DIR / "features.gff", seqids=["human", "mouse"])
    assert len(fs) == 4
    fs.group()
    assert [g.name for g in fs.groups] == ["t1", "t2"]


@pytest.mark.parametrize(
    "line",
    (
        "x\tsrc\texon\t2\t5",
        "x\tsrc\texon\ta\t5\t.\t+\t.\t",
        "x\tsrc\texon\t2\t5\t.\t*\t.\t",
        "x\tsrc\texon\t2\t5\t.\t+\t3\t",
    ),
)
def test_gff_invalid(line):
    with pytest.raises(RecordError):
        list(gff_parser([line]))
