import pytest

from alnkit.core.alignment import Alignment, make_alignment
from alnkit.format.alignment import (
    FORMAT_ENV,
    OUTPUT_LINE_LEN,
    format_alignment,
    format_for_suffix,
    get_format,
    line_length,
    save_to_filename,
    suffix_for_format,
)
from alnkit.format.fasta import seqs_to_fasta
from alnkit.format.phylip import alignment_to_mpm, alignment_to_phylip
from alnkit.parse.record import FileFormatError
from alnkit.util.io import open_

SEQS = {
    "human": "ATGCTGGA--CTAAGT",
    "mouse": "ATGCAGGACACTAAGT",
    "rat": "ATGCAGGAC-CTNAGT",
}


@pytest.fixture
def aln():
    return make_alignment(SEQS)


def test_seqs_to_fasta():
    got = seqs_to_fasta([("a", "ACGTA"), ("b", "AC")], block_size=2)
    assert got == "> a\nAC\nGT\nA\n> b\nAC\n"
    assert seqs_to_fasta([]) == ""


def test_phylip_and_mpm():
    seqs = [("a", "ACGTA"), ("b", "AC-TA")]
    assert alignment_to_phylip(seqs, block_size=3) == "  2 5\na\nACG\nTA\nb\nAC-\nTA\n"
    assert alignment_to_mpm(seqs, block_size=3) == "  2 5\na\nb\nACGTA\nAC-TA\n"


def test_format_fasta(aln, DATA_DIR):
    got = format_alignment(aln, "fa")
    assert got.splitlines() == (DATA_DIR / "brca1_5.fa").read_text().splitlines()


def test_format_pretty(aln):
    got = format_alignment(aln, "mpm", pretty=True).splitlines()
    assert got[4:] == ["ATGCTGGA--CTAAGT", "....A...CA......", "....A...C...N..."]
    # alignment is not modified
    assert aln.get_row(1) == SEQS["mouse"]


def test_format_ss(aln):
    got = format_alignment(aln, "ss")
    assert got.startswith("NSEQS = 3\nLENGTH = 16\n")
    assert aln.ss is None


def test_line_length(aln, monkeypatch):
    assert line_length() == OUTPUT_LINE_LEN
    monkeypatch.setenv(FORMAT_ENV, "line_length=5")
    assert line_length() == 5
    got = format_alignment(aln, "phylip").splitlines()
    assert got[1:6] == ["human", "ATGCT", "GGA--", "CTAAG", "T"]


def test_format_compressed_only(aln):
    aln.build_suff_stats()
    compressed = Alignment.from_suff_stats(aln.ss, aln.names)
    assert format_alignment(compressed).splitlines()[1] == SEQS["human"]


@pytest.mark.parametrize("name,expect", (("FA", "fasta"), ("ph", "phylip"), ("maf", "maf")))
def test_get_format(name, expect):
    assert get_format(name) == expect


def test_get_format_unknown():
    with pytest.raises(FileFormatError):
        get_format("nexus")


def test_format_maf_unsupported(aln):
    with pytest.raises(FileFormatError, match="not supported"):
        format_alignment(aln, "maf")


@pytest.mark.parametrize(
    "path,expect",
    (("x.fa", "fasta"), ("x.fasta.gz", "fasta"), ("x.ph", "phylip"), ("x.ss.bz2", "ss"), ("x.txt", None), ("x", None)),
)
def test_format_for_suffix(path, expect):
    assert format_for_suffix(path) == expect


@pytest.mark.parametrize("name,expect", (("fasta", "fa"), ("PHYLIP", "ph"), ("mpm", "mpm"), ("nexus", "msa")))
def test_suffix_for_format(name, expect):
    assert suffix_for_format(name) == expect


@pytest.mark.parametrize("name", ("out.fa", "out.ph.gz"))
def test_save_to_filename(aln, tmp_dir, name):
    path = tmp_dir / name
    save_to_filename(aln, path)
    with open_(path) as infile:
        got = infile.read()
    assert got == format_alignment(aln, format_for_suffix(path))


def test_write_explicit_format(aln, tmp_dir):
    path = tmp_dir / "out.txt"
    aln.write(path, format="mpm", pretty=True)
    assert path.read_text().splitlines()[5] == "....A...CA......"


def test_save_unknown_suffix(aln, tmp_dir):
    with pytest.raises(FileFormatError):
        save_to_filename(aln, tmp_dir / "out.txt")
