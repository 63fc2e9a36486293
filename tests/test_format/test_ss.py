from alnkit.core.alignment import make_alignment
from alnkit.format.ss import alignment_to_ss


def test_alignment_to_ss():
    aln = make_alignment({"a": "ACGA", "b": "AC-A"})
    aln.build_suff_stats()
    aln.set_categories([0, 1, 1, 0])
    expect = "\n".join(
        [
            "NSEQS = 2",
            "LENGTH = 4",
            "TUPLE_SIZE = 1",
            "NTUPLES = 3",
            "NAMES = a,b",
            "ALPHABET = ACGT",
            "IDX_OFFSET = 0",
            "NCATS = 1",
            "",
            "0\tAA\t2\t2\t0",
            "1\tCC\t1\t0\t1",
            "2\tG-\t1\t0\t1",
            "",
            "0 1 2 0",
            "",
        ]
    )
    assert alignment_to_ss(aln) == expect


def test_alignment_to_ss_unordered_and_wrapped():
    aln = make_alignment({"a": "A" * 25})
    text = alignment_to_ss(aln, store_order=False)
    assert "NCATS = -1" in text
    assert text.endswith("0\tA\t25\n")
    assert aln.ss is None

    lines = alignment_to_ss(aln).splitlines()
    assert lines[-2:] == [" ".join(["0"] * 20), " ".join(["0"] * 5)]
