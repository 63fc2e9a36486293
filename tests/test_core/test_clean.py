import numpy
import pytest

from alnkit.core.alignment import Alignment, Representation, make_alignment
from alnkit.core.clean import (
    CodingCleanError,
    coding_clean,
    indel_clean,
    mask_macro_indels,
    missing_to_gaps,
)


def test_coding_clean_gapless():
    aln = make_alignment({"ref": "ATGAAACCCTAA", "other": "ATGAAGCCCTAG"})
    blocks = coding_clean(aln, 0, 1)
    assert blocks == [(0, 11)]
    assert aln.get_row(1) == "ATGAAGCCCTAG"


def test_coding_clean_single_row():
    aln = make_alignment({"ref": "ATGAAATAA"})
    assert coding_clean(aln, 0, 1) == [(0, 8)]
    assert aln.get_row(0) == "ATGAAATAA"


def test_coding_clean_removes_codon_indel():
    aln = make_alignment({"ref": "ATGAAA---CCCTAA", "other": "ATGAAAGGGCCCTAA"})
    aln.set_categories(list(range(15)))
    blocks = coding_clean(aln, 0, 1)
    assert blocks == [(0, 5), (9, 14)]
    assert aln.get_row(0) == aln.get_row(1) == "ATGAAACCCTAA"
    assert aln.categories.tolist() == [0, 1, 2, 3, 4, 5, 9, 10, 11, 12, 13, 14]


def test_coding_clean_lowercase():
    aln = make_alignment({"ref": "atgaaataa", "other": "ATGAAATAG"}, alphabet="ACGTacgt")
    assert coding_clean(aln, 0, 1) == [(0, 8)]


def test_coding_clean_drop_stop_codon():
    aln = make_alignment({"ref": "ATGAAACCCTAA", "other": "ATGAAGCCCTAG"})
    assert coding_clean(aln, 0, 1, keep_stop_codons=False) == [(0, 8)]
    assert aln.get_row(0) == "ATGAAACCC"


def test_coding_clean_truncates_late_stop():
    ref = "ATG" + "AAA" * 4 + "CCC" + "TAA"
    other = "ATG" + "AAA" * 4 + "TGA" + "TAA"
    aln = make_alignment({"ref": ref, "other": other})
    assert coding_clean(aln, 0, 1) == [(0, 17)]
    assert aln.get_row(0) == ref[:18]


def test_coding_clean_truncates_late_frame_shift():
    ref = "ATG" + "AAA" * 20 + "CC--CTAA"
    other = "ATG" + "AAA" * 20 + "CCGGCTAA"
    aln = make_alignment({"ref": ref, "other": other})
    assert coding_clean(aln, 0, 1) == [(0, 62)]
    assert aln.to_dict() == {"ref": ref[:63], "other": other[:63]}


def test_coding_clean_early_frame_shift_fails():
    aln = make_alignment({"ref": "ATGAAA--CCCTAA", "other": "ATGAAAGGCCCTAA"})
    expect = aln.to_dict()
    with pytest.raises(CodingCleanError, match="See approx. position 7"):
        coding_clean(aln, 0, 1)
    assert aln.to_dict() == expect


@pytest.mark.parametrize(
    "ref,messages",
    (
        ("AAGAAATAA", ["does not begin with start codon"]),
        ("ATGAAACCC", ["does not end with stop codon"]),
        ("CCCCCCCCC", ["does not begin", "does not end"]),
    ),
)
def test_coding_clean_reference_errors(ref, messages):
    aln = make_alignment({"ref": ref, "other": "ATGAAATAA"})
    with pytest.raises(CodingCleanError) as err:
        coding_clean(aln, 0, 1)
    assert len(err.value.messages) == len(messages)
    for got, expect in zip(err.value.messages, messages):
        assert expect in got


def test_coding_clean_nothing_left():
    aln = make_alignment({"ref": "ATGAAACCCTAA", "other": "ATGAAACCCTAA"})
    with pytest.raises(CodingCleanError, match="Nothing left"):
        coding_clean(aln, 0, 5)
    assert aln.length == 12


def test_coding_clean_requires_start_in_all_rows():
    aln = make_alignment({"ref": "ATGAAACCCTAA", "other": "CTGAAACCCTAA"})
    with pytest.raises(CodingCleanError, match="Nothing left"):
        coding_clean(aln, 0, 1)


@pytest.fixture
def indel_aln():
    return make_alignment(
        {"r0": "ACGTACGTAC", "r1": "ACG--CGTAC", "r2": "ACGTA-G-AC"}
    )


def test_indel_clean(indel_aln):
    indel_aln.set_categories(list(range(10)))
    indel_clean(indel_aln, 1, 2, 2)
    assert indel_aln.to_dict() == {
        "r0": "ACGTGTAC",
        "r1": "AC*-GTAC",
        "r2": "ACGT*-*C",
    }
    assert indel_aln.categories.tolist() == [0, 1, 2, 3, 6, 7, 8, 9]


def test_indel_clean_keeps_tuple_spacer(indel_aln):
    indel_clean(indel_aln, 1, 2, 2, tuple_size=2)
    assert indel_aln.length == 9
    assert indel_aln.get_row(0) == "ACGT*GTAC"


def test_indel_clean_masks_short_runs():
    aln = make_alignment({"r0": "A-CG-ACGTA", "r1": "AACGTACGTA"})
    indel_clean(aln, 0, 3, 1)
    # CG between the two gaps is shorter than 3
    assert aln.get_row(0) == "A-**-ACGTA"


def test_indel_clean_removes_leading_and_trailing_empty():
    aln = make_alignment({"r0": "*-ACG-", "r1": "A*ACG*"})
    indel_clean(aln, 0, 0, 2, tuple_size=3)
    assert aln.to_dict() == {"r0": "ACG", "r1": "ACG"}


def test_indel_clean_custom_missing_char():
    aln = make_alignment({"r0": "AC-GT", "r1": "ACAGT"})
    indel_clean(aln, 1, 0, 1, missing_char="N")
    assert aln.get_row(0) == "AN-NT"


@pytest.mark.parametrize(
    "ref_row,expect", ((None, "A***CG-T"), (0, "A---CG-T"))
)
def test_mask_macro_indels(ref_row, expect):
    aln = make_alignment({"r0": "A---CG-T", "r1": "ACGTCGAT"})
    aln.build_suff_stats()
    mask_macro_indels(aln, 2, ref_row=ref_row)
    assert aln.get_row(0) == expect
    assert aln.representation is Representation.BOTH
    assert (aln.ss.to_rows() == aln.rows.array).all()


def test_mask_macro_indels_trailing_run():
    aln = make_alignment({"r0": "ACG---", "r1": "ACGTCG"})
    mask_macro_indels(aln, 2)
    assert aln.get_row(0) == "ACG***"


def test_missing_to_gaps():
    aln = make_alignment({"ref": "ANGT", "x": "A*NT"})
    missing_to_gaps(aln, ref_row=0, rng=numpy.random.default_rng(3))
    assert aln.get_row(1) == "A--T"
    ref = aln.get_row(0)
    assert ref[1] in "ACGT"
    assert ref[::2] == "AG"


def test_missing_to_gaps_unordered():
    aln = make_alignment({"ref": "ANGT", "x": "A*NT"})
    aln.build_suff_stats(store_order=False)
    compressed = Alignment.from_suff_stats(aln.ss, aln.names)
    missing_to_gaps(compressed)
    chars = set(compressed.ss.col_tuples.tobytes().decode("ascii"))
    assert chars == set("ACGT-") - {"C"}
