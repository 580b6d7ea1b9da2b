"""Tests for interval ordering, merging and padding."""

import pytest

from amplicon_realigner.core.intervals import (
    contig_order,
    contig_sort_key,
    is_integer,
    merge_bases,
    sort_intervals,
)
from amplicon_realigner.models import GenomicInterval


def base(contig, position):
    return GenomicInterval(contig, position, position)


def coords(intervals):
    return [(i.contig, i.start, i.end) for i in intervals]


def test_is_integer():
    assert is_integer("1")
    assert is_integer("-3")
    assert not is_integer("chr1")
    assert not is_integer("X")
    assert not is_integer(" 1")
    assert not is_integer("1_0")
    assert not is_integer("")


def test_numeric_contigs_order_numerically():
    two = GenomicInterval("2", 100, 200)
    ten = GenomicInterval("10", 1, 50)

    assert contig_order(two, ten) < 0
    assert contig_order(ten, two) > 0
    assert sort_intervals([ten, two]) == [two, ten]


def test_named_contigs_order_as_strings():
    chr2 = GenomicInterval("chr2", 1, 10)
    chr10 = GenomicInterval("chr10", 1, 10)

    assert contig_order(chr10, chr2) < 0


def test_mixed_contigs_fall_back_to_string_compare():
    ten = GenomicInterval("10", 1, 10)
    two = GenomicInterval("2", 1, 10)
    x = GenomicInterval("X", 1, 10)

    # "10" < "X" and "2" < "X" as strings
    assert contig_order(ten, x) < 0
    assert contig_order(two, x) < 0
    # numeric only when both sides are integers
    assert contig_order(two, ten) < 0
    # "10" vs "chr1": string compare, digits sort before letters
    assert contig_order(ten, GenomicInterval("chr1", 1, 10)) < 0


def test_same_contig_orders_by_start():
    first = GenomicInterval("1", 5, 100)
    second = GenomicInterval("1", 6, 7)

    assert contig_order(first, second) < 0
    assert contig_order(second, first) > 0
    assert contig_order(first, GenomicInterval("1", 5, 9)) == 0

    named = GenomicInterval("chrM", 20, 30)
    assert contig_order(named, GenomicInterval("chrM", 10, 40)) > 0


def test_sort_with_injected_comparator():
    intervals = [GenomicInterval("1", 5, 6), GenomicInterval("1", 1, 2)]

    def reverse(a, b):
        return -contig_order(a, b)

    assert coords(sort_intervals(intervals, reverse)) == [("1", 5, 6), ("1", 1, 2)]


def test_merge_bases_two_windows():
    bases = [base("1", p) for p in (5, 6, 7, 10, 11)]

    assert coords(merge_bases(bases)) == [("1", 5, 7), ("1", 10, 11)]


def test_merge_bases_final_window_ends_one_past_last_contiguous_base():
    # Last element is never inspected: the running window ends at 11 and
    # is closed with end + 1, while earlier windows end on their last base.
    bases = [base("1", p) for p in (1, 2, 5, 6, 7, 10, 11, 40)]

    assert coords(merge_bases(bases)) == [("1", 1, 2), ("1", 5, 7), ("1", 10, 12)]


def test_merge_bases_contiguous_run_with_gap_before_last():
    bases = [base("1", p) for p in (1, 2, 5, 6, 7, 30)]

    assert coords(merge_bases(bases)) == [("1", 1, 2), ("1", 5, 8)]


def test_merge_bases_splits_on_contig_change():
    bases = [base("1", 5), base("1", 6), base("2", 1), base("2", 2), base("2", 3)]

    assert coords(merge_bases(bases)) == [("1", 5, 6), ("2", 1, 3)]


def test_merge_bases_sorts_input_first():
    bases = [base("1", p) for p in (11, 5, 10, 7, 6)]

    assert coords(merge_bases(bases)) == [("1", 5, 7), ("1", 10, 11)]
    # input list is left untouched
    assert [b.start for b in bases] == [11, 5, 10, 7, 6]


@pytest.mark.parametrize("positions", [[], [5]])
def test_merge_bases_degenerate_inputs_emit_nothing(positions):
    assert merge_bases([base("1", p) for p in positions]) == []


def test_merge_bases_two_elements():
    assert coords(merge_bases([base("1", 5), base("1", 9)])) == [("1", 5, 6)]


def test_left_padding_clamps_at_one():
    interval = GenomicInterval("1", 10, 20, name="amp")

    assert interval.left_padded(5).start == 5
    assert interval.left_padded(10).start == 1
    assert interval.left_padded(50).start == 1
    assert interval.left_padded(5).name == "amp"
    # original is unchanged
    assert interval.start == 10


def test_right_padding_is_unbounded():
    interval = GenomicInterval("1", 10, 20)

    assert interval.right_padded(1000).end == 1020
    assert interval.padded(3) == GenomicInterval("1", 7, 23)


def test_equality_ignores_metadata():
    a = GenomicInterval("1", 10, 20, name="a", upstream_primer_length=3)
    b = GenomicInterval("1", 10, 20, name="b", downstream_primer_length=4)

    assert a == b
    assert hash(a) == hash(b)
    assert a != GenomicInterval("1", 10, 21)
    assert str(a) == "1:10-20"
    assert a.concatenated_position == "1:10"
    assert a.length == 11


def test_contig_sort_key_matches_default_sort():
    intervals = [
        GenomicInterval("10", 1, 10),
        GenomicInterval("2", 50, 60),
        GenomicInterval("2", 5, 6),
    ]

    assert sorted(intervals, key=contig_sort_key) == sort_intervals(intervals)
    assert coords(sort_intervals(intervals)) == [("2", 5, 6), ("2", 50, 60), ("10", 1, 10)]
