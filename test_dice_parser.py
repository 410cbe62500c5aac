"""
Dice Notation Test Suite

Covers:
    1. Term splitting
    2. Constants and plain dice
    3. Keep/drop suffixes
    4. Advantage/disadvantage suffixes
    5. Errors
"""
import pytest

from dicedist import (
    ConstructionError,
    Distribution,
    ParseError,
    combine,
    die,
    nd,
    parse,
)
from dicedist.dice_parser import split_terms


def same_totals(a, b):
    a_probs = a.sum().probability_table()
    b_probs = b.sum().probability_table()
    if a_probs.keys() != b_probs.keys():
        return False
    return all(a_probs[k] == pytest.approx(b_probs[k]) for k in a_probs)


# ── 1. SPLITTING ─────────────────────────────────────────────────────────────


class TestSplitTerms:
    def test_split_before_signs(self):
        assert split_terms("2d6+1d4-5") == ["2d6", "+1d4", "-5"]

    def test_leading_sign(self):
        assert split_terms("-1d6+2") == ["-1d6", "+2"]

    def test_whitespace_removed(self):
        assert split_terms(" 2 d6 +\t3 ") == ["2d6", "+3"]

    def test_empty(self):
        assert split_terms("") == []


# ── 2. CONSTANTS AND DICE ────────────────────────────────────────────────────


class TestBasicTerms:
    def test_mixed_expression_matches_direct_build(self):
        parsed = parse("2d6+1d4-5")
        direct = combine([combine([die(6), die(6)]), die(4), -5])
        assert same_totals(parsed, direct)
        assert [v for v, _ in parsed.sum().results] == [
            v for v, _ in direct.sum().results
        ]

    def test_constant(self):
        assert parse("5").results == [[(5,), 1]]
        assert parse("-5").sum().results == [[-5, 1]]

    def test_dice(self):
        assert same_totals(parse("3d6"), nd(3, 6))

    def test_negative_dice(self):
        totals = parse("-1d6").sum()
        assert [v for v, _ in totals.results] == [-6, -5, -4, -3, -2, -1]

    def test_constants_only(self):
        assert parse("1+2-3").sum().results == [[0, 1]]

    def test_empty_expression(self):
        assert parse("").results == [[(), 1]]

    def test_classmethod(self):
        assert same_totals(Distribution.parse("1d8 + 2"), combine([die(8), 2]))


# ── 3. KEEP / DROP ───────────────────────────────────────────────────────────


class TestKeepDrop:
    @pytest.mark.parametrize("text", ["4d6k3", "4d6kh3", "4d6d1", "4d6dl1"])
    def test_keep_best_three_of_four(self, text):
        totals = parse(text).sum().probability_table()
        assert totals[18] == pytest.approx(21 / 1296)
        assert min(totals) == 3

    def test_keep_lowest_matches_drop_highest(self):
        assert same_totals(parse("2d6kl1"), parse("2d6dh1"))
        assert parse("2d6kl1").sum().probability_table()[1] == pytest.approx(11 / 36)

    def test_sign_applies_after_keep(self):
        totals = parse("-2d6kh1").sum()
        assert totals.max() == -1
        assert totals.probability_table()[-6] == pytest.approx(11 / 36)


# ── 4. ADVANTAGE ─────────────────────────────────────────────────────────────


class TestAdvantage:
    def test_advantage_defaults_to_two(self):
        totals = parse("1d20adv").sum().probability_table()
        assert totals[20] == pytest.approx(39 / 400)
        assert totals[1] == pytest.approx(1 / 400)

    def test_disadvantage(self):
        totals = parse("1d20dis").sum().probability_table()
        assert totals[1] == pytest.approx(39 / 400)

    def test_advantage_count(self):
        totals = parse("1d20adv3").sum().probability_table()
        assert totals[1] == pytest.approx(1 / 8000)

    def test_keep_then_advantage(self):
        assert same_totals(parse("2d6kh1adv"), nd(2, 6).keep_highest(1).advantage())

    def test_advantage_with_modifier(self):
        totals = parse("1d20adv+5").sum()
        assert totals.min() == 6
        assert totals.max() == 25


# ── 5. ERRORS ────────────────────────────────────────────────────────────────


class TestErrors:
    @pytest.mark.parametrize(
        "text,term",
        [
            ("2x6", "2x6"),
            ("d6", "d6"),
            ("1d6+foo", "+foo"),
            ("2d6k", "2d6k"),
            ("1d6++2", "+"),
            ("3d6adv2x", "3d6adv2x"),
        ],
    )
    def test_bad_term(self, text, term):
        with pytest.raises(ParseError) as e:
            parse(text)
        assert e.value.term == term
        assert term in str(e.value)

    def test_zero_sided_die(self):
        with pytest.raises(ConstructionError):
            parse("1d0")
