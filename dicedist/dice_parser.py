import os
import re
import typing

import lark

import dicedist.distribution as distribution
from dicedist.errors import ParseError

KEEP_RULES = {
    "k": distribution.Distribution.keep_highest,
    "kh": distribution.Distribution.keep_highest,
    "kl": distribution.Distribution.keep_lowest,
    "d": distribution.Distribution.drop_lowest,
    "dl": distribution.Distribution.drop_lowest,
    "dh": distribution.Distribution.drop_highest,
}

ADVANTAGE_RULES = {
    "adv": distribution.Distribution.advantage,
    "dis": distribution.Distribution.disadvantage,
}

DEFAULT_ADVANTAGE_ROLLS = 2


def _sign(token: typing.Optional[lark.Token]) -> int:
    return -1 if token == "-" else 1


@lark.v_args(inline=True)
class _DiceParser(lark.Transformer):
    def constant(self, sign, number):
        return _sign(sign) * int(number)

    def keep(self, rule, number):
        return KEEP_RULES[str(rule)], int(number)

    def advantage(self, rule, number):
        rolls = DEFAULT_ADVANTAGE_ROLLS if number is None else int(number)
        return ADVANTAGE_RULES[str(rule)], rolls

    def dice(self, sign, count, sides, keep, advantage):
        roll = distribution.Distribution.nd(int(count), int(sides))
        if keep is not None:
            rule, n = keep
            roll = rule(roll, n)
        if advantage is not None:
            rule, n = advantage
            roll = rule(roll, n)
        factor = _sign(sign)
        return roll.map_faces(lambda face: face * factor)


_grammar_file = os.path.join(os.path.dirname(__file__), "dice.lark")
with open(_grammar_file) as _f:
    _grammar = lark.Lark(_f, parser="lalr", start="term")


def split_terms(text: str) -> typing.List[str]:
    terms = re.split(r"(?=[+-])", re.sub(r"\s+", "", text))
    if terms and terms[0] == "":
        terms.pop(0)
    return terms


def parse_term(term: str):
    """Compiles a single signed term into an int or a Distribution."""
    try:
        return _DiceParser().transform(_grammar.parse(term))
    except lark.exceptions.VisitError as e:
        raise e.orig_exc
    except lark.exceptions.LarkError:
        raise ParseError(term)


def parse(text: str) -> distribution.Distribution:
    """Compiles dice notation like `4d6dl1+2` or `-1d20adv+5` into a
    Distribution with one position per term.

    Each dice term contributes a tuple of its (kept) faces, each constant
    term its value; call sum() on the result for the usual totals.
    """
    return distribution.combine(parse_term(term) for term in split_terms(text))
