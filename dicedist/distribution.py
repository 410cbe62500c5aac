import functools
import itertools
import logging
import math
import random
import typing

import pandas

from dicedist.errors import ConstructionError
from dicedist.faces import (
    count_faces,
    flatten_faces,
    is_sequence,
    map_faces,
    normalize_pred,
    sum_faces,
)
from dicedist.grouping import JoinFn, KeyFn, bucket_pairs, default_reroll_key
from dicedist.reroll import (
    CleanupFn,
    Continue,
    ExplodeSummary,
    MapFn,
    SummarizeFn,
    Terminal,
    resolve,
)

logger = logging.getLogger(__name__)

Comparator = typing.Callable[[typing.Any, typing.Any], typing.Any]


def _descending(key: typing.Callable) -> Comparator:
    return lambda a, b: key(b) - key(a)


def _as_faces(value) -> typing.Tuple:
    return tuple(value) if is_sequence(value) else (value,)


class Distribution:
    """All the outcomes of a roll.

    `results` is a list of [value, weight] pairs. The weights are meant to
    sum to 1 but nothing enforces it; call normalize() for that.
    """

    def __init__(self, value=()) -> None:
        self.results: typing.List[typing.List[typing.Any]] = [[value, 1]]

    @classmethod
    def point(cls, value) -> "Distribution":
        return cls(value)

    @classmethod
    def from_pairs(cls, pairs: typing.Iterable[typing.Sequence]) -> "Distribution":
        result = cls.__new__(cls)
        result.results = [[value, weight] for value, weight in pairs]
        return result

    @classmethod
    def from_faces(cls, faces: typing.Iterable) -> "Distribution":
        faces = list(faces)
        return cls.from_pairs((face, 1 / len(faces)) for face in faces)

    @classmethod
    def die(cls, sides) -> "Distribution":
        try:
            n = math.floor(sides)
        except (TypeError, ValueError, OverflowError):
            raise ConstructionError(
                "Dice must have at least one side, got %s." % (sides,)
            )
        if n < 1:
            raise ConstructionError("Dice must have at least one side, got %s." % n)
        return cls.from_pairs((i, 1 / n) for i in range(1, n + 1))

    @classmethod
    def nd(cls, count: int, die) -> "Distribution":
        """count copies of die, or of a die-sided die if die is a number.

        nd(2, 6) has 36 outcomes, from (1, 1) to (6, 6).
        """
        if not isinstance(die, Distribution):
            die = cls.die(die)
        return combine([die] * int(count))

    @classmethod
    def d4(cls) -> "Distribution":
        return cls.die(4)

    @classmethod
    def d6(cls) -> "Distribution":
        return cls.die(6)

    @classmethod
    def d8(cls) -> "Distribution":
        return cls.die(8)

    @classmethod
    def d10(cls) -> "Distribution":
        return cls.die(10)

    @classmethod
    def d12(cls) -> "Distribution":
        return cls.die(12)

    @classmethod
    def d20(cls) -> "Distribution":
        return cls.die(20)

    @classmethod
    def parse(cls, text: str) -> "Distribution":
        from dicedist.dice_parser import parse

        return parse(text)

    def __repr__(self) -> str:
        return "Distribution(%r)" % (self.results,)

    def and_(self, *others) -> "Distribution":
        return combine([self, *others])

    # functor / monad

    def map(self, fn: typing.Callable[[typing.Any], typing.Any]) -> "Distribution":
        return Distribution.from_pairs(
            (fn(value), weight) for value, weight in self.results
        )

    def join(self) -> "Distribution":
        """Expands any values that are Distributions into the outer one.

        Inner weights are scaled by the outer weight. Values that are not
        Distributions pass through unchanged.
        """
        pairs = []
        for value, weight in self.results:
            if isinstance(value, Distribution):
                pairs.extend(
                    (inner_value, weight * inner_weight)
                    for inner_value, inner_weight in value.results
                )
            else:
                pairs.append((value, weight))
        return Distribution.from_pairs(pairs)

    def flat_map(self, fn: typing.Callable[[typing.Any], typing.Any]) -> "Distribution":
        return self.map(fn).join()

    def map_faces(self, fn: typing.Callable[[typing.Any], typing.Any]) -> "Distribution":
        return self.map(lambda faces: map_faces(faces, fn))

    def normalize_faces(self) -> "Distribution":
        return self.map(flatten_faces)

    def normalize(self) -> "Distribution":
        total = sum(weight for _, weight in self.results)
        for pair in self.results:
            # a zero total leaves the weights undefined
            pair[1] = pair[1] / total if total else math.nan
        return self

    # grouping

    def bucket(
        self, key: KeyFn = str, join: typing.Optional[JoinFn] = None
    ) -> "Distribution":
        return Distribution.from_pairs(bucket_pairs(self.results, key, join))

    def sort(
        self,
        key: typing.Optional[typing.Callable] = None,
        sorter: typing.Optional[Comparator] = None,
    ) -> "Distribution":
        """Sorts the results in place.

        sorter, if given, compares two [value, weight] pairs; otherwise
        pairs are ordered by key(value).
        """
        if sorter is not None:
            self.results.sort(key=functools.cmp_to_key(sorter))
        elif key is None:
            self.results.sort(key=lambda pair: pair[0])
        else:
            self.results.sort(key=lambda pair: key(pair[0]))
        return self

    def sum(self) -> "Distribution":
        return self.bucket(sum_faces, lambda values: sum_faces(values[0])).sort()

    def count(self, target) -> "Distribution":
        return self.map(lambda faces: count_faces(faces, target)).bucket().sort()

    def replace(self, pred, repl) -> "Distribution":
        return (
            self.flat_map(lambda faces: replace_faces(faces, pred, repl))
            .bucket()
            .sort()
        )

    # order statistics

    def _sorted_faces(self, compare: Comparator, pick) -> "Distribution":
        sort_key = functools.cmp_to_key(compare)
        return self.map(
            lambda faces: pick(tuple(sorted(_as_faces(faces), key=sort_key)))
        )

    def keep_highest(
        self, n: int = 1, key=sum_faces, compare: typing.Optional[Comparator] = None
    ) -> "Distribution":
        compare = compare or _descending(key)
        return self._sorted_faces(compare, lambda faces: faces[:n]).bucket().sort(key)

    def keep_lowest(
        self, n: int = 1, key=sum_faces, compare: typing.Optional[Comparator] = None
    ) -> "Distribution":
        compare = compare or _descending(key)
        return (
            self._sorted_faces(compare, lambda faces: faces[max(len(faces) - n, 0):])
            .bucket()
            .sort(key)
        )

    def drop_highest(
        self, n: int = 1, key=sum_faces, compare: typing.Optional[Comparator] = None
    ) -> "Distribution":
        compare = compare or _descending(key)
        return self._sorted_faces(compare, lambda faces: faces[n:]).bucket().sort(key)

    def drop_lowest(
        self, n: int = 1, key=sum_faces, compare: typing.Optional[Comparator] = None
    ) -> "Distribution":
        compare = compare or _descending(key)
        return (
            self._sorted_faces(compare, lambda faces: faces[: max(len(faces) - n, 0)])
            .bucket()
            .sort(key)
        )

    def advantage(
        self, n: int = 2, key=sum_faces, compare: typing.Optional[Comparator] = None
    ) -> "Distribution":
        return Distribution.nd(n, self).keep_highest(1, key, compare)

    def disadvantage(
        self, n: int = 2, key=sum_faces, compare: typing.Optional[Comparator] = None
    ) -> "Distribution":
        return Distribution.nd(n, self).keep_lowest(1, key, compare)

    # rerolls

    def reroll(
        self,
        map: MapFn,
        summarize: typing.Optional[SummarizeFn] = None,
        key: KeyFn = default_reroll_key,
        join: typing.Optional[JoinFn] = None,
        cleanup: typing.Optional[CleanupFn] = None,
        threshold: typing.Optional[float] = None,
        roll_max: typing.Optional[int] = None,
        bucketed: bool = True,
    ) -> "Distribution":
        """Rerolls any or all of the outcomes.

        Like map(summarize), then flat_map(map), then bucket(key, join),
        except that outcomes whose map step is Continue(distribution) get
        that distribution rolled again in a further round instead of being
        flattened in straight away. See dicedist.reroll for the details.

        Making a d5 out of a d6 by rerolling every 6:

            Distribution.d6().reroll(
                lambda face, round_: Continue(Distribution.d6())
                if face == 6
                else Terminal(face)
            )
        """
        return Distribution.from_pairs(
            resolve(
                self.results,
                map,
                summarize=summarize,
                key=key,
                join=join,
                cleanup=cleanup,
                threshold=threshold,
                roll_max=roll_max,
                bucketed=bucketed,
            )
        )

    def explode(
        self,
        threshold=None,
        pred: typing.Optional[typing.Callable[[typing.Any, typing.Any], bool]] = None,
        sum_fn: typing.Callable[[typing.Any], typing.Any] = sum_faces,
        times: float = math.inf,
    ) -> "Distribution":
        """An exploding version of this roll.

        Whenever an exploding value comes up the roll is made again and
        added to the running total. By default the highest value explodes;
        threshold can instead be a number (explode at or above it) or a
        function of the list of values returning that number. pred, if
        given, is called with (rolled sum, rolled faces) and decides
        directly. times caps how many times a single roll may explode.
        """
        if pred is None:
            if threshold is None:
                threshold = max(
                    (sum_fn(value) for value, _ in self.results), default=0
                )
            elif callable(threshold):
                threshold = threshold([value for value, _ in self.results])
            limit = threshold
            pred = lambda val, faces: val >= limit

        def summarize(faces, prior: typing.Optional[ExplodeSummary], round_: int):
            val = sum_fn(faces)
            total = val + (0 if prior is None else prior.total)
            return ExplodeSummary(val, total, pred(val, faces))

        def step(summary: ExplodeSummary, round_: int):
            if round_ > times or not summary.explodes:
                return Terminal(summary.total)
            return Continue(self)

        return self.reroll(step, summarize=summarize)

    # observations

    def _draw(self, rng):
        total = sum(weight for _, weight in self.results)
        target = rng.random() * total
        so_far = 0
        for value, weight in self.results:
            so_far += weight
            if so_far >= target:
                return value
        # floating point can leave the running total just short of target
        return self.results[-1][0]

    def roll(self, n: typing.Optional[int] = None, rng=random):
        if n is None:
            return self._draw(rng)
        return [self._draw(rng) for _ in range(int(n))]

    def average(self, fn=sum_faces) -> float:
        return sum(fn(value) * weight for value, weight in self.results)

    def min(self, fn=sum_faces):
        return min((fn(value) for value, _ in self.results), default=math.inf)

    def max(self, fn=sum_faces):
        return max((fn(value) for value, _ in self.results), default=-math.inf)

    def probability(self, event) -> float:
        pred = normalize_pred(event)
        return sum(weight for value, weight in self.results if pred(value))

    def probability_table(self) -> typing.Dict[typing.Any, float]:
        result: typing.Dict[typing.Any, float] = {}
        for value, weight in self.results:
            result.setdefault(value, 0.0)
            result[value] += weight
        return result

    def to_frame(self) -> pandas.DataFrame:
        return pandas.DataFrame(
            {
                "value": [value for value, _ in self.results],
                "weight": [weight for _, weight in self.results],
            }
        )


def combine(items: typing.Iterable) -> Distribution:
    """Turns a list of Distributions and fixed values into one Distribution
    of tuples, one position per item.

    combine([d6, 5, d6]) has outcomes (1, 5, 1), (1, 5, 2), ..., (6, 5, 6).
    Fixed values stay where they are and do not multiply the outcome count.
    """
    items = list(items)
    positions = [i for i, item in enumerate(items) if isinstance(item, Distribution)]
    if not positions:
        return Distribution(tuple(items))

    logger.debug(
        "combining %s distributions into %s outcomes",
        len(positions),
        math.prod(len(items[i].results) for i in positions),
    )
    pairs = []
    for chosen in itertools.product(*(items[i].results for i in positions)):
        value = list(items)
        weight = 1
        for i, (face, inner_weight) in zip(positions, chosen):
            value[i] = face
            weight *= inner_weight
        pairs.append((tuple(value), weight))
    return Distribution.from_pairs(pairs)


def and_(*items) -> Distribution:
    return combine(items)


def replace_faces(faces, pred, repl) -> Distribution:
    """Replaces every face matching pred with repl.

    pred may be a predicate or a value to compare against. repl may be a
    fixed value, a function of the face, or a Distribution; Distribution
    replacements are combined into the outcomes.
    """
    pred = normalize_pred(pred)
    replaced = []
    for face in flatten_faces(faces):
        if not pred(face):
            replaced.append(face)
        elif callable(repl):
            replaced.append(repl(face))
        else:
            replaced.append(repl)
    return combine(replaced)


point = Distribution.point
from_pairs = Distribution.from_pairs
from_faces = Distribution.from_faces
die = Distribution.die
nd = Distribution.nd
