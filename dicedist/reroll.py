"""The fixed-point reroll loop.

A reroll resolves a list of (value, weight) pairs by repeatedly asking a
map callback what each (summarized) value becomes. The callback answers
with one of three steps:

    Terminal(value)      the value is final
    Done(distribution)   splice the distribution's outcomes in as final
    Continue(distribution)
                         roll the distribution again next round

Rounds continue until nothing is pending, the pending weight drops to the
threshold, or the round count passes roll_max. Mass still pending at a
threshold stop goes to cleanup if one is given and is dropped otherwise.
"""

import logging
import typing

from dicedist import settings as _settings
from dicedist.errors import RerollOverflowError
from dicedist.grouping import JoinFn, KeyFn, Pair, bucket_pairs, default_reroll_key

logger = logging.getLogger(__name__)


class Step:
    pass


class Terminal(Step):
    def __init__(self, value) -> None:
        self.value = value

    def __repr__(self) -> str:
        return "Terminal(%r)" % (self.value,)


class Continue(Step):
    def __init__(self, distribution) -> None:
        self.distribution = distribution

    def __repr__(self) -> str:
        return "Continue(%r)" % (self.distribution,)


class Done(Step):
    def __init__(self, distribution) -> None:
        self.distribution = distribution

    def __repr__(self) -> str:
        return "Done(%r)" % (self.distribution,)


# (distribution still to roll, weight reaching it, summary it came from)
Pending = typing.Tuple[typing.Any, typing.Any, typing.Any]

SummarizeFn = typing.Callable[[typing.Any, typing.Any, int], typing.Any]
MapFn = typing.Callable[[typing.Any, int], Step]
CleanupFn = typing.Callable[[typing.List[Pending]], typing.Iterable[typing.Sequence]]


class ExplodeSummary:
    """Running state of an exploding die between rounds."""

    def __init__(self, val, total, explodes: bool) -> None:
        self.val = val
        self.total = total
        self.explodes = explodes

    @property
    def key(self) -> str:
        return "%s:%s" % (self.val, self.total)

    def __repr__(self) -> str:
        return "ExplodeSummary(val=%r, total=%r, explodes=%r)" % (
            self.val,
            self.total,
            self.explodes,
        )


def _classify(
    step: Step,
    weight,
    summary,
    finished: typing.List[Pair],
    unfinished: typing.List[Pending],
) -> None:
    if isinstance(step, Terminal):
        finished.append([step.value, weight])
    elif isinstance(step, Done):
        finished.extend(
            [value, weight * inner] for value, inner in step.distribution.results
        )
    elif isinstance(step, Continue):
        unfinished.append((step.distribution, weight, summary))
    else:
        raise TypeError(
            "reroll map must return Terminal, Continue or Done, got %r" % (step,)
        )


def resolve(
    pairs: typing.Iterable[typing.Sequence],
    map: MapFn,
    summarize: typing.Optional[SummarizeFn] = None,
    key: KeyFn = default_reroll_key,
    join: typing.Optional[JoinFn] = None,
    cleanup: typing.Optional[CleanupFn] = None,
    threshold: typing.Optional[float] = None,
    roll_max: typing.Optional[int] = None,
    bucketed: bool = True,
) -> typing.List[Pair]:
    if threshold is None:
        threshold = _settings.settings["reroll_threshold"]
    if roll_max is None:
        roll_max = _settings.settings["reroll_max"]

    if summarize is not None:
        pairs = [[summarize(value, None, 1), weight] for value, weight in pairs]
    if bucketed:
        pairs = bucket_pairs(pairs, key, join)

    finished: typing.List[Pair] = []
    unfinished: typing.List[Pending] = []
    for value, weight in pairs:
        _classify(map(value, 1), weight, value, finished, unfinished)

    round_ = 2
    while unfinished:
        if round_ > roll_max:
            raise RerollOverflowError(roll_max)
        pending_weight = sum(weight for _, weight, _ in unfinished)
        logger.debug(
            "reroll round %s: %s pending entries, weight %s",
            round_,
            len(unfinished),
            pending_weight,
        )
        if pending_weight <= threshold:
            break

        expanded = []
        for distribution, weight, summary in unfinished:
            for value, inner in distribution.results:
                if summarize is not None:
                    value = summarize(value, summary, round_)
                expanded.append([value, weight * inner])
        if bucketed:
            expanded = bucket_pairs(expanded, key, join)

        unfinished = []
        for value, weight in expanded:
            _classify(map(value, round_), weight, value, finished, unfinished)
        round_ += 1

    if unfinished:
        if cleanup is not None:
            finished.extend([value, weight] for value, weight in cleanup(unfinished))
        else:
            logger.debug(
                "reroll stopped at round %s, dropping weight %s",
                round_,
                sum(weight for _, weight, _ in unfinished),
            )

    if bucketed:
        finished = bucket_pairs(finished, key, join)
    return finished
