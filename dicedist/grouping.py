import typing

Pair = typing.List[typing.Any]
KeyFn = typing.Callable[[typing.Any], typing.Hashable]
JoinFn = typing.Callable[[typing.List[typing.Any]], typing.Any]


def first(values: typing.List[typing.Any]):
    return values[0]


def bucket_pairs(
    pairs: typing.Iterable[typing.Sequence[typing.Any]],
    key: KeyFn = str,
    join: typing.Optional[JoinFn] = None,
) -> typing.List[Pair]:
    """Groups (value, weight) pairs by key(value), summing the weights.

    Buckets come out in the order their keys were first seen. join picks
    the value that represents each bucket; by default the first one.
    """
    if join is None:
        join = first
    buckets: typing.Dict[typing.Hashable, typing.List[typing.Sequence]] = {}
    for pair in pairs:
        buckets.setdefault(key(pair[0]), []).append(pair)

    result = []
    for grouped in buckets.values():
        total = sum(weight for _, weight in grouped)
        result.append([join([value for value, _ in grouped]), total])
    return result


def default_reroll_key(value) -> typing.Hashable:
    """Returns value.key if the value has one, otherwise str(value)."""
    if hasattr(value, "key"):
        return value.key
    return str(value)
