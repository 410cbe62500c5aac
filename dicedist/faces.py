"""Helpers over face values.

A face is either a scalar or a (possibly nested) tuple of faces. Nothing
here flattens implicitly except flatten_faces, which every other helper
goes through.
"""

import typing

Face = typing.Any
Predicate = typing.Callable[[typing.Any], bool]


def is_sequence(value) -> bool:
    return isinstance(value, (tuple, list))


def flatten_faces(faces: Face) -> typing.Tuple:
    """Turns faces into a flat tuple of scalars.

    `1` becomes `(1,)`, `((1, 2), (3, 4))` becomes `(1, 2, 3, 4)`.
    """
    if not is_sequence(faces):
        return (faces,)
    result = []
    for face in faces:
        result.extend(flatten_faces(face))
    return tuple(result)


def sum_faces(faces: Face):
    return sum(flatten_faces(faces))


def normalize_pred(pred) -> Predicate:
    if callable(pred):
        return pred
    return lambda face: face == pred


def count_faces(faces: Face, pred) -> int:
    pred = normalize_pred(pred)
    return sum(1 for face in flatten_faces(faces) if pred(face))


def map_faces(faces: Face, fn: typing.Callable[[typing.Any], typing.Any]) -> Face:
    if is_sequence(faces):
        return tuple(map_faces(face, fn) for face in faces)
    return fn(faces)
