# pseudostruct/core/indexing.py
"""
Index mapping between logical elements and backing-buffer slots.

Linear indices run in column-major order (first dimension fastest). With
that convention, field ``k`` of linear element ``i`` lives at offset
``i + k * length`` of the buffer's column-major flattening: all values of
field 0 come first, then all values of field 1, and so on.
"""

from __future__ import annotations

import math
import operator
from typing import Any, Tuple, Union

from pseudostruct.errors import BoundsError
from pseudostruct.types import Coordinate, Shape


def normalize_index(index: Any) -> Union[int, Coordinate]:
    """Coerce an index to a linear ``int`` or a coordinate tuple."""
    if isinstance(index, tuple):
        try:
            return tuple(operator.index(i) for i in index)
        except TypeError:
            raise TypeError(
                f"coordinates must be integers, not {index!r}"
            ) from None

    try:
        return operator.index(index)
    except TypeError:
        raise TypeError(
            f"indices must be int or tuple of int, not {type(index).__name__}"
        ) from None


def length(shape: Shape) -> int:
    return math.prod(shape)


def check_linear(i: int, n: int) -> None:
    if not 0 <= i < n:
        raise BoundsError(f"index {i} out of range [0, {n})")


def check_coordinate(coords: Coordinate, shape: Shape) -> None:
    if len(coords) != len(shape):
        raise BoundsError(
            f"expected {len(shape)} coordinates, got {len(coords)}"
        )
    for axis, (c, extent) in enumerate(zip(coords, shape)):
        if not 0 <= c < extent:
            raise BoundsError(
                f"coordinate {coords} out of range for shape {shape} "
                f"(axis {axis})"
            )


def check_field(k: int, nfields: int) -> None:
    if not 0 <= k < nfields:
        raise BoundsError(f"field index {k} out of range [0, {nfields})")


def field_offset(i: int, k: int, stride: int) -> int:
    return i + k * stride


def unravel(offset: int, shape: Shape) -> Coordinate:
    """Column-major offset -> coordinate."""
    coords = []
    for extent in shape:
        offset, c = divmod(offset, extent)
        coords.append(c)
    return tuple(coords)


def linear_coordinate(i: int, k: int, shape: Shape, nfields: int) -> Coordinate:
    """Buffer coordinate of field ``k`` of linear element ``i``."""
    return unravel(field_offset(i, k, length(shape)), shape + (nfields,))


def cartesian_coordinate(coords: Coordinate, k: int) -> Coordinate:
    return coords + (k,)


def field_coordinates(
    index: Union[int, Coordinate], shape: Shape, nfields: int
) -> Tuple[Coordinate, ...]:
    """Buffer coordinates of every field of one element, in field order."""
    if isinstance(index, tuple):
        return tuple(cartesian_coordinate(index, k) for k in range(nfields))
    return tuple(
        linear_coordinate(index, k, shape, nfields) for k in range(nfields)
    )
