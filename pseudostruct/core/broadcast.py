# pseudostruct/core/broadcast.py
"""
Elementwise application of a function over array-like operands.

Each operand reports a broadcast style. Styles are combined pairwise to
pick the one that allocates the output; shapes follow NumPy's broadcasting
rules on the operands' logical shapes.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import reduce
from typing import Any, Callable, Optional, Protocol, runtime_checkable

import numpy as np
from numpy.typing import DTypeLike

from pseudostruct.types import Coordinate, Shape

logger = logging.getLogger(__name__)


@runtime_checkable
class ElementwiseOperand(Protocol):
    """Anything with a shape that can be read by coordinate tuple."""

    @property
    def shape(self) -> Shape: ...

    def __getitem__(self, index: Any) -> Any: ...


@dataclass(frozen=True, slots=True)
class BroadcastStyle:
    ndim: int

    def combine(self, other: BroadcastStyle) -> BroadcastStyle:
        raise NotImplementedError

    def allocate(self, shape: Shape, dtype: DTypeLike) -> np.ndarray:
        raise NotImplementedError


@dataclass(frozen=True, slots=True)
class ArrayStyle(BroadcastStyle):
    """Plain NumPy arrays and scalars."""

    def combine(self, other: BroadcastStyle) -> BroadcastStyle:
        if isinstance(other, ArrayStyle):
            return ArrayStyle(max(self.ndim, other.ndim))
        return other.combine(self)

    def allocate(self, shape: Shape, dtype: DTypeLike) -> np.ndarray:
        return np.empty(shape, dtype=dtype)


@dataclass(frozen=True, slots=True)
class PseudoStructArrayStyle(BroadcastStyle):
    """
    Style of a PseudoStructArray operand. Wins over ArrayStyle, and takes
    part at the view's logical rank rather than its buffer's rank.
    """

    def combine(self, other: BroadcastStyle) -> BroadcastStyle:
        return PseudoStructArrayStyle(max(self.ndim, other.ndim))

    def allocate(self, shape: Shape, dtype: DTypeLike) -> np.ndarray:
        # Results are arbitrary values, not records: always a plain buffer.
        return np.empty(shape, dtype=dtype)


def _as_operand(value: Any) -> Any:
    if isinstance(value, (list, tuple)):
        return np.asarray(value)
    return value


def shape_of(operand: Any) -> Shape:
    """Logical shape of an operand; anything without one is a scalar."""
    return tuple(getattr(operand, "shape", ()))


def style_of(operand: Any) -> BroadcastStyle:
    style = getattr(operand, "broadcast_style", None)
    if style is not None:
        return style()
    return ArrayStyle(len(shape_of(operand)))


def combine_styles(*styles: BroadcastStyle) -> BroadcastStyle:
    return reduce(lambda a, b: a.combine(b), styles, ArrayStyle(0))


def broadcast_shape(*operands: Any) -> Shape:
    return np.broadcast_shapes(*(shape_of(op) for op in operands))


def _element(operand: Any, out_index: Coordinate) -> Any:
    shape = shape_of(operand)

    # Align on trailing axes; extent-1 axes repeat.
    tail = out_index[len(out_index) - len(shape):] if shape else ()
    index = tuple(0 if n == 1 else i for i, n in zip(tail, shape))

    unsafe_get = getattr(operand, "unsafe_get", None)
    if unsafe_get is not None:
        return unsafe_get(index)
    if shape or isinstance(operand, np.ndarray):
        return operand[index]
    return operand


def result_dtype(*values: Any) -> np.dtype:
    """
    Dtype able to hold every one of ``values``: the promotion of their
    NumPy dtypes, or ``object`` if any value is a record or other object.
    """
    numeric = (bool, int, float, complex, np.generic)
    if not all(isinstance(v, numeric) for v in values):
        return np.dtype(object)
    return reduce(np.promote_types, {np.asarray(v).dtype for v in values})


def broadcast(
    func: Callable[..., Any],
    *operands: Any,
    dtype: Optional[DTypeLike] = None,
) -> np.ndarray:
    """
    Apply ``func`` elementwise over the broadcast of ``operands``.

    The output is always a plain ``numpy.ndarray``. Without ``dtype`` every
    element is computed first and the result type is the promotion of all
    of them, so mixed ``int``/``float`` results come back as ``float64``.
    """
    operands = tuple(_as_operand(op) for op in operands)
    style = combine_styles(*(style_of(op) for op in operands))
    shape = broadcast_shape(*operands)

    indices = list(np.ndindex(shape))
    results = [
        func(*(_element(op, index) for op in operands)) for index in indices
    ]

    if dtype is None:
        dtype = result_dtype(*results) if results else np.float64

    out = style.allocate(shape, dtype)
    for index, value in zip(indices, results):
        out[index] = value

    logger.debug(
        "Broadcast %s over %d operand(s) -> shape=%s dtype=%s",
        getattr(func, "__name__", func),
        len(operands),
        shape,
        out.dtype,
    )
    return out
