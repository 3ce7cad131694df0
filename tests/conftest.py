from dataclasses import dataclass
from typing import Generic, NamedTuple, TypeVar

import numpy as np
import pytest

from pseudostruct.core.array import PseudoStructArray

T = TypeVar("T")


@dataclass(frozen=True)
class Point3D:
    x: float
    y: float
    z: float


@dataclass(frozen=True)
class Point2D(Generic[T]):
    x: T
    y: T


@dataclass(frozen=True)
class RGBA:
    r: np.float32
    g: np.float32
    b: np.float32
    a: np.float32


class Span(NamedTuple):
    start: int
    stop: int


@dataclass
class Empty:
    pass


@dataclass
class Mixed:
    x: float
    n: int


@dataclass
class Tagged(Generic[T]):
    """Generic, but no field depends on T."""

    x: float
    y: float


@pytest.fixture
def data():
    """12 contiguous values as 4 elements x 3 fields, field-major."""
    return np.arange(12.0).reshape(4, 3, order="F")


@pytest.fixture
def points(data):
    return PseudoStructArray(Point3D, data)


@pytest.fixture
def grid_data():
    """3x4 grid of 2-field elements holding 1.0 .. 24.0."""
    return np.arange(1.0, 25.0).reshape(3, 4, 2, order="F")


@pytest.fixture
def grid(grid_data):
    return PseudoStructArray(Point2D[np.float64], grid_data)
