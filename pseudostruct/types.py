# pseudostruct/types.py
from __future__ import annotations

from typing import Tuple, TypeAlias, Union

Shape: TypeAlias = Tuple[int, ...]
Coordinate: TypeAlias = Tuple[int, ...]
Index: TypeAlias = Union[int, Coordinate]
