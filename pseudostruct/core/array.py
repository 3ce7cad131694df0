# pseudostruct/core/array.py
from __future__ import annotations

import logging
from typing import (
    Any,
    Callable,
    Dict,
    Generic,
    Iterator,
    Optional,
    Tuple,
    TypeVar,
)

import numpy as np
from numpy.typing import DTypeLike

from pseudostruct.core.broadcast import PseudoStructArrayStyle, broadcast
from pseudostruct.core.descriptor import (
    RecordDescriptor,
    concretize,
    describe,
    is_generic_record,
    is_scalar_type,
    type_name,
)
from pseudostruct.core.field_view import field_view, field_views
from pseudostruct.core.indexing import (
    check_coordinate,
    check_linear,
    field_coordinates,
    length,
    normalize_index,
)
from pseudostruct.core.registry import DescriptorRegistry
from pseudostruct.errors import (
    RankError,
    ShapeMismatchError,
    TypeMismatchError,
    UnknownFieldError,
)
from pseudostruct.settings import DEFAULT_SETTINGS, ViewSettings
from pseudostruct.types import Coordinate, Index, Shape

logger = logging.getLogger(__name__)

R = TypeVar("R")


class PseudoStructArray(Generic[R]):
    """
    An array of homogeneous records backed by an ``(N+1)``-dimensional
    NumPy array whose last axis holds the record fields.

    Records are built on read and scattered back on write; nothing is
    copied. Field slices are available by index (``field_view``) or by
    name (``points.x``).

    Example::

        data = np.arange(12.0).reshape(4, 3, order="F")
        points = PseudoStructArray(Point3D, data)
        points[0]  # Point3D(x=0.0, y=4.0, z=8.0)

    A field whose name is also an attribute of the array (``size``,
    ``shape``, ``map``, ...) reads as that attribute and cannot be
    assigned by name; reach it through ``field_views()`` instead.
    """

    __slots__ = ("_parent", "_descriptor", "_shape", "_settings")

    def __init__(
        self,
        record_type: type[R],
        parent: np.ndarray,
        settings: Optional[ViewSettings] = None,
    ) -> None:
        if not isinstance(parent, np.ndarray):
            raise TypeError(
                f"parent must be a numpy.ndarray, not {type(parent).__name__}"
            )

        if is_generic_record(record_type):
            record_type = concretize(record_type, parent.dtype.type)

        descriptor = describe(record_type)

        if parent.ndim < 1:
            raise RankError("Parent array must have at least 1 dimension")
        if parent.dtype != descriptor.dtype:
            raise TypeMismatchError(
                f"Element type of parent array ({parent.dtype}) must match "
                f"field type ({descriptor.dtype})"
            )
        if parent.shape[-1] != descriptor.nfields:
            raise ShapeMismatchError(
                f"Last dimension size ({parent.shape[-1]}) must match "
                f"number of fields ({descriptor.nfields})"
            )

        object.__setattr__(self, "_parent", parent)
        object.__setattr__(self, "_descriptor", descriptor)
        object.__setattr__(self, "_shape", parent.shape[:-1])
        object.__setattr__(self, "_settings", settings or DEFAULT_SETTINGS)

        logger.debug(
            "Wrapped %s buffer %s as %s view of shape %s",
            parent.dtype,
            parent.shape,
            type_name(record_type),
            self._shape,
        )

    # --- Shape & type queries ---

    @property
    def parent(self) -> np.ndarray:
        return self._parent

    @property
    def descriptor(self) -> RecordDescriptor:
        return self._descriptor

    @property
    def settings(self) -> ViewSettings:
        return self._settings

    @property
    def element_type(self) -> type[R]:
        return self._descriptor.record_type

    @property
    def dtype(self) -> np.dtype:
        """Scalar dtype of the backing buffer."""
        return self._parent.dtype

    @property
    def field_names(self) -> Tuple[str, ...]:
        return self._descriptor.names

    @property
    def shape(self) -> Shape:
        return self._shape

    @property
    def ndim(self) -> int:
        return len(self._shape)

    @property
    def size(self) -> int:
        return length(self._shape)

    def __len__(self) -> int:
        return self.size

    # --- Element access ---

    def _locate(self, index: Any) -> Index:
        key = normalize_index(index)
        if self._settings.check_bounds:
            if isinstance(key, tuple):
                check_coordinate(key, self._shape)
            else:
                check_linear(key, self.size)
        return key

    def _gather(self, key: Index) -> R:
        parent = self._parent
        coords = field_coordinates(key, self._shape, self._descriptor.nfields)
        return self._descriptor.construct(tuple(parent[c] for c in coords))

    def __getitem__(self, index: Any) -> R:
        return self._gather(self._locate(index))

    def __setitem__(self, index: Any, record: R) -> None:
        key = self._locate(index)
        values = self._descriptor.destructure(record)

        parent = self._parent
        coords = field_coordinates(key, self._shape, self._descriptor.nfields)
        for c, v in zip(coords, values):
            parent[c] = v

    def unsafe_get(self, coords: Coordinate) -> R:
        """Read by coordinate without bounds checking (bulk operations)."""
        return self._gather(tuple(coords))

    def __iter__(self) -> Iterator[R]:
        """Yields records in linear (column-major) order."""
        for i in range(self.size):
            yield self._gather(i)

    def collect(self) -> np.ndarray:
        """Materialize all records into an object array of the same shape."""
        out = np.empty(self._shape, dtype=object)
        for index in np.ndindex(self._shape):
            out[index] = self._gather(index)
        return out

    # --- Field access ---

    def field_view(self, field: int) -> np.ndarray:
        return field_view(self, field)

    def field_views(self) -> Dict[str, np.ndarray]:
        return field_views(self)

    def __getattr__(self, name: str) -> np.ndarray:
        if name.startswith("_"):
            raise AttributeError(name)
        k = self._descriptor.field_index(name)
        return self._parent[..., k]

    def __setattr__(self, name: str, value: Any) -> None:
        if name in PseudoStructArray.__slots__:
            raise AttributeError(f"'{name}' is read-only")
        if hasattr(PseudoStructArray, name):
            raise AttributeError(
                f"'{name}' is an attribute of PseudoStructArray; "
                f"write the field through field_views()['{name}']"
            )
        try:
            k = self._descriptor.field_index(name)
        except UnknownFieldError:
            raise UnknownFieldError(
                f"Cannot set '{name}': not a field of "
                f"{type_name(self.element_type)}"
            ) from None
        self._parent[..., k] = value

    def __dir__(self):
        return sorted(set(super().__dir__()) | set(self.field_names))

    # --- Allocation ---

    def similar(
        self,
        record_type: Any = None,
        shape: Optional[Shape] = None,
    ) -> Any:
        """
        Allocate an uninitialised container like this one.

        Record types give a new PseudoStructArray over a fresh field-major
        buffer of the parent's array type; scalar types give a plain buffer
        of ``shape`` with no field axis.
        """
        if record_type is None:
            record_type = self.element_type
        shape = self._shape if shape is None else tuple(shape)

        if is_scalar_type(record_type):
            dtype = DescriptorRegistry.scalar_dtype(record_type)
            logger.debug("Allocating plain %s buffer of shape %s", dtype, shape)
            return np.empty_like(self._parent, dtype=dtype, shape=shape, order="F")

        if is_generic_record(record_type):
            record_type = concretize(record_type, self.dtype.type)

        descriptor = describe(record_type)
        new_parent = np.empty_like(
            self._parent,
            dtype=descriptor.dtype,
            shape=shape + (descriptor.nfields,),
            order="F",
        )
        return PseudoStructArray(record_type, new_parent, self._settings)

    # --- Elementwise protocol ---

    def broadcast_style(self) -> PseudoStructArrayStyle:
        return PseudoStructArrayStyle(self.ndim)

    def map(
        self, func: Callable[[R], Any], dtype: Optional[DTypeLike] = None
    ) -> np.ndarray:
        return broadcast(func, self, dtype=dtype)

    # --- NumPy interop ---

    def __array__(
        self, dtype: Optional[DTypeLike] = None, copy: Optional[bool] = None
    ) -> np.ndarray:
        """Object array of records with the logical shape."""
        if copy is False:
            raise ValueError("Records are built on read; a copy is required")
        out = self.collect()
        return out if dtype is None else out.astype(dtype)

    def __array_ufunc__(
        self, ufunc: np.ufunc, method: str, *inputs: Any, **kwargs: Any
    ) -> Any:
        # Plain single-output calls only; reductions, out= etc. are deferred.
        if method != "__call__" or kwargs or ufunc.nout != 1:
            return NotImplemented
        return broadcast(ufunc, *inputs)

    # --- Display ---

    def __repr__(self) -> str:
        dims = "x".join(str(n) for n in self._shape) or "0-dimensional"
        header = (
            f"{dims} PseudoStructArray"
            f"[{type_name(self.element_type)}, {self.ndim}]"
        )
        if self.size == 0:
            return header

        limit = self._settings.repr_limit
        lines = [f" {record!r}" for _, record in zip(range(limit), self)]
        if self.size > limit:
            lines.append(" ...")
        return "\n".join([header + ":", *lines])


def create(
    record_type: Any,
    buffer: np.ndarray,
    settings: Optional[ViewSettings] = None,
) -> Any:
    """
    Wrap ``buffer`` as an array of ``record_type``.

    A scalar ``record_type`` (``float``, ``np.int32``, ...) returns
    ``buffer`` itself, so the same call builds record views and plain
    buffers alike.
    """
    if is_scalar_type(record_type):
        return buffer
    return PseudoStructArray(record_type, buffer, settings)
