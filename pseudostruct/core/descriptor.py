# pseudostruct/core/descriptor.py
from __future__ import annotations

import logging
from dataclasses import dataclass, fields, is_dataclass
from types import MappingProxyType
from typing import (
    Any,
    Iterable,
    Mapping,
    Tuple,
    TypeVar,
    get_args,
    get_origin,
    get_type_hints,
)

import numpy as np

from pseudostruct.core.registry import DescriptorRegistry
from pseudostruct.errors import (
    ConcretizationError,
    InvalidRecordTypeError,
    SchemaError,
    TypeMismatchError,
    UnknownFieldError,
)

logger = logging.getLogger(__name__)


def type_name(t: Any) -> str:
    """Short display name, e.g. ``Point2D[float32]``."""
    origin = get_origin(t) or t
    name = getattr(origin, "__name__", repr(origin))
    args = get_args(t)
    if args:
        return f"{name}[{', '.join(type_name(a) for a in args)}]"
    return name


def is_scalar_type(t: Any) -> bool:
    return DescriptorRegistry.scalar_dtype(t) is not None


def _record_class(record_type: Any) -> Any:
    return get_origin(record_type) or record_type


def _is_record_class(cls: Any) -> bool:
    if not isinstance(cls, type):
        return False
    if is_dataclass(cls):
        return True
    # typing.NamedTuple / collections.namedtuple
    return issubclass(cls, tuple) and hasattr(cls, "_fields")


def is_generic_record(record_type: Any) -> bool:
    """True for a record type that still has unbound type parameters."""
    if not _is_record_class(_record_class(record_type)):
        return False
    return bool(getattr(record_type, "__parameters__", ()))


def _field_names(cls: type) -> Tuple[str, ...]:
    if is_dataclass(cls):
        dc_fields = fields(cls)
        for f in dc_fields:
            if not f.init:
                raise SchemaError(
                    f"Field '{f.name}' of {cls.__name__} is not an __init__ "
                    "argument; records are built positionally"
                )
        return tuple(f.name for f in dc_fields)
    return tuple(cls._fields)


def _field_annotations(record_type: Any, names: Iterable[str]) -> Tuple[Any, ...]:
    """Resolve field annotations, substituting bound type parameters."""
    cls = _record_class(record_type)
    try:
        hints = get_type_hints(cls)
    except NameError as e:
        raise SchemaError(
            f"Cannot resolve field annotations of {cls.__name__}: {e}"
        ) from e

    params = getattr(cls, "__parameters__", ())
    subst = dict(zip(params, get_args(record_type)))

    resolved = []
    for name in names:
        annotation = hints.get(name)
        if isinstance(annotation, TypeVar):
            annotation = subst.get(annotation, annotation)
        resolved.append(annotation)
    return tuple(resolved)


@dataclass(frozen=True, slots=True, eq=False)
class RecordDescriptor:
    """
    Field layout of a homogeneous record type.

    ``record_type`` is what the caller asked for (possibly a parametrised
    alias such as ``Point2D[np.float32]``); ``record_class`` is the runtime
    class used to build instances.
    """

    record_type: Any
    record_class: type
    names: Tuple[str, ...]
    scalar_type: Any
    dtype: np.dtype
    index: Mapping[str, int]

    @property
    def nfields(self) -> int:
        return len(self.names)

    def field_index(self, name: str) -> int:
        try:
            return self.index[name]
        except KeyError:
            raise UnknownFieldError(
                f"{type_name(self.record_type)} has no field '{name}'"
            ) from None

    def construct(self, values: Tuple[Any, ...]) -> Any:
        return self.record_class(**dict(zip(self.names, values)))

    def destructure(self, record: Any) -> Tuple[Any, ...]:
        if not isinstance(record, self.record_class):
            raise TypeMismatchError(
                f"Expected {type_name(self.record_type)}, "
                f"got {type(record).__name__}"
            )
        return tuple(getattr(record, name) for name in self.names)


def _build(record_type: Any) -> RecordDescriptor:
    name = type_name(record_type)

    if is_scalar_type(record_type):
        raise InvalidRecordTypeError(f"{name} is a scalar type, not a record")

    cls = _record_class(record_type)
    if not _is_record_class(cls):
        raise InvalidRecordTypeError(
            f"Element type {name} must be a dataclass or NamedTuple"
        )

    if is_generic_record(record_type):
        raise ConcretizationError(
            f"{name} has unbound type parameters; concretize it first"
        )

    names = _field_names(cls)
    if not names:
        raise SchemaError(f"Type {name} has no fields")

    annotations = _field_annotations(record_type, names)
    first = annotations[0]
    for i, annotation in enumerate(annotations[1:], start=1):
        if annotation != first:
            raise SchemaError(
                f"All fields of {name} must have the same type. "
                f"Field 0 has type {first}, field {i} has type {annotation}"
            )

    dtype = DescriptorRegistry.scalar_dtype(first)
    if dtype is None:
        raise SchemaError(
            f"Field type {first} of {name} is not a supported scalar type"
        )

    return RecordDescriptor(
        record_type=record_type,
        record_class=cls,
        names=names,
        scalar_type=first,
        dtype=dtype,
        index=MappingProxyType({n: i for i, n in enumerate(names)}),
    )


def describe(record_type: Any) -> RecordDescriptor:
    """Return the (cached) descriptor of a concrete record type."""
    descriptor = DescriptorRegistry.lookup(record_type)
    if descriptor is None:
        descriptor = _build(record_type)
        DescriptorRegistry.store(record_type, descriptor)
    return descriptor


def concretize(record_type: Any, scalar_type: Any) -> Any:
    """
    Bind the type parameter of a generic record to ``scalar_type``.

    ``concretize(Point2D, np.float32)`` returns ``Point2D[np.float32]``.
    Non-generic types are returned unchanged.
    """
    if isinstance(scalar_type, np.dtype):
        scalar_type = scalar_type.type

    if not is_generic_record(record_type):
        return record_type

    name = type_name(record_type)
    params = record_type.__parameters__
    if len(params) != 1:
        raise ConcretizationError(
            f"Cannot automatically concretize {name} with element type "
            f"{type_name(scalar_type)}: expected one type parameter, "
            f"found {len(params)}"
        )

    try:
        concrete = record_type[scalar_type]
    except TypeError as e:
        raise ConcretizationError(
            f"Cannot automatically concretize {name} with element type "
            f"{type_name(scalar_type)}: {e}"
        ) from e

    cls = _record_class(concrete)
    names = _field_names(cls)
    annotations = _field_annotations(concrete, names)
    if not annotations or annotations[0] is not scalar_type:
        raise ConcretizationError(
            f"Cannot automatically concretize {name} with element type "
            f"{type_name(scalar_type)}"
        )

    logger.debug("Concretized %s as %s", name, type_name(concrete))
    return concrete
