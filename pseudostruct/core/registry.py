# pseudostruct/core/registry.py
from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Dict, FrozenSet, Optional

import numpy as np

if TYPE_CHECKING:
    from pseudostruct.core.descriptor import RecordDescriptor

logger = logging.getLogger(__name__)

_NUMPY_SCALARS: FrozenSet[type] = frozenset(
    np.dtype(code).type
    for code in "?" + np.typecodes["AllInteger"] + np.typecodes["AllFloat"]
)


class DescriptorRegistry:
    """
    Process-wide cache of record descriptors, keyed by record type.
    Descriptors are immutable, so one instance per type is shared by
    every view built over that type.
    """

    _descriptors: Dict[Any, RecordDescriptor] = {}

    TYPE_MAP: Dict[Any, np.dtype] = {
        float: np.dtype("f8"),
        int: np.dtype("i8"),
        bool: np.dtype("?"),
        complex: np.dtype("c16"),
    }

    @classmethod
    def scalar_dtype(cls, annotation: Any) -> Optional[np.dtype]:
        """Return the NumPy dtype for a scalar field annotation, or None."""
        if isinstance(annotation, np.dtype):
            return annotation if annotation.type in _NUMPY_SCALARS else None

        try:
            if annotation in cls.TYPE_MAP:
                return cls.TYPE_MAP[annotation]
            if annotation in _NUMPY_SCALARS:
                return np.dtype(annotation)
        except TypeError:
            # Unhashable annotation
            return None

        return None

    @classmethod
    def lookup(cls, record_type: Any) -> Optional[RecordDescriptor]:
        return cls._descriptors.get(record_type)

    @classmethod
    def store(cls, record_type: Any, descriptor: RecordDescriptor) -> None:
        logger.debug(
            "Registered descriptor for %s: fields=%s dtype=%s",
            record_type,
            descriptor.names,
            descriptor.dtype,
        )
        cls._descriptors[record_type] = descriptor

    @classmethod
    def clear(cls) -> None:
        cls._descriptors.clear()
