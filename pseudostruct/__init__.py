# pseudostruct/__init__.py
from pseudostruct.core.array import PseudoStructArray, create
from pseudostruct.core.broadcast import (
    ArrayStyle,
    BroadcastStyle,
    ElementwiseOperand,
    PseudoStructArrayStyle,
    broadcast,
)
from pseudostruct.core.descriptor import RecordDescriptor, concretize, describe
from pseudostruct.core.field_view import field_view, field_views
from pseudostruct.errors import (
    BoundsError,
    ConcretizationError,
    InvalidRecordTypeError,
    PseudoStructError,
    RankError,
    SchemaError,
    ShapeMismatchError,
    TypeMismatchError,
    UnknownFieldError,
)
from pseudostruct.settings import DEFAULT_SETTINGS, ViewSettings

__all__ = [
    "PseudoStructArray",
    "create",
    "field_view",
    "field_views",
    "describe",
    "concretize",
    "RecordDescriptor",
    "broadcast",
    "BroadcastStyle",
    "ArrayStyle",
    "PseudoStructArrayStyle",
    "ElementwiseOperand",
    "ViewSettings",
    "DEFAULT_SETTINGS",
    "PseudoStructError",
    "SchemaError",
    "ConcretizationError",
    "InvalidRecordTypeError",
    "TypeMismatchError",
    "RankError",
    "ShapeMismatchError",
    "BoundsError",
    "UnknownFieldError",
]
