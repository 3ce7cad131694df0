# pseudostruct/errors.py


class PseudoStructError(Exception):
    """Base class for every error raised by pseudostruct."""


class SchemaError(PseudoStructError, TypeError):
    """Record type has no fields, or its fields do not share one scalar type."""


class ConcretizationError(PseudoStructError, TypeError):
    """A generic record type cannot be resolved against a scalar type."""


class InvalidRecordTypeError(PseudoStructError, TypeError):
    """The element type is not a fixed-layout record."""


class TypeMismatchError(PseudoStructError, TypeError):
    """Buffer dtype (or a written value) does not match the record type."""


class RankError(PseudoStructError, ValueError):
    pass


class ShapeMismatchError(PseudoStructError, ValueError):
    pass


class BoundsError(PseudoStructError, IndexError):
    pass


class UnknownFieldError(PseudoStructError, AttributeError):
    pass
