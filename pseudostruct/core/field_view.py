# pseudostruct/core/field_view.py
from __future__ import annotations

from typing import TYPE_CHECKING, Dict

import numpy as np

from pseudostruct.core.indexing import check_field

if TYPE_CHECKING:
    from pseudostruct.core.array import PseudoStructArray


def field_view(array: PseudoStructArray, field: int) -> np.ndarray:
    """
    Live view of one field across all elements.

    The result has the array's logical shape and aliases the parent
    buffer: writes through it are visible via ``array[i]`` and vice versa.
    """
    check_field(field, array.descriptor.nfields)
    return array.parent[..., field]


def field_views(array: PseudoStructArray) -> Dict[str, np.ndarray]:
    """All named field views, in declaration order."""
    parent = array.parent
    return {
        name: parent[..., k] for name, k in array.descriptor.index.items()
    }
