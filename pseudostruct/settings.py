# pseudostruct/settings.py
from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class ViewSettings:
    """Access and display policy for a PseudoStructArray."""

    # Disabling skips index validation on every get/set.
    check_bounds: bool = True
    repr_limit: int = 10

    def __post_init__(self) -> None:
        if self.repr_limit < 0:
            raise ValueError("repr_limit must be >= 0")


DEFAULT_SETTINGS = ViewSettings()
