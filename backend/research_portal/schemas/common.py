"""Validators shared by the partial-update schemas."""

from __future__ import annotations

from typing import Any

from pydantic import ValidationInfo


def not_null(value: Any, info: ValidationInfo) -> Any:
    """Reject an explicit ``null`` for a column that cannot be empty.

    Omitting the field still leaves the stored value untouched.
    """

    if value is None:
        raise ValueError(f"{info.field_name} cannot be null")
    return value
