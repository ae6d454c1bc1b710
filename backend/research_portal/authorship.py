"""Structured publication authorship roles.

Roles are stored as a single display string such as
``"Co-First Author, Corresponding Author"``; everything inside the service
layer works with ``AuthorshipRole`` instead.
"""

from __future__ import annotations

from dataclasses import dataclass, replace

BASE_ROLES: tuple[str, ...] = (
    "First Author",
    "Contributing Author",
    "Senior Author",
    "Last Author",
)
CORRESPONDING = "Corresponding Author"
SHARED_PREFIX = "Co-"


class AuthorshipParseError(ValueError):
    """Raised when an authorship string does not describe a known role."""


@dataclass(frozen=True)
class AuthorshipRole:
    base_role: str
    is_shared: bool = False
    is_corresponding: bool = False

    def __post_init__(self):
        if self.base_role not in BASE_ROLES:
            raise AuthorshipParseError(f"Unknown authorship role: {self.base_role}")

    @property
    def label(self) -> str:
        return f"{SHARED_PREFIX}{self.base_role}" if self.is_shared else self.base_role

    def serialize(self) -> str:
        if self.is_corresponding:
            return f"{self.label}, {CORRESPONDING}"
        return self.label

    def merge(self, other: "AuthorshipRole") -> "AuthorshipRole":
        """Combine a newly submitted role with this one.

        The newer base role wins; shared and corresponding flags are kept once set.
        """

        return replace(
            other,
            is_shared=self.is_shared or other.is_shared,
            is_corresponding=self.is_corresponding or other.is_corresponding,
        )

    @classmethod
    def parse(cls, text: str) -> "AuthorshipRole":
        parts = [part.strip() for part in (text or "").split(",") if part.strip()]
        corresponding = CORRESPONDING in parts
        remaining = [part for part in parts if part != CORRESPONDING]
        if len(remaining) > 1:
            raise AuthorshipParseError(f"Ambiguous authorship role: {text}")
        if not remaining:
            # Corresponding-only entries predate the structured roles.
            if corresponding:
                return cls("Contributing Author", is_corresponding=True)
            raise AuthorshipParseError("Authorship role is required")
        label = remaining[0]
        shared = label.startswith(SHARED_PREFIX)
        base = label[len(SHARED_PREFIX):] if shared else label
        return cls(base, is_shared=shared, is_corresponding=corresponding)
