"""Finite state machines with per-transition field guards.

IBC applications and publications each declare a ``WorkflowDefinition`` and
route every status change through ``check_transition`` before anything is
written.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Iterable, Mapping

# purpose: single typed transition table consumed by every status workflow
# status: active


class WorkflowError(RuntimeError):
    """Base error for rejected status transitions."""


class TransitionNotAllowed(WorkflowError):
    """Raised when the target status is not reachable from the current one."""

    def __init__(self, workflow: str, current: str | None, target: str):
        self.workflow = workflow
        self.current = current
        self.target = target
        super().__init__(f'Invalid status transition from "{current}" to "{target}"')


class MissingRequiredFields(WorkflowError):
    """Raised when the target status requires fields that are still blank."""

    def __init__(self, target: str, messages: list[str], fields: list[str]):
        self.target = target
        self.messages = messages
        self.fields = fields
        super().__init__("; ".join(messages))


@dataclass(frozen=True)
class FieldRequirement:
    field: str
    message: str


@dataclass(frozen=True)
class FieldChange:
    field: str
    old_value: str
    new_value: str


@dataclass(frozen=True)
class WorkflowDefinition:
    name: str
    initial: str
    transitions: Mapping[str, tuple[str, ...]]
    requirements: Mapping[str, tuple[FieldRequirement, ...]] = field(default_factory=dict)

    @property
    def states(self) -> tuple[str, ...]:
        seen: dict[str, None] = {}
        for state, targets in self.transitions.items():
            seen.setdefault(state, None)
            for target in targets:
                seen.setdefault(target, None)
        return tuple(seen)

    def normalize(self, state: str | None) -> str:
        return state or self.initial

    def allowed_next(self, state: str | None) -> tuple[str, ...]:
        """Return the legal next statuses, empty for terminal or unknown states."""

        return tuple(self.transitions.get(self.normalize(state), ()))

    def is_terminal(self, state: str | None) -> bool:
        return not self.allowed_next(state)

    def can_transition(self, current: str | None, target: str) -> bool:
        return target in self.allowed_next(current)

    def required_fields(self, target: str) -> tuple[FieldRequirement, ...]:
        return tuple(self.requirements.get(target, ()))

    def missing_fields(self, target: str, record: Any) -> list[FieldRequirement]:
        return [
            requirement
            for requirement in self.required_fields(target)
            if is_blank(_read(record, requirement.field))
        ]

    def check_transition(self, current: str | None, target: str, record: Any = None) -> None:
        """Raise unless ``target`` is reachable and its required fields are present."""

        if not self.can_transition(current, target):
            raise TransitionNotAllowed(self.name, self.normalize(current), target)
        if record is None:
            return
        missing = self.missing_fields(target, record)
        if missing:
            raise MissingRequiredFields(
                target,
                [requirement.message for requirement in missing],
                [requirement.field for requirement in missing],
            )


def _read(record: Any, name: str) -> Any:
    if isinstance(record, Mapping):
        return record.get(name)
    return getattr(record, name, None)


def is_blank(value: Any) -> bool:
    if value is None or value is False:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, tuple, set, dict)):
        return not value
    return False


def render_value(value: Any) -> str:
    """Render a field value the way history rows store it."""

    if value is None:
        return ""
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def diff_fields(old: Any, new: Mapping[str, Any], fields: Iterable[str] | None = None) -> list[FieldChange]:
    """Compare ``new`` values against ``old`` and return one entry per changed field."""

    names = list(fields) if fields is not None else list(new.keys())
    changes: list[FieldChange] = []
    for name in names:
        if name not in new:
            continue
        before = render_value(_read(old, name))
        after = render_value(new[name])
        if before != after:
            changes.append(FieldChange(field=name, old_value=before, new_value=after))
    return changes
