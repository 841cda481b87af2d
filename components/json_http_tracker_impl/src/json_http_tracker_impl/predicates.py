"""Predicates that read an issue status out of a tracker's JSON document."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable

from issue_tracker_interface.status import IssueStatus

__all__ = ["IssueJsonPredicate", "JsonFieldPredicate"]

#anything that maps a parsed JSON document to a status can be plugged into the client
IssueJsonPredicate = Callable[[Any], IssueStatus]

_ABSENT = object()


def _lookup(document: Any, path: tuple[str, ...]) -> Any:
    """Walk nested objects along path, returning _ABSENT as soon as a step is missing."""
    node = document
    for key in path:
        if not isinstance(node, dict) or key not in node:
            return _ABSENT
        node = node[key]
    return node


@dataclass(frozen=True)
class JsonFieldPredicate:
    """
    Compares one field of the issue document against an expected value.

    Args:
        field:           Dotted path to the field, e.g. 'state' or 'fields.status.statusCategory.key'
        expected:        The value the field is compared against
        open_when_equal: When True the issue is open if the field equals expected,
                         when False the issue is open if it does not
        missing:         Status reported when the field (or any step of its path) is absent.
                         Defaults to CLOSED, so a document we cannot read never excuses a failing test.

    Notes on usage:
        A JSON null is a present value, not a missing one. The predicate never raises.
    """

    field: str
    expected: Any
    open_when_equal: bool = True
    missing: IssueStatus = IssueStatus.CLOSED

    def __post_init__(self) -> None:
        if not self.field or any(not part for part in self.field.split(".")):
            raise ValueError(f"invalid field path: {self.field!r}")

    @property
    def path(self) -> tuple[str, ...]:
        return tuple(self.field.split("."))

    def __call__(self, document: Any) -> IssueStatus:
        value = _lookup(document, self.path)
        if value is _ABSENT:
            return self.missing
        return IssueStatus.from_bool((value == self.expected) == self.open_when_equal)
