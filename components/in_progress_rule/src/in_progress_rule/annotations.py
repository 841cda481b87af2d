"""The in_progress annotation and discovery of the issues a test is annotated with."""

from __future__ import annotations

from typing import Callable, TypeVar

from issue_tracker_interface.status import check_issue_id

__all__ = ["in_progress", "declared_issue_ids", "issue_ids_for_test"]

T = TypeVar("T")

MARKER = "__in_progress_issues__"


def in_progress(*issue_ids: str) -> Callable[[T], T]:
    """
    Mark a test function or test class as known to fail because of the given issues.

    Usage:
        @in_progress("PROJ-42")
        def test_export(): ...

        @in_progress("17", "18")
        class TestReports: ...

    Applying it more than once accumulates the ids.
    """
    if not issue_ids:
        raise ValueError("in_progress needs at least one issue id")
    ids = frozenset(check_issue_id(issue_id) for issue_id in issue_ids)

    def mark(target: T) -> T:
        setattr(target, MARKER, declared_issue_ids(target) | ids)
        return target

    return mark


def declared_issue_ids(target: object) -> frozenset[str]:
    """Return the ids declared directly on target.

    For classes only the class's own namespace is read, inherited ids come from issue_ids_for_test.
    """
    if isinstance(target, type):
        return frozenset(vars(target).get(MARKER, ()))
    return frozenset(getattr(target, MARKER, ()))


def issue_ids_for_test(test: object, test_class: type | None = None) -> frozenset[str]:
    """Return the ids on the test itself unioned with those on its class and every base class."""
    issue_ids = declared_issue_ids(test)
    if test_class is not None:
        #__mro__ is the ordered list of the class and its ancestors
        for klass in test_class.__mro__:
            issue_ids |= declared_issue_ids(klass)
    return issue_ids
