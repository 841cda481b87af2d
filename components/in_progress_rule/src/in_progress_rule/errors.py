"""Errors raised by the in-progress rule."""

from __future__ import annotations

from collections.abc import Iterable
from typing import ClassVar

from issue_tracker_interface.errors import FetchError
from in_progress_rule.verdict import Verdict

__all__ = ["DecisionError", "NoOpenIssuesError", "StaleAnnotationError", "ResolutionFailureError"]


def _ids(issue_ids: Iterable[str]) -> str:
    return ", ".join(sorted(issue_ids))


class DecisionError(AssertionError):
    """Base for policy failures. They are assertion failures so runners report the test as failed."""

    verdict: ClassVar[Verdict]

    def __init__(self, message: str, issue_ids: Iterable[str]) -> None:
        self.issue_ids = frozenset(issue_ids)
        super().__init__(f"{message}: {_ids(self.issue_ids)}")


class NoOpenIssuesError(DecisionError):
    """Raised when every annotated issue is closed, so nothing justifies the test being in progress."""

    verdict = Verdict.NO_OPEN_ISSUES

    def __init__(self, issue_ids: Iterable[str]) -> None:
        super().__init__("test annotated as in progress, but no open issues found among", issue_ids)


class StaleAnnotationError(DecisionError):
    """Raised when the test passes while still annotated as in progress."""

    verdict = Verdict.STALE_ANNOTATION

    def __init__(self, issue_ids: Iterable[str]) -> None:
        super().__init__("test passed when annotated as in progress, still annotated with open issues", issue_ids)


class ResolutionFailureError(Exception):
    """
    Raised when the status of an annotated issue could not be looked up.

    Not an AssertionError, so runners report it as an error rather than as a test failure.
    The underlying FetchError is kept as error and as __cause__.
    """

    verdict = Verdict.RESOLUTION_FAILURE

    def __init__(self, issue_id: str, error: FetchError) -> None:
        super().__init__(f"could not resolve status of issue {issue_id}: {error}")
        self.issue_id = issue_id
        self.error = error
