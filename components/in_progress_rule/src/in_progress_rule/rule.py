"""
A test rule that lets failing tests through while they are annotated as in progress.

The rule fails tests that pass but are still annotated as in progress, and tests that
are related only to closed issues.
"""

from __future__ import annotations

import functools
import inspect
import logging
import unittest
from collections.abc import Iterable
from typing import Any, Callable

import pytest

from issue_tracker_interface.errors import FetchError
from issue_tracker_interface.tracker import IssueTracker
from in_progress_rule.annotations import issue_ids_for_test
from in_progress_rule.errors import NoOpenIssuesError, ResolutionFailureError, StaleAnnotationError
from in_progress_rule.verdict import Decision, OutcomeKind, TestOutcome, Verdict

__all__ = ["IgnoreInProgress", "DEFAULT_SKIP_EXCEPTIONS"]

logger = logging.getLogger(__name__)

#exceptions that already mean "this test did not really run" for unittest and pytest
DEFAULT_SKIP_EXCEPTIONS: tuple[type[BaseException], ...] = (
    unittest.SkipTest,
    pytest.skip.Exception,
    pytest.xfail.Exception,
)

AssociatedIssues = Callable[[Any], Iterable[str]]


def _no_associated_issues(test: Any) -> Iterable[str]:
    return ()


class IgnoreInProgress:
    """
    Args:
        issue_tracker:     Resolves issue ids; usually an IssueCache so each issue is fetched once per run
        associated_issues: Maps the test to ids of issues known to be open without asking the tracker
        skip_exceptions:   Exceptions re-raised untouched when the test body raises them

    Usage:
        rule = IgnoreInProgress(get_tracker(github("me", "project")))

        @rule.wrap
        @in_progress("42")
        def test_export(): ...
    """

    def __init__(
        self,
        issue_tracker: IssueTracker,
        associated_issues: AssociatedIssues = _no_associated_issues,
        *,
        skip_exceptions: tuple[type[BaseException], ...] = DEFAULT_SKIP_EXCEPTIONS,
        ) -> None:
        self._issue_tracker = issue_tracker
        self._associated_issues = associated_issues
        self._skip_exceptions = skip_exceptions

    def evaluate(self, issue_ids: Iterable[str], body: Callable[[], object], *, test: Any = None) -> Decision:
        """
        Run body under the rule.

        Args:
            issue_ids: The ids the test is annotated with
            body:      The test body, called with no arguments
            test:      Passed to associated_issues; typically the test function

        Returns:
            Decision with PASSED_THROUGH when there are no ids (body ran normally),
            or EXPECTED_FAILURE when body failed while an issue is open

        Raises:
            ResolutionFailureError: If the status of an annotated issue could not be looked up
            NoOpenIssuesError:      If none of the annotated issues is open; body is not run
            StaleAnnotationError:   If body passed
            Whatever body raised:   When there are no ids, or when it raised a skip exception
        """
        issue_ids = frozenset(issue_ids)
        if not issue_ids:
            body()
            return Decision(Verdict.PASSED_THROUGH)

        open_issue_ids = self.filter_open(issue_ids) | frozenset(self._associated_issues(test))
        if not open_issue_ids:
            logger.info("no open issues among %s", ", ".join(sorted(issue_ids)))
            raise NoOpenIssuesError(issue_ids)

        outcome = TestOutcome.capture(body, self._skip_exceptions)
        if outcome.kind is OutcomeKind.SKIPPED:
            raise outcome.error
        if outcome.kind is OutcomeKind.FAILED:
            logger.info("known issue: test failed with %s open (%r)", ", ".join(sorted(open_issue_ids)), outcome.error)
            return Decision(Verdict.EXPECTED_FAILURE, open_issue_ids, outcome.error)

        logger.info("test passed while annotated with open issues %s", ", ".join(sorted(open_issue_ids)))
        raise StaleAnnotationError(open_issue_ids)

    def filter_open(self, issue_ids: Iterable[str]) -> frozenset[str]:
        """Return the ids the tracker reports as open, asking in sorted order."""
        open_ids = set()
        for issue_id in sorted(issue_ids):
            try:
                if self._issue_tracker.is_open(issue_id):
                    open_ids.add(issue_id)
            except FetchError as e:
                raise ResolutionFailureError(issue_id, e) from e
        return frozenset(open_ids)

    # ------------------------------------------------------------------
    # pytest glue
    # ------------------------------------------------------------------

    def wrap(self, func: Callable[..., Any]) -> Callable[..., Any]:
        """
        Decorate a test function or method.

        Notes on usage:
            Ids are collected from the function and, for methods, from the class of self and its bases.
            An expected failure is reported through pytest.xfail.
        """
        takes_self = next(iter(inspect.signature(func).parameters), None) == "self"

        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> None:
            test_class = type(args[0]) if takes_self and args else None
            #read from wrapper: in_progress may have been applied on top of wrap
            issue_ids = issue_ids_for_test(wrapper, test_class)
            decision = self.evaluate(issue_ids, lambda: func(*args, **kwargs), test=func)
            if decision.verdict is Verdict.EXPECTED_FAILURE:
                pytest.xfail(f"known issue: {', '.join(sorted(decision.open_issue_ids))}")

        return wrapper
