"""Outcomes of running a test under the in-progress rule."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable


class Verdict(str, Enum):
    PASSED_THROUGH = "passed_through"
    EXPECTED_FAILURE = "expected_failure"
    STALE_ANNOTATION = "stale_annotation"
    NO_OPEN_ISSUES = "no_open_issues"
    RESOLUTION_FAILURE = "resolution_failure"


class OutcomeKind(str, Enum):
    PASSED = "passed"
    #the body raised something that already means "skipped", it must reach the runner untouched
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass(frozen=True)
class TestOutcome:
    """What happened when the test body ran."""

    #keep pytest from collecting this as a test class
    __test__ = False

    kind: OutcomeKind
    error: BaseException | None = None

    @classmethod
    def capture(cls, body: Callable[[], object], skip_exceptions: tuple[type[BaseException], ...]) -> TestOutcome:
        """Run body and classify how it ended.

        Exceptions outside skip_exceptions that are not Exceptions (KeyboardInterrupt, SystemExit)
        are not captured.
        """
        try:
            body()
        except skip_exceptions as e:
            return cls(OutcomeKind.SKIPPED, e)
        except Exception as e:
            return cls(OutcomeKind.FAILED, e)
        return cls(OutcomeKind.PASSED)


@dataclass(frozen=True)
class Decision:
    """
    A verdict the rule reached without raising.

    Only PASSED_THROUGH and EXPECTED_FAILURE are returned; the other verdicts are raised as errors.
    """

    verdict: Verdict
    open_issue_ids: frozenset[str] = frozenset()
    #the swallowed failure, for EXPECTED_FAILURE
    error: BaseException | None = None
