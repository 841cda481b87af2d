"""Let tests fail while the issue they are waiting on is open, and fail them loudly once it is not."""

from in_progress_rule.annotations import declared_issue_ids, in_progress, issue_ids_for_test
from in_progress_rule.errors import DecisionError, NoOpenIssuesError, ResolutionFailureError, StaleAnnotationError
from in_progress_rule.rule import DEFAULT_SKIP_EXCEPTIONS, IgnoreInProgress
from in_progress_rule.verdict import Decision, OutcomeKind, TestOutcome, Verdict

__all__ = [
    "IgnoreInProgress",
    "DEFAULT_SKIP_EXCEPTIONS",
    "in_progress",
    "declared_issue_ids",
    "issue_ids_for_test",
    "Decision",
    "Verdict",
    "OutcomeKind",
    "TestOutcome",
    "DecisionError",
    "NoOpenIssuesError",
    "StaleAnnotationError",
    "ResolutionFailureError",
]
