"""Unit tests for IgnoreInProgress and the in_progress annotation.

The issue tracker is a MagicMock, so nothing here talks to a real tracker.
"""

#run with "python -m pytest components/in_progress_rule/tests -v"

import unittest
from unittest.mock import MagicMock

import pytest

from issue_tracker_interface import BadJsonError, HttpStatusError, IssueStatus, IssueTracker
from in_progress_rule import (
    Decision,
    IgnoreInProgress,
    NoOpenIssuesError,
    OutcomeKind,
    ResolutionFailureError,
    StaleAnnotationError,
    TestOutcome,
    Verdict,
    declared_issue_ids,
    in_progress,
    issue_ids_for_test,
)
from json_http_tracker_impl import IssueCache, JsonFieldPredicate, JsonHttpIssueTrackerClient, UrlTemplate

STATUSES = {
    "OPEN-1": IssueStatus.OPEN,
    "OPEN-2": IssueStatus.OPEN,
    "CLOSED-1": IssueStatus.CLOSED,
    "CLOSED-2": IssueStatus.CLOSED,
}


#Fixture for mock tests
@pytest.fixture
def tracker():
    """A tracker answering from STATUSES, and with a 404 for anything else."""
    tracker = MagicMock(spec=IssueTracker)

    def resolve(issue_id):
        if issue_id not in STATUSES:
            raise HttpStatusError(404, f"https://tracker.test/issues/{issue_id}")
        return STATUSES[issue_id]

    tracker.resolve.side_effect = resolve
    tracker.is_open.side_effect = lambda issue_id: resolve(issue_id).is_open
    return tracker


@pytest.fixture
def rule(tracker):
    return IgnoreInProgress(tracker)


def passing():
    pass


def failing():
    raise AssertionError("expected 1, got 2")


#--------------------------- tests for evaluate --------------------------

def test_no_issue_ids_passing_body_passes_through(rule, tracker):
    decision = rule.evaluate([], passing)

    assert decision == Decision(Verdict.PASSED_THROUGH)
    tracker.is_open.assert_not_called()


def test_no_issue_ids_failing_body_fails_unchanged(rule):
    error = AssertionError("real failure")

    def body():
        raise error

    with pytest.raises(AssertionError) as exc_info:
        rule.evaluate([], body)

    assert exc_info.value is error


def test_open_issue_and_failing_body_is_expected_failure(rule):
    decision = rule.evaluate(["OPEN-1"], failing)

    assert decision.verdict is Verdict.EXPECTED_FAILURE
    assert decision.open_issue_ids == frozenset({"OPEN-1"})
    assert isinstance(decision.error, AssertionError)


def test_any_ordinary_exception_counts_as_expected_failure(rule):
    def body():
        {}["missing"]

    decision = rule.evaluate(["OPEN-1", "CLOSED-1"], body)

    assert decision.verdict is Verdict.EXPECTED_FAILURE
    assert decision.open_issue_ids == frozenset({"OPEN-1"})
    assert isinstance(decision.error, KeyError)


def test_open_issue_and_passing_body_is_stale_annotation(rule):
    with pytest.raises(StaleAnnotationError) as exc_info:
        rule.evaluate(["OPEN-1"], passing)

    assert exc_info.value.verdict is Verdict.STALE_ANNOTATION
    assert "test passed when annotated as in progress" in str(exc_info.value)
    assert "OPEN-1" in str(exc_info.value)
    # reported by runners as an ordinary test failure
    assert isinstance(exc_info.value, AssertionError)


def test_all_issues_closed_is_no_open_issues_without_running_body(rule):
    body = MagicMock(side_effect=AssertionError("still broken"))

    with pytest.raises(NoOpenIssuesError) as exc_info:
        rule.evaluate(["CLOSED-1", "CLOSED-2"], body)

    body.assert_not_called()
    assert exc_info.value.verdict is Verdict.NO_OPEN_ISSUES
    assert exc_info.value.issue_ids == frozenset({"CLOSED-1", "CLOSED-2"})
    assert "no open issues found" in str(exc_info.value)


def test_associated_issues_count_as_open(tracker):
    rule = IgnoreInProgress(tracker, lambda test: {"EXTERNAL-9"})

    decision = rule.evaluate(["CLOSED-1"], failing, test="test_export")

    assert decision.verdict is Verdict.EXPECTED_FAILURE
    assert decision.open_issue_ids == frozenset({"EXTERNAL-9"})


def test_associated_issues_receive_the_test(tracker):
    associated = MagicMock(return_value=())
    rule = IgnoreInProgress(tracker, associated)

    with pytest.raises(NoOpenIssuesError):
        rule.evaluate(["CLOSED-1"], failing, test="test_export")

    associated.assert_called_once_with("test_export")


def test_associated_issues_alone_do_not_activate_the_rule(tracker):
    associated = MagicMock(return_value={"EXTERNAL-9"})
    rule = IgnoreInProgress(tracker, associated)

    with pytest.raises(AssertionError):
        rule.evaluate([], failing)

    associated.assert_not_called()


@pytest.mark.parametrize(
    "skip",
    [unittest.SkipTest("no database"), pytest.skip.Exception("no database"), pytest.xfail.Exception("flaky")],
)
def test_skip_signals_are_reraised_unchanged(rule, skip):
    def body():
        raise skip

    with pytest.raises(type(skip)) as exc_info:
        rule.evaluate(["OPEN-1"], body)

    assert exc_info.value is skip


def test_custom_skip_exceptions(tracker):
    class Unsupported(Exception):
        pass

    def body():
        raise Unsupported("needs a GPU")

    rule = IgnoreInProgress(tracker, skip_exceptions=(Unsupported,))

    with pytest.raises(Unsupported):
        rule.evaluate(["OPEN-1"], body)


#--------------------------- tests for resolution failures --------------------------

def test_resolution_failure_names_issue_and_problem(rule):
    with pytest.raises(ResolutionFailureError) as exc_info:
        rule.evaluate(["OPEN-1", "NOPE-7"], failing)

    error = exc_info.value
    assert error.issue_id == "NOPE-7"
    assert error.verdict is Verdict.RESOLUTION_FAILURE
    assert isinstance(error.__cause__, HttpStatusError)
    assert "NOPE-7" in str(error)
    assert "404" in str(error)
    # distinct from the policy failures
    assert not isinstance(error, AssertionError)


def test_resolution_failure_is_not_treated_as_open_or_closed(tracker):
    tracker.is_open.side_effect = BadJsonError("response is not JSON")
    rule = IgnoreInProgress(tracker, lambda test: {"EXTERNAL-9"})
    body = MagicMock()

    with pytest.raises(ResolutionFailureError):
        rule.evaluate(["OPEN-1"], body)

    body.assert_not_called()


def test_filter_open_asks_in_sorted_order(rule, tracker):
    assert rule.filter_open({"OPEN-2", "CLOSED-1", "OPEN-1"}) == frozenset({"OPEN-1", "OPEN-2"})

    asked = [call.args[0] for call in tracker.is_open.call_args_list]
    assert asked == ["CLOSED-1", "OPEN-1", "OPEN-2"]


def test_cached_tracker_is_asked_once_across_tests(tracker):
    rule = IgnoreInProgress(IssueCache(tracker))

    for _ in range(3):
        rule.evaluate(["OPEN-1"], failing)

    tracker.resolve.assert_called_once_with("OPEN-1")


def test_cached_failure_fails_every_test(tracker):
    rule = IgnoreInProgress(IssueCache(tracker))

    for _ in range(2):
        with pytest.raises(ResolutionFailureError):
            rule.evaluate(["NOPE-7"], failing)

    tracker.resolve.assert_called_once_with("NOPE-7")


@pytest.mark.parametrize("charset", ["base64", "rot13", "hex", "zlib"])
def test_non_text_charset_from_tracker_is_a_resolution_failure(charset):
    # Setup: a real client whose session answers with a codec that cannot decode bytes to text
    response = MagicMock(status_code=200, url="https://tracker.test/issues/X-1", content=b'{"state": "open"}')
    response.headers = {"Content-Type": f"application/json; charset={charset}"}
    session = MagicMock(headers={})
    session.get.return_value = response
    client = JsonHttpIssueTrackerClient(
        UrlTemplate("https://tracker.test/issues/{issue_id}"),
        "application/json",
        JsonFieldPredicate("state", "open"),
        session=session,
    )
    rule = IgnoreInProgress(IssueCache(client))

    # Assert: the failure names the issue and the charset problem, for every test that asks
    for _ in range(2):
        with pytest.raises(ResolutionFailureError) as exc_info:
            rule.evaluate(["X-1"], failing)
        assert exc_info.value.issue_id == "X-1"
        assert charset in str(exc_info.value)

    session.get.assert_called_once()


#--------------------------- tests for TestOutcome --------------------------

def test_outcome_capture_classifies():
    assert TestOutcome.capture(passing, ()).kind is OutcomeKind.PASSED
    assert TestOutcome.capture(failing, ()).kind is OutcomeKind.FAILED

    skipped = TestOutcome.capture(lambda: pytest.skip("later"), (pytest.skip.Exception,))
    assert skipped.kind is OutcomeKind.SKIPPED


def test_outcome_capture_does_not_swallow_keyboard_interrupt():
    def body():
        raise KeyboardInterrupt

    with pytest.raises(KeyboardInterrupt):
        TestOutcome.capture(body, ())


#--------------------------- tests for annotations --------------------------

@in_progress("BASE-1")
class AnnotatedBase:
    pass


@in_progress("CHILD-1", "CHILD-2")
class AnnotatedChild(AnnotatedBase):
    pass


class Unannotated(AnnotatedChild):
    pass


def test_in_progress_on_function():
    @in_progress("FN-1")
    def test_something():
        pass

    assert declared_issue_ids(test_something) == frozenset({"FN-1"})


def test_in_progress_accumulates():
    @in_progress("FN-1")
    @in_progress("FN-2")
    def test_something():
        pass

    assert declared_issue_ids(test_something) == frozenset({"FN-1", "FN-2"})


def test_in_progress_requires_ids():
    with pytest.raises(ValueError):
        in_progress()
    with pytest.raises(ValueError):
        in_progress("")


def test_class_declares_only_its_own_ids():
    assert declared_issue_ids(AnnotatedChild) == frozenset({"CHILD-1", "CHILD-2"})
    assert declared_issue_ids(Unannotated) == frozenset()


def test_issue_ids_walk_the_class_hierarchy():
    @in_progress("FN-1")
    def test_something(self):
        pass

    assert issue_ids_for_test(test_something, Unannotated) == frozenset({"FN-1", "CHILD-1", "CHILD-2", "BASE-1"})
    assert issue_ids_for_test(test_something) == frozenset({"FN-1"})
    assert issue_ids_for_test(passing, AnnotatedBase) == frozenset({"BASE-1"})


#--------------------------- tests for wrap --------------------------

def test_wrap_reports_expected_failure_as_xfail(rule):
    @rule.wrap
    @in_progress("OPEN-1")
    def test_export():
        raise AssertionError("not implemented yet")

    with pytest.raises(pytest.xfail.Exception) as exc_info:
        test_export()

    assert "known issue: OPEN-1" in str(exc_info.value)


def test_wrap_with_annotation_applied_on_top(rule):
    @in_progress("OPEN-1")
    @rule.wrap
    def test_export():
        pass

    with pytest.raises(StaleAnnotationError):
        test_export()


def test_wrap_without_annotation_runs_test_normally(rule, tracker):
    calls = []

    @rule.wrap
    def test_export(value):
        calls.append(value)

    test_export(3)

    assert calls == [3]
    tracker.is_open.assert_not_called()


def test_wrap_method_picks_up_class_annotations(rule):
    @in_progress("CLOSED-1")
    class TestReports:
        @rule.wrap
        def test_totals(self):
            raise AssertionError("wrong total")

    class TestMoreReports(TestReports):
        pass

    # only closed issues on the class: the annotation is out of date
    with pytest.raises(NoOpenIssuesError):
        TestMoreReports().test_totals()


def test_wrap_method_with_open_issue_on_base_class(rule):
    @in_progress("OPEN-2")
    class Base:
        pass

    class TestReports(Base):
        @rule.wrap
        def test_totals(self):
            raise AssertionError("wrong total")

    with pytest.raises(pytest.xfail.Exception):
        TestReports().test_totals()


def test_wrap_preserves_name(rule):
    @rule.wrap
    def test_export():
        pass

    assert test_export.__name__ == "test_export"
