"""Tracker configurations for the issue trackers we know how to read."""

from __future__ import annotations

from dataclasses import dataclass
from urllib.parse import quote

from json_http_tracker_impl.predicates import IssueJsonPredicate, JsonFieldPredicate
from json_http_tracker_impl.url_scheme import IssueTrackerUrlScheme, UrlTemplate

__all__ = ["TrackerConfig", "github", "gitlab", "jira"]

__version__ = "0.1.0"

DEFAULT_USER_AGENT = f"known-issues/{__version__}"


@dataclass(frozen=True)
class TrackerConfig:
    """
    Everything the JSON/HTTP client needs to know about one tracker.

    Args:
        url_scheme:            Maps an issue id to the URL of its JSON document
        accepted_content_type: Sent as the Accept header
        is_open_predicate:     Maps the parsed document to an IssueStatus
        user_agent:            Sent as the User-Agent header
        timeout:               Seconds passed to requests; None waits as long as the server does
    """

    url_scheme: IssueTrackerUrlScheme
    accepted_content_type: str
    is_open_predicate: IssueJsonPredicate
    user_agent: str = DEFAULT_USER_AGENT
    timeout: float | None = None


# ---------------------------------------------------------------------------
# Vendor presets
# ---------------------------------------------------------------------------

def github(owner: str, repo: str, *, api_base_url: str = "https://api.github.com") -> TrackerConfig:
    """Issues of a GitHub repository, identified by number (e.g. '42')."""
    base = api_base_url.rstrip("/")
    return TrackerConfig(
        url_scheme=UrlTemplate(f"{base}/repos/{quote(owner, safe='')}/{quote(repo, safe='')}/issues/{{issue_id}}"),
        accepted_content_type="application/vnd.github.v3+json",
        is_open_predicate=JsonFieldPredicate("state", "open"),
    )


def gitlab(project: str, *, base_url: str = "https://gitlab.com") -> TrackerConfig:
    """Issues of a GitLab project, identified by their project-local iid.

    project may be the numeric project id or its full path ('group/project').
    """
    base = base_url.rstrip("/")
    return TrackerConfig(
        url_scheme=UrlTemplate(f"{base}/api/v4/projects/{quote(project, safe='')}/issues/{{issue_id}}"),
        accepted_content_type="application/json",
        #GitLab spells it "opened"
        is_open_predicate=JsonFieldPredicate("state", "opened"),
    )


def jira(base_url: str) -> TrackerConfig:
    """Issues of a Jira instance, identified by key (e.g. 'PROJ-42').

    Jira statuses are configurable per project, so we read the status category instead:
    anything not in the "done" category is open.
    """
    base = base_url.rstrip("/")
    return TrackerConfig(
        url_scheme=UrlTemplate(f"{base}/rest/api/2/issue/{{issue_id}}?fields=status"),
        accepted_content_type="application/json",
        is_open_predicate=JsonFieldPredicate("fields.status.statusCategory.key", "done", open_when_equal=False),
    )
