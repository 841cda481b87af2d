"""Issue tracker that reads issue status from a JSON document served over HTTP."""

from json_http_tracker_impl.cache import IssueCache
from json_http_tracker_impl.json_http_client import (
    JsonHttpIssueTrackerClient,
    config_from_env,
    get_tracker,
    get_tracker_from_env,
    parse_charset,
)
from json_http_tracker_impl.predicates import IssueJsonPredicate, JsonFieldPredicate
from json_http_tracker_impl.url_scheme import IssueTrackerUrlScheme, UrlTemplate
from json_http_tracker_impl.vendors import TrackerConfig, __version__, github, gitlab, jira

__all__ = [
    "__version__",
    "JsonHttpIssueTrackerClient",
    "IssueCache",
    "JsonFieldPredicate",
    "IssueJsonPredicate",
    "UrlTemplate",
    "IssueTrackerUrlScheme",
    "TrackerConfig",
    "github",
    "gitlab",
    "jira",
    "get_tracker",
    "get_tracker_from_env",
    "config_from_env",
    "parse_charset",
]
