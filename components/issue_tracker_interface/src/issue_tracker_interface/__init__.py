"""Issue tracker contract shared by every tracker implementation."""

from issue_tracker_interface.errors import (
    BadContentTypeError,
    BadJsonError,
    FetchError,
    HttpStatusError,
    TransportError,
)
from issue_tracker_interface.status import IssueStatus, check_issue_id
from issue_tracker_interface.tracker import IssueTracker

__all__ = [
    "IssueTracker",
    "IssueStatus",
    "check_issue_id",
    "FetchError",
    "HttpStatusError",
    "BadContentTypeError",
    "BadJsonError",
    "TransportError",
]
