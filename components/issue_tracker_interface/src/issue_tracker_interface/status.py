"""Issue status contract - the only thing the rule needs to know about an issue."""

from enum import Enum


#two values are enough: the rule only asks whether an issue still justifies a failing test
class IssueStatus(str, Enum):
    OPEN = "open"
    CLOSED = "closed"

    @property
    def is_open(self) -> bool:
        """Return True for OPEN."""
        return self is IssueStatus.OPEN

    @classmethod
    def from_bool(cls, is_open: bool) -> "IssueStatus":
        """Map a plain boolean verdict onto the enum."""
        return cls.OPEN if is_open else cls.CLOSED


def check_issue_id(issue_id: str) -> str:
    """
    Notes on usage:
        Issue ids are opaque cache keys, so the only thing we can check is that one was given at all.

    Raises:
        ValueError: If the id is empty or blank.
    """
    if not isinstance(issue_id, str) or not issue_id.strip():
        raise ValueError(f"issue id must be a non-empty string, got {issue_id!r}")
    return issue_id
