"""Core tracker contract definitions."""

from abc import ABC, abstractmethod

from issue_tracker_interface.status import IssueStatus

__all__ = ["IssueTracker"]


class IssueTracker(ABC):
    """Tells whether issues are open."""

    # ------------------------------------------------------------------
    # Status lookup
    # ------------------------------------------------------------------
    @abstractmethod
    def resolve(self, issue_id: str) -> IssueStatus:
        """Resolve the current status of an issue.

        Args:
            issue_id: The opaque identifier of the issue in the tracker

        Notes on usage:
            One call is one lookup. Implementations must not retry, and must not treat a failed
            lookup as either open or closed; they raise instead.

        Returns:
            IssueStatus.OPEN or IssueStatus.CLOSED

        Raises:
            FetchError: If the tracker could not be asked, or its answer could not be understood

        """
        raise NotImplementedError

    def is_open(self, issue_id: str) -> bool:
        """Return True if the issue is currently open."""
        return self.resolve(issue_id).is_open
