"""Process-lifetime cache of issue statuses.

Typically this caches for the rest of the test run: every test annotated with the same
issue shares one lookup. Entries are never evicted or refreshed.
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import Future
from types import TracebackType

from issue_tracker_interface.status import IssueStatus, check_issue_id
from issue_tracker_interface.tracker import IssueTracker

__all__ = ["IssueCache"]

logger = logging.getLogger(__name__)


class IssueCache(IssueTracker):
    """
    Wraps another tracker so that each issue is looked up at most once.

    Args:
        tracker: The tracker that performs the real lookups

    Notes on usage:
        Each issue id maps to a Future: pending while its lookup is in flight, then completed
        with the status (set_result) or the raised error (set_exception) for good.
        Failed lookups are replayed to later callers, a transient error is not retried.
        Callers asking for an issue whose lookup is in flight wait for it rather than starting another.
        The lock only guards the table, so lookups of different issues run concurrently.
    """

    def __init__(self, tracker: IssueTracker) -> None:
        self._tracker = tracker
        self._lock = threading.Lock()
        self._entries: dict[str, Future] = {}
        #traceback of each cached failure as it was when the lookup failed
        self._tracebacks: dict[Future, TracebackType | None] = {}

    def resolve(self, issue_id: str) -> IssueStatus:
        check_issue_id(issue_id)
        with self._lock:
            entry = self._entries.get(issue_id)
            owner = entry is None
            if owner:
                entry = Future()
                self._entries[issue_id] = entry

        if owner:
            self._fetch(issue_id, entry)
        else:
            logger.debug("issue %s: %s", issue_id, "cached" if entry.done() else "waiting for lookup in flight")
        return self._replay(entry)

    def _fetch(self, issue_id: str, entry: Future) -> None:
        logger.debug("issue %s: not cached, asking %s", issue_id, type(self._tracker).__name__)
        try:
            status = self._tracker.resolve(issue_id)
        except Exception as e:
            logger.warning("issue %s: lookup failed, caching the failure: %s", issue_id, e)
            self._tracebacks[entry] = e.__traceback__
            entry.set_exception(e)
            return
        except BaseException as e:
            #interrupted, not failed: release the waiters but let the next caller try again
            with self._lock:
                del self._entries[issue_id]
            self._tracebacks[entry] = e.__traceback__
            entry.set_exception(e)
            raise
        entry.set_result(status)

    def _replay(self, entry: Future) -> IssueStatus:
        error = entry.exception()
        if error is None:
            return entry.result()
        #raise with the traceback recorded at failure time, not the one left by the previous replay
        raise error.with_traceback(self._tracebacks.get(entry))

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    def cached_ids(self) -> frozenset[str]:
        """Return the ids holding a terminal (successful or failed) result."""
        with self._lock:
            return frozenset(issue_id for issue_id, entry in self._entries.items() if entry.done())

    def __len__(self) -> int:
        return len(self.cached_ids())

    def __repr__(self) -> str:
        return f"<IssueCache tracker={self._tracker!r} cached={len(self)}>"
