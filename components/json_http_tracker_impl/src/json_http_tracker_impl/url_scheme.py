"""URL schemes: how an issue id becomes the address of its JSON document."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable
from urllib.parse import quote

__all__ = ["IssueTrackerUrlScheme", "UrlTemplate"]

IssueTrackerUrlScheme = Callable[[str], str]

PLACEHOLDER = "{issue_id}"


@dataclass(frozen=True)
class UrlTemplate:
    """
    A URL with an {issue_id} placeholder, e.g. 'https://api.github.com/repos/o/r/issues/{issue_id}'.

    The id is percent-encoded before substitution so that it always stays a single path segment.
    Other braces in the template are left alone.
    """

    template: str

    def __post_init__(self) -> None:
        if PLACEHOLDER not in self.template:
            raise ValueError(f"URL template must contain {PLACEHOLDER}: {self.template!r}")

    def __call__(self, issue_id: str) -> str:
        return self.template.replace(PLACEHOLDER, quote(issue_id, safe=""))
