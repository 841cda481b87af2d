"""
Configuration
-------------
The client is configured with three values, usually taken from a vendor preset in vendors.py:

    url_scheme              issue id -> URL of the issue's JSON document
    accepted_content_type   sent as the Accept header
    is_open_predicate       parsed JSON document -> IssueStatus

get_tracker_from_env() builds one of the presets from environment variables instead:

    github  KNOWN_ISSUES_GITHUB_REPO     owner/repo
    gitlab  KNOWN_ISSUES_GITLAB_PROJECT  group/project or numeric id
            KNOWN_ISSUES_GITLAB_URL      optional, defaults to https://gitlab.com
    jira    KNOWN_ISSUES_JIRA_URL        https://myorg.atlassian.net

Requests are anonymous and never retried.

Dependencies:
    uv add requests

"""
#to avoid having to consider forward declarations, the below line must be first line in the file
from __future__ import annotations

import json
import logging
import os
import re
from email.message import Message
from typing import Any

import requests

from issue_tracker_interface.errors import BadContentTypeError, BadJsonError, HttpStatusError, TransportError
from issue_tracker_interface.status import IssueStatus, check_issue_id
from issue_tracker_interface.tracker import IssueTracker
from json_http_tracker_impl.cache import IssueCache
from json_http_tracker_impl.predicates import IssueJsonPredicate
from json_http_tracker_impl.url_scheme import IssueTrackerUrlScheme
from json_http_tracker_impl.vendors import DEFAULT_USER_AGENT, TrackerConfig, github, gitlab, jira

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

DEFAULT_CHARSET = "utf-8"

#RFC 7230 token characters
_TOKEN_RE = re.compile(r"^[!#$%&'*+.^_`|~0-9A-Za-z-]+$")


def _is_token(value: str) -> bool:
    return bool(_TOKEN_RE.match(value))


def parse_charset(content_type: str | None) -> str:
    """
    Notes on usage:
        Returns the charset parameter of a Content-Type header value.
        No header, or a header without a charset parameter, means utf-8.
        Parameter splitting and unquoting is done by email.message.Message.

    Raises:
        BadContentTypeError: If the header is present but is not 'type/subtype[; name=value]...',
                             or names a charset that is not a text encoding Python knows.
    """
    if content_type is None:
        return DEFAULT_CHARSET

    header = Message()
    header["Content-Type"] = content_type
    (media_type, _), *parameters = header.get_params()
    main_type, sep, sub_type = media_type.partition("/")
    if not sep or not _is_token(main_type) or not _is_token(sub_type):
        raise BadContentTypeError(content_type)

    charset: str | None = None
    for name, value in parameters:
        #tolerate a trailing ';'
        if not name and not value:
            continue
        if not _is_token(name) or not value:
            raise BadContentTypeError(content_type, f"malformed parameter {name}={value}")
        if name.lower() == "charset":
            charset = value

    if charset is None:
        return DEFAULT_CHARSET
    try:
        #bytes.decode refuses codecs that are not text encodings (base64, rot13, zlib...)
        b"".decode(charset)
    except LookupError as e:
        raise BadContentTypeError(content_type, f"unknown or non-text charset {charset!r}") from e
    return charset


# ---------------------------------------------------------------------------
# Client implementation
# ---------------------------------------------------------------------------

class JsonHttpIssueTrackerClient(IssueTracker):
    """
    Args:
        url_scheme:            Maps an issue id to the URL of its JSON document
        accepted_content_type: Media type sent in the Accept header (e.g. 'application/vnd.github.v3+json')
        is_open_predicate:     Maps the parsed JSON document to an IssueStatus
        user_agent:            Sent in the User-Agent header
        timeout:               Passed to requests; None imposes no timeout
        session:               requests.Session to send through; a new one is created when omitted
    """

    def __init__(
        self,
        url_scheme: IssueTrackerUrlScheme,
        accepted_content_type: str,
        is_open_predicate: IssueJsonPredicate,
        *,
        user_agent: str = DEFAULT_USER_AGENT,
        timeout: float | None = None,
        session: requests.Session | None = None,
        ) -> None:
        self._url_scheme = url_scheme
        self._accepted_content_type = accepted_content_type
        self._is_open_predicate = is_open_predicate
        self._timeout = timeout
        self._session = session if session is not None else requests.Session()
        self._session.headers.update({"Accept": accepted_content_type, "User-Agent": user_agent})

    @classmethod
    def from_config(cls, config: TrackerConfig, *, session: requests.Session | None = None) -> JsonHttpIssueTrackerClient:
        return cls(
            config.url_scheme,
            config.accepted_content_type,
            config.is_open_predicate,
            user_agent=config.user_agent,
            timeout=config.timeout,
            session=session,
        )

    # ------------------------------------------------------------------
    # IssueTracker contract
    # ------------------------------------------------------------------

    def resolve(self, issue_id: str) -> IssueStatus:
        """Fetch the issue's JSON document and apply the predicate to it."""
        check_issue_id(issue_id)
        status = self._is_open_predicate(self._get_json(issue_id))
        logger.debug("issue %s is %s", issue_id, status.value)
        return status

    def cached(self) -> IssueCache:
        """
        Cache issue statuses for the lifetime of the process.

        Typically, this caches for subsequent tests in the same test run.
        """
        return IssueCache(self)

    # ------------------------------------------------------------------
    # Internal HTTP helpers
    # ------------------------------------------------------------------

    def _get_json(self, issue_id: str) -> Any:
        url = self._url_scheme(issue_id)
        logger.debug("GET %s (Accept: %s)", url, self._accepted_content_type)
        try:
            response = self._session.get(url, timeout=self._timeout)
        except requests.RequestException as e:
            raise TransportError(f"request to {url} failed: {e}") from e
        self._raise_for_status(response)
        return self._parse_json(response)

    @staticmethod
    def _raise_for_status(response: requests.Response) -> None:
        #redirects are followed by requests, so a 3xx here is one it could not follow
        if response.status_code >= 300:
            raise HttpStatusError(response.status_code, response.url)

    @staticmethod
    def _parse_json(response: requests.Response) -> Any:
        charset = parse_charset(response.headers.get("Content-Type"))
        try:
            return json.loads(response.content.decode(charset))
        except UnicodeDecodeError as e:
            raise BadJsonError(f"response from {response.url} is not valid {charset}: {e}") from e
        except ValueError as e:
            raise BadJsonError(f"response from {response.url} is not JSON: {e}") from e

    def __repr__(self) -> str:
        return f"<JsonHttpIssueTrackerClient accept={self._accepted_content_type!r}>"


# ---------------------------------------------------------------------------
# Get tracker
# ---------------------------------------------------------------------------

def get_tracker(
    config: TrackerConfig,
    *,
    cached: bool = True,
    session: requests.Session | None = None,
    ) -> IssueTracker:
    """Return a tracker for the given configuration, wrapped in an IssueCache unless cached=False."""
    client = JsonHttpIssueTrackerClient.from_config(config, session=session)
    return client.cached() if cached else client


def _require_env(*names: str) -> dict[str, str]:
    values = {name: os.environ.get(name, "") for name in names}
    #collects the missing fields and raises an error alerting to the missing values
    missing = [name for name, val in values.items() if not val]
    if missing:
        raise EnvironmentError(f"Missing required environment variables: {', '.join(missing)}.")
    return values


def config_from_env(vendor: str) -> TrackerConfig:
    """Build a vendor preset from KNOWN_ISSUES_* environment variables.

    Raises:
        ValueError:       If vendor is not one of github, gitlab, jira.
        EnvironmentError: Listing every required variable that is not set.
    """
    if vendor == "github":
        repo = _require_env("KNOWN_ISSUES_GITHUB_REPO")["KNOWN_ISSUES_GITHUB_REPO"]
        owner, sep, name = repo.partition("/")
        if not sep or not owner or not name:
            raise EnvironmentError(f"KNOWN_ISSUES_GITHUB_REPO must look like owner/repo, got {repo!r}")
        return github(owner, name)
    if vendor == "gitlab":
        project = _require_env("KNOWN_ISSUES_GITLAB_PROJECT")["KNOWN_ISSUES_GITLAB_PROJECT"]
        return gitlab(project, base_url=os.environ.get("KNOWN_ISSUES_GITLAB_URL") or "https://gitlab.com")
    if vendor == "jira":
        return jira(_require_env("KNOWN_ISSUES_JIRA_URL")["KNOWN_ISSUES_JIRA_URL"])
    raise ValueError(f"unknown tracker vendor {vendor!r}, expected one of github, gitlab, jira")


def get_tracker_from_env(vendor: str, *, cached: bool = True) -> IssueTracker:
    """Return a tracker for vendor configured from the environment."""
    return get_tracker(config_from_env(vendor), cached=cached)
