#This file is for development purposes only
#usage: python main.py github 42 43   (with KNOWN_ISSUES_GITHUB_REPO=owner/repo set)

import logging
import sys

from issue_tracker_interface import FetchError
from json_http_tracker_impl import get_tracker_from_env


def main():
    logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")
    if len(sys.argv) < 3:
        print("usage: main.py {github,gitlab,jira} ISSUE_ID...")
        return 2

    vendor, issue_ids = sys.argv[1], sys.argv[2:]
    tracker = get_tracker_from_env(vendor)

    print(f"\nResolving {len(issue_ids)} issue(s) with {tracker!r}...")
    failed = False
    for issue_id in issue_ids:
        try:
            print(f"- {issue_id}: {tracker.resolve(issue_id).value}")
        except FetchError as e:
            print(f"- {issue_id}: lookup failed: {e}")
            failed = True

    return 1 if failed else 0

if __name__ == "__main__":
    sys.exit(main())
