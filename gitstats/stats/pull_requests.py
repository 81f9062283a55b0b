# The MIT License (MIT)
# Copyright © 2025 Entrius

from typing import Any, Dict, List, Optional

import bittensor as bt

from gitstats.classes import PullRequest
from gitstats.constants import DEFAULT_PER_PAGE
from gitstats.utils.github_api_tools import GitHubGateway
from gitstats.utils.repo_cache import RepositoryMetadataCache
from gitstats.utils.utils import parse_repository_url


def build_search_query(username: str) -> str:
    """Search query for every pull request authored by ``username``, including ones to their own repos."""
    return f'type:pr author:"{username}"'


def is_closed_unmerged(item: Dict[str, Any]) -> bool:
    """True for a PR that was closed without being merged."""
    return item.get('state') == 'closed' and not (item.get('pull_request') or {}).get('merged_at')


class PullRequestCollector:
    """Collects a user's authored pull requests from the issue search API.

    Only the first results page is read, so very active accounts get a
    truncated list of at most ``per_page`` items.
    """

    def __init__(self, gateway: GitHubGateway, cache: Optional[RepositoryMetadataCache] = None):
        self.gateway = gateway
        self.cache = cache if cache is not None else RepositoryMetadataCache(gateway)

    def search(self, username: str, per_page: int = DEFAULT_PER_PAGE) -> List[Dict[str, Any]]:
        """Return raw search items for the first results page."""
        data = self.gateway.request(
            'GET',
            '/search/issues',
            params={
                'q': build_search_query(username),
                'per_page': per_page,
                'page': 1,
                'advanced_search': 'true',
            },
        ).unwrap()
        items = data.get('items') or []
        if data.get('incomplete_results'):
            bt.logging.warning(f"GitHub reported incomplete search results for {username}")
        if data.get('total_count', 0) > len(items):
            bt.logging.info(f"Search matched {data['total_count']} PRs, only the first {len(items)} are collected")
        return items

    def collect(self, username: str, per_page: int = DEFAULT_PER_PAGE) -> List[PullRequest]:
        """
        Collect, filter and enrich the user's pull requests.

        Args:
            username (str): GitHub login of the author
            per_page (int): Number of search results to request

        Returns:
            List[PullRequest]: PRs in search order, closed-unmerged PRs excluded
        """
        items = self.search(username, per_page)

        pull_requests: List[PullRequest] = []
        for item in items:
            if is_closed_unmerged(item):
                bt.logging.debug(f"Skipping closed unmerged PR {item.get('html_url')}")
                continue

            parsed = parse_repository_url(item.get('repository_url'))
            if parsed is None:
                bt.logging.warning(
                    f"Skipping PR {item.get('html_url')} - malformed repository URL: {item.get('repository_url')!r}"
                )
                continue

            owner, name = parsed
            metadata = self.cache.get(owner, name)
            pull_requests.append(PullRequest.from_search_item(item, f"{owner}/{name}", metadata))

        bt.logging.info(
            f"Collected {len(pull_requests)} pull requests for {username} "
            f"({len(items) - len(pull_requests)} skipped, {len(self.cache)} repositories looked up)"
        )
        return pull_requests
