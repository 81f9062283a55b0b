# The MIT License (MIT)
# Copyright © 2025 Entrius

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


class PRState(Enum):
    """Pull request state as published in the stats artifact"""

    MERGED = "merged"
    DRAFT = "draft"
    OPEN = "open"
    CLOSED = "closed"

    @classmethod
    def classify(cls, item: Dict[str, Any]) -> 'PRState':
        """Classify a search result item. Merge timestamp wins over the draft flag."""
        if (item.get('pull_request') or {}).get('merged_at'):
            return cls.MERGED
        if item.get('draft'):
            return cls.DRAFT
        return cls(item['state'])


@dataclass(frozen=True)
class GitHubUser:
    """Authenticated user identity, resolved once per run"""

    name: str
    username: str
    avatar: str

    @classmethod
    def from_github_response(cls, user_data: Dict[str, Any]) -> 'GitHubUser':
        """Create GitHubUser from a GET /user response"""
        return cls(
            name=user_data.get('name') or user_data['login'],
            username=user_data['login'],
            avatar=user_data.get('avatar_url', ''),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {'name': self.name, 'username': self.username, 'avatar': self.avatar}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'GitHubUser':
        return cls(name=data['name'], username=data['username'], avatar=data['avatar'])


@dataclass(frozen=True)
class RepoMetadata:
    """Repository metadata needed to enrich a pull request"""

    owner_type: str  # "User" or "Organization"
    stargazers_count: int

    @classmethod
    def from_github_response(cls, repo_data: Dict[str, Any]) -> 'RepoMetadata':
        """Create RepoMetadata from a GET /repos/{owner}/{name} response"""
        return cls(
            owner_type=repo_data['owner']['type'],
            stargazers_count=repo_data.get('stargazers_count', 0),
        )


@dataclass
class PullRequest:
    """A pull request authored by the user, enriched with its repository's metadata"""

    repo: str  # owner/name
    title: str
    url: str
    created_at: str
    state: PRState
    number: int
    type: str  # owner type of the parent repository
    stars: int

    @classmethod
    def from_search_item(cls, item: Dict[str, Any], repo_full_name: str, metadata: RepoMetadata) -> 'PullRequest':
        """Create PullRequest from a /search/issues item and its repository metadata"""
        return cls(
            repo=repo_full_name,
            title=item['title'],
            url=item['html_url'],
            created_at=item['created_at'],
            state=PRState.classify(item),
            number=item['number'],
            type=metadata.owner_type,
            stars=metadata.stargazers_count,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'repo': self.repo,
            'title': self.title,
            'url': self.url,
            'created_at': self.created_at,
            'state': self.state.value,
            'number': self.number,
            'type': self.type,
            'stars': self.stars,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'PullRequest':
        return cls(
            repo=data['repo'],
            title=data['title'],
            url=data['url'],
            created_at=data['created_at'],
            state=PRState(data['state']),
            number=data['number'],
            type=data['type'],
            stars=data['stars'],
        )


@dataclass
class Repository:
    """Owned repository and its star count"""

    name: str
    stargazers: int

    def to_dict(self) -> Dict[str, Any]:
        return {'name': self.name, 'stargazers': self.stargazers}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Repository':
        return cls(name=data['name'], stargazers=data['stargazers'])


@dataclass
class RankStats:
    """Letter grade and percentile (lower is better)"""

    level: Optional[str]
    percentile: float

    def to_dict(self) -> Dict[str, Any]:
        return {'level': self.level, 'percentile': self.percentile}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'RankStats':
        return cls(level=data['level'], percentile=data['percentile'])


@dataclass
class PullRequestStats:
    total_count: int = 0
    merged_count: int = 0
    data: List[PullRequest] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'totalCount': self.total_count,
            'mergedCount': self.merged_count,
            'data': [pr.to_dict() for pr in self.data],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'PullRequestStats':
        return cls(
            total_count=data['totalCount'],
            merged_count=data['mergedCount'],
            data=[PullRequest.from_dict(pr) for pr in data['data']],
        )


@dataclass
class IssuesStats:
    total_count: int = 0
    open_count: int = 0
    closed_count: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {'totalCount': self.total_count, 'openCount': self.open_count, 'closedCount': self.closed_count}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'IssuesStats':
        return cls(total_count=data['totalCount'], open_count=data['openCount'], closed_count=data['closedCount'])


@dataclass
class DiscussionsStats:
    total_count: int = 0
    comments_count: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {'totalCount': self.total_count, 'commentsCount': self.comments_count}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'DiscussionsStats':
        return cls(total_count=data['totalCount'], comments_count=data['commentsCount'])


@dataclass
class RepositoriesStats:
    total_count: int = 0
    total_stargazers: int = 0
    data: List[Repository] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'totalCount': self.total_count,
            'totalStargazers': self.total_stargazers,
            'data': [repo.to_dict() for repo in self.data],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'RepositoriesStats':
        return cls(
            total_count=data['totalCount'],
            total_stargazers=data['totalStargazers'],
            data=[Repository.from_dict(repo) for repo in data['data']],
        )


@dataclass
class GraphQLStats:
    """Aggregate counters returned by the batched GraphQL query.

    Counters missing from the response default to 0. ``repositories`` holds at
    most as many nodes as the query requested, so ``total_stargazers`` is an
    approximation for accounts owning more repositories than that.
    """

    commits: int = 0
    reviews: int = 0
    repositories_contributed_to: int = 0
    pull_requests: int = 0
    merged_pull_requests: int = 0
    open_issues: int = 0
    closed_issues: int = 0
    followers: int = 0
    discussions: int = 0
    discussion_comments: int = 0
    repositories_total: int = 0
    repositories: List[Repository] = field(default_factory=list)

    @property
    def total_stargazers(self) -> int:
        return sum(repo.stargazers for repo in self.repositories)

    @classmethod
    def from_graphql_response(cls, user_node: Dict[str, Any]) -> 'GraphQLStats':
        """Create GraphQLStats from the ``data.user`` node of the stats query"""

        def count(key: str, attr: str = 'totalCount') -> int:
            return (user_node.get(key) or {}).get(attr) or 0

        repositories = user_node.get('repositories') or {}
        return cls(
            commits=count('commits', 'totalCommitContributions'),
            reviews=count('reviews', 'totalPullRequestReviewContributions'),
            repositories_contributed_to=count('repositoriesContributedTo'),
            pull_requests=count('pullRequests'),
            merged_pull_requests=count('mergedPullRequests'),
            open_issues=count('openIssues'),
            closed_issues=count('closedIssues'),
            followers=count('followers'),
            discussions=count('repositoryDiscussions'),
            discussion_comments=count('repositoryDiscussionComments'),
            repositories_total=repositories.get('totalCount') or 0,
            repositories=[
                Repository(name=node['name'], stargazers=(node.get('stargazers') or {}).get('totalCount') or 0)
                for node in repositories.get('nodes') or []
                if node
            ],
        )


@dataclass
class GitHubStats:
    """The published stats record: aggregate counters, pull requests and rank"""

    user: GitHubUser
    commits: int = 0
    reviews: int = 0
    repositories_contributed_to: int = 0
    pull_request: PullRequestStats = field(default_factory=PullRequestStats)
    issues: IssuesStats = field(default_factory=IssuesStats)
    followers: int = 0
    discussions: DiscussionsStats = field(default_factory=DiscussionsStats)
    repositories: RepositoriesStats = field(default_factory=RepositoriesStats)
    rank: Optional[RankStats] = None

    def to_dict(self) -> Dict[str, Any]:
        data = {
            'user': self.user.to_dict(),
            'commits': self.commits,
            'reviews': self.reviews,
            'repositoriesContributedTo': self.repositories_contributed_to,
            'pullRequest': self.pull_request.to_dict(),
            'issues': self.issues.to_dict(),
            'followers': self.followers,
            'discussions': self.discussions.to_dict(),
            'repositories': self.repositories.to_dict(),
        }
        if self.rank is not None:
            data['rank'] = self.rank.to_dict()
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'GitHubStats':
        return cls(
            user=GitHubUser.from_dict(data['user']),
            commits=data['commits'],
            reviews=data['reviews'],
            repositories_contributed_to=data['repositoriesContributedTo'],
            pull_request=PullRequestStats.from_dict(data['pullRequest']),
            issues=IssuesStats.from_dict(data['issues']),
            followers=data['followers'],
            discussions=DiscussionsStats.from_dict(data['discussions']),
            repositories=RepositoriesStats.from_dict(data['repositories']),
            rank=RankStats.from_dict(data['rank']) if data.get('rank') is not None else None,
        )
