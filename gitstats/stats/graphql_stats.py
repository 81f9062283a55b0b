# The MIT License (MIT)
# Copyright © 2025 Entrius

from typing import List

import bittensor as bt

from gitstats.classes import (
    DiscussionsStats,
    GitHubStats,
    GitHubUser,
    GraphQLStats,
    IssuesStats,
    PullRequest,
    PullRequestStats,
    RepositoriesStats,
)
from gitstats.constants import DEFAULT_REPO_LIMIT
from gitstats.utils.github_api_tools import GitHubGateway

# aggregate counters for one user, fetched in a single round trip
STATS_QUERY = """
    query userStats($login: String!, $repoLimit: Int!) {
      user(login: $login) {
        name
        login
        commits: contributionsCollection {
          totalCommitContributions
        }
        reviews: contributionsCollection {
          totalPullRequestReviewContributions
        }
        repositoriesContributedTo(first: 1, contributionTypes: [COMMIT, ISSUE, PULL_REQUEST, REPOSITORY]) {
          totalCount
        }
        pullRequests(first: 1) {
          totalCount
        }
        mergedPullRequests: pullRequests(states: MERGED) {
          totalCount
        }
        openIssues: issues(states: OPEN) {
          totalCount
        }
        closedIssues: issues(states: CLOSED) {
          totalCount
        }
        followers {
          totalCount
        }
        repositoryDiscussions {
          totalCount
        }
        repositoryDiscussionComments(onlyAnswers: false) {
          totalCount
        }
        repositories(first: $repoLimit, ownerAffiliations: OWNER, orderBy: {direction: DESC, field: STARGAZERS}) {
          totalCount
          nodes {
            name
            stargazers {
              totalCount
            }
          }
        }
      }
    }
    """


def fetch_graphql_stats(gateway: GitHubGateway, user: GitHubUser, repo_limit: int = DEFAULT_REPO_LIMIT) -> GraphQLStats:
    """
    Fetch the user's aggregate counters with one GraphQL query.

    Args:
        gateway (GitHubGateway): Authenticated gateway
        user (GitHubUser): User whose counters are fetched
        repo_limit (int): Maximum owned repositories (by stars) to sum stargazers over

    Returns:
        GraphQLStats: Counters, missing ones defaulted to 0
    """
    data = gateway.query(STATS_QUERY, {'login': user.username, 'repoLimit': min(repo_limit, DEFAULT_REPO_LIMIT)}).unwrap()

    user_node = (data or {}).get('user')
    if not user_node:
        bt.logging.warning(f"GraphQL stats query returned no user node for {user.username}")
        return GraphQLStats()

    stats = GraphQLStats.from_graphql_response(user_node)
    if stats.repositories_total > len(stats.repositories):
        bt.logging.info(
            f"Star total covers {len(stats.repositories)} of {stats.repositories_total} repositories"
        )
    return stats


def build_stats(user: GitHubUser, graphql_stats: GraphQLStats, pull_requests: List[PullRequest]) -> GitHubStats:
    """Merge the GraphQL counters and the collected pull requests into one record (rank not yet set)."""
    return GitHubStats(
        user=user,
        commits=graphql_stats.commits,
        reviews=graphql_stats.reviews,
        repositories_contributed_to=graphql_stats.repositories_contributed_to,
        pull_request=PullRequestStats(
            total_count=graphql_stats.pull_requests,
            merged_count=graphql_stats.merged_pull_requests,
            data=list(pull_requests),
        ),
        issues=IssuesStats(
            total_count=graphql_stats.open_issues + graphql_stats.closed_issues,
            open_count=graphql_stats.open_issues,
            closed_count=graphql_stats.closed_issues,
        ),
        followers=graphql_stats.followers,
        discussions=DiscussionsStats(
            total_count=graphql_stats.discussions,
            comments_count=graphql_stats.discussion_comments,
        ),
        repositories=RepositoriesStats(
            total_count=graphql_stats.repositories_total,
            total_stargazers=graphql_stats.total_stargazers,
            data=list(graphql_stats.repositories),
        ),
    )
