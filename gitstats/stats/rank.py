# The MIT License (MIT)
# Copyright © 2025 Entrius

from typing import Optional

from gitstats.classes import GitHubStats, RankStats
from gitstats.constants import (
    COMMITS_MEDIAN,
    COMMITS_WEIGHT,
    FOLLOWERS_MEDIAN,
    FOLLOWERS_WEIGHT,
    ISSUES_MEDIAN,
    ISSUES_WEIGHT,
    PRS_MEDIAN,
    PRS_WEIGHT,
    RANK_LEVELS,
    RANK_THRESHOLDS,
    REVIEWS_MEDIAN,
    REVIEWS_WEIGHT,
    STARS_MEDIAN,
    STARS_WEIGHT,
    TOTAL_RANK_WEIGHT,
)


def exponential_cdf(x: float) -> float:
    """Exponential CDF with median 1: 1 - 2^-x."""
    return 1 - 2**-x


def log_normal_cdf(x: float) -> float:
    """Approximation of a log-normal CDF with median 1: x / (1 + x)."""
    return x / (1 + x)


def rank_level(percentile: float) -> Optional[str]:
    """Letter grade for a percentile, or None when it is above 100."""
    for threshold, level in zip(RANK_THRESHOLDS, RANK_LEVELS):
        if percentile <= threshold:
            return level
    return None


def calculate_rank(
    commits: int,
    prs: int,
    issues: int,
    reviews: int,
    repos: int,
    stars: int,
    followers: int,
) -> RankStats:
    """
    Calculate the user's rank from their GitHub statistics.

    Each counter is normalized by its median, passed through a CDF and
    weighted; the rank is one minus the weighted average, so more activity
    gives a lower (better) percentile. ``repos`` is accepted but does not
    contribute to the score.

    Raises:
        ValueError: if any counter is negative
    """
    counters = {
        'commits': commits,
        'prs': prs,
        'issues': issues,
        'reviews': reviews,
        'repos': repos,
        'stars': stars,
        'followers': followers,
    }
    negative = [name for name, value in counters.items() if value < 0]
    if negative:
        raise ValueError(f"Rank counters must be non-negative: {', '.join(negative)}")

    rank = (
        1
        - (
            COMMITS_WEIGHT * exponential_cdf(commits / COMMITS_MEDIAN)
            + PRS_WEIGHT * exponential_cdf(prs / PRS_MEDIAN)
            + ISSUES_WEIGHT * exponential_cdf(issues / ISSUES_MEDIAN)
            + REVIEWS_WEIGHT * exponential_cdf(reviews / REVIEWS_MEDIAN)
            + STARS_WEIGHT * log_normal_cdf(stars / STARS_MEDIAN)
            + FOLLOWERS_WEIGHT * log_normal_cdf(followers / FOLLOWERS_MEDIAN)
        )
        / TOTAL_RANK_WEIGHT
    )

    percentile = rank * 100
    return RankStats(level=rank_level(percentile), percentile=percentile)


def rank_stats(stats: GitHubStats) -> RankStats:
    """Rank a merged stats record."""
    return calculate_rank(
        commits=stats.commits,
        prs=stats.pull_request.total_count,
        issues=stats.issues.total_count,
        reviews=stats.reviews,
        repos=stats.repositories.total_count,
        stars=stats.repositories.total_stargazers,
        followers=stats.followers,
    )
