# The MIT License (MIT)
# Copyright © 2025 Entrius

"""Shared fixtures for gitstats tests."""

from unittest.mock import Mock

import pytest

from gitstats.classes import GitHubUser
from gitstats.utils.github_api_tools import CallResult, FailureKind


def make_response(status_code=200, payload=None, headers=None, text=''):
    """Build a mock requests.Response."""
    response = Mock()
    response.status_code = status_code
    response.headers = headers or {}
    response.text = text
    response.url = 'https://api.github.com/mock'
    response.json.return_value = payload if payload is not None else {}
    return response


class FakeGateway:
    """Gateway double answering REST paths from a dict and recording every call.

    A route value may be a payload, a callable ``(params, json) -> payload`` or
    an exception, which is returned as a fatal CallResult.
    """

    def __init__(self, routes=None, graphql_data=None):
        self.routes = routes or {}
        self.graphql_data = graphql_data
        self.calls = []

    def request(self, method, path, params=None, json=None):
        self.calls.append((method, path, params, json))
        if (method, path) not in self.routes:
            return CallResult.failed(FailureKind.FATAL, KeyError(f'no route for {method} {path}'))
        outcome = self.routes[(method, path)]
        if isinstance(outcome, Exception):
            return CallResult.failed(FailureKind.FATAL, outcome)
        if callable(outcome):
            return CallResult.success(outcome(params=params, json=json))
        return CallResult.success(outcome)

    def query(self, document, variables=None):
        self.calls.append(('POST', 'graphql', variables, None))
        if isinstance(self.graphql_data, Exception):
            return CallResult.failed(FailureKind.FATAL, self.graphql_data)
        return CallResult.success(self.graphql_data)

    def paths(self, method=None):
        return [path for m, path, _, _ in self.calls if method is None or m == method]


@pytest.fixture
def response_factory():
    return make_response


@pytest.fixture
def fake_gateway_cls():
    return FakeGateway


@pytest.fixture
def user():
    return GitHubUser(name='Octo Cat', username='octocat', avatar='https://avatars.githubusercontent.com/u/1')
