"""Shared fixtures for artifactgraph tests."""

from __future__ import annotations

import pytest

from artifactgraph.core.graph import DependencyGraph
from tests.helpers import FakeRepository, dep


@pytest.fixture
def repo() -> FakeRepository:
    """An empty in-memory repository."""
    return FakeRepository()


@pytest.fixture
def webapp_repo(repo: FakeRepository) -> FakeRepository:
    """A small web application with a test-scoped and an optional dependency.

    ::

        g:app --> g:core --> g:util
          |         `-(runtime)-> x:log
          |-(test)--> t:junit --> t:hamcrest
          `-(optional)--> x:cache --> g:util
    """
    repo.add(
        "g:app:1:war",
        "g:core:1",
        dep("t:junit:4", scope="test"),
        dep("x:cache:2", optional=True),
    )
    repo.add("g:core:1", "g:util:1", dep("x:log:1", scope="runtime"))
    repo.add("g:util:1")
    repo.add("x:log:1")
    repo.add("t:junit:4", "t:hamcrest:1")
    repo.add("t:hamcrest:1")
    repo.add("x:cache:2", "g:util:1")
    return repo


@pytest.fixture
def webapp(webapp_repo: FakeRepository) -> DependencyGraph:
    """The built graph of ``webapp_repo``."""
    return webapp_repo.build("g:app:1:war")
