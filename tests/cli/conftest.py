"""Shared fixtures for CLI tests.

Provides a repository description on disk for the commands to load, and a
``CliRunner`` with ``$ARTIFACTGRAPH_REPOSITORY`` cleared.
"""

from __future__ import annotations

from pathlib import Path

import pytest
from click.testing import CliRunner

from artifactgraph.cli.common import REPOSITORY_ENVVAR

REPOSITORY_YAML = """\
artifacts:
  - coordinate: g:app:1:war
    dependencies:
      - g:core:1
      - {coordinate: "t:junit:4", scope: test}
      - {coordinate: "x:cache:2", optional: true}
  - coordinate: g:core:1
    dependencies:
      - g:util:1
      - {coordinate: "x:log:1", scope: runtime, exclusions: ["x:noise"]}
  - coordinate: g:util:1
  - coordinate: x:log:1
    dependencies: [x:noise:1]
  - coordinate: x:noise:1
  - coordinate: t:junit:4
    dependencies: [t:hamcrest:1]
  - coordinate: t:hamcrest:1
  - coordinate: x:cache:2
  - coordinate: g:broken:1
    dependencies: [g:core:1, g:missing:1]
"""


@pytest.fixture
def runner() -> CliRunner:
    """Create a Click CliRunner for invoking commands."""
    return CliRunner(env={REPOSITORY_ENVVAR: None})


@pytest.fixture
def repo_file(tmp_path: Path) -> Path:
    """A repository description for a small web application.

    After exclusions the graph of ``g:app:1:war`` is::

        g:app --> g:core --> g:util
          |         `-(runtime)-> x:log
          `-(test)--> t:junit --> t:hamcrest

    ``x:cache`` is optional and ``x:noise`` is excluded below ``x:log``.
    ``g:broken:1`` depends on an artifact that is not described.
    """
    path = tmp_path / "repo.yaml"
    path.write_text(REPOSITORY_YAML)
    return path
