"""Tests for ``artifactgraph files`` command.

Verifies:
    - Listing the files of a pipeline result (exit code 0).
    - Class path output, JSON output, and copying with version stripping.
    - Unresolvable files (exit code 1) and bad option combinations (exit code 2).
"""

from __future__ import annotations

import json
import os
from pathlib import Path

import pytest
from click.testing import CliRunner

from artifactgraph.cli.main import cli

REPOSITORY_YAML = """\
artifacts:
  - coordinate: g:app:1
    file: lib/app-1.jar
    dependencies:
      - g:core:1
      - {coordinate: "t:junit:4", scope: test}
  - coordinate: g:core:1
    file: lib/core-1.jar
  - coordinate: t:junit:4
    file: lib/junit-4.jar
  - coordinate: g:bad:1
    file: lib/bad-1.jar
    dependencies: [g:nofile:1]
  - coordinate: g:nofile:1
"""


@pytest.fixture
def files_repo(tmp_path: Path) -> Path:
    """A repository description whose artifacts declare files under ``lib/``."""
    lib = tmp_path / "lib"
    lib.mkdir()
    for name in ("app-1.jar", "core-1.jar", "junit-4.jar", "bad-1.jar"):
        (lib / name).write_bytes(name.encode())
    path = tmp_path / "repo.yaml"
    path.write_text(REPOSITORY_YAML)
    return path


def _pipeline(tmp_path: Path, text: str) -> Path:
    path = tmp_path / "pipeline.yaml"
    path.write_text(text)
    return path


class TestFilesListing:
    def test_text_output(self, runner: CliRunner, files_repo: Path, tmp_path: Path) -> None:
        pipeline = _pipeline(tmp_path, "root: g:app:1\n")
        result = runner.invoke(cli, ["files", str(pipeline), "-r", str(files_repo)])
        assert result.exit_code == 0
        assert "Artifact Files" in result.output
        for coordinate in ("g:app:1", "g:core:1", "t:junit:4"):
            assert coordinate in result.output

    def test_json_follows_the_pipeline(
        self, runner: CliRunner, files_repo: Path, tmp_path: Path
    ) -> None:
        pipeline = _pipeline(tmp_path, "root: g:app:1\nfilter:\n  scope: compile\n")
        result = runner.invoke(
            cli, ["files", str(pipeline), "-r", str(files_repo), "--format", "json"]
        )
        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert [f["artifact"] for f in data["files"]] == ["g:app:1", "g:core:1"]
        assert Path(data["files"][1]["file"]).name == "core-1.jar"
        assert "copied" not in data

    def test_class_path(self, runner: CliRunner, files_repo: Path, tmp_path: Path) -> None:
        pipeline = _pipeline(tmp_path, "root: g:app:1\n")
        result = runner.invoke(
            cli, ["files", str(pipeline), "-r", str(files_repo), "--class-path"]
        )
        assert result.exit_code == 0
        entries = result.stdout.strip().split(os.pathsep)
        assert [Path(e).name for e in entries] == ["app-1.jar", "core-1.jar", "junit-4.jar"]


class TestFilesCopy:
    def test_copy_with_stripped_versions(
        self, runner: CliRunner, files_repo: Path, tmp_path: Path
    ) -> None:
        pipeline = _pipeline(tmp_path, "root: g:app:1\n")
        target = tmp_path / "dist"
        result = runner.invoke(
            cli,
            [
                "files", str(pipeline), "-r", str(files_repo),
                "--copy-to", str(target), "--strip-version",
            ],
        )
        assert result.exit_code == 0
        assert sorted(p.name for p in target.iterdir()) == ["app.jar", "core.jar", "junit.jar"]
        assert f"3 file(s) copied to: {target}" in result.output

    def test_copy_json_lists_destinations(
        self, runner: CliRunner, files_repo: Path, tmp_path: Path
    ) -> None:
        pipeline = _pipeline(tmp_path, "root: g:app:1\nfilter:\n  scope: compile\n")
        target = tmp_path / "dist"
        result = runner.invoke(
            cli,
            [
                "files", str(pipeline), "-r", str(files_repo),
                "--copy-to", str(target), "--format", "json",
            ],
        )
        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert [Path(p).name for p in data["copied"]] == ["app-1.jar", "core-1.jar"]

    def test_strip_version_requires_copy_to(
        self, runner: CliRunner, files_repo: Path, tmp_path: Path
    ) -> None:
        pipeline = _pipeline(tmp_path, "root: g:app:1\n")
        result = runner.invoke(
            cli, ["files", str(pipeline), "-r", str(files_repo), "--strip-version"]
        )
        assert result.exit_code == 2
        assert "--strip-version requires --copy-to" in result.output


class TestFilesErrors:
    def test_unresolvable_file(self, runner: CliRunner, files_repo: Path, tmp_path: Path) -> None:
        pipeline = _pipeline(tmp_path, "root: g:bad:1\n")
        result = runner.invoke(cli, ["files", str(pipeline), "-r", str(files_repo)])
        assert result.exit_code == 1
        assert "Error: Failed to resolve artifact g:nofile:1" in result.output
        assert "g:bad:1 -> g:nofile:1" in result.output

    def test_unresolvable_file_json(
        self, runner: CliRunner, files_repo: Path, tmp_path: Path
    ) -> None:
        pipeline = _pipeline(tmp_path, "root: g:bad:1\n")
        result = runner.invoke(
            cli, ["files", str(pipeline), "-r", str(files_repo), "--format", "json"]
        )
        assert result.exit_code == 1
        assert "No file declared for g:nofile:1" in json.loads(result.stdout)["error"]

    def test_classifier_without_files(
        self, runner: CliRunner, files_repo: Path, tmp_path: Path
    ) -> None:
        pipeline = _pipeline(tmp_path, "root: g:app:1\n")
        result = runner.invoke(
            cli,
            ["files", str(pipeline), "-r", str(files_repo), "--classifier", "sources"],
        )
        assert result.exit_code == 1
        assert "Error: Failed to resolve artifact g:app:1" in result.output

    def test_invalid_pipeline(self, runner: CliRunner, files_repo: Path, tmp_path: Path) -> None:
        pipeline = _pipeline(tmp_path, "filter: full\n")
        result = runner.invoke(cli, ["files", str(pipeline), "-r", str(files_repo)])
        assert result.exit_code == 2
