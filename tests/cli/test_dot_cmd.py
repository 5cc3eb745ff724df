"""Tests for ``artifactgraph dot`` command.

Verifies:
    - DOT source on stdout or in a file.
    - PNG rendering through the ``dot`` executable, and its failure.
"""

from __future__ import annotations

import subprocess
from pathlib import Path

import pytest
from click.testing import CliRunner

from artifactgraph.cli.main import cli


class TestDotSource:
    def test_writes_to_stdout(self, runner: CliRunner, repo_file: Path) -> None:
        result = runner.invoke(cli, ["dot", "g:app:1:war", "-r", str(repo_file)])
        assert result.exit_code == 0
        assert result.output.startswith("digraph G {\n")
        assert 'label="g:core"' in result.output
        assert 'label="test"' in result.output
        assert "x:noise" not in result.output

    def test_scope(self, runner: CliRunner, repo_file: Path) -> None:
        result = runner.invoke(
            cli, ["dot", "g:app:1:war", "-r", str(repo_file), "--scope", "compile"]
        )
        assert "t:junit" not in result.output

    def test_writes_to_file(
        self, runner: CliRunner, repo_file: Path, tmp_path: Path
    ) -> None:
        """With --output the source goes to the file, not stdout."""
        target = tmp_path / "graph.dot"
        result = runner.invoke(
            cli, ["dot", "g:app:1:war", "-r", str(repo_file), "--output", str(target)]
        )
        assert result.exit_code == 0
        assert "DOT written to:" in result.output
        assert "digraph" not in result.output
        assert target.read_text().startswith("digraph G {")

    def test_broken_metadata(self, runner: CliRunner, repo_file: Path) -> None:
        result = runner.invoke(cli, ["dot", "g:broken:1", "-r", str(repo_file)])
        assert result.exit_code == 1
        assert "Error:" in result.output


class TestDotPng:
    def test_png_without_graphviz(
        self,
        runner: CliRunner,
        repo_file: Path,
        tmp_path: Path,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        """A missing ``dot`` executable is an error, exit code 1."""
        monkeypatch.setattr("shutil.which", lambda name: None)
        result = runner.invoke(
            cli, ["dot", "g:app:1:war", "-r", str(repo_file), "--png", str(tmp_path / "g.png")]
        )
        assert result.exit_code == 1
        assert "executable not found" in result.output

    def test_png_rendered(
        self,
        runner: CliRunner,
        repo_file: Path,
        tmp_path: Path,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        def fake_run(args, input, stdout, stderr, check):
            stdout.write(b"PNG")
            return subprocess.CompletedProcess(args, 0, stderr=b"")

        monkeypatch.setattr("shutil.which", lambda name: "/usr/bin/dot")
        monkeypatch.setattr("subprocess.run", fake_run)
        png = tmp_path / "g.png"
        result = runner.invoke(cli, ["dot", "g:app:1:war", "-r", str(repo_file), "--png", str(png)])
        assert result.exit_code == 0
        assert "PNG written to:" in result.output
        assert "digraph" not in result.output
        assert png.read_bytes() == b"PNG"
