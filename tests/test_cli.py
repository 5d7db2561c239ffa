# meowdown: static site generator with a small template language
# Copyright (C) 2024-2026 Dr Horst Herb
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU Affero General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU Affero General Public License for more details.
#
# You should have received a copy of the GNU Affero General Public License
# along with this program.  If not, see <https://www.gnu.org/licenses/>.

"""Tests for the meowdown command line interface."""

from __future__ import annotations

import logging
from unittest.mock import patch

import pytest
from typer.testing import CliRunner

from meowdown import __version__
from meowdown.cli import app, setup_logging
from meowdown.site.scaffold import new_project

runner = CliRunner()


@pytest.fixture(autouse=True)
def _restore_logging():
    package_logger = logging.getLogger("meowdown")
    saved = (package_logger.handlers[:], package_logger.level, package_logger.propagate)
    with patch("meowdown.site.session.get_git_revision", return_value="rev1"):
        yield
    package_logger.handlers, package_logger.level, package_logger.propagate = saved


@pytest.fixture
def project(tmp_path):
    return new_project("site", use_default_template=True, parent=tmp_path)


class TestSetupLogging:
    def test_levels(self, monkeypatch):
        monkeypatch.delenv("MEOWDOWN_DEBUG", raising=False)
        setup_logging()
        assert logging.getLogger("meowdown").level == logging.WARNING
        setup_logging(verbose=True)
        assert logging.getLogger("meowdown").level == logging.INFO

    def test_debug_env(self, monkeypatch):
        monkeypatch.setenv("MEOWDOWN_DEBUG", "1")
        setup_logging()
        assert logging.getLogger("meowdown").level == logging.DEBUG


class TestCommands:
    def test_version(self):
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_new(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        result = runner.invoke(app, ["new", "blog", "--default"])
        assert result.exit_code == 0, result.output
        assert (tmp_path / "blog" / "templates" / "default.tpl.html").is_file()

    def test_build(self, project):
        config = str(project / "meowdown-config.yaml")
        result = runner.invoke(app, ["-c", config, "build"])
        assert result.exit_code == 0, result.output
        html = (project / "output" / "index.html").read_text()
        assert "<title>Welcome | My MeowDown Site</title>" in html
        assert "rev1" in html
        assert (project / "output" / "assets" / "style.css").is_file()
        assert (project / "output" / "assets" / "sitemap.xml").is_file()

    def test_build_is_default_command(self, project, monkeypatch):
        monkeypatch.chdir(project)
        result = runner.invoke(app, [])
        assert result.exit_code == 0, result.output
        assert (project / "output" / "index.html").is_file()

    def test_build_clean(self, project, monkeypatch):
        monkeypatch.chdir(project)
        stale = project / "output" / "stale.html"
        stale.parent.mkdir()
        stale.write_text("old")
        result = runner.invoke(app, ["build", "--clean"])
        assert result.exit_code == 0, result.output
        assert not stale.exists()
        assert (project / "output" / "index.html").is_file()

    def test_clean(self, project, monkeypatch):
        monkeypatch.chdir(project)
        runner.invoke(app, ["build"])
        result = runner.invoke(app, ["clean"])
        assert result.exit_code == 0, result.output
        assert not (project / "output").exists()

    def test_missing_layout_exits_nonzero(self, tmp_path, monkeypatch):
        new_project("bare", parent=tmp_path)
        monkeypatch.chdir(tmp_path / "bare")
        result = runner.invoke(app, ["build"])
        assert result.exit_code == 1

    def test_bad_config_exits_nonzero(self, tmp_path, monkeypatch):
        (tmp_path / "meowdown-config.yaml").write_text("unknown_key: 1\n")
        monkeypatch.chdir(tmp_path)
        result = runner.invoke(app, ["build"])
        assert result.exit_code == 1

    def test_watch_builds_then_watches(self, project, monkeypatch):
        monkeypatch.chdir(project)
        with patch("meowdown.cli.watch_and_rebuild") as watcher:
            result = runner.invoke(app, ["watch"])
        assert result.exit_code == 0, result.output
        assert (project / "output" / "index.html").is_file()
        assert watcher.call_count == 1
        assert "Watching for changes" in result.output

    def test_watch_stops_on_interrupt(self, project, monkeypatch):
        monkeypatch.chdir(project)
        with patch("meowdown.cli.watch_and_rebuild", side_effect=KeyboardInterrupt):
            result = runner.invoke(app, ["watch"])
        assert result.exit_code == 0, result.output
        assert "Stopped watching" in result.output
