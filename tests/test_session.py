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

"""Tests for meowdown.site.session."""

from __future__ import annotations

import subprocess
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from meowdown.site.config import CONFIG_FILENAME, SiteConfig
from meowdown.site.session import BuildSession, get_git_revision
from meowdown.templates.frontmatter import FrontMatterError
from meowdown.templates.layouts import LayoutNotFoundError
from meowdown.templates.nodes import Page

DEFAULT_LAYOUT = "<html><title>{{ title }}</title>{{ content }}</html>"


@pytest.fixture
def project(tmp_path):
    (tmp_path / "templates").mkdir()
    (tmp_path / "templates" / "default.tpl.html").write_text(DEFAULT_LAYOUT)
    return tmp_path


@pytest.fixture
def session(project):
    config = SiteConfig(config_path=project / CONFIG_FILENAME)
    return BuildSession(config, site_strings={"site.url": "https://x.test"})


class TestGitRevision:
    def test_short_revision(self):
        result = MagicMock(returncode=0, stdout="abc1234\n")
        with patch("meowdown.site.session.subprocess.run", return_value=result):
            assert get_git_revision() == "abc1234"

    def test_without_git(self):
        with patch("meowdown.site.session.subprocess.run", side_effect=OSError("no git")):
            assert get_git_revision().startswith("nogit-")

    def test_not_a_repository(self):
        result = MagicMock(returncode=128, stdout="")
        with patch("meowdown.site.session.subprocess.run", return_value=result):
            assert get_git_revision().startswith("nogit-")

    def test_timeout(self):
        error = subprocess.TimeoutExpired(cmd="git", timeout=10)
        with patch("meowdown.site.session.subprocess.run", side_effect=error):
            assert get_git_revision().startswith("nogit-")


class TestSessionSetup:
    def test_with_defaults(self, project):
        (project / "data").mkdir()
        (project / "data" / "site.yaml").write_text("site.url: https://x.test\nnav: [a, b]\n")
        config = SiteConfig(config_path=project / CONFIG_FILENAME)
        with patch("meowdown.site.session.get_git_revision", return_value="abc123"):
            session = BuildSession.with_defaults(config)
        assert session.site_strings == {"site.url": "https://x.test", "build_revision": "abc123"}
        assert session.site_data == {"nav": ["a", "b"]}

    def test_site_build_revision_wins(self, project):
        (project / "data").mkdir()
        (project / "data" / "site.yaml").write_text("build_revision: release-1\n")
        config = SiteConfig(config_path=project / CONFIG_FILENAME)
        with patch("meowdown.site.session.get_git_revision", return_value="abc123"):
            session = BuildSession.with_defaults(config)
        assert session.site_strings["build_revision"] == "release-1"

    def test_sessions_do_not_share_state(self, project):
        config = SiteConfig(config_path=project / CONFIG_FILENAME)
        first = BuildSession(config)
        second = BuildSession(config)
        first.get_layout("default")
        assert first.functions is not second.functions
        assert not second.layouts.is_cached("default")

    def test_base_url(self, session):
        assert session.base_url == "https://x.test"
        assert session.relative_url("/a.html") == "https://x.test/a.html"

    def test_missing_base_url(self, project):
        session = BuildSession(SiteConfig(config_path=project / CONFIG_FILENAME))
        assert session.relative_url("a.html") == "/a.html"

    def test_output_path_for(self, session, project):
        source = project / "blog" / "post.md"
        assert session.output_path_for(source) == project / "output" / "blog" / "post.html"


class TestBuildPage:
    def test_page_node(self, session, project):
        source = project / "index.md"
        source.write_text("---\ntitle: Home\n---\n# Hi\n\n[about](about.html)\n")
        page = session.build_page(source)
        assert isinstance(page, Page)
        assert page.front_matter["title"] == "Home"
        assert page.front_matter["layout"] == "default"
        assert page.parent.name == "default"
        assert page.output_path == project / "output" / "index.html"

    def test_render_page(self, session, project):
        source = project / "index.md"
        source.write_text("---\ntitle: Home\n---\n[about](about.html)\n")
        html = session.render_page(session.build_page(source))
        assert html == (
            '<html><title>Home</title><p><a href="https://x.test/about.html">about</a></p></html>'
        )

    def test_title_defaults_to_stem(self, session, project):
        source = project / "about-us.md"
        source.write_text("text")
        assert session.build_page(source).front_matter["title"] == "about-us"

    def test_layout_override(self, session, project):
        (project / "templates" / "plain.tpl.html").write_text('---\nlayout: ""\n---\n[{{ content }}]')
        source = project / "page.md"
        source.write_text("text")
        page = session.build_page(source, layout="plain")
        assert session.render_page(page) == "[<p>text</p>]"

    def test_no_layout(self, session, project):
        source = project / "raw.md"
        source.write_text('---\nlayout: ""\n---\ntext')
        page = session.build_page(source)
        assert page.parent is None
        assert session.render_page(page) == "<p>text</p>"

    def test_json_data_list(self, session, project):
        (project / "data").mkdir()
        (project / "data" / "posts.yaml").write_text("- title: A\n- title: B\n")
        source = project / "list.md"
        source.write_text("---\njson_data: data/posts.yaml\n---\n{{ json_list }}")
        page = session.build_page(source)
        assert list(page.data["items"]) == [{"title": "A"}, {"title": "B"}]
        assert "<h3>B</h3>" in session.render_page(page)

    def test_json_data_mapping(self, session, project):
        (project / "posts.json").write_text('{"posts": [{"title": "A"}], "count": 1}')
        source = project / "list.md"
        source.write_text("---\njson_data: posts.json\n---\nx")
        page = session.build_page(source)
        assert list(page.data) == ["posts"]

    def test_missing_json_data(self, session, project):
        source = project / "list.md"
        source.write_text("---\njson_data: nope.json\n---\nx")
        assert dict(session.build_page(source).data) == {}

    def test_invalid_front_matter(self, session, project):
        source = project / "bad.md"
        source.write_text("---\ntitle: [oops\n---\nx")
        with pytest.raises(FrontMatterError, match="bad.md"):
            session.build_page(source)

    def test_missing_layout(self, session, project):
        source = project / "page.md"
        source.write_text("---\nlayout: gone\n---\nx")
        with pytest.raises(LayoutNotFoundError):
            session.build_page(source)

    def test_root_context(self, session, project):
        source = project / "index.md"
        source.write_text("---\ntitle: Home\n---\nx")
        page = session.build_page(source)
        ctx = session.root_context(page)
        assert ctx.lookup_string("source_path") == str(source)
        assert ctx.lookup_string("title") == "Home"

    def test_source_path_available_to_functions(self, session, project):
        (project / "templates" / "stamp.tpl.html").write_text(
            '---\nlayout: ""\n---\n{{ modified-datetime-pretty }}'
        )
        source = project / "page.md"
        source.write_text("---\nlayout: stamp\n---\nx")
        assert session.render_page(session.build_page(source)) != ""


def test_relative_path_resolution(session, project):
    assert session.resolve_path("data/x.yaml") == project / "data" / "x.yaml"
    assert session.resolve_path(Path("/abs/x")) == Path("/abs/x")


class TestRenderingStack:
    def test_push_and_pop(self, session, project):
        page = project / "index.md"
        assert not session.is_rendering(page)
        with session.rendering(page):
            assert session.is_rendering(page)
            assert session.is_rendering(str(page))
            assert session.rendering_chain == [page.resolve()]
        assert not session.is_rendering(page)

    def test_popped_on_error(self, session, project):
        page = project / "index.md"
        with pytest.raises(RuntimeError):
            with session.rendering(page):
                raise RuntimeError("boom")
        assert session.rendering_chain == []
