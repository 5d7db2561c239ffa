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

"""Tests for meowdown.site.config."""

from __future__ import annotations

from pathlib import Path

import pytest

from meowdown.site.config import (
    CONFIG_FILENAME,
    ConfigError,
    SiteConfig,
    load_site_data,
)
from meowdown.templates.layouts import LayoutPolicy


def _write_config(root: Path, text: str) -> Path:
    path = root / CONFIG_FILENAME
    path.write_text(text)
    return path


class TestLoading:
    def test_defaults(self):
        config = SiteConfig()
        assert config.input_dir == "./"
        assert config.output_dir == "output"
        assert config.variant is None
        assert config.variants is None
        assert config.generate_robots_txt is False
        assert config.generate_sitemap_xml is False
        assert config.base_url_key == "site.url"
        assert config.default_layout == "default"
        assert config.root_layouts == ["default", "site"]
        assert config.skip_invalid_pages is False

    def test_from_file(self, tmp_path):
        path = _write_config(tmp_path, "input_dir: content\noutput_dir: public\ngenerate_sitemap_xml: true\n")
        config = SiteConfig.from_file(path)
        assert config.input_path == tmp_path / "content"
        assert config.output_path == tmp_path / "public"
        assert config.generate_sitemap_xml is True
        assert config.config_path == path.resolve()

    def test_empty_file(self, tmp_path):
        config = SiteConfig.from_file(_write_config(tmp_path, ""))
        assert config.output_path == tmp_path / "output"

    def test_unknown_key(self, tmp_path):
        with pytest.raises(ConfigError, match="colour"):
            SiteConfig.from_file(_write_config(tmp_path, "colour: blue\n"))

    def test_invalid_yaml(self, tmp_path):
        with pytest.raises(ConfigError, match="Invalid YAML"):
            SiteConfig.from_file(_write_config(tmp_path, "output_dir: [unclosed\n"))

    def test_not_a_mapping(self, tmp_path):
        with pytest.raises(ConfigError, match="must be a mapping"):
            SiteConfig.from_file(_write_config(tmp_path, "- a\n- b\n"))

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigError, match="Cannot read"):
            SiteConfig.from_file(tmp_path / "nope.yaml")

    def test_discover_in_cwd(self, tmp_path):
        _write_config(tmp_path, "output_dir: site\n")
        config = SiteConfig.discover(cwd=tmp_path)
        assert config.output_path == tmp_path / "site"

    def test_discover_defaults(self, tmp_path):
        config = SiteConfig.discover(cwd=tmp_path)
        assert config.config_path is None
        assert config.output_dir == "output"

    def test_discover_explicit_path(self, tmp_path):
        path = tmp_path / "other.yaml"
        path.write_text("output_dir: elsewhere\n")
        assert SiteConfig.discover(path).output_path == tmp_path / "elsewhere"

    def test_absolute_paths_kept(self, tmp_path):
        target = tmp_path / "abs"
        config = SiteConfig(output_dir=str(target), config_path=tmp_path / "sub" / CONFIG_FILENAME)
        assert config.output_path == target

    def test_layout_policy(self):
        config = SiteConfig(default_layout="base", root_layouts=["base"])
        assert config.layout_policy() == LayoutPolicy("base", frozenset({"base"}))


class TestVariants:
    def test_variant_and_variants_conflict(self, tmp_path):
        with pytest.raises(ConfigError, match="both variant and variants"):
            SiteConfig.from_file(_write_config(tmp_path, "variant: en\nvariants: [en, de]\n"))

    def test_for_each_variant(self, tmp_path):
        path = _write_config(
            tmp_path, 'output_dir: "out/{{variant}}"\nvariants: [en, de]\n'
        )
        configs = list(SiteConfig.from_file(path).for_each_variant())
        assert [c.variant for c in configs] == ["en", "de"]
        assert [c.output_path for c in configs] == [tmp_path / "out" / "en", tmp_path / "out" / "de"]
        assert all(c.variants is None for c in configs)

    def test_single_config_without_variants(self):
        config = SiteConfig()
        assert list(config.for_each_variant()) == [config]

    def test_paths_ambiguous_with_variants(self):
        config = SiteConfig(variants=["en", "de"])
        with pytest.raises(ConfigError):
            config.output_path

    def test_variant_substituted_in_input(self, tmp_path):
        config = SiteConfig(
            input_dir="content/{{variant}}", variant="de", config_path=tmp_path / CONFIG_FILENAME,
        )
        assert config.input_path == tmp_path / "content" / "de"

    def test_no_variant_leaves_placeholder(self, tmp_path):
        config = SiteConfig(output_dir="out/{{variant}}", config_path=tmp_path / CONFIG_FILENAME)
        assert config.output_path == tmp_path / "out" / "{{variant}}"

    def test_variant_path(self):
        assert SiteConfig(variant="de").variant_path(Path("data/site.yaml")) == Path("data/site.de.yaml")
        assert SiteConfig().variant_path(Path("data/site.yaml")) is None


class TestSiteData:
    def _project(self, tmp_path: Path, variant: str | None = None) -> SiteConfig:
        data = tmp_path / "data"
        data.mkdir()
        (data / "site.yaml").write_text(
            "site.url: https://x.test\nsite.name: Cats\nmenu:\n  - title: Home\n"
        )
        (data / "site.de.yaml").write_text("site.name: Katzen\n")
        return SiteConfig(variant=variant, config_path=tmp_path / CONFIG_FILENAME)

    def test_strings_and_data(self, tmp_path):
        strings, data = load_site_data(self._project(tmp_path))
        assert strings == {"site.url": "https://x.test", "site.name": "Cats"}
        assert data == {"menu": [{"title": "Home"}]}

    def test_variant_merged_over_base(self, tmp_path):
        strings, _ = load_site_data(self._project(tmp_path, variant="de"))
        assert strings["site.name"] == "Katzen"
        assert strings["site.url"] == "https://x.test"

    def test_missing_variant_file(self, tmp_path):
        strings, _ = load_site_data(self._project(tmp_path, variant="fr"))
        assert strings["site.name"] == "Cats"

    def test_missing_site_data(self, tmp_path):
        config = SiteConfig(config_path=tmp_path / CONFIG_FILENAME)
        assert load_site_data(config) == ({}, {})

    def test_invalid_site_data(self, tmp_path):
        (tmp_path / "data").mkdir()
        (tmp_path / "data" / "site.yaml").write_text("site.url: [oops\n")
        with pytest.raises(ConfigError):
            load_site_data(SiteConfig(config_path=tmp_path / CONFIG_FILENAME))
