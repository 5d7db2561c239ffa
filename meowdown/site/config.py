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

"""Site configuration.

Loaded from ``meowdown-config.yaml``::

    input_dir: content
    output_dir: "public/{{variant}}"
    variants: [en, de]
    generate_sitemap_xml: true

Relative paths are resolved against the directory of the config file, or
the working directory when there is no config file.  ``{{variant}}`` in the
input and output directories is replaced by the variant being built.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Optional

import yaml

from meowdown.templates.context import split_values
from meowdown.templates.frontmatter import FrontMatterError, load_data_file
from meowdown.templates.layouts import DEFAULT_PARENT, ROOT_LAYOUTS, LayoutPolicy

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "meowdown-config.yaml"
VARIANT_PLACEHOLDER = "{{variant}}"
SITE_DATA_FILE = "data/site.yaml"
ROBOTS_CONFIG_FILE = "data/robots_config.yaml"


class ConfigError(Exception):
    """Invalid or unreadable site configuration.  Fatal for the build."""


@dataclass
class SiteConfig:
    """Settings for one site build."""

    input_dir: str = "./"
    output_dir: str = "output"
    variant: Optional[str] = None
    variants: Optional[list[str]] = None
    generate_robots_txt: bool = False
    generate_sitemap_xml: bool = False
    base_url_key: str = "site.url"
    default_layout: str = DEFAULT_PARENT
    root_layouts: list[str] = field(default_factory=lambda: sorted(ROOT_LAYOUTS))
    skip_invalid_pages: bool = False
    config_path: Optional[Path] = None

    # --- Loading ------------------------------------------------------------

    @classmethod
    def from_dict(cls, data: dict[str, Any], config_path: Optional[Path] = None) -> SiteConfig:
        known = {f.name for f in fields(cls)} - {"config_path"}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigError(f"Unknown config keys in {config_path or 'config'}: {unknown}")
        config = cls(**data, config_path=config_path)
        config.validate()
        return config

    @classmethod
    def from_file(cls, path: str | Path) -> SiteConfig:
        path = Path(path)
        try:
            data = yaml.safe_load(path.read_text(encoding="utf-8"))
        except OSError as exc:
            raise ConfigError(f"Cannot read config {path}: {exc}") from exc
        except yaml.YAMLError as exc:
            raise ConfigError(f"Invalid YAML in config {path}: {exc}") from exc
        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ConfigError(f"Config {path} must be a mapping")
        return cls.from_dict(data, config_path=path.resolve())

    @classmethod
    def discover(cls, path: str | Path | None = None, cwd: Path | None = None) -> SiteConfig:
        """Load *path*, else ``meowdown-config.yaml`` in *cwd*, else defaults."""
        if path is not None:
            return cls.from_file(path)
        candidate = (cwd or Path.cwd()) / CONFIG_FILENAME
        if candidate.is_file():
            return cls.from_file(candidate)
        logger.debug("No %s found, using defaults", CONFIG_FILENAME)
        return cls()

    def validate(self) -> None:
        if self.variant is not None and self.variants is not None:
            raise ConfigError(
                f"Cannot specify both variant and variants in {self.config_path or 'config'}"
            )

    # --- Variants -----------------------------------------------------------

    def for_each_variant(self) -> Iterator[SiteConfig]:
        """Yield one config per variant to build (just ``self`` if none)."""
        self.validate()
        if self.variants is None:
            yield self
            return
        for variant in self.variants:
            yield replace(self, variant=variant, variants=None)

    def variant_path(self, path: Path) -> Optional[Path]:
        """``site.yaml`` -> ``site.<variant>.yaml``, or ``None`` without a variant."""
        if not self.variant or not self.variant.strip():
            return None
        return path.with_name(f"{path.stem}.{self.variant}{path.suffix}")

    # --- Paths --------------------------------------------------------------

    @property
    def base_dir(self) -> Path:
        if self.config_path is not None:
            return Path(self.config_path).parent
        return Path.cwd()

    def resolve(self, path: str | Path) -> Path:
        """Resolve *path* relative to the config file's directory."""
        path = Path(path)
        if path.is_absolute():
            return path
        return self.base_dir / path

    def _expand(self, template: str) -> str:
        if self.variants is not None:
            raise ConfigError("Paths are ambiguous with several variants; build each variant")
        if self.variant:
            return template.replace(VARIANT_PLACEHOLDER, self.variant)
        return template

    @property
    def input_path(self) -> Path:
        return self.resolve(self._expand(self.input_dir) or ".")

    @property
    def output_path(self) -> Path:
        return self.resolve(self._expand(self.output_dir) or ".")

    @property
    def templates_dir(self) -> Path:
        return self.resolve("templates")

    @property
    def fragments_dir(self) -> Path:
        return self.templates_dir / "fragments"

    @property
    def assets_dir(self) -> Path:
        return self.resolve("assets")

    def layout_policy(self) -> LayoutPolicy:
        return LayoutPolicy(
            default_parent=self.default_layout,
            root_layouts=frozenset(self.root_layouts),
        )


# ---------------------------------------------------------------------------
# Site data
# ---------------------------------------------------------------------------


def load_yaml_merged(config: SiteConfig, path: Path) -> Any:
    """Load *path* and shallow-merge the variant file over it if present."""
    primary = load_data_file(path)
    variant_path = config.variant_path(path)
    if variant_path is not None and variant_path.is_file():
        secondary = load_data_file(variant_path)
        if isinstance(primary, dict) and isinstance(secondary, dict):
            logger.debug("Merging %s over %s", variant_path, path)
            return {**primary, **secondary}
    return primary


def load_site_data(config: SiteConfig) -> tuple[dict[str, str], dict[str, Any]]:
    """Return ``(site_strings, site_data)`` from ``data/site.yaml``.

    Scalars become site-wide interpolation strings; lists and mappings are
    available to ``foreach`` and ``json_list`` on every page.
    """
    path = config.resolve(SITE_DATA_FILE)
    if not path.is_file():
        logger.warning("No site data at %s", path)
        return {}, {}
    try:
        data = load_yaml_merged(config, path)
    except FrontMatterError as exc:
        raise ConfigError(str(exc)) from exc
    if data is None:
        return {}, {}
    if not isinstance(data, dict):
        raise ConfigError(f"Site data {path} must be a mapping")
    return split_values(data)
