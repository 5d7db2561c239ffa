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

"""Rebuild the site when its sources change.

Usage::

    from meowdown.site import SiteConfig
    from meowdown.site.watch import watch_and_rebuild

    watch_and_rebuild(SiteConfig.discover())   # blocks until Ctrl+C

Changes to files outside :data:`WATCHED_EXTENSIONS`, and changes inside
an output directory, are ignored.  Rebuilds are at least
:data:`MIN_REBUILD_INTERVAL` seconds apart.  A failed build is logged and
watching continues.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Iterable
from functools import partial
from pathlib import Path
from typing import Any, Optional

import watchfiles

from meowdown.site.builder import build_site_for_each_variant
from meowdown.site.config import ConfigError, SiteConfig
from meowdown.templates.frontmatter import FrontMatterError
from meowdown.templates.layouts import LayoutError

logger = logging.getLogger(__name__)

WATCHED_EXTENSIONS = frozenset(
    {"md", "tpl", "html", "css", "js", "yml", "yaml", "json", "csv"}
)
MIN_REBUILD_INTERVAL = 2.0

ChangeBatch = Iterable[tuple[Any, str]]


def should_trigger_rebuild(
    paths: Iterable[str | Path], ignore: Iterable[Path] = ()
) -> bool:
    """True if any of *paths* is a site source outside the *ignore* dirs."""
    ignored = [Path(d).resolve() for d in ignore]
    for path in paths:
        path = Path(path)
        if path.suffix.lstrip(".") not in WATCHED_EXTENSIONS:
            continue
        resolved = path.resolve()
        if any(resolved.is_relative_to(d) for d in ignored):
            continue
        return True
    return False


def watch_paths(config: SiteConfig) -> list[Path]:
    """Existing directories to watch: inputs, assets, templates and data."""
    candidates = [c.input_path for c in config.for_each_variant()]
    candidates += [config.assets_dir, config.templates_dir, config.resolve("data")]

    paths: list[Path] = []
    for candidate in sorted({c.resolve() for c in candidates if c.is_dir()}):
        if not any(candidate.is_relative_to(p) for p in paths):
            paths.append(candidate)
    return paths


def output_paths(config: SiteConfig) -> list[Path]:
    return [c.output_path.resolve() for c in config.for_each_variant()]


def watch_and_rebuild(
    config: SiteConfig,
    rebuild: Optional[Callable[[], Any]] = None,
    *,
    changes: Optional[Iterable[ChangeBatch]] = None,
    min_interval: float = MIN_REBUILD_INTERVAL,
    clock: Callable[[], float] = time.monotonic,
) -> None:
    """Rebuild every variant of *config* whenever a source file changes.

    Args:
        config: Site configuration.
        rebuild: Called for each rebuild; builds every variant by default.
        changes: Batches of ``(change, path)`` pairs; a ``watchfiles``
            watcher over :func:`watch_paths` by default.
        min_interval: Seconds that must pass after a successful build
            before the next one starts.
        clock: Monotonic time source.
    """
    rebuild = rebuild or partial(build_site_for_each_variant, config)
    ignore = output_paths(config)

    if changes is None:
        paths = watch_paths(config)
        if not paths:
            logger.warning("Nothing to watch under %s", config.base_dir)
            return
        for path in paths:
            logger.info("Watching %s", path)
        changes = watchfiles.watch(*paths)

    last_build = clock()
    for batch in changes:
        changed = [Path(path) for _, path in batch]
        if not should_trigger_rebuild(changed, ignore):
            continue
        if clock() - last_build <= min_interval:
            logger.debug("Ignoring change within %.1fs of the last build", min_interval)
            continue

        logger.info("Change detected in %s", ", ".join(str(p) for p in changed))
        try:
            rebuild()
        except (LayoutError, ConfigError, FrontMatterError, OSError) as exc:
            logger.error("Build failed: %s", exc)
            continue
        logger.info("Rebuild successful")
        last_build = clock()
