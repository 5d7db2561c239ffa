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

"""Template function registry.

Functions are registered by name on a :class:`FunctionRegistry`, which is
owned by a single build session.  Every function shares the calling
convention::

    fn(args, block, context, session) -> str

where ``args`` are the whitespace-separated words following the function
name in the tag, ``block`` is the raw text of the block form (or ``None``),
``context`` is the current :class:`~meowdown.templates.context.TemplateContext`
and ``session`` the build session.  Built-ins are registered lazily on first
access; extensions can be added at any time via :meth:`FunctionRegistry.register`.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TYPE_CHECKING, Any, Optional

if TYPE_CHECKING:
    from meowdown.templates.context import TemplateContext

logger = logging.getLogger(__name__)

TemplateFunction = Callable[
    [list[str], Optional[str], "TemplateContext", Any], str
]


class FunctionRegistry:
    """Name to callable mapping for template functions.

    Args:
        builtins: Register the built-in functions on first access.
    """

    def __init__(self, builtins: bool = True) -> None:
        self._functions: dict[str, TemplateFunction] = {}
        self._builtins_pending = builtins

    def register(self, name: str, fn: TemplateFunction) -> None:
        """Register *fn* under *name*, replacing any existing entry."""
        self._ensure_builtins()
        self._functions[name] = fn

    def unregister(self, name: str) -> None:
        self._ensure_builtins()
        self._functions.pop(name, None)

    def get(self, name: str) -> TemplateFunction | None:
        self._ensure_builtins()
        return self._functions.get(name)

    def names(self) -> list[str]:
        """Return the names of all registered functions."""
        self._ensure_builtins()
        return list(self._functions.keys())

    def __contains__(self, name: object) -> bool:
        self._ensure_builtins()
        return name in self._functions

    def invoke(
        self,
        name: str,
        args: list[str],
        block: str | None,
        context: TemplateContext,
        session: Any,
    ) -> str:
        """Call the function *name*.

        An unknown name renders as the name itself, the same pass-through
        the parser applies to unknown tags.
        """
        fn = self.get(name)
        if fn is None:
            logger.debug("Unknown template function %r", name)
            return name
        return fn(args, block, context, session)

    # -----------------------------------------------------------------------
    # Lazy built-in registration
    # -----------------------------------------------------------------------

    def _ensure_builtins(self) -> None:
        if not self._builtins_pending:
            return
        self._builtins_pending = False
        from meowdown.templates.builtins import register_builtins

        register_builtins(self)


def default_registry() -> FunctionRegistry:
    """Return a new registry holding the built-in functions."""
    return FunctionRegistry(builtins=True)
