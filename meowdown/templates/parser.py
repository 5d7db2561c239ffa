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

"""Control-block parser.

Turns template text into a node tree.  Tags are written ``{{ ... }}``; the
text between the braces is trimmed and split on whitespace, then classified
by its first word:

* ``if <key>`` ... ``else`` ... ``endif``
* ``foreach <key> as <name>`` ... ``endforeach``
* ``<function> [args...]``, optionally closed by ``end<function>`` to pass
  the raw text in between as the call's block
* anything else is kept verbatim, which is how ``{{ title }}`` style
  interpolation sites reach the substitution pass

End tags are matched with a nesting stack, so ``if`` inside ``if`` closes
on the right ``endif``.  Malformed input never raises: stray tags are
logged and dropped, unclosed blocks run to the end of the text.
"""

from __future__ import annotations

import logging
from collections.abc import Container, Iterator
from dataclasses import dataclass

from meowdown.templates.nodes import (
    Composite,
    ForEachBlock,
    FuncCall,
    IfBlock,
    Literal,
    Node,
)

logger = logging.getLogger(__name__)

OPEN_TAG = "{{"
CLOSE_TAG = "}}"

_END_TAGS = ("endif", "endforeach")


@dataclass(frozen=True)
class _Tag:
    raw: str
    words: tuple[str, ...]
    start: int
    end: int

    @property
    def head(self) -> str:
        return self.words[0] if self.words else ""

    def is_bare(self, word: str) -> bool:
        return self.words == (word,)


def tokenize(text: str) -> Iterator[str | _Tag]:
    """Split *text* into literal strings and tags, in source order."""
    pos = 0
    while True:
        start = text.find(OPEN_TAG, pos)
        if start < 0:
            break
        close = text.find(CLOSE_TAG, start + len(OPEN_TAG))
        if close < 0:
            # Unterminated tag: the remainder is plain text.
            break
        if start > pos:
            yield text[pos:start]
        end = close + len(CLOSE_TAG)
        raw = text[start:end]
        inner = raw[len(OPEN_TAG):-len(CLOSE_TAG)]
        yield _Tag(raw=raw, words=tuple(inner.split()), start=start, end=end)
        pos = end
    if pos < len(text):
        yield text[pos:]


def collapse(nodes: list[Node]) -> Node:
    """Merge adjacent literals and collapse single-child composites."""
    merged: list[Node] = []
    for node in nodes:
        if isinstance(node, Literal) and merged and isinstance(merged[-1], Literal):
            merged[-1] = Literal(merged[-1].text + node.text)
        else:
            merged.append(node)
    if not merged:
        return Literal("")
    if len(merged) == 1:
        return merged[0]
    return Composite(tuple(merged))


class ControlBlockParser:
    """Parse template text into a node tree.

    Args:
        functions: Names of the template functions known to the build.  A
            tag whose first word is not in here is passed through as text.
    """

    def __init__(self, functions: Container[str] = ()) -> None:
        self.functions = functions

    def parse(self, text: str) -> Node:
        tokens = list(tokenize(text))
        nodes, _, _ = self._parse_until(text, tokens, 0, ())
        return collapse(nodes)

    def _parse_until(
        self,
        text: str,
        tokens: list[str | _Tag],
        pos: int,
        terminators: tuple[str, ...],
    ) -> tuple[list[Node], int, _Tag | None]:
        """Parse tokens from *pos* until a bare tag named in *terminators*.

        Returns the parsed nodes, the position after the terminator, and
        the terminator tag itself (``None`` if the tokens ran out).
        """
        nodes: list[Node] = []
        while pos < len(tokens):
            token = tokens[pos]
            pos += 1

            if isinstance(token, str):
                nodes.append(Literal(token))
                continue

            words = token.words
            if len(words) == 1 and token.head in terminators:
                return nodes, pos, token

            if token.head == "if" and len(words) == 2:
                node, pos = self._parse_if(text, tokens, pos, token)
                nodes.append(node)
            elif token.head == "foreach" and len(words) == 4 and words[2] == "as":
                body, pos, stop = self._parse_until(text, tokens, pos, ("endforeach",))
                if stop is None:
                    logger.warning("Unclosed block %r: missing {{ endforeach }}", token.raw)
                nodes.append(ForEachBlock(key=words[1], item_name=words[3], body=collapse(body)))
            elif token.is_bare("else"):
                logger.warning("Found else without matching if: %r", token.raw)
            elif len(words) == 1 and token.head in _END_TAGS:
                logger.warning("Found %s without matching block: %r", token.head, token.raw)
            elif token.head in self.functions:
                node, pos = self._parse_call(text, tokens, pos, token)
                nodes.append(node)
            else:
                nodes.append(Literal(token.raw))
        return nodes, pos, None

    def _parse_if(
        self,
        text: str,
        tokens: list[str | _Tag],
        pos: int,
        opening: _Tag,
    ) -> tuple[IfBlock, int]:
        true_nodes, pos, stop = self._parse_until(text, tokens, pos, ("else", "endif"))
        false_branch = None
        if stop is not None and stop.head == "else":
            false_nodes, pos, stop = self._parse_until(text, tokens, pos, ("endif",))
            false_branch = collapse(false_nodes)
        if stop is None:
            logger.warning("Unclosed block %r: missing {{ endif }}", opening.raw)
        block = IfBlock(
            condition=opening.words[1],
            true_branch=collapse(true_nodes),
            false_branch=false_branch,
        )
        return block, pos

    def _parse_call(
        self,
        text: str,
        tokens: list[str | _Tag],
        pos: int,
        tag: _Tag,
    ) -> tuple[FuncCall, int]:
        found = self._find_block_end(tokens, pos, tag.head)
        block = None
        if found is not None:
            end, closing = found
            block = text[tag.end:closing.start]
            pos = end + 1
        return FuncCall(name=tag.head, args=tag.words[1:], block_content=block), pos

    @staticmethod
    def _find_block_end(
        tokens: list[str | _Tag], pos: int, name: str
    ) -> tuple[int, _Tag] | None:
        """Index and tag of the ``end<name>`` balancing a call at *pos* - 1."""
        end_word = f"end{name}"
        depth = 0
        for index in range(pos, len(tokens)):
            token = tokens[index]
            if isinstance(token, str):
                continue
            if token.head == name:
                depth += 1
            elif token.is_bare(end_word):
                if depth == 0:
                    return index, token
                depth -= 1
        return None
