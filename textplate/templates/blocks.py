# textplate — Jinja-style text templates for prompts and reports
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

"""Stack-based scanner for ``{% if %}`` and ``{% for %}`` blocks.

The scanner walks the control tags of a template once, pairing each
opener with its closer by nesting depth, and returns the *top-level*
blocks in source order.  Nested blocks are not returned; they are found
again when the enclosing block's body is processed.

Malformed input never raises:

* a closer that does not match the innermost open block is ignored and
  stays in the text as a literal;
* an opener with no closer is dropped, and any complete blocks found
  inside it are promoted to the enclosing level;
* a second ``{% else %}`` in the same ``if`` is ignored.
"""

from __future__ import annotations

import re
from collections.abc import Iterator
from dataclasses import dataclass, field

TAG_RE = re.compile(
    r"\{%\s*(if|else|endif|for|endfor)\b\s*(.*?)\s*%\}",
    re.DOTALL,
)

_CLOSERS = {"endif": "if", "endfor": "for"}


@dataclass(frozen=True)
class Tag:
    """A single ``{% ... %}`` control tag."""

    name: str
    argument: str
    start: int
    end: int


@dataclass
class Block:
    """A matched opener/closer pair.

    Attributes:
        kind: ``"if"`` or ``"for"``.
        argument: Text after the keyword in the opening tag.
        start: Offset of the opening tag.
        end: Offset just past the closing tag.
        body_start: Offset just past the opening tag.
        body_end: Offset of the closing tag.
        else_tag: The ``{% else %}`` belonging to this ``if``, if any.
    """

    kind: str
    argument: str
    start: int
    end: int
    body_start: int
    body_end: int
    else_tag: Tag | None = None

    def branches(self, template: str) -> tuple[str, str]:
        """Return ``(body, else_body)`` as raw text."""
        if self.else_tag is None:
            return template[self.body_start:self.body_end], ""
        return (
            template[self.body_start:self.else_tag.start],
            template[self.else_tag.end:self.body_end],
        )


@dataclass
class _Frame:
    opener: Tag | None
    children: list[Block] = field(default_factory=list)
    else_tag: Tag | None = None


def iter_tags(template: str) -> Iterator[Tag]:
    for m in TAG_RE.finditer(template):
        yield Tag(m.group(1), m.group(2), m.start(), m.end())


def scan_blocks(template: str) -> list[Block]:
    """Return the top-level blocks of *template* in source order."""
    stack = [_Frame(opener=None)]

    for tag in iter_tags(template):
        top = stack[-1]
        if tag.name in ("if", "for"):
            stack.append(_Frame(opener=tag))
        elif tag.name == "else":
            if top.opener is not None and top.opener.name == "if" and top.else_tag is None:
                top.else_tag = tag
        elif top.opener is not None and _CLOSERS[tag.name] == top.opener.name:
            stack.pop()
            stack[-1].children.append(
                Block(
                    kind=top.opener.name,
                    argument=top.opener.argument,
                    start=top.opener.start,
                    end=tag.end,
                    body_start=top.opener.end,
                    body_end=tag.start,
                    else_tag=top.else_tag,
                )
            )

    # Unclosed openers: keep what was complete inside them.
    while len(stack) > 1:
        orphan = stack.pop()
        stack[-1].children.extend(orphan.children)

    return stack[0].children
