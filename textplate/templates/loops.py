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

"""``{% for item in items %} ... {% endfor %}`` expansion."""

from __future__ import annotations

import logging
import re
from collections.abc import Callable, Mapping
from typing import Any

from textplate.templates.blocks import Block, scan_blocks
from textplate.templates.context import Unresolved, derive, is_sequence, resolve
from textplate.templates.limits import RenderState

logger = logging.getLogger(__name__)

_HEADER_RE = re.compile(r"(\w+)\s+in\s+([\w.]+)")

# (template, context, state) -> rendered text
BodyRenderer = Callable[[str, Mapping[str, Any], RenderState], str]


class LoopProcessor:
    """Expand each top-level ``for`` block.

    Args:
        render_body: Full render pipeline, called once per element on the
            loop body with the iteration's context.
    """

    def __init__(self, render_body: BodyRenderer) -> None:
        self.render_body = render_body

    def process(
        self,
        template: str,
        context: Mapping[str, Any],
        state: RenderState | None = None,
    ) -> str:
        state = state or RenderState()
        out: list[str] = []
        pos = 0
        for block in scan_blocks(template):
            if block.kind != "for":
                continue
            expanded = self._expand(block, template, context, state)
            if expanded is None:
                continue
            out.append(template[pos:block.start])
            out.append(expanded)
            pos = block.end
        if pos == 0:
            return template
        out.append(template[pos:])
        return "".join(out)

    def _expand(
        self,
        block: Block,
        template: str,
        context: Mapping[str, Any],
        state: RenderState,
    ) -> str | None:
        """Render one block, or return ``None`` to leave it verbatim."""
        header = _HEADER_RE.fullmatch(block.argument)
        if header is None:
            logger.debug("Malformed for header %r left as text", block.argument)
            return None
        name, path = header.groups()

        items = resolve(context, path)
        if isinstance(items, Unresolved) or not is_sequence(items.value):
            logger.debug("Loop target %r is not a sequence, rendering nothing", path)
            return ""

        if not state.can_descend():
            return ""

        body, _ = block.branches(template)
        parts: list[str] = []
        with state.nested():
            for item in items.value:
                if not state.consume():
                    break
                parts.append(self.render_body(body, derive(context, name, item), state))
        return "".join(parts)
