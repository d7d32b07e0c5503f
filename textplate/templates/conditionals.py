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

"""``{% if %} ... {% else %} ... {% endif %}`` resolution.

Supported conditions, tried in order:

1. ``path`` — truthiness of the resolved value
2. ``path == "literal"`` / ``path != "literal"`` — string comparison
3. ``not path`` — negated truthiness

Anything else is false.  There is no ``elif``.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from typing import Any

from textplate.templates.blocks import scan_blocks
from textplate.templates.context import Resolved, is_truthy, resolve
from textplate.templates.limits import RenderState

logger = logging.getLogger(__name__)

_PATH_RE = re.compile(r"[\w.]+")
_COMPARE_RE = re.compile(r"([\w.]+)\s*(==|!=)\s*([\"'])((?:(?!\3).)*)\3", re.DOTALL)
_NOT_RE = re.compile(r"not\s+([\w.]+)")


def evaluate_condition(condition: str, context: Mapping[str, Any]) -> bool:
    """Evaluate an ``if`` condition against *context*.  Never raises."""
    condition = condition.strip()

    if _PATH_RE.fullmatch(condition):
        lookup = resolve(context, condition)
        if isinstance(lookup, Resolved):
            return is_truthy(lookup)

    m = _COMPARE_RE.fullmatch(condition)
    if m:
        path, op, _, literal = m.groups()
        lookup = resolve(context, path)
        equal = (
            isinstance(lookup, Resolved)
            and isinstance(lookup.value, str)
            and lookup.value == literal
        )
        return equal if op == "==" else not equal

    m = _NOT_RE.fullmatch(condition)
    if m:
        return not is_truthy(resolve(context, m.group(1)))

    if not _PATH_RE.fullmatch(condition):
        logger.debug("Unsupported condition %r treated as false", condition)
    return False


class ConditionalProcessor:
    """Replace each top-level ``if`` block with its chosen branch.

    The chosen branch is returned as raw text, with its own nested ``if``
    blocks resolved.  Blocks inside a ``for`` body are left alone so the
    loop stage can evaluate them against each iteration's context.
    """

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
            if block.kind != "if":
                continue
            body, else_body = block.branches(template)
            chosen = body if evaluate_condition(block.argument, context) else else_body
            out.append(template[pos:block.start])
            out.append(self._branch(chosen, context, state))
            pos = block.end
        if pos == 0:
            return template
        out.append(template[pos:])
        return "".join(out)

    def _branch(self, text: str, context: Mapping[str, Any], state: RenderState) -> str:
        """Resolve nested blocks in a chosen branch, or drop it past max_depth."""
        if "{%" not in text:
            return text
        if not state.can_descend():
            return ""
        with state.nested():
            return self.process(text, context, state)
