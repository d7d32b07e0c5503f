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

"""Plain ``{{ path }}`` substitution.

Unresolved placeholders are left in the output exactly as written so a
missing variable stays visible downstream.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any

from textplate.templates.context import Unresolved, resolve, stringify
from textplate.templates.limits import RenderState

VARIABLE_RE = re.compile(r"\{\{\s*([\w.]+)\s*\}\}")


class VariableResolver:
    def process(
        self,
        template: str,
        context: Mapping[str, Any],
        state: RenderState | None = None,
    ) -> str:
        state = state or RenderState()

        def _replace(m: re.Match[str]) -> str:
            lookup = resolve(context, m.group(1))
            if isinstance(lookup, Unresolved) or not state.consume():
                return m.group(0)
            return stringify(lookup.value)

        return VARIABLE_RE.sub(_replace, template)
