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

"""Jinja-style template rendering for prompt and report text.

A small interpreter for ``{{ variables }}``, ``{% if %}``/``{% else %}``
blocks, ``{% for %}`` loops and ``| filters``, evaluated against a plain
mapping.  Rendering never raises: missing variables stay visible in the
output and malformed constructs degrade to text.

Usage::

    from textplate.templates import TemplateEngine, render

    render("{% for n in names %}{{ n | upper }};{% endfor %}", {"names": ["al", "bo"]})
    # -> "AL;BO;"

    engine = TemplateEngine(
        user_dir=Path("~/.myapp/prompts"),
        default_dir=Path(__file__).parent / "defaults",
    )
    rendered = engine.render("scoring.txt", title="...", abstract="...")
"""

from textplate.templates.context import UNRESOLVED, Resolved, resolve, stringify
from textplate.templates.engine import RenderPipeline, TemplateEngine, render
from textplate.templates.filters import filter_names, register_filter
from textplate.templates.limits import RenderLimits
from textplate.templates.syntax import escape, has_syntax, unescape

__all__ = [
    "RenderLimits",
    "RenderPipeline",
    "Resolved",
    "TemplateEngine",
    "UNRESOLVED",
    "escape",
    "filter_names",
    "has_syntax",
    "register_filter",
    "render",
    "resolve",
    "stringify",
    "unescape",
]
