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

"""Tests for render limits (nesting depth and substitution budget)."""

from __future__ import annotations

import logging

import pytest

from textplate.templates import RenderLimits, render
from textplate.templates.limits import (
    DEFAULT_MAX_DEPTH,
    DEFAULT_MAX_SUBSTITUTIONS,
    RenderState,
)


class TestRenderLimits:
    def test_defaults(self):
        limits = RenderLimits()
        assert limits.max_depth == DEFAULT_MAX_DEPTH
        assert limits.max_substitutions == DEFAULT_MAX_SUBSTITUTIONS

    def test_negative_rejected(self):
        with pytest.raises(ValueError, match="max_depth"):
            RenderLimits(max_depth=-1)
        with pytest.raises(ValueError, match="max_substitutions"):
            RenderLimits(max_substitutions=-1)


class TestRenderState:
    def test_consume_until_exhausted(self, caplog):
        state = RenderState(RenderLimits(max_substitutions=2))
        with caplog.at_level(logging.WARNING, logger="textplate.templates.limits"):
            assert state.consume()
            assert state.consume()
            assert not state.consume()
            assert not state.consume()
        assert state.exhausted
        assert caplog.text.count("substitution limit") == 1

    def test_nested_tracks_depth(self):
        state = RenderState(RenderLimits(max_depth=1))
        assert state.can_descend()
        with state.nested():
            assert state.depth == 1
            assert not state.can_descend()
        assert state.depth == 0


class TestFailClosed:
    def test_substitution_budget_leaves_rest_verbatim(self):
        out = render("{{a}}{{a}}{{a}}", {"a": "x"}, limits=RenderLimits(max_substitutions=2))
        assert out == "xx{{a}}"

    def test_iterations_count_against_budget(self):
        tmpl = "{% for i in xs %}{{ i }}{% endfor %}"
        limits = RenderLimits(max_substitutions=5)
        # One unit per iteration plus one per placeholder.
        assert render(tmpl, {"xs": list(range(10))}, limits=limits) == "01{{ i }}"

    def test_depth_limit_drops_deeper_bodies(self):
        tmpl = "{% for r in rows %}<{% for c in r %}{{ c }}{% endfor %}>{% endfor %}"
        ctx = {"rows": [["a"], ["b"]]}
        assert render(tmpl, ctx, limits=RenderLimits(max_depth=1)) == "<><>"
        assert render(tmpl, ctx, limits=RenderLimits(max_depth=2)) == "<a><b>"

    def test_zero_depth_disables_loops(self):
        tmpl = "a{% for i in xs %}{{ i }}{% endfor %}b"
        assert render(tmpl, {"xs": [1]}, limits=RenderLimits(max_depth=0)) == "ab"

    def test_large_loop_within_default_limits(self):
        tmpl = "{% for i in xs %}.{% endfor %}"
        assert render(tmpl, {"xs": [0] * 1000}) == "." * 1000


class TestNestedConditionals:
    def test_deep_if_nesting_keeps_partial_output(self, caplog):
        depth = 1200
        tmpl = "{{ a }}" + "{% if a %}" * depth + "X" + "{% endif %}" * depth + "!"
        with caplog.at_level(logging.WARNING):
            out = render(tmpl, {"a": "v"})
        assert out == "v!"
        assert "nesting limit" in caplog.text
        assert "Traceback" not in caplog.text
        assert "Template rendering failed" not in caplog.text

    def test_if_branches_count_towards_depth(self):
        tmpl = "{% if a %}1{% if a %}2{% if a %}3{% endif %}{% endif %}{% endif %}"
        assert render(tmpl, {"a": 1}, limits=RenderLimits(max_depth=2)) == "123"
        assert render(tmpl, {"a": 1}, limits=RenderLimits(max_depth=1)) == "1"

    def test_flat_branches_need_no_depth(self):
        tmpl = "{% if a %}{{ a }}{% else %}none{% endif %}"
        assert render(tmpl, {"a": "x"}, limits=RenderLimits(max_depth=0)) == "x"
