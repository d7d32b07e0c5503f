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

"""Tests for textplate.templates.filters."""

from __future__ import annotations

import logging

import pytest

from textplate.templates import UNRESOLVED, Resolved, render
from textplate.templates.filters import (
    _FILTERS,
    apply_filters,
    filter_names,
    get_filter,
    parse_args,
    parse_literal,
    register_filter,
)


class TestBuiltinFilters:
    def test_builtins_registered(self):
        for name in ("default", "upper", "lower", "capitalize", "length", "join"):
            assert name in filter_names()

    @pytest.mark.parametrize(
        "value,expected",
        [(None, "z"), ("", "z"), ("v", "v"), (0, "0"), (False, "false")],
    )
    def test_default(self, value, expected):
        assert render("{{ a | default('z') }}", {"a": value}) == expected

    def test_default_without_argument(self):
        assert render("[{{ a | default }}]", {}) == "[]"

    def test_default_numeric_literal(self):
        assert render("{{ a | default(3) }}", {}) == "3"

    def test_case_filters(self):
        ctx = {"s": "mIxEd case"}
        assert render("{{ s | upper }}", ctx) == "MIXED CASE"
        assert render("{{ s | lower }}", ctx) == "mixed case"
        assert render("{{ s | capitalize }}", ctx) == "Mixed case"

    def test_case_filters_coerce(self):
        assert render("{{ n | upper }}", {"n": 12}) == "12"
        assert render("{{ b | upper }}", {"b": True}) == "TRUE"
        assert render("[{{ e | capitalize }}]", {"e": ""}) == "[]"

    @pytest.mark.parametrize(
        "value,expected",
        [([1, 2, 3], "3"), ("abcd", "4"), ((), "0"), (42, "0"), ({"a": 1}, "0"), (None, "0")],
    )
    def test_length(self, value, expected):
        assert render("{{ v | length }}", {"v": value}) == expected

    def test_length_of_missing_is_zero(self):
        assert render("{{ v | length }}", {}) == "0"

    def test_join(self):
        assert render('{{ xs | join("-") }}', {"xs": ["a", "b", "c"]}) == "a-b-c"
        assert render("{{ xs | join }}", {"xs": ["a", "b"]}) == "a, b"
        assert render('{{ xs | join("") }}', {"xs": ["a", "b"]}) == "a, b"
        assert render('{{ xs | join(" / ") }}', {"xs": [1, True]}) == "1 / true"

    def test_join_non_sequence_passthrough(self):
        assert render('{{ s | join("-") }}', {"s": "abc"}) == "abc"

    def test_unknown_filter_passthrough(self, caplog):
        with caplog.at_level(logging.DEBUG, logger="textplate.templates.filters"):
            assert render("{{ a | frobnicate(1) }}", {"a": "x"}) == "x"
        assert "Unknown filter 'frobnicate'" in caplog.text

    def test_unknown_filter_on_missing_value_left_verbatim(self):
        assert render("{{ a | frobnicate }}", {}) == "{{ a | frobnicate }}"

    def test_chained(self):
        assert render("{{ a | default('anon') | upper }}", {}) == "ANON"
        assert render('{{ xs | join("+") | upper }}', {"xs": ["a", "b"]}) == "A+B"


class TestArgumentParsing:
    @pytest.mark.parametrize(
        "token,expected",
        [('"x"', "x"), ("'y'", "y"), ('""', ""), ("3", 3), ("2.5", 2.5),
         ("true", True), ("False", False), ("none", None), ("bare", "bare")],
    )
    def test_parse_literal(self, token, expected):
        assert parse_literal(token) == expected

    def test_parse_args(self):
        assert parse_args(None) == []
        assert parse_args("  ") == []
        assert parse_args('", ", 2') == [", ", 2]


class TestRegistry:
    def test_register_custom_filter(self):
        def reverse(lookup, args):
            if isinstance(lookup, Resolved):
                return Resolved(str(lookup.value)[::-1])
            return lookup

        register_filter("reverse", reverse)
        try:
            assert get_filter("reverse") is reverse
            assert render("{{ a | reverse }}", {"a": "abc"}) == "cba"
        finally:
            _FILTERS.pop("reverse", None)

    def test_invalid_name_raises(self):
        with pytest.raises(ValueError, match="Invalid filter name"):
            register_filter("two words", lambda lookup, args: lookup)

    def test_apply_filters_on_unresolved(self):
        assert apply_filters(UNRESOLVED, "| upper") is UNRESOLVED
        assert apply_filters(UNRESOLVED, "| default('d')") == Resolved("d")
