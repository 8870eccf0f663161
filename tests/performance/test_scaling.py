#  Copyright (c) 2025 Tom Villani, Ph.D.
"""Scaling checks: conversion time grows linearly with document width and depth.

Each case converts an input and the same input four times larger, and
compares the best of a few timings. Linear work lands near a 4x ratio;
anything rescanning siblings or subtrees per node lands near 16x.

Run with: pytest tests/performance -m slow
"""

import time

import pytest

from markturn import HTMLToMarkdown
from markturn.nodes import Element, Text
from markturn.options import ConversionOptions
from markturn.plugins.gfm import gfm
from markturn.renderer import MarkdownRenderer
from markturn.rules import RuleTable

GROWTH = 4
MAX_RATIO = 9.0


def _best_time(func, repeat=3):
    timings = []
    for _ in range(repeat):
        start = time.perf_counter()
        func()
        timings.append(time.perf_counter() - start)
    return min(timings)


def _ratio(build, convert, size):
    small, large = build(size), build(size * GROWTH)
    convert(small)
    return _best_time(lambda: convert(large)) / max(_best_time(lambda: convert(small)), 1e-6)


def _wide_list(size):
    return "<ul>" + "<li>item</li>" * size + "</ul>"


def _wide_ordered_list(size):
    return "<ol>" + "<li>item</li>" * size + "</ol>"


def _wide_paragraph(size):
    return "<p>" + "<b>x</b> " * size + "</p>"


def _wide_table(size):
    return "<table><tr><th>a</th><th>b</th></tr>" + "<tr><td>1</td><td>2</td></tr>" * size + "</table>"


def _deep_divs(size):
    node = Element("p", children=[Text("x")])
    for _ in range(size):
        node = Element("div", children=[Element("span"), node])
    return node


@pytest.mark.slow
class TestLinearScaling:
    @pytest.mark.parametrize(
        "build",
        [_wide_list, _wide_ordered_list, _wide_paragraph],
        ids=["list-items", "ordered-items", "inline-siblings"],
    )
    def test_wide_documents(self, build):
        converter = HTMLToMarkdown()
        assert _ratio(build, converter.convert, 1000) < MAX_RATIO

    def test_wide_gfm_table(self):
        converter = HTMLToMarkdown().use(gfm)
        assert _ratio(_wide_table, converter.convert, 500) < MAX_RATIO

    def test_deep_nesting(self):
        renderer = MarkdownRenderer(RuleTable(), ConversionOptions())
        assert _ratio(_deep_divs, renderer.render, 500) < MAX_RATIO

    def test_wide_list_output(self):
        markdown = HTMLToMarkdown().convert(_wide_ordered_list(4000))
        lines = markdown.split("\n")
        assert len(lines) == 4000
        assert lines[0] == "1. item"
        assert lines[-1] == "4000. item"
