"""Tests for the static graph preview."""

import pytest

from conftest import FakeEngine
from graph import build_graph
from layout import apply_layout
from plotting import _person_label, plot_graph


@pytest.mark.asyncio
async def test_plot_png(scenario_a, tmp_path):
    nodes, edges = build_graph(scenario_a)
    laid_out = await apply_layout(nodes, edges, engine=FakeEngine())
    output = tmp_path / "tree.png"

    plot_graph(laid_out, edges, output)

    assert output.read_bytes().startswith(b"\x89PNG")


def test_plot_svg_skips_dangling_edges(scenario_a, tmp_path):
    nodes, edges = build_graph(scenario_a)
    output = tmp_path / "tree.svg"

    plot_graph(nodes[:2], edges, output)

    assert "<svg" in output.read_text(encoding="utf-8")


def test_unknown_extension_falls_back_to_png(scenario_b, tmp_path):
    nodes, edges = build_graph(scenario_b)
    output = tmp_path / "tree.img"

    plot_graph(nodes, edges, output)

    assert output.read_bytes().startswith(b"\x89PNG")


def test_person_label(three_generations):
    nodes, _ = build_graph(three_generations)

    assert _person_label(nodes[0]) == "Grandfather\n1920-"
