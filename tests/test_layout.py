"""
Unit Tests for the galaxy layout binding

Tests:
1. Positions and velocities survive dataset replacement
2. New nodes are seeded beside their neighbours
3. Links with missing endpoints are dropped
4. Pin / release / resize
5. Styling helpers
"""

import math
import pytest
import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from moneymachine.constants import initial_graph
from moneymachine.layout import GalaxyLayout, link_color, link_width, node_stroke, label_size
from moneymachine.models import GraphData, Node, Link, NodeGroup, FlowType


def positions(result):
    return {n.id: (n.x, n.y) for n in result.nodes}


class TestMerge:
    def test_every_node_gets_finite_coordinates(self):
        result = GalaxyLayout().update(initial_graph())
        assert len(result.nodes) == 26
        for node in result.nodes:
            assert math.isfinite(node.x) and math.isfinite(node.y)

    def test_input_nodes_are_not_mutated(self):
        graph = initial_graph()
        GalaxyLayout().update(graph)
        assert all(n.x is None for n in graph.nodes)

    def test_replacement_keeps_identity(self):
        layout = GalaxyLayout(warm_iterations=0)
        first = positions(layout.update(initial_graph()))

        # A rebuilt dataset with one thicker link, as the controller produces
        graph = initial_graph()
        graph.find_link("Microsoft", "Nvidia").value += 2
        second = positions(layout.update(graph))

        for node_id, xy in first.items():
            assert second[node_id] == pytest.approx(xy)

    def test_velocity_is_last_displacement(self):
        layout = GalaxyLayout()
        layout.update(initial_graph())
        before = positions(layout.update(initial_graph()))
        result = layout.update(initial_graph())
        for node in result.nodes:
            bx, by = before[node.id]
            assert node.vx == pytest.approx(node.x - bx)
            assert node.vy == pytest.approx(node.y - by)

    def test_new_node_seeded_near_neighbour(self):
        layout = GalaxyLayout(warm_iterations=0, iterations=0)
        base = positions(layout.update(initial_graph()))

        graph = initial_graph()
        graph.nodes.append(Node("ASML", NodeGroup.OUTER, "ASML", 20, 50))
        graph.links.append(Link("ASML", "TSMC", FlowType.HARDWARE, 3))
        result = layout.update(graph)

        ax, ay = positions(result)["ASML"]
        tx, ty = base["TSMC"]
        assert math.hypot(ax - tx, ay - ty) <= layout.link_distance
        # Existing nodes did not move
        for node_id, xy in base.items():
            assert positions(result)[node_id] == pytest.approx(xy)

    def test_dangling_links_dropped(self):
        graph = GraphData(
            nodes=[Node("A", NodeGroup.CENTRAL, "AAA", 10), Node("B", NodeGroup.OUTER, "BBB", 10)],
            links=[Link("A", "B", FlowType.SERVICES, 2), Link("A", "Ghost", FlowType.SERVICES, 2)],
        )
        result = GalaxyLayout().update(graph)
        assert [(l.source, l.target) for l in result.links] == [("A", "B")]

    def test_removed_nodes_are_forgotten(self):
        layout = GalaxyLayout()
        layout.update(initial_graph())
        graph = initial_graph()
        graph.nodes = [n for n in graph.nodes if n.id != "Intel"]
        result = layout.update(graph)
        assert "Intel" not in positions(result)

    def test_empty_graph(self):
        result = GalaxyLayout().update(GraphData())
        assert result.nodes == [] and result.links == []


class TestInteraction:
    def test_pinned_node_stays_put(self):
        layout = GalaxyLayout()
        layout.update(initial_graph())
        layout.pin("Nvidia", 100.0, 120.0)

        result = layout.update(initial_graph())
        nvda = next(n for n in result.nodes if n.id == "Nvidia")
        assert (nvda.x, nvda.y) == pytest.approx((100.0, 120.0))
        assert (nvda.fx, nvda.fy) == (100.0, 120.0)

        layout.release("Nvidia")
        nvda = next(n for n in layout.update(initial_graph()).nodes if n.id == "Nvidia")
        assert nvda.fx is None and nvda.fy is None

    def test_pin_unknown(self):
        layout = GalaxyLayout()
        with pytest.raises(KeyError):
            layout.pin("Nobody", 0, 0)

    def test_resize_shifts_to_new_center(self):
        layout = GalaxyLayout(warm_iterations=0)
        before = positions(layout.update(initial_graph()))
        layout.resize(1000, 800)
        after = positions(layout.update(initial_graph()))
        for node_id, (x, y) in before.items():
            assert after[node_id] == pytest.approx((x + 100, y + 100))


class TestStyling:
    def test_link_styles(self):
        link = Link("Microsoft", "Nvidia", FlowType.HARDWARE, 4)
        assert link_color(link) == "#ff00ff"
        assert link_width(link) == 4.0
        assert link_color(Link("a", "b", FlowType.INVESTMENT, 1)) == "#39ff14"
        assert link_color(Link("a", "b", FlowType.SERVICES, 1)) == "#00ffff"

    def test_node_styles(self):
        central = Node("Nvidia", NodeGroup.CENTRAL, "NVDA", 45)
        outer = Node("Nebius", NodeGroup.OUTER, "NBIS", 15)
        assert node_stroke(central) == "#ffffff"
        assert node_stroke(outer) == "#999999"
        assert label_size(central) == 12
        assert label_size(outer) == 10

    def test_render_payload(self):
        payload = GalaxyLayout().update(initial_graph()).to_dict()
        link = payload["links"][0]
        assert {"x1", "y1", "x2", "y2", "color", "strokeWidth", "marker"} <= set(link)
        node = payload["nodes"][0]
        assert node["radius"] == node["val"]
        assert node["collideRadius"] == node["val"] + 20
