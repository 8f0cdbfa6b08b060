"""
Galaxy layout: binds the capital-flow graph to a force simulation.

The physics is networkx's Fruchterman-Reingold spring layout. This module owns
the merge step around it: every update receives a freshly built dataset, and
nodes that already existed keep their position, velocity and pin, so the
picture does not jump when a link thickens or a node is added.
"""

import copy
import math
import random
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

import numpy as np
import networkx as nx

from moneymachine.models import GraphData, Node, Link, FlowType, NodeGroup
from moneymachine.strategy_config import LAYOUT

logger = logging.getLogger(__name__)

LINK_COLORS = {
    FlowType.INVESTMENT: "#39ff14",  # Neon Green
    FlowType.SERVICES: "#00ffff",    # Neon Blue
    FlowType.HARDWARE: "#ff00ff",    # Neon Pink
}

NODE_STROKES = {
    NodeGroup.CENTRAL: "#ffffff",
    NodeGroup.SATELLITE: "#cccccc",
    NodeGroup.OUTER: "#999999",
}

NODE_FILL = "#050505"


def link_color(link: Link) -> str:
    return LINK_COLORS[link.type]


def link_width(link: Link) -> float:
    return math.sqrt(link.value) * 2


def node_stroke(node: Node) -> str:
    return NODE_STROKES[node.group]


def label_size(node: Node) -> int:
    return 12 if node.group == NodeGroup.CENTRAL else 10


@dataclass
class _Body:
    """Physical state of one simulated node"""
    x: float
    y: float
    vx: float = 0.0
    vy: float = 0.0
    fx: Optional[float] = None
    fy: Optional[float] = None


@dataclass
class LayoutResult:
    nodes: List[Node] = field(default_factory=list)
    links: List[Link] = field(default_factory=list)
    width: float = LAYOUT["WIDTH"]
    height: float = LAYOUT["HEIGHT"]

    def to_dict(self) -> Dict:
        index = {n.id: n for n in self.nodes}
        nodes = []
        for n in self.nodes:
            data = n.to_dict()
            data.update({
                "radius": n.val,
                "collideRadius": n.val + LAYOUT["COLLIDE_PADDING"],
                "fill": NODE_FILL,
                "stroke": node_stroke(n),
                "labelSize": label_size(n),
            })
            nodes.append(data)
        links = []
        for l in self.links:
            data = l.to_dict()
            data.update({
                "x1": index[l.source].x, "y1": index[l.source].y,
                "x2": index[l.target].x, "y2": index[l.target].y,
                "color": link_color(l),
                "strokeWidth": link_width(l),
                "marker": f"arrow-{l.type.value}",
            })
            links.append(data)
        return {"width": self.width, "height": self.height, "nodes": nodes, "links": links}


class GalaxyLayout:
    """
    Force simulation with stable identity across dataset replacement.

    Forces map onto spring_layout parameters: the link distance and charge set
    the optimal spring length k, link value is the spring weight, and pinned
    nodes (fx/fy set) are passed as fixed.
    """

    def __init__(self, width: float = LAYOUT["WIDTH"], height: float = LAYOUT["HEIGHT"],
                 link_distance: float = LAYOUT["LINK_DISTANCE"], charge: float = LAYOUT["CHARGE"],
                 iterations: int = LAYOUT["ITERATIONS"], warm_iterations: int = LAYOUT["WARM_ITERATIONS"],
                 seed: Optional[int] = LAYOUT["SEED"]):
        self.width = width
        self.height = height
        self.link_distance = link_distance
        self.charge = charge
        self.iterations = iterations
        self.warm_iterations = warm_iterations
        self._rng = random.Random(seed)
        self._bodies: Dict[str, _Body] = {}

    @property
    def center(self) -> Tuple[float, float]:
        return self.width / 2, self.height / 2

    @property
    def _scale(self) -> float:
        return max(min(self.width, self.height) / 2, 1.0)

    def _spring_length(self) -> float:
        # -500 is the reference charge; stronger repulsion lengthens the springs
        return (self.link_distance / self._scale) * math.sqrt(abs(self.charge) / 500.0)

    def _to_unit(self, x: float, y: float) -> Tuple[float, float]:
        cx, cy = self.center
        return (x - cx) / self._scale, (y - cy) / self._scale

    def _to_pixels(self, ux: float, uy: float) -> Tuple[float, float]:
        cx, cy = self.center
        return cx + ux * self._scale, cy + uy * self._scale

    def _jitter(self) -> float:
        return (self._rng.random() - 0.5) * self.link_distance * 0.5

    def _seed_body(self, node: Node, links: List[Link]) -> _Body:
        """Place a new node next to its already placed neighbours."""
        neighbours = []
        for l in links:
            other = l.target if l.source == node.id else l.source if l.target == node.id else None
            if other is not None and other in self._bodies:
                neighbours.append(self._bodies[other])
        if node.x is not None and node.y is not None:
            x, y = node.x, node.y
        elif neighbours:
            x = sum(b.x for b in neighbours) / len(neighbours) + self._jitter()
            y = sum(b.y for b in neighbours) / len(neighbours) + self._jitter()
        else:
            cx, cy = self.center
            x, y = cx + self._jitter(), cy + self._jitter()
        return _Body(x=x, y=y, vx=node.vx or 0.0, vy=node.vy or 0.0, fx=node.fx, fy=node.fy)

    def update(self, graph: GraphData) -> LayoutResult:
        """Merge a replacement dataset into the simulation and advance it."""
        node_ids = {n.id for n in graph.nodes}
        links = []
        for l in graph.links:
            if l.source in node_ids and l.target in node_ids:
                links.append(copy.copy(l))
            else:
                logger.warning(f"Dropping link with missing endpoint: {l.source} -> {l.target}")

        warm = all(n.id in self._bodies for n in graph.nodes)
        bodies: Dict[str, _Body] = {}
        for node in graph.nodes:
            bodies[node.id] = self._bodies.get(node.id) or self._seed_body(node, links)
        self._bodies = bodies

        if bodies:
            self._step(links, self.warm_iterations if warm else self.iterations)

        nodes = []
        for node in graph.nodes:
            body = self._bodies[node.id]
            clone = copy.copy(node)
            clone.x, clone.y = body.x, body.y
            clone.vx, clone.vy = body.vx, body.vy
            clone.fx, clone.fy = body.fx, body.fy
            nodes.append(clone)
        return LayoutResult(nodes=nodes, links=links, width=self.width, height=self.height)

    def _step(self, links: List[Link], iterations: int):
        g = nx.Graph()
        g.add_nodes_from(self._bodies)
        for l in links:
            if l.source == l.target:
                continue
            if g.has_edge(l.source, l.target):
                g[l.source][l.target]["weight"] += l.value
            else:
                g.add_edge(l.source, l.target, weight=l.value)

        pos = {}
        fixed = []
        for node_id, body in self._bodies.items():
            if body.fx is not None and body.fy is not None:
                body.x, body.y = body.fx, body.fy
                fixed.append(node_id)
            pos[node_id] = np.array(self._to_unit(body.x, body.y))

        new_pos = nx.spring_layout(
            g,
            k=self._spring_length(),
            pos=pos,
            fixed=fixed or None,
            iterations=iterations,
            weight="weight",
            scale=None,
            seed=self._rng.randrange(2 ** 31),
        )

        for node_id, body in self._bodies.items():
            x, y = self._to_pixels(*new_pos[node_id])
            body.vx, body.vy = x - body.x, y - body.y
            body.x, body.y = float(x), float(y)

    # --- interaction ---

    def pin(self, node_id: str, x: float, y: float):
        """Drag start / drag: hold the node at (x, y)."""
        body = self._bodies.get(node_id)
        if body is None:
            raise KeyError(node_id)
        body.fx, body.fy = x, y
        body.x, body.y = x, y
        body.vx = body.vy = 0.0

    def release(self, node_id: str):
        """Drag end: let the simulation move the node again."""
        body = self._bodies.get(node_id)
        if body is None:
            raise KeyError(node_id)
        body.fx = body.fy = None

    def resize(self, width: float, height: float):
        old_cx, old_cy = self.center
        self.width, self.height = width, height
        dx, dy = self.center[0] - old_cx, self.center[1] - old_cy
        for body in self._bodies.values():
            body.x += dx
            body.y += dy
            if body.fx is not None:
                body.fx += dx
            if body.fy is not None:
                body.fy += dy
