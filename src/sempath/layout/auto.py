"""Automatic layouts: derive a LayoutMatrix from the graph structure.

The ``tree`` algorithm is a small Sugiyama-style pipeline:
  1. Cycle removal  (greedy-FAS)
  2. Layer assignment (longest path; layer = grid row)
  3. Dummy nodes for edges spanning several layers
  4. Crossing minimisation (barycenter heuristic; order = grid column)

The other algorithms use networkx's continuous layouts and quantise the
coordinates onto an integer grid.
"""

from __future__ import annotations

import logging
import math
from typing import Any

import networkx as nx

from sempath.errors import InvalidLayoutError
from sempath.graph import EdgeTable, GraphData, NodeTable
from sempath.layout.matrix import LayoutMatrix
from sempath.types import EdgeKind, LayoutAlgorithm

logger = logging.getLogger(__name__)

DUMMY_PREFIX = "__dummy_"

# ─── Input normalisation ──────────────────────────────────────────────────────


def _directed_part(nodes: NodeTable | None, edges: EdgeTable) -> nx.DiGraph:
    """Simple DiGraph over all nodes, using directed edges only."""
    g: nx.DiGraph = nx.DiGraph()
    for node in nodes or ():
        g.add_node(node.name)
    for edge in edges:
        g.add_node(edge.from_)
        g.add_node(edge.to)
    for edge in edges:
        if edge.kind == EdgeKind.DIRECTED and not edge.is_self_loop:
            g.add_edge(edge.from_, edge.to)
    return g


def as_digraph(graph: Any) -> nx.DiGraph:
    """Coerce a networkx graph, GraphData, EdgeTable or fitted model to a DiGraph."""
    if isinstance(graph, nx.Graph):
        g: nx.DiGraph = nx.DiGraph()
        g.add_nodes_from(graph.nodes)
        g.add_edges_from((u, v) for u, v in graph.edges() if u != v)
        return g
    if isinstance(graph, GraphData):
        return _directed_part(graph.nodes, graph.edges)
    if isinstance(graph, EdgeTable):
        return _directed_part(None, graph)

    from sempath.extract import extract_edges, extract_nodes

    return _directed_part(extract_nodes(graph), extract_edges(graph, include_nonsig=True))


# ─── Cycle Removal (Greedy-FAS) ───────────────────────────────────────────────


def greedy_fas_ordering(graph: nx.DiGraph) -> list[str]:
    """Order nodes so that as few edges as possible point backwards.

    Eades, Lin & Smyth (1993): repeatedly peel sinks to the back and sources
    to the front; when only cycles remain, move the node with the largest
    (out - in) degree surplus to the front.
    """
    active: list[str] = list(graph.nodes)
    out_deg: dict[str, int] = {n: graph.out_degree(n) for n in active}
    in_deg: dict[str, int] = {n: graph.in_degree(n) for n in active}

    s1: list[str] = []
    s2: list[str] = []

    def drop(node: str) -> None:
        active.remove(node)
        for succ in graph.successors(node):
            if succ in active:
                in_deg[succ] -= 1
        for pred in graph.predecessors(node):
            if pred in active:
                out_deg[pred] -= 1

    while active:
        changed = True
        while changed:
            changed = False
            for sink in [n for n in active if out_deg[n] == 0]:
                drop(sink)
                s2.append(sink)
                changed = True

        changed = True
        while changed:
            changed = False
            for source in [n for n in active if in_deg[n] == 0]:
                drop(source)
                s1.append(source)
                changed = True

        if active:
            best = max(active, key=lambda n: out_deg[n] - in_deg[n])
            drop(best)
            s1.append(best)

    s2.reverse()
    return s1 + s2


def remove_cycles(graph: nx.DiGraph) -> tuple[nx.DiGraph, set[tuple[str, str]]]:
    """Return a DAG copy with back-edges reversed, plus the reversed edge set."""
    if graph.number_of_nodes() == 0:
        return graph.copy(), set()

    position = {node: pos for pos, node in enumerate(greedy_fas_ordering(graph))}
    reversed_edges = {(u, v) for u, v in graph.edges() if u == v or position[u] > position[v]}

    dag: nx.DiGraph = nx.DiGraph()
    dag.add_nodes_from(graph.nodes)
    for u, v in graph.edges():
        if u == v:
            continue
        if (u, v) in reversed_edges:
            dag.add_edge(v, u)
        else:
            dag.add_edge(u, v)
    return dag, reversed_edges


# ─── Layer Assignment ─────────────────────────────────────────────────────────


def assign_layers(dag: nx.DiGraph) -> dict[str, int]:
    """Longest-path layering: rank[v] = max(rank[v], rank[u] + 1) for u→v."""
    layers = {node: 0 for node in dag.nodes}
    changed = True
    while changed:
        changed = False
        for u, v in dag.edges():
            if layers[v] < layers[u] + 1:
                layers[v] = layers[u] + 1
                changed = True
    return layers


def insert_dummy_nodes(dag: nx.DiGraph, layers: dict[str, int]) -> tuple[nx.DiGraph, dict[str, int]]:
    """Split edges spanning more than one layer into chains of dummy nodes."""
    g: nx.DiGraph = nx.DiGraph()
    g.add_nodes_from(dag.nodes)
    layers = dict(layers)

    for index, (u, v) in enumerate(list(dag.edges())):
        span = layers[v] - layers[u]
        if span <= 1:
            g.add_edge(u, v)
            continue
        prev = u
        for i in range(span - 1):
            dummy = f"{DUMMY_PREFIX}{index}_{i}"
            g.add_node(dummy)
            layers[dummy] = layers[u] + i + 1
            g.add_edge(prev, dummy)
            prev = dummy
        g.add_edge(prev, v)
    return g, layers


# ─── Crossing Minimisation (Barycenter) ───────────────────────────────────────


def _barycenter(node: str, neighbours: list[str], pos: dict[str, float]) -> float:
    found = [pos[nb] for nb in neighbours if nb in pos]
    if not found:
        return math.inf
    return sum(found) / len(found)


def count_crossings(ordering: list[list[str]], graph: nx.DiGraph) -> int:
    """Count edge crossings between consecutive layers."""
    total = 0
    for idx in range(len(ordering) - 1):
        tgt_pos = {nid: i for i, nid in enumerate(ordering[idx + 1])}
        pairs = [
            (sp, tgt_pos[nb]) for sp, nid in enumerate(ordering[idx]) for nb in graph.successors(nid) if nb in tgt_pos
        ]
        for i in range(len(pairs)):
            for j in range(i + 1, len(pairs)):
                (a0, a1), (b0, b1) = pairs[i], pairs[j]
                if (a0 - b0) * (a1 - b1) < 0:
                    total += 1
    return total


def minimise_crossings(graph: nx.DiGraph, layers: dict[str, int], max_passes: int = 24) -> list[list[str]]:
    """Order each layer with alternating barycenter sweeps until no improvement."""
    layer_count = max(layers.values(), default=-1) + 1
    ordering: list[list[str]] = [[] for _ in range(layer_count)]
    for node in graph.nodes:
        ordering[layers[node]].append(node)

    best = count_crossings(ordering, graph)
    best_ordering = [list(layer) for layer in ordering]
    for _pass in range(max_passes):
        for idx in range(1, layer_count):
            prev = {nid: float(i) for i, nid in enumerate(ordering[idx - 1])}
            ordering[idx].sort(key=lambda n, p=prev: _barycenter(n, list(graph.predecessors(n)), p))
        for idx in range(layer_count - 2, -1, -1):
            nxt = {nid: float(i) for i, nid in enumerate(ordering[idx + 1])}
            ordering[idx].sort(key=lambda n, p=nxt: _barycenter(n, list(graph.successors(n)), p))

        crossings = count_crossings(ordering, graph)
        if crossings >= best:
            break
        best = crossings
        best_ordering = [list(layer) for layer in ordering]
    return best_ordering


def _tree_cells(graph: nx.DiGraph) -> dict[str, tuple[int, int]]:
    dag, reversed_edges = remove_cycles(graph)
    if reversed_edges:
        logger.debug("Reversed %d edge(s) to break cycles: %s", len(reversed_edges), sorted(reversed_edges))
    aug, layers = insert_dummy_nodes(dag, assign_layers(dag))
    ordering = minimise_crossings(aug, layers)

    # Centre each layer on the widest one; dummy nodes reserve their column.
    width = max((len(layer) for layer in ordering), default=0)
    cells: dict[str, tuple[int, int]] = {}
    for row, layer in enumerate(ordering):
        offset = (width - len(layer)) // 2
        for order, node in enumerate(layer):
            if not node.startswith(DUMMY_PREFIX):
                cells[node] = (row, offset + order)
    return cells


# ─── Continuous layouts → grid ───────────────────────────────────────────────


def _grid_cells(graph: nx.DiGraph) -> dict[str, tuple[int, int]]:
    side = max(1, math.ceil(math.sqrt(graph.number_of_nodes())))
    return {node: divmod(i, side) for i, node in enumerate(graph.nodes)}


def _continuous(graph: nx.DiGraph, algorithm: LayoutAlgorithm, seed: int) -> dict[str, tuple[float, float]]:
    undirected = graph.to_undirected()
    if algorithm == LayoutAlgorithm.CIRCLE:
        pos = nx.circular_layout(undirected)
    elif algorithm == LayoutAlgorithm.SHELL:
        pos = nx.shell_layout(undirected)
    else:
        pos = nx.spring_layout(undirected, seed=seed)
    return {node: (float(xy[0]), float(xy[1])) for node, xy in pos.items()}


def _scale(values: list[float], size: int) -> list[int]:
    lo, hi = min(values), max(values)
    if math.isclose(lo, hi):
        return [0 for _ in values]
    return [round((v - lo) / (hi - lo) * (size - 1)) for v in values]


def quantise(positions: dict[str, tuple[float, float]], canvas: int) -> dict[str, tuple[int, int]]:
    """Snap continuous (x, y) positions (y up) onto a ``canvas x canvas`` grid.

    Collisions are moved to the nearest free cell; ties go to the lower row
    then the lower column.
    """
    if not positions:
        return {}
    names = list(positions)
    cols = _scale([positions[n][0] for n in names], canvas)
    rows = _scale([-positions[n][1] for n in names], canvas)

    taken: set[tuple[int, int]] = set()
    cells: dict[str, tuple[int, int]] = {}
    for name, row, col in zip(names, rows, cols):
        target = (row, col)
        if target in taken:
            free = [(r, c) for r in range(canvas) for c in range(canvas) if (r, c) not in taken]
            target = min(free, key=lambda rc: ((rc[0] - row) ** 2 + (rc[1] - col) ** 2, rc))
        taken.add(target)
        cells[name] = target
    return cells


def _compact(cells: dict[str, tuple[int, int]]) -> LayoutMatrix:
    """Drop empty rows and columns and build the matrix."""
    if not cells:
        raise InvalidLayoutError("Cannot lay out an empty graph")
    used_rows = sorted({r for r, _ in cells.values()})
    used_cols = sorted({c for _, c in cells.values()})
    row_index = {r: i for i, r in enumerate(used_rows)}
    col_index = {c: i for i, c in enumerate(used_cols)}
    grid: list[list[str | None]] = [[None] * len(used_cols) for _ in used_rows]
    for name, (r, c) in cells.items():
        grid[row_index[r]][col_index[c]] = name
    return LayoutMatrix(grid)


def auto_layout(graph: Any, algorithm: LayoutAlgorithm | str = LayoutAlgorithm.TREE, *, seed: int = 42) -> LayoutMatrix:
    """Place the nodes of ``graph`` on a grid with the named algorithm.

    Args:
        graph: A networkx graph, GraphData, EdgeTable or fitted model.
        algorithm: One of ``LayoutAlgorithm`` (or its string value).
        seed: Random seed for the ``spring`` algorithm.

    Raises:
        InvalidLayoutError: Unknown algorithm or empty graph.
    """
    try:
        algorithm = LayoutAlgorithm(algorithm)
    except ValueError:
        known = ", ".join(a.value for a in LayoutAlgorithm)
        raise InvalidLayoutError(f"Unknown layout algorithm {algorithm!r}; expected one of: {known}") from None

    g = as_digraph(graph)
    if g.number_of_nodes() == 0:
        raise InvalidLayoutError("Cannot lay out an empty graph")

    if algorithm == LayoutAlgorithm.TREE:
        cells = _tree_cells(g)
    elif algorithm == LayoutAlgorithm.GRID:
        cells = _grid_cells(g)
    else:
        cells = quantise(_continuous(g, algorithm, seed), max(2, g.number_of_nodes()))

    logger.debug("auto_layout(%s) placed %d node(s)", algorithm.value, len(cells))
    return _compact(cells)
