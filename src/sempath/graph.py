"""Tidy node and edge tables, and the GraphData aggregate that owns them.

Nodes and edges are plain mutable records. Edges refer to nodes by name only,
so callers can edit either table freely between ``prepare`` and rendering.
"""

from __future__ import annotations

import dataclasses
import math
from collections.abc import Callable, Iterable, Iterator
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Generic, TypeVar

import networkx as nx
import pandas as pd

from sempath.config import DEFAULT_STYLE, GraphStyle
from sempath.types import EdgeKind, NodeShape, Side

if TYPE_CHECKING:
    from sempath.layout.matrix import LayoutMatrix


@dataclass
class Node:
    """A drawn observed (rectangle) or latent (oval) variable."""

    name: str
    shape: NodeShape = NodeShape.RECTANGLE
    label: str | None = None
    x: float | None = None
    y: float | None = None
    row: int | None = None
    col: int | None = None
    placeholder: bool = False
    show: bool = True
    # Visual overrides; None falls back to GraphStyle.
    colour: str | None = None
    fill: str | None = None
    linetype: str | None = None
    alpha: float | None = None
    size: float | None = None
    label_colour: str | None = None
    width: float | None = None
    height: float | None = None

    def __post_init__(self) -> None:
        if self.label is None:
            self.label = self.name

    @property
    def is_latent(self) -> bool:
        return self.shape == NodeShape.OVAL


@dataclass
class Edge:
    """A drawn connection representing one structural parameter."""

    from_: str
    to: str
    kind: EdgeKind = EdgeKind.DIRECTED
    label: str | None = None
    est: float | None = None
    se: float | None = None
    pval: float | None = None
    connect_from: Side | None = None
    connect_to: Side | None = None
    curvature: float | None = None
    show: bool = True
    colour: str | None = None
    linetype: str | None = None
    alpha: float | None = None
    size: float | None = None
    label_colour: str | None = None

    @property
    def is_self_loop(self) -> bool:
        return self.from_ == self.to

    @property
    def pair(self) -> tuple[str, str]:
        """Unordered endpoint pair in canonical (sorted) order."""
        return (self.from_, self.to) if self.from_ <= self.to else (self.to, self.from_)


# ─── Tables ───────────────────────────────────────────────────────────────────

R = TypeVar("R", Node, Edge)

_ENUM_COLUMNS: dict[str, type] = {
    "shape": NodeShape,
    "kind": EdgeKind,
    "connect_from": Side,
    "connect_to": Side,
}

# DataFrame column name → record field name.
_COLUMN_ALIASES: dict[str, str] = {"from": "from_"}


class _Table(Generic[R]):
    """List-like collection of records with tidy-table helpers."""

    record_type: type

    def __init__(self, rows: Iterable[R] = ()) -> None:
        self.rows: list[R] = list(rows)

    def __iter__(self) -> Iterator[R]:
        return iter(self.rows)

    def __len__(self) -> int:
        return len(self.rows)

    def __getitem__(self, index: int) -> R:
        return self.rows[index]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, _Table):
            return NotImplemented
        return self.rows == other.rows

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.rows!r})"

    def append(self, row: R) -> None:
        self.rows.append(row)

    def copy(self):
        return type(self)(dataclasses.replace(r) for r in self.rows)

    def filter(self, predicate: Callable[[R], bool]):
        """Return a new table holding the rows for which ``predicate`` is true."""
        return type(self)(r for r in self.rows if predicate(r))

    def update(self, predicate: Callable[[R], bool], **changes: Any) -> int:
        """Set ``changes`` on every row matching ``predicate``; return the count."""
        valid = {f.name for f in dataclasses.fields(self.record_type)}
        unknown = set(changes) - valid
        if unknown:
            raise AttributeError(f"{self.record_type.__name__} has no field(s): {', '.join(sorted(unknown))}")
        count = 0
        for row in self.rows:
            if predicate(row):
                for key, value in changes.items():
                    setattr(row, key, value)
                count += 1
        return count

    def to_frame(self) -> pd.DataFrame:
        """Convert to a pandas DataFrame, one column per field, enums as strings."""
        columns = [f.name for f in dataclasses.fields(self.record_type)]
        records = []
        for row in self.rows:
            rec = {}
            for name in columns:
                value = getattr(row, name)
                rec[_column_name(name)] = value.value if isinstance(value, (NodeShape, EdgeKind, Side)) else value
            records.append(rec)
        return pd.DataFrame(records, columns=[_column_name(c) for c in columns])

    @classmethod
    def from_frame(cls, frame: pd.DataFrame):
        """Build a table from a DataFrame; unknown columns are rejected."""
        valid = {f.name for f in dataclasses.fields(cls.record_type)}
        rows = []
        for rec in frame.to_dict(orient="records"):
            kwargs: dict[str, Any] = {}
            for column, value in rec.items():
                name = _COLUMN_ALIASES.get(column, column)
                if name not in valid:
                    raise AttributeError(f"{cls.record_type.__name__} has no field {column!r}")
                if _is_missing(value):
                    continue
                if name in _ENUM_COLUMNS:
                    value = _ENUM_COLUMNS[name](value)
                kwargs[name] = value
            rows.append(cls.record_type(**kwargs))
        return cls(rows)


def _column_name(field_name: str) -> str:
    return "from" if field_name == "from_" else field_name


def _is_missing(value: Any) -> bool:
    return value is None or (isinstance(value, float) and math.isnan(value))


class NodeTable(_Table[Node]):
    """Ordered table of nodes keyed by name."""

    record_type = Node

    def names(self) -> list[str]:
        return [n.name for n in self.rows]

    def get(self, name: str) -> Node | None:
        for node in self.rows:
            if node.name == name:
                return node
        return None

    def __contains__(self, name: object) -> bool:
        return any(n.name == name for n in self.rows)


class EdgeTable(_Table[Edge]):
    """Ordered table of edges; several edges may join the same pair."""

    record_type = Edge

    def between(self, a: str, b: str) -> list[Edge]:
        """All edges joining ``a`` and ``b`` in either direction."""
        key = (a, b) if a <= b else (b, a)
        return [e for e in self.rows if e.pair == key]

    def touching(self, name: str) -> list[Edge]:
        return [e for e in self.rows if name in (e.from_, e.to)]


# ─── Aggregate ────────────────────────────────────────────────────────────────


@dataclass
class GraphData:
    """Prepared nodes and edges plus the style they were prepared with."""

    nodes: NodeTable
    edges: EdgeTable
    style: GraphStyle = field(default_factory=lambda: DEFAULT_STYLE)
    layout: LayoutMatrix | None = None
    # edges hidden by hide_var, keyed by the hidden node
    hidden_edges: dict[str, list[Edge]] = field(default_factory=dict, repr=False, compare=False)

    def node(self, name: str) -> Node:
        found = self.nodes.get(name)
        if found is None:
            raise KeyError(name)
        return found

    def visible_nodes(self) -> list[Node]:
        return [n for n in self.nodes if n.show]

    def visible_edges(self) -> list[Edge]:
        shown = {n.name for n in self.nodes if n.show}
        return [e for e in self.edges if e.show and e.from_ in shown and e.to in shown]

    @property
    def digraph(self) -> nx.MultiDiGraph:
        return to_networkx(self.nodes, self.edges)


def to_networkx(nodes: Iterable[Node] | None, edges: Iterable[Edge]) -> nx.MultiDiGraph:
    """Build a MultiDiGraph with records attached under the ``data`` key.

    Bidirectional edges are added once, in their stored direction.
    """
    g: nx.MultiDiGraph = nx.MultiDiGraph()
    for node in nodes or ():
        g.add_node(node.name, data=node)
    for edge in edges:
        g.add_edge(edge.from_, edge.to, data=edge)
    return g
