"""Layout package: manual layout matrices and automatic grid placement."""

from sempath.layout.auto import (
    DUMMY_PREFIX,
    as_digraph,
    assign_layers,
    auto_layout,
    count_crossings,
    greedy_fas_ordering,
    insert_dummy_nodes,
    minimise_crossings,
    quantise,
    remove_cycles,
)
from sempath.layout.matrix import LayoutMatrix, build_layout, read_layout_csv

__all__ = [
    "DUMMY_PREFIX",
    "LayoutMatrix",
    "as_digraph",
    "assign_layers",
    "auto_layout",
    "build_layout",
    "count_crossings",
    "greedy_fas_ordering",
    "insert_dummy_nodes",
    "minimise_crossings",
    "quantise",
    "read_layout_csv",
    "remove_cycles",
]
