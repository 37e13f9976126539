"""Tests for extract.py: parameter tables → tidy node and edge tables."""

from __future__ import annotations

import math

import pandas as pd
import pytest

from sempath.edit import hide_nonsig_edges
from sempath.errors import ModelNotSupportedError
from sempath.extract import (
    extract_edges,
    extract_nodes,
    format_estimate,
    latent_variables,
    parameter_table,
    significance_stars,
)
from sempath.types import EdgeKind, NodeShape

# ─── Helpers ──────────────────────────────────────────────────────────────────


def edge_keys(edges) -> list[tuple[str, str, EdgeKind]]:
    return [(e.from_, e.to, e.kind) for e in edges]


# ─── parameter_table ──────────────────────────────────────────────────────────


class TestParameterTable:
    def test_semopy_columns_renamed(self, semopy_model):
        table = parameter_table(semopy_model)
        assert list(table.columns) == ["lhs", "op", "rhs", "est", "se", "pvalue"]

    def test_fixed_markers_become_nan(self, semopy_model):
        """semopy writes "-" for fixed standard errors and p-values."""
        row = parameter_table(semopy_model).iloc[0]
        assert row["est"] == 1.0
        assert math.isnan(row["se"])
        assert math.isnan(row["pvalue"])

    def test_optional_columns_added(self):
        table = parameter_table(pd.DataFrame({"lhs": ["y"], "op": ["~"], "rhs": ["x"], "est": [0.3]}))
        assert math.isnan(table.loc[0, "se"])
        assert math.isnan(table.loc[0, "pvalue"])

    def test_unsupported_object(self):
        with pytest.raises(ModelNotSupportedError, match="Unsupported fitted-model type"):
            parameter_table(object())

    def test_missing_columns(self):
        with pytest.raises(ModelNotSupportedError, match="missing required columns"):
            parameter_table(pd.DataFrame({"lhs": ["y"], "op": ["~"], "rhs": ["x"]}))

    def test_inspect_returning_non_table(self):
        class Broken:
            def inspect(self):
                return "nope"

        with pytest.raises(ModelNotSupportedError):
            parameter_table(Broken())


# ─── Nodes ────────────────────────────────────────────────────────────────────


class TestExtractNodes:
    def test_semopy_nodes_in_first_appearance_order(self, semopy_model):
        nodes = extract_nodes(semopy_model)
        assert nodes.names() == ["x1", "eta", "x2", "x3", "y"]

    def test_latent_is_oval(self, semopy_model):
        nodes = extract_nodes(semopy_model)
        assert nodes.get("eta").shape == NodeShape.OVAL
        assert nodes.get("x1").shape == NodeShape.RECTANGLE
        assert nodes.get("eta").label == "eta"

    def test_lavaan_latents_from_loadings(self, lavaan_table):
        nodes = extract_nodes(lavaan_table)
        assert nodes.names() == ["F", "a", "b", "c"]
        assert [n.name for n in nodes if n.is_latent] == ["F"]

    def test_latent_variables(self, semopy_model, lavaan_table):
        assert latent_variables(semopy_model) == ["eta"]
        assert latent_variables(lavaan_table) == ["F"]

    def test_unsupported_model(self):
        with pytest.raises(ModelNotSupportedError):
            extract_nodes(42)


# ─── Edges ────────────────────────────────────────────────────────────────────


class TestExtractEdges:
    def test_default_edges(self, semopy_model):
        """Non-significant, fixed-at-zero and variance parameters are left out."""
        edges = extract_edges(semopy_model)
        assert edge_keys(edges) == [
            ("eta", "x1", EdgeKind.DIRECTED),
            ("eta", "x2", EdgeKind.DIRECTED),
            ("eta", "y", EdgeKind.DIRECTED),
            ("x1", "x2", EdgeKind.BIDIRECTIONAL),
        ]

    def test_labels_and_estimates(self, semopy_model):
        edges = {(e.from_, e.to): e for e in extract_edges(semopy_model)}
        assert edges[("eta", "x1")].label == "1.00"
        assert edges[("eta", "x1")].se is None
        assert edges[("eta", "x2")].label == "0.80***"
        assert edges[("eta", "y")].label == "0.50**"
        assert edges[("x1", "x2")].label == "0.30*"
        assert edges[("x1", "x2")].pval == pytest.approx(0.02)

    def test_include_nonsig(self, semopy_model):
        edges = extract_edges(semopy_model, include_nonsig=True)
        assert ("eta", "x3", EdgeKind.DIRECTED) in edge_keys(edges)

    def test_include_fixed(self, semopy_model):
        edges = extract_edges(semopy_model, include_fixed=True)
        assert ("y", "x2", EdgeKind.BIDIRECTIONAL) in edge_keys(edges)

    def test_include_variances_as_self_loops(self, semopy_model):
        edges = extract_edges(semopy_model, include_variances=True)
        loops = [e for e in edges if e.is_self_loop]
        assert [(e.from_, e.kind) for e in loops] == [("eta", EdgeKind.BIDIRECTIONAL)]

    def test_digits(self, semopy_model):
        edges = extract_edges(semopy_model, digits=3)
        assert edges[0].label == "1.000"

    def test_lavaan_directions(self, lavaan_table):
        """=~ is drawn latent → indicator, ~ is drawn predictor → outcome."""
        edges = extract_edges(lavaan_table)
        assert edge_keys(edges) == [
            ("F", "a", EdgeKind.DIRECTED),
            ("F", "b", EdgeKind.DIRECTED),
            ("F", "c", EdgeKind.DIRECTED),
            ("a", "b", EdgeKind.BIDIRECTIONAL),
        ]
        assert edges[2].label == "-0.40*"

    def test_alpha(self, semopy_model):
        edges = extract_edges(semopy_model, alpha=0.01)
        assert ("x1", "x2", EdgeKind.BIDIRECTIONAL) not in edge_keys(edges)

    def test_pvalue_equal_to_alpha_is_not_significant(self):
        """p == alpha earns no star, so the edge is dropped like any other nonsig one."""
        table = pd.DataFrame(
            [("y", "~", "x", 0.4, 0.2, 0.05), ("y", "~", "w", 0.3, 0.1, 0.049)],
            columns=["lhs", "op", "rhs", "est", "se", "pvalue"],
        )
        assert edge_keys(extract_edges(table)) == [("w", "y", EdgeKind.DIRECTED)]

        kept = extract_edges(table, include_nonsig=True)
        hide_nonsig_edges(kept)
        assert [(e.from_, e.show, e.label) for e in kept] == [("x", False, "0.40"), ("w", True, "0.30*")]


class TestFormatting:
    @pytest.mark.parametrize(
        "pval,stars",
        [(0.0004, "***"), (0.004, "**"), (0.04, "*"), (0.2, ""), (None, ""), (math.nan, "")],
    )
    def test_significance_stars(self, pval, stars):
        assert significance_stars(pval) == stars

    def test_format_estimate(self):
        assert format_estimate(0.456, 0.0004) == "0.46***"
        assert format_estimate(-1.0) == "-1.00"
        assert format_estimate(None) is None
        assert format_estimate(math.nan) is None
