"""Extract tidy node and edge tables from fitted SEM models.

Two inputs are recognised:

* a semopy ``Model`` (or any object exposing the same ``inspect()`` and
  ``vars`` interface), whose parameter table has the columns
  ``lval, op, rval, Estimate, Std. Err, p-value``;
* a lavaan-style parameter table as a ``pandas.DataFrame`` with columns
  ``lhs, op, rhs, est`` and optionally ``se`` and ``pvalue``.

Both are normalised to the lavaan column names before nodes and edges are read
off. Operators: ``=~`` (lhs is measured by rhs, drawn lhs → rhs), ``~``
(lhs is regressed on rhs, drawn rhs → lhs), ``~~`` (covariance, drawn as a
bidirectional edge; a variance when lhs == rhs).
"""

from __future__ import annotations

import logging
import math
from typing import Any

import pandas as pd

from sempath.errors import ModelNotSupportedError
from sempath.graph import Edge, EdgeTable, Node, NodeTable
from sempath.types import EdgeKind, NodeShape

logger = logging.getLogger(__name__)

LOADING = "=~"
REGRESSION = "~"
COVARIANCE = "~~"
STRUCTURAL_OPS = (LOADING, REGRESSION, COVARIANCE)

_SEMOPY_COLUMNS = {
    "lval": "lhs",
    "rval": "rhs",
    "Estimate": "est",
    "Std. Err": "se",
    "p-value": "pvalue",
}
_REQUIRED = ("lhs", "op", "rhs", "est")


def parameter_table(fit: Any) -> pd.DataFrame:
    """Normalise a fitted model to a lavaan-style parameter table.

    Returns a DataFrame with columns ``lhs, op, rhs, est, se, pvalue``; fixed
    parameters have NaN ``se`` and ``pvalue``.

    Raises:
        ModelNotSupportedError: ``fit`` is neither a DataFrame nor exposes
            ``inspect()``, or required columns are missing.
    """
    if isinstance(fit, pd.DataFrame):
        table = fit.copy()
    elif callable(getattr(fit, "inspect", None)):
        table = fit.inspect()
        if not isinstance(table, pd.DataFrame):
            raise ModelNotSupportedError(
                "inspect() did not return a parameter table",
                {"model": type(fit).__name__, "got": type(table).__name__},
            )
        table = table.rename(columns=_SEMOPY_COLUMNS)
    else:
        raise ModelNotSupportedError(
            "Unsupported fitted-model type; pass a semopy Model or a lavaan-style parameter DataFrame",
            {"model": type(fit).__name__},
        )

    missing = [c for c in _REQUIRED if c not in table.columns]
    if missing:
        raise ModelNotSupportedError("Parameter table is missing required columns", {"missing": missing})

    for column in ("se", "pvalue"):
        if column not in table.columns:
            table[column] = math.nan
    for column in ("est", "se", "pvalue"):
        # semopy writes "-" for fixed parameters.
        table[column] = pd.to_numeric(table[column], errors="coerce")
    table["lhs"] = table["lhs"].astype(str).str.strip()
    table["rhs"] = table["rhs"].astype(str).str.strip()
    table["op"] = table["op"].astype(str).str.strip()
    return table[["lhs", "op", "rhs", "est", "se", "pvalue"]].reset_index(drop=True)


def _structural_rows(table: pd.DataFrame) -> pd.DataFrame:
    """Rows naming two variables (drops intercepts, thresholds, definitions)."""
    keep = table["op"].isin(STRUCTURAL_OPS) & (table["rhs"] != "1") & (table["rhs"] != "")
    return table[keep]


def latent_variables(fit: Any, table: pd.DataFrame | None = None) -> list[str]:
    """Names of latent variables, from ``=~`` rows and semopy's ``vars``."""
    if table is None:
        table = parameter_table(fit)
    latents = list(dict.fromkeys(table.loc[table["op"] == LOADING, "lhs"]))
    declared = getattr(fit, "vars", None)
    if isinstance(declared, dict):
        for name in declared.get("latent", ()):
            if name not in latents:
                latents.append(str(name))
    return latents


def extract_nodes(fit: Any) -> NodeTable:
    """One node per variable appearing in any structural parameter.

    Latent variables are ovals, observed variables rectangles. Order follows
    first appearance in the parameter table.
    """
    table = parameter_table(fit)
    latents = set(latent_variables(fit, table))
    rows = _structural_rows(table)

    names: dict[str, None] = {}
    for lhs, rhs in zip(rows["lhs"], rows["rhs"]):
        names.setdefault(lhs)
        names.setdefault(rhs)

    return NodeTable(Node(name=n, shape=NodeShape.OVAL if n in latents else NodeShape.RECTANGLE) for n in names)


def significance_stars(pval: float | None) -> str:
    if pval is None or math.isnan(pval):
        return ""
    if pval < 0.001:
        return "***"
    if pval < 0.01:
        return "**"
    if pval < 0.05:
        return "*"
    return ""


def format_estimate(est: float | None, pval: float | None = None, digits: int = 2) -> str | None:
    """Format an estimate with significance stars, e.g. ``0.45**``."""
    if est is None or math.isnan(est):
        return None
    return f"{est:.{digits}f}{significance_stars(pval)}"


def _optional(value: float) -> float | None:
    return None if math.isnan(value) else float(value)


def extract_edges(
    fit: Any,
    *,
    include_fixed: bool = False,
    include_nonsig: bool = False,
    include_variances: bool = False,
    alpha: float = 0.05,
    digits: int = 2,
) -> EdgeTable:
    """One edge per structural parameter (loading, regression, covariance).

    Args:
        fit: Fitted model or parameter table (see ``parameter_table``).
        include_fixed: Also keep parameters fixed at zero.
        include_nonsig: Also keep parameters whose p-value is not below ``alpha``.
            Fixed parameters have no p-value and are never non-significant.
        include_variances: Keep variances as self-loop edges.
        alpha: Significance level.
        digits: Decimals in the edge label.
    """
    table = _structural_rows(parameter_table(fit))
    edges = EdgeTable()
    skipped = 0

    for rec in table.itertuples(index=False):
        est, se, pval = float(rec.est), float(rec.se), float(rec.pvalue)

        if rec.op == COVARIANCE and rec.lhs == rec.rhs and not include_variances:
            continue
        fixed = math.isnan(se)
        if fixed and not include_fixed and (math.isnan(est) or est == 0.0):
            skipped += 1
            continue
        if not include_nonsig and not math.isnan(pval) and pval >= alpha:
            skipped += 1
            continue

        if rec.op == LOADING:
            src, dst, kind = rec.lhs, rec.rhs, EdgeKind.DIRECTED
        elif rec.op == REGRESSION:
            src, dst, kind = rec.rhs, rec.lhs, EdgeKind.DIRECTED
        else:
            src, dst, kind = rec.lhs, rec.rhs, EdgeKind.BIDIRECTIONAL

        edges.append(
            Edge(
                from_=src,
                to=dst,
                kind=kind,
                label=format_estimate(est, pval, digits),
                est=_optional(est),
                se=_optional(se),
                pval=_optional(pval),
            )
        )

    if skipped:
        logger.debug("Skipped %d fixed-at-zero or non-significant parameter(s)", skipped)
    return edges
