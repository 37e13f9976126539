"""Shared fixtures: small fitted-model stand-ins and prepared graphs."""

from __future__ import annotations

import pandas as pd
import pytest


class FakeSemopyModel:
    """Mimics the parts of semopy.Model read by the extractor."""

    def __init__(self, table: pd.DataFrame, latent: list[str]) -> None:
        self._table = table
        self.vars = {"latent": list(latent), "observed": []}

    def inspect(self) -> pd.DataFrame:
        return self._table.copy()


SEMOPY_ROWS = [
    # lval, op, rval, Estimate, Std. Err, p-value
    ("x1", "~", "eta", 1.0, "-", "-"),
    ("x2", "~", "eta", 0.8, 0.1, 0.0001),
    ("x3", "~", "eta", 0.05, 0.2, 0.8),
    ("y", "~", "eta", 0.5, 0.1, 0.004),
    ("eta", "~~", "eta", 1.2, 0.3, 0.001),
    ("x1", "~~", "x2", 0.3, 0.1, 0.02),
    ("y", "~~", "x2", 0.0, "-", "-"),
]


@pytest.fixture
def semopy_model() -> FakeSemopyModel:
    table = pd.DataFrame(SEMOPY_ROWS, columns=["lval", "op", "rval", "Estimate", "Std. Err", "p-value"])
    return FakeSemopyModel(table, latent=["eta"])


@pytest.fixture
def lavaan_table() -> pd.DataFrame:
    return pd.DataFrame(
        [
            ("F", "=~", "a", 1.0, None, None),
            ("F", "=~", "b", 0.9, 0.1, 0.001),
            ("c", "~", "F", -0.4, 0.1, 0.03),
            ("a", "~~", "b", 0.2, 0.05, 0.01),
            ("F", "~1", "", 0.0, None, None),
        ],
        columns=["lhs", "op", "rhs", "est", "se", "pvalue"],
    )
