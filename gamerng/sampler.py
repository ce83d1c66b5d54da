from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Any, Optional

import pandas as pd
import plotly.express as px
import plotly.graph_objects as go

from .chancy import ChancyInput, chancy_max, chancy_min
from .random_utils import Seed
from .rng import Rng, RngBase


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SampleSummary:
    count: int
    mean: float
    std: float
    observed_min: float
    observed_max: float
    predicted_min: float
    predicted_max: float
    within_bounds: bool


def generate_samples(
    spec: ChancyInput,
    n: int,
    seed: Optional[Seed] = None,
    rng: Optional[RngBase] = None,
) -> pd.DataFrame:
    """Draw ``n`` values of ``spec``.

    Uses ``rng`` when given, otherwise a fresh ``Rng`` seeded with ``seed``.

    Returns a pandas DataFrame with:
      draw, value
    """
    if n <= 0:
        raise ValueError("n must be > 0")
    if rng is None:
        rng = Rng(seed)

    values: list[Any] = [rng.chancy(spec) for _ in range(int(n))]
    logger.debug("Generated %d samples for %r", n, spec)
    return pd.DataFrame({"draw": range(len(values)), "value": values})


def summarize_samples(df: pd.DataFrame, spec: ChancyInput) -> SampleSummary:
    """Observed statistics of ``df["value"]`` next to the predicted bounds of ``spec``."""
    values = pd.to_numeric(df["value"])
    predicted_min = float(chancy_min(spec))
    predicted_max = float(chancy_max(spec))
    observed_min = float(values.min())
    observed_max = float(values.max())
    std = float(values.std(ddof=0)) if len(values) else math.nan

    return SampleSummary(
        count=int(len(values)),
        mean=float(values.mean()),
        std=std,
        observed_min=observed_min,
        observed_max=observed_max,
        predicted_min=predicted_min,
        predicted_max=predicted_max,
        within_bounds=bool(predicted_min <= observed_min and observed_max <= predicted_max),
    )


def export_to_csv(df: pd.DataFrame) -> str:
    """Export samples to a CSV string with a ``draw,value`` header."""
    return df[["draw", "value"]].to_csv(index=False)


def histogram_figure(df: pd.DataFrame, title: str = "", bins: Optional[int] = None) -> go.Figure:
    finite = df[pd.to_numeric(df["value"]).map(math.isfinite)]
    fig = px.histogram(finite, x="value", nbins=bins, title=title or None)
    fig.update_layout(bargap=0.02, height=380, yaxis_title="count")
    return fig
