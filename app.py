from __future__ import annotations

import json
import logging
from datetime import datetime

import pandas as pd
import streamlit as st

from gamerng import (
    GameRngError,
    Rng,
    export_to_csv,
    generate_samples,
    histogram_figure,
    summarize_samples,
    support,
)
from gamerng.chancy import DISTRIBUTIONS
from gamerng.storage import list_states, load_state_by_id, save_state

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

st.set_page_config(page_title="gamerng playground", layout="wide")

st.title("gamerng playground")
st.caption("Sample any chancy spec, compare it with its predicted bounds and keep named RNG streams.")

DEFAULT_PARAMS = {
    "random": {"min": 0, "max": 100},
    "integer": {"min": 1, "max": 20},
    "normal": {"min": 0, "max": 100},
    "normal_integer": {"mean": 50, "stddev": 10},
    "dice": {"dice": "3d6"},
    "poisson": {"lambda": 4},
    "gamma": {"shape": 2, "rate": 1},
    "beta": {"alpha": 2, "beta": 5},
    "binomial": {"n": 20, "p": 0.3},
    "pareto": {"shape": 1.5, "scale": 1},
    "wignerSemicircle": {"R": 1},
}


def _parse_spec(kind: str, raw: str):
    text = raw.strip()
    if kind == "dice notation":
        return text
    params = json.loads(text) if text else {}
    if not isinstance(params, dict):
        raise ValueError("Parameters must be a JSON object")
    return {"type": kind, **params}


def render_samples(spec, df: pd.DataFrame, title: str) -> None:
    summary = summarize_samples(df, spec)

    c1, c2, c3, c4 = st.columns(4)
    c1.metric("Samples", f"{summary.count}")
    c2.metric("Mean", f"{summary.mean:.4f}")
    c3.metric("Std dev", f"{summary.std:.4f}")
    c4.metric("Within predicted bounds?", "Yes" if summary.within_bounds else "No")

    left, right = st.columns([2, 1])
    with left:
        st.plotly_chart(histogram_figure(df, title=title), use_container_width=True)
    with right:
        st.markdown("#### Bounds")
        st.table(
            pd.DataFrame(
                {
                    "": ["predicted", "observed"],
                    "min": [summary.predicted_min, summary.observed_min],
                    "max": [summary.predicted_max, summary.observed_max],
                }
            )
        )
        if isinstance(spec, dict) and support(spec["type"]):
            st.write("**Support:**", support(spec["type"]))

    st.download_button(
        label="Download CSV",
        data=export_to_csv(df).encode("utf-8"),
        file_name="samples.csv",
        mime="text/csv",
    )


with st.sidebar:
    st.header("Setup")
    mode = st.radio("Mode", ["Sample a distribution", "Saved streams"], index=0)

    if mode == "Sample a distribution":
        kinds = ["dice notation"] + list(DISTRIBUTIONS)
        kind = st.selectbox("Type", kinds, index=kinds.index("normal"))
        default = "3d6+1" if kind == "dice notation" else json.dumps(DEFAULT_PARAMS.get(kind, {}))
        raw = st.text_area("Parameters (JSON object, or dice notation)", value=default, key=f"params_{kind}")
        seed = st.text_input("Seed (optional)", value="")
        n = st.number_input("Samples", min_value=10, max_value=200_000, value=5_000, step=500)
        stream_name = st.text_input("Stream name", value=f"stream {datetime.now().strftime('%Y-%m-%d %H:%M')}")
        save_stream = st.checkbox("Save stream state after sampling (SQLite)", value=False)
        run = st.button("Sample", type="primary")
    else:
        history_limit = st.slider("How many streams", 5, 50, 25, 5)
        streams = list_states(limit=history_limit)
        if streams:
            options = {f"#{s['id']} • {s['name']} • {s['created_at']}": s for s in streams}
            selected = options[st.selectbox("Select a stream", list(options.keys()), index=0)]
        else:
            selected = None


if mode == "Sample a distribution":
    if run:
        try:
            spec = _parse_spec(kind, raw)
            rng = Rng(seed.strip() or None)
            df = generate_samples(spec, int(n), rng=rng)
        except (GameRngError, ValueError) as exc:
            st.error(f"{exc}")
        else:
            st.subheader("Results")
            st.code(json.dumps(spec) if isinstance(spec, dict) else spec)
            render_samples(spec, df, title=f"{n} draws")
            if save_stream:
                row_id = save_state(stream_name.strip() or "stream", rng)
                st.info(f"Saved stream state as #{row_id}; restoring it continues after the last draw.")
    else:
        st.info("Pick a type and parameters in the sidebar, then press Sample.")

else:
    if not selected:
        st.warning("No saved streams yet. Sample with 'Save stream state' enabled first.")
    else:
        st.subheader("Stream details")
        st.json(selected)
        rng = load_state_by_id(selected["id"])
        preview = pd.DataFrame({"draw": range(10), "value": [rng.random() for _ in range(10)]})
        st.markdown("#### Next 10 uniform draws")
        st.dataframe(preview, use_container_width=True, hide_index=True)
