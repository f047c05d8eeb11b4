"""Rally planner dashboard.

Interactive view of one planned episode built with Streamlit and Plotly.
Shows the position trace, the root statistics of the first decision, and
the action mix of the episode.

Launch with::

    streamlit run dashboard/app.py
"""

from __future__ import annotations

from dataclasses import replace
from pathlib import Path

import numpy as np
import plotly.graph_objects as go
import streamlit as st

from rally_engine.config import SAMPLE_PROBLEM_PATH, load_config
from rally_engine.core.episode import run_episode
from rally_engine.core.errors import SimulationFailure
from rally_engine.core.mcts import MCTSEngine
from rally_engine.core.state import VehicleState

# ---------------------------------------------------------------------------
# Streamlit app
# ---------------------------------------------------------------------------


def main() -> None:
    """Entry point for the Streamlit dashboard."""
    st.set_page_config(page_title="Rally MCTS Planner", layout="wide")
    st.title("Rally MCTS Planner Dashboard")

    # ── Sidebar ──────────────────────────────────────────────────────────
    st.sidebar.header("Planner Parameters")

    problem_path = Path(
        st.sidebar.text_input("Problem file", value=str(SAMPLE_PROBLEM_PATH))
    )
    seed: int = int(st.sidebar.number_input("Seed", min_value=0, value=42, step=1))
    budget_ms: float = st.sidebar.slider(
        "Time budget per decision (ms)",
        min_value=10,
        max_value=2000,
        value=200,
        step=10,
    )
    reuse_tree: bool = st.sidebar.toggle("Tree reuse", value=False)

    problem, settings = load_config(problem_path)
    settings = replace(
        settings,
        time_budget_ms=float(budget_ms),
        reuse_tree=reuse_tree,
    )

    st.sidebar.markdown("---")
    st.sidebar.caption(
        f"Level {problem.level.number}, {problem.n} cells, "
        f"{len(problem.cars)} cars, {len(problem.drivers)} drivers, "
        f"{len(problem.tyres)} tyre models"
    )

    # ── Section 1: First decision ────────────────────────────────────────
    st.header("1 -- First Decision")

    if st.button("Run Episode"):
        rng = np.random.default_rng(seed)
        engine = MCTSEngine(problem, rng, settings)
        engine.decide(VehicleState.start(problem))
        st.session_state["report"] = engine.last_report

        with st.spinner("Planning episode..."):
            try:
                st.session_state["episode"] = run_episode(
                    problem, engine, rng, verbose=False
                )
            except SimulationFailure as exc:
                st.session_state["episode"] = None
                st.error(f"Episode failed: {exc}")

    if "report" not in st.session_state:
        st.info('Configure parameters in the sidebar, then press "Run Episode".')
        return

    report = st.session_state["report"]
    col_a, col_b, col_c = st.columns(3)
    col_a.metric("Recommended action", str(report.action))
    col_b.metric("Iterations", f"{report.iterations}")
    col_c.metric("Tree size", f"{report.tree_size}")

    labels = [row[0] for row in report.root_children]
    visits = [row[1] for row in report.root_children]
    fig_root = go.Figure(go.Bar(x=labels, y=visits, marker_color="#e10600"))
    fig_root.update_layout(
        title="Root Child Visit Counts",
        xaxis_title="Action",
        yaxis_title="Visits",
        height=400,
    )
    st.plotly_chart(fig_root, use_container_width=True)

    # ── Section 2: Episode trace ─────────────────────────────────────────
    episode = st.session_state.get("episode")
    if episode is None:
        return

    st.header("2 -- Episode Trace")
    col_s, col_t, col_d = st.columns(3)
    col_s.metric("Steps", f"{episode.steps}")
    col_t.metric("Attempts", f"{episode.attempts}")
    col_d.metric("Decisions", f"{episode.decisions}")

    fig_trace = go.Figure(
        go.Scatter(
            x=list(range(len(episode.positions))),
            y=episode.positions,
            mode="lines+markers",
            line_color="#1e1e1e",
        )
    )
    fig_trace.update_layout(
        title="Position per Applied Action",
        xaxis_title="Action index",
        yaxis_title="Cell",
        height=350,
    )
    st.plotly_chart(fig_trace, use_container_width=True)

    # ── Section 3: Action mix ────────────────────────────────────────────
    st.header("3 -- Action Mix")
    counts = {k: v for k, v in episode.action_counts().items() if v > 0}
    fig_mix = go.Figure(
        go.Bar(x=list(counts), y=list(counts.values()), marker_color="#ffa500")
    )
    fig_mix.update_layout(
        title="Applied Actions by Kind",
        xaxis_title="Kind",
        yaxis_title="Count",
        height=350,
    )
    st.plotly_chart(fig_mix, use_container_width=True)

    st.markdown("---")
    st.caption("Planning core is not modified by this dashboard.")


if __name__ == "__main__":
    main()
