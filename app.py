"""contribstats — interactive Streamlit dashboard.

Run ``python main.py all`` first, then ``streamlit run app.py``.
"""

from __future__ import annotations

import json
from pathlib import Path

import pandas as pd
import plotly.express as px
import streamlit as st

from contribstats.buckets import Granularity

# ---------------------------------------------------------------------------
# Page config
# ---------------------------------------------------------------------------
st.set_page_config(
    page_title="contribstats",
    page_icon="📈",
    layout="wide",
)

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

@st.cache_data
def load_report(path: str) -> dict:
    with open(path) as f:
        return json.load(f)


def series_df(points: list[dict]) -> pd.DataFrame:
    """Long-format frame from the report's per-bucket points."""
    rows = [
        {"bucket_start": p["bucket_start"], "contributor": name, "commits": n}
        for p in points
        for name, n in p["commits"].items()
    ]
    df = pd.DataFrame(rows, columns=["bucket_start", "contributor", "commits"])
    if not df.empty:
        df["bucket_start"] = pd.to_datetime(df["bucket_start"], utc=True)
    return df


# ---------------------------------------------------------------------------
# Sidebar — load report
# ---------------------------------------------------------------------------
st.sidebar.title("📈 contribstats")
st.sidebar.markdown("Contributor activity explorer")

default_report = Path(__file__).parent / "report.json"
report_path = st.sidebar.text_input("Report file", value=str(default_report))

try:
    report = load_report(report_path)
except FileNotFoundError:
    st.error(f"Report not found: `{report_path}`\n\nRun `python main.py all` to generate it.")
    st.stop()

repo_name = Path(report.get("repo", report_path)).name
branch = report.get("branch", "main")
span = " → ".join(filter(None, [report.get("since"), report.get("until")])) or "full history"

st.sidebar.markdown(f"**Repo:** `{repo_name}`  **Branch:** `{branch}`")
st.sidebar.caption(f"Date range: {span}")
st.sidebar.divider()

series = report.get("series", {})
available = [Granularity(key) for key in series]
if not available:
    st.error("No time series in report.")
    st.stop()

# ---------------------------------------------------------------------------
# Sidebar — granularity and contributor filters
# ---------------------------------------------------------------------------
granularity = st.sidebar.radio(
    "Group by",
    available,
    index=available.index(Granularity.WEEK) if Granularity.WEEK in available else 0,
    format_func=lambda g: g.label,
)
cumulative = st.sidebar.toggle("Cumulative", value=False, key="cumulative")

contributors = report.get("contributors", [])
selected = st.sidebar.multiselect("Contributors", options=contributors, default=contributors[:10])

# ---------------------------------------------------------------------------
# Page title and metric cards
# ---------------------------------------------------------------------------
total = report.get("total", {})
st.title(f"Contributors — {repo_name}")
st.caption(f"Branch: `{branch}`  ·  {span}  ·  {total.get('commits', 0):,} commits")

c1, c2, c3, c4 = st.columns(4)
c1.metric("Commits", f"{total.get('commits', 0):,}")
c2.metric("Contributors", f"{len(contributors):,}")
c3.metric("Lines added", f"{total.get('lines_added', 0):,}")
c4.metric("Lines deleted", f"{total.get('lines_deleted', 0):,}")

st.divider()

tab1, tab2, tab3 = st.tabs(["📊 Activity", "👥 Per contributor", "📋 Summary"])

df = series_df(series[granularity.value])
if not df.empty:
    df = df[df["contributor"].isin(selected)].copy()
    if cumulative:
        df["commits"] = df.groupby("contributor", sort=False)["commits"].cumsum()

# ============================================================
# TAB 1 — STACKED ACTIVITY
# ============================================================
with tab1:
    if df.empty:
        st.info("No commits for the selected contributors.")
    else:
        st.subheader(f"Commits per {granularity.label.lower()}" + (" (cumulative)" if cumulative else ""))
        fig_area = px.area(
            df,
            x="bucket_start",
            y="commits",
            color="contributor",
            category_orders={"contributor": selected},
            labels={"bucket_start": "Date", "commits": "Commits", "contributor": "Contributor"},
        )
        fig_area.update_layout(
            hovermode="x unified",
            height=460,
            margin=dict(l=0, r=0, t=10, b=0),
            legend=dict(orientation="h", yanchor="bottom", y=1.02, xanchor="right", x=1),
        )
        st.plotly_chart(fig_area, use_container_width=True)

# ============================================================
# TAB 2 — PER CONTRIBUTOR LINES
# ============================================================
with tab2:
    if df.empty:
        st.info("No commits for the selected contributors.")
    else:
        for name in selected:
            person = df[df["contributor"] == name]
            st.markdown(f"**{name}**")
            fig_line = px.line(person, x="bucket_start", y="commits", labels={"bucket_start": "Date", "commits": "Commits"})
            fig_line.update_layout(height=220, margin=dict(l=0, r=0, t=10, b=0))
            st.plotly_chart(fig_line, use_container_width=True)

# ============================================================
# TAB 3 — SUMMARY TABLE
# ============================================================
with tab3:
    summary = pd.DataFrame(report.get("summary", []) + ([total] if total else []))
    if summary.empty:
        st.info("No contributors.")
    else:
        summary = summary.rename(columns={
            "contributor": "Contributor",
            "commits": "Commits",
            "lines_added": "Lines added",
            "lines_deleted": "Lines deleted",
        })
        st.dataframe(summary, use_container_width=True, hide_index=True)
