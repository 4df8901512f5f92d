#!/usr/bin/env python3
"""
Outreach Window Planner — Dashboard (Streamlit)
================================================
Timeline-based planning for outreach coordinators. TIME is the dominant
dimension: windows are scored from simulated/public signals and explained
in plain language. No maps, no coordinates, no individual tracking.

Run: streamlit run dashboard/dashboard_app.py
"""

import json
from datetime import datetime, timedelta

import pandas as pd
import plotly.express as px
import streamlit as st

from compute_windows import (
    build_signals_response,
    compare_scenarios,
    find_current_window,
    get_window_summary,
    group_windows_by_day,
    planning_range,
    sort_overlaps,
)
from guidance import (
    ETHICAL_REMINDER,
    GENERAL_NOTES,
    STRATEGIES_BY_STATUS,
    build_guidance,
    next_safer_after,
    rating_reasons,
)
from planner_config import (
    CUSTOM_SIGNAL_TYPE_OPTIONS,
    DISCLAIMER,
    IMPACT_OPTIONS,
    PLANNER_RANGES,
    PLANNER_TZ,
    SCENARIO_COMPARE_DAYS,
    SIGNAL_TYPE_LABELS,
    STATUS_COLORS,
    STORE_PATH,
)
from planner_store import (
    PlannerImportError,
    add_custom_signal,
    export_filename,
    export_payload,
    import_payload,
    load_custom_signals,
    remove_custom_signal,
    save_custom_signals,
)
from signal_catalog import (
    SignalValidationError,
    count_by_impact,
    get_active_signals,
    make_custom_signal,
    search_signals,
    to_timestamp,
)

# ─── Page Config ────────────────────────────────────────────────────────────

st.set_page_config(
    page_title="Outreach Window Planner",
    page_icon="🗓️",
    layout="wide",
    initial_sidebar_state="expanded",
)

# ─── Custom CSS ─────────────────────────────────────────────────────────────

st.markdown("""
<style>
    .main-header {
        font-size: 2.2rem;
        font-weight: 700;
        color: #1a4d4d;
        margin-bottom: 0;
    }
    .sub-header {
        font-size: 1.1rem;
        color: #666;
        margin-top: 0;
    }
    .insight-box {
        background: #fff3cd;
        border-left: 4px solid #ffc107;
        padding: 1rem;
        border-radius: 4px;
        margin: 1rem 0;
    }
    .safer-box {
        background: #e6f4ea;
        border-left: 4px solid #3fa66b;
        padding: 1rem;
        border-radius: 4px;
        margin: 1rem 0;
    }
</style>
""", unsafe_allow_html=True)

# ─── Data Loading ───────────────────────────────────────────────────────────

NOW = datetime.now(PLANNER_TZ).replace(second=0, microsecond=0)


@st.cache_data(ttl=300)
def load_signals_response(start_iso, end_iso, scenario):
    """Cached engine run for a query range."""
    return build_signals_response(start_iso, end_iso, include_scenario=scenario)


def custom_signals():
    if "custom_signals" not in st.session_state:
        st.session_state.custom_signals = load_custom_signals(STORE_PATH)
    return st.session_state.custom_signals


def set_custom_signals(signals):
    st.session_state.custom_signals = signals


def local(ts):
    return to_timestamp(ts).tz_convert(PLANNER_TZ)


def time_span(time_range):
    start, end = local(time_range["start"]), local(time_range["end"])
    return f"{start.strftime('%a %b %d')} · {start.strftime('%I:%M %p')} – {end.strftime('%I:%M %p')}"


def day_label(day):
    date = pd.Timestamp(day).date()
    if date == NOW.date():
        return "Today"
    if date == (NOW + timedelta(days=1)).date():
        return "Tomorrow"
    return pd.Timestamp(day).strftime("%A, %b %d")


def windows_frame(windows):
    """One row per window with times folded onto a single reference day."""
    rows = []
    base = pd.Timestamp("2000-01-01")
    for day, day_windows in group_windows_by_day(windows).items():
        for w in day_windows:
            start, end = local(w["time_range"]["start"]), local(w["time_range"]["end"])
            midnight = start.normalize()
            rows.append({
                "id": w["id"],
                "day": day_label(day),
                "start": base + (start - midnight),
                "end": base + (end - midnight),
                "status": w["status"],
                "score": w["score"],
                "annotation": w["annotation"],
            })
    return pd.DataFrame(rows)


def timeline_chart(windows):
    df = windows_frame(windows)
    if df.empty:
        st.info("No windows in this range.")
        return
    fig = px.timeline(
        df, x_start="start", x_end="end", y="day", color="status",
        color_discrete_map=STATUS_COLORS,
        hover_data={"score": True, "annotation": True, "start": False, "end": False},
        category_orders={"day": list(dict.fromkeys(df["day"]))},
    )
    fig.update_yaxes(autorange="reversed", title=None)
    fig.update_xaxes(tickformat="%I %p", title=None)
    fig.update_layout(height=max(250, 45 * df["day"].nunique()), margin=dict(l=0, r=0, t=10, b=0))
    st.plotly_chart(fig, use_container_width=True)


def status_metrics(counts):
    col1, col2, col3 = st.columns(3)
    col1.metric("🟢 Safer windows", counts["safer"])
    col2.metric("🟡 Caution windows", counts["caution"])
    col3.metric("🔴 Avoid windows", counts["avoid"])


def overlap_viewer(overlaps):
    if not overlaps:
        st.info("No signal overlaps detected. Overlaps occur when multiple medium or "
                "high-impact signals coincide.")
        return
    st.markdown(f"**Signal Overlaps ({len(overlaps)})** — periods where multiple "
                "disruptions coincide require extra attention.")
    for overlap in sort_overlaps(overlaps):
        with st.expander(f"[{overlap['combined_impact']}] {time_span(overlap['time_range'])}"):
            st.write(overlap["explanation"])
            for signal in overlap["signals"]:
                st.caption(f"• {signal['title']} ({SIGNAL_TYPE_LABELS.get(signal['signal_type'], signal['signal_type'])})")


def guidance_panel(window, windows):
    if window is None:
        st.info("Select a window from the timeline to see guidance.")
    else:
        suggestion = build_guidance(window)
        st.markdown(f"#### Selected Window — {window['status'].title()}")
        st.caption(time_span(window["time_range"]))
        st.write(suggestion["notes"])
        st.markdown("**Suggested Strategies**")
        for strategy in STRATEGIES_BY_STATUS[window["status"]]:
            st.markdown(f"- {strategy}")
        reasons = rating_reasons(window)
        if reasons:
            st.markdown("**Why this rating?**")
            for impact, title in reasons:
                st.markdown(f"- `{impact}` {title}")

    upcoming = next_safer_after(windows)
    if upcoming:
        st.markdown(f'<div class="safer-box"><strong>Next Safer Window</strong><br>'
                    f'{time_span(upcoming["time_range"])}</div>', unsafe_allow_html=True)

    st.markdown("---")
    st.markdown("**Coordinator Notes**")
    for note in GENERAL_NOTES:
        st.markdown(f"- {note}")
    st.caption(f"Remember: {ETHICAL_REMINDER}")


# ─── Sidebar ────────────────────────────────────────────────────────────────

with st.sidebar:
    st.markdown("### 🗓️ Outreach Window Planner")
    st.markdown("**Koreatown / Los Angeles**")
    st.markdown("---")

    view_mode = st.radio(
        "Dashboard View",
        ["Overview", "Planner", "Signals", "Scenario"],
        index=0,
    )

    st.markdown("---")
    st.markdown("### Data Sources")
    st.markdown("""
    - 🧹 Sanitation cycles (simulated)
    - 🎪 Public event calendars
    - 🏠 Shelter & service hours
    - 🚇 Transit disruptions
    """)

    st.markdown("---")
    st.caption("Prototype — simulated and delayed data only")


# ─── Main Content ───────────────────────────────────────────────────────────

st.markdown('<p class="main-header">Outreach Window Planner</p>', unsafe_allow_html=True)
st.markdown('<p class="sub-header">Find lower-disruption times for outreach — '
            'harm reduction through timing, not surveillance</p>', unsafe_allow_html=True)


if view_mode == "Overview":
    # ─── Overview ────────────────────────────────────────────────

    data = load_signals_response(NOW.isoformat(), (NOW + timedelta(days=7)).isoformat(), False)
    windows = data["windows"]
    counts = get_window_summary(windows)

    st.markdown("---")
    status_metrics(counts)

    col_now, col_next = st.columns(2)
    with col_now:
        st.markdown("#### Right Now")
        current = find_current_window(windows, NOW)
        if current:
            st.markdown(f"**{current['status'].title()}** · score {current['score']:.0f}")
            st.write(current["annotation"])
        else:
            st.info("No window covers the current time.")
    with col_next:
        st.markdown("#### Next Safer Window")
        upcoming = next_safer_after(windows, NOW)
        if upcoming:
            st.markdown(f"**{time_span(upcoming['time_range'])}**")
            st.write(upcoming["annotation"])
        else:
            st.info("No safer window in the next 7 days.")

    st.markdown("#### Active High-Impact Signals")
    active = get_active_signals(data["signals"], NOW, impact_level="high")
    if active:
        for signal in active[:3]:
            st.markdown(f"- **{signal['title']}** — {signal['interpretation_notes']}")
    else:
        st.caption("No high-impact signals active right now.")

    st.markdown("#### Upcoming Overlaps")
    overlap_viewer(sort_overlaps(data["overlaps"])[:3])

    st.markdown("#### Average Disruption Score")
    st.progress(min(counts["average_score"], 100) / 100, text=f"{counts['average_score']} / 100")


elif view_mode == "Planner":
    # ─── Planner ─────────────────────────────────────────────────

    col_range, col_scenario = st.columns([3, 2])
    with col_range:
        range_key = st.radio("Range", list(PLANNER_RANGES), index=1, horizontal=True)
    with col_scenario:
        scenario_mode = st.toggle("Scenario Mode", value=False)

    start, end = planning_range(PLANNER_RANGES[range_key], NOW)
    data = load_signals_response(start.isoformat(), end.isoformat(), scenario_mode)
    windows = data["windows"]
    st.caption(f"📅 {start.strftime('%b %d')} - {end.strftime('%b %d, %Y')}")

    if scenario_mode:
        st.markdown('<div class="insight-box"><strong>Scenario Mode:</strong> Speculative '
                    'mega-event signals (e.g., 2028 Olympics) are included. This is for planning '
                    'exercises only. Actual conditions will differ.</div>', unsafe_allow_html=True)

    col_timeline, col_side = st.columns([3, 2])

    with col_timeline:
        st.markdown("#### Timeline")
        timeline_chart(windows)

        labels = {w["id"]: f"{time_span(w['time_range'])} · {w['status']} ({w['score']:.0f})"
                  for w in windows}
        selected_id = st.selectbox("Window", [None] + list(labels),
                                   format_func=lambda k: "— select a window —" if k is None else labels[k])

        st.markdown("#### Your Planning Items")
        items = custom_signals()
        for signal in items:
            st.markdown(f"- **{signal['title']}** · {time_span(signal['time_range'])}")

        if items:
            with st.form("remove_item"):
                to_remove = st.selectbox("Remove item", [s["id"] for s in items],
                                         format_func=lambda i: next(s["title"] for s in items if s["id"] == i))
                if st.form_submit_button("Remove"):
                    set_custom_signals(remove_custom_signal(items, to_remove, STORE_PATH))
                    st.rerun()

    with col_side:
        tab_guidance, tab_overlaps = st.tabs(["Guidance", "Overlaps"])
        with tab_guidance:
            selected = next((w for w in windows if w["id"] == selected_id), None)
            guidance_panel(selected, windows)
        with tab_overlaps:
            overlap_viewer(data["overlaps"])

    st.markdown("---")
    col_add, col_io = st.columns([3, 2])

    with col_add:
        with st.expander("➕ Add Planning Item"):
            with st.form("add_item", clear_on_submit=True):
                title = st.text_input("Title *", placeholder="e.g., Team A Morning Shift")
                description = st.text_area("Description", height=70)
                c1, c2 = st.columns(2)
                signal_type = c1.selectbox("Type", list(CUSTOM_SIGNAL_TYPE_OPTIONS),
                                           format_func=CUSTOM_SIGNAL_TYPE_OPTIONS.get)
                impact = c2.selectbox("Impact Level", list(IMPACT_OPTIONS),
                                      format_func=IMPACT_OPTIONS.get)
                d1, d2 = st.columns(2)
                start_day = d1.date_input("Start date", NOW.date())
                start_time = d1.time_input("Start time", NOW.time().replace(second=0, microsecond=0))
                later = NOW + timedelta(hours=2)
                end_day = d2.date_input("End date", later.date())
                end_time = d2.time_input("End time", later.time().replace(second=0, microsecond=0))
                notes = st.text_area("Coordinator Notes", height=70)

                if st.form_submit_button("Add to Timeline"):
                    try:
                        signal = make_custom_signal(
                            title,
                            datetime.combine(start_day, start_time),
                            datetime.combine(end_day, end_time),
                            signal_type=signal_type, impact_level=impact,
                            description=description, notes=notes,
                        )
                        set_custom_signals(add_custom_signal(custom_signals(), signal, STORE_PATH))
                        st.success(f"Added {signal['title']}")
                    except SignalValidationError as e:
                        st.error(str(e))

    with col_io:
        st.download_button(
            "⬇️ Export",
            data=json.dumps(export_payload(custom_signals()), indent=2),
            file_name=export_filename(NOW),
            mime="application/json",
        )
        uploaded = st.file_uploader("⬆️ Import", type=["json"])
        if uploaded is not None and st.button("Merge imported items"):
            try:
                merged = import_payload(custom_signals(), uploaded.getvalue().decode("utf-8"))
                set_custom_signals(save_custom_signals(merged, STORE_PATH))
                st.success(f"{len(merged)} planning items after import")
            except PlannerImportError as e:
                st.error(str(e))


elif view_mode == "Signals":
    # ─── Signal Browser ──────────────────────────────────────────

    data = load_signals_response(NOW.isoformat(), (NOW + timedelta(days=30)).isoformat(), False)
    signals = data["signals"]

    impact_counts = count_by_impact(signals)
    col1, col2, col3, col4 = st.columns(4)
    col1.metric("Signals", len(signals))
    col2.metric("High impact", impact_counts["high"])
    col3.metric("Medium impact", impact_counts["medium"])
    col4.metric("Low impact", impact_counts["low"])

    c1, c2, c3 = st.columns([3, 2, 2])
    query = c1.text_input("Search", placeholder="Search titles and descriptions")
    type_filter = c2.selectbox("Type", ["all"] + list(SIGNAL_TYPE_LABELS),
                               format_func=lambda t: "All types" if t == "all" else SIGNAL_TYPE_LABELS[t])
    impact_filter = c3.selectbox("Impact", ["all", "high", "medium", "low"])

    matches = search_signals(signals, query, type_filter, impact_filter)
    if not matches:
        st.info("No signals match your filters.")
    for signal in matches:
        with st.expander(f"[{signal['impact_level']}] {signal['title']}"):
            st.caption(f"{SIGNAL_TYPE_LABELS.get(signal['signal_type'], signal['signal_type'])} · "
                       f"{time_span(signal['time_range'])} · {signal.get('area_context', '')}")
            st.write(signal["description"])
            st.markdown(f"*{signal['interpretation_notes']}*")
            st.caption(f"Source: {signal['source']['label']} ({signal['source']['kind']}) · "
                       f"confidence {signal['confidence_level']}")

    if any(s["source"]["kind"] == "simulated" for s in signals):
        st.caption("Signals shown here are simulated or based on delayed/public information.")


elif view_mode == "Scenario":
    # ─── Scenario Comparison ─────────────────────────────────────

    st.markdown("### Scenario Planning: Mega-Event Conditions")
    st.markdown('<div class="insight-box"><strong>Speculative:</strong> scenario signals model '
                'potential 2028 Olympics conditions. Use for planning exercises only.</div>',
                unsafe_allow_html=True)

    start_iso = NOW.isoformat()
    end_iso = (NOW + timedelta(days=SCENARIO_COMPARE_DAYS)).isoformat()
    normal = load_signals_response(start_iso, end_iso, False)
    scenario = load_signals_response(start_iso, end_iso, True)
    comparison = compare_scenarios(normal["windows"], scenario["windows"])

    col1, col2 = st.columns(2)
    col1.metric("Safer windows (scenario)", comparison["scenario"]["safer"],
                delta=comparison["safer_change"])
    col2.metric("Avoid windows (scenario)", comparison["scenario"]["avoid"],
                delta=comparison["avoid_change"], delta_color="inverse")

    chart = pd.DataFrame([
        {"run": run, "status": status, "windows": comparison[run][status]}
        for run in ("normal", "scenario") for status in ("safer", "caution", "avoid")
    ])
    fig = px.bar(chart, x="status", y="windows", color="run", barmode="group",
                 labels={"windows": "Windows", "status": "Status"})
    fig.update_layout(height=350, margin=dict(l=0, r=0, t=10, b=0))
    st.plotly_chart(fig, use_container_width=True)

    st.markdown("#### Scenario Signals")
    for signal in (s for s in scenario["signals"] if s["signal_type"] == "mega_event"):
        with st.expander(signal["title"]):
            st.caption(time_span(signal["time_range"]))
            st.write(signal["description"])
            st.markdown(f"*{signal['interpretation_notes']}*")


# ─── Footer ─────────────────────────────────────────────────────────────────

st.markdown("---")
st.caption(DISCLAIMER)
