import calendar
import logging
from datetime import date
from typing import List

import altair as alt
import pandas as pd
import streamlit as st

from aggregator import WeekBucket
from calendar_math import DAY_NAMES, day_of_week
from coach_config import get_config
from coach_errors import CoachError, ProviderError
from coach_session import CoachSession, Dashboard
from paces import calculate_training_paces, grade_adjusted_pace
from plan_generator import PLAN_END, PLAN_START
from workout_model import WorkoutRecord, WorkoutType, parse_optional_float

log = logging.getLogger(__name__)

RACE_DISTANCES = {"1 Mile": 1.0, "5K": 3.1, "10K": 6.2, "10 Mile": 10.0, "Half Marathon": 13.1, "Marathon": 26.2}


def _get_session() -> CoachSession:
    if "coach_session" not in st.session_state:
        st.session_state.coach_session = CoachSession.open()
    return st.session_state.coach_session


def _workout_icon(record: WorkoutRecord) -> str:
    if record.is_race_day:
        return "🏅"
    if record.type is WorkoutType.CROSS_TRAIN:
        return "🧗"
    if record.type is WorkoutType.REST:
        return "🛌"
    return "🏃"


def _display_title(record: WorkoutRecord) -> str:
    return f"[AI] {record.title}" if record.is_altered else record.title


def _status(record: WorkoutRecord) -> str:
    if record.is_logged:
        return f"Done: {record.actual_miles:g} mi @ {record.actual_pace or '-'}"
    return f"Planned: {record.planned_miles:g} mi"


def render_widgets(board: Dashboard) -> None:
    st.subheader("Training status")
    col1, col2, col3 = st.columns(3)
    shoe = board.shoe
    col1.metric("Shoe mileage", f"{shoe.miles:.1f} / {shoe.capacity:.0f} mi")
    col1.progress(shoe.percent / 100.0)
    if shoe.status == "replace":
        col1.error("Time for new shoes.")
    elif shoe.status == "warn":
        col1.warning("Shoes are getting worn.")
    split = board.split
    if split.easy_percent is None:
        col2.metric("Easy / Hard", "-")
    else:
        col2.metric("Easy / Hard", f"{split.easy_percent}% / {split.hard_percent}%")
    for countdown in board.countdowns:
        col3.metric(countdown.title, countdown.label)


def render_upcoming(session: CoachSession, board: Dashboard) -> None:
    st.subheader("Upcoming workouts")
    rows = []
    for record in board.upcoming:
        weather = session.forecast.daily_for(record.date)
        metrics = ""
        if record.actual_elev and record.actual_gap:
            metrics = f"Elev {record.actual_elev:g}ft | GAP {record.actual_gap}/mi"
        rows.append(
            {
                "Date": record.date_str,
                "": _workout_icon(record),
                "Weather": f"{weather.icon} {weather.temp_f}°F" if weather else "",
                "Workout": _display_title(record),
                "Status": _status(record),
                "Metrics": metrics,
                "Notes": record.notes,
            }
        )
    st.dataframe(pd.DataFrame(rows), use_container_width=True, hide_index=True)


def render_mileage_chart(weeks: List[WeekBucket]) -> None:
    if not weeks:
        return
    chart_rows = [{"Week": week.label, "Order": idx, "Series": "Achieved Miles", "Miles": week.achieved} for idx, week in enumerate(weeks)]
    chart_rows += [{"Week": week.label, "Order": idx, "Series": "Planned Miles", "Miles": week.future} for idx, week in enumerate(weeks)]
    chart_df = pd.DataFrame(chart_rows)
    chart = (
        alt.Chart(chart_df)
        .mark_bar(cornerRadiusTopLeft=4, cornerRadiusTopRight=4)
        .encode(
            x=alt.X("Week:N", sort=alt.EncodingSortField(field="Order", op="min"), axis=alt.Axis(title="")),
            y=alt.Y("Miles:Q", stack="zero", axis=alt.Axis(title="mi")),
            color=alt.Color(
                "Series:N",
                scale=alt.Scale(domain=["Achieved Miles", "Planned Miles"], range=["#26A69A", "#A8DBD6"]),
                legend=alt.Legend(title="", orient="top"),
            ),
            tooltip=["Week", "Series", alt.Tooltip("Miles:Q", format=".1f")],
        )
        .properties(height=280)
    )
    st.altair_chart(chart, use_container_width=True)


def render_calendar(session: CoachSession) -> None:
    months = [(year, month) for year in range(PLAN_START.year, PLAN_END.year + 1) for month in range(1, 13)]
    months = [(y, m) for y, m in months if (PLAN_START.year, PLAN_START.month) <= (y, m) <= (PLAN_END.year, PLAN_END.month)]
    labels = [f"{calendar.month_name[m]} {y}" for y, m in months]
    selected = st.selectbox("Month", labels)
    year, month = months[labels.index(selected)]

    weeks: List[List[str]] = []
    row = [""] * 7
    for day in range(1, calendar.monthrange(year, month)[1] + 1):
        current = date(year, month, day)
        slot = day_of_week(current)
        record = session.store.find_by_date(current)
        cell = str(day)
        if record:
            if record.is_logged:
                detail = f"{record.actual_miles:g}mi ✅"
            elif record.planned_miles > 0:
                detail = f"{record.planned_miles:g}mi"
            else:
                detail = record.type.value
            title = f"⚠️ {record.title}" if record.is_altered else record.title
            cell = f"{day} · {title} · {detail}"
        row[slot] = cell
        if slot == 6:
            weeks.append(row)
            row = [""] * 7
    if any(row):
        weeks.append(row)
    st.dataframe(pd.DataFrame(weeks, columns=DAY_NAMES), use_container_width=True, hide_index=True)


def render_log_form(session: CoachSession) -> None:
    records = session.store.records()
    today_iso = date.today().isoformat()
    default_idx = next((idx for idx, r in enumerate(records) if r.date_str >= today_iso), 0)
    options = [f"{r.date_str} - {r.title}" for r in records]
    selected = st.selectbox("Workout", options, index=default_idx)
    record = records[options.index(selected)]

    st.markdown(f"**{record.date_str} - {record.type.value}**")
    st.markdown(f"Planned: {record.title} ({record.planned_miles:g} mi @ {record.planned_pace.label})")
    st.caption(record.description)

    best = session.best_start_time(record.id)
    if best:
        st.info(
            f"⏱️ Est. Duration: {best.duration_minutes} mins | 🎯 Optimal Start: {best.display_hour} | "
            f"🌡️ {best.temp_f}°F, {best.precip:g}% rain chance"
        )
    elif session.forecast.hourly:
        st.caption("Weather data unavailable (forecasts only go 7 days out).")

    with st.form(f"log_{record.id}"):
        miles = st.text_input("Miles", value="" if record.actual_miles is None else f"{record.actual_miles:g}")
        pace = st.text_input("Pace (M:SS /mi)", value=record.actual_pace or "")
        elev = st.text_input("Elevation gain (ft)", value="" if record.actual_elev is None else f"{record.actual_elev:g}")
        notes = st.text_area("Notes", value=record.notes)
        gap = grade_adjusted_pace(parse_optional_float(miles), pace, parse_optional_float(elev))
        st.caption(f"GAP: {gap}/mi" if gap else "GAP: -")
        if st.form_submit_button("Save workout"):
            try:
                session.save_result(record.id, miles, pace, elev, notes)
            except CoachError as err:
                st.error(f"Could not save: {err}")
            else:
                st.success("Saved.")


def render_pace_calculator() -> None:
    col1, col2, col3 = st.columns(3)
    distance = col1.selectbox("Recent race", list(RACE_DISTANCES), index=2)
    minutes = col2.number_input("Minutes", min_value=0, max_value=600, value=40, step=1)
    seconds = col3.number_input("Seconds", min_value=0, max_value=59, value=0, step=1)
    try:
        paces = calculate_training_paces(RACE_DISTANCES[distance], int(minutes), int(seconds))
    except ValueError as err:
        st.error(f"Check the race time: {err}")
        return
    st.markdown(
        f"- Long: **{paces.long}**\n"
        f"- Tempo: **{paces.tempo}**\n"
        f"- Speed: **{paces.speed}**"
    )


logging.basicConfig(level=get_config().get_log_level(), format="%(asctime)s %(levelname)s %(name)s: %(message)s")

st.set_page_config(page_title="Marathon Coach", layout="wide")
st.title("Marathon Coach 2026")
st.caption("Tacoma HM (May 2) · Jack & Jill Marathon (Jul 25)")

try:
    coach = _get_session()
except CoachError as err:
    st.error(f"Could not load the saved plan: {err}")
    st.stop()

with st.sidebar:
    st.header("Daily check-in")
    joint_score = st.slider("Joint pain (1-10)", min_value=1, max_value=10, value=1)
    rpe_score = st.slider("Yesterday's RPE (1-10)", min_value=1, max_value=10, value=3)
    if st.button("Rebalance this week"):
        try:
            message = coach.rebalance(joint_score, rpe_score).message
        except CoachError as err:
            st.error(f"Could not save the rebalanced plan: {err}")
        else:
            if joint_score >= 5:
                st.warning(message)
            elif rpe_score >= 5:
                st.info(message)
            else:
                st.success(message)

    st.header("Data")
    if st.button("Sync Strava"):
        try:
            report = coach.sync_strava()
        except ProviderError as err:
            st.error(f"Strava Sync Failed: {err.reason}")
        except CoachError as err:
            st.error(f"Could not save synced runs: {err}")
        else:
            st.success(f"Successfully synced {report.synced} new runs!")
    if st.button("Refresh weather"):
        try:
            coach.refresh_weather()
        except ProviderError as err:
            st.error(f"Weather fetch failed: {err.reason}")
    if st.button("Reset plan", key="reset_plan"):
        try:
            coach.reset_plan()
        except CoachError as err:
            st.error(f"Could not save the new plan: {err}")
        else:
            st.success("Plan regenerated from the template.")

board = coach.dashboard()
tab_dash, tab_cal, tab_log, tab_pace = st.tabs(["Dashboard", "Calendar", "Log workout", "Pace calculator"])
with tab_dash:
    render_widgets(board)
    st.subheader("Weekly mileage")
    render_mileage_chart(board.weeks)
    render_upcoming(coach, board)
with tab_cal:
    render_calendar(coach)
with tab_log:
    render_log_form(coach)
with tab_pace:
    render_pace_calculator()
