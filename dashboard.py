#!/usr/bin/env python3
"""
Agent Opportunity Portal - Streamlit Dashboard

Upsell and prospecting view for field agents: filter the opportunity
catalog, page through the ranked list and follow it on the map.
All state lives in one DashboardSession kept in st.session_state; widgets
only call its mutators.
Run: streamlit run dashboard.py
"""

import logging
import time
from html import escape

import pandas as pd
import streamlit as st
from dotenv import load_dotenv
from streamlit_folium import st_folium

from config import ALL, Settings
from mapsync import load_renderer
from mapsync.controller import MapSyncController
from portal import DashboardSession, ManualScheduler, load_catalog
from portal.diagnostics import collect_diagnostics, should_show_diagnostics
from portal.filter import DISTANCE, DISTANCE_BIN_LABELS, EMPLOYEE, EMPLOYEE_BIN_LABELS
from portal.insights import format_median_income, penetration_badge, status_icon

load_dotenv()

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)

MAP_HEIGHT = 620
BADGE_COLORS = {"success": "#16A34A", "warning": "#F59E0B", "danger": "#DC2626"}


def get_state():
    """Build the session, scheduler and map controller once per browser session."""
    if "portal_session" not in st.session_state:
        settings = Settings.from_env()
        catalog = load_catalog(settings.catalog_path)
        scheduler = ManualScheduler()
        session = DashboardSession(catalog, settings, scheduler)
        controller = MapSyncController(
            load_renderer(settings.map_config),
            catalog.get_branches(),
            settings.map_config,
        )
        controller.attach(session)
        st.session_state.portal_settings = settings
        st.session_state.portal_scheduler = scheduler
        st.session_state.portal_session = session
        st.session_state.portal_controller = controller
    return (
        st.session_state.portal_settings,
        st.session_state.portal_scheduler,
        st.session_state.portal_session,
        st.session_state.portal_controller,
    )


def reset_state():
    """Tear the map and session down; the next run rebuilds them."""
    controller = st.session_state.pop("portal_controller", None)
    if controller is not None:
        controller.teardown()
    session = st.session_state.pop("portal_session", None)
    if session is not None:
        session.close()
    st.session_state.pop("portal_scheduler", None)
    st.session_state.pop("portal_settings", None)
    st.session_state.pop("portal_last_click", None)


def badge(percent: int) -> str:
    color = BADGE_COLORS[penetration_badge(percent)]
    return (
        f'<span style="background:{color};color:#fff;border-radius:999px;'
        f'padding:2px 8px;font-size:0.75rem;font-weight:700;">{percent}%</span>'
    )


# ---------------------------------------------------------------------------
# Page
# ---------------------------------------------------------------------------
st.set_page_config(page_title="Agent Opportunity Portal", layout="wide", page_icon="🏦")

try:
    settings, scheduler, session, controller = get_state()
except (FileNotFoundError, ValueError) as e:
    st.error(f"Catalog could not be loaded: {e}")
    st.stop()

col_title, col_reset = st.columns([8, 1])
with col_title:
    st.markdown("## Agent Opportunity Portal")
    st.caption("Upsell & Prospecting Intelligence")
with col_reset:
    if st.button("↻ Reset"):
        reset_state()
        st.rerun()

# ---------------------------------------------------------------------------
# Sidebar filters
# ---------------------------------------------------------------------------
filters = session.filters
branch_codes = [ALL] + [b.code for b in session.branches]
branch_names = {ALL: "National View", **{b.code: b.city for b in session.branches}}

branch_choice = st.sidebar.selectbox(
    "Branch",
    branch_codes,
    index=branch_codes.index(filters.branch) if filters.branch in branch_codes else 0,
    format_func=lambda code: branch_names[code],
)
if branch_choice != filters.branch:
    session.select_branch(branch_choice)
    st.rerun()

search = st.sidebar.text_input("Search opportunities", value=filters.search_term)
if search != filters.search_term:
    session.set_filter_field("search_term", search)
    st.rerun()

header_col, clear_col = st.sidebar.columns([3, 1])
header_col.markdown("**Refine Selection**")
if session.has_active_filters and clear_col.button("Clear"):
    session.clear_filters()
    st.rerun()

st.sidebar.markdown("**Department**")
for department in session.departments:
    checked = st.sidebar.checkbox(department, value=department in filters.departments)
    if checked != (department in filters.departments):
        session.toggle_department(department)
        st.rerun()

employee_options = [ALL] + list(EMPLOYEE_BIN_LABELS)
employee_choice = st.sidebar.radio(
    "Employee Size",
    employee_options,
    index=employee_options.index(filters.employee_bin) if filters.employee_bin in employee_options else 0,
    format_func=lambda key: EMPLOYEE_BIN_LABELS.get(key, "Any"),
    horizontal=True,
)
if employee_choice != filters.employee_bin:
    session.toggle_bin(EMPLOYEE, employee_choice)
    st.rerun()

distance_options = [ALL] + list(DISTANCE_BIN_LABELS)
distance_choice = st.sidebar.radio(
    "Distance",
    distance_options,
    index=distance_options.index(filters.distance_bin) if filters.distance_bin in distance_options else 0,
    format_func=lambda key: DISTANCE_BIN_LABELS.get(key, "Any"),
    horizontal=True,
    disabled=filters.is_national_view,
)
if distance_choice != filters.distance_bin:
    session.toggle_bin(DISTANCE, distance_choice)
    st.rerun()

diagnostics = collect_diagnostics(settings)
if should_show_diagnostics(settings, diagnostics):
    with st.sidebar.expander("Diagnostics"):
        st.write(diagnostics)
        if diagnostics["map_token"] == "Missing":
            st.warning("Add MAPBOX_PK to the environment, or set MAP_TILES=cartodbpositron.")

# ---------------------------------------------------------------------------
# Strategic analysis panel (branch view only)
# ---------------------------------------------------------------------------
if session.is_loading:
    with st.spinner("Analyzing..."):
        time.sleep(settings.insight_debounce)
        scheduler.advance(settings.insight_debounce)

branch = session.selected_branch
if branch is not None:
    icon, _ = status_icon(branch.status)
    with st.sidebar.container(border=True):
        st.markdown(f"### Branch Feasibility: {escape(branch.city)}")
        st.caption(f"Status: {branch.status.value} ({icon})")
        c1, c2 = st.columns(2)
        c1.metric("Median Income", format_median_income(branch.median_income))
        c2.metric("Avg. Travel", branch.avg_travel_cost)
        st.markdown("**Opportunity Clusters:** " + escape(", ".join(branch.cluster_tags)))
        st.markdown(f"**Strategic Actions:** {escape(branch.strategic_actions)}")
        st.markdown(f"**{escape(session.insight_title)}**")
        st.write(session.insight_text)

# ---------------------------------------------------------------------------
# Map + opportunity list
# ---------------------------------------------------------------------------
col_map, col_list = st.columns([3, 2])

with col_map:
    st.markdown(f"**{len(session.filtered_opportunities)} Opportunities** · {escape(session.selected_branch_name)}")
    render_map = getattr(controller.renderer, "render_map", None)
    if controller.error:
        st.error(f"Map Unavailable — {controller.error}")
    elif render_map is None:
        st.info(f"Renderer '{controller.renderer.name}' does not draw a map.")
    else:
        folium_map = render_map(controller.viewport)
        if folium_map is None or controller.error:
            st.error(f"Map Unavailable — {controller.error or 'Map failed to load'}")
        else:
            event = st_folium(
                folium_map,
                key="portal_map",
                height=MAP_HEIGHT,
                use_container_width=True,
                returned_objects=["last_object_clicked"],
            )
            # st_folium repeats the last click on every rerun; handle each one once
            clicked = (event or {}).get("last_object_clicked")
            if clicked and clicked != st.session_state.get("portal_last_click"):
                st.session_state.portal_last_click = clicked
                if controller.renderer.dispatch_map_event(controller.viewport, event):
                    st.rerun()

with col_list:
    page_items = session.paginated_opportunities
    st.markdown("### Opportunities")
    st.caption(f"Showing {len(page_items)} of {len(session.filtered_opportunities)}")

    if not page_items:
        st.info(session.insight_text or "No opportunities match your specific criteria.")

    selected = session.selected_opportunity
    for opp in page_items:
        is_selected = selected is not None and selected.id == opp.id
        with st.container(border=True):
            title = f"**{escape(opp.name)}**" + (" ⭐" if is_selected else "")
            st.markdown(f"{title} &nbsp; {badge(opp.penetration_percent)}", unsafe_allow_html=True)
            st.caption(
                f"👥 {opp.employees} · {opp.department} · {opp.strategic_value.value} Value · "
                f"{opp.distance}km away"
            )
            if not is_selected and st.button("Show on map", key=f"focus_{opp.id}"):
                session.select_opportunity(opp.id)
                st.rerun()

    if session.total_pages > 1:
        prev_col, page_col, next_col = st.columns([1, 2, 1])
        if prev_col.button("‹ Previous", disabled=session.current_page == 1):
            session.previous_page()
            st.rerun()
        page_col.markdown(f"Page {session.current_page} of {session.total_pages}")
        if next_col.button("Next ›", disabled=session.current_page == session.total_pages):
            session.next_page()
            st.rerun()

with st.expander("All matching opportunities"):
    df = pd.DataFrame([o.to_dict() for o in session.filtered_opportunities])
    if df.empty:
        st.markdown("No matching opportunities.")
    else:
        df["penetration_%"] = [o.penetration_percent for o in session.filtered_opportunities]
        st.dataframe(
            df[["name", "department", "branch_code", "employees", "max_employees",
                "penetration_%", "strategic_value", "distance"]],
            use_container_width=True,
            hide_index=True,
        )
