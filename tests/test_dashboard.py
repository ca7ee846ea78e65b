"""Tests for dashboard.py: Streamlit dashboard."""

import re
from pathlib import Path


DASHBOARD_SRC = Path(__file__).parent.parent / "dashboard.py"


# ---- State lives in the session object ----

def test_widgets_only_call_session_mutators():
    """Every session call in the dashboard is a read or a named mutator."""
    content = DASHBOARD_SRC.read_text()
    allowed = {
        "select_branch", "set_filter_field", "clear_filters", "toggle_department", "toggle_bin",
        "select_opportunity", "previous_page", "next_page", "close",
    }
    calls = set(re.findall(r"session\.(\w+)\(", content))
    assert calls <= allowed, f"Unexpected session calls: {calls - allowed}"


def test_no_direct_filter_assignment():
    """Filter criteria are replaced through the session, never assigned."""
    content = DASHBOARD_SRC.read_text()
    assert not re.search(r"filters\.\w+\s*=[^=]", content)
    assert "session._" not in content


def test_one_session_per_browser_session():
    """Session and controller are cached in st.session_state."""
    content = DASHBOARD_SRC.read_text()
    assert "st.session_state.portal_session" in content
    assert "st.session_state.portal_controller" in content


# ---- Map lifecycle ----

def test_reset_tears_down_map():
    """Resetting releases the map controller and closes the session."""
    content = DASHBOARD_SRC.read_text()
    reset_body = content.split("def reset_state")[1].split("\ndef ")[0]
    assert "controller.teardown()" in reset_body
    assert "session.close()" in reset_body


def test_map_errors_are_shown():
    """A failed map shows an error in place of the map."""
    content = DASHBOARD_SRC.read_text()
    assert "controller.error" in content
    assert "Map Unavailable" in content


def test_map_clicks_are_routed_to_markers():
    """The interactive map feeds st_folium clicks back to the marker handlers once each."""
    content = DASHBOARD_SRC.read_text()
    assert "st_folium(" in content
    assert 'returned_objects=["last_object_clicked"]' in content
    assert "dispatch_map_event(controller.viewport, event)" in content
    assert "portal_last_click" in content.split("def reset_state")[1].split("\ndef ")[0]
    assert "components.html" not in content


def test_distance_disabled_in_national_view():
    content = DASHBOARD_SRC.read_text()
    assert "disabled=filters.is_national_view" in content


# ---- Output safety ----

def test_user_text_is_escaped():
    """Catalog strings rendered as markdown go through html.escape."""
    content = DASHBOARD_SRC.read_text()
    assert "from html import escape" in content
    assert "escape(opp.name)" in content
    assert "escape(branch.city)" in content
    assert 'escape(", ".join(branch.cluster_tags))' in content


def test_no_import_from_cli():
    """Dashboard does not import from the CLI entry point."""
    content = DASHBOARD_SRC.read_text()
    assert "import main" not in content
    assert "from main" not in content
