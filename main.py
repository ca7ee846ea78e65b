#!/usr/bin/env python3
"""
Agent Opportunity Portal - Command Line Entry Point

Usage:
    python main.py                                  # National view, page 1
    python main.py --branch 101 --distance-bin Close
    python main.py --department Retail --department Healthcare --employee-bin Medium
    python main.py --branch 102 --export-map data/exports/cape_town.html
"""

import argparse
import logging
import sys
from pathlib import Path

import pandas as pd
from dotenv import load_dotenv

from config import ALL, Settings
from mapsync import load_renderer
from mapsync.controller import MapSyncController
from portal import DashboardSession, ManualScheduler, load_catalog
from portal.filter import DISTANCE, DISTANCE_BINS, EMPLOYEE, EMPLOYEE_BINS


def setup_logging(verbose: bool = False):
    """Configure logging."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stderr)],
    )


def parse_args(argv=None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Agent Opportunity Portal",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py --branch 101                    # Johannesburg opportunities
  python main.py --search retail --page 2        # Second page of a text search
  python main.py --export-csv out.csv            # Export the filtered list
        """
    )

    parser.add_argument("--catalog", type=str, help="Path to the catalog JSON (default: CATALOG_PATH)")
    parser.add_argument("--branch", "-b", type=str, default=None, help="Branch code or 'All'")
    parser.add_argument(
        "--department", "-d",
        action="append",
        default=[],
        help="Department to include (repeatable)"
    )
    parser.add_argument(
        "--employee-bin",
        choices=[k for k in EMPLOYEE_BINS],
        default=None,
        help="Employee size bin"
    )
    parser.add_argument(
        "--distance-bin",
        choices=[k for k in DISTANCE_BINS],
        default=None,
        help="Distance bin (ignored in the national view)"
    )
    parser.add_argument("--search", "-s", type=str, default=None, help="Text to find in opportunity names")
    parser.add_argument("--page", "-p", type=int, default=1, help="Page to show")
    parser.add_argument("--select", type=str, help="Opportunity id to focus on the map")
    parser.add_argument("--export-csv", type=str, help="Write the filtered opportunities to CSV")
    parser.add_argument("--export-map", type=str, help="Write the map as an HTML page")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable verbose logging")

    return parser.parse_args(argv)


def apply_args(session: DashboardSession, args):
    """Drive the session through the same mutators the dashboard uses."""
    if args.branch is not None:
        session.select_branch(args.branch)
    for department in args.department:
        session.toggle_department(department)
    if args.employee_bin and args.employee_bin != ALL:
        session.toggle_bin(EMPLOYEE, args.employee_bin)
    if args.distance_bin and args.distance_bin != ALL:
        session.toggle_bin(DISTANCE, args.distance_bin)
    if args.search is not None:
        session.set_filter_field("search_term", args.search)
    session.set_page(args.page)
    if args.select:
        session.select_opportunity(args.select)


def export_csv(session: DashboardSession, path: str) -> Path:
    filepath = Path(path)
    filepath.parent.mkdir(parents=True, exist_ok=True)
    df = pd.DataFrame([o.to_dict() for o in session.filtered_opportunities])
    df.to_csv(filepath, index=False)
    return filepath


def print_summary(session: DashboardSession):
    print("\n" + "=" * 60)
    print("AGENT OPPORTUNITY PORTAL")
    print("=" * 60)
    print(f"View: {session.selected_branch_name}")
    print(f"Matching opportunities: {len(session.filtered_opportunities)}")
    if session.total_pages:
        print(f"Page {session.current_page} of {session.total_pages}")
    print("=" * 60)

    for i, opp in enumerate(session.paginated_opportunities, 1):
        marker = "*" if session.selected_opportunity and session.selected_opportunity.id == opp.id else " "
        print(f" {marker}{i}. {opp.name} [{opp.department}]")
        print(f"     Employees: {opp.employees} · Penetration: {opp.penetration_percent}% · "
              f"{opp.strategic_value.value} value · {opp.distance}km away")

    print(f"\n{session.insight_title}")
    print(session.insight_text)


def main(argv=None) -> int:
    """Main entry point."""
    load_dotenv()
    args = parse_args(argv)
    setup_logging(args.verbose)

    logger = logging.getLogger(__name__)
    logger.info("Starting Agent Opportunity Portal")

    settings = Settings.from_env()
    try:
        catalog = load_catalog(args.catalog or settings.catalog_path)
    except (FileNotFoundError, ValueError) as e:
        logger.error(f"Could not load catalog: {e}")
        return 1

    session = DashboardSession(catalog, settings, ManualScheduler())
    controller = None
    if args.export_map:
        renderer = load_renderer(settings.map_config)
        controller = MapSyncController(renderer, catalog.get_branches(), settings.map_config)
        controller.attach(session)

    try:
        apply_args(session, args)
        session.flush_insight()
        print_summary(session)

        if args.export_csv:
            path = export_csv(session, args.export_csv)
            logger.info(f"Exported {len(session.filtered_opportunities)} opportunities to {path}")

        if controller is not None:
            if controller.error:
                logger.error(f"Map unavailable: {controller.error}")
                return 1
            save = getattr(controller.renderer, "save", None)
            if save is None:
                logger.warning(f"Renderer '{controller.renderer.name}' cannot export HTML")
            elif save(controller.viewport, args.export_map) is None:
                return 1
    finally:
        if controller is not None:
            controller.teardown()
        session.close()

    return 0


if __name__ == "__main__":
    sys.exit(main())
