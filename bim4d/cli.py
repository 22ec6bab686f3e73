"""
CLI interface for schedule analysis and 4D state inspection.

Reads a JSON task list (as returned by the project API) and prints critical
path metrics, the simulation date range, or element states at a date.
"""

import argparse
import logging
import sys
from datetime import datetime
from pathlib import Path

from pydantic import ValidationError

from bim4d.analysis.critical_path import analyze_critical_path, metrics_to_frame, print_critical_path_report
from bim4d.config.settings import settings
from bim4d.cpm.engine import CriticalPathAnalyzer
from bim4d.cpm.errors import ScheduleError
from bim4d.cpm.models import AnalysisMode
from bim4d.cpm.network import TaskGraph
from bim4d.schemas.tasks import load_tasks
from bim4d.simulation.resolver import ElementStateResolver
from bim4d.simulation.timeline import TimelineIndex
from bim4d.utils.helpers import parse_moment
from bim4d.utils.logger import configure_logging

logger = logging.getLogger('bim4d')


def run_cpm(tasks_file: Path, mode: str, default_duration: float = None,
            near_critical_days: float = None, output_csv: Path = None) -> int:
    """Analyze the critical path and print a report."""
    tasks = load_tasks(tasks_file)
    graph = TaskGraph.build(tasks)
    result = CriticalPathAnalyzer(graph, AnalysisMode(mode), default_duration).run()

    report = analyze_critical_path(result, near_critical_days)
    print_critical_path_report(report, tasks)

    if output_csv is not None:
        metrics_to_frame(result, tasks).to_csv(output_csv, index=False)
        logger.info(f"Saved schedule metrics to {output_csv}")

    return 0


def run_range(tasks_file: Path) -> int:
    """Print the simulation date range."""
    timeline = TimelineIndex(load_tasks(tasks_file))
    if timeline.date_range is None:
        print("No tasks with dates available for simulation")
        return 1

    print(f"Start: {timeline.date_range.start.isoformat()}")
    print(f"End:   {timeline.date_range.end.isoformat()}")
    print(f"Days:  {timeline.date_range.days:g}")
    return 0


def run_states(tasks_file: Path, moment: datetime) -> int:
    """Print element states at a simulated date."""
    tasks = load_tasks(tasks_file)
    states = ElementStateResolver().resolve(moment, tasks)

    print(f"=== Element states at {moment.isoformat()} ===")
    for element_id, state in states.items():
        band = state.band.value if state.band else '-'
        print(f"  {element_id:30s} {state.phase.value:12s} {band:5s} "
              f"{state.progress * 100:5.1f}% {state.color_hex} (task {state.task_id})")
    print(f"\n{len(states)} elements")
    return 0


def main(argv: list[str] = None) -> int:
    """CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Critical path analysis and 4D simulation states for BIM-linked schedules",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Strict CPM report with metrics exported for the Gantt view
  bim4d cpm tasks.json --csv metrics.csv

  # Heuristic mode for task lists with sparse dependencies
  bim4d cpm tasks.json --mode heuristic

  # Element colors on a given day
  bim4d states tasks.json --date 2024-01-04
""",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    cpm_parser = subparsers.add_parser("cpm", help="Critical path analysis")
    cpm_parser.add_argument("tasks_file", type=Path, help="JSON task list")
    cpm_parser.add_argument(
        "--mode",
        choices=[m.value for m in AnalysisMode],
        default=AnalysisMode.STRICT.value,
        help="strict (slack-based) or heuristic critical path",
    )
    cpm_parser.add_argument(
        "--default-duration",
        type=float,
        default=None,
        help=f"Include unscheduled tasks at this duration in days (e.g. {settings.DEFAULT_DURATION_DAYS:g})",
    )
    cpm_parser.add_argument(
        "--near-critical-days",
        type=float,
        default=None,
        help=f"Slack threshold for near-critical tasks (default: {settings.NEAR_CRITICAL_DAYS:g})",
    )
    cpm_parser.add_argument("--csv", type=Path, dest="output_csv", help="Write per-task metrics CSV")

    range_parser = subparsers.add_parser("range", help="Simulation date range")
    range_parser.add_argument("tasks_file", type=Path, help="JSON task list")

    states_parser = subparsers.add_parser("states", help="Element states at a date")
    states_parser.add_argument("tasks_file", type=Path, help="JSON task list")
    states_parser.add_argument(
        "--date",
        type=parse_moment,
        required=True,
        help="Simulated date (ISO format, e.g. 2024-01-04 or 2024-01-04T12:00:00Z; offsets are converted to UTC)",
    )

    args = parser.parse_args(argv)
    configure_logging('bim4d', 'DEBUG' if args.verbose else None)

    try:
        if args.command == "cpm":
            return run_cpm(args.tasks_file, args.mode, args.default_duration,
                           args.near_critical_days, args.output_csv)
        if args.command == "range":
            return run_range(args.tasks_file)
        return run_states(args.tasks_file, args.date)
    except (ScheduleError, ValidationError) as e:
        logger.error(f"Invalid task list: {e}")
        return 1
    except FileNotFoundError as e:
        logger.error(str(e))
        return 1


if __name__ == "__main__":
    sys.exit(main())
