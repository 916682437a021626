"""CLI for previewing how a script is split into jobs."""

import argparse
import asyncio
import json
import sys
from dataclasses import replace
from pathlib import Path
from typing import List, Optional, Tuple

from ..core.errors import DistloadError
from ..core.models import Job, Script, Settings
from ..core.script_loader import ScriptLoader
from ..core.validation import validate_script
from ..dispatch.dispatcher import epoch_millis
from ..planning.scheduler import Scheduler
from ..results.charts import generate_schedule_chart
from ..results.schedule import ScheduleTable


async def load_script(path: str) -> Tuple[Script, Settings]:
    """
    Load, parse and validate a script file.

    Returns:
        Tuple of (script, settings)
    """
    script_path = Path(path)
    loader = ScriptLoader(str(script_path.parent))
    data = await loader.load(script_path.name)
    script = Script.from_payload(data)
    settings = Settings.from_script(script)
    validate_script(settings, script)
    return script, settings


def plan_jobs(script: Script, settings: Settings, time_now: int) -> List[Job]:
    """Plan a validated script the way the first worker would."""
    if script.genesis is None:
        script = replace(script, genesis=time_now)
    return Scheduler(settings).plan(time_now, script)


def main(argv: Optional[List[str]] = None):
    """Main entry point for plan CLI."""
    parser = argparse.ArgumentParser(
        description="Show the jobs a load script is split into"
    )
    parser.add_argument("script", help="Path to a YAML or JSON load script")
    parser.add_argument(
        "--time-now",
        type=int,
        default=None,
        help="Planning time in epoch milliseconds (default: now)",
    )
    parser.add_argument(
        "--output",
        type=str,
        default=None,
        help="Write the job table to this TSV file",
    )
    parser.add_argument(
        "--chart",
        type=str,
        default=None,
        help="Write an arrival rate chart of the plan to this PNG file",
    )
    parser.add_argument(
        "--payloads",
        action="store_true",
        help="Print the event of every job as JSON",
    )

    args = parser.parse_args(argv)
    time_now = args.time_now if args.time_now is not None else epoch_millis()

    try:
        script, settings = asyncio.run(load_script(args.script))
        jobs = plan_jobs(script, settings, time_now)
    except DistloadError as e:
        print(f"Error: {e}")
        sys.exit(1)

    table = ScheduleTable(jobs, time_now)
    table.print_summary_table(title=f"LOAD TEST PLAN: {args.script}")

    if args.output:
        table.to_tsv(args.output)
        print(f"Plan saved as: {args.output}")
    if args.chart:
        generate_schedule_chart(jobs, output_path=args.chart, show=False)
    if args.payloads:
        print(json.dumps([job.payload for job in jobs], indent=2))


if __name__ == "__main__":
    main()
