"""Tabular view of planned jobs."""

import pandas as pd
from typing import List, Optional

from ..core.models import Job
from ..planning.scripts import script_duration_seconds, script_requests_per_second


class ScheduleTable:
    """Formats a plan for the console and for export."""

    def __init__(self, jobs: List[Job], time_now: int = 0):
        self.jobs = jobs
        self.time_now = time_now

    def to_dataframe(self) -> pd.DataFrame:
        """Convert jobs to pandas DataFrame."""
        data = []
        for index, job in enumerate(self.jobs):
            data.append({
                "Job": index,
                "Runs": "local" if index == 0 else "remote",
                "Invocation": job.invocation.value,
                "Start": job.start,
                "Offset_s": f"{(job.start - self.time_now) / 1000:.1f}",
                "Duration_s": script_duration_seconds(job.script),
                "Peak_RPS": script_requests_per_second(job.script),
                "Phases": len(job.script.phases),
                "Scenarios": len(job.script.scenarios),
            })
        return pd.DataFrame(data)

    def to_tsv(self, path: str) -> None:
        """Export to TSV file."""
        self.to_dataframe().to_csv(path, sep="\t", index=False)

    def get_tsv_string(self) -> str:
        """Get the plan as TSV string for easy copy/paste to spreadsheet."""
        return self.to_dataframe().to_csv(sep="\t", index=False)

    def print_summary_table(self, title: Optional[str] = None) -> None:
        """Print formatted plan to console."""
        if not self.jobs:
            print("No jobs to display.")
            return

        print()
        print("=" * 100)
        print((title or "LOAD TEST PLAN").center(100))
        print("=" * 100)
        print(self.to_dataframe().to_string(index=False))
        print("=" * 100)
