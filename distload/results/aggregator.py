"""Result aggregation and reporting."""

import logging
import pandas as pd
import time
from typing import Any, Dict, List, Optional

from ..core.models import Mode, Script, Settings

TOTALED_COUNTS = ("scenariosCreated", "scenariosCompleted", "requestsCompleted")


def sum_errors(report: Any) -> int:
    """
    Count the errors of one sub-report.

    The errors field may be a number or a mapping of cause to count. A bare
    string stands for a worker that answered with an error message.
    """
    if isinstance(report, str):
        return 1
    if not isinstance(report, dict):
        return 0
    errors = report.get("errors")
    if isinstance(errors, dict):
        return sum(v for v in errors.values() if isinstance(v, (int, float)))
    if isinstance(errors, (int, float)) and not isinstance(errors, bool):
        return errors
    return 0


def _add_counts(totals: Dict[str, Any], counts: Any) -> None:
    if isinstance(counts, dict):
        for key, value in counts.items():
            if isinstance(value, (int, float)):
                totals[str(key)] = totals.get(str(key), 0) + value


class ResultAggregator:
    """Merges the reports of a worker's jobs into one result."""

    def __init__(self, alerter=None):
        self.alerter = alerter
        self.mode: Optional[Mode] = None
        self.reports: List[Any] = []
        self.error_budget: Optional[Any] = None

        logging.basicConfig(
            level=logging.INFO, format="%(asctime)s - %(levelname)s - %(message)s"
        )
        self.logger = logging.getLogger(__name__)

    async def analyze(
        self,
        mode: Mode,
        time_now: int,
        script: Script,
        settings: Settings,
        reports: List[Any],
    ) -> Any:
        """
        Produce the final result for a worker.

        Args:
            mode: Analysis policy
            time_now: Time the worker started, in epoch milliseconds
            script: The script the reports were produced for
            settings: Resolved settings (supplies the error budget)
            reports: One report per job, None where nothing came back

        Returns:
            The analysis; for monitoring runs with failures the alerter has
            been notified before this returns
        """
        self.mode = mode
        self.reports = list(reports)
        self.error_budget = settings.sampling.error_budget

        if mode is Mode.PERFORMANCE:
            return self.analyze_performance(time_now, script, reports)

        analysis = self.analyze_samples(mode, settings, reports)
        if mode is Mode.MONITORING and "errorMessage" in analysis:
            await self._alert(script, analysis)
        return analysis

    def analyze_performance(self, time_now: int, script: Script, reports: List[Any]) -> Any:
        """A single report is the result; several reports are returned together."""
        if len(reports) == 1 and reports[0] is not None:
            return reports[0]
        if any(report is not None for report in reports):
            return reports
        return {
            "message": (
                f"load test from {script.genesis} successfully completed "
                f"from {time_now} @ {int(time.time() * 1000)}"
            )
        }

    def analyze_samples(self, mode: Mode, settings: Settings, reports: List[Any]) -> Dict[str, Any]:
        """
        Count the sub-reports whose errors exceed the error budget.

        A sub-report with exactly as many errors as the budget passes.
        """
        budget = settings.sampling.error_budget
        failing = sum(1 for report in reports if sum_errors(report) > budget)

        totals: Dict[str, Any] = {"codes": {}, "errors": 0}
        for name in TOTALED_COUNTS:
            totals[name] = 0
        for report in reports:
            totals["errors"] += sum_errors(report)
            if isinstance(report, dict):
                _add_counts(totals["codes"], report.get("codes"))
                for name in TOTALED_COUNTS:
                    value = report.get(name)
                    if isinstance(value, (int, float)):
                        totals[name] += value

        analysis: Dict[str, Any] = {
            "errors": failing,
            "reports": list(reports),
            "totals": totals,
        }
        if failing:
            analysis["errorMessage"] = (
                f"{mode.value} test failure{'s' if failing > 1 else ''}: "
                f"{failing}/{len(reports)} exceeded budget of {budget} errors"
            )
            self.logger.warning(analysis["errorMessage"])
        else:
            self.logger.info(f"{mode.value} test passed: {len(reports)} samples within budget of {budget} errors")
        return analysis

    async def _alert(self, script: Script, analysis: Dict[str, Any]) -> None:
        if self.alerter is None:
            self.logger.warning(f"No alerter configured, not sending: {analysis['errorMessage']}")
            return
        try:
            await self.alerter.send(script, analysis)
        except Exception as e:
            self.logger.warning(f"Failed to send alert: {e}")

    def to_dataframe(self) -> pd.DataFrame:
        """Convert the last analyzed reports to a pandas DataFrame."""
        data = []
        for index, report in enumerate(self.reports):
            row = {
                "Report": index,
                "Errors": sum_errors(report),
            }
            if isinstance(report, dict):
                row["Created"] = report.get("scenariosCreated")
                row["Completed"] = report.get("scenariosCompleted")
                row["Requests"] = report.get("requestsCompleted")
            if self.mode is not None and self.mode.is_sampling:
                row["Failing"] = row["Errors"] > self.error_budget
            if report is None:
                row["Status"] = "no report"
            elif isinstance(report, str):
                row["Status"] = report[:60]
            else:
                row["Status"] = report.get("dispatchError") or report.get("executionError") or "ok"
            data.append(row)
        return pd.DataFrame(data)

    def get_tsv_string(self) -> str:
        """Get reports as TSV string for easy copy/paste to spreadsheet."""
        return self.to_dataframe().to_csv(sep="\t", index=False)

    def print_summary_table(self, title: Optional[str] = None) -> None:
        """Print formatted summary table to console."""
        if not self.reports:
            print("No reports to display.")
            return

        print()
        print("=" * 80)
        print((title or "LOAD TEST REPORTS").center(80))
        print("=" * 80)
        print(self.to_dataframe().to_string(index=False))
        print("=" * 80)
