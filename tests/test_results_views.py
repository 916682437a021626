"""Tests for the plan table and chart."""

from distload.core.models import InvocationType, Job, Phase, Script
from distload.results.charts import generate_schedule_chart, phase_rate_points
from distload.results.schedule import ScheduleTable


def plan():
    chunk = Script(phases=(Phase(duration=60, arrival_rate=25),), scenarios=[{}])
    rest = Script(phases=(Phase(duration=30, arrival_rate=10, ramp_to=20),), scenarios=[{}])
    return [
        Job(chunk, 15000),
        Job(chunk, 15000),
        Job(rest, 75000, InvocationType.EVENT),
    ]


class TestScheduleTable:
    def test_rows(self):
        df = ScheduleTable(plan(), time_now=0).to_dataframe()

        assert list(df["Runs"]) == ["local", "remote", "remote"]
        assert list(df["Invocation"]) == ["RequestResponse", "RequestResponse", "Event"]
        assert list(df["Offset_s"]) == ["15.0", "15.0", "75.0"]
        assert list(df["Duration_s"]) == [60, 60, 30]
        assert list(df["Peak_RPS"]) == [25, 25, 20]

    def test_tsv(self, tmp_path):
        path = tmp_path / "plan.tsv"
        ScheduleTable(plan()).to_tsv(str(path))
        assert path.read_text().splitlines()[0].startswith("Job\tRuns\tInvocation")

    def test_empty_plan(self, capsys):
        ScheduleTable([]).print_summary_table()
        assert "No jobs to display." in capsys.readouterr().out


class TestCharts:
    def test_phase_rate_points(self):
        phases = [
            Phase(pause=2),
            Phase(duration=10, arrival_rate=1, ramp_to=5),
            Phase(duration=4, arrival_count=8),
        ]
        times, rates = phase_rate_points(phases, offset=1)

        assert times == [1, 3, 3, 13, 13, 17]
        assert rates == [0, 0, 1, 5, 2.0, 2.0]

    def test_chart_is_saved(self, tmp_path):
        path = tmp_path / "plan.png"
        saved = generate_schedule_chart(plan(), output_path=str(path), show=False)
        assert saved == str(path)
        assert path.exists()

    def test_empty_plan_has_no_chart(self):
        assert generate_schedule_chart([], show=False) is None
