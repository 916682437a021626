"""Tests for merging reports into one result."""

import logging
from unittest.mock import AsyncMock

import pytest

from distload.core.models import Mode, Script, Settings
from distload.results.aggregator import ResultAggregator, sum_errors


def settings_for(mode, **sampling):
    return Settings.from_script(Script(mode=mode, sampling=sampling or None))


class TestSumErrors:
    def test_number(self):
        assert sum_errors({"errors": 3}) == 3

    def test_mapping(self):
        assert sum_errors({"errors": {"ETIMEDOUT": 2, "ECONNRESET": 1}}) == 3

    def test_missing_report(self):
        assert sum_errors(None) == 0
        assert sum_errors({}) == 0

    def test_error_message_counts_once(self):
        assert sum_errors("Error executing task: boom") == 1


class TestPerformance:
    @pytest.mark.asyncio
    async def test_single_report_is_returned_unchanged(self):
        report = {"errors": 0, "requestsCompleted": 10}
        result = await ResultAggregator().analyze(
            Mode.PERFORMANCE, 1000, Script(genesis=1), Settings(), [report]
        )
        assert result is report

    @pytest.mark.asyncio
    async def test_several_reports_are_returned_together(self):
        reports = [{"errors": 0}, None, {"errors": 2}]
        result = await ResultAggregator().analyze(
            Mode.PERFORMANCE, 1000, Script(genesis=1), Settings(), reports
        )
        assert result == reports

    @pytest.mark.asyncio
    async def test_no_reports_yields_completion_message(self):
        result = await ResultAggregator().analyze(
            Mode.PERFORMANCE, 1000, Script(genesis=123), Settings(), [None, None]
        )
        assert result["message"].startswith(
            "load test from 123 successfully completed from 1000 @ "
        )


class TestAcceptance:
    @pytest.mark.asyncio
    async def test_within_budget(self):
        result = await ResultAggregator().analyze(
            Mode.ACCEPTANCE, 0, Script(), settings_for(Mode.ACCEPTANCE), [{"errors": 0}]
        )
        assert result["errors"] == 0
        assert "errorMessage" not in result

    @pytest.mark.asyncio
    async def test_one_of_two_over_budget(self):
        reports = [{"errors": {"ETIMEDOUT": 1}}, {"errors": 0}]
        result = await ResultAggregator().analyze(
            Mode.ACCEPTANCE, 0, Script(), settings_for(Mode.ACCEPTANCE), reports
        )
        assert result["errors"] == 1
        assert result["reports"] == reports
        assert result["errorMessage"] == "acceptance test failure: 1/2 exceeded budget of 0 errors"

    @pytest.mark.asyncio
    async def test_failures_are_pluralised(self):
        reports = [{"errors": 1}, {"errors": 1}]
        result = await ResultAggregator().analyze(
            Mode.ACCEPTANCE, 0, Script(), settings_for(Mode.ACCEPTANCE), reports
        )
        assert result["errorMessage"] == "acceptance test failures: 2/2 exceeded budget of 0 errors"

    @pytest.mark.asyncio
    async def test_totals(self):
        reports = [
            {"errors": 0, "codes": {"200": 3}, "requestsCompleted": 3, "scenariosCreated": 1},
            {"errors": {"ECONNRESET": 1}, "codes": {"200": 2, "500": 1}, "requestsCompleted": 3},
        ]
        result = await ResultAggregator().analyze(
            Mode.ACCEPTANCE, 0, Script(), settings_for(Mode.ACCEPTANCE, errorBudget=0), reports
        )
        assert result["totals"]["codes"] == {"200": 5, "500": 1}
        assert result["totals"]["errors"] == 1
        assert result["totals"]["requestsCompleted"] == 6
        assert result["totals"]["scenariosCreated"] == 1
        assert result["totals"]["scenariosCompleted"] == 0


class TestMonitoring:
    @pytest.mark.asyncio
    async def test_errors_equal_to_budget_pass(self):
        alerter = AsyncMock()
        result = await ResultAggregator(alerter).analyze(
            Mode.MONITORING, 0, Script(), settings_for(Mode.MONITORING), [{"errors": 4}]
        )
        assert result["errors"] == 0
        alerter.send.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_errors_over_budget_alert(self):
        alerter = AsyncMock()
        script = Script(mode=Mode.MONITORING)
        result = await ResultAggregator(alerter).analyze(
            Mode.MONITORING, 0, script, settings_for(Mode.MONITORING), [{"errors": 5}]
        )
        assert result["errors"] == 1
        assert result["errorMessage"] == "monitoring test failure: 1/1 exceeded budget of 4 errors"
        alerter.send.assert_awaited_once_with(script, result)

    @pytest.mark.asyncio
    async def test_alert_failure_is_logged(self, caplog):
        alerter = AsyncMock()
        alerter.send.side_effect = RuntimeError("mail server down")
        with caplog.at_level(logging.WARNING):
            result = await ResultAggregator(alerter).analyze(
                Mode.MONITORING, 0, Script(), settings_for(Mode.MONITORING), [{"errors": 5}]
            )
        assert result["errors"] == 1
        assert "mail server down" in caplog.text


class TestSummaryTable:
    @pytest.mark.asyncio
    async def test_dataframe_has_one_row_per_report(self):
        aggregator = ResultAggregator()
        reports = [
            {"errors": 2, "requestsCompleted": 5},
            {"errors": {"DispatchError": 1}, "dispatchError": "refused"},
            None,
        ]
        await aggregator.analyze(
            Mode.ACCEPTANCE, 0, Script(), settings_for(Mode.ACCEPTANCE), reports
        )
        df = aggregator.to_dataframe()

        assert len(df) == 3
        assert list(df["Errors"]) == [2, 1, 0]
        assert list(df["Failing"]) == [True, True, False]
        assert list(df["Status"]) == ["ok", "refused", "no report"]

    def test_empty_summary(self, capsys):
        ResultAggregator().print_summary_table()
        assert "No reports to display." in capsys.readouterr().out
