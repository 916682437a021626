"""Tests for script parsing, settings resolution and jobs."""

import pytest

from distload.core.errors import ConfigurationError
from distload.core.models import (
    InvocationType,
    Job,
    Mode,
    Phase,
    PhaseKind,
    SamplingSettings,
    Script,
    Settings,
)


class TestMode:
    @pytest.mark.parametrize(
        "spelling, mode",
        [
            ("perf", Mode.PERFORMANCE),
            ("performance", Mode.PERFORMANCE),
            ("acc", Mode.ACCEPTANCE),
            ("acceptance", Mode.ACCEPTANCE),
            ("mon", Mode.MONITORING),
            ("monitoring", Mode.MONITORING),
        ],
    )
    def test_accepted_spellings(self, spelling, mode):
        assert Mode.parse(spelling) is mode

    @pytest.mark.parametrize("spelling", ["aCc", "ACCEPTANCE", "load", 1, None])
    def test_other_spellings_are_rejected(self, spelling):
        with pytest.raises(ConfigurationError, match="mode attribute must be one of"):
            Mode.parse(spelling)


class TestPhase:
    def test_kinds(self):
        assert Phase(pause=1).kind is PhaseKind.PAUSE
        assert Phase(duration=1, arrival_count=4).kind is PhaseKind.COUNTED
        assert Phase(duration=1, arrival_rate=4, ramp_to=8).kind is PhaseKind.RAMP
        assert Phase(duration=1, arrival_rate=4, ramp_to=4).kind is PhaseKind.CONSTANT
        assert Phase(duration=1, arrival_rate=4).kind is PhaseKind.CONSTANT
        assert Phase(duration=1).kind is PhaseKind.INVALID

    def test_wire_form_omits_absent_fields(self):
        phase = Phase.from_dict({"duration": 10, "arrivalRate": 2, "rampTo": 6, "name": "ramp"})
        assert phase == Phase(duration=10, arrival_rate=2, ramp_to=6, name="ramp")
        assert phase.to_dict() == {"name": "ramp", "duration": 10, "arrivalRate": 2, "rampTo": 6}

    def test_non_numeric_values_are_rejected(self):
        with pytest.raises(ConfigurationError):
            Phase.from_dict({"duration": "10", "arrivalRate": 2})

    def test_non_mapping_is_rejected(self):
        with pytest.raises(ConfigurationError):
            Phase.from_dict([10, 2])


class TestScript:
    def test_payload_round_trip_keeps_unknown_keys(self):
        payload = {
            "config": {"target": "http://localhost", "phases": [{"duration": 5, "arrivalRate": 1}]},
            "scenarios": [{"flow": []}],
            "mode": "perf",
            "_split": {"maxChunkDurationInSeconds": 100},
            "_genesis": 12,
            "_trace": True,
            "_invokeType": "Event",
        }
        script = Script.from_payload(payload)

        assert script.phases == (Phase(duration=5, arrival_rate=1),)
        assert script.config == {"target": "http://localhost"}
        assert script.mode is Mode.PERFORMANCE
        assert script.genesis == 12
        assert script.trace
        assert script.extra == {"_invokeType": "Event"}

        result = script.to_payload()
        assert result["config"] == payload["config"]
        assert result["_invokeType"] == "Event"
        assert result["mode"] == "performance"
        assert "_start" not in result

    def test_missing_config_yields_no_phases(self):
        assert Script.from_payload({"scenarios": []}).phases == ()

    def test_non_mapping_is_rejected(self):
        with pytest.raises(ConfigurationError):
            Script.from_payload(["not", "a", "script"])


class TestSettings:
    def test_defaults(self):
        settings = Settings.from_script(Script())
        assert settings.max_script_duration_seconds == 86400
        assert settings.max_script_requests_per_second == 5000
        assert settings.max_chunk_duration_seconds == 240
        assert settings.max_chunk_requests_per_second == 25
        assert settings.time_buffer_millis == 15000
        assert settings.timeout_buffer_millis == 15000

    def test_split_overrides(self):
        script = Script(split={"maxChunkRequestsPerSecond": 100, "timeBufferInMilliseconds": 500})
        settings = Settings.from_script(script)
        assert settings.max_chunk_requests_per_second == 100
        assert settings.time_buffer_millis == 500
        assert settings.max_chunk_duration_seconds == 240

    def test_sampling_defaults_per_mode(self):
        assert Settings.from_script(Script(mode=Mode.ACCEPTANCE)).sampling.size == 1
        assert Settings.from_script(Script(mode=Mode.ACCEPTANCE)).sampling.error_budget == 0
        assert Settings.from_script(Script(mode=Mode.MONITORING)).sampling.size == 5
        assert Settings.from_script(Script(mode=Mode.MONITORING)).sampling.error_budget == 4

    def test_explicit_zero_error_budget_is_honoured(self):
        script = Script(mode=Mode.MONITORING, sampling={"errorBudget": 0})
        assert Settings.from_script(script).sampling.error_budget == 0

    def test_sampling_overrides(self):
        sampling = SamplingSettings.for_mode(Mode.ACCEPTANCE, {"size": 3, "averagePause": 1})
        assert sampling.size == 3
        assert sampling.average_pause == 1
        assert sampling.pause_variance == 0.1


class TestJob:
    def test_payload_carries_the_start(self):
        script = Script(phases=(Phase(duration=1, arrival_rate=1),), start=5)
        job = Job(script, 20000, InvocationType.EVENT)
        assert job.payload["_start"] == 20000
        assert script.start == 5
