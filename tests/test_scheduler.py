"""Tests for planning jobs from scripts."""

import random

import pytest

from distload.core.errors import PlanningError
from distload.core.models import InvocationType, Mode, Phase, Script, Settings
from distload.planning.scheduler import Scheduler


def make_script(*phases, **kwargs) -> Script:
    return Script(
        phases=tuple(phases),
        config={"target": "http://localhost"},
        scenarios=[{"flow": [{"get": {"url": "/"}}]}],
        **kwargs,
    )


class TestConformantScripts:
    def test_script_within_limits_is_its_only_job(self, settings):
        script = make_script(Phase(duration=60, arrival_rate=10))
        jobs = Scheduler(settings).plan(1000, script)
        assert len(jobs) == 1
        assert jobs[0].script == script
        assert jobs[0].start == 1000
        assert jobs[0].invocation is InvocationType.REQUEST_RESPONSE

    def test_existing_start_is_kept(self, settings):
        script = make_script(Phase(duration=60, arrival_rate=10), start=99000)
        jobs = Scheduler(settings).plan(1000, script)
        assert jobs[0].start == 99000


class TestLongAndIntenseScripts:
    def test_long_intense_script(self, settings):
        script = make_script(Phase(duration=300, arrival_rate=60))
        jobs = Scheduler(settings).plan(0, script)

        assert [job.script.phases for job in jobs] == [
            (Phase(duration=240, arrival_rate=25),),
            (Phase(duration=240, arrival_rate=25),),
            (Phase(duration=240, arrival_rate=10),),
            (Phase(duration=60, arrival_rate=60),),
        ]
        assert [job.start for job in jobs] == [15000, 15000, 15000, 255000]
        assert [job.invocation for job in jobs] == [
            InvocationType.REQUEST_RESPONSE,
            InvocationType.REQUEST_RESPONSE,
            InvocationType.REQUEST_RESPONSE,
            InvocationType.EVENT,
        ]

    def test_continuation_starts_when_the_chunk_ends(self, settings):
        script = make_script(Phase(duration=720, arrival_rate=1))
        jobs = Scheduler(settings).plan(10000, script)
        assert len(jobs) == 2
        chunk, continuation = jobs
        assert chunk.script.phases == (Phase(duration=240, arrival_rate=1),)
        assert continuation.script.phases == (Phase(duration=480, arrival_rate=1),)
        assert continuation.start == chunk.start + 240 * 1000

    def test_existing_start_is_kept_for_split_scripts(self, settings):
        script = make_script(Phase(duration=720, arrival_rate=1), start=50000)
        jobs = Scheduler(settings).plan(10000, script)
        assert jobs[0].start == 50000
        assert jobs[1].start == 290000

    def test_intense_script_runs_side_by_side(self, settings):
        script = make_script(Phase(duration=100, arrival_rate=60))
        jobs = Scheduler(settings).plan(0, script)
        assert len(jobs) == 3
        assert {job.start for job in jobs} == {15000}
        assert all(job.invocation is InvocationType.REQUEST_RESPONSE for job in jobs)

    def test_continuation_is_replanned_from_its_payload(self, settings):
        script = make_script(Phase(duration=300, arrival_rate=60))
        continuation = Scheduler(settings).plan(0, script)[-1]

        received = Script.from_payload(continuation.payload)
        jobs = Scheduler(settings).plan(200000, received)
        assert [job.start for job in jobs] == [255000, 255000, 255000]
        assert [job.script.phases[0].arrival_rate for job in jobs] == [25, 25, 10]

    def test_trailing_pause_is_not_continued(self, settings):
        script = make_script(Phase(duration=100, arrival_rate=10), Phase(pause=300))
        jobs = Scheduler(settings).plan(0, script)
        assert len(jobs) == 1
        assert jobs[0].script.phases == (Phase(duration=100, arrival_rate=10), Phase(pause=140))

    def test_split_overrides_are_honoured(self):
        script = make_script(
            Phase(duration=100, arrival_rate=10),
            split={"maxChunkDurationInSeconds": 50, "timeBufferInMilliseconds": 1000},
        )
        jobs = Scheduler(Settings.from_script(script)).plan(0, script)
        assert [job.start for job in jobs] == [1000, 51000]


class TestSamplingScripts:
    def test_one_probe_per_scenario(self):
        script = Script(
            mode=Mode.ACCEPTANCE,
            config={"target": "http://localhost"},
            scenarios=[{"name": "a"}, {"name": "b"}],
        )
        settings = Settings.from_script(script)
        jobs = Scheduler(settings, random.Random(0)).plan(7000, script)

        assert len(jobs) == 2
        assert [job.script.scenarios for job in jobs] == [[{"name": "a"}], [{"name": "b"}]]
        assert all(job.start == 7000 for job in jobs)
        assert all(job.invocation is InvocationType.REQUEST_RESPONSE for job in jobs)
        assert all(job.script.mode is Mode.PERFORMANCE for job in jobs)
        assert all(len(job.script.phases) == 2 for job in jobs)

    def test_no_scenarios_raises(self):
        script = Script(mode=Mode.MONITORING)
        with pytest.raises(PlanningError, match="no executable content"):
            Scheduler(Settings.from_script(script)).plan(0, script)


class TestInvalidScripts:
    def test_invalid_phase_raises(self, settings):
        with pytest.raises(PlanningError):
            Scheduler(settings).plan(0, make_script(Phase(arrival_rate=5)))
