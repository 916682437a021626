"""Turning one script into worker-sized jobs with start times."""

import logging
import random
from typing import List, Optional

from ..core.errors import PlanningError
from ..core.models import InvocationType, Job, Script, Settings
from .sampler import explode_by_scenario
from .scripts import (
    script_duration_seconds,
    script_requests_per_second,
    split_script_by_duration,
    split_script_by_rate,
)


class Scheduler:
    """Plans the jobs a worker runs itself or hands to other workers."""

    def __init__(self, settings: Settings, rng: Optional[random.Random] = None):
        self.settings = settings
        self.rng = rng
        self.logger = logging.getLogger(__name__)

    def plan(self, time_now: int, script: Script) -> List[Job]:
        """
        Plan the jobs for a script.

        Performance scripts that fit one worker come back as their only job.
        Larger scripts are cut into a chunk of at most max_chunk_duration_seconds,
        split by rate into pieces that run side by side, and a continuation job
        that carries everything after the chunk. Sampling scripts produce one
        probe per scenario.

        Args:
            time_now: Current time in epoch milliseconds
            script: The validated script

        Returns:
            Jobs in dispatch order; the first runs in the current worker

        Raises:
            PlanningError: If the script yields nothing to execute
        """
        if script.mode.is_sampling:
            jobs = [
                Job(probe, time_now, InvocationType.REQUEST_RESPONSE)
                for probe in explode_by_scenario(script, self.settings.sampling, self.rng)
            ]
        else:
            jobs = self._plan_performance(time_now, script)

        if not jobs:
            raise PlanningError("Script has no executable content")

        if script.trace:
            for index, job in enumerate(jobs):
                self.logger.info(
                    f"Job {index}: {job.invocation.value} at {job.start} "
                    f"with {len(job.script.phases)} phases"
                )
        return jobs

    def _plan_performance(self, time_now: int, script: Script) -> List[Job]:
        settings = self.settings
        duration = script_duration_seconds(script)
        rate = script_requests_per_second(script)

        if (
            duration <= settings.max_chunk_duration_seconds
            and rate <= settings.max_chunk_requests_per_second
        ):
            start = script.start if script.start is not None else time_now
            return [Job(script, start)]

        if script.start is not None:
            start = script.start
        else:
            start = time_now + settings.time_buffer_millis

        chunk, remainder = script, None
        if duration > settings.max_chunk_duration_seconds:
            chunk, remainder = split_script_by_duration(
                script, settings.max_chunk_duration_seconds
            )
            self.logger.info(
                f"Split {duration}s script into a "
                f"{settings.max_chunk_duration_seconds}s chunk and a continuation"
            )

        jobs = [Job(piece, start) for piece in self._split_by_rate(chunk)]

        if remainder is not None and script_requests_per_second(remainder) > 0:
            continuation_start = start + int(script_duration_seconds(chunk) * 1000)
            jobs.append(Job(remainder, continuation_start, InvocationType.EVENT))
        return jobs

    def _split_by_rate(self, chunk: Script) -> List[Script]:
        max_rate = self.settings.max_chunk_requests_per_second
        pieces: List[Script] = []
        remaining = chunk
        while script_requests_per_second(remaining) > max_rate:
            piece, remaining = split_script_by_rate(remaining, max_rate)
            pieces.append(piece)
        if script_requests_per_second(remaining) > 0 or not pieces:
            pieces.append(remaining)
        if len(pieces) > 1:
            self.logger.info(f"Split chunk into {len(pieces)} pieces of at most {max_rate} rps")
        return pieces
