"""Worker entry point: plan, dispatch and analyze one incoming script."""

import asyncio
import logging
import random
from dataclasses import replace
from typing import Any, Callable, Optional, Tuple

from ..core.models import Script, Settings
from ..core.script_loader import ScriptLoader
from ..core.validation import validate_script
from ..dispatch.dispatcher import Dispatcher, epoch_millis
from ..dispatch.executors import Executor, SimulatedExecutor
from ..dispatch.invokers import Invoker, LocalInvoker
from ..planning.scheduler import Scheduler
from ..results.aggregator import ResultAggregator

TIMEOUT_BANNER = "\n".join([
    "################################################################",
    "##                   !! Function Timeout !!                   ##",
    "## This probably results from a dropped response or an overly ##",
    "## long response time from the target and likely an error.    ##",
    "## Success was reported so the platform does not run the same ##",
    "## script again.                                              ##",
    "################################################################",
])


class WorkerHandler:
    """
    Handles one worker invocation.

    The payload is merged with any referenced script file, parsed, validated
    and planned. The first job runs here through the executor; the rest are
    handed to new workers through the invoker. Scripts flagged _simulation
    skip load generation and loop their invocations back into this handler.
    """

    def __init__(
        self,
        executor: Optional[Executor] = None,
        invoker: Optional[Invoker] = None,
        alerter=None,
        loader: Optional[ScriptLoader] = None,
        clock: Callable[[], int] = epoch_millis,
        rng: Optional[random.Random] = None,
    ):
        self.executor = executor or SimulatedExecutor()
        self.local_invoker = LocalInvoker(self)
        self.invoker = invoker or self.local_invoker
        self.simulated_executor = SimulatedExecutor()
        self.alerter = alerter
        self.loader = loader or ScriptLoader()
        self.clock = clock
        self.rng = rng

        logging.basicConfig(
            level=logging.INFO, format="%(asctime)s - %(levelname)s - %(message)s"
        )
        self.logger = logging.getLogger(__name__)

    async def invoke(self, payload: Any, remaining_millis: int) -> Any:
        """
        Platform entry point.

        Validates the event, then runs it under a deadline of remaining_millis
        less the timeout buffer of its settings so a result is returned before
        the platform kills the worker.

        Args:
            payload: The incoming event
            remaining_millis: Time left before the platform stops this worker

        Returns:
            The result of the run, an error message string, or
            "Error: function timeout"
        """
        try:
            script, settings = await self.prepare(payload)
        except Exception as e:
            self.logger.error(f"Invalid event: {e}")
            return f"Error validating event: {e}"

        deadline = max(0, remaining_millis - settings.timeout_buffer_millis)
        try:
            return await asyncio.wait_for(
                self._execute(script, settings), timeout=deadline / 1000
            )
        except asyncio.TimeoutError:
            self.logger.error(TIMEOUT_BANNER)
            return "Error: function timeout"

    async def handle(self, payload: Any) -> Any:
        """
        Validate and run one incoming event.

        Returns:
            The analysis, or an error message string when the event is
            invalid or its execution failed
        """
        try:
            script, settings = await self.prepare(payload)
        except Exception as e:
            self.logger.error(f"Invalid event: {e}")
            return f"Error validating event: {e}"
        return await self._execute(script, settings)

    async def prepare(self, payload: Any) -> Tuple[Script, Settings]:
        """
        Merge, parse and validate an incoming event.

        Returns:
            Tuple of (script, settings)

        Raises:
            DistloadError: If the event cannot be planned
        """
        event = await self.loader.merge_if(payload)
        script = Script.from_payload(event)
        settings = Settings.from_script(script)
        validate_script(settings, script)
        return script, settings

    async def _execute(self, script: Script, settings: Settings) -> Any:
        try:
            return await self.run(script, settings)
        except Exception as e:
            self.logger.exception(f"Task failed: {e}")
            return f"Error executing task: {e}"

    async def run(
        self,
        script: Script,
        settings: Settings,
        aggregator: Optional[ResultAggregator] = None,
    ) -> Any:
        """
        Plan, dispatch and analyze a validated script.

        Args:
            script: The parsed script
            settings: Settings resolved from the script
            aggregator: Aggregator to analyze the reports with (a new one if omitted)

        Returns:
            The aggregated result
        """
        time_now = self.clock()
        if script.genesis is None:
            script = replace(script, genesis=time_now)

        if script.trace:
            self.logger.info(
                f"Executing load script from {script.genesis} in {time_now}"
            )

        jobs = Scheduler(settings, self.rng).plan(time_now, script)

        if script.simulation:
            self.logger.info(f"SIMULATION: dispatching {len(jobs)} jobs")
            dispatcher = Dispatcher(
                settings, self.simulated_executor, self.local_invoker, self.clock
            )
        else:
            dispatcher = Dispatcher(settings, self.executor, self.invoker, self.clock)

        reports = await dispatcher.run(jobs)

        if aggregator is None:
            aggregator = ResultAggregator(self.alerter)
        result = await aggregator.analyze(
            script.mode, time_now, script, settings, reports
        )

        if script.trace:
            self.logger.info(
                f"Load test from {script.genesis} in {time_now} completed @ {self.clock()}"
            )
        return result
