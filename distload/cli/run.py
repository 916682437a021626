"""CLI for running a load script."""

import argparse
import asyncio
import json
import os
import sys
from typing import Any, List, Optional

from ..core.errors import DistloadError
from ..core.models import InvocationType
from ..core.presets import ENV_WORKER_URL
from ..dispatch.executors import CommandExecutor, SimulatedExecutor
from ..dispatch.invokers import HttpInvoker
from ..results.aggregator import ResultAggregator
from ..results.alert import WebhookAlerter
from ..worker.handler import WorkerHandler
from .plan import load_script


async def run_locally(path: str, engine_command: Optional[str] = None) -> Any:
    """
    Run a script with this process acting as the first worker.

    Further workers are started in-process; their background runs are awaited
    before returning.
    """
    script, settings = await load_script(path)
    executor = CommandExecutor(engine_command) if engine_command else SimulatedExecutor()
    handler = WorkerHandler(executor=executor, alerter=WebhookAlerter())
    aggregator = ResultAggregator(handler.alerter)

    result = await handler.run(script, settings, aggregator)
    await handler.local_invoker.drain()

    aggregator.print_summary_table()
    return result


async def run_remotely(path: str, worker_url: str) -> Any:
    """Send a script to a worker server and wait for its result."""
    script, _ = await load_script(path)
    return await HttpInvoker(worker_url).invoke(
        script.to_payload(), InvocationType.REQUEST_RESPONSE
    )


def main(argv: Optional[List[str]] = None):
    """Main entry point for run CLI."""
    parser = argparse.ArgumentParser(description="Run a distributed load test")
    parser.add_argument("script", help="Path to a YAML or JSON load script")

    target_group = parser.add_mutually_exclusive_group()
    target_group.add_argument(
        "--simulate",
        action="store_true",
        help="Plan and dispatch in-process without generating load",
    )
    target_group.add_argument(
        "--worker-url",
        type=str,
        default=None,
        help=f"Invoke URL of a worker server (default: ${ENV_WORKER_URL})",
    )
    target_group.add_argument(
        "--engine-command",
        type=str,
        default=None,
        help='Load engine command run in-process, e.g. "artillery run {script} -o {report}"',
    )

    args = parser.parse_args(argv)
    worker_url = args.worker_url
    if not (worker_url or args.simulate or args.engine_command):
        worker_url = os.environ.get(ENV_WORKER_URL)

    if not (worker_url or args.simulate or args.engine_command):
        print(
            "Error: one of --simulate, --worker-url or --engine-command is required "
            f"(or set {ENV_WORKER_URL})"
        )
        sys.exit(1)

    try:
        if worker_url:
            result = asyncio.run(run_remotely(args.script, worker_url))
        else:
            result = asyncio.run(run_locally(args.script, args.engine_command))
    except KeyboardInterrupt:
        print("\nTest interrupted by user")
        sys.exit(1)
    except DistloadError as e:
        print(f"Error running load test: {e}")
        sys.exit(1)

    print(json.dumps(result, indent=2, default=str))

    if isinstance(result, str) or (isinstance(result, dict) and result.get("errors")):
        sys.exit(1)


if __name__ == "__main__":
    main()
