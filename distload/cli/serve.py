"""CLI for serving a worker over HTTP."""

import argparse
import os
from aiohttp import web
from typing import List, Optional

from ..core.presets import ENV_WORKER_URL
from ..dispatch.executors import CommandExecutor, SimulatedExecutor
from ..dispatch.invokers import HttpInvoker
from ..results.alert import WebhookAlerter
from ..worker.handler import WorkerHandler
from ..worker.server import create_app


def main(argv: Optional[List[str]] = None):
    """Main entry point for serve CLI."""
    parser = argparse.ArgumentParser(description="Serve a distload worker")
    parser.add_argument("--host", type=str, default="0.0.0.0", help="Bind address (default: 0.0.0.0)")
    parser.add_argument("--port", type=int, default=8080, help="Port (default: 8080)")
    parser.add_argument(
        "--worker-url",
        type=str,
        default=None,
        help=f"Invoke URL used to start further workers (default: ${ENV_WORKER_URL}, else this server)",
    )
    parser.add_argument(
        "--timeout-millis",
        type=int,
        default=900000,
        help="Time each invocation may take (default: 900000)",
    )

    executor_group = parser.add_mutually_exclusive_group()
    executor_group.add_argument(
        "--engine-command",
        type=str,
        default=None,
        help='Load engine command, e.g. "artillery run {script} -o {report}"',
    )
    executor_group.add_argument(
        "--simulate",
        action="store_true",
        help="Report success without generating load (default without --engine-command)",
    )

    args = parser.parse_args(argv)

    worker_url = (
        args.worker_url
        or os.environ.get(ENV_WORKER_URL)
        or f"http://127.0.0.1:{args.port}/invoke"
    )
    executor = CommandExecutor(args.engine_command) if args.engine_command else SimulatedExecutor()
    handler = WorkerHandler(
        executor=executor,
        invoker=HttpInvoker(worker_url),
        alerter=WebhookAlerter(),
    )

    print(f"Serving worker on {args.host}:{args.port}, further workers via {worker_url}")
    web.run_app(create_app(handler, args.timeout_millis), host=args.host, port=args.port)


if __name__ == "__main__":
    main()
