"""Execution collaborators that run one worker-sized script."""

import aiofiles
import asyncio
import json
import logging
import shlex
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict

from ..core.models import Script


class Executor(ABC):
    """Runs a worker-sized script and returns its report."""

    @abstractmethod
    async def execute(self, script: Script, time_now: int) -> Dict[str, Any]:
        """Run the script starting at time_now and return its report."""


class SimulatedExecutor(Executor):
    """Reports success without generating any load."""

    def __init__(self):
        self.logger = logging.getLogger(__name__)

    async def execute(self, script: Script, time_now: int) -> Dict[str, Any]:
        self.logger.info(
            f"Simulated {len(script.phases)} phases of {len(script.scenarios)} scenarios"
        )
        return {"errors": 0}


class CommandExecutor(Executor):
    """
    Runs an external load engine command.

    The command is a shell-style string in which {script} is replaced with the
    path of a JSON file holding the script and {report} with the path the
    engine must write its JSON report to, e.g.
    "artillery run {script} --output {report}".
    """

    def __init__(self, command: str):
        self.command = command
        self.logger = logging.getLogger(__name__)

    async def execute(self, script: Script, time_now: int) -> Dict[str, Any]:
        with tempfile.TemporaryDirectory(prefix="distload-") as workdir:
            script_path = Path(workdir) / "script.json"
            report_path = Path(workdir) / "report.json"

            async with aiofiles.open(script_path, "w") as f:
                await f.write(json.dumps(script.to_payload()))

            cmd = [
                arg.format(script=script_path, report=report_path)
                for arg in shlex.split(self.command)
            ]
            self.logger.info(f"Running load engine: {' '.join(cmd)}")

            process = await asyncio.create_subprocess_exec(
                *cmd,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
            _, stderr = await process.communicate()

            if process.returncode != 0:
                raise RuntimeError(
                    f"Load engine exited with {process.returncode}: "
                    f"{stderr.decode(errors='replace').strip()}\nCommand: {' '.join(cmd)}"
                )

            if not report_path.exists():
                raise RuntimeError(f"Load engine wrote no report to {report_path}")

            async with aiofiles.open(report_path, "r") as f:
                content = await f.read()
            return json.loads(content)
