"""Remote dispatch collaborators that start new workers."""

import asyncio
import aiohttp
import json
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional, Set

from ..core.errors import DispatchError
from ..core.models import InvocationType
from ..core.presets import PAYLOAD_LIMITS

INVOCATION_HEADER = "X-Invocation-Type"


class Invoker(ABC):
    """Hands a job payload to a new worker."""

    @abstractmethod
    async def invoke(self, payload: Dict[str, Any], invocation: InvocationType) -> Optional[Any]:
        """
        Start a worker with the given payload.

        Args:
            payload: The job's event
            invocation: RequestResponse waits for the report, Event does not

        Returns:
            The worker's report for RequestResponse, None for Event

        Raises:
            DispatchError: If the worker could not be started
        """


class HttpInvoker(Invoker):
    """Invokes workers served by a distload worker server over HTTP."""

    def __init__(self, url: str, timeout_seconds: float = 900):
        self.url = url
        self.timeout_seconds = timeout_seconds
        self.logger = logging.getLogger(__name__)

    async def invoke(self, payload: Dict[str, Any], invocation: InvocationType) -> Optional[Any]:
        body = json.dumps(payload)
        size = len(body.encode("utf-8"))
        limit = PAYLOAD_LIMITS[invocation.value]
        if size > limit:
            raise DispatchError(
                f"Payload of {size} bytes exceeds the {limit} byte limit "
                f"for {invocation.value} invocations"
            )

        headers = {
            "Content-Type": "application/json",
            INVOCATION_HEADER: invocation.value,
        }
        timeout = aiohttp.ClientTimeout(total=self.timeout_seconds)

        try:
            async with aiohttp.ClientSession(timeout=timeout) as session:
                async with session.post(self.url, data=body, headers=headers) as response:
                    response_text = await response.text()

                    if invocation is InvocationType.EVENT:
                        if response.status != 202:
                            raise DispatchError(
                                f"Worker refused event with HTTP {response.status}: "
                                f"{response_text[:200]}",
                                status=response.status,
                            )
                        return None

                    if not 200 <= response.status < 300:
                        raise DispatchError(
                            f"Worker failed with HTTP {response.status}: {response_text[:200]}",
                            status=response.status,
                        )
                    try:
                        return json.loads(response_text)
                    except (json.JSONDecodeError, ValueError) as e:
                        raise DispatchError(
                            f"Worker returned an unparsable report: {e}",
                            status=response.status,
                        ) from e
        except aiohttp.ClientError as e:
            raise DispatchError(f"Failed to reach worker at {self.url}: {e}") from e
        except asyncio.TimeoutError as e:
            raise DispatchError(
                f"Worker at {self.url} did not answer within {self.timeout_seconds}s"
            ) from e


class LocalInvoker(Invoker):
    """
    Invokes workers inside the current process.

    RequestResponse invocations await the handler; Event invocations run as
    background tasks that can be awaited with drain().
    """

    def __init__(self, handler=None):
        self.handler = handler
        self.background: Set[asyncio.Task] = set()
        self.logger = logging.getLogger(__name__)

    async def invoke(self, payload: Dict[str, Any], invocation: InvocationType) -> Optional[Any]:
        if self.handler is None:
            raise DispatchError("No worker handler bound to the local invoker")

        # Same serialization as a real invocation
        try:
            event = json.loads(json.dumps(payload))
        except (TypeError, ValueError) as e:
            raise DispatchError(f"Payload is not serializable: {e}") from e

        if invocation is InvocationType.EVENT:
            task = asyncio.create_task(self.handler.handle(event))
            self.background.add(task)
            task.add_done_callback(self.background.discard)
            return None
        return await self.handler.handle(event)

    async def drain(self):
        """Wait for every background invocation, including ones they start."""
        while self.background:
            await asyncio.gather(*list(self.background), return_exceptions=True)
