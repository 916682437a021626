"""Alerting for failed monitoring runs."""

import aiohttp
import asyncio
import json
import logging
import os
from typing import Any, Dict, Optional

from ..core.errors import DispatchError
from ..core.models import Script
from ..core.presets import ENV_ALERT_WEBHOOK_URL


def brief_analysis(analysis: Dict[str, Any]) -> str:
    """
    Render an analysis as JSON without the bulky sub-report latencies.

    The given analysis is left unchanged.
    """
    brief = dict(analysis)
    reports = analysis.get("reports")
    if isinstance(reports, list):
        brief["reports"] = [
            {k: v for k, v in report.items() if k != "latencies"}
            if isinstance(report, dict)
            else report
            for report in reports
        ]
    return json.dumps(brief, indent=2, default=str)


class WebhookAlerter:
    """Posts monitoring failures to a webhook."""

    def __init__(self, url: Optional[str] = None, timeout_seconds: float = 30):
        self.url = url if url is not None else os.environ.get(ENV_ALERT_WEBHOOK_URL)
        self.timeout_seconds = timeout_seconds
        self.logger = logging.getLogger(__name__)

    async def send(self, script: Script, analysis: Dict[str, Any]) -> None:
        """
        Send an alert for a failed analysis.

        Raises:
            DispatchError: If the webhook rejects the alert
        """
        if not self.url:
            self.logger.warning(
                f"{ENV_ALERT_WEBHOOK_URL} is not set, alert not sent: "
                f"{analysis.get('errorMessage')}"
            )
            return

        target = script.config.get("target", "unknown target")
        body = {
            "subject": f"Alert: {analysis.get('errorMessage')} ({target})",
            "genesis": script.genesis,
            "message": brief_analysis(analysis),
        }
        timeout = aiohttp.ClientTimeout(total=self.timeout_seconds)

        try:
            async with aiohttp.ClientSession(timeout=timeout) as session:
                async with session.post(self.url, json=body) as response:
                    if not 200 <= response.status < 300:
                        response_text = await response.text()
                        raise DispatchError(
                            f"Alert webhook answered HTTP {response.status}: {response_text[:200]}",
                            status=response.status,
                        )
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise DispatchError(f"Failed to reach alert webhook: {e}") from e

        self.logger.info(f"Alert sent for {target}")
