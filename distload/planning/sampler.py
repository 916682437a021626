"""Sampling scripts for acceptance and monitoring runs."""

import random
from dataclasses import replace
from typing import List, Optional

from ..core.models import Mode, Phase, SamplingSettings, Script


def generate_sampling_phases(
    sampling: SamplingSettings, rng: Optional[random.Random] = None
) -> List[Phase]:
    """
    Build the phases of one sampling probe.

    Each of the `size` samples is a jittered pause followed by a single
    one-second, one-arrival phase.

    Args:
        sampling: Sampling settings for the script's mode
        rng: Random source for the jitter (module level random if omitted)

    Returns:
        List of 2 * size phases
    """
    if rng is None:
        rng = random
    phases: List[Phase] = []
    for _ in range(sampling.size):
        jitter = sampling.average_pause + rng.uniform(
            -sampling.pause_variance, sampling.pause_variance
        )
        phases.append(Phase(pause=max(0, jitter)))
        phases.append(Phase(duration=1, arrival_rate=1))
    return phases


def explode_by_scenario(
    script: Script, sampling: SamplingSettings, rng: Optional[random.Random] = None
) -> List[Script]:
    """
    Turn a sampling script into one performance script per scenario.

    Args:
        script: The acceptance or monitoring script
        sampling: Resolved sampling settings
        rng: Random source for the jitter

    Returns:
        One script per scenario, each probing only that scenario
    """
    return [
        replace(
            script,
            phases=tuple(generate_sampling_phases(sampling, rng)),
            scenarios=[scenario],
            mode=Mode.PERFORMANCE,
            sampling=None,
            start=None,
        )
        for scenario in script.scenarios
    ]
