"""Measuring and splitting whole scripts."""

from typing import Callable, List, Optional, Sequence, Tuple

from ..core.errors import PlanningError
from ..core.models import Number, Phase, Script
from .phases import (
    phase_duration_seconds,
    phase_requests_per_second,
    split_phase_by_duration,
    split_phase_by_rate,
)


def first_invalid_phase(
    phases: Sequence[Phase], measure: Callable[[Phase], Number]
) -> Optional[Tuple[int, Phase]]:
    """
    Find the first phase the given measurement rejects.

    Args:
        phases: Phases to check
        measure: phase_duration_seconds or phase_requests_per_second

    Returns:
        Tuple of (index, phase), or None when every phase measures cleanly
    """
    for index, phase in enumerate(phases):
        if measure(phase) < 0:
            return index, phase
    return None


def _check(script: Script, measure: Callable[[Phase], Number], axis: str):
    invalid = first_invalid_phase(script.phases, measure)
    if invalid is not None:
        index, phase = invalid
        raise PlanningError(
            f"Phase {index} has no valid {axis}: {phase.to_dict()}"
        )


def script_duration_seconds(script: Script) -> Number:
    """Total duration of all phases in seconds."""
    _check(script, phase_duration_seconds, "duration")
    return sum(phase_duration_seconds(p) for p in script.phases)


def script_requests_per_second(script: Script) -> Number:
    """Highest arrival rate of any phase (0 for a script with no phases)."""
    _check(script, phase_requests_per_second, "arrival rate")
    return max((phase_requests_per_second(p) for p in script.phases), default=0)


def split_script_by_duration(script: Script, max_seconds: Number) -> Tuple[Script, Script]:
    """
    Split a script into the first max_seconds and everything after.

    The phase that straddles the limit is split in two; a limit falling on a
    phase boundary splits no phase. The chunk keeps the script's start, the
    remainder has none.

    Returns:
        Tuple of (chunk, remainder)

    Raises:
        PlanningError: If the script does not exceed max_seconds
    """
    total = 0
    chunk: List[Phase] = []
    for index, phase in enumerate(script.phases):
        duration = phase_duration_seconds(phase)
        if duration < 0:
            raise PlanningError(f"Phase {index} has no valid duration: {phase.to_dict()}")
        if total + duration > max_seconds:
            remainder = list(script.phases[index + 1:])
            available = max_seconds - total
            if available > 0:
                head, tail = split_phase_by_duration(phase, available)
                chunk.append(head)
                remainder.insert(0, tail)
            else:
                remainder.insert(0, phase)
            return (
                script.with_phases(chunk, start=script.start),
                script.with_phases(remainder),
            )
        chunk.append(phase)
        total += duration
    raise PlanningError(
        f"Script lasts {total}s which does not exceed {max_seconds}s, nothing to split"
    )


def split_script_by_rate(script: Script, max_rate: Number) -> Tuple[Script, Script]:
    """
    Split a script into a part capped at max_rate and the excess load.

    Both parts span the same time and are meant to run side by side.

    Returns:
        Tuple of (chunk, remainder)
    """
    chunk: List[Phase] = []
    remainder: List[Phase] = []
    for phase in script.phases:
        chunk_phases, remainder_phases = split_phase_by_rate(phase, max_rate)
        chunk.extend(chunk_phases)
        remainder.extend(remainder_phases)
    return (
        script.with_phases(chunk, start=script.start),
        script.with_phases(remainder),
    )
