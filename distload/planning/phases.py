"""Measuring and splitting single load phases."""

import math
from dataclasses import replace
from typing import List, Tuple

from ..core.errors import PlanningError
from ..core.models import Number, Phase, PhaseKind


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves going up (2.5 -> 3, -2.5 -> -2)."""
    return int(math.floor(value + 0.5))


def phase_duration_seconds(phase: Phase) -> Number:
    """
    Duration of a phase in seconds.

    Returns:
        The pause length for pauses, the duration otherwise, or -1 when the
        phase has no usable duration
    """
    if phase.pause is not None:
        return phase.pause if phase.pause >= 0 else -1
    if phase.duration is not None and phase.duration > 0:
        return phase.duration
    return -1


def phase_requests_per_second(phase: Phase) -> Number:
    """
    Peak arrival rate of a phase.

    Returns:
        Requests per second, 0 for pauses, or -1 when the phase has no usable rate
    """
    kind = phase.kind
    if kind is PhaseKind.PAUSE:
        return 0
    if kind is PhaseKind.RAMP:
        peak = max(phase.arrival_rate, phase.ramp_to)
        return peak if min(phase.arrival_rate, phase.ramp_to) >= 0 else -1
    if kind is PhaseKind.CONSTANT:
        return phase.arrival_rate if phase.arrival_rate >= 0 else -1
    if kind is PhaseKind.COUNTED:
        duration = phase_duration_seconds(phase)
        if duration <= 0 or phase.arrival_count < 0:
            return -1
        return phase.arrival_count / duration
    return -1


def intersection(phase: Phase, rate: Number) -> int:
    """
    Second (rounded half up) at which a ramp reaches the given rate.

    Raises:
        PlanningError: If the phase does not ramp
    """
    ramp_to = phase.ramp_to if phase.ramp_to is not None else phase.arrival_rate
    if ramp_to == phase.arrival_rate:
        raise PlanningError("Parallel lines never intersect, detect and avoid this case")
    return round_half_up(
        (rate - phase.arrival_rate) * phase.duration / (ramp_to - phase.arrival_rate)
    )


def split_phase_by_duration(phase: Phase, max_duration: Number) -> Tuple[Phase, Phase]:
    """
    Split a phase at max_duration seconds.

    The chunk covers the first max_duration seconds and the remainder covers the
    rest. Durations (and arrival counts for counted phases) add up to the
    original values.

    Args:
        phase: The phase to split
        max_duration: Length of the chunk in seconds

    Returns:
        Tuple of (chunk, remainder)
    """
    kind = phase.kind
    if kind is PhaseKind.INVALID or phase_duration_seconds(phase) < 0:
        raise PlanningError(f"Cannot split invalid phase {phase.to_dict()}")

    if kind is PhaseKind.PAUSE:
        chunk_pause = min(phase.pause, max_duration)
        return (
            replace(phase, pause=chunk_pause),
            replace(phase, pause=phase.pause - chunk_pause),
        )

    duration = phase.duration
    if not 0 < max_duration < duration:
        raise PlanningError(
            f"Cannot split a {duration}s phase at {max_duration}s"
        )
    residual = duration - max_duration

    if kind is PhaseKind.COUNTED:
        chunk_count = math.floor(phase.arrival_count * max_duration / duration)
        return (
            replace(phase, duration=max_duration, arrival_count=chunk_count),
            replace(
                phase,
                duration=residual,
                arrival_count=phase.arrival_count - chunk_count,
            ),
        )

    if kind is PhaseKind.RAMP:
        split_rate = round_half_up(
            phase.arrival_rate
            + (phase.ramp_to - phase.arrival_rate) * max_duration / duration
        )
        return (
            replace(phase, duration=max_duration, ramp_to=split_rate),
            replace(phase, duration=residual, arrival_rate=split_rate),
        )

    return (
        replace(phase, duration=max_duration),
        replace(phase, duration=residual),
    )


def _drop_empty(phases: List[Phase]) -> List[Phase]:
    # Rounding the intersection can leave a zero-length piece on one side
    return [p for p in phases if (p.pause if p.pause is not None else p.duration) != 0]


def split_phase_by_rate(phase: Phase, max_rate: Number) -> Tuple[List[Phase], List[Phase]]:
    """
    Split a phase so the chunk never exceeds max_rate.

    Both sides always cover the same span of time; where one side carries no
    load it gets a pause so the two timelines stay aligned when they run side
    by side.

    Args:
        phase: The phase to split
        max_rate: Highest arrival rate the chunk may carry

    Returns:
        Tuple of (chunk phases, remainder phases)
    """
    kind = phase.kind
    if kind is PhaseKind.PAUSE:
        return [phase], [phase]
    if kind is PhaseKind.INVALID or phase_requests_per_second(phase) < 0:
        raise PlanningError(f"Cannot split invalid phase {phase.to_dict()}")

    duration = phase.duration
    idle = Phase(pause=duration)

    if kind is PhaseKind.CONSTANT:
        constant = replace(phase, ramp_to=None)
        if constant.arrival_rate <= max_rate:
            return [constant], [idle]
        return (
            [replace(constant, arrival_rate=max_rate)],
            [replace(constant, arrival_rate=constant.arrival_rate - max_rate)],
        )

    if kind is PhaseKind.COUNTED:
        if phase_requests_per_second(phase) <= max_rate:
            return [phase], [idle]
        chunk_count = max_rate * duration
        return (
            [replace(phase, arrival_count=chunk_count)],
            [replace(phase, arrival_count=phase.arrival_count - chunk_count)],
        )

    start, end = phase.arrival_rate, phase.ramp_to
    if max(start, end) <= max_rate:
        return [phase], [idle]
    if min(start, end) >= max_rate:
        return (
            [replace(phase, arrival_rate=max_rate, ramp_to=None)],
            [replace(phase, arrival_rate=start - max_rate, ramp_to=end - max_rate)],
        )

    crossing = intersection(phase, max_rate)
    if start < end:
        chunk = [
            replace(phase, duration=crossing, ramp_to=max_rate),
            replace(phase, duration=duration - crossing, arrival_rate=max_rate, ramp_to=None),
        ]
        remainder = [
            Phase(pause=crossing),
            replace(phase, duration=duration - crossing, arrival_rate=1, ramp_to=end - max_rate),
        ]
    else:
        chunk = [
            replace(phase, duration=crossing, arrival_rate=max_rate, ramp_to=None),
            replace(phase, duration=duration - crossing, arrival_rate=max_rate),
        ]
        remainder = [
            replace(phase, duration=crossing, arrival_rate=start - max_rate, ramp_to=1),
            Phase(pause=duration - crossing),
        ]
    return _drop_empty(chunk), _drop_empty(remainder)
