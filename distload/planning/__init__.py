"""Splitting, sampling and scheduling of load scripts."""

from .phases import split_phase_by_duration, split_phase_by_rate
from .scripts import split_script_by_duration, split_script_by_rate
from .sampler import explode_by_scenario, generate_sampling_phases
from .scheduler import Scheduler

__all__ = [
    "split_phase_by_duration",
    "split_phase_by_rate",
    "split_script_by_duration",
    "split_script_by_rate",
    "explode_by_scenario",
    "generate_sampling_phases",
    "Scheduler",
]
