"""Core distload components."""

from .errors import DistloadError, ConfigurationError, PlanningError, DispatchError
from .models import Mode, InvocationType, Phase, Script, SamplingSettings, Settings, Job

__all__ = [
    "DistloadError",
    "ConfigurationError",
    "PlanningError",
    "DispatchError",
    "Mode",
    "InvocationType",
    "Phase",
    "Script",
    "SamplingSettings",
    "Settings",
    "Job",
]
