"""Validation of scripts and their override blocks before planning."""

import logging
from typing import Any

from ..planning.phases import phase_duration_seconds, phase_requests_per_second
from ..planning.scripts import first_invalid_phase
from .errors import ConfigurationError
from .models import Script, Settings
from .presets import SPLIT_CEILINGS, SPLIT_MINIMUMS

logger = logging.getLogger(__name__)


def _is_integer(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def validate_split(script: Script):
    """
    Check the script's _split override block.

    Raises:
        ConfigurationError: If the block is not an object or any value is not an
            integer between 1 and its ceiling
    """
    if script.split is None:
        return
    if not isinstance(script.split, dict):
        raise ConfigurationError("If specified, the _split attribute must be an object")
    for key, ceiling in SPLIT_CEILINGS.items():
        if key not in script.split:
            continue
        value = script.split[key]
        if not _is_integer(value) or not SPLIT_MINIMUMS[key] <= value <= ceiling:
            raise ConfigurationError(
                f'If specified the "_split.{key}" attribute must be an integer '
                f"inclusively between {SPLIT_MINIMUMS[key]} and {ceiling}.  Observed: {value!r}"
            )


def validate_sampling(settings: Settings, script: Script):
    """
    Check the resolved sampling settings of an acceptance or monitoring script.

    Raises:
        ConfigurationError: If any sampling value is out of range or a probe
            could outlast max_script_duration_seconds
    """
    if script.sampling is not None and not isinstance(script.sampling, dict):
        raise ConfigurationError("If specified, the sampling attribute must be an object")

    sampling = settings.sampling
    if not _is_integer(sampling.size) or sampling.size <= 0:
        raise ConfigurationError(
            f"sampling.size must be an integer greater than 0.  Observed: {sampling.size!r}"
        )
    if not _is_number(sampling.average_pause) or sampling.average_pause <= 0:
        raise ConfigurationError(
            "sampling.averagePause must be a number greater than 0.  "
            f"Observed: {sampling.average_pause!r}"
        )
    if not _is_number(sampling.pause_variance) or sampling.pause_variance < 0:
        raise ConfigurationError(
            "sampling.pauseVariance must be a number of at least 0.  "
            f"Observed: {sampling.pause_variance!r}"
        )
    if not _is_number(sampling.error_budget) or sampling.error_budget < 0:
        raise ConfigurationError(
            "sampling.errorBudget must be a number of at least 0.  "
            f"Observed: {sampling.error_budget!r}"
        )
    if (
        not _is_number(sampling.warning_threshold)
        or not 0 < sampling.warning_threshold <= 1
    ):
        raise ConfigurationError(
            "sampling.warningThreshold must be a number greater than 0 and at most 1.  "
            f"Observed: {sampling.warning_threshold!r}"
        )
    if sampling.error_budget >= sampling.size:
        raise ConfigurationError(
            f"sampling.errorBudget ({sampling.error_budget}) must be less than "
            f"sampling.size ({sampling.size})"
        )
    if sampling.pause_variance > sampling.average_pause:
        raise ConfigurationError(
            f"sampling.pauseVariance ({sampling.pause_variance}) cannot exceed "
            f"sampling.averagePause ({sampling.average_pause})"
        )

    max_duration = settings.max_script_duration_seconds
    worst_case = sampling.size * (sampling.average_pause + sampling.pause_variance)
    if worst_case > max_duration:
        raise ConfigurationError(
            f"Sampling could take up to {worst_case} seconds which exceeds the "
            f"maximum script duration of {max_duration} seconds"
        )
    if worst_case > sampling.warning_threshold * max_duration:
        logger.warning(
            f"Sampling could take up to {worst_case} seconds, more than "
            f"{sampling.warning_threshold:.0%} of the maximum script duration "
            f"of {max_duration} seconds"
        )


def validate_load(settings: Settings, script: Script):
    """
    Check the phases of a performance script against the script ceilings.

    Raises:
        ConfigurationError: If there are no phases, a phase is invalid, the
            script lasts no time or generates no load, or it exceeds a ceiling
    """
    if not script.phases:
        raise ConfigurationError(
            "A script must contain at least one phase under the config.phases "
            "attribute unless its mode is acceptance or monitoring"
        )

    invalid = first_invalid_phase(script.phases, phase_duration_seconds)
    if invalid is not None:
        raise ConfigurationError(
            "Every phase must have a valid duration in seconds.  "
            f"Observed: {invalid[1].to_dict()}"
        )
    invalid = first_invalid_phase(script.phases, phase_requests_per_second)
    if invalid is not None:
        raise ConfigurationError(
            "Every phase must have a valid means to determine requests per second.  "
            f"Observed: {invalid[1].to_dict()}"
        )

    duration = sum(phase_duration_seconds(p) for p in script.phases)
    if duration <= 0:
        raise ConfigurationError(
            "Every phase must have a valid duration in seconds.  "
            f"Observed: {[p.to_dict() for p in script.phases]}"
        )
    if duration > settings.max_script_duration_seconds:
        raise ConfigurationError(
            "The total duration in seconds of all script phases cannot exceed "
            f"{settings.max_script_duration_seconds}"
        )
    rate = max(phase_requests_per_second(p) for p in script.phases)
    if rate <= 0:
        raise ConfigurationError(
            "Every phase must have a valid means to determine requests per second.  "
            f"Observed: {[p.to_dict() for p in script.phases]}"
        )
    if rate > settings.max_script_requests_per_second:
        raise ConfigurationError(
            "The maximum requests per second of any script phase cannot exceed "
            f"{settings.max_script_requests_per_second}"
        )


def validate_script(settings: Settings, script: Script):
    """
    Validate a parsed script against its resolved settings.

    Mode spellings are checked when the script is parsed.

    Args:
        settings: Settings resolved from the script
        script: The parsed script

    Raises:
        ConfigurationError: If the script cannot be planned
    """
    validate_split(script)
    if script.mode.is_sampling:
        validate_sampling(settings, script)
    else:
        validate_load(settings, script)
