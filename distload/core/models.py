"""Data models for planning and dispatching distributed load tests."""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Optional, List, Dict, Any, Tuple, Union

from .errors import ConfigurationError
from .presets import (
    SPLIT_DEFAULTS,
    TIMEOUT_BUFFER_IN_MILLISECONDS,
    SAMPLING_DEFAULTS,
    ACCEPTANCE_SAMPLING_DEFAULTS,
    MONITORING_SAMPLING_DEFAULTS,
)

Number = Union[int, float]

# Short spellings accepted in the "mode" attribute of a script
_MODE_ALIASES = {
    "perf": "performance",
    "acc": "acceptance",
    "mon": "monitoring",
}


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


class Mode(Enum):
    """How a script is planned and how its reports are analyzed."""

    PERFORMANCE = "performance"
    ACCEPTANCE = "acceptance"
    MONITORING = "monitoring"

    @classmethod
    def parse(cls, value: Any) -> "Mode":
        """Parse a mode spelling, rejecting anything but the exact lower-case forms."""
        if isinstance(value, str):
            try:
                return cls(_MODE_ALIASES.get(value, value))
            except ValueError:
                pass
        spellings = '", "'.join(list(_MODE_ALIASES) + [m.value for m in cls])
        raise ConfigurationError(
            f'If specified, the mode attribute must be one of "{spellings}"'
        )

    @property
    def is_sampling(self) -> bool:
        """Sampling modes probe each scenario instead of running the phases."""
        return self is not Mode.PERFORMANCE


class InvocationType(Enum):
    """How a job is handed to a new worker."""

    REQUEST_RESPONSE = "RequestResponse"  # wait for the worker's report
    EVENT = "Event"  # fire and continue


class PhaseKind(Enum):
    CONSTANT = "constant"
    RAMP = "ramp"
    COUNTED = "counted"
    PAUSE = "pause"
    INVALID = "invalid"


@dataclass(frozen=True)
class Phase:
    """One segment of a load profile."""

    duration: Optional[Number] = None
    arrival_rate: Optional[Number] = None
    ramp_to: Optional[Number] = None
    arrival_count: Optional[Number] = None
    pause: Optional[Number] = None
    name: Optional[str] = None

    # Wire key for each attribute, in output order
    WIRE_KEYS = (
        ("name", "name"),
        ("duration", "duration"),
        ("arrival_rate", "arrivalRate"),
        ("ramp_to", "rampTo"),
        ("arrival_count", "arrivalCount"),
        ("pause", "pause"),
    )

    @property
    def kind(self) -> PhaseKind:
        """Shape of the phase, decided by which fields are present."""
        if self.pause is not None:
            return PhaseKind.PAUSE
        if self.arrival_count is not None:
            return PhaseKind.COUNTED
        if self.arrival_rate is not None:
            if self.ramp_to is not None and self.ramp_to != self.arrival_rate:
                return PhaseKind.RAMP
            return PhaseKind.CONSTANT
        return PhaseKind.INVALID

    @classmethod
    def from_dict(cls, data: Any) -> "Phase":
        """Build a phase from its wire representation."""
        if not isinstance(data, dict):
            raise ConfigurationError(
                f"Every phase must be an object.  Observed: {data!r}"
            )
        values: Dict[str, Any] = {}
        for attr, key in cls.WIRE_KEYS:
            if key not in data:
                continue
            value = data[key]
            if attr != "name" and not _is_number(value):
                raise ConfigurationError(
                    f'Phase attribute "{key}" must be a number.  Observed: {data!r}'
                )
            values[attr] = value
        return cls(**values)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the wire representation, omitting absent fields."""
        return {
            key: getattr(self, attr)
            for attr, key in self.WIRE_KEYS
            if getattr(self, attr) is not None
        }


@dataclass(frozen=True)
class Script:
    """A load script together with the metadata threaded between workers."""

    phases: Tuple[Phase, ...] = ()
    config: Dict[str, Any] = field(default_factory=dict)
    scenarios: List[Any] = field(default_factory=list)
    mode: Mode = Mode.PERFORMANCE

    # Raw override blocks, checked by validation
    sampling: Optional[Any] = None
    split: Optional[Any] = None

    genesis: Optional[int] = None
    start: Optional[int] = None
    trace: bool = False
    simulation: bool = False

    # Top-level keys that pass through untouched
    extra: Dict[str, Any] = field(default_factory=dict, repr=False)

    KNOWN_KEYS = (
        "config",
        "scenarios",
        "mode",
        "sampling",
        "_split",
        "_genesis",
        "_start",
        "_trace",
        "_simulation",
    )

    @classmethod
    def from_payload(cls, payload: Any) -> "Script":
        """Parse an incoming event into a script."""
        if not isinstance(payload, dict):
            raise ConfigurationError("A script must be an object")

        config = payload.get("config")
        config = dict(config) if isinstance(config, dict) else {}
        raw_phases = config.pop("phases", None)
        phases: Tuple[Phase, ...] = ()
        if isinstance(raw_phases, list):
            phases = tuple(Phase.from_dict(p) for p in raw_phases)

        scenarios = payload.get("scenarios")

        return cls(
            phases=phases,
            config=config,
            scenarios=list(scenarios) if isinstance(scenarios, list) else [],
            mode=Mode.parse(payload["mode"]) if "mode" in payload else Mode.PERFORMANCE,
            sampling=payload.get("sampling"),
            split=payload.get("_split"),
            genesis=payload.get("_genesis"),
            start=payload.get("_start"),
            trace=bool(payload.get("_trace", False)),
            simulation=bool(payload.get("_simulation", False)),
            extra={k: v for k, v in payload.items() if k not in cls.KNOWN_KEYS},
        )

    def to_payload(self) -> Dict[str, Any]:
        """Convert to the event sent to a worker."""
        payload: Dict[str, Any] = dict(self.extra)
        config = dict(self.config)
        config["phases"] = [phase.to_dict() for phase in self.phases]
        payload["config"] = config
        if self.scenarios:
            payload["scenarios"] = list(self.scenarios)
        payload["mode"] = self.mode.value
        if self.sampling is not None:
            payload["sampling"] = self.sampling
        if self.split is not None:
            payload["_split"] = self.split
        if self.genesis is not None:
            payload["_genesis"] = self.genesis
        if self.start is not None:
            payload["_start"] = self.start
        if self.trace:
            payload["_trace"] = True
        if self.simulation:
            payload["_simulation"] = True
        return payload

    def with_phases(self, phases: List[Phase], start: Optional[int] = None) -> "Script":
        """Copy of this script carrying other phases and start time."""
        return replace(self, phases=tuple(phases), start=start)


@dataclass(frozen=True)
class SamplingSettings:
    """Settings for probing scenarios in acceptance and monitoring modes."""

    size: Any = SAMPLING_DEFAULTS["size"]
    average_pause: Any = SAMPLING_DEFAULTS["averagePause"]
    pause_variance: Any = SAMPLING_DEFAULTS["pauseVariance"]
    error_budget: Any = SAMPLING_DEFAULTS["errorBudget"]
    warning_threshold: Any = SAMPLING_DEFAULTS["warningThreshold"]

    WIRE_KEYS = (
        ("size", "size"),
        ("average_pause", "averagePause"),
        ("pause_variance", "pauseVariance"),
        ("error_budget", "errorBudget"),
        ("warning_threshold", "warningThreshold"),
    )

    @classmethod
    def for_mode(
        cls, mode: Mode, overrides: Optional[Dict[str, Any]] = None
    ) -> "SamplingSettings":
        """Mode defaults replaced by any values the script supplies."""
        if mode is Mode.ACCEPTANCE:
            values = dict(ACCEPTANCE_SAMPLING_DEFAULTS)
        elif mode is Mode.MONITORING:
            values = dict(MONITORING_SAMPLING_DEFAULTS)
        else:
            values = dict(SAMPLING_DEFAULTS)
        if isinstance(overrides, dict):
            values.update({k: overrides[k] for k in values if k in overrides})
        return cls(**{attr: values[key] for attr, key in cls.WIRE_KEYS})

    def to_dict(self) -> Dict[str, Any]:
        return {key: getattr(self, attr) for attr, key in self.WIRE_KEYS}


@dataclass(frozen=True)
class Settings:
    """Per-invocation limits that govern splitting and scheduling."""

    max_script_duration_seconds: Any = SPLIT_DEFAULTS["maxScriptDurationInSeconds"]
    max_script_requests_per_second: Any = SPLIT_DEFAULTS["maxScriptRequestsPerSecond"]
    max_chunk_duration_seconds: Any = SPLIT_DEFAULTS["maxChunkDurationInSeconds"]
    max_chunk_requests_per_second: Any = SPLIT_DEFAULTS["maxChunkRequestsPerSecond"]
    time_buffer_millis: Any = SPLIT_DEFAULTS["timeBufferInMilliseconds"]
    timeout_buffer_millis: int = TIMEOUT_BUFFER_IN_MILLISECONDS
    sampling: SamplingSettings = field(default_factory=SamplingSettings)

    # _split override key for each limit
    SPLIT_KEYS = (
        ("max_script_duration_seconds", "maxScriptDurationInSeconds"),
        ("max_script_requests_per_second", "maxScriptRequestsPerSecond"),
        ("max_chunk_duration_seconds", "maxChunkDurationInSeconds"),
        ("max_chunk_requests_per_second", "maxChunkRequestsPerSecond"),
        ("time_buffer_millis", "timeBufferInMilliseconds"),
    )

    @classmethod
    def from_script(cls, script: Optional[Script] = None) -> "Settings":
        """
        Obtain settings, replacing any of the defaults with user supplied values.

        Args:
            script: The script whose _split and sampling blocks override defaults

        Returns:
            Settings for the script (values are not validated here)
        """
        if script is None:
            return cls()
        values: Dict[str, Any] = {}
        if isinstance(script.split, dict):
            for attr, key in cls.SPLIT_KEYS:
                if key in script.split:
                    values[attr] = script.split[key]
        sampling = SamplingSettings.for_mode(
            script.mode, script.sampling if isinstance(script.sampling, dict) else None
        )
        return cls(sampling=sampling, **values)


@dataclass(frozen=True)
class Job:
    """A script with its resolved start time and invocation type."""

    script: Script
    start: int
    invocation: InvocationType = InvocationType.REQUEST_RESPONSE

    @property
    def payload(self) -> Dict[str, Any]:
        """Event handed to the worker that runs this job."""
        return replace(self.script, start=self.start).to_payload()
