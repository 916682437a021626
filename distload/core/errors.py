"""Exception types raised by the planning and dispatch pipeline."""


class DistloadError(Exception):
    """Base class for all distload errors."""


class ConfigurationError(DistloadError):
    """A script or one of its override blocks is malformed or out of bounds."""


class PlanningError(DistloadError):
    """A phase list reached the splitters in a state that cannot be planned."""


class DispatchError(DistloadError):
    """Handing a job to a new worker failed."""

    def __init__(self, message: str, status: int = 0):
        super().__init__(message)
        self.status = status
