"""Error types raised by the simulation."""


class SimulationError(Exception):
    """Base class for all simulation errors."""


class InvalidConfiguration(SimulationError, ValueError):
    """A run parameter is outside its valid range."""


class InsufficientHistory(SimulationError, ValueError):
    """The controller was asked for an output without any measurements."""


class SimulationCancelled(SimulationError):
    """A cooperative stop was requested between timesteps."""

    def __init__(self, step):
        super().__init__(f"simulation cancelled at step {step}")
        self.step = step
