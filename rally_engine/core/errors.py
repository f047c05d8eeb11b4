"""Exception types raised by the planning core."""


class ConfigurationError(ValueError):
    """Defect in the supplied problem data or in the core's bookkeeping.

    Raised for probability tables that do not sum to one, actions that are
    not legal at the configured level, and fuel consumption exceeding the
    fuel available.  Never recovered from.
    """


class SimulationFailure(RuntimeError):
    """The simulated environment cannot continue the current episode."""
