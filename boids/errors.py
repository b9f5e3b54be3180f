"""Exceptions raised by the flocking engine."""


class BoidsError(Exception):
    """Base class for all flocking engine errors."""


class ConfigurationError(BoidsError, ValueError):
    """A caller or configuration bug: bad names, out-of-range tunables."""


class UnknownWorldError(ConfigurationError, KeyError):
    def __init__(self, name: str, known=()):
        self.name = name
        self.known = list(known)
        super().__init__(f"World not found: {name!r} (known: {', '.join(self.known) or 'none'})")

    def __str__(self):
        return self.args[0]


class UnknownDropoffError(ConfigurationError, KeyError):
    def __init__(self, name: str, known=()):
        self.name = name
        self.known = list(known)
        super().__init__(f"Dropoff not found: {name!r} (known: {', '.join(self.known)})")

    def __str__(self):
        return self.args[0]


class UnknownRuleError(ConfigurationError, KeyError):
    def __init__(self, name: str, known=()):
        self.name = name
        self.known = list(known)
        super().__init__(f"Rule not found: {name!r} (known: {', '.join(self.known)})")

    def __str__(self):
        return self.args[0]


class ParameterOutOfBoundsError(ConfigurationError):
    """A tunable was set outside its declared [min, max] range."""

    def __init__(self, name: str, value, bounds):
        self.name = name
        self.value = value
        self.bounds = tuple(bounds)
        lo, hi = self.bounds
        super().__init__(f"{name}={value!r} is outside [{lo}, {hi}]")


class WeightOutOfBoundsError(ParameterOutOfBoundsError):
    """A rule weight was set outside [min_weight, max_weight]."""


class SimulationStateError(BoidsError, RuntimeError):
    """An operation was attempted while the flock could not accept it, e.g. mid-tick."""
