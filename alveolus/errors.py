"""Exception types raised by the gas exchange pipeline."""


class ConfigurationError(ValueError):
    """Raised when a parameter snapshot cannot be simulated."""


class ContractViolation(ValueError):
    """Raised when pipeline stages hand each other inconsistent data."""
