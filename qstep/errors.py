# qstep/errors.py


class QStepError(Exception):
    """Base class for all engine errors."""


class ConfigurationError(QStepError, ValueError):
    """Malformed input: bad vector length, qubit out of range, column collision."""


class GateParameterError(ConfigurationError):
    """A parametrized gate is missing its angle, or the angle is NaN."""


class UnsupportedGateError(QStepError, LookupError):
    """No handler is registered for a gate kind."""


class BackendUnavailableError(QStepError, RuntimeError):
    pass
