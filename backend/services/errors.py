"""Engine error taxonomy."""


class EngineError(Exception):
    """Base class for all recommendation-engine errors."""


class NotFoundError(EngineError):
    """A profile, job or stored recommendation does not exist."""


class InvalidConfigurationError(EngineError):
    """Malformed training config, zero-width features or a corrupt artifact."""


class InsufficientDataError(EngineError):
    """Not even augmentation could produce a trainable record."""


class TrainingCancelledError(EngineError):
    """Cancellation was requested before vectorization started."""


class PersistenceError(EngineError):
    """Writing artifacts or recommendation sets failed."""
