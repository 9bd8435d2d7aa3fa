"""Error taxonomy shared by services, adapters and the API."""


class LazyLiftsError(Exception):
    """Base class for application errors."""


class ValidationError(LazyLiftsError):
    """Required input is missing or invalid."""


class NoActiveSessionError(ValidationError):
    """There is no incomplete workout left to log."""


class MissingOwnerError(ValidationError):
    """The operation needs an authenticated owner."""


class PersistenceError(LazyLiftsError):
    """A store read, write or delete failed."""


class EstimationError(LazyLiftsError):
    """Nutrition estimation or transcription failed upstream."""


class StaleUndoError(LazyLiftsError):
    """Undo is not available."""


class NothingToUndoError(StaleUndoError):
    """No completion has been recorded since the last undo."""
