"""Errors raised by the movie table scaffold and the PartiQL wrapper."""


class MoviesError(Exception):
    """Base class for every error raised by this project."""


class ProvisioningError(MoviesError):
    """A table could not be created or described."""


class FixtureError(MoviesError):
    """The movie fixture file could not be read or is not valid movie data."""


class BatchWriteError(MoviesError):
    """Some items were still unprocessed after the retry pass."""

    def __init__(self, message, unprocessed) -> None:
        super().__init__(message)
        self.unprocessed = unprocessed


class NotFoundError(MoviesError):
    """The service reported that the addressed key does not exist."""


class DuplicateKeyError(MoviesError):
    """The service reported that an item with the same key already exists."""


class TransportError(MoviesError):
    """The service could not be reached."""
