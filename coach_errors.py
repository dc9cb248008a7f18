"""Error types raised at the coach's I/O boundaries.

- StorageError: the persisted plan document cannot be read or written
- ProviderError: a network provider (weather, Strava) failed in transport,
  authentication or payload shape

"No forecast for this date" is not an error; providers return ``None`` for it.
"""


class CoachError(Exception):
    """Base class for coach errors."""


class StorageError(CoachError):
    """Raised when the persisted plan cannot be loaded or saved."""


class ProviderError(CoachError):
    """Raised when an external data provider fails.

    Attributes:
        provider: Provider name (e.g., "strava", "open-meteo")
        reason: Short failure description
    """

    def __init__(self, provider: str, reason: str):
        self.provider = provider
        self.reason = reason
        super().__init__(f"{provider}: {reason}")
