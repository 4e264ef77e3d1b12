"""Exception hierarchy for coinwatch."""


class CoinwatchError(Exception):
    """Base class for all coinwatch errors."""


class ConfigError(CoinwatchError):
    """Raised when the configuration file cannot be read or parsed."""


class PriceFeedError(CoinwatchError):
    """Raised when a single symbol cannot be resolved by the price feed."""


class PriceFeedUnavailable(PriceFeedError):
    """Raised when the price feed transport fails.

    For a batched lookup this is only raised when every requested symbol
    failed at the transport level.
    """


class NotificationError(CoinwatchError):
    """Raised when a notification cannot be delivered."""


class StoreError(CoinwatchError):
    """Raised when a read or write against the alert store fails."""


class SchedulerError(CoinwatchError):
    """Raised when the recurring schedule cannot be established."""
