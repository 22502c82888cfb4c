"""Exception types raised by the verification worker."""


class WorkerConfigError(ValueError):
    """Raised when required configuration is missing."""


class LeadStoreError(Exception):
    """Raised when a read or write against the lead store fails."""
