"""
Error Types for the Tabular Q-Learning Agent.

Two families of failure are distinguished:

- **Usage errors** signal that the caller broke the driver contract
  (stepping an episode that was never started, feeding sensations of the
  wrong length). They are programming errors and are never retried.
- **Policy file errors** signal that a persisted snapshot could not be
  understood. They derive from ``OSError`` so callers can treat them like any
  other I/O failure, e.g. by falling back to a fresh table.
"""


class UsageError(RuntimeError):
    """Raised when an agent method is called out of sequence or with bad input."""


class DimensionMismatchError(UsageError):
    """Raised when a sensation length differs from the established dimensionality."""

    def __init__(self, expected: int, got: int):
        super().__init__(
            f"sensation must have {expected} features, got {got}"
        )
        self.expected = expected
        self.got = got


class PolicyFileError(OSError):
    """Raised when a policy snapshot is malformed or incompatible with the agent."""
