"""
Errors - payload estimation exception hierarchy

All failures are raised synchronously to the caller. Nothing here is retried
or suppressed; a call either returns a complete result or raises.
"""


class PayloadEstimationError(Exception):
    """Base class for every error raised by this package"""


class ConfigurationError(PayloadEstimationError):
    """Requested group is missing or the description/config is unusable"""


class TopologyError(PayloadEstimationError):
    """Requested group is not a single unbranched chain"""


class DimensionError(PayloadEstimationError, ValueError):
    """
    A joint-indexed input does not have exactly N entries.

    Attributes:
        argument: name of the malformed argument ('position', 'wrenches', ...)
        expected: expected length (N)
        actual: length that was given, or the shape of a non-vector input
    """

    def __init__(self, argument, expected, actual):
        self.argument = argument
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"{argument} vector should be size {expected}, got {actual}"
        )


class NotInitializedError(PayloadEstimationError):
    """Query on a solver whose initialize() never succeeded"""


class UnboundedPayloadError(PayloadEstimationError):
    """No joint is loaded by the reference payload, so nothing bounds it"""
