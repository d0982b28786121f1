"""Broker error taxonomy.

Every broker failure collapses to a single user-facing answer at the
service boundary; these types only exist to pick which one.
"""


class BrokerError(Exception):
    """Base class for failures raised while answering a question."""

    pass


class ProviderUnavailable(BrokerError):
    """Raised when the primary provider failed and the fallback yielded nothing."""

    pass


class TransportFailure(BrokerError):
    """Raised when a provider call failed on the network, timed out or returned garbage."""

    pass
