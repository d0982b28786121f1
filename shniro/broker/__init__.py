"""Request broker: provider routing with a rolling conversation window.

Responsibilities:
    - Provider selection (image vs. text) and text fallback
    - Normalizing heterogeneous provider responses into one answer string
    - Rolling conversation context and request throttling, shared or per session

Maintains clean separation from the HTTP layer.
"""

from shniro.broker.config import BrokerConfig, get_broker_config
from shniro.broker.conversation import ConversationBuffer, ConversationTurn, Role
from shniro.broker.rate_limit import RateLimiter
from shniro.broker.router import ImageInput, ProviderRouter
from shniro.broker.service import BrokerService, get_broker_service

__all__ = [
    "BrokerConfig",
    "BrokerService",
    "ConversationBuffer",
    "ConversationTurn",
    "ImageInput",
    "ProviderRouter",
    "RateLimiter",
    "Role",
    "get_broker_config",
    "get_broker_service",
]
