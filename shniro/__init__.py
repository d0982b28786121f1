"""Shniro AI - question broker over external LLM providers.

Combines FastAPI for the HTTP endpoint, httpx for outbound provider calls,
NiceGUI for the progressive-reveal page, and Pydantic for configuration
and schemas.

Components:
    - api: /solve endpoint and upload handling
    - broker: provider routing, conversation window, rate limiting
    - ui: question page, progressive render pipeline and post-render pass
    - models: Response schema and user-facing messages
"""

__version__ = "0.1.0"
