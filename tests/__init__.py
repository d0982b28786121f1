"""Test package for Shniro.

Structure:
    - unit/: Broker state, routing policy, providers, render pipeline
    - integration/: /solve endpoint and page client through the real app

Provider HTTP calls are served by httpx.MockTransport stubs (tests/stubs.py),
so no API keys or network access are required.
Leverages pytest with pytest-check for soft assertions.
"""
