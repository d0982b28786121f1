"""Unit tests for individual components in isolation.

Coverage:
    - broker/: conversation window, rate limiter, sessions, providers, router
    - ui/: progressive reveal and post-render enhancement

Follows single responsibility per test function. Leverages pytest-check
for multiple assertions per test.
"""
