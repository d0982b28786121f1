"""Integration tests for components working together as a system.

Coverage:
    - POST /solve with real multipart requests
    - Upload validation and temp-file cleanup
    - The page's HTTP client against the real app

Provider calls are stubbed at the transport layer; everything above it is real.
"""
