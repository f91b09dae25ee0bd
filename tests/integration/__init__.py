"""Integration tests for components working together as a system.

Coverage:
    - Stub server endpoints with real HTTP requests
    - ChatClient streaming against the stub server (ASGITransport)
    - ChatClient error paths against scripted transports (MockTransport)

No network access: every request is served in-process.
"""
