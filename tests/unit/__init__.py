"""Unit tests for individual components in isolation.

Coverage:
    - streaming/: Frame assembly, event parsing, session state machine
    - conversation/: Reducer behaviour
    - client/: Configuration validation

Chunk sources are in-memory; no network access.
"""
