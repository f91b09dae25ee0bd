"""Test package for VibeChat.

Unit tests cover the decoder components in isolation; integration tests run
the chat client against the stub server over real HTTP semantics.

Structure:
    - unit/: Frame assembly, event parsing, sessions, reducer, config
    - integration/: ChatClient and stub server end-to-end

Leverages pytest with pytest-asyncio and pytest-check for soft assertions.
"""
