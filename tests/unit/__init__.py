"""Unit tests for individual components in isolation.

Coverage:
    - parsing/: Plain-text loading and media type checks
    - agent/: Configuration, summary validation and answer streaming
    - session/: Transcript reducer, phase machine and controller
    - ui/: API client and SSE consumption
"""
