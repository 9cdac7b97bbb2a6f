"""Integration tests for the HTTP API working as a system.

Coverage:
    - Session creation and snapshots
    - Document upload, summary generation and error mapping
    - SSE answer streaming, including mid-stream failures
"""
