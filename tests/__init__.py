"""Test package for the Document Analysis Hub.

Structure:
    - unit/: Individual function and class tests
    - integration/: HTTP API workflows through the FastAPI app

The LLM service is replaced by a scripted fake; no API key is required.
Leverages pytest with pytest-check for soft assertions.
"""
