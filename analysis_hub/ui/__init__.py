"""NiceGUI interface - thin visualization layer for document analysis.

Responsibilities:
    - Plain-text file upload
    - Summary display with TL;DR, key point and entity tabs
    - Chat transcript with streaming answers and pending indicator
    - Error banner for failed actions

Contains minimal business logic. Delegates all operations to the API.
Remains a pure presentation layer.
"""
