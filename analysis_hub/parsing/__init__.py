"""Document loading utilities.

Turns an uploaded file into a Document the rest of the system can work with.

Responsibilities:
    - Media type validation (plain text only)
    - UTF-8 decoding with BOM handling
    - Display name resolution

Only plain-text files are accepted; the full content is kept in memory.
"""

from analysis_hub.parsing.text_loader import load_text_document

__all__ = ["load_text_document"]
