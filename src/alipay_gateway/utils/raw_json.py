"""
Raw JSON member extraction.

Response signatures cover the exact serialized text of one member of the
top-level object, so the member has to be sliced out of the body as-is
rather than re-serialized after parsing.
"""

import json
import re
from json.decoder import scanstring
from typing import Iterator, Optional, Tuple


_WHITESPACE = re.compile(r'[ \t\n\r]*')
_decoder = json.JSONDecoder()


def _skip(text: str, idx: int) -> int:
    return _WHITESPACE.match(text, idx).end()


def iter_raw_members(text: str) -> Iterator[Tuple[str, str]]:
    """
    Iterate over the members of a top-level JSON object.
    
    Args:
        text: JSON document whose root is an object
        
    Yields:
        (key, raw_value_text) pairs in document order
        
    Raises:
        ValueError: If the document is not a well-formed JSON object
    """
    idx = _skip(text, 0)
    if text[idx:idx + 1] != '{':
        raise ValueError("JSON document is not an object")
    
    idx = _skip(text, idx + 1)
    if text[idx:idx + 1] == '}':
        return
    
    while True:
        if text[idx:idx + 1] != '"':
            raise ValueError(f"Expected member name at offset {idx}")
        key, idx = scanstring(text, idx + 1)
        
        idx = _skip(text, idx)
        if text[idx:idx + 1] != ':':
            raise ValueError(f"Expected ':' at offset {idx}")
        idx = _skip(text, idx + 1)
        
        _, end = _decoder.raw_decode(text, idx)
        yield key, text[idx:end]
        
        idx = _skip(text, end)
        separator = text[idx:idx + 1]
        if separator == ',':
            idx = _skip(text, idx + 1)
        elif separator == '}':
            return
        else:
            raise ValueError(f"Expected ',' or '}}' at offset {idx}")


def get_raw_member(text: str, name: str) -> Optional[str]:
    """
    Get the raw text of a top-level member.
    
    Args:
        text: JSON document whose root is an object
        name: Member name
        
    Returns:
        Raw JSON text of the first member called ``name``, or None if absent
        
    Raises:
        ValueError: If the document is not a well-formed JSON object
    """
    for key, raw in iter_raw_members(text):
        if key == name:
            return raw
    return None


def get_string_member(text: str, name: str) -> str:
    """
    Get a top-level string member, or ``""`` when absent or not a string.
    
    Raises:
        ValueError: If the document is not a well-formed JSON object
    """
    raw = get_raw_member(text, name)
    if raw is None:
        return ""
    value = json.loads(raw)
    return value if isinstance(value, str) else ""
