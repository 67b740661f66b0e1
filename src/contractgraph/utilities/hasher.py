"""Hasher - Hash calculation for contract change detection.

The hash is always taken over the literal file text: reformatting a
contract, changing its line endings or editing one of its comments is a
change.
"""

import hashlib


def calculate_hash(content: str) -> str:
    """Calculate a content hash for change detection.

    Args:
        content: Raw contract file text

    Returns:
        Lowercase hexadecimal SHA-256 digest (64 characters)
    """
    return hashlib.sha256(content.encode("utf-8")).hexdigest()
