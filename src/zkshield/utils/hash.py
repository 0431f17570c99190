"""SHA-256 utilities used by note encryption."""

import hashlib
from typing import Union


def hash_concatenate(*data: Union[bytes, str]) -> bytes:
    """
    Hash concatenated data.

    Args:
        *data: Multiple bytes or strings to concatenate and hash

    Returns:
        bytes: SHA-256 hash of concatenated data
    """
    hasher = hashlib.sha256()
    for item in data:
        if isinstance(item, str):
            item = item.encode('utf-8')
        hasher.update(item)
    return hasher.digest()
