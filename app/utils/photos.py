# app/utils/photos.py
import json
from typing import List, Optional, Sequence


def encode_photos(urls: Sequence[str]) -> Optional[str]:
    """One photo is stored as a bare URL, several as a JSON array."""
    if not urls:
        return None
    if len(urls) == 1:
        return urls[0]
    return json.dumps(list(urls))


def decode_photos(value: Optional[str]) -> List[str]:
    if not value:
        return []
    if value.lstrip().startswith("["):
        try:
            decoded = json.loads(value)
        except json.JSONDecodeError:
            return [value]
        return [str(url) for url in decoded]
    return [value]
