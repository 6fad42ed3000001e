from __future__ import annotations

import logging

"""Byte buffer -> text decoding.

Operations exports are written by Korean Excel in CP949, the superset of
EUC-KR that also covers the extended Hangul syllables (e.g. "똠"). Files
re-saved by other tools arrive as UTF-8 instead; those fail the strict legacy
decode and are decoded again from the original bytes as UTF-8. This stage
never rejects a buffer.
"""

__all__ = [
    "DEFAULT_ENCODING",
    "FALLBACK_ENCODING",
    "decode_bytes",
]

DEFAULT_ENCODING = "cp949"
FALLBACK_ENCODING = "utf-8"

logger = logging.getLogger(__name__)


def decode_bytes(data: bytes, encoding: str = DEFAULT_ENCODING) -> str:
    """Decode with `encoding`, falling back to UTF-8 on any decode failure.

    The fallback uses errors="replace" so that the pipeline always receives
    some text; undecodable bytes surface later as unmatched headers.
    """
    try:
        text = data.decode(encoding)
        logger.debug("decoded %d bytes as %s", len(data), encoding)
        return text
    except (UnicodeDecodeError, LookupError) as e:
        logger.debug("%s decode failed (%s), falling back to %s", encoding, e, FALLBACK_ENCODING)
        return data.decode(FALLBACK_ENCODING, errors="replace")
