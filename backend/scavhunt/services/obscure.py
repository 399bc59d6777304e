from __future__ import annotations
import base64
import binascii

PREFIX = "x0"


class Obscurer:
    """
    Reversible encoding for stored correct answers.

    This only keeps answers out of casual view (admin exports, DB browsers).
    Anyone holding the key can reverse it; it is not access control.
    """

    def __init__(self, key: str):
        if not key:
            raise ValueError("obscure key must not be empty")
        self._key = key

    def _xor(self, text: str) -> str:
        key = self._key
        return "".join(chr(ord(ch) ^ ord(key[i % len(key)])) for i, ch in enumerate(text))

    def obscure(self, plaintext: str | None) -> str:
        if not plaintext:
            return ""
        encoded = base64.b64encode(self._xor(plaintext).encode("utf-8")).decode("ascii")
        return PREFIX + encoded

    def reveal(self, stored: str | None) -> str:
        """Decode a stored token; legacy plaintext (no prefix or undecodable) passes through."""
        if not stored:
            return ""
        if not stored.startswith(PREFIX):
            return stored
        try:
            xored = base64.b64decode(stored[len(PREFIX):], validate=True).decode("utf-8")
        except (binascii.Error, UnicodeDecodeError):
            return stored
        return self._xor(xored)
