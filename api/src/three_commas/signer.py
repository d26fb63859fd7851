"""
HMAC request signing for the 3Commas public API.

The signing string is the API prefix, the path, ``?query`` when a query is
present, then the raw body exactly as it goes over the wire. The digest is
HMAC-SHA256 keyed with the platform API secret, hex encoded.
"""

import hashlib
import hmac
from dataclasses import dataclass


def build_string_to_sign(api_prefix: str, path: str, query_string: str = "", body: str = "") -> str:
    query_part = f"?{query_string}" if query_string else ""
    return f"{api_prefix}{path}{query_part}{body or ''}"


def hmac_sha256_hex(secret: str, message: str) -> str:
    return hmac.new(secret.encode("utf-8"), message.encode("utf-8"), hashlib.sha256).hexdigest()


@dataclass(frozen=True)
class SignedRequest:
    """One signed call. ``body`` is the exact string that must be transmitted."""
    api_prefix: str
    path: str
    query_string: str
    body: str
    signature: str

    @property
    def full_path(self) -> str:
        query_part = f"?{self.query_string}" if self.query_string else ""
        return f"{self.api_prefix}{self.path}{query_part}"

    @property
    def body_bytes(self) -> bytes:
        return self.body.encode("utf-8")


class RequestSigner:
    def __init__(self, api_prefix: str, api_secret: str):
        self.api_prefix = api_prefix
        self._api_secret = api_secret

    def sign(self, path: str, query_string: str = "", body: str = "") -> SignedRequest:
        string_to_sign = build_string_to_sign(self.api_prefix, path, query_string, body)
        return SignedRequest(
            api_prefix=self.api_prefix,
            path=path,
            query_string=query_string or "",
            body=body or "",
            signature=hmac_sha256_hex(self._api_secret, string_to_sign),
        )
