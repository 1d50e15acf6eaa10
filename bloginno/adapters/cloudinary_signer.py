"""
Cloudinary request signer.

Signs destroy requests with the account's API secret. Only a trusted back
end should hold the secret; browser-side deployments run without a signer
and media deletions are skipped.

Signature: SHA-1 hex of the alphabetically sorted "key=value" pairs joined
by "&", immediately followed by the API secret. api_key, file, resource_type
and cloud_name are not part of the signed string.
"""

from __future__ import annotations

import hashlib

_UNSIGNED_PARAMS = frozenset({"api_key", "file", "resource_type", "cloud_name"})


class CloudinarySigner:
    def __init__(self, api_key: str, api_secret: str) -> None:
        if not api_key or not api_secret:
            raise ValueError("Cloudinary signer requires both api_key and api_secret")
        self._api_key = api_key
        self._api_secret = api_secret

    def signature(self, params: dict[str, str]) -> str:
        to_sign = "&".join(
            f"{key}={value}"
            for key, value in sorted(params.items())
            if key not in _UNSIGNED_PARAMS and value != ""
        )
        return hashlib.sha1((to_sign + self._api_secret).encode()).hexdigest()

    def sign(self, params: dict[str, str]) -> dict[str, str]:
        signed = dict(params)
        signed["signature"] = self.signature(params)
        signed["api_key"] = self._api_key
        return signed
