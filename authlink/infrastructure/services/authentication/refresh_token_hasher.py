import base64
import hashlib

from authlink.domain.interfaces.services import IRefreshTokenHasher


class Sha256RefreshTokenHasher(IRefreshTokenHasher):
    """Hashes refresh tokens with unsalted SHA-256, base64-encoded.

    Refresh tokens are 64 random bytes, so a salt adds nothing; the digest must
    be deterministic to serve as a lookup key.
    """

    def hash(self, refresh_token: str) -> str:
        digest = hashlib.sha256(refresh_token.encode("utf-8")).digest()
        return base64.b64encode(digest).decode("ascii")
