"""
Symmetric signing key for tokens (HS256).
Loaded once per process from config, or generated when none is configured; no key material in code.
No rotation while the process runs: a new key means a restart, and every outstanding token stops verifying.
"""
import logging
import secrets
from dataclasses import dataclass

logger = logging.getLogger(__name__)

_GENERATED_KEY_BYTES = 64


@dataclass(frozen=True)
class SigningKey:
    secret: str
    algorithm: str = "HS256"

    def __repr__(self) -> str:
        return f"SigningKey(algorithm={self.algorithm!r})"


def load_signing_key(secret: str | None, algorithm: str = "HS256") -> SigningKey:
    """
    Build the signing key from the configured secret, or generate a random one.
    A generated key is only good for this process.
    """
    if not secret:
        logger.warning("AUTH_JWT_KEY is not set; generated a random signing key (tokens will not survive a restart)")
        secret = secrets.token_hex(_GENERATED_KEY_BYTES)
    return SigningKey(secret=secret, algorithm=algorithm)


# Module-level state (set at app startup)
_signing_key: SigningKey | None = None


def get_signing_key() -> SigningKey:
    """Return the process-wide signing key, loading it on first use."""
    global _signing_key
    if _signing_key is None:
        from auth_service.config import JWT_ALGORITHM, JWT_KEY

        _signing_key = load_signing_key(JWT_KEY, JWT_ALGORITHM)
    return _signing_key
