"""
Identity authority configuration. Values come from the environment.
No secrets in this file; the signing key comes from env (or is generated per process).
"""
import os

# SQLite for development; any SQLAlchemy URL works (e.g. postgresql+psycopg://...)
DATABASE_URL = os.environ.get("AUTH_DATABASE_URL", "sqlite:///./auth_service.db")

# HS256 shared secret. If unset, a random key is generated at startup (tokens die with the process).
JWT_KEY = os.environ.get("AUTH_JWT_KEY", "").strip() or None
JWT_ALGORITHM = "HS256"

# Token lifetime (seconds): 24 hours
TOKEN_TTL_SECONDS = int(os.environ.get("AUTH_TOKEN_TTL_SECONDS", "86400"))

# bcrypt cost factor; fixed for the process lifetime
BCRYPT_ROUNDS = int(os.environ.get("AUTH_BCRYPT_ROUNDS", "10"))

# Rate limiting: per-IP, per minute
RATE_LIMIT_LOGIN_PER_MINUTE = int(os.environ.get("AUTH_RATE_LIMIT_LOGIN_PER_MINUTE", "20"))
RATE_LIMIT_REGISTER_PER_MINUTE = int(os.environ.get("AUTH_RATE_LIMIT_REGISTER_PER_MINUTE", "10"))

# Peers allowed to name the end client in X-Forwarded-For (e.g. the call service), comma-separated IPs
TRUSTED_PROXIES = frozenset(
    ip.strip() for ip in os.environ.get("AUTH_TRUSTED_PROXIES", "").split(",") if ip.strip()
)

# Operator bearer token for GET /audit. Unset: the endpoint is disabled (404).
AUDIT_TOKEN = os.environ.get("AUTH_AUDIT_TOKEN", "").strip() or None
