"""
Call service configuration. Values come from the environment.
The identity authority's URL is a public address, not a secret.
"""
import os

DATABASE_URL = os.environ.get("CALLS_DATABASE_URL", "sqlite:///./call_service.db")

# Identity authority: where bearer tokens are validated and register/login are forwarded
AUTH_SERVICE_URL = os.environ.get("AUTH_SERVICE_URL", "http://127.0.0.1:9000").rstrip("/")

# Upper bound (seconds) on every call to the authority
AUTH_TIMEOUT_SECONDS = float(os.environ.get("AUTH_TIMEOUT_SECONDS", "5"))

# "http": validate over the network; "local": call the authority in-process (same deployment)
IDENTITY_RESOLVER = os.environ.get("IDENTITY_RESOLVER", "http").strip().lower()
