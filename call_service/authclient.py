"""
HTTP client for the identity authority: register, login, validate.
Every call is bounded by the configured timeout as a whole (connect, send and the full
reply together); nothing is retried.
"""
import logging

import anyio
import httpx

from call_service.config import AUTH_SERVICE_URL, AUTH_TIMEOUT_SECONDS
from call_service.errors import AccountExists, AuthUnavailable, InvalidCredentials, RateLimited

logger = logging.getLogger(__name__)

# Set on forwarded register/login so the authority rate-limits the end client, not this service
FORWARDED_FOR_HEADER = "X-Forwarded-For"


class AuthClient:
    def __init__(
        self,
        base_url: str = AUTH_SERVICE_URL,
        timeout: float = AUTH_TIMEOUT_SECONDS,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    async def _post(
        self,
        path: str,
        payload: dict,
        timeout: float | None = None,
        client_ip: str | None = None,
    ) -> httpx.Response:
        """POST JSON to the authority. Transport failures and timeouts raise AuthUnavailable."""
        timeout = self.timeout if timeout is None else timeout
        headers = {FORWARDED_FOR_HEADER: client_ip} if client_ip else None
        async with httpx.AsyncClient(base_url=self.base_url, timeout=timeout, transport=self._transport) as client:
            try:
                # httpx timeouts apply per read; fail_after caps the whole exchange
                with anyio.fail_after(timeout):
                    return await client.post(path, json=payload, headers=headers)
            except (httpx.TimeoutException, TimeoutError) as e:
                logger.warning("Identity service timed out on %s: %s", path, type(e).__name__)
                raise AuthUnavailable() from e
            except httpx.HTTPError as e:
                logger.warning("Identity service unreachable on %s: %s", path, type(e).__name__)
                raise AuthUnavailable() from e

    @staticmethod
    def _credentials_result(response: httpx.Response) -> tuple[str, str]:
        try:
            data = response.json()
            return data["token"], data["user_id"]
        except (ValueError, KeyError, TypeError) as e:
            raise AuthUnavailable() from e

    @staticmethod
    def _raise_for_rate_limit(response: httpx.Response) -> None:
        if response.status_code == 429:
            raise RateLimited(retry_after=response.headers.get("Retry-After"))

    async def register(self, username: str, password: str, client_ip: str | None = None) -> tuple[str, str]:
        """Returns (token, user_id). Raises AccountExists, RateLimited or AuthUnavailable."""
        response = await self._post(
            "/register", {"username": username, "password": password}, client_ip=client_ip
        )
        self._raise_for_rate_limit(response)
        if response.status_code == 409:
            raise AccountExists()
        if response.status_code != 201:
            logger.warning("Identity service answered %s to register", response.status_code)
            raise AuthUnavailable()
        return self._credentials_result(response)

    async def login(self, username: str, password: str, client_ip: str | None = None) -> tuple[str, str]:
        """Returns (token, user_id). Raises InvalidCredentials, RateLimited or AuthUnavailable."""
        response = await self._post(
            "/login", {"username": username, "password": password}, client_ip=client_ip
        )
        self._raise_for_rate_limit(response)
        if response.status_code == 401:
            raise InvalidCredentials()
        if response.status_code != 200:
            logger.warning("Identity service answered %s to login", response.status_code)
            raise AuthUnavailable()
        return self._credentials_result(response)

    async def validate_token(self, token: str, timeout: float | None = None) -> tuple[bool, str]:
        """Returns (valid, user_id). Raises AuthUnavailable on transport or protocol failure."""
        response = await self._post("/validate", {"token": token}, timeout=timeout)
        if response.status_code != 200:
            raise AuthUnavailable()
        try:
            data = response.json()
            return bool(data["valid"]), str(data.get("user_id") or "")
        except (ValueError, KeyError, TypeError) as e:
            raise AuthUnavailable() from e
