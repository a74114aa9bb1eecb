"""
Session client for the Jamespot REST backend.

Every backend operation is addressed as ``"<object>.<function>"`` (for example ``"user.signIn"``) and
is POSTed to ``<base>/api/api.php``.  The backend answers with a uniform envelope::

    {"error": 0, "result": ...}                 # success
    {"error": <code>, "errorMsg": "<reason>"}   # failure

The client owns the session cookie.  Whatever ``Set-Cookie`` the backend sends is kept in a single
cell and replayed on every later request; callers never see or manage it.
"""

from __future__ import annotations

import logging
from typing import (
    Any,
    Dict,
    Mapping,
)

import httpx
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
)

logger = logging.getLogger(__name__)

API_PATH = "/api/api.php"
DEFAULT_TIMEOUT = 30.0


class BackendError(RuntimeError):
    """Raised when the backend cannot be reached or answers with something that is not an envelope."""


class LoginError(RuntimeError):
    """Raised when the backend rejects the credentials."""

    def __init__(self, code: int, message: str | None) -> None:
        self.code = code
        self.error_msg = message or "Login failed"
        super().__init__(f"Login failed ({code}): {self.error_msg}")


class BackendResult(BaseModel):
    """The ``{error, errorMsg, result}`` envelope returned by every backend call."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    error: int = 0
    error_msg: str | None = Field(default=None, alias="errorMsg")
    result: Any = None

    @property
    def ok(self) -> bool:
        return self.error == 0


class UserProfile(BaseModel):
    """The authenticated user, as returned by ``user.signIn``."""

    model_config = ConfigDict(extra="allow")

    id: int
    firstname: str = ""
    lastname: str = ""
    uri: str = ""

    @property
    def display_name(self) -> str:
        return f"{self.firstname} {self.lastname}".strip()


def split_operation(operation: str) -> tuple[str, str]:
    """Split ``"object.function"`` into its two parts."""
    obj, sep, func = operation.partition(".")
    if not sep or not obj or not func:
        raise ValueError(f"Invalid backend operation '{operation}', expected 'object.function'")
    return obj, func


class JamespotClient:
    """Async HTTP session against one Jamespot platform."""

    def __init__(
        self,
        backend_url: str,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.backend_url = backend_url.rstrip("/")
        self.referer = f"{self.backend_url}/ng/wall"
        self._cookie: str | None = None
        self._http = httpx.AsyncClient(base_url=self.backend_url, timeout=timeout, transport=transport)

    async def __aenter__(self) -> "JamespotClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    # ------------------------------------------------------------------
    # Cookie cell
    # ------------------------------------------------------------------
    @property
    def has_session(self) -> bool:
        return self._cookie is not None

    def _remember_cookies(self, response: httpx.Response) -> None:
        set_cookies = response.headers.get_list("set-cookie")
        if not set_cookies:
            return
        # Keep only the name=value part of each cookie, drop the attributes
        self._cookie = ";".join(cookie.split(";")[0].strip() for cookie in set_cookies)
        logger.debug("Session cookie updated")

    def _headers(self, extra: Mapping[str, str] | None = None) -> Dict[str, str]:
        headers = {"referer": self.referer}
        if extra:
            headers.update(extra)
        if self._cookie is not None:
            headers["cookie"] = self._cookie
        return headers

    # ------------------------------------------------------------------
    # Requests
    # ------------------------------------------------------------------
    async def fetch(
        self,
        path: str,
        *,
        method: str = "GET",
        params: Mapping[str, Any] | None = None,
        data: Mapping[str, Any] | None = None,
        json: Any = None,
        headers: Mapping[str, str] | None = None,
    ) -> httpx.Response:
        """Issue a raw request on the authenticated session."""
        logger.debug("Fetch %s %s", method, path)
        response = await self._http.request(
            method,
            path,
            params=params,
            data=data,
            json=json,
            headers=self._headers(headers),
        )
        self._remember_cookies(response)
        return response

    async def call(self, operation: str, params: Mapping[str, Any] | None = None) -> BackendResult:
        """
        Invoke a backend operation and return its envelope.

        Parameters
        ----------
        operation:
            ``"object.function"`` identifier, e.g. ``"group.list"``.
        params:
            Operation arguments.  ``None`` values are dropped before sending.

        Raises
        ------
        BackendError
            On transport failures, HTTP error statuses or a body that is not a valid envelope.
            A well-formed envelope with ``error != 0`` is *not* raised; check ``result.ok``.
        """
        obj, func = split_operation(operation)
        payload: Dict[str, Any] = {"o": obj, "f": func}
        if params:
            payload.update({k: v for k, v in params.items() if v is not None})

        try:
            response = await self.fetch(API_PATH, method="POST", json=payload)
            response.raise_for_status()
            body = response.json()
        except httpx.HTTPError as exc:
            logger.error("Backend request '%s' failed: %s", operation, exc)
            raise BackendError(f"Request '{operation}' failed: {exc}") from exc
        except ValueError as exc:
            raise BackendError(f"Request '{operation}' returned a non-JSON body") from exc

        try:
            return BackendResult.model_validate(body)
        except ValidationError as exc:
            raise BackendError(f"Request '{operation}' returned an unexpected payload") from exc

    # ------------------------------------------------------------------
    # Session helpers
    # ------------------------------------------------------------------
    async def login(self, email: str, password: str) -> UserProfile:
        """Sign in and return the current user.  Raises :class:`LoginError` on rejection."""
        result = await self.call("user.signIn", {"login": email, "password": password})
        if not result.ok:
            raise LoginError(result.error, result.error_msg)
        try:
            return UserProfile.model_validate(result.result)
        except ValidationError as exc:
            raise LoginError(result.error, f"Unexpected sign-in payload: {exc}") from exc

    async def get_upload_token(self) -> BackendResult:
        return await self.call("network.token")

    async def get_csrf_token(self) -> BackendResult:
        return await self.call("network.tokenCSRF")
