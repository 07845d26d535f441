"""Token authentication for OCI registries.

Registries answer an unauthenticated request with ``401`` and a
``WWW-Authenticate: Bearer realm=...,service=...,scope=...`` challenge. The
client then fetches a token from the realm (with basic credentials, or
anonymously) and repeats the request with it.
"""

from __future__ import annotations

import re
from logging import getLogger
from typing import TYPE_CHECKING

import httpx

from .schema import TokenResponse

if TYPE_CHECKING:
    from collections.abc import Generator

log = getLogger(__name__)

_CHALLENGE_PARAM = re.compile(r'(\w+)="([^"]*)"')


def parse_challenge(header: str) -> tuple[str, dict[str, str]]:
    """Split a ``WWW-Authenticate`` header into its scheme and parameters."""
    scheme, _, rest = header.strip().partition(" ")
    return scheme.lower(), dict(_CHALLENGE_PARAM.findall(rest))


class RegistryTokenAuth(httpx.Auth):
    requires_response_body = True

    def __init__(self, username: str | None = None, password: str | None = None) -> None:
        self._basic = httpx.BasicAuth(username, password) if username and password else None
        self._token: str | None = None

    def auth_flow(self, request: httpx.Request) -> Generator[httpx.Request, httpx.Response, None]:
        if self._token is not None:
            request.headers["Authorization"] = f"Bearer {self._token}"
        response = yield request
        if response.status_code != httpx.codes.UNAUTHORIZED:
            return

        scheme, params = parse_challenge(response.headers.get("WWW-Authenticate", ""))
        if scheme == "basic" and self._basic is not None:
            yield from self._basic.auth_flow(request)
            return
        realm = params.get("realm")
        if scheme != "bearer" or not realm:
            return

        query = {key: value for key, value in params.items() if key in {"service", "scope"}}
        token_request = httpx.Request("GET", realm, params=query)
        if self._basic is not None:
            token_request = next(self._basic.auth_flow(token_request))
        log.debug("Requesting registry token from %s for %s", realm, query.get("scope"))
        token_response = yield token_request
        token_response.raise_for_status()

        token = TokenResponse.model_validate_json(token_response.content).value
        if not token:
            raise httpx.HTTPStatusError(
                "Token endpoint returned no token",
                request=token_request,
                response=token_response,
            )
        self._token = token
        request.headers["Authorization"] = f"Bearer {token}"
        yield request
