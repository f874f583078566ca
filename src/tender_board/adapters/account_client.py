"""Account lookup for the signed-in user."""

from dataclasses import dataclass, field
from typing import Protocol

import httpx
from pydantic import ValidationError

from tender_board.domain.errors import DecodeError, ServerError, TransportError
from tender_board.domain.projects import Account

ACCOUNT_PATH = "/api/account"


class IdentityProvider(Protocol):
    """Interface for resolving the current user's identity."""

    is_authenticated: bool

    async def identity(self) -> Account | None:
        """Return the signed-in account, or None when anonymous."""


@dataclass
class HttpxAccountClient(IdentityProvider):
    """Identity provider backed by the account endpoint."""

    http_client: httpx.AsyncClient
    is_authenticated: bool = field(default=False, init=False)

    async def identity(self) -> Account | None:
        """Fetch the account; a 401 means nobody is signed in."""
        try:
            response = await self.http_client.get(ACCOUNT_PATH)
        except httpx.DecodingError as exc:
            raise DecodeError(f"GET {ACCOUNT_PATH} body undecodable: {exc}") from exc
        except httpx.RequestError as exc:
            raise TransportError(f"GET {ACCOUNT_PATH} failed: {exc}") from exc
        if response.status_code == httpx.codes.UNAUTHORIZED:
            self.is_authenticated = False
            return None
        if not response.is_success:
            raise ServerError(response.status_code, response.text)
        try:
            account = Account.model_validate(response.json())
        except (ValueError, ValidationError) as exc:
            raise DecodeError("Unexpected account payload") from exc
        self.is_authenticated = True
        return account
