"""HTTP client for the league backend's internal API."""

from __future__ import annotations

import asyncio
import errno
import logging
import socket
from typing import Any, Dict, List

import aiohttp

from league_bot.models import GuildSnapshot

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10.0


class BackendError(Exception):
    """Normalised backend failure: ``{message, status_code?, code?, details?}``."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        code: str | None = None,
        details: Any = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.code = code
        self.details = details

    def to_dict(self) -> Dict[str, Any]:
        return {
            "message": self.message,
            "statusCode": self.status_code,
            "code": self.code,
            "details": self.details,
        }

    def __repr__(self) -> str:
        return f"BackendError({self.message!r}, status_code={self.status_code}, code={self.code})"


def _network_code(exc: BaseException) -> str:
    if isinstance(exc, asyncio.TimeoutError):
        return "ETIMEDOUT"
    if isinstance(exc, aiohttp.ClientConnectorError):
        if isinstance(exc.os_error, socket.gaierror):
            return "ENOTFOUND"
        return "ECONNREFUSED"
    if isinstance(exc, aiohttp.ServerDisconnectedError):
        return "ECONNRESET"
    if isinstance(exc, aiohttp.ClientOSError) and exc.errno == errno.ECONNRESET:
        return "ECONNRESET"
    return "ECONNABORTED"


class BackendClient:
    """
    Thin request/response wrapper; no business logic.

    Every call carries the bearer key and the fixed total timeout. Failures
    are raised as :class:`BackendError` so the error classifier sees a single
    shape.
    """

    def __init__(
        self,
        base_url: str,
        api_key: str,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        session: aiohttp.ClientSession | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._headers = {
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json",
        }
        self._timeout = aiohttp.ClientTimeout(total=timeout)
        self._session = session

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(timeout=self._timeout)
        return self._session

    async def close(self) -> None:
        if self._session is not None and not self._session.closed:
            await self._session.close()
        self._session = None

    async def _request(self, method: str, path: str, *, json: Any = None) -> Any:
        url = f"{self._base_url}{path}"
        session = self._get_session()
        try:
            async with session.request(
                method, url, json=json, headers=self._headers, timeout=self._timeout
            ) as resp:
                if resp.content_type == "application/json":
                    payload = await resp.json()
                else:
                    text = await resp.text()
                    payload = {"message": text} if text else None
                if resp.status >= 400:
                    raise self._error_from_response(resp.status, payload, resp.reason)
                return payload
        except BackendError:
            raise
        except (asyncio.TimeoutError, aiohttp.ClientError) as exc:
            raise BackendError(
                str(exc) or "API request failed", code=_network_code(exc)
            ) from exc

    @staticmethod
    def _error_from_response(status: int, payload: Any, reason: str | None) -> BackendError:
        message = reason or "API request failed"
        code = details = None
        if isinstance(payload, dict):
            message = payload.get("message") or payload.get("error") or message
            code = payload.get("code")
            details = payload.get("details")
        return BackendError(str(message), status_code=status, code=code, details=details)

    # ----------------------------- endpoints ----------------------------- #

    async def health_check(self) -> Dict[str, Any]:
        """``{status, message, timestamp}`` from the liveness probe."""

        try:
            return await self._request("GET", "/internal/health")
        except BackendError as exc:
            logger.error("Health check failed: %r", exc)
            raise

    async def create_guild(self, guild: GuildSnapshot) -> Any:
        try:
            return await self._request("POST", "/internal/guilds", json=guild.to_payload())
        except BackendError as exc:
            logger.error("Failed to create guild %s: %r", guild.id, exc)
            raise

    async def upsert_guild(self, guild: GuildSnapshot) -> Any:
        try:
            return await self._request("POST", "/internal/guilds/upsert", json=guild.to_payload())
        except BackendError as exc:
            logger.error(
                "Failed to upsert guild %s: %r",
                guild.id,
                exc,
                extra={"request": {"url": "/internal/guilds/upsert", "payload": guild.to_payload()}},
            )
            raise

    async def sync_guild(
        self,
        guild: GuildSnapshot,
        members: List[Dict[str, Any]],
        roles: Dict[str, Any] | None = None,
    ) -> Any:
        """Atomically upsert a guild with its full member list and admin roles."""

        path = f"/internal/guilds/{guild.id}/sync"
        body = {"guild": guild.to_payload(), "members": members, "roles": roles}
        try:
            return await self._request("POST", path, json=body)
        except BackendError as exc:
            logger.error(
                "Failed to sync guild %s with %d members: %r", guild.id, len(members), exc
            )
            raise

    async def remove_guild(self, guild_id: int) -> Any:
        try:
            return await self._request("DELETE", f"/internal/guilds/{guild_id}")
        except BackendError as exc:
            logger.error("Failed to remove guild %s: %r", guild_id, exc)
            raise

    async def get_guild_settings(self, guild_id: int) -> Dict[str, Any]:
        try:
            return await self._request("GET", f"/internal/guilds/{guild_id}/settings") or {}
        except BackendError as exc:
            logger.error("Failed to get guild settings %s: %r", guild_id, exc)
            raise

    async def create_guild_member(self, guild_id: int, member: Dict[str, Any]) -> Any:
        try:
            return await self._request("POST", f"/internal/guilds/{guild_id}/members", json=member)
        except BackendError as exc:
            logger.error("Failed to create guild member %s: %r", member.get("userId"), exc)
            raise

    async def update_guild_member(self, guild_id: int, user_id: int, update: Dict[str, Any]) -> Any:
        try:
            return await self._request(
                "PATCH", f"/internal/guilds/{guild_id}/members/{user_id}", json=update
            )
        except BackendError as exc:
            logger.error("Failed to update guild member %s: %r", user_id, exc)
            raise

    async def remove_guild_member(self, guild_id: int, user_id: int) -> Any:
        try:
            return await self._request("DELETE", f"/internal/guilds/{guild_id}/members/{user_id}")
        except BackendError as exc:
            logger.error("Failed to remove guild member %s: %r", user_id, exc)
            raise

    async def register_tracker(
        self, user_id: int, url: str, user_data: Dict[str, Any] | None = None
    ) -> Dict[str, Any]:
        body = {"userId": str(user_id), "url": url, "userData": user_data}
        try:
            return await self._request("POST", "/internal/trackers/register", json=body) or {}
        except BackendError as exc:
            logger.error("Failed to register tracker for user %s: %r", user_id, exc)
            raise

    async def add_tracker(
        self, user_id: int, url: str, user_data: Dict[str, Any] | None = None
    ) -> Dict[str, Any]:
        """Attach one more tracker to an already registered user."""

        body = {"userId": str(user_id), "url": url, "userData": user_data}
        try:
            return await self._request("POST", "/internal/trackers/add", json=body) or {}
        except BackendError as exc:
            logger.error("Failed to add tracker for user %s: %r", user_id, exc)
            raise


__all__ = ["BackendClient", "BackendError", "DEFAULT_TIMEOUT"]
