"""
Async HTTP client for the linkBD API.

Reads (status, counts, session) are retried on transport errors and 5xx
answers; follow/unfollow and identity switches are sent exactly once.
"""
import logging
from typing import Any, Dict, Optional

import httpx
from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_incrementing,
)

from schemas import ActorKind, ActorRef, FollowCounts, FollowResult, SessionRead

logger = logging.getLogger("linkbd.client")


class ApiError(Exception):
    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class Unauthenticated(ApiError):
    pass


class InvalidTarget(ApiError):
    pass


class Forbidden(ApiError):
    pass


class Conflict(ApiError):
    pass


class ServerError(ApiError):
    pass


class NetworkFailure(ApiError):
    pass


def _error_from_response(response: httpx.Response) -> ApiError:
    try:
        detail = response.json().get("detail")
    except ValueError:
        detail = None
    message = detail if isinstance(detail, str) else f"Request failed with status {response.status_code}"

    if response.status_code == 401:
        return Unauthenticated(message, response.status_code)
    if response.status_code == 403:
        return Forbidden(message, response.status_code)
    if response.status_code == 409:
        return Conflict(message, response.status_code)
    if response.status_code in (400, 404, 422):
        return InvalidTarget(message, response.status_code)
    if response.status_code >= 500:
        return ServerError(message, response.status_code)
    return ApiError(message, response.status_code)


class LinkBDClient:
    def __init__(
        self,
        base_url: str,
        token: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: float = 10.0,
        read_retries: int = 2,
        retry_delay: float = 0.2,
    ):
        self.token = token
        self.read_retries = read_retries
        self.retry_delay = retry_delay
        self._http = httpx.AsyncClient(base_url=base_url, transport=transport, timeout=timeout)

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        await self.aclose()

    async def aclose(self):
        await self._http.aclose()

    def _headers(self) -> Dict[str, str]:
        if not self.token:
            return {}
        return {"Authorization": f"Bearer {self.token}"}

    async def _request(self, method: str, path: str, **kwargs) -> Any:
        try:
            response = await self._http.request(method, path, headers=self._headers(), **kwargs)
        except httpx.TransportError as exc:
            raise NetworkFailure(f"{method} {path} failed: {exc}") from exc
        if response.is_error:
            raise _error_from_response(response)
        if response.status_code == 204:
            return None
        return response.json()

    async def _get(self, path: str, params: Optional[dict] = None) -> Any:
        retrying = AsyncRetrying(
            stop=stop_after_attempt(self.read_retries + 1),
            wait=wait_incrementing(start=self.retry_delay, increment=self.retry_delay),
            retry=retry_if_exception_type((NetworkFailure, ServerError)),
            before_sleep=before_sleep_log(logger, logging.INFO),
            reraise=True,
        )
        async for attempt in retrying:
            with attempt:
                data = await self._request("GET", path, params=params)
        return data

    # --- Session ---

    async def get_session(self) -> SessionRead:
        return SessionRead.model_validate(await self._get("/sessions/me"))

    async def set_active_organization(self, organization_id: Optional[str]) -> SessionRead:
        data = await self._request(
            "PUT", "/sessions/me/active-organization", json={"organization_id": organization_id}
        )
        return SessionRead.model_validate(data)

    # --- Followers ---

    async def get_follow_status(self, target: ActorRef) -> bool:
        data = await self._get(f"/followers/status/{target.kind.value}/{target.id}")
        return bool(data["is_following"])

    async def get_follower_counts(self, actor: ActorRef) -> FollowCounts:
        return FollowCounts.model_validate(await self._get(f"/followers/counts/{actor.kind.value}/{actor.id}"))

    async def toggle_follow(
        self,
        target_id: str,
        target_type: ActorKind,
        action: str,
        follower: Optional[ActorRef] = None,
    ) -> FollowResult:
        """
        Follow or unfollow as the session's acting identity. With `follower` the
        server refuses (Conflict) once the session acts as someone else.
        """
        payload = {"targetId": target_id, "targetType": ActorKind(target_type).value, "action": action}
        if follower is not None:
            payload["follower"] = follower.model_dump(mode="json")
        data = await self._request("POST", "/followers/toggle", json=payload)
        return FollowResult.model_validate(data)
