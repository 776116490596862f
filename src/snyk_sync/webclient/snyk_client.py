from __future__ import annotations

from typing import Any, TypeVar

import httpx
from pydantic import TypeAdapter, ValidationError

from snyk_sync.configs.logging_config import get_logger
from snyk_sync.domain.entities.snyk import (
    AddMemberBody,
    Group,
    GroupUser,
    Org,
    OrgList,
    OrgUser,
    Role,
    UpdateRoleBody,
)
from snyk_sync.errors import (
    ContentTypeError,
    DecodeError,
    PageTokenError,
    TransportError,
    UpstreamError,
)
from snyk_sync.roles.classifier import ORG_COLLABORATOR_ROLE, ORG_SCOPE, classify_roles
from snyk_sync.webclient.TokenHttpClient import TokenHttpClient

log = get_logger(__name__)

T = TypeVar("T")

DEFAULT_BASE_URL = "https://api.snyk.io/v1"

GROUP_ENDPOINT = "/group/{group_id}"
ORG_ENDPOINT = "/org/{org_id}"

_ORG_USERS = TypeAdapter(list[OrgUser])
_GROUP_USERS = TypeAdapter(list[GroupUser])
_ROLES = TypeAdapter(list[Role])


def _is_json(content_type: str) -> bool:
    return content_type.startswith("application") and "json" in content_type


def _error_message(resp: httpx.Response) -> str | None:
    if not _is_json(resp.headers.get("content-type", "")):
        return None
    try:
        payload = resp.json()
    except ValueError:
        return None
    if isinstance(payload, dict):
        return payload.get("message") or payload.get("error") or None
    return None


class SnykClient:
    """
    Snyk v1 REST API, scoped to one group.

    Every call goes upstream; nothing is cached. Transport failures are not
    retried here.
    """

    def __init__(self, http: TokenHttpClient, group_id: str):
        self._http = http
        self.group_id = group_id

    @classmethod
    def create(
        cls,
        api_token: str,
        group_id: str,
        *,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> "SnykClient":
        session = httpx.AsyncClient(base_url=base_url, timeout=timeout, transport=transport)
        return cls(TokenHttpClient(api_token, client=session), group_id)

    async def aclose(self) -> None:
        await self._http.aclose()

    def _group_path(self, *parts: str) -> str:
        return "/".join([GROUP_ENDPOINT.format(group_id=self.group_id), *parts])

    # ----------------------------
    # Reads
    # ----------------------------

    async def get_group_details(self) -> Group:
        # the orgs endpoint carries the group's own id/name/url next to the org list
        group, _ = await self._get(self._group_path("orgs"), TypeAdapter(Group))
        return group

    async def list_group_members(self) -> list[GroupUser]:
        users, _ = await self._get(self._group_path("members"), _GROUP_USERS)
        return users

    async def list_group_roles(self) -> list[Role]:
        roles, _ = await self._get(self._group_path("roles"), _ROLES)
        return roles

    async def list_org_roles(self) -> list[Role]:
        """Group roles classified and narrowed down to organization scope."""
        return classify_roles(await self.list_group_roles(), ORG_SCOPE)

    async def list_org_members(self, org_id: str) -> list[OrgUser]:
        path = f"{ORG_ENDPOINT.format(org_id=org_id)}/members"
        users, _ = await self._get(path, _ORG_USERS, params={"includeGroupAdmins": "true"})
        return users

    async def list_orgs(self, page: str = "", per_page: int = 0) -> tuple[list[Org], str]:
        """
        One page of organizations in the group.

        `page` is a next-page URL taken from a previous `Link` header; empty
        starts from the first page. A next-page URL is requested verbatim, it
        already carries the page size of the first request. Returns the orgs
        and the raw `Link` header.
        """
        if page:
            url = self._next_page_url(page)
            params = None
        else:
            url = self._group_path("orgs")
            params = {"perPage": str(per_page)} if per_page > 0 else None
        res, link = await self._get(url, TypeAdapter(OrgList), params=params)
        return res.orgs, link

    def _next_page_url(self, page: str) -> str:
        # the API token is attached to this request: only follow links back to the API
        base = self._http.session.base_url
        try:
            url = httpx.URL(page)
        except httpx.InvalidURL as exc:
            raise PageTokenError("invalid next-page url in page token") from exc

        same_origin = (url.scheme, url.host, url.port) == (base.scheme, base.host, base.port)
        if not same_origin or not url.path.startswith(base.path):
            log.info("snyk.next_page.rejected host=%s", url.host)
            raise PageTokenError("next-page url in page token does not point at the Snyk API")
        return page

    # ----------------------------
    # Writes
    # ----------------------------

    async def add_org_member(self, user_id: str, org_id: str) -> None:
        # Snyk requires a role on add; new members always start as collaborator.
        path = self._group_path(ORG_ENDPOINT.format(org_id=org_id).lstrip("/"), "members")
        body = AddMemberBody(user_id=user_id, role=ORG_COLLABORATOR_ROLE)
        await self._send("POST", path, body.model_dump(by_alias=True))

    async def remove_org_member(self, user_id: str, org_id: str) -> None:
        path = f"{ORG_ENDPOINT.format(org_id=org_id)}/members/{user_id}"
        await self._send("DELETE", path)

    async def update_org_role(self, user_id: str, org_id: str, role_id: str) -> None:
        path = f"{ORG_ENDPOINT.format(org_id=org_id)}/members/update/{user_id}"
        body = UpdateRoleBody(role_id=role_id)
        await self._send("PUT", path, body.model_dump(by_alias=True))

    # ----------------------------
    # Internals
    # ----------------------------

    async def _get(
        self,
        url: str,
        adapter: TypeAdapter[T],
        params: dict[str, str] | None = None,
    ) -> tuple[T, str]:
        resp = await self._do("GET", url, params=params)

        content_type = resp.headers.get("content-type", "")
        if not _is_json(content_type):
            raise ContentTypeError(content_type, resp.text)

        try:
            data = adapter.validate_json(resp.content)
        except ValidationError as exc:
            log.info("snyk.decode_failed url=%s errors=%s", url, exc.error_count())
            raise DecodeError(f"failed to decode response body: {exc}") from exc

        return data, resp.headers.get("link", "")

    async def _send(self, method: str, url: str, body: dict[str, Any] | None = None) -> None:
        await self._do(method, url, json=body)

    async def _do(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        try:
            resp = await self._http.request(method, url, **kwargs)
        except httpx.RequestError as exc:
            log.info("snyk.request.transport_error method=%s url=%s error=%s", method, url, str(exc))
            raise TransportError(f"{method} {url} failed: {exc}") from exc

        log.debug("snyk.request method=%s url=%s status=%s", method, url, resp.status_code)

        if not resp.is_success:
            message = _error_message(resp)
            log.info(
                "snyk.request.failed method=%s url=%s status=%s message=%s",
                method,
                url,
                resp.status_code,
                message,
            )
            raise UpstreamError(resp.status_code, message)

        return resp
