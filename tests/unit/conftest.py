from __future__ import annotations

import json
from typing import Any

import httpx
import pytest

from snyk_sync.webclient.snyk_client import SnykClient

BASE_URL = "https://snyk.test/v1"
GROUP_ID = "g1"
API_TOKEN = "test-token"


class FakeSnyk:
    """
    In-memory Snyk tenant behind an httpx.MockTransport.

    Records every request in `calls` as (method, path, json body or None).
    `fail_with` makes the next request return that (status, body, content type).
    """

    def __init__(self) -> None:
        self.group = {"id": GROUP_ID, "name": "Acme", "url": "https://app.snyk.io/group/g1"}
        self.orgs: list[dict[str, Any]] = [
            {"id": "o1", "name": "Platform", "slug": "platform", "url": "https://app.snyk.io/org/platform"},
        ]
        self.roles: list[dict[str, Any]] = [
            {"publicId": "r1", "name": "Org Admin", "description": "Full org access"},
            {"publicId": "r2", "name": "Org Collaborator", "description": "Default org role"},
            {"publicId": "r3", "name": "Group Admin", "description": "Group admin"},
        ]
        self.org_members: dict[str, list[dict[str, Any]]] = {
            "o1": [
                {"id": "u1", "username": "ada", "email": "ada@acme.io", "name": "Ada", "role": "admin"},
            ],
        }
        self.group_members: list[dict[str, Any]] = [
            {"id": "u1", "username": "ada", "email": "ada@acme.io", "name": "Ada", "groupRole": "admin"},
            {"id": "u2", "username": "bob", "email": "bob@acme.io", "name": "Bob", "groupRole": "viewer"},
        ]
        self.calls: list[tuple[str, str, Any]] = []
        self.requests: list[httpx.Request] = []
        self.fail_with: tuple[int, str, str] | None = None

    # ----------------------------
    # Transport
    # ----------------------------

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)

    def client(self) -> SnykClient:
        return SnykClient.create(API_TOKEN, GROUP_ID, base_url=BASE_URL, transport=self.transport())

    def writes(self) -> list[tuple[str, str, Any]]:
        return [c for c in self.calls if c[0] != "GET"]

    def handle(self, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content) if request.content else None
        path = request.url.path.removeprefix("/v1")
        self.calls.append((request.method, path, body))
        self.requests.append(request)

        if self.fail_with is not None:
            status, text, content_type = self.fail_with
            self.fail_with = None
            return httpx.Response(status, text=text, headers={"content-type": content_type})

        parts = path.strip("/").split("/")
        method = request.method

        if method == "GET" and parts == ["group", GROUP_ID, "orgs"]:
            return self._orgs_page(request)
        if method == "GET" and parts == ["group", GROUP_ID, "members"]:
            return httpx.Response(200, json=self.group_members)
        if method == "GET" and parts == ["group", GROUP_ID, "roles"]:
            return httpx.Response(200, json=self.roles)
        if method == "GET" and parts[0] == "org" and parts[2:] == ["members"]:
            return httpx.Response(200, json=self.org_members.get(parts[1], []))
        if method == "POST" and parts[:2] == ["group", GROUP_ID] and parts[4:] == ["members"]:
            self.org_members.setdefault(parts[3], []).append(
                {"id": body["userId"], "username": "", "email": "", "name": "", "role": body["role"]}
            )
            return httpx.Response(200, json={})
        if method == "DELETE" and parts[0] == "org" and parts[2] == "members":
            org_id, user_id = parts[1], parts[3]
            self.org_members[org_id] = [m for m in self.org_members.get(org_id, []) if m["id"] != user_id]
            return httpx.Response(200, json={})
        if method == "PUT" and parts[0] == "org" and parts[2:4] == ["members", "update"]:
            return self._update_role(parts[1], parts[4], body["rolePublicId"])

        return httpx.Response(404, json={"error": "not found", "message": f"no route {path}"})

    def _orgs_page(self, request: httpx.Request) -> httpx.Response:
        page = int(request.url.params.get("page", "1"))
        per_page = int(request.url.params.get("perPage", "100"))
        start = (page - 1) * per_page
        chunk = self.orgs[start:start + per_page]

        headers = {}
        if start + per_page < len(self.orgs):
            headers["link"] = f'<{BASE_URL}/group/{GROUP_ID}/orgs?page={page + 1}&perPage={per_page}>; rel="next"'
        else:
            headers["link"] = f'<{BASE_URL}/group/{GROUP_ID}/orgs?page={page}&perPage={per_page}>; rel="last"'

        return httpx.Response(200, json={**self.group, "orgs": chunk}, headers=headers)

    def _update_role(self, org_id: str, user_id: str, role_id: str) -> httpx.Response:
        role = next((r for r in self.roles if r["publicId"] == role_id), None)
        if role is None:
            return httpx.Response(400, json={"error": "bad request", "message": "invalid role"})
        for member in self.org_members.get(org_id, []):
            if member["id"] == user_id:
                member["role"] = role["name"].lower().split()[-1]
                return httpx.Response(200, json={})
        return httpx.Response(404, json={"error": "not found", "message": "member not found"})

    # ----------------------------
    # Helpers
    # ----------------------------

    def member_role(self, org_id: str, user_id: str) -> str | None:
        for member in self.org_members.get(org_id, []):
            if member["id"] == user_id:
                return member["role"]
        return None


@pytest.fixture
def fake() -> FakeSnyk:
    return FakeSnyk()


@pytest.fixture
def client(fake: FakeSnyk) -> SnykClient:
    return fake.client()
