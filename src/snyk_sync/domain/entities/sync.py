from __future__ import annotations

from pydantic import BaseModel

from snyk_sync.domain.entities.resource import Entitlement, Grant, Resource, ResourceId


class Envelope(BaseModel):
    request_id: str | None = None


class ListRequest(Envelope):
    parent_resource_id: ResourceId | None = None
    page_token: str = ""


class ResourceRequest(Envelope):
    resource: Resource


class GrantRequest(Envelope):
    principal: ResourceId
    entitlement: Entitlement


class RevokeRequest(Envelope):
    grant: Grant
