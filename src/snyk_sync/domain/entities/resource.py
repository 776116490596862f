from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, Field


class ResourceType(BaseModel):
    id: str
    display_name: str
    traits: list[Literal["group", "user", "role", "app"]] = Field(default_factory=list)
    skip_entitlements_and_grants: bool = False


class ResourceId(BaseModel):
    resource_type: str
    resource: str

    def __str__(self) -> str:
        return f"{self.resource_type}:{self.resource}"


class Resource(BaseModel):
    id: ResourceId
    display_name: str = ""
    parent_resource_id: ResourceId | None = None
    profile: dict[str, Any] = Field(default_factory=dict)
    child_resource_types: list[str] = Field(default_factory=list)


class Entitlement(BaseModel):
    """
    A grantable capability on a resource.

    `purpose` is "assignment" for membership-style entitlements and
    "permission" for role-style ones.
    """

    id: str
    resource: Resource
    slug: str
    purpose: Literal["assignment", "permission"]
    display_name: str = ""
    description: str = ""
    grantable_to: list[str] = Field(default_factory=list)


class Grant(BaseModel):
    id: str
    entitlement: Entitlement
    principal: ResourceId


def entitlement_id(resource: Resource, slug: str) -> str:
    return f"{resource.id}:{slug}"


def _new_entitlement(
    resource: Resource,
    slug: str,
    purpose: Literal["assignment", "permission"],
    *,
    display_name: str = "",
    description: str = "",
    grantable_to: list[ResourceType] | None = None,
) -> Entitlement:
    return Entitlement(
        id=entitlement_id(resource, slug),
        resource=resource,
        slug=slug,
        purpose=purpose,
        display_name=display_name,
        description=description,
        grantable_to=[rt.id for rt in grantable_to or []],
    )


def new_assignment_entitlement(resource: Resource, slug: str, **kwargs: Any) -> Entitlement:
    return _new_entitlement(resource, slug, "assignment", **kwargs)


def new_permission_entitlement(resource: Resource, slug: str, **kwargs: Any) -> Entitlement:
    return _new_entitlement(resource, slug, "permission", **kwargs)


def new_grant(
    resource: Resource,
    slug: str,
    principal: ResourceId,
    purpose: Literal["assignment", "permission"] = "permission",
) -> Grant:
    """
    Grant edge for `principal` on the entitlement `slug` of `resource`.

    The entitlement carries only what is needed to address it again; display
    metadata lives on the entitlement listing.
    """
    ent = Entitlement(
        id=entitlement_id(resource, slug),
        resource=resource,
        slug=slug,
        purpose=purpose,
    )
    return Grant(id=f"{ent.id}:{principal}", entitlement=ent, principal=principal)
