from __future__ import annotations

from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field


def _none_to_empty(value: Any) -> Any:
    return "" if value is None else value


# Snyk sends explicit nulls for optional text (descriptions, user names, emails)
NullableStr = Annotated[str, BeforeValidator(_none_to_empty)]


class SnykModel(BaseModel):
    """Upstream payloads: camelCase aliases, unknown fields ignored."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class Group(SnykModel):
    id: str
    name: NullableStr = ""
    url: NullableStr = ""


class Org(SnykModel):
    id: str
    name: NullableStr = ""
    slug: NullableStr = ""
    url: NullableStr = ""
    group: Group | None = None


class OrgList(SnykModel):
    orgs: list[Org] = Field(default_factory=list)


class Role(SnykModel):
    """
    Role definition shared by the group and its organizations.

    `scope` and `slug` are not sent by Snyk; they are derived from `name`
    (e.g. "Org Admin" -> scope "org", slug "admin") by the role classifier.
    """

    id: str = Field(alias="publicId")
    name: NullableStr
    description: NullableStr = ""
    created: str | None = None
    modified: str | None = None

    scope: str | None = Field(default=None, exclude=True)
    slug: str | None = Field(default=None, exclude=True)


class BaseUser(SnykModel):
    id: str
    username: NullableStr = ""
    email: NullableStr = ""
    name: NullableStr = ""


class OrgUser(BaseUser):
    role: NullableStr = ""


class OrgMembership(SnykModel):
    name: NullableStr = ""
    role: NullableStr = ""


class GroupUser(BaseUser):
    role: NullableStr = Field(default="", alias="groupRole")
    orgs: list[OrgMembership] = Field(default_factory=list)


class AddMemberBody(SnykModel):
    user_id: str = Field(alias="userId")
    role: str


class UpdateRoleBody(SnykModel):
    role_id: str = Field(alias="rolePublicId")
