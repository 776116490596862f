from __future__ import annotations

from dataclasses import dataclass
from typing import Union

ORG_MEMBER_ENTITLEMENT = "member"


@dataclass(frozen=True)
class MembershipEntitlement:
    """Being a member of the organization at all."""

    slug: str = ORG_MEMBER_ENTITLEMENT


@dataclass(frozen=True)
class PermissionEntitlement:
    """Holding a specific organization role, addressed by its public id."""

    role_id: str

    @property
    def slug(self) -> str:
        return self.role_id


OrgEntitlement = Union[MembershipEntitlement, PermissionEntitlement]


def parse_org_entitlement(slug: str) -> OrgEntitlement:
    if slug == ORG_MEMBER_ENTITLEMENT:
        return MembershipEntitlement()
    return PermissionEntitlement(role_id=slug)
