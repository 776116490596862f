from __future__ import annotations

from snyk_sync.configs.logging_config import get_logger
from snyk_sync.domain.entities.resource import (
    Entitlement,
    Grant,
    Resource,
    ResourceId,
    ResourceType,
    new_grant,
    new_permission_entitlement,
)
from snyk_sync.domain.entities.snyk import Group
from snyk_sync.syncers.resource_syncer import ResourceSyncer
from snyk_sync.syncers.resource_types import (
    GROUP_RESOURCE_TYPE,
    ORG_RESOURCE_TYPE,
    USER_RESOURCE_TYPE,
)

log = get_logger(__name__)

GROUP_ADMIN_ROLE = "admin"
GROUP_MEMBER_ROLE = "member"
GROUP_VIEWER_ROLE = "viewer"

# Fixed by Snyk, not derived from the group's role list.
GROUP_ROLES = (GROUP_ADMIN_ROLE, GROUP_MEMBER_ROLE, GROUP_VIEWER_ROLE)


def group_resource(group: Group) -> Resource:
    return Resource(
        id=ResourceId(resource_type=GROUP_RESOURCE_TYPE.id, resource=group.id),
        display_name=group.name,
        profile={"displayName": group.name, "url": group.url},
        child_resource_types=[ORG_RESOURCE_TYPE.id, USER_RESOURCE_TYPE.id],
    )


class GroupSyncer(ResourceSyncer):
    """Read-only: the group itself, its three fixed roles and who holds them."""

    def resource_type(self) -> ResourceType:
        return GROUP_RESOURCE_TYPE

    async def list(
        self, parent_resource_id: ResourceId | None, page_token: str = ""
    ) -> tuple[list[Resource], str]:
        group = await self._client.get_group_details()
        log.info("sync.group.list group_id=%s", group.id)
        return [group_resource(group)], ""

    async def entitlements(self, resource: Resource) -> list[Entitlement]:
        return [
            new_permission_entitlement(
                resource,
                role,
                display_name=f"{resource.display_name} {role}",
                description=f"{role} role in the {resource.display_name} group",
                grantable_to=[USER_RESOURCE_TYPE],
            )
            for role in GROUP_ROLES
        ]

    async def grants(self, resource: Resource) -> list[Grant]:
        members = await self._client.list_group_members()

        out: list[Grant] = []
        for member in members:
            # members with a role outside the fixed set have no entitlement to hold
            if member.role not in GROUP_ROLES:
                continue
            principal = ResourceId(resource_type=USER_RESOURCE_TYPE.id, resource=member.id)
            out.append(new_grant(resource, member.role, principal))

        log.info(
            "sync.group.grants group_id=%s members=%s grants=%s",
            resource.id.resource,
            len(members),
            len(out),
        )
        return out
