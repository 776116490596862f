from __future__ import annotations

from snyk_sync.configs.logging_config import get_logger
from snyk_sync.domain.entities.resource import (
    Entitlement,
    Grant,
    Resource,
    ResourceId,
    ResourceType,
)
from snyk_sync.domain.entities.snyk import GroupUser
from snyk_sync.syncers.resource_syncer import ResourceSyncer
from snyk_sync.syncers.resource_types import USER_RESOURCE_TYPE

log = get_logger(__name__)


def user_resource(user: GroupUser, parent_id: ResourceId) -> Resource:
    return Resource(
        id=ResourceId(resource_type=USER_RESOURCE_TYPE.id, resource=user.id),
        display_name=user.name,
        parent_resource_id=parent_id,
        profile={
            "displayName": user.name,
            "username": user.username,
            "email": user.email,
            "role": user.role,
        },
    )


class UserSyncer(ResourceSyncer):
    def resource_type(self) -> ResourceType:
        return USER_RESOURCE_TYPE

    async def list(
        self, parent_resource_id: ResourceId | None, page_token: str = ""
    ) -> tuple[list[Resource], str]:
        if parent_resource_id is None:
            return [], ""

        users = await self._client.list_group_members()
        log.info("sync.user.list parent=%s users=%s", parent_resource_id, len(users))
        return [user_resource(u, parent_resource_id) for u in users], ""

    async def entitlements(self, resource: Resource) -> list[Entitlement]:
        return []

    async def grants(self, resource: Resource) -> list[Grant]:
        return []
