from typing import Iterable

from snyk_sync.errors import NotFoundError
from snyk_sync.syncers.group_syncer import GroupSyncer
from snyk_sync.syncers.org_syncer import RESOURCES_PAGE_SIZE, OrgSyncer
from snyk_sync.syncers.resource_syncer import ResourceSyncer
from snyk_sync.syncers.user_syncer import UserSyncer
from snyk_sync.webclient.snyk_client import SnykClient


class SyncerFactory:
    def __init__(
        self,
        client: SnykClient,
        org_ids: Iterable[str] = (),
        page_size: int = RESOURCES_PAGE_SIZE,
    ):
        self._syncers = {
            s.resource_type().id: s
            for s in (
                GroupSyncer(client),
                OrgSyncer(client, org_ids=org_ids, page_size=page_size),
                UserSyncer(client),
            )
        }

    def all(self) -> list[ResourceSyncer]:
        return list(self._syncers.values())

    def get(self, resource_type_id: str) -> ResourceSyncer:
        if resource_type_id not in self._syncers:
            raise NotFoundError(f"unknown resource type: {resource_type_id}")
        return self._syncers[resource_type_id]
