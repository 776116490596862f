from __future__ import annotations

import httpx

from snyk_sync.configs.logging_config import get_logger
from snyk_sync.configs.settings import Settings, validate_settings
from snyk_sync.errors import AppError, AuthError
from snyk_sync.syncers.resource_syncer import ResourceSyncer
from snyk_sync.syncers.syncer_factory import SyncerFactory
from snyk_sync.webclient.snyk_client import SnykClient

log = get_logger(__name__)

DISPLAY_NAME = "Snyk"
DESCRIPTION = "Connector syncing Snyk parent group and its organizations and users"


class SnykConnector:
    """Entry point for the host: one syncer per resource type, plus validation."""

    def __init__(self, client: SnykClient, org_ids: list[str] | None = None, page_size: int = 50):
        self.client = client
        self.group_id = client.group_id
        self.org_ids = list(org_ids or [])
        self._factory = SyncerFactory(client, org_ids=self.org_ids, page_size=page_size)

    @classmethod
    def from_settings(
        cls, settings: Settings, transport: httpx.AsyncBaseTransport | None = None
    ) -> "SnykConnector":
        validate_settings(settings)
        client = SnykClient.create(
            settings.API_TOKEN,
            settings.GROUP_ID,
            base_url=settings.BASE_URL,
            timeout=settings.REQUEST_TIMEOUT,
            transport=transport,
        )
        return cls(client, org_ids=settings.org_id_list(), page_size=settings.PAGE_SIZE)

    def resource_syncers(self) -> list[ResourceSyncer]:
        return self._factory.all()

    def syncer(self, resource_type_id: str) -> ResourceSyncer:
        return self._factory.get(resource_type_id)

    def metadata(self) -> dict[str, str]:
        return {"display_name": DISPLAY_NAME, "description": DESCRIPTION}

    async def validate(self) -> None:
        """Exercise the API token against the configured group."""
        try:
            await self.client.get_group_details()
        except AppError as exc:
            log.info("connector.validate.failed group_id=%s error=%s", self.group_id, exc.message)
            raise AuthError(f"failed to validate credentials for group {self.group_id}") from exc
        log.info("connector.validate.ok group_id=%s", self.group_id)

    async def aclose(self) -> None:
        await self.client.aclose()
