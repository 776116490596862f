from __future__ import annotations

from abc import ABC, abstractmethod

from snyk_sync.configs.logging_config import get_logger
from snyk_sync.domain.entities.resource import (
    Entitlement,
    Grant,
    Resource,
    ResourceId,
    ResourceType,
)
from snyk_sync.errors import PrincipalNotGrantableError, UnsupportedOperationError
from snyk_sync.syncers.resource_types import USER_RESOURCE_TYPE
from snyk_sync.webclient.snyk_client import SnykClient

log = get_logger(__name__)


class ResourceSyncer(ABC):
    """
    Template-method base class for one resource type.

    Read side: list / entitlements / grants. Write side: grant / revoke, which
    validate the principal before handing over to the _grant_core /
    _revoke_core hooks. Syncers that cannot provision leave the hooks alone
    and reject writes.
    """

    def __init__(self, client: SnykClient):
        self._client = client

    # ----------------------------
    # Public API
    # ----------------------------

    @abstractmethod
    def resource_type(self) -> ResourceType:
        pass

    @abstractmethod
    async def list(
        self, parent_resource_id: ResourceId | None, page_token: str = ""
    ) -> tuple[list[Resource], str]:
        """Return one page of resources and the token for the next page ("" when done)."""
        pass

    @abstractmethod
    async def entitlements(self, resource: Resource) -> list[Entitlement]:
        pass

    @abstractmethod
    async def grants(self, resource: Resource) -> list[Grant]:
        pass

    async def grant(self, principal: ResourceId, entitlement: Entitlement) -> None:
        self._validate_principal(principal, action="granted")
        log.info(
            "sync.grant.start resource_type=%s entitlement=%s principal=%s",
            self.resource_type().id,
            entitlement.id,
            principal,
        )
        await self._grant_core(principal, entitlement)
        log.info("sync.grant.done entitlement=%s principal=%s", entitlement.id, principal)

    async def revoke(self, grant: Grant) -> None:
        self._validate_principal(grant.principal, action="revoked")
        log.info(
            "sync.revoke.start resource_type=%s entitlement=%s principal=%s",
            self.resource_type().id,
            grant.entitlement.id,
            grant.principal,
        )
        await self._revoke_core(grant)
        log.info("sync.revoke.done entitlement=%s principal=%s", grant.entitlement.id, grant.principal)

    # ----------------------------
    # Hooks
    # ----------------------------

    def _validate_principal(self, principal: ResourceId, action: str) -> None:
        if principal.resource_type != USER_RESOURCE_TYPE.id:
            log.debug(
                "sync.principal_rejected principal_id=%s principal_type=%s",
                principal,
                principal.resource_type,
            )
            raise PrincipalNotGrantableError(
                f"only users can be {action} {self.resource_type().display_name.lower()} entitlements"
            )

    async def _grant_core(self, principal: ResourceId, entitlement: Entitlement) -> None:
        raise UnsupportedOperationError(
            f"{self.resource_type().id} entitlements cannot be granted"
        )

    async def _revoke_core(self, grant: Grant) -> None:
        raise UnsupportedOperationError(
            f"{self.resource_type().id} entitlements cannot be revoked"
        )
