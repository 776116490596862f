from __future__ import annotations

from typing import Iterable

from snyk_sync.configs.logging_config import get_logger
from snyk_sync.domain.entities.org_entitlement import (
    ORG_MEMBER_ENTITLEMENT,
    MembershipEntitlement,
    PermissionEntitlement,
    parse_org_entitlement,
)
from snyk_sync.domain.entities.resource import (
    Entitlement,
    Grant,
    Resource,
    ResourceId,
    ResourceType,
    new_assignment_entitlement,
    new_grant,
    new_permission_entitlement,
)
from snyk_sync.domain.entities.snyk import Org, Role
from snyk_sync.errors import DefaultRoleMissingError, RoleNotFoundError
from snyk_sync.pagination.link import parse_link
from snyk_sync.pagination.token import parse_page_token
from snyk_sync.roles.classifier import (
    ORG_COLLABORATOR_ROLE,
    find_role_by_id,
    find_role_by_slug,
)
from snyk_sync.syncers.resource_syncer import ResourceSyncer
from snyk_sync.syncers.resource_types import ORG_RESOURCE_TYPE, USER_RESOURCE_TYPE
from snyk_sync.webclient.snyk_client import SnykClient

log = get_logger(__name__)

RESOURCES_PAGE_SIZE = 50


def org_resource(org: Org, parent_id: ResourceId) -> Resource:
    return Resource(
        id=ResourceId(resource_type=ORG_RESOURCE_TYPE.id, resource=org.id),
        display_name=org.name,
        parent_resource_id=parent_id,
        profile={"displayName": org.name, "slug": org.slug, "url": org.url},
    )


class OrgSyncer(ResourceSyncer):
    """
    Organizations: membership plus one permission entitlement per org role.

    Permission entitlements are keyed by the role's public id. Snyk members
    always hold exactly one role, so revoking a role falls back to the
    collaborator role instead of removing the member, unless collaborator
    itself is the role being revoked.
    """

    def __init__(
        self,
        client: SnykClient,
        org_ids: Iterable[str] = (),
        page_size: int = RESOURCES_PAGE_SIZE,
    ):
        super().__init__(client)
        self._org_ids = frozenset(org_ids)
        self._page_size = page_size

    def resource_type(self) -> ResourceType:
        return ORG_RESOURCE_TYPE

    # ----------------------------
    # Read
    # ----------------------------

    async def list(
        self, parent_resource_id: ResourceId | None, page_token: str = ""
    ) -> tuple[list[Resource], str]:
        if parent_resource_id is None:
            return [], ""

        bag, page = parse_page_token(
            page_token, ResourceId(resource_type=ORG_RESOURCE_TYPE.id, resource="")
        )

        orgs, link = await self._client.list_orgs(page=page, per_page=self._page_size)

        out = [
            org_resource(org, parent_resource_id)
            for org in orgs
            if not self._org_ids or org.id in self._org_ids
        ]

        next_token = bag.next_token(parse_link(link))
        log.info(
            "sync.org.list parent=%s fetched=%s kept=%s has_next=%s",
            parent_resource_id,
            len(orgs),
            len(out),
            bool(next_token),
        )
        return out, next_token

    async def entitlements(self, resource: Resource) -> list[Entitlement]:
        out = [
            new_assignment_entitlement(
                resource,
                ORG_MEMBER_ENTITLEMENT,
                display_name=f"{resource.display_name} {ORG_MEMBER_ENTITLEMENT}",
                description=f"Member of the {resource.display_name} organization",
                grantable_to=[USER_RESOURCE_TYPE],
            )
        ]

        # permission entitlements, custom roles included
        for role in await self._client.list_org_roles():
            out.append(
                new_permission_entitlement(
                    resource,
                    role.id,
                    display_name=role.name,
                    description=role.description,
                    grantable_to=[USER_RESOURCE_TYPE],
                )
            )

        return out

    async def grants(self, resource: Resource) -> list[Grant]:
        org_id = resource.id.resource
        members = await self._client.list_org_members(org_id)
        roles = await self._client.list_org_roles()

        out: list[Grant] = []
        for member in members:
            principal = ResourceId(resource_type=USER_RESOURCE_TYPE.id, resource=member.id)
            out.append(new_grant(resource, ORG_MEMBER_ENTITLEMENT, principal, purpose="assignment"))

            # members report their role by slug; entitlements are keyed by public id
            role = find_role_by_slug(roles, member.role)
            if role is None:
                log.warning(
                    "sync.org.grants.unknown_role org_id=%s user_id=%s role=%s",
                    org_id,
                    member.id,
                    member.role,
                )
                continue
            out.append(new_grant(resource, role.id, principal))

        log.info("sync.org.grants org_id=%s members=%s grants=%s", org_id, len(members), len(out))
        return out

    # ----------------------------
    # Write
    # ----------------------------

    async def _grant_core(self, principal: ResourceId, entitlement: Entitlement) -> None:
        user_id = principal.resource
        org_id = entitlement.resource.id.resource
        target = parse_org_entitlement(entitlement.slug)

        if isinstance(target, MembershipEntitlement):
            await self._client.add_org_member(user_id, org_id)
            return

        roles = await self._client.list_org_roles()
        role = self._require_role(roles, target)
        await self._client.update_org_role(user_id, org_id, role.id)

    async def _revoke_core(self, grant: Grant) -> None:
        user_id = grant.principal.resource
        org_id = grant.entitlement.resource.id.resource
        target = parse_org_entitlement(grant.entitlement.slug)

        if isinstance(target, MembershipEntitlement):
            await self._client.remove_org_member(user_id, org_id)
            return

        # read current roles, then decide; not atomic with the write below
        roles = await self._client.list_org_roles()
        role = self._require_role(roles, target)

        collaborator = find_role_by_slug(roles, ORG_COLLABORATOR_ROLE)
        if collaborator is None:
            raise DefaultRoleMissingError(ORG_COLLABORATOR_ROLE)

        if role.id == collaborator.id:
            log.info("sync.org.revoke.remove org_id=%s user_id=%s", org_id, user_id)
            await self._client.remove_org_member(user_id, org_id)
        else:
            log.info(
                "sync.org.revoke.downgrade org_id=%s user_id=%s from=%s to=%s",
                org_id,
                user_id,
                role.id,
                collaborator.id,
            )
            await self._client.update_org_role(user_id, org_id, collaborator.id)

    @staticmethod
    def _require_role(roles: list[Role], target: PermissionEntitlement) -> Role:
        role = find_role_by_id(roles, target.role_id)
        if role is None:
            raise RoleNotFoundError(target.role_id)
        return role
