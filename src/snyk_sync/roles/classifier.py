from __future__ import annotations

from typing import Iterable, NamedTuple

from snyk_sync.configs.logging_config import get_logger
from snyk_sync.domain.entities.snyk import Role
from snyk_sync.errors import RoleNameError

log = get_logger(__name__)

ORG_SCOPE = "org"
GROUP_SCOPE = "group"

# lowest-privilege org role; membership always implies it
ORG_COLLABORATOR_ROLE = "collaborator"
ORG_ADMIN_ROLE = "admin"


class RoleName(NamedTuple):
    scope: str
    slug: str


def parse_role_name(name: str) -> RoleName:
    """
    Split a Snyk role display name into (scope, slug).

    Snyk encodes both in the name, e.g. "Org Admin" or "Group Viewer". Names
    that are not exactly two whitespace-separated words raise RoleNameError.
    """
    parts = name.lower().split()
    if len(parts) != 2:
        raise RoleNameError(name.lower())
    return RoleName(scope=parts[0], slug=parts[1])


def classify_roles(roles: Iterable[Role], scope: str) -> list[Role]:
    """
    Keep roles whose parsed scope equals `scope`, with `scope`/`slug` filled in.

    Unparseable names are skipped with a warning; the remaining roles are
    still classified. Roles sharing a slug are all kept, the public id is
    what identifies a role.
    """
    out: list[Role] = []
    for role in roles:
        try:
            parsed = parse_role_name(role.name)
        except RoleNameError as exc:
            log.warning("roles.classify.skip role_id=%s reason=%s", role.id, exc.message)
            continue

        if parsed.scope != scope:
            continue

        out.append(role.model_copy(update={"scope": parsed.scope, "slug": parsed.slug}))

    log.debug("roles.classify scope=%s kept=%s", scope, len(out))
    return out


def find_role_by_id(roles: Iterable[Role], role_id: str) -> Role | None:
    for role in roles:
        if role.id == role_id:
            return role
    return None


def find_role_by_slug(roles: Iterable[Role], slug: str) -> Role | None:
    for role in roles:
        if role.slug == slug:
            return role
    return None
