from __future__ import annotations

import pytest

from snyk_sync.domain.entities.org_entitlement import (
    MembershipEntitlement,
    PermissionEntitlement,
    parse_org_entitlement,
)
from snyk_sync.domain.entities.resource import (
    Resource,
    ResourceId,
    new_assignment_entitlement,
    new_grant,
    new_permission_entitlement,
)
from snyk_sync.errors import (
    DefaultRoleMissingError,
    PageTokenError,
    PrincipalNotGrantableError,
    RoleNotFoundError,
)
from snyk_sync.pagination.token import PageBag, PageState
from snyk_sync.syncers.org_syncer import OrgSyncer

GROUP = ResourceId(resource_type="group", resource="g1")
ORG = Resource(id=ResourceId(resource_type="org", resource="o1"), display_name="Platform")
USER = ResourceId(resource_type="user", resource="u1")


@pytest.fixture
def syncer(client) -> OrgSyncer:
    return OrgSyncer(client)


def _member(slug: str = "member"):
    return new_assignment_entitlement(ORG, slug)


def _role(role_id: str):
    return new_permission_entitlement(ORG, role_id)


def test_parse_org_entitlement() -> None:
    assert parse_org_entitlement("member") == MembershipEntitlement()
    assert parse_org_entitlement("r1") == PermissionEntitlement(role_id="r1")


# ----------------------------
# List
# ----------------------------


async def test_list_without_parent_is_empty(fake, syncer) -> None:
    assert await syncer.list(None, "") == ([], "")
    assert fake.calls == []


async def test_list_walks_pages_until_token_is_empty(fake, client) -> None:
    fake.orgs = [{"id": f"o{i}", "name": f"Org {i}"} for i in range(1, 6)]
    syncer = OrgSyncer(client, page_size=2)

    seen, token, calls = [], "", 0
    for _ in range(10):
        resources, token = await syncer.list(GROUP, token)
        seen.extend(r.id.resource for r in resources)
        calls += 1
        if not token:
            break

    assert token == ""
    assert seen == ["o1", "o2", "o3", "o4", "o5"]
    assert calls == 3
    assert [r.url.params.get("page") for r in fake.requests] == [None, "2", "3"]
    assert all(r.url.params["perPage"] == "2" for r in fake.requests)
    assert all(r.parent_resource_id == GROUP for r in resources)


async def test_list_resumes_from_token(fake, client) -> None:
    fake.orgs = [{"id": f"o{i}", "name": f"Org {i}"} for i in range(1, 4)]
    syncer = OrgSyncer(client, page_size=2)

    _, token = await syncer.list(GROUP, "")
    first, _ = await syncer.list(GROUP, token)
    replay, _ = await syncer.list(GROUP, token)
    assert [r.id.resource for r in first] == [r.id.resource for r in replay] == ["o3"]


@pytest.mark.parametrize(
    "page",
    [
        "https://evil.example/v1/group/g1/orgs?page=2",
        "http://snyk.test/v1/group/g1/orgs?page=2",
        "https://snyk.test:8443/v1/group/g1/orgs?page=2",
        "https://snyk.test/other/orgs?page=2",
        "/v1/group/g1/orgs?page=2",
    ],
)
async def test_list_rejects_token_pointing_outside_the_api(fake, syncer, page) -> None:
    bag = PageBag()
    bag.push(PageState(resource_type_id="org", token=page))

    with pytest.raises(PageTokenError):
        await syncer.list(GROUP, bag.marshal())
    assert fake.requests == []


async def test_list_applies_org_allow_list(fake, client) -> None:
    fake.orgs = [{"id": "o1", "name": "A"}, {"id": "o2", "name": "B"}]
    syncer = OrgSyncer(client, org_ids=["o2"])
    resources, token = await syncer.list(GROUP, "")
    assert [r.id.resource for r in resources] == ["o2"]
    assert token == ""


async def test_org_resource_profile(fake, syncer) -> None:
    resources, _ = await syncer.list(GROUP, "")
    assert resources[0].profile == {
        "displayName": "Platform",
        "slug": "platform",
        "url": "https://app.snyk.io/org/platform",
    }


# ----------------------------
# Entitlements / grants
# ----------------------------


async def test_entitlements_are_membership_plus_org_roles(syncer) -> None:
    entitlements = await syncer.entitlements(ORG)
    assert [(e.slug, e.purpose) for e in entitlements] == [
        ("member", "assignment"),
        ("r1", "permission"),
        ("r2", "permission"),
    ]
    assert entitlements[0].display_name == "Platform member"
    assert entitlements[1].display_name == "Org Admin"
    assert all(e.grantable_to == ["user"] for e in entitlements)


async def test_grants_membership_and_role(fake, syncer) -> None:
    grants = await syncer.grants(ORG)
    assert [(g.entitlement.slug, g.principal.resource) for g in grants] == [
        ("member", "u1"),
        ("r1", "u1"),
    ]
    assert grants[0].id == "org:o1:member:user:u1"


async def test_grants_fetch_roles_once_per_call(fake, syncer) -> None:
    fake.org_members["o1"].append({"id": "u2", "role": "collaborator"})
    await syncer.grants(ORG)
    assert [c[1] for c in fake.calls] == ["/org/o1/members", "/group/g1/roles"]


async def test_grants_skip_unknown_member_role(fake, syncer, caplog) -> None:
    fake.org_members["o1"].append({"id": "u2", "role": "custom"})
    grants = await syncer.grants(ORG)
    assert [(g.entitlement.slug, g.principal.resource) for g in grants] == [
        ("member", "u1"),
        ("r1", "u1"),
        ("member", "u2"),
    ]
    assert "unknown_role" in caplog.text


async def test_grants_tolerate_malformed_role_names(fake, syncer) -> None:
    fake.roles.append({"publicId": "r9", "name": "Org Read Only"})
    grants = await syncer.grants(ORG)
    assert len(grants) == 2


async def test_null_role_description_and_member_fields(fake, syncer) -> None:
    fake.roles.append({"publicId": "r5", "name": "Org Custom", "description": None})
    fake.org_members["o1"].append({"id": "u2", "username": None, "email": None, "name": None, "role": "custom"})

    entitlements = await syncer.entitlements(ORG)
    custom = next(e for e in entitlements if e.slug == "r5")
    assert custom.description == ""

    grants = await syncer.grants(ORG)
    assert ("r5", "u2") in [(g.entitlement.slug, g.principal.resource) for g in grants]


# ----------------------------
# Grant
# ----------------------------


async def test_grant_membership_adds_as_collaborator(fake, syncer) -> None:
    await syncer.grant(ResourceId(resource_type="user", resource="u7"), _member())
    assert fake.member_role("o1", "u7") == "collaborator"


async def test_grant_membership_then_role(fake, syncer) -> None:
    principal = ResourceId(resource_type="user", resource="u7")
    await syncer.grant(principal, _member())
    await syncer.grant(principal, _role("r1"))
    assert fake.member_role("o1", "u7") == "admin"
    assert fake.writes() == [
        ("POST", "/group/g1/org/o1/members", {"userId": "u7", "role": "collaborator"}),
        ("PUT", "/org/o1/members/update/u7", {"rolePublicId": "r1"}),
    ]


async def test_grant_unknown_role_fails_without_write(fake, syncer) -> None:
    with pytest.raises(RoleNotFoundError):
        await syncer.grant(USER, _role("gone"))
    assert fake.writes() == []


# ----------------------------
# Revoke
# ----------------------------


async def test_revoke_membership_removes_member(fake, syncer) -> None:
    await syncer.revoke(new_grant(ORG, "member", USER, purpose="assignment"))
    assert fake.member_role("o1", "u1") is None


async def test_revoke_elevated_role_downgrades_to_collaborator(fake, syncer) -> None:
    await syncer.revoke(new_grant(ORG, "r1", USER))
    assert fake.member_role("o1", "u1") == "collaborator"
    assert fake.writes() == [("PUT", "/org/o1/members/update/u1", {"rolePublicId": "r2"})]


async def test_revoke_collaborator_removes_member(fake, syncer) -> None:
    fake.org_members["o1"][0]["role"] = "collaborator"
    await syncer.revoke(new_grant(ORG, "r2", USER))
    assert fake.member_role("o1", "u1") is None
    assert fake.writes() == [("DELETE", "/org/o1/members/u1", None)]


async def test_revoke_rereads_roles_every_time(fake, syncer) -> None:
    await syncer.revoke(new_grant(ORG, "r1", USER))
    await syncer.revoke(new_grant(ORG, "r1", USER))
    assert [c[1] for c in fake.calls].count("/group/g1/roles") == 2


async def test_revoke_unknown_role(fake, syncer) -> None:
    with pytest.raises(RoleNotFoundError):
        await syncer.revoke(new_grant(ORG, "gone", USER))
    assert fake.writes() == []


async def test_revoke_without_default_role(fake, syncer) -> None:
    fake.roles = [r for r in fake.roles if r["publicId"] != "r2"]
    with pytest.raises(DefaultRoleMissingError):
        await syncer.revoke(new_grant(ORG, "r1", USER))
    assert fake.writes() == []


# ----------------------------
# Principal type
# ----------------------------


@pytest.mark.parametrize("slug", ["member", "r1"])
async def test_non_user_principal_is_rejected_before_any_call(fake, syncer, slug) -> None:
    team = ResourceId(resource_type="group", resource="g1")

    with pytest.raises(PrincipalNotGrantableError):
        await syncer.grant(team, new_permission_entitlement(ORG, slug))
    with pytest.raises(PrincipalNotGrantableError):
        await syncer.revoke(new_grant(ORG, slug, team))

    assert fake.calls == []
