from snyk_sync.domain.entities.resource import ResourceType

# The Snyk group the connector is scoped to.
GROUP_RESOURCE_TYPE = ResourceType(id="group", display_name="Group", traits=["group"])

# Organizations inside the group.
ORG_RESOURCE_TYPE = ResourceType(id="org", display_name="Organization", traits=["group"])

# Group members. Users carry no entitlements of their own.
USER_RESOURCE_TYPE = ResourceType(
    id="user",
    display_name="User",
    traits=["user"],
    skip_entitlements_and_grants=True,
)
