from fastapi import APIRouter, Request

from snyk_sync.connector import SnykConnector
from snyk_sync.domain.entities.sync import (
    GrantRequest,
    ListRequest,
    ResourceRequest,
    RevokeRequest,
)
from snyk_sync.syncers.resource_syncer import ResourceSyncer
from snyk_sync.utils.response import success
from snyk_sync.configs.logging_config import get_logger

log = get_logger(__name__)

router = APIRouter(tags=["sync"])


def _connector(request: Request) -> SnykConnector:
    return request.app.state.connector


def _syncer(request: Request, resource_type: str) -> ResourceSyncer:
    return _connector(request).syncer(resource_type)


@router.get("/connector/metadata")
async def metadata(request: Request) -> dict:
    return success(_connector(request).metadata())


@router.post("/connector/validate")
async def validate(request: Request) -> dict:
    await _connector(request).validate()
    return success({"valid": True}, message="credentials valid")


@router.post("/sync/{resource_type}/list")
async def list_resources(request: Request, resource_type: str, body: ListRequest) -> dict:
    log.info(
        "sync.list.start request_id=%s resource_type=%s parent=%s has_token=%s",
        body.request_id,
        resource_type,
        body.parent_resource_id,
        bool(body.page_token),
    )
    resources, next_token = await _syncer(request, resource_type).list(
        body.parent_resource_id, body.page_token
    )
    log.info(
        "sync.list.done request_id=%s resource_type=%s count=%s",
        body.request_id,
        resource_type,
        len(resources),
    )
    return success(
        {
            "resources": [r.model_dump(mode="json") for r in resources],
            "next_page_token": next_token,
        }
    )


@router.post("/sync/{resource_type}/entitlements")
async def list_entitlements(request: Request, resource_type: str, body: ResourceRequest) -> dict:
    log.info(
        "sync.entitlements.start request_id=%s resource=%s", body.request_id, body.resource.id
    )
    entitlements = await _syncer(request, resource_type).entitlements(body.resource)
    return success({"entitlements": [e.model_dump(mode="json") for e in entitlements]})


@router.post("/sync/{resource_type}/grants")
async def list_grants(request: Request, resource_type: str, body: ResourceRequest) -> dict:
    log.info("sync.grants.start request_id=%s resource=%s", body.request_id, body.resource.id)
    grants = await _syncer(request, resource_type).grants(body.resource)
    return success({"grants": [g.model_dump(mode="json") for g in grants]})


@router.post("/sync/{resource_type}/grant")
async def grant(request: Request, resource_type: str, body: GrantRequest) -> dict:
    await _syncer(request, resource_type).grant(body.principal, body.entitlement)
    return success(None, message="entitlement granted")


@router.post("/sync/{resource_type}/revoke")
async def revoke(request: Request, resource_type: str, body: RevokeRequest) -> dict:
    await _syncer(request, resource_type).revoke(body.grant)
    return success(None, message="grant revoked")
