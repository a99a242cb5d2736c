"""Record and operations routes."""

from typing import Any

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse, JSONResponse, PlainTextResponse, Response

from rostercache.core.entities.collection import Collection
from rostercache.core.entities.record import QuizRecord
from rostercache.core.exceptions import ValidationError
from rostercache.core.services.cache_coordinator import CacheCoordinator
from rostercache.core.services.record_service import RecordService

NOT_JSON = (
    "Invalid request. data must be json. "
    "Make sure to set Content-Type header to application/json"
)

records_router = APIRouter()
ops_router = APIRouter()


def get_service(request: Request) -> RecordService:
    return request.app.state.service


def get_coordinator(request: Request) -> CacheCoordinator:
    return request.app.state.service.coordinator


async def read_json(request: Request) -> Any:
    """Parse a JSON request body.

    Raises:
        ValidationError: If the body is not declared or not parseable as JSON.
    """
    if "application/json" not in request.headers.get("content-type", ""):
        raise ValidationError(NOT_JSON)
    try:
        return await request.json()
    except ValueError as e:
        raise ValidationError(NOT_JSON) from e


@ops_router.get("/", response_class=PlainTextResponse)
async def welcome() -> str:
    return "Welcome to quiz/goal API!"


@ops_router.get("/health")
async def health_check(
    coordinator: CacheCoordinator = Depends(get_coordinator),
) -> dict[str, Any]:
    store_ping = getattr(coordinator.store, "ping", None)
    backend_ping = getattr(coordinator.backend, "ping", None)
    store_ok = await store_ping() if store_ping else True
    redis_ok = await backend_ping() if backend_ping else True

    return {
        "status": "healthy" if store_ok else "unhealthy",
        "store": "healthy" if store_ok else "unhealthy",
        "redis": "healthy" if redis_ok else "unhealthy",
        "cache_enabled": coordinator.config.enabled,
    }


@ops_router.get("/cache/stats")
async def cache_stats(
    coordinator: CacheCoordinator = Depends(get_coordinator),
) -> dict[str, Any]:
    return {
        "stats": coordinator.stats,
        "populated": [c.value for c in Collection if coordinator.local.get(c) is not None],
        "config": {
            "enabled": coordinator.config.enabled,
            "key_prefix": coordinator.config.key_prefix,
        },
    }


@ops_router.post("/cache/clear")
async def clear_cache(
    coordinator: CacheCoordinator = Depends(get_coordinator),
) -> dict[str, str]:
    await coordinator.clear()
    return {"status": "cleared"}


@records_router.post("/goal/uploadJSON", response_class=PlainTextResponse)
async def upload_goals(
    request: Request,
    service: RecordService = Depends(get_service),
) -> str:
    payloads = await read_json(request)
    count = await service.bulk_create(Collection.GOAL, payloads)
    return f"users added successfully. count={count}"


@records_router.post("/{collection}")
async def create_record(
    collection: Collection,
    request: Request,
    service: RecordService = Depends(get_service),
) -> Response:
    payload = await read_json(request)
    await service.create(collection, payload)
    return PlainTextResponse("user added.", status_code=201)


@records_router.get("/{collection}")
async def list_records(
    collection: Collection,
    service: RecordService = Depends(get_service),
) -> Response:
    snapshot = await service.list_records(collection)
    return JSONResponse(snapshot.to_list())


@records_router.get("/{collection}/render", response_class=HTMLResponse)
async def render_records(
    collection: Collection,
    service: RecordService = Depends(get_service),
) -> str:
    return await service.render(collection)


@records_router.get("/{collection}/{email}")
async def get_record(
    collection: Collection,
    email: str,
    service: RecordService = Depends(get_service),
) -> Response:
    record = await service.get(collection, email)
    if isinstance(record, QuizRecord):
        return PlainTextResponse(record.to_payload())
    return JSONResponse(record.to_payload())


@records_router.delete("/{collection}/{email}", response_class=PlainTextResponse)
async def delete_record(
    collection: Collection,
    email: str,
    service: RecordService = Depends(get_service),
) -> str:
    await service.delete(collection, email)
    return "user deleted"
