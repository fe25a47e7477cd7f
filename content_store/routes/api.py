"""
Content Store - JSON API Routes

Thin admin surface over :class:`~content_store.store.ContentStore`:
- Health check
- Containers: list, get (get-or-create), replace all items, delete
- Items: top-priority lookup, lookup by name, save, remove
- Reordering

Reads are open; writes go through the capability check stored on
``app.state.capability``.  Store errors are turned into HTTP responses by
the exception handlers registered in ``content_store.main``.
"""

import time
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Request
from loguru import logger
from pydantic import BaseModel

from content_store.auth import get_principal
from content_store.config import APP_VERSION
from content_store.models import Container, ContentItem
from content_store.store import ContentStore

router = APIRouter(prefix="/api", tags=["API"])

# Track startup time for health check
_START_TIME = time.time()


# ---------------------------------------------------------------------------
# Pydantic models
# ---------------------------------------------------------------------------
class ItemIn(BaseModel):
    name: str
    value: str = ""


class ItemUpdate(BaseModel):
    value: str
    order: Optional[int] = None


class ContainerReplace(BaseModel):
    items: List[ItemIn]


class OrderUpdate(BaseModel):
    names: List[str]


# ---------------------------------------------------------------------------
# Dependencies
# ---------------------------------------------------------------------------
def get_store(request: Request) -> ContentStore:
    return request.app.state.store


def require_write(request: Request) -> Optional[str]:
    """Reject the request unless the capability check allows its principal."""
    principal = get_principal(request)
    if request.app.state.capability(principal):
        return principal
    if principal is None:
        raise HTTPException(status_code=401, detail="Authentication required")
    logger.warning("🔒 Write denied for principal '{}'", principal)
    raise HTTPException(status_code=403, detail="Not allowed to modify content")


def _item_out(item: ContentItem) -> Dict[str, Any]:
    return {"name": item.name, "value": item.value, "order": item.order}


def _container_out(container: Container, store: ContentStore) -> Dict[str, Any]:
    items = store.list_items(container)
    return {
        "name": container.name,
        "item_count": len(items),
        "items": [_item_out(i) for i in items],
    }


# ---------------------------------------------------------------------------
# Health
# ---------------------------------------------------------------------------
@router.get("/health")
def health_check(store: ContentStore = Depends(get_store)):
    """Health check endpoint for the service."""
    return {
        "status": "ok" if store.is_open else "degraded",
        "backend": type(store.backend).__name__,
        "uptime_seconds": round(time.time() - _START_TIME, 2),
        "version": APP_VERSION,
    }


# ---------------------------------------------------------------------------
# Containers
# ---------------------------------------------------------------------------
@router.get("/containers")
def api_list_containers(store: ContentStore = Depends(get_store)):
    summaries = store.list_containers()
    return {
        "containers": [s.to_dict() for s in summaries],
        "total": len(summaries),
    }


@router.get("/containers/{name}")
def api_get_container(name: str, store: ContentStore = Depends(get_store)):
    return _container_out(store.get_container(name), store)


@router.put("/containers/{name}")
def api_replace_container(
    name: str,
    body: ContainerReplace,
    store: ContentStore = Depends(get_store),
    principal: Optional[str] = Depends(require_write),
):
    """Replace every item of a container; order follows the request body."""
    container = store.save_all(name, [(i.name, i.value) for i in body.items])
    logger.info("🧾 '{}' replaced by {}", name, principal or "anonymous")
    return _container_out(container, store)


@router.delete("/containers/{name}")
def api_delete_container(
    name: str,
    store: ContentStore = Depends(get_store),
    principal: Optional[str] = Depends(require_write),
):
    deleted = store.delete_container(name)
    return {"name": name, "deleted": deleted}


@router.put("/containers/{name}/order")
def api_set_order(
    name: str,
    body: OrderUpdate,
    store: ContentStore = Depends(get_store),
    principal: Optional[str] = Depends(require_write),
):
    return _container_out(store.set_order(name, body.names), store)


# ---------------------------------------------------------------------------
# Items
# ---------------------------------------------------------------------------
@router.get("/containers/{name}/item")
def api_get_top_item(name: str, store: ContentStore = Depends(get_store)):
    """The item currently ranked first."""
    return _item_out(store.get_top_priority_item(name))


@router.get("/containers/{name}/items/{item}")
def api_get_item(name: str, item: str, store: ContentStore = Depends(get_store)):
    return _item_out(store.get_item_by_name(name, item))


@router.put("/containers/{name}/items/{item}")
def api_save_item(
    name: str,
    item: str,
    body: ItemUpdate,
    store: ContentStore = Depends(get_store),
    principal: Optional[str] = Depends(require_write),
):
    return _item_out(store.save_item(name, item, body.value, body.order))


@router.delete("/containers/{name}/items/{item}")
def api_remove_item(
    name: str,
    item: str,
    store: ContentStore = Depends(get_store),
    principal: Optional[str] = Depends(require_write),
):
    removed = store.remove_item(name, item)
    return {"name": item, "removed": removed}
