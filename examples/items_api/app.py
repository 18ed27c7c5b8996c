"""Items API — a small JSON CRUD service.

Demonstrates typed path and query parameters documented in docstrings,
a body parameter, an ``auth`` middleware category, and an error
middleware that stamps every error response.

Run behind any ASGI server::

    uvicorn app:router

or deploy ``handler`` as an AWS Lambda proxy function.
"""

import threading
from dataclasses import dataclass

from edgerouter import ClientError, EdgeRouter, Request, lambda_handler

router = EdgeRouter()


@dataclass(frozen=True, slots=True)
class Item:
    id: int
    title: str
    done: bool


_items: dict[int, Item] = {}
_next_id = 1
_lock = threading.Lock()


def _get_next_id() -> int:
    global _next_id
    with _lock:
        n = _next_id
        _next_id += 1
        return n


def _to_dict(item: Item) -> dict:
    return {"id": item.id, "title": item.title, "done": item.done}


def _find(item_id: int) -> Item:
    with _lock:
        item = _items.get(item_id)
    if item is None:
        raise ClientError(f"No item {item_id}", 404)
    return item


# ---------------------------------------------------------------------------
# Middleware
# ---------------------------------------------------------------------------


def require_token(request: Request) -> Request:
    if request.headers.get("authorization") != "Bearer letmein":
        raise ClientError("Unauthorized", 401)
    return request


def stamp_errors(response):
    return response.with_header("X-Items-Error", "1")


router.use(require_token, "auth")
router.use(stamp_errors, "error")


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------


async def list_items(limit, offset):
    """List items.

    @param where:query type:number name:limit optional | Page size (1-100)
    @param where:query type:number name:offset optional | Items to skip
    """
    limit = min(max(int(limit or 50), 1), 100)
    offset = max(int(offset or 0), 0)
    with _lock:
        all_items = sorted(_items.values(), key=lambda x: x.id)
    page = all_items[offset : offset + limit]
    return {
        "data": [_to_dict(i) for i in page],
        "meta": {"limit": limit, "offset": offset, "total": len(all_items)},
    }


def get_item(item_id):
    """Get a single item.

    @param where:path type:number name:item_id
    """
    return {"data": _to_dict(_find(item_id))}


async def create_item(item):
    """Create an item.

    @param where:body type:object name:item contentType:application/json | {"title": "..."}
    @category auth
    """
    title = str(item.get("title", "")).strip() if isinstance(item, dict) else ""
    if not title:
        raise ClientError("title is required", 422)
    with _lock:
        created = Item(id=_get_next_id(), title=title, done=False)
        _items[created.id] = created
    return {"data": _to_dict(created)}


def delete_item(item_id):
    """Delete an item.

    @param where:path type:number name:item_id
    @category auth
    """
    item = _find(item_id)
    with _lock:
        _items.pop(item.id, None)
    return None


router.get("/api/items", list_items)
router.post("/api/items", create_item)
router.get("/api/items/:item_id", get_item)
router.delete("/api/items/:item_id", delete_item)
router.json("GET", "/health", {"status": "ok"})

handler = lambda_handler(router)
