"""
Row-level change notifications for products and categories.

``MongoChangeFeed`` turns MongoDB change streams into plain payloads
(``{"eventType", "new", "old"}``); ``ChangeFeedListener`` validates those
payloads and fans them out as typed events to registered callbacks.
"""
import asyncio
import inspect
import logging
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, Generic, List, Optional, Protocol, TypeVar, Union

from pydantic import BaseModel, ValidationError

from app.schemas.category import CategoryRecord
from app.schemas.product import ProductRecord

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)

PRODUCTS_TABLE = "products"
CATEGORIES_TABLE = "categories"


class ChangeType(str, Enum):
    INSERT = "Insert"
    UPDATE = "Update"
    DELETE = "Delete"


class ChangeEvent(BaseModel, Generic[T]):
    event_type: ChangeType
    new: Optional[T] = None
    old: Optional[Dict[str, Any]] = None


ProductChange = ChangeEvent[ProductRecord]
CategoryChange = ChangeEvent[CategoryRecord]

Payload = Dict[str, Any]
PayloadHandler = Callable[[Payload], Awaitable[None]]
Callback = Callable[[Any], Union[None, Awaitable[None]]]
Unsubscribe = Callable[[], None]


class ChangeFeed(Protocol):
    def subscribe(self, table: str, handler: PayloadHandler) -> Unsubscribe: ...


# ==========================================
# MONGODB CHANGE STREAMS
# ==========================================

_OPERATIONS = {
    "insert": ChangeType.INSERT,
    "update": ChangeType.UPDATE,
    "replace": ChangeType.UPDATE,
    "delete": ChangeType.DELETE,
}


def _public(doc: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    if doc is None:
        return None
    doc = dict(doc)
    if "_id" in doc:
        doc["id"] = doc.pop("_id")
    return doc


def to_payload(change: Dict[str, Any]) -> Optional[Payload]:
    """Map a raw change-stream document; None for operations we ignore."""
    event_type = _OPERATIONS.get(change.get("operationType"))
    if event_type is None:
        return None
    return {
        "eventType": event_type.value,
        "new": _public(change.get("fullDocument")),
        "old": _public(change.get("documentKey")),
    }


class MongoChangeFeed:
    """Requires a replica set; a standalone server rejects ``watch``."""

    def __init__(self, database):
        self.database = database

    def subscribe(self, table: str, handler: PayloadHandler) -> Unsubscribe:
        task = asyncio.get_running_loop().create_task(self._watch(table, handler), name=f"watch-{table}")

        def cancel() -> None:
            task.cancel()

        return cancel

    async def _watch(self, table: str, handler: PayloadHandler) -> None:
        try:
            async with self.database[table].watch(full_document="updateLookup") as stream:
                logger.info("Watching %s for changes", table)
                async for change in stream:
                    payload = to_payload(change)
                    if payload is not None:
                        await handler(payload)
        except asyncio.CancelledError:
            logger.info("Stopped watching %s", table)
            raise
        except Exception:
            logger.exception("Change stream on %s stopped", table)


# ==========================================
# LISTENER
# ==========================================

class _Registration:
    def __init__(self, on_product: Optional[Callback], on_category: Optional[Callback]):
        self.on_product = on_product
        self.on_category = on_category


class ChangeFeedListener:

    def __init__(self, feed: ChangeFeed):
        self.feed = feed
        self._registrations: List[_Registration] = []
        self._feed_unsubscribers: List[Unsubscribe] = []

    def subscribe(self, on_product_change: Optional[Callback] = None,
                  on_category_change: Optional[Callback] = None) -> Unsubscribe:
        """
        Register callbacks for product and category changes.

        The returned function removes this registration; calling it again is
        harmless. When the feed cannot be set up a no-op is returned.
        """
        if not self._feed_unsubscribers:
            try:
                self._open_feed()
            except Exception:
                logger.exception("Could not subscribe to the change feed")
                return lambda: None

        registration = _Registration(on_product_change, on_category_change)
        self._registrations.append(registration)
        done = False

        def unsubscribe() -> None:
            nonlocal done
            if done:
                return
            done = True
            if registration in self._registrations:
                self._registrations.remove(registration)
            if not self._registrations:
                self._close_feed()

        return unsubscribe

    def _open_feed(self) -> None:
        opened: List[Unsubscribe] = []
        try:
            opened.append(self.feed.subscribe(PRODUCTS_TABLE, self._on_product_payload))
            opened.append(self.feed.subscribe(CATEGORIES_TABLE, self._on_category_payload))
        except Exception:
            for close in opened:
                close()
            raise
        self._feed_unsubscribers = opened

    def _close_feed(self) -> None:
        closers, self._feed_unsubscribers = self._feed_unsubscribers, []
        for close in closers:
            try:
                close()
            except Exception:
                logger.exception("Error while closing change feed subscription")

    async def _on_product_payload(self, payload: Payload) -> None:
        event = self._parse(ProductChange, payload)
        if event is not None:
            await self._deliver([r.on_product for r in self._registrations], event)

    async def _on_category_payload(self, payload: Payload) -> None:
        event = self._parse(CategoryChange, payload)
        if event is not None:
            await self._deliver([r.on_category for r in self._registrations], event)

    @staticmethod
    def _parse(model, payload: Payload):
        if not isinstance(payload, dict):
            logger.warning("Dropping change payload of type %s", type(payload).__name__)
            return None
        try:
            return model.model_validate({
                "event_type": payload.get("eventType"),
                "new": payload.get("new") or None,
                "old": payload.get("old") or None,
            })
        except ValidationError as e:
            logger.warning("Dropping malformed change payload: %s", e)
            return None

    @staticmethod
    async def _deliver(callbacks: List[Optional[Callback]], event: ChangeEvent) -> None:
        for callback in callbacks:
            if callback is None:
                continue
            try:
                result = callback(event)
                if inspect.isawaitable(result):
                    await result
            except Exception:
                logger.exception("Change callback %r failed", callback)
