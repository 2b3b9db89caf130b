"""
Database Helper Functions

Order storage behind a small repository interface. Orders live in memory
unless DATABASE_URL and DATABASE_NAME are set, in which case they are kept
in MongoDB. Orders are never deleted; terminal statuses keep the history.
"""

from datetime import datetime, timezone
from typing import Dict, List, Optional

from pymongo import MongoClient

import config
from menu import MenuCatalog
from schemas import MenuItem, Order

_client = None
db = None

if config.DATABASE_URL and config.DATABASE_NAME:
    _client = MongoClient(config.DATABASE_URL)
    db = _client[config.DATABASE_NAME]


def _ensure_db():
    if db is None:
        raise Exception("Database not available. Check DATABASE_URL and DATABASE_NAME environment variables.")


# Document helpers

def upsert_document(collection_name: str, _id: str, payload: dict) -> None:
    _ensure_db()
    now = datetime.now(timezone.utc)
    document = dict(payload)
    document["updated_at"] = now
    db[collection_name].update_one(
        {"_id": _id},
        {"$set": document, "$setOnInsert": {"created_at": now}},
        upsert=True,
    )


def get_document_by_id(collection_name: str, _id: str) -> Optional[dict]:
    _ensure_db()
    doc = db[collection_name].find_one({"_id": _id})
    return serialize_doc(doc) if doc else None


def get_documents(collection_name: str, filter_dict: Optional[dict] = None, sort: Optional[list] = None) -> List[dict]:
    _ensure_db()
    cursor = db[collection_name].find(filter_dict or {})
    if sort:
        cursor = cursor.sort(sort)
    return [serialize_doc(doc) for doc in cursor]


# Utility

def serialize_doc(doc: Optional[dict]) -> Optional[dict]:
    if not doc:
        return None
    d = dict(doc)
    d.pop("created_at", None)
    d.pop("updated_at", None)
    if "_id" in d:
        d["id"] = str(d.pop("_id"))
    return d


# Repositories

class InMemoryOrderRepository:
    """Orders keyed by id, kept in insertion order."""

    def __init__(self):
        self._orders: Dict[str, Order] = {}

    def add(self, order: Order) -> Order:
        self._orders[order.id] = order.model_copy(deep=True)
        return order

    def get(self, order_id: str) -> Optional[Order]:
        order = self._orders.get(order_id)
        return order.model_copy(deep=True) if order else None

    def save(self, order: Order) -> Order:
        self._orders[order.id] = order.model_copy(deep=True)
        return order

    def list(self) -> List[Order]:
        return [order.model_copy(deep=True) for order in self._orders.values()]


class MongoOrderRepository:
    collection = "order"

    def add(self, order: Order) -> Order:
        return self.save(order)

    def get(self, order_id: str) -> Optional[Order]:
        doc = get_document_by_id(self.collection, order_id)
        return Order(**doc) if doc else None

    def save(self, order: Order) -> Order:
        payload = order.model_dump(mode="json", exclude={"id"})
        upsert_document(self.collection, order.id, payload)
        return order

    def list(self) -> List[Order]:
        return [Order(**doc) for doc in get_documents(self.collection, sort=[["timestamp", 1]])]


class MongoMenuCatalog(MenuCatalog):
    """Menu catalog read from the "menuitem" collection."""

    collection = "menuitem"

    def resolve(self, menu_id: str) -> Optional[MenuItem]:
        doc = get_document_by_id(self.collection, menu_id)
        return MenuItem(**doc) if doc else None

    def upsert(self, item: MenuItem) -> None:
        upsert_document(self.collection, item.id, item.model_dump(mode="json", exclude={"id"}))

    def __len__(self) -> int:
        _ensure_db()
        return db[self.collection].count_documents({})


def get_order_repository():
    if db is not None:
        return MongoOrderRepository()
    return InMemoryOrderRepository()
