"""
BinWatch — Document Store
==========================
Single-document inserts and updates only. No transactions, no version
tokens: concurrent writers to the same document race, last write wins.

  - MongoStore:  pymongo backend (MONGODB_URI)
  - MemoryStore: process-local backend with the same interface, used when
                 no URI is configured and by the test suite

Documents come back with the store id under "id" (string), never "_id".
"""
import copy
import functools
import logging
import threading
from datetime import datetime, timezone

from bson import ObjectId
from bson.errors import InvalidId
from pymongo import MongoClient, ReturnDocument
from pymongo.errors import DuplicateKeyError, PyMongoError

from config.settings import MONGODB_URI, MONGODB_DB, STORE_TIMEOUT_MS
from store.errors import Conflict, StoreUnavailable

log = logging.getLogger(__name__)

# collection → field that must be unique across documents
UNIQUE_KEYS = {"bin": "binId", "user": "email"}


def _now():
    return datetime.now(timezone.utc)


def serialize_doc(doc):
    if not doc:
        return doc
    doc = dict(doc)
    if "_id" in doc:
        doc["id"] = str(doc.pop("_id"))
    for k, v in list(doc.items()):
        if isinstance(v, ObjectId):
            doc[k] = str(v)
    return doc


def _to_object_id(doc_id):
    try:
        return ObjectId(str(doc_id))
    except (InvalidId, TypeError):
        return None


# ═══════════════════════════════════════════════════════════════════════════
# MONGODB
# ═══════════════════════════════════════════════════════════════════════════

def _guard(method):
    """Translate driver failures into the store error taxonomy."""
    @functools.wraps(method)
    def wrapper(self, collection, *args, **kwargs):
        try:
            return method(self, collection, *args, **kwargs)
        except DuplicateKeyError:
            raise Conflict(f"{collection}_exists")
        except PyMongoError as e:
            log.error(f"[Store] {method.__name__}({collection}) failed: {str(e)[:120]}")
            raise StoreUnavailable(str(e)[:120])
    return wrapper


class MongoStore:
    name = "mongo"

    def __init__(self, uri=MONGODB_URI, db_name=MONGODB_DB, timeout_ms=STORE_TIMEOUT_MS):
        # MongoClient connects lazily; nothing blocks until the first operation
        self._client = MongoClient(
            uri,
            tz_aware=True,
            serverSelectionTimeoutMS=timeout_ms,
            socketTimeoutMS=45000,
        )
        self.db = self._client[db_name]

    def ping(self):
        try:
            self._client.admin.command("ping")
            return True
        except PyMongoError:
            return False

    def ensure_indexes(self):
        try:
            for collection, key in UNIQUE_KEYS.items():
                self.db[collection].create_index(key, unique=True)
            self.db["bin"].create_index([("status", 1), ("level", -1)])
            self.db["report"].create_index([("status", 1), ("createdAt", -1)])
            self.db["notice"].create_index([("status", 1), ("priority", 1), ("createdAt", -1)])
        except PyMongoError as e:
            log.warning(f"[Store] Index setup skipped: {str(e)[:120]}")

    @_guard
    def insert(self, collection, doc):
        data = dict(doc)
        data.setdefault("createdAt", _now())
        data["updatedAt"] = _now()
        result = self.db[collection].insert_one(data)
        data["_id"] = result.inserted_id
        return serialize_doc(data)

    @_guard
    def find(self, collection, filter_dict=None):
        return [serialize_doc(d) for d in self.db[collection].find(filter_dict or {})]

    @_guard
    def find_one(self, collection, filter_dict):
        return serialize_doc(self.db[collection].find_one(filter_dict))

    @_guard
    def get(self, collection, doc_id):
        oid = _to_object_id(doc_id)
        if oid is None:
            return None
        return serialize_doc(self.db[collection].find_one({"_id": oid}))

    @_guard
    def update(self, collection, filter_dict, changes, upsert=False, on_insert=None):
        update = {"$set": {**changes, "updatedAt": _now()}}
        if upsert:
            update["$setOnInsert"] = {**(on_insert or {}), "createdAt": _now()}
        try:
            doc = self._find_and_update(collection, filter_dict, update, upsert)
        except DuplicateKeyError:
            # two upserts raced on a unique key; the document exists now
            doc = self._find_and_update(collection, filter_dict, update, False)
        return serialize_doc(doc)

    @_guard
    def update_by_id(self, collection, doc_id, changes):
        oid = _to_object_id(doc_id)
        if oid is None:
            return None
        doc = self._find_and_update(
            collection, {"_id": oid}, {"$set": {**changes, "updatedAt": _now()}}, False
        )
        return serialize_doc(doc)

    @_guard
    def count(self, collection, filter_dict=None):
        return self.db[collection].count_documents(filter_dict or {})

    def _find_and_update(self, collection, filter_dict, update, upsert):
        return self.db[collection].find_one_and_update(
            filter_dict, update, upsert=upsert, return_document=ReturnDocument.AFTER,
        )


# ═══════════════════════════════════════════════════════════════════════════
# IN-MEMORY
# ═══════════════════════════════════════════════════════════════════════════

class MemoryStore:
    """
    Dict-of-lists store with Mongo-like equality filters.
    `online = False` makes every operation raise StoreUnavailable.
    """
    name = "memory"

    def __init__(self):
        self._collections = {}
        self._lock = threading.Lock()
        self.online = True

    def _check(self):
        if not self.online:
            raise StoreUnavailable("memory store offline")

    def _docs(self, collection):
        return self._collections.setdefault(collection, [])

    @staticmethod
    def _matches(doc, filter_dict):
        return all(doc.get(k) == v for k, v in (filter_dict or {}).items())

    def _assert_unique(self, collection, doc, ignore=None):
        key = UNIQUE_KEYS.get(collection)
        if key is None:
            return
        for existing in self._docs(collection):
            if existing is not ignore and existing.get(key) == doc.get(key):
                raise Conflict(f"{collection}_exists")

    def ping(self):
        return self.online

    def ensure_indexes(self):
        pass

    def insert(self, collection, doc):
        self._check()
        with self._lock:
            data = copy.deepcopy(dict(doc))
            self._assert_unique(collection, data)
            data["_id"] = str(ObjectId())
            data.setdefault("createdAt", _now())
            data["updatedAt"] = _now()
            self._docs(collection).append(data)
            return serialize_doc(copy.deepcopy(data))

    def find(self, collection, filter_dict=None):
        self._check()
        with self._lock:
            return [serialize_doc(copy.deepcopy(d)) for d in self._docs(collection)
                    if self._matches(d, filter_dict)]

    def find_one(self, collection, filter_dict):
        found = self.find(collection, filter_dict)
        return found[0] if found else None

    def get(self, collection, doc_id):
        return self.find_one(collection, {"_id": str(doc_id)})

    def update(self, collection, filter_dict, changes, upsert=False, on_insert=None):
        self._check()
        with self._lock:
            for doc in self._docs(collection):
                if self._matches(doc, filter_dict):
                    doc.update(copy.deepcopy(changes))
                    doc["updatedAt"] = _now()
                    return serialize_doc(copy.deepcopy(doc))
            if not upsert:
                return None
            data = {**filter_dict, **copy.deepcopy(on_insert or {}), **copy.deepcopy(changes)}
            self._assert_unique(collection, data)
            data["_id"] = str(ObjectId())
            data["createdAt"] = data["updatedAt"] = _now()
            self._docs(collection).append(data)
            return serialize_doc(copy.deepcopy(data))

    def update_by_id(self, collection, doc_id, changes):
        return self.update(collection, {"_id": str(doc_id)}, changes)

    def count(self, collection, filter_dict=None):
        return len(self.find(collection, filter_dict))


def create_store():
    """Mongo when a URI is configured, otherwise the in-memory store."""
    if MONGODB_URI:
        log.info(f"[Store] Using MongoDB database '{MONGODB_DB}'")
        return MongoStore()
    log.warning("[Store] MONGODB_URI not set - using in-memory store")
    return MemoryStore()
