"""
Document store adapters.

The application only needs keyed documents grouped in collections plus
equality queries, so two interchangeable backends are provided: one JSON file
per document on local disk, and MongoDB.
"""
import os
import json
import time
import uuid
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional
from urllib.parse import quote, unquote

from ...errors import StoreError

logger = logging.getLogger("document_store")

Document = Dict[str, Any]


def new_document_id() -> str:
    return uuid.uuid4().hex[:20]


def now_timestamp() -> float:
    return time.time()


class DocumentStore(ABC):
    """Minimal collection/document interface used by repositories."""

    @abstractmethod
    def get(self, collection: str, doc_id: str) -> Optional[Document]:
        """Return the document with its "id" field, or None."""

    @abstractmethod
    def set(self, collection: str, doc_id: str, data: Document) -> None:
        """Create or overwrite a document under a caller-chosen id."""

    @abstractmethod
    def add(self, collection: str, data: Document) -> str:
        """Insert a document under a generated id and return the id."""

    @abstractmethod
    def delete(self, collection: str, doc_id: str) -> bool:
        """Delete a document. Returns False when it did not exist."""

    @abstractmethod
    def find(self, collection: str, field: str, value: Any) -> List[Document]:
        """All documents whose field equals value."""

    @abstractmethod
    def list(self, collection: str) -> List[Document]:
        """All documents in a collection."""


class JsonDocumentStore(DocumentStore):
    """Stores each document as <base_dir>/<collection>/<id>.json."""

    def __init__(self, base_dir: str):
        self.base_dir = base_dir
        os.makedirs(self.base_dir, exist_ok=True)

    def _collection_dir(self, collection: str) -> str:
        path = os.path.join(self.base_dir, collection)
        os.makedirs(path, exist_ok=True)
        return path

    def _doc_path(self, collection: str, doc_id: str) -> str:
        if not doc_id:
            raise StoreError("Document id must not be empty")
        return os.path.join(self._collection_dir(collection), quote(doc_id, safe="@.-_+") + ".json")

    def _read(self, path: str) -> Optional[Document]:
        try:
            with open(path, "r", encoding="utf-8") as f:
                return json.load(f)
        except FileNotFoundError:
            return None
        except (OSError, ValueError) as e:
            raise StoreError(f"Failed to read {path}: {e}") from e

    def get(self, collection: str, doc_id: str) -> Optional[Document]:
        data = self._read(self._doc_path(collection, doc_id))
        if data is None:
            return None
        data["id"] = doc_id
        return data

    def set(self, collection: str, doc_id: str, data: Document) -> None:
        path = self._doc_path(collection, doc_id)
        payload = {k: v for k, v in data.items() if k != "id"}
        tmp_path = path + ".tmp"
        try:
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump(payload, f, indent=2, ensure_ascii=False)
            os.replace(tmp_path, path)
        except (OSError, TypeError, ValueError) as e:
            raise StoreError(f"Failed to write {collection}/{doc_id}: {e}") from e
        logger.debug("Saved %s/%s", collection, doc_id)

    def add(self, collection: str, data: Document) -> str:
        doc_id = new_document_id()
        self.set(collection, doc_id, data)
        return doc_id

    def delete(self, collection: str, doc_id: str) -> bool:
        path = self._doc_path(collection, doc_id)
        try:
            os.remove(path)
        except FileNotFoundError:
            return False
        except OSError as e:
            raise StoreError(f"Failed to delete {collection}/{doc_id}: {e}") from e
        logger.debug("Deleted %s/%s", collection, doc_id)
        return True

    def list(self, collection: str) -> List[Document]:
        docs = []
        directory = self._collection_dir(collection)
        for filename in sorted(os.listdir(directory)):
            if not filename.endswith(".json"):
                continue
            data = self._read(os.path.join(directory, filename))
            if data is None:
                continue
            data["id"] = unquote(filename[:-len(".json")])
            docs.append(data)
        return docs

    def find(self, collection: str, field: str, value: Any) -> List[Document]:
        return [d for d in self.list(collection) if d.get(field) == value]


class MongoDocumentStore(DocumentStore):
    """MongoDB backend; documents are keyed by string _id."""

    def __init__(self, uri: str, db_name: str, client=None):
        if client is None:
            from pymongo import MongoClient
            client = MongoClient(uri, serverSelectionTimeoutMS=5000, connectTimeoutMS=10000)
        self.client = client
        self.db = client[db_name]
        logger.info("Using MongoDB database '%s'", db_name)

    @staticmethod
    def _normalize(doc: Optional[Document]) -> Optional[Document]:
        if doc is None:
            return None
        doc = dict(doc)
        if "_id" in doc:
            doc["id"] = str(doc.pop("_id"))
        return doc

    def _run(self, description: str, operation):
        from pymongo.errors import PyMongoError
        try:
            return operation()
        except PyMongoError as e:
            logger.error("MongoDB %s failed: %s", description, e)
            raise StoreError(f"Database error during {description}: {e}") from e

    def get(self, collection: str, doc_id: str) -> Optional[Document]:
        return self._normalize(self._run("get", lambda: self.db[collection].find_one({"_id": doc_id})))

    def set(self, collection: str, doc_id: str, data: Document) -> None:
        payload = {k: v for k, v in data.items() if k not in ("id", "_id")}
        self._run("set", lambda: self.db[collection].replace_one({"_id": doc_id}, payload, upsert=True))

    def add(self, collection: str, data: Document) -> str:
        doc_id = new_document_id()
        payload = {k: v for k, v in data.items() if k not in ("id", "_id")}
        payload["_id"] = doc_id
        self._run("insert", lambda: self.db[collection].insert_one(payload))
        return doc_id

    def delete(self, collection: str, doc_id: str) -> bool:
        result = self._run("delete", lambda: self.db[collection].delete_one({"_id": doc_id}))
        return result.deleted_count > 0

    def find(self, collection: str, field: str, value: Any) -> List[Document]:
        docs = self._run("find", lambda: list(self.db[collection].find({field: value})))
        return [self._normalize(d) for d in docs]

    def list(self, collection: str) -> List[Document]:
        docs = self._run("list", lambda: list(self.db[collection].find()))
        return [self._normalize(d) for d in docs]


def create_document_store(config) -> DocumentStore:
    """Build the store selected by config.db_backend."""
    if config.db_backend == "mongo":
        return MongoDocumentStore(config.mongo_uri, config.mongo_db_name)
    return JsonDocumentStore(config.db_dir)
