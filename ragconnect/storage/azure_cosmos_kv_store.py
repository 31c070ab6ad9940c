"""
Key-value store on Azure Cosmos DB for MongoDB vCore.

All llama_index KV collections share one Mongo collection. Each entry is a
document ``{"id": key, "collection": <kv collection>, "value": {...}}``,
unique on (id, collection).
"""

import logging
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional, Tuple

from llama_index.core.storage.kvstore.types import (
    DEFAULT_BATCH_SIZE,
    DEFAULT_COLLECTION,
    BaseKVStore,
)
from pymongo import AsyncMongoClient, MongoClient, UpdateOne
from pymongo.errors import PyMongoError

from ..config import get_settings
from ..tools.exceptions import StorageError
from ..utils.logging import log_event, track

logger = logging.getLogger(__name__)

DEFAULT_DATABASE = "KVStoreDB"
DEFAULT_KV_COLLECTION = "KVStoreCollection"

# Stored documents never expose Mongo's _id
_PROJECTION = {"_id": 0}


@contextmanager
def _storage_errors(operation: str, **context: Any) -> Iterator[None]:
    try:
        yield
    except PyMongoError as e:
        log_event(
            "cosmos_operation_failed",
            {"operation": operation, "error": str(e), **context},
            level=logging.ERROR,
        )
        raise StorageError(f"Cosmos {operation} failed: {str(e)}") from e


class AzureCosmosVCoreKVStore(BaseKVStore):
    """
    llama_index KV store backed by a Cosmos DB for MongoDB vCore collection.

    Args:
        mongo_client: Client used by the sync methods
        db_name: Database holding the collection
        collection_name: Mongo collection shared by every KV collection
        async_mongo_client: Client used by the async methods; they raise
            StorageError when it is missing

    Example:
        >>> store = AzureCosmosVCoreKVStore(MongoClient(uri), db_name="rag")
        >>> store.put("node-1", {"text": "hello"}, collection="docstore/data")
        >>> store.get("node-1", collection="docstore/data")
        {'text': 'hello'}
    """

    def __init__(
        self,
        mongo_client: MongoClient,
        db_name: str = DEFAULT_DATABASE,
        collection_name: str = DEFAULT_KV_COLLECTION,
        async_mongo_client: Optional[AsyncMongoClient] = None,
    ):
        if mongo_client is None:
            raise StorageError("A MongoClient is required")

        self.db_name = db_name
        self.collection_name = collection_name
        self._client = mongo_client
        self._async_client = async_mongo_client
        self._collection = mongo_client[db_name][collection_name]
        self._async_collection = (
            async_mongo_client[db_name][collection_name]
            if async_mongo_client is not None
            else None
        )

    @classmethod
    @track(operation="cosmos_kv_store_from_connection_string", include_args=False)
    def from_connection_string(
        cls,
        connection_string: str,
        db_name: str = DEFAULT_DATABASE,
        collection_name: str = DEFAULT_KV_COLLECTION,
    ) -> "AzureCosmosVCoreKVStore":
        """Create sync and async clients for a connection string."""
        app_name = get_settings().mongo_app_name
        return cls(
            mongo_client=MongoClient(connection_string, appname=app_name),
            db_name=db_name,
            collection_name=collection_name,
            async_mongo_client=AsyncMongoClient(connection_string, appname=app_name),
        )

    @property
    def client(self) -> MongoClient:
        return self._client

    @property
    def async_client(self) -> Optional[AsyncMongoClient]:
        return self._async_client

    def _require_async_collection(self):
        if self._async_collection is None:
            raise StorageError(
                "AzureCosmosVCoreKVStore was created without an AsyncMongoClient"
            )
        return self._async_collection

    @staticmethod
    def _filter(key: str, collection: str) -> Dict[str, str]:
        return {"id": key, "collection": collection}

    @staticmethod
    def _document(key: str, val: dict, collection: str) -> Dict[str, Any]:
        return {"id": key, "collection": collection, "value": val}

    def _upserts(
        self, kv_pairs: List[Tuple[str, dict]], collection: str
    ) -> List[UpdateOne]:
        return [
            UpdateOne(
                self._filter(key, collection),
                {"$set": self._document(key, val, collection)},
                upsert=True,
            )
            for key, val in kv_pairs
        ]

    def put(self, key: str, val: dict, collection: str = DEFAULT_COLLECTION) -> None:
        with _storage_errors("put", collection=collection):
            self._collection.update_one(
                self._filter(key, collection),
                {"$set": self._document(key, val, collection)},
                upsert=True,
            )

    async def aput(
        self, key: str, val: dict, collection: str = DEFAULT_COLLECTION
    ) -> None:
        async_collection = self._require_async_collection()
        with _storage_errors("aput", collection=collection):
            await async_collection.update_one(
                self._filter(key, collection),
                {"$set": self._document(key, val, collection)},
                upsert=True,
            )

    def put_all(
        self,
        kv_pairs: List[Tuple[str, dict]],
        collection: str = DEFAULT_COLLECTION,
        batch_size: int = DEFAULT_BATCH_SIZE,
    ) -> None:
        """Upsert pairs with one bulk write per batch."""
        with _storage_errors("put_all", collection=collection):
            for start in range(0, len(kv_pairs), batch_size):
                batch = kv_pairs[start : start + batch_size]
                self._collection.bulk_write(
                    self._upserts(batch, collection), ordered=False
                )

        log_event(
            "cosmos_put_all_completed",
            {"collection": collection, "count": len(kv_pairs)},
            level=logging.DEBUG,
        )

    async def aput_all(
        self,
        kv_pairs: List[Tuple[str, dict]],
        collection: str = DEFAULT_COLLECTION,
        batch_size: int = DEFAULT_BATCH_SIZE,
    ) -> None:
        async_collection = self._require_async_collection()
        with _storage_errors("aput_all", collection=collection):
            for start in range(0, len(kv_pairs), batch_size):
                batch = kv_pairs[start : start + batch_size]
                await async_collection.bulk_write(
                    self._upserts(batch, collection), ordered=False
                )

        log_event(
            "cosmos_put_all_completed",
            {"collection": collection, "count": len(kv_pairs)},
            level=logging.DEBUG,
        )

    def get(self, key: str, collection: str = DEFAULT_COLLECTION) -> Optional[dict]:
        with _storage_errors("get", collection=collection):
            document = self._collection.find_one(
                self._filter(key, collection), _PROJECTION
            )
        return document["value"] if document else None

    async def aget(
        self, key: str, collection: str = DEFAULT_COLLECTION
    ) -> Optional[dict]:
        async_collection = self._require_async_collection()
        with _storage_errors("aget", collection=collection):
            document = await async_collection.find_one(
                self._filter(key, collection), _PROJECTION
            )
        return document["value"] if document else None

    def get_all(self, collection: str = DEFAULT_COLLECTION) -> Dict[str, dict]:
        with _storage_errors("get_all", collection=collection):
            documents = list(
                self._collection.find({"collection": collection}, _PROJECTION)
            )
        return {document["id"]: document["value"] for document in documents}

    async def aget_all(self, collection: str = DEFAULT_COLLECTION) -> Dict[str, dict]:
        async_collection = self._require_async_collection()
        results: Dict[str, dict] = {}
        with _storage_errors("aget_all", collection=collection):
            async for document in async_collection.find(
                {"collection": collection}, _PROJECTION
            ):
                results[document["id"]] = document["value"]
        return results

    def delete(self, key: str, collection: str = DEFAULT_COLLECTION) -> bool:
        with _storage_errors("delete", collection=collection):
            result = self._collection.delete_one(self._filter(key, collection))
        return result.deleted_count > 0

    async def adelete(self, key: str, collection: str = DEFAULT_COLLECTION) -> bool:
        async_collection = self._require_async_collection()
        with _storage_errors("adelete", collection=collection):
            result = await async_collection.delete_one(self._filter(key, collection))
        return result.deleted_count > 0

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}"
            f"(db_name={self.db_name}, collection_name={self.collection_name})"
        )
