"""
llama_index index store on Azure Cosmos DB for MongoDB vCore.
"""

from typing import Optional

from llama_index.core.storage.index_store.keyval_index_store import KVIndexStore
from pymongo import AsyncMongoClient, MongoClient

from ..utils.logging import log_event
from .azure_cosmos_kv_store import AzureCosmosVCoreKVStore

DEFAULT_DATABASE = "IndexStoreDB"
DEFAULT_COLLECTION = "IndexStoreCollection"


class AzureCosmosVCoreIndexStore(KVIndexStore):
    """
    Index store whose index structs live in a Cosmos vCore collection.

    Args:
        azure_cosmos_vcore_kvstore: KV store holding the index structs
        namespace: Prefix for the KV collection names

    Example:
        >>> index_store = AzureCosmosVCoreIndexStore.from_connection_string(
        ...     "mongodb+srv://...", db_name="rag", collection_name="indexes"
        ... )
        >>> storage_context = StorageContext.from_defaults(index_store=index_store)
    """

    def __init__(
        self,
        azure_cosmos_vcore_kvstore: AzureCosmosVCoreKVStore,
        namespace: Optional[str] = None,
    ):
        super().__init__(azure_cosmos_vcore_kvstore, namespace=namespace)
        self.kvstore = azure_cosmos_vcore_kvstore

    @classmethod
    def from_mongo_client(
        cls,
        mongo_client: MongoClient,
        db_name: str = DEFAULT_DATABASE,
        collection_name: str = DEFAULT_COLLECTION,
        async_mongo_client: Optional[AsyncMongoClient] = None,
    ) -> "AzureCosmosVCoreIndexStore":
        """Wrap existing client(s); the namespace is "{db_name}.{collection_name}"."""
        kvstore = AzureCosmosVCoreKVStore(
            mongo_client=mongo_client,
            db_name=db_name,
            collection_name=collection_name,
            async_mongo_client=async_mongo_client,
        )
        return cls(kvstore, namespace=f"{db_name}.{collection_name}")

    @classmethod
    def from_connection_string(
        cls,
        connection_string: str,
        db_name: str = DEFAULT_DATABASE,
        collection_name: str = DEFAULT_COLLECTION,
    ) -> "AzureCosmosVCoreIndexStore":
        """Create the clients from a connection string."""
        kvstore = AzureCosmosVCoreKVStore.from_connection_string(
            connection_string, db_name=db_name, collection_name=collection_name
        )
        log_event(
            "cosmos_index_store_created",
            {"db_name": db_name, "collection_name": collection_name},
        )
        return cls(kvstore, namespace=f"{db_name}.{collection_name}")
