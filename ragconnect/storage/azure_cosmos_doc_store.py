"""
llama_index document store on Azure Cosmos DB for MongoDB vCore.
"""

from typing import Optional

from llama_index.core.storage.docstore.keyval_docstore import KVDocumentStore
from llama_index.core.storage.kvstore.types import DEFAULT_BATCH_SIZE
from pymongo import AsyncMongoClient, MongoClient

from ..utils.logging import log_event
from .azure_cosmos_kv_store import AzureCosmosVCoreKVStore

DEFAULT_DATABASE = "DocumentStoreDB"
DEFAULT_COLLECTION = "DocumentStoreCollection"


class AzureCosmosVCoreDocumentStore(KVDocumentStore):
    """Document store whose nodes live in a Cosmos vCore collection."""

    def __init__(
        self,
        azure_cosmos_vcore_kvstore: AzureCosmosVCoreKVStore,
        namespace: Optional[str] = None,
        batch_size: int = DEFAULT_BATCH_SIZE,
    ):
        super().__init__(
            azure_cosmos_vcore_kvstore, namespace=namespace, batch_size=batch_size
        )
        self.kvstore = azure_cosmos_vcore_kvstore

    @classmethod
    def from_mongo_client(
        cls,
        mongo_client: MongoClient,
        db_name: str = DEFAULT_DATABASE,
        collection_name: str = DEFAULT_COLLECTION,
        async_mongo_client: Optional[AsyncMongoClient] = None,
    ) -> "AzureCosmosVCoreDocumentStore":
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
    ) -> "AzureCosmosVCoreDocumentStore":
        kvstore = AzureCosmosVCoreKVStore.from_connection_string(
            connection_string, db_name=db_name, collection_name=collection_name
        )
        log_event(
            "cosmos_document_store_created",
            {"db_name": db_name, "collection_name": collection_name},
        )
        return cls(kvstore, namespace=f"{db_name}.{collection_name}")
