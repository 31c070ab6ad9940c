"""
llama_index storage backends for Azure Cosmos DB for MongoDB vCore.
"""

from .azure_cosmos_doc_store import AzureCosmosVCoreDocumentStore
from .azure_cosmos_index_store import AzureCosmosVCoreIndexStore
from .azure_cosmos_kv_store import AzureCosmosVCoreKVStore

__all__ = [
    "AzureCosmosVCoreKVStore",
    "AzureCosmosVCoreIndexStore",
    "AzureCosmosVCoreDocumentStore",
]
