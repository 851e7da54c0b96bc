"""
Indexing service: embeds catalog records and feeds them to the vector store,
and answers text queries for the chat layer.
"""

from concurrent.futures import ThreadPoolExecutor
from dataclasses import replace
from typing import Dict, List, Optional

from ..util.logging import logger
from ..vector.embeddings import IEmbeddingProvider
from ..vector.index import IVectorStore
from ..vector.types import QueryResult, VectorRecord
from .config import INDEX_CONCURRENCY, SEARCH_DEFAULT_TOP_K, get_store_path
from .errors import EmbeddingError, InvalidArgument


class IndexingService:
    """
    Caller-side pipeline in front of an IVectorStore.

    Records without a vector are embedded from their content using a thread
    pool, then committed to the store in a single batch_add.
    """

    def __init__(self, store: IVectorStore, provider: IEmbeddingProvider,
                 concurrency: int = INDEX_CONCURRENCY, store_path: str = None):
        """
        Args:
            store: Store that receives the embedded records
            provider: Embedding provider used for records and queries
            concurrency: Worker threads for embedding; values below 1 become 1
            store_path: File used by save() and load(); defaults to STORE_PATH
        """
        self.store = store
        self.provider = provider
        self.concurrency = max(1, concurrency)
        self.store_path = store_path or get_store_path()

    def index_records(self, records: List[VectorRecord]) -> List[str]:
        """
        Embed and store records, returning the ids that were committed.

        Every record that embeds successfully is committed even when others
        fail; the failures are then raised together as one EmbeddingError.
        """
        records = list(records)
        if not records:
            return []

        pending = [i for i, r in enumerate(records) if r.vector is None]
        failures: Dict[str, str] = {}

        if pending:
            with ThreadPoolExecutor(max_workers=min(self.concurrency, len(pending))) as executor:
                futures = {i: executor.submit(self._embed, records[i].content) for i in pending}

            for i, future in futures.items():
                try:
                    records[i] = replace(records[i], vector=future.result())
                except Exception as e:
                    failures[records[i].id] = f"{type(e).__name__}: {e}"

        ready = [r for r in records if r.id not in failures]
        if ready:
            self.store.batch_add(ready)

        logger.log_batch_operation(
            "index", [r.id for r in ready],
            {"embedded": len(pending) - len(failures), "failed": len(failures)},
            status="failed" if failures else "success",
        )

        if failures:
            raise EmbeddingError(
                f"embedding errors ({len(failures)}/{len(pending)} failed)",
                failures=failures,
            )
        return [r.id for r in ready]

    def search_text(self, query: str, top_k: int = SEARCH_DEFAULT_TOP_K,
                    item_type: Optional[str] = None) -> List[QueryResult]:
        """Embed query and return the most similar stored records."""
        if not query or not query.strip():
            raise InvalidArgument("query cannot be empty")

        query_vector = self._embed(query)
        return self.store.search(query_vector, top_k=top_k, item_type=item_type)

    def save(self) -> None:
        self.store.save(self.store_path)

    def load(self) -> bool:
        """Load the configured store file; a missing file leaves the store as is."""
        return self.store.load(self.store_path, missing_ok=True)

    def _embed(self, text: str) -> List[float]:
        if not text or not text.strip():
            raise EmbeddingError("cannot embed empty content")

        embedding = self.provider.embed_text(text)
        if not embedding:
            raise EmbeddingError("provider returned an empty embedding")
        return embedding
