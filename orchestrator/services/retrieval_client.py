"""
Retrieval: client for the knowledge-retrieval service.

Responsibility: POST the query to the retrieval service and return its ranked
chunks. Search and ranking happen on the other side; nothing is reordered here.
"""

import logging
from typing import Any

import httpx
from pydantic import ValidationError

from orchestrator.core.config import DEFAULT_COLLECTION, DEFAULT_TOP_K, RAG_SERVICE_URL, RETRIEVAL_HTTP_TIMEOUT
from orchestrator.core.errors import ServiceUnavailableError
from orchestrator.schemas.retrieval import RetrievalResponse

logger = logging.getLogger(__name__)


def _http_client() -> httpx.Client:
    return httpx.Client(timeout=RETRIEVAL_HTTP_TIMEOUT)


def retrieve(query: str, collection: str = DEFAULT_COLLECTION, top_k: int = DEFAULT_TOP_K) -> dict[str, Any]:
    """
    Search one knowledge partition. Returns the service response as a plain dict
    ({query, results: [{id, score, text, document_id, source, metadata}], count, process_time_ms}).
    Raises ServiceUnavailableError on transport errors, non-2xx status or a malformed body.
    """
    logger.info("[retrieval:retrieve] IN  query=%r collection=%s top_k=%d", query, collection, top_k)
    payload = {"query": query, "collection": collection, "top_k": top_k}
    try:
        with _http_client() as client:
            response = client.post(f"{RAG_SERVICE_URL}/retrieve", json=payload)
        if response.status_code >= 400:
            raise ServiceUnavailableError(f"retrieval service error {response.status_code}: {response.text[:200]}")
        parsed = RetrievalResponse.model_validate(response.json())
    except httpx.HTTPError as e:
        raise ServiceUnavailableError(f"retrieval request failed: {e}") from e
    except ValidationError as e:
        raise ServiceUnavailableError(f"retrieval service returned an unexpected body: {e.error_count()} errors") from e
    except ValueError as e:
        raise ServiceUnavailableError(f"retrieval service returned invalid JSON: {e}") from e
    logger.info(
        "[retrieval:retrieve] OUT count=%d sources=%s",
        len(parsed.results), [r.source for r in parsed.results[:5]],
    )
    return parsed.model_dump()
