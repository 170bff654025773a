"""
Embedding Clients

This module implements the embedding providers used to vectorise knowledge
chunks and questions. Two hosted backends are supported:

- Google Generative Language API (``batchEmbedContents``)
- OpenAI embeddings API (or any compatible provider)

Both are responsible for:

- Efficient batching of text inputs
- Network and transport error isolation
- Strict response validation

The clients are stateless and safe to reuse across requests. Callers depend
only on the :class:`EmbeddingProvider` protocol, so either backend (or a test
double) can be substituted without touching the pipeline.
"""

from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional, Protocol, Sequence
import logging
import httpx

logger = logging.getLogger("chat.embedder")


EmbeddingTask = Literal["document", "query"]


class EmbeddingError(RuntimeError):
    """Raised when embedding generation fails."""


class EmbeddingProvider(Protocol):
    """The narrow interface the chat pipeline consumes."""

    async def embed(
        self,
        texts: Sequence[str],
        task: EmbeddingTask = "document",
    ) -> List[List[float]]:
        ...

    async def embed_query(self, text: str) -> List[float]:
        ...


class _HttpEmbedder:
    """
    Shared batching and error handling for HTTP embedding backends.

    Subclasses implement :meth:`_request` and :meth:`_extract_embeddings`.
    """

    default_batch_size: int = 20

    def __init__(
        self,
        api_key: str,
        model: str,
        base_url: str,
        timeout: float = 60.0,
        batch_size: Optional[int] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        """
        Parameters
        ----------
        api_key : str
            Provider API key.

        model : str
            Embedding model identifier.

        base_url : str
            API root, e.g. ``https://api.openai.com/v1``.

        timeout : float
            HTTP timeout for each request.

        batch_size : Optional[int]
            Maximum inputs per request. Defaults to the provider's limit.

        transport : Optional[httpx.AsyncBaseTransport]
            Custom transport (tests use ``httpx.MockTransport``).
        """
        self.api_key = api_key
        self.model = model
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.batch_size = batch_size or self.default_batch_size
        self._transport = transport

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def embed(
        self,
        texts: Sequence[str],
        task: EmbeddingTask = "document",
    ) -> List[List[float]]:
        """
        Generate embeddings for a sequence of input texts.

        Parameters
        ----------
        texts : Sequence[str]
            List or sequence of input text strings.

        task : EmbeddingTask
            Whether the texts are retrievable documents or a search query.

        Returns
        -------
        List[List[float]]
            One embedding per input, in input order.

        Raises
        ------
        EmbeddingError
            If any batch fails or the response is malformed.
        """
        if not texts:
            return []

        all_embeddings: List[List[float]] = []

        async with httpx.AsyncClient(
            timeout=self.timeout,
            transport=self._transport,
        ) as client:
            for start in range(0, len(texts), self.batch_size):
                batch = list(texts[start : start + self.batch_size])

                try:
                    response = await self._request(client, batch, task)
                    response.raise_for_status()
                except httpx.HTTPError as exc:
                    logger.error(
                        "Embedding request failed (%s): batch size=%d, error=%s",
                        type(exc).__name__,
                        len(batch),
                        str(exc),
                    )
                    raise EmbeddingError(
                        f"Embedding generation failed: {type(exc).__name__}"
                    ) from exc

                try:
                    data = response.json()
                except ValueError as exc:
                    raise EmbeddingError("Embedding response is not JSON.") from exc

                embeddings = self._extract_embeddings(data)
                if len(embeddings) != len(batch):
                    raise EmbeddingError(
                        f"Expected {len(batch)} embeddings, got {len(embeddings)}."
                    )
                all_embeddings.extend(embeddings)

        return all_embeddings

    async def embed_query(self, text: str) -> List[float]:
        """Embed a single search query."""
        vectors = await self.embed([text], task="query")
        return vectors[0]

    # ------------------------------------------------------------------
    # Provider hooks
    # ------------------------------------------------------------------

    async def _request(
        self,
        client: httpx.AsyncClient,
        batch: List[str],
        task: EmbeddingTask,
    ) -> httpx.Response:
        raise NotImplementedError

    @staticmethod
    def _extract_embeddings(data: Any) -> List[List[float]]:
        raise NotImplementedError


def _validate_vector(emb: Any, index: int) -> List[float]:
    if not isinstance(emb, list) or not emb or not all(
        isinstance(x, (float, int)) and not isinstance(x, bool) for x in emb
    ):
        raise EmbeddingError(
            f"Invalid embedding vector at index {index}: must be float list."
        )
    return [float(x) for x in emb]


class OpenAIEmbedder(_HttpEmbedder):
    """
    Embedding client for the OpenAI ``/embeddings`` endpoint.
    """

    async def _request(
        self,
        client: httpx.AsyncClient,
        batch: List[str],
        task: EmbeddingTask,
    ) -> httpx.Response:
        # OpenAI embeddings are symmetric; task is not sent.
        return await client.post(
            f"{self.base_url}/embeddings",
            json={"model": self.model, "input": batch},
            headers={"Authorization": f"Bearer {self.api_key}"},
        )

    @staticmethod
    def _extract_embeddings(data: Any) -> List[List[float]]:
        """
        Parse and validate embedding output format.

        OpenAI returns:
            { "data": [ {"index": 0, "embedding": [...]}, ... ] }
        """
        if not isinstance(data, dict) or "data" not in data:
            raise EmbeddingError("Embedding response missing 'data' field.")

        records = data["data"]
        if not isinstance(records, list):
            raise EmbeddingError("'data' field must be a list.")

        embeddings: List[List[float]] = []

        for index, record in enumerate(records):
            if not isinstance(record, dict) or "embedding" not in record:
                raise EmbeddingError(
                    f"Malformed embedding record at index {index}."
                )
            embeddings.append(_validate_vector(record["embedding"], index))

        return embeddings


class GoogleEmbedder(_HttpEmbedder):
    """
    Embedding client for the Gemini ``batchEmbedContents`` endpoint.
    """

    default_batch_size = 100

    _TASK_TYPES: Dict[str, str] = {
        "document": "RETRIEVAL_DOCUMENT",
        "query": "RETRIEVAL_QUERY",
    }

    async def _request(
        self,
        client: httpx.AsyncClient,
        batch: List[str],
        task: EmbeddingTask,
    ) -> httpx.Response:
        model_name = f"models/{self.model}"
        payload = {
            "requests": [
                {
                    "model": model_name,
                    "content": {"parts": [{"text": text}]},
                    "taskType": self._TASK_TYPES[task],
                }
                for text in batch
            ]
        }
        return await client.post(
            f"{self.base_url}/{model_name}:batchEmbedContents",
            json=payload,
            headers={"x-goog-api-key": self.api_key},
        )

    @staticmethod
    def _extract_embeddings(data: Any) -> List[List[float]]:
        """
        Parse and validate embedding output format.

        Gemini returns:
            { "embeddings": [ {"values": [...]}, ... ] }
        """
        if not isinstance(data, dict) or "embeddings" not in data:
            raise EmbeddingError("Embedding response missing 'embeddings' field.")

        records = data["embeddings"]
        if not isinstance(records, list):
            raise EmbeddingError("'embeddings' field must be a list.")

        embeddings: List[List[float]] = []

        for index, record in enumerate(records):
            if not isinstance(record, dict) or "values" not in record:
                raise EmbeddingError(
                    f"Malformed embedding record at index {index}."
                )
            embeddings.append(_validate_vector(record["values"], index))

        return embeddings
