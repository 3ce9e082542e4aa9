"""Client for an OpenAI-compatible completion and embedding gateway."""

from typing import Any, Dict, List, Optional

import httpx
from tenacity import AsyncRetrying, retry_if_exception, stop_after_attempt, wait_exponential

from ...modules.common.exceptions import UpstreamUnavailableError
from ..logging import get_logger

logger = get_logger(__name__)

RETRYABLE_STATUS_CODES = frozenset({408, 409, 429, 500, 502, 503, 504})


def _is_retryable(error: BaseException) -> bool:
    if isinstance(error, httpx.HTTPStatusError):
        return error.response.status_code in RETRYABLE_STATUS_CODES
    return isinstance(error, httpx.TransportError)


class CompletionClient:
    """Async client for ``/chat/completions`` and ``/embeddings``.

    Every call is bounded by ``timeout`` seconds per attempt and retried with
    exponential backoff on transport errors, rate limiting and 5xx answers.
    Whatever still fails after the last attempt surfaces as
    ``UpstreamUnavailableError`` so callers can take their fallback path.
    """

    def __init__(
        self,
        base_url: str,
        api_key: str,
        model: str,
        embedding_model: str,
        dimension: int,
        timeout: float = 20.0,
        max_retries: int = 3,
        backoff_multiplier: float = 0.5,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize the client.

        Args:
            base_url: Gateway root, e.g. ``https://api.openai.com/v1``
            api_key: Bearer token; an empty key makes every call unavailable
            model: Chat model used for query synthesis
            embedding_model: Model used for ``/embeddings``
            dimension: Expected length of every embedding vector
            timeout: Per-attempt timeout in seconds
            max_retries: Total number of attempts per call
            backoff_multiplier: Base of the exponential wait between attempts
            transport: Optional httpx transport (tests use ``httpx.MockTransport``)
        """
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.model = model
        self.embedding_model = embedding_model
        self._dimension = dimension
        self.timeout = timeout
        self.max_retries = max(1, max_retries)
        self.backoff_multiplier = backoff_multiplier
        self._transport = transport

    @property
    def dimension(self) -> int:
        return self._dimension

    async def complete(self, system_prompt: str, user_prompt: str) -> str:
        """Return the assistant message for a system/user prompt pair.

        Raises:
            UpstreamUnavailableError: If the gateway cannot produce a completion.
        """
        payload = {
            "model": self.model,
            "temperature": 0,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
        }
        data = await self._post("/chat/completions", payload)

        try:
            content = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as e:
            raise UpstreamUnavailableError("Completion service returned an unexpected payload") from e

        if not isinstance(content, str) or not content.strip():
            raise UpstreamUnavailableError("Completion service returned an empty completion")
        return content

    async def embed(self, texts: List[str]) -> List[List[float]]:
        """Embed a batch of texts, preserving input order.

        Raises:
            UpstreamUnavailableError: If the gateway fails or returns vectors of the wrong shape.
        """
        if not texts:
            return []

        payload = {"model": self.embedding_model, "input": texts, "dimensions": self._dimension}
        data = await self._post("/embeddings", payload)

        try:
            items = sorted(data["data"], key=lambda item: item["index"])
            vectors = [[float(value) for value in item["embedding"]] for item in items]
        except (KeyError, TypeError, ValueError) as e:
            raise UpstreamUnavailableError("Embedding service returned an unexpected payload") from e

        if len(vectors) != len(texts):
            raise UpstreamUnavailableError(f"Embedding service returned {len(vectors)} vectors for {len(texts)} inputs")
        if any(len(vector) != self._dimension for vector in vectors):
            raise UpstreamUnavailableError(f"Embedding service returned vectors not of dimension {self._dimension}")
        return vectors

    async def _post(self, path: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        if not self.api_key:
            raise UpstreamUnavailableError("Completion service API key is not configured")

        try:
            async for attempt in AsyncRetrying(
                stop=stop_after_attempt(self.max_retries),
                wait=wait_exponential(multiplier=self.backoff_multiplier, max=10),
                retry=retry_if_exception(_is_retryable),
                reraise=True,
            ):
                with attempt:
                    data = await self._send(path, payload)
        except httpx.HTTPError as e:
            logger.warning(
                "Completion service call failed",
                extra={"path": path, "error": str(e), "attempts": self.max_retries},
            )
            raise UpstreamUnavailableError(f"Completion service unavailable: {e}") from e
        except ValueError as e:
            raise UpstreamUnavailableError("Completion service returned invalid JSON") from e

        return data

    async def _send(self, path: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        headers = {"Authorization": f"Bearer {self.api_key}"}
        async with httpx.AsyncClient(base_url=self.base_url, timeout=self.timeout, transport=self._transport) as client:
            response = await client.post(path, json=payload, headers=headers)
            response.raise_for_status()
            return response.json()
