from typing import Any, Dict, List, Optional, Protocol, Sequence
import logging
import httpx

from ..knowledge.chunker import Chunk
from ..prompts import RAG_SYSTEM_PROMPT, build_prompt

logger = logging.getLogger("chat.llm")


class GenerationError(RuntimeError):
    """Raised when the chat model call fails or returns no usable answer."""


class AnswerGenerator(Protocol):
    async def generate(self, question: str, context: Sequence[Chunk]) -> str:
        ...


class _HttpChatClient:
    def __init__(
        self,
        api_key: str,
        model: str,
        base_url: str,
        temperature: float = 0.2,
        timeout: float = 60.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key
        self.model = model
        self.base_url = base_url.rstrip("/")
        self.temperature = temperature
        self.timeout = timeout
        self._transport = transport

    async def generate(self, question: str, context: Sequence[Chunk]) -> str:
        """
        Answer ``question`` grounded in the retrieved ``context`` chunks.
        """
        prompt = build_prompt(question, context)

        async with httpx.AsyncClient(
            timeout=self.timeout,
            transport=self._transport,
        ) as client:
            try:
                resp = await self._request(client, RAG_SYSTEM_PROMPT, prompt)
                resp.raise_for_status()
                data = resp.json()
            except httpx.HTTPError as exc:
                logger.error(
                    "Chat request failed (%s): model=%s, error=%s",
                    type(exc).__name__,
                    self.model,
                    str(exc),
                )
                raise GenerationError(
                    f"Answer generation failed: {type(exc).__name__}"
                ) from exc
            except ValueError as exc:
                raise GenerationError("Chat response is not JSON.") from exc

        answer = self._extract_text(data).strip()
        if not answer:
            raise GenerationError("Chat model returned an empty answer.")
        return answer

    async def _request(
        self,
        client: httpx.AsyncClient,
        system_prompt: str,
        prompt: str,
    ) -> httpx.Response:
        raise NotImplementedError

    @staticmethod
    def _extract_text(data: Any) -> str:
        raise NotImplementedError


class OpenAIChatClient(_HttpChatClient):
    async def _request(self, client, system_prompt, prompt):
        payload = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": prompt},
            ],
            "temperature": self.temperature,
        }
        return await client.post(
            f"{self.base_url}/chat/completions",
            json=payload,
            headers={"Authorization": f"Bearer {self.api_key}"},
        )

    @staticmethod
    def _extract_text(data: Any) -> str:
        """
        Pull the assistant text out of
        ``{"choices": [{"message": {"role": "assistant", "content": "..."}}]}``.
        """
        try:
            content = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as exc:
            raise GenerationError("Malformed chat completion response.") from exc
        return content or ""


class GeminiChatClient(_HttpChatClient):
    async def _request(self, client, system_prompt, prompt):
        payload: Dict[str, Any] = {
            "systemInstruction": {"parts": [{"text": system_prompt}]},
            "contents": [{"role": "user", "parts": [{"text": prompt}]}],
            "generationConfig": {"temperature": self.temperature},
        }
        return await client.post(
            f"{self.base_url}/models/{self.model}:generateContent",
            json=payload,
            headers={"x-goog-api-key": self.api_key},
        )

    @staticmethod
    def _extract_text(data: Any) -> str:
        """
        Join the text parts of the first candidate in
        ``{"candidates": [{"content": {"parts": [{"text": "..."}]}}]}``.
        """
        if not isinstance(data, dict):
            raise GenerationError("Malformed generateContent response.")

        candidates = data.get("candidates") or []
        if not candidates:
            reason = (data.get("promptFeedback") or {}).get("blockReason", "unknown")
            raise GenerationError(f"No answer candidates (block reason: {reason}).")

        try:
            parts: List[Dict[str, Any]] = candidates[0]["content"]["parts"]
        except (KeyError, TypeError) as exc:
            raise GenerationError("Malformed generateContent candidate.") from exc

        return "".join(part.get("text", "") for part in parts if isinstance(part, dict))
