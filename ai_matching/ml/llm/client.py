"""
OpenAI client wrapper shared by the analysis and embedding adapters.

The client is built once, explicitly, and injected into the adapters.
A missing API key is a configuration error raised at construction time,
before any scoring starts.
"""

from typing import Any, Optional

from openai import AsyncOpenAI, OpenAIError

from ai_matching.utils.config import OpenAISettings
from ai_matching.utils.exceptions import ConfigurationError, ExternalServiceError
from ai_matching.utils.logger import get_logger

logger = get_logger(__name__)


class OpenAIClient:
    """Thin async wrapper over the OpenAI SDK."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        *,
        chat_model: str = "gpt-4o",
        embedding_model: str = "text-embedding-3-small",
        temperature: float = 0.3,
        base_url: Optional[str] = None,
        timeout: float = 60.0,
        max_retries: int = 2,
        sdk_client: Optional[AsyncOpenAI] = None,
    ):
        """
        Initialize the client.

        Args:
            api_key: OpenAI API key. Required unless ``sdk_client`` is given.
            chat_model: Model used for candidate analysis.
            embedding_model: Model used for semantic similarity.
            temperature: Sampling temperature for analysis.
            sdk_client: Pre-built SDK client (used by tests).

        Raises:
            ConfigurationError: If no API key is configured.
        """
        if sdk_client is None and not api_key:
            raise ConfigurationError("OPENAI_API_KEY is not configured", setting="OPENAI_API_KEY")

        self.chat_model = chat_model
        self.embedding_model = embedding_model
        self.temperature = temperature
        self._client = sdk_client or AsyncOpenAI(
            api_key=api_key,
            base_url=base_url,
            timeout=timeout,
            max_retries=max_retries,
        )
        logger.info(f"OpenAI client initialized (chat={chat_model}, embeddings={embedding_model})")

    @classmethod
    def from_settings(cls, settings: OpenAISettings) -> "OpenAIClient":
        """Build a client from the ``OPENAI_`` settings group."""
        api_key = settings.api_key.get_secret_value() if settings.api_key else None
        return cls(
            api_key,
            chat_model=settings.chat_model,
            embedding_model=settings.embedding_model,
            temperature=settings.temperature,
            base_url=settings.base_url,
            timeout=settings.timeout,
            max_retries=settings.max_retries,
        )

    async def complete_json(self, system_prompt: str, user_prompt: str) -> Optional[str]:
        """
        Run a chat completion constrained to a JSON object.

        Returns:
            The raw message content, or None when the model returned nothing.

        Raises:
            ExternalServiceError: If the API call fails.
        """
        try:
            response = await self._client.chat.completions.create(
                model=self.chat_model,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_prompt},
                ],
                temperature=self.temperature,
                response_format={"type": "json_object"},
            )
        except OpenAIError as e:
            logger.error(f"OpenAI chat completion failed: {e}")
            raise ExternalServiceError(
                f"Analysis model call failed: {e}",
                service="openai.chat",
                model=self.chat_model,
                cause=e,
            ) from e

        if not response.choices:
            return None
        return response.choices[0].message.content

    async def embed(self, texts: list[str]) -> list[list[float]]:
        """
        Embed several texts in one request, preserving input order.

        Raises:
            ExternalServiceError: If the API call fails or returns too few vectors.
        """
        try:
            response = await self._client.embeddings.create(
                model=self.embedding_model,
                input=texts,
            )
        except OpenAIError as e:
            logger.error(f"OpenAI embedding request failed: {e}")
            raise ExternalServiceError(
                f"Embedding call failed: {e}",
                service="openai.embeddings",
                model=self.embedding_model,
                cause=e,
            ) from e

        data: list[Any] = sorted(response.data, key=lambda item: item.index)
        if len(data) != len(texts):
            raise ExternalServiceError(
                f"Expected {len(texts)} embeddings, got {len(data)}",
                service="openai.embeddings",
                model=self.embedding_model,
            )
        return [list(item.embedding) for item in data]
