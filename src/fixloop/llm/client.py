"""Chat completion client for OpenAI-compatible model providers."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Any

import openai
from openai import AsyncOpenAI

from fixloop.llm.exceptions import MissingCredentialError, ModelTimeoutError, TransportError
from fixloop.llm.providers import Provider, ProviderProfile, get_profile
from fixloop.models.message_models import ChatMessage

if TYPE_CHECKING:
    from fixloop.ui.display import DisplaySink

logger = logging.getLogger(__name__)

# Debug progress is reported every this many stream chunks
CHUNK_LOG_INTERVAL = 25


class ModelClient:
    """Sends chat completions to one provider profile with a hard timeout."""

    def __init__(
        self,
        provider: Provider,
        api_key: str | None,
        timeout: float,
        display: DisplaySink | None = None,
        client: Any | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            provider: Which provider profile to call.
            api_key: API key for the provider.
            timeout: Seconds allowed per call, including the whole stream.
            display: Sink that receives reasoning text while streaming.
            client: Pre-built AsyncOpenAI-compatible client (tests inject fakes).

        Raises:
            MissingCredentialError: If no API key is given and no client is injected.
        """
        self.provider: Provider = provider
        self.profile: ProviderProfile = get_profile(provider)
        self.timeout: float = timeout
        self.display = display

        if client is None:
            if not api_key:
                raise MissingCredentialError(
                    f"API key for {self.profile.name} is not set "
                    f"(expected in {self.profile.api_key_env})"
                )
            client = AsyncOpenAI(api_key=api_key, base_url=self.profile.endpoint)
        self._client = client

    @property
    def label(self) -> str:
        return f"{self.profile.name}({self.profile.model})"

    async def complete(
        self,
        messages: list[ChatMessage],
        stream: bool = False,
        show_reasoning: bool = False,
    ) -> str:
        """Run one chat completion and return the response text.

        In stream mode the response is accumulated chunk by chunk; when
        show_reasoning is set each chunk's reasoning (or, lacking that, its
        content) is forwarded to the display as it arrives.

        Raises:
            ModelTimeoutError: If the call exceeds self.timeout.
            TransportError: If the provider request fails.
        """
        payload = [message.model_dump() for message in messages]
        logger.debug("Sending %d messages to %s", len(payload), self.label)

        if stream:
            call = self._stream(payload, show_reasoning)
        else:
            call = self._create(payload)

        try:
            return await asyncio.wait_for(call, timeout=self.timeout)
        except asyncio.TimeoutError as exc:
            raise ModelTimeoutError(self.profile.name, self.timeout) from exc
        except openai.APITimeoutError as exc:
            raise ModelTimeoutError(self.profile.name, self.timeout) from exc
        except openai.APIError as exc:
            logger.debug("[%s] API error: %s", self.profile.name, exc)
            raise TransportError(f"{self.profile.name} API error: {exc}") from exc

    async def _create(self, messages: list[dict]) -> str:
        response = await self._client.chat.completions.create(
            model=self.profile.model,
            messages=messages,
            temperature=self.profile.temperature,
            max_tokens=self.profile.max_tokens,
        )
        if not response.choices:
            return ""
        return response.choices[0].message.content or ""

    async def _stream(self, messages: list[dict], show_reasoning: bool) -> str:
        response = await self._client.chat.completions.create(
            model=self.profile.model,
            messages=messages,
            temperature=self.profile.temperature,
            max_tokens=self.profile.max_tokens,
            stream=True,
        )

        content_parts: list[str] = []
        reasoning_parts: list[str] = []
        chunk_count = 0

        async for chunk in response:
            chunk_count += 1
            delta = chunk.choices[0].delta if chunk.choices else None
            content_chunk = (getattr(delta, "content", None) or "") if delta else ""
            # reasoning_content is a DeepSeek extension to the delta schema
            reasoning_chunk = (getattr(delta, "reasoning_content", None) or "") if delta else ""

            if chunk_count % CHUNK_LOG_INTERVAL == 0:
                logger.debug(
                    "[%s] Received %d chunks. Content: %db, Reasoning: %db",
                    self.profile.name,
                    chunk_count,
                    len(content_chunk),
                    len(reasoning_chunk),
                )

            content_parts.append(content_chunk)
            reasoning_parts.append(reasoning_chunk)

            if show_reasoning and self.display is not None:
                display_text = reasoning_chunk or content_chunk
                if display_text:
                    self.display.append_reasoning(display_text)

        return "".join(content_parts) or "".join(reasoning_parts)
