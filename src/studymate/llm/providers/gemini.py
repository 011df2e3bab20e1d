"""Google Gemini LLM provider implementation.

Uses the official Google GenAI SDK for async completions and chat sessions.
Reference: https://github.com/googleapis/python-genai

Note: Gemini can return empty responses due to safety filtering or service issues.
This implementation includes retry logic and relaxed safety settings.
"""

import asyncio
from typing import Any

from google import genai
from google.genai import types

from ..base import ChatSession, LLMProvider
from ..models import ChatMessage, LLMResponse

# Default safety settings - relaxed so study material about security, medicine
# and similar topics is not blocked
DEFAULT_SAFETY_SETTINGS = [
    types.SafetySetting(category="HARM_CATEGORY_HARASSMENT", threshold="BLOCK_ONLY_HIGH"),
    types.SafetySetting(category="HARM_CATEGORY_HATE_SPEECH", threshold="BLOCK_ONLY_HIGH"),
    types.SafetySetting(category="HARM_CATEGORY_SEXUALLY_EXPLICIT", threshold="BLOCK_ONLY_HIGH"),
    types.SafetySetting(category="HARM_CATEGORY_DANGEROUS_CONTENT", threshold="BLOCK_ONLY_HIGH"),
]


def _extract_content(response) -> str:
    """Extract text content from a Gemini response, handling empty responses.

    Args:
        response: Gemini GenerateContentResponse

    Returns:
        Text content or empty string
    """
    if response.candidates and len(response.candidates) > 0:
        candidate = response.candidates[0]
        if candidate.content and candidate.content.parts:
            texts = [part.text for part in candidate.content.parts if getattr(part, "text", None)]
            if texts:
                return "".join(texts)

    # Fallback to response.text (may raise or return None)
    try:
        return response.text or ""
    except (ValueError, AttributeError):
        return ""


def _extract_usage(response) -> dict[str, int] | None:
    if not response.usage_metadata:
        return None
    return {
        "prompt_tokens": response.usage_metadata.prompt_token_count or 0,
        "completion_tokens": response.usage_metadata.candidates_token_count or 0,
        "total_tokens": response.usage_metadata.total_token_count or 0,
    }


class GeminiChatSession(ChatSession):
    """Wraps a google-genai AsyncChat."""

    def __init__(self, chat: Any, model: str, seeded_turns: int):
        self._chat = chat
        self._model = model
        self._turns = seeded_turns

    async def send_message(self, text: str) -> LLMResponse:
        response = await self._chat.send_message(text)
        self._turns += 2
        return LLMResponse(
            content=_extract_content(response),
            model=self._model,
            usage=_extract_usage(response),
        )

    @property
    def history_length(self) -> int:
        return self._turns


class GeminiProvider(LLMProvider):
    """Google Gemini LLM provider implementation.

    Hidden design decisions:
    - Google GenAI client initialization
    - Message format conversion ("assistant" is Gemini's "model" role)
    - Retry logic for empty responses (known Gemini issue)
    - Relaxed safety settings
    """

    def __init__(
        self,
        api_key: str,
        model: str = "gemini-2.5-flash",
        max_retries: int = 3,
        **client_kwargs: Any
    ):
        """Initialize Gemini provider.

        Args:
            api_key: Google AI API key
            model: Default model (gemini-2.5-flash, gemini-2.5-pro, ...)
            max_retries: Max retries for empty responses (default 3)
            **client_kwargs: Additional kwargs for Client
        """
        self._model = model
        self._max_retries = max_retries
        self._client = genai.Client(api_key=api_key, **client_kwargs)

    @property
    def model(self) -> str:
        """Get the default model name."""
        return self._model

    def _convert_messages(self, messages: list[ChatMessage]) -> tuple[str | None, list[types.Content]]:
        """Convert ChatMessage list to Gemini format.

        Args:
            messages: List of chat messages

        Returns:
            Tuple of (system_instruction, contents)
        """
        system_instruction = None
        contents = []

        for msg in messages:
            if msg.role == "system":
                system_instruction = msg.content
            elif msg.role == "user":
                contents.append(types.Content(
                    role="user",
                    parts=[types.Part(text=msg.content)]
                ))
            elif msg.role == "assistant":
                contents.append(types.Content(
                    role="model",
                    parts=[types.Part(text=msg.content)]
                ))

        return system_instruction, contents

    def _build_config(
        self,
        system_instruction: str | None,
        temperature: float,
        max_tokens: int | None,
        **kwargs: Any
    ) -> types.GenerateContentConfig:
        # Disable automatic function calling so JSON-looking prompts are not
        # answered with UNEXPECTED_TOOL_CALL
        tool_config = types.ToolConfig(
            function_calling_config=types.FunctionCallingConfig(mode="NONE")
        )
        config = types.GenerateContentConfig(
            temperature=temperature,
            system_instruction=system_instruction,
            safety_settings=DEFAULT_SAFETY_SETTINGS,
            tool_config=tool_config,
            **kwargs
        )
        if max_tokens is not None:
            config.max_output_tokens = max_tokens
        return config

    async def chat_completion(
        self,
        messages: list[ChatMessage],
        model: str | None = None,
        temperature: float = 0.7,
        max_tokens: int | None = None,
        **kwargs: Any
    ) -> LLMResponse:
        """Generate a stateless completion using Google Gemini.

        Includes retry logic for empty responses (known Gemini service issue).
        """
        model_to_use = model or self._model
        system_instruction, contents = self._convert_messages(messages)
        config = self._build_config(system_instruction, temperature, max_tokens, **kwargs)

        content = ""
        usage = None

        for attempt in range(self._max_retries):
            response = await self._client.aio.models.generate_content(
                model=model_to_use,
                contents=contents,
                config=config
            )
            usage = _extract_usage(response) or usage
            content = _extract_content(response)

            if content:
                break

            # Empty response - wait briefly before retry
            if attempt < self._max_retries - 1:
                await asyncio.sleep(0.5 * (attempt + 1))

        return LLMResponse(
            content=content,
            model=model_to_use,
            usage=usage
        )

    def start_chat(
        self,
        history: list[ChatMessage],
        system_instruction: str | None = None,
        model: str | None = None,
        temperature: float = 0.7,
        max_tokens: int | None = None,
        **kwargs: Any
    ) -> ChatSession:
        """Open an AsyncChat seeded with the given turns."""
        model_to_use = model or self._model
        _, contents = self._convert_messages(history)
        config = self._build_config(system_instruction, temperature, max_tokens, **kwargs)

        chat = self._client.aio.chats.create(
            model=model_to_use,
            config=config,
            history=contents,
        )
        return GeminiChatSession(chat, model_to_use, seeded_turns=len(contents))

    async def close(self) -> None:
        """Close the Gemini client.

        Note: The Google GenAI client doesn't require explicit closing,
        but we implement this for interface consistency.
        """
        pass
