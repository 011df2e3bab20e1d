"""Generation client: the three derivations the assistant asks of the model.

Hidden design decisions:
- Prompt construction for each derivation
- Which calls go through the stateful chat session and which are stateless
- Session invalidation after failures
- Response parsing and failure policy per operation
"""

from collections.abc import Callable, Sequence

from ..config import NOTES_WINDOW, REPLY_SETTINGS, STRUCTURED_SETTINGS
from ..errors import GenerationError, classify_provider_error
from ..llm import ChatMessage, GenerationSettings, LLMProvider, LLMResponse
from ..prompts import render_prompt
from ..roadmap import RoadmapStep, parse_roadmap
from ..transcript import Message
from .models import UsageSummary
from .sanitize import group_by_role
from .session import ChatSessionHandle

DebugCallback = Callable[[str, str, str], None]


def summarize_history(history: Sequence[Message]) -> str:
    """Serialize the transcript as 'role: content' lines."""
    return "\n".join(f"{msg.role}: {msg.content}" for msg in history)


def _as_bullets(items: list[str]) -> str:
    if not items:
        return "(none)"
    return "\n".join(f"- {item}" for item in items)


class GenerationClient:
    """Builds prompts, calls the provider and interprets the results.

    Failure policy:
    - reply(): raises GenerationError/ProviderError, session invalidated
    - roadmap(): never raises, returns [] instead
    - notes(): raises GenerationError/ProviderError
    """

    def __init__(
        self,
        llm: LLMProvider,
        reply_settings: GenerationSettings = REPLY_SETTINGS,
        structured_settings: GenerationSettings = STRUCTURED_SETTINGS,
        notes_window: int = NOTES_WINDOW,
    ):
        self._llm = llm
        self._reply_settings = reply_settings
        self._structured_settings = structured_settings
        self._notes_window = notes_window
        self._session = ChatSessionHandle(llm, reply_settings)
        self._usage = UsageSummary()
        self._debug_callback: DebugCallback | None = None

    @property
    def llm(self) -> LLMProvider:
        return self._llm

    @property
    def session(self) -> ChatSessionHandle:
        return self._session

    @property
    def usage(self) -> UsageSummary:
        return self._usage

    def set_debug_callback(self, callback: DebugCallback | None) -> None:
        """Set the debug callback.

        Args:
            callback: Callable(level: str, component: str, message: str)
        """
        self._debug_callback = callback

    def _debug(self, level: str, message: str) -> None:
        if self._debug_callback:
            self._debug_callback(level, "LLM", message)

    def reset_session(self) -> None:
        self._session.invalidate()

    async def reply(self, user_message: str, history: Sequence[Message]) -> str:
        """Answer the user's message in the context of the transcript.

        Args:
            user_message: The new user input
            history: Transcript before the new message was appended

        Returns:
            Raw reply text (markdown)

        Raises:
            ProviderError: The provider call failed
            GenerationError: The provider returned no text
        """
        history = list(history)
        prompt = render_prompt(
            "reply",
            history=summarize_history(history),
            message=user_message,
        )
        reused = self._session.active

        session = None
        try:
            session = self._session.get_or_create(history)
            response = await session.send_message(prompt)
        except Exception as e:
            self._session.invalidate(session)
            error = classify_provider_error(e)
            self._debug(
                "error",
                f"Reply failed, session invalidated "
                f"({'retryable' if error.is_retryable() else 'not retryable'}): {e}"
            )
            raise error from e

        self._record("reply", response)
        if not response.content.strip():
            self._session.invalidate(session)
            raise GenerationError("Provider returned an empty reply")

        self._debug(
            "info",
            f"Reply received ({len(response.content)} chars, "
            f"{'reused' if reused else 'new'} session, {session.history_length} turns)"
        )
        return response.content

    async def roadmap(
        self,
        source_text: str,
        history: Sequence[Message] = (),
    ) -> list[RoadmapStep]:
        """Generate a learning roadmap for the given focus text.

        Never raises: provider failures and unparseable output both yield [].
        """
        topics = " ".join(msg.content for msg in history).lower()
        prompt = render_prompt(
            "roadmap",
            topics=topics or "(none)",
            context=source_text,
        )

        try:
            text = await self._complete("roadmap", prompt)
        except Exception as e:
            self._debug("warning", f"Roadmap generation failed: {e}")
            return []

        steps = parse_roadmap(text)
        if steps:
            self._debug("info", f"Roadmap parsed: {len(steps)} step(s)")
        else:
            self._debug("warning", "Roadmap output produced no steps")
        return steps

    async def notes(self, history: Sequence[Message]) -> str:
        """Compile study notes from the most recent messages.

        Raises:
            ProviderError: The provider call failed
            GenerationError: The provider returned no text
        """
        window = list(history)[-self._notes_window:]
        questions, explanations = group_by_role(window)
        prompt = render_prompt(
            "notes",
            questions=_as_bullets(questions),
            explanations=_as_bullets(explanations),
        )

        try:
            text = await self._complete("notes", prompt)
        except Exception as e:
            self._debug("error", f"Notes generation failed: {e}")
            raise classify_provider_error(e) from e

        if not text.strip():
            raise GenerationError("Provider returned empty notes")

        self._debug("info", f"Notes compiled from {len(window)} message(s)")
        return text

    async def _complete(self, operation: str, prompt: str) -> str:
        """Send one stateless request with the structured-output settings."""
        response = await self._llm.chat_completion(
            [ChatMessage(role="user", content=prompt)],
            **self._structured_settings.as_kwargs(),
        )
        self._record(operation, response)
        return response.content

    def _record(self, operation: str, response: LLMResponse) -> None:
        self._usage.add_response(operation, response)
