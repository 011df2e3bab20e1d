"""Error taxonomy for studymate.

Each error marks a distinct recovery policy:
- ProviderError: upstream/network failure (recovered for replies and roadmaps,
  surfaced for notes)
- ParseError: model output did not match the expected schema (always recovered
  inside the roadmap parser)
- ConfigurationError: missing credential (fatal at startup)
"""


class StudymateError(Exception):
    """Base class for studymate errors."""


class GenerationError(StudymateError):
    """A generation operation could not produce a result."""


class ProviderError(GenerationError):
    """Network or upstream failure while talking to the LLM provider."""

    def __init__(self, message: str, retryable: bool = False):
        super().__init__(message)
        self._retryable = retryable

    def is_retryable(self) -> bool:
        return self._retryable


class ParseError(StudymateError):
    """Model output did not conform to the expected structured schema."""


class ConfigurationError(StudymateError):
    """A required setting (such as the provider API key) is missing."""


def classify_provider_error(exc: BaseException) -> ProviderError:
    """Wrap an arbitrary provider exception in a ProviderError.

    Rate limits and connection problems are flagged as retryable.
    """
    if isinstance(exc, ProviderError):
        return exc

    text = str(exc)
    lowered = text.lower()

    if ("rate" in lowered and "limit" in lowered) or "429" in text:
        return ProviderError(f"Rate limit exceeded: {text}", retryable=True)
    if "network" in lowered or "connection" in lowered or "timeout" in lowered:
        return ProviderError(f"Network error: {text}", retryable=True)
    return ProviderError(f"Provider error: {text or type(exc).__name__}")
