"""Prompt management module.

Externalizes prompts to text files for easy customization.
Prompts can be overridden by placing files in the working directory.
Templates use str.format placeholders; literal braces are doubled.
"""

from functools import lru_cache
from pathlib import Path

# Default prompts directory (package location)
_PROMPTS_DIR = Path(__file__).parent


@lru_cache(maxsize=16)
def load_prompt(name: str) -> str:
    """Return the raw template text for a prompt name.

    ./prompts/{name}.txt in the working directory takes precedence over the
    template shipped with the package.

    Raises:
        FileNotFoundError: Neither location has the template
    """
    filename = f"{name}.txt"

    local_path = Path.cwd() / "prompts" / filename
    if local_path.exists():
        return local_path.read_text(encoding="utf-8")

    package_path = _PROMPTS_DIR / filename
    if package_path.exists():
        return package_path.read_text(encoding="utf-8")

    raise FileNotFoundError(
        f"Prompt '{name}' not found. Searched:\n"
        f"  - {local_path}\n"
        f"  - {package_path}"
    )


def render_prompt(name: str, **values: str) -> str:
    """Load a prompt template and fill in its placeholders."""
    return load_prompt(name).format(**values)


def clear_cache() -> None:
    """Clear the prompt cache (useful after modifying prompt files)."""
    load_prompt.cache_clear()


__all__ = [
    "load_prompt",
    "render_prompt",
    "clear_cache",
]
