"""Interpreter and scribe prompts.

The translation and summary prompts ship as text files next to this module.
A clinic can reword them without touching code: files found in
``$MEDLINGO_PROMPTS_DIR`` or ``./prompts`` take precedence over the packaged
ones, in that order.
"""

import os
from functools import lru_cache
from pathlib import Path

PROMPTS_DIR_ENV = "MEDLINGO_PROMPTS_DIR"

_PACKAGE_DIR = Path(__file__).parent


def _search_path() -> list[Path]:
    paths = []
    configured = os.getenv(PROMPTS_DIR_ENV)
    if configured:
        paths.append(Path(configured).expanduser())
    paths.append(Path.cwd() / "prompts")
    paths.append(_PACKAGE_DIR)
    return paths


@lru_cache(maxsize=16)
def load_prompt(name: str) -> str:
    """Load a prompt template by name (file name without ``.txt``).

    Raises:
        FileNotFoundError: If no directory on the search path has it
    """
    searched = []
    for directory in _search_path():
        path = directory / f"{name}.txt"
        if path.is_file():
            return path.read_text(encoding="utf-8")
        searched.append(path)

    raise FileNotFoundError(
        f"Prompt '{name}' not found. Searched:\n"
        + "\n".join(f"  - {path}" for path in searched)
    )


def render_prompt(name: str, **values: str) -> str:
    """Load a prompt and fill its ``{placeholders}``.

    Raises:
        ValueError: If an overriding template uses a placeholder that was
            not supplied
    """
    try:
        return load_prompt(name).format(**values)
    except KeyError as e:
        raise ValueError(
            f"Prompt '{name}' uses unknown placeholder {e}; available: {sorted(values)}"
        ) from e


def clear_cache() -> None:
    """Forget loaded templates so edited or newly overridden files are picked up."""
    load_prompt.cache_clear()


__all__ = [
    "PROMPTS_DIR_ENV",
    "load_prompt",
    "render_prompt",
    "clear_cache",
]
