"""System prompts shipped with the package."""

from pathlib import Path

_PROMPTS_DIR = Path(__file__).resolve().parent


def load_prompt(name: str) -> str:
    """Load ``<name>.md`` and return the text after its header separator."""
    path = _PROMPTS_DIR / f"{name}.md"
    if not path.exists():
        raise FileNotFoundError(f"Prompt not found: {path}")
    template = path.read_text(encoding="utf-8")
    if "---" in template:
        template = template.split("---", 1)[-1]
    return template.strip()
