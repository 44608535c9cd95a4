"""Load and render the generation prompts shipped in nlweb/prompts/."""

from pathlib import Path

from nlweb.contracts.nlweb_v1 import NLWebResult

PROMPTS_DIR = Path(__file__).parent.parent / "prompts"
REQUIRED_PLACEHOLDERS = ("{query}", "{results}")

_CACHE: dict[str, str] = {}


def load_prompt(name: str, prompts_dir: Path | None = None) -> str:
    base = prompts_dir or PROMPTS_DIR
    key = str(base / name)
    if key in _CACHE:
        return _CACHE[key]
    path = base / f"{name}.md"
    if not path.exists():
        raise FileNotFoundError(f"Prompt not found: {path}")
    text = path.read_text(encoding="utf-8").rstrip()
    for placeholder in REQUIRED_PLACEHOLDERS:
        if placeholder not in text:
            raise ValueError(f"Prompt {path} is missing placeholder {placeholder}")
    _CACHE[key] = text
    return text


def format_results_block(results: list[NLWebResult], limit: int = 5) -> str:
    return "\n\n".join(
        f"Title: {r.name}\nDescription: {r.description}" for r in results[:limit]
    )


def render_prompt(
    name: str,
    query: str,
    results: list[NLWebResult],
    limit: int = 5,
    prompts_dir: Path | None = None,
) -> str:
    template = load_prompt(name, prompts_dir)
    # results last so a "{query}" inside result text is left alone
    return template.replace("{query}", query).replace(
        "{results}", format_results_block(results, limit)
    )
