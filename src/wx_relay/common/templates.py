"""Prompt templating helpers for list and table generation."""
from __future__ import annotations
from pathlib import Path

LIST_SYSTEM = "You are a helpful assistant that generates domain-specific lists."

LIST_TEMPLATE = """Generate exactly {{count}} unique, realistic {{prompt}} values.
Output only a JSON array of strings, with no commentary, no numbering, no placeholders like single letters.
Each item should be 2-4 words and domain-relevant."""

TABLE_SYSTEM = "You are a strict JSON table generator."

TABLE_TEMPLATE = """You are generating a table for the given prompt.

IMPORTANT: You must return ONLY a valid JSON object with this exact structure:

{
  "headers": ["Header1", "Header2", ..., "Header{{cols}}"],
  "rows": [
    ["Value1", "Value2", ..., "Value{{cols}}"],
    ... {{rows}} total rows, each with exactly {{cols}} items ...
  ]
}

CRITICAL RULES:
- Return ONLY the JSON object above, nothing else
- Headers: exactly {{cols}} plain text labels (1-3 words each)
- Rows: exactly {{rows}} rows
- Each row: exactly {{cols}} plain text values (1-4 words each)
- NO nested objects, NO arrays inside cells, NO key:value pairs
- NO markdown, NO commentary, NO code fences
- If you cannot follow this format, return: {"headers": [], "rows": []}

Prompt context: {{prompt}}"""

def load_template(path: str) -> str:
    """
    Load a prompt template file.

    Args:
        path: Path to template.
    """
    return Path(path).read_text(encoding="utf-8")

def render_prompt(template: str, **values: object) -> str:
    """
    Render values into the template.

    Args:
        template: Template content containing {{name}} placeholders.
        values: Replacement for each placeholder name.

    Returns:
        Rendered prompt. Unknown placeholders are left untouched.
    """
    out = template
    for key, value in values.items():
        out = out.replace("{{" + key + "}}", str(value))
    return out

def chat_messages(system: str, user: str) -> list[dict[str, str]]:
    return [
        {"role": "system", "content": system},
        {"role": "user", "content": user},
    ]
