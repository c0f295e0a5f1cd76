"""
Prompts for AI-drafted health articles.

Kept in one place so the writing guidelines stay consistent across callers.
"""

from typing import Iterable, Optional

_ARTICLE_WRITER_IDENTITY = (
    "You are a medical writer. Write a well-structured blog post for a "
    "community health portal."
)

_ARTICLE_REQUIREMENTS = """
Requirements:
- Clear introduction, informative body with subheadings, and a concise conclusion.
- Tone: helpful, accessible, evidence-informed.
- Add practical tips and, where useful, short bullet lists.
- Do not fabricate statistics; avoid definitive medical claims without context.
- Keep formatting as plain text with line breaks and markdown-style headings (##, ###).
""".strip()


def build_article_prompt(
    title: str,
    key_points: Iterable[str] = (),
    guidance: Optional[str] = None,
) -> str:
    """Assemble the drafting prompt for an article title.

    `key_points` are rendered as a bulleted list; blank `guidance` is left out.
    """
    points_text = "\n".join(f"- {p}" for p in key_points)
    parts = [
        _ARTICLE_WRITER_IDENTITY,
        f"Title: {title}",
        "Key points (bulleted):",
        points_text,
    ]
    if guidance and guidance.strip():
        parts.append(f"\nAdditional guidance:\n{guidance.strip()}")
    parts.append("")
    parts.append(_ARTICLE_REQUIREMENTS)
    return "\n".join(parts)
