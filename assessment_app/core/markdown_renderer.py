"""Markdown rendering of question text shared by the web and desktop hosts.

Question banks are authored with light markdown (inline code, emphasis,
fenced snippets). Both hosts render the same HTML fragment so a question
looks the same in the browser page and in the Qt window.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from markdown_it import MarkdownIt

from assessment_app.core.models import Question

_OPTION_LETTERS = ("A", "B", "C", "D")


@dataclass(slots=True)
class MarkdownRenderer:
    """Converts markdown into HTML fragments."""

    enable_html: bool = False
    _markdown: MarkdownIt = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._markdown = (
            MarkdownIt("commonmark", {"html": self.enable_html})
            .enable("table")
            .enable("strikethrough")
        )

    def render_fragment(self, markdown_text: str) -> str:
        sanitized = markdown_text.strip()
        if not sanitized:
            return "<p><em>No content provided.</em></p>"
        return self._markdown.render(sanitized)

    def render_inline(self, markdown_text: str) -> str:
        """Render a single-line option without the surrounding paragraph."""
        return self._markdown.renderInline(markdown_text.strip())

    def render_question(self, question: Question) -> dict[str, object]:
        """Return the HTML pieces a host needs to display a question."""
        return {
            "question_html": self.render_fragment(question.text),
            "options_html": [
                f"<strong>{letter}.</strong> {self.render_inline(option)}"
                for letter, option in zip(_OPTION_LETTERS, question.options)
            ],
        }


# Shared instance; MarkdownIt is safe to reuse for read-only renders.
renderer = MarkdownRenderer()
