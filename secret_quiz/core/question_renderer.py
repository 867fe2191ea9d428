"""Markdown rendering of question text for API consumers.

Question text is authored as Markdown (with ``$...$`` math left intact for the
client to typeset). Rendering happens on read, so stored questions keep the
creator's original source text.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from html import escape

from markdown_it import MarkdownIt

from secret_quiz.core.models import QuestionType, QuizQuestion


@dataclass(slots=True)
class QuestionRenderer:
    """Converts question Markdown into HTML fragments."""

    enable_html: bool = False
    _markdown: MarkdownIt = field(init=False, repr=False)

    def __post_init__(self) -> None:
        # Raw HTML in question text is rendered as text unless enable_html is set.
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

    def render_question(self, question: QuizQuestion) -> str:
        """Render the question text, followed by a numbered option list for single-choice questions."""
        body = self.render_fragment(question.text)
        if question.question_type is not QuestionType.SINGLE_CHOICE:
            return body
        items = "".join(
            f'<li value="{index}">{escape(option)}</li>' for index, option in enumerate(question.options)
        )
        return f'{body}<ol class="options" start="0">{items}</ol>\n'


renderer = QuestionRenderer()
# Shared instance; MarkdownIt is safe for concurrent read-only renders.
