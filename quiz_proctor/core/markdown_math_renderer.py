"""Markdown + LaTeX rendering helpers shared by the Qt windows and the web page.

Question, option and explanation text is authored as markdown. Both adapters
render it through the same ``MarkdownIt`` instance and let MathJax typeset any
``$...$`` math on the client, so a quiz looks the same in either place.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from html import escape

from markdown_it import MarkdownIt

from quiz_proctor.core.models import OptionMark, ReviewQuestionView

_MATHJAX_SCRIPT = "https://cdn.jsdelivr.net/npm/mathjax@3/es5/tex-mml-chtml.js"

_MARK_CLASSES = {
    OptionMark.NEITHER: "option",
    OptionMark.CORRECT: "option correct",
    OptionMark.SELECTED: "option selected-wrong",
    OptionMark.SELECTED_CORRECT: "option selected-correct",
}

_MARK_SUFFIXES = {
    OptionMark.NEITHER: "",
    OptionMark.CORRECT: " (correct answer)",
    OptionMark.SELECTED: " (your answer)",
    OptionMark.SELECTED_CORRECT: " (your answer, correct)",
}


def option_letter(index: int) -> str:
    return chr(ord("A") + index)


@dataclass(slots=True)
class MarkdownMathRenderer:
    """Converts markdown-with-math into HTML fragments or full documents."""

    enable_html: bool = False
    _markdown: MarkdownIt = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._markdown = (
            MarkdownIt("commonmark", {"html": self.enable_html})
            .enable("table")
            .enable("strikethrough")
        )

    def render_fragment(self, markdown_text: str) -> str:
        """Render a markdown string into an HTML fragment."""

        sanitized = markdown_text.strip()
        if not sanitized:
            return "<p><em>No content provided.</em></p>"
        return self._markdown.render(sanitized)

    def render_inline(self, markdown_text: str) -> str:
        """Render a single line (an option label) without a wrapping paragraph."""
        return self._markdown.renderInline(markdown_text.strip())

    def render_review(self, view: ReviewQuestionView, show_unanswered: bool = True) -> str:
        """A reviewed question with every option marked correct/selected."""
        items = []
        for index, option in enumerate(view.options):
            mark = option.mark
            items.append(
                f'<li class="{_MARK_CLASSES[mark]}"><strong>{option_letter(index)}.</strong> '
                f"{self.render_inline(option.text)}{escape(_MARK_SUFFIXES[mark])}</li>"
            )
        parts = [
            f'<p class="position">Question {view.position} of {view.total}</p>',
            f'<div class="question-html">{self.render_fragment(view.question)}</div>',
            f'<ol class="options">{"".join(items)}</ol>',
        ]
        if show_unanswered and view.selected is None:
            parts.append('<p class="unanswered"><em>Not answered.</em></p>')
        if view.explanation:
            parts.append(
                f'<div class="explanation"><strong>Explanation:</strong> '
                f"{self.render_fragment(view.explanation)}</div>"
            )
        return "".join(parts)

    def wrap_with_mathjax(self, body_html: str, title: str = "QuizProctor") -> str:
        """Wrap a fragment inside a minimal HTML document that loads MathJax."""

        return f"""<!doctype html>
<html lang="en">
  <head>
    <meta charset="utf-8" />
    <title>{escape(title)}</title>
    <meta name="viewport" content="width=device-width, initial-scale=1" />
    <style>
      body {{ font-family: 'Segoe UI', system-ui, sans-serif; margin: 0; padding: 1rem; }}
      .question-html {{ font-size: 1.1rem; line-height: 1.5; }}
      .options {{ list-style: none; padding: 0; }}
      .option {{ padding: 0.4rem 0.6rem; margin: 0.25rem 0; border-radius: 0.4rem; }}
      .selected {{ background: #dbeafe; }}
      .correct, .selected-correct {{ background: #dcfce7; }}
      .selected-wrong {{ background: #fee2e2; }}
    </style>
    <script>
      window.MathJax = {{ tex: {{ inlineMath: [['$','$']], displayMath: [['$$','$$']] }}, svg: {{ fontCache: 'global' }} }};
    </script>
    <script defer src="{_MATHJAX_SCRIPT}"></script>
  </head>
  <body>
    {body_html}
  </body>
</html>"""

    def render_full_document(self, markdown_text: str, title: str = "QuizProctor") -> str:
        """Convenience wrapper to render markdown and embed MathJax."""

        return self.wrap_with_mathjax(self.render_fragment(markdown_text), title=title)


# Shared instance; MarkdownIt is safe to reuse for read-only renders across threads.
renderer = MarkdownMathRenderer()
