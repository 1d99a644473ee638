"""Rendering helpers turning session snapshots into UI markup."""

from __future__ import annotations

from html import escape
from typing import Optional

from .search_session import FetchStatus, SessionSnapshot

NO_WORDS_FOUND = "No words found"


class WordResultFormatter:
    """Render pages of words and the status line shown above them."""

    def format_words(self, snapshot: SessionSnapshot) -> str:
        """Render the current page as word chips, or the empty placeholder."""

        words = snapshot.page or ()
        if not words:
            return (
                '<div class="wf-words">'
                f'<span class="wf-word wf-empty">{escape(NO_WORDS_FOUND)}</span>'
                "</div>"
            )
        chips = "".join(f'<span class="wf-word">{escape(word)}</span>' for word in words)
        return f'<div class="wf-words">{chips}</div>'

    def format_page_label(self, snapshot: SessionSnapshot) -> str:
        if not snapshot.page:
            return ""
        count = len(snapshot.page)
        noun = "word" if count == 1 else "words"
        return f"Page {snapshot.page_index + 1} · {count} {noun}"

    def format_status(self, snapshot: SessionSnapshot) -> str:
        status = snapshot.status
        if status is FetchStatus.FETCHING:
            return "Searching…"
        if status is FetchStatus.FAILED:
            detail: Optional[str] = snapshot.error
            suffix = f" ({detail})" if detail else ""
            return f"⚠️ The search failed{suffix}. Press the same button again to retry."
        if status is FetchStatus.SUCCEEDED:
            label = self.format_page_label(snapshot)
            return label or NO_WORDS_FOUND
        return "Fill in any of the fields and press **Search**."


__all__ = ["WordResultFormatter", "NO_WORDS_FOUND"]
