"""User interface assembly for the Gradio front-end."""

from __future__ import annotations

from typing import Any, Callable, Dict, Optional, Tuple

import gradio as gr

from word_finder.core import FIELD_HELP, FieldId, FilterCriteria

from ..services.result_formatter import WordResultFormatter
from ..services.search_session import FetchStatus, SearchSession, SessionSnapshot

SessionFactory = Callable[[], SearchSession]

FIELD_ORDER: Tuple[FieldId, ...] = (
    FieldId.LETTERS,
    FieldId.ABSENT_LETTERS,
    FieldId.STARTS_WITH,
    FieldId.ENDS_WITH,
    FieldId.PATTERN,
    FieldId.SIZE,
)


def raw_criteria(*values: Any) -> Dict[str, Any]:
    """Pair form values, in :data:`FIELD_ORDER`, with their field ids."""

    return {field.value: value for field, value in zip(FIELD_ORDER, values)}


def close_session(session: Optional[SearchSession]) -> None:
    """Release a browser session's fetch resources once Gradio drops its state."""

    if session is not None:
        session.close()


class SearchHandlers:
    """Event handlers wiring form actions to a per-browser :class:`SearchSession`.

    Every handler receives the session held in ``gr.State`` (``None`` on the
    first event of a browser session) and returns it first so Gradio stores
    it back.
    """

    def __init__(
        self,
        session_factory: SessionFactory,
        formatter: Optional[WordResultFormatter] = None,
    ) -> None:
        self._session_factory = session_factory
        self._formatter = formatter or WordResultFormatter()

    def _session(self, session: Optional[SearchSession]) -> SearchSession:
        return session if session is not None else self._session_factory()

    def render(self, session: SearchSession) -> Tuple[Any, ...]:
        snapshot: SessionSnapshot = session.snapshot()
        show_nav = session.is_active and snapshot.status is not FetchStatus.FETCHING
        return (
            session,
            self._formatter.format_status(snapshot),
            self._formatter.format_words(snapshot),
            gr.update(interactive=snapshot.has_previous, visible=show_nav),
            gr.update(interactive=snapshot.has_next, visible=show_nav),
        )

    def _search_enabled(self, session: SearchSession, raw: Dict[str, Any]) -> bool:
        # A failed search stays retryable through the Search button.
        return session.fetch_status is FetchStatus.FAILED or session.differs_from_applied(raw)

    def edited(self, session: Optional[SearchSession], *values: Any):
        session = self._session(session)
        return session, gr.update(interactive=self._search_enabled(session, raw_criteria(*values)))

    def submit(self, session: Optional[SearchSession], *values: Any) -> Tuple[Any, ...]:
        session = self._session(session)
        raw = raw_criteria(*values)
        if session.fetch_status is FetchStatus.FAILED and not session.differs_from_applied(raw):
            session.retry()
        else:
            session.submit(raw)
        # Echo the normalised criteria back into the form.
        form = session.criteria.to_form()
        return self.render(session) + (
            gr.update(interactive=session.fetch_status is FetchStatus.FAILED),
            *(form[field.value] for field in FIELD_ORDER),
        )

    def next_page(self, session: Optional[SearchSession]) -> Tuple[Any, ...]:
        session = self._session(session)
        session.next()
        return self.render(session)

    def previous_page(self, session: Optional[SearchSession]) -> Tuple[Any, ...]:
        session = self._session(session)
        session.previous()
        return self.render(session)

    def reset(self, session: Optional[SearchSession]) -> Tuple[Any, ...]:
        session = self._session(session)
        session.reset()
        return self.render(session) + (
            gr.update(interactive=False),
            *("" for _ in FIELD_ORDER),
        )


_INTERFACE_CSS = """
.wf-container {max-width: 720px; margin: 0 auto;}
.wf-words {display: flex; flex-wrap: wrap; gap: 12px; justify-content: center; padding: 16px; border: 1px solid #24334E; border-radius: 12px;}
.wf-word {background: #24334E; color: #f8fafc; padding: 6px 14px; border-radius: 8px;}
.wf-empty {font-style: italic;}
"""


def create_interface(session_factory: SessionFactory) -> gr.Blocks:
    """Construct the interactive Gradio Blocks UI."""

    handlers = SearchHandlers(session_factory)

    with gr.Blocks(title="Word Finder", css=_INTERFACE_CSS) as interface:
        session_state = gr.State(None, delete_callback=close_session)
        with gr.Column(elem_classes=["wf-container"]):
            gr.Markdown("## Word Finder\nCombine any of the filters below to search the word list.")
            inputs = []
            with gr.Row():
                for field in FIELD_ORDER[:2]:
                    inputs.append(_field_textbox(field))
            with gr.Row():
                for field in FIELD_ORDER[2:4]:
                    inputs.append(_field_textbox(field))
            with gr.Row():
                for field in FIELD_ORDER[4:]:
                    inputs.append(_field_textbox(field))

            search_btn = gr.Button("Search", variant="primary", interactive=False)
            status_md = gr.Markdown("Fill in any of the fields and press **Search**.")
            with gr.Row():
                previous_btn = gr.Button("Previous", visible=False, interactive=False)
                next_btn = gr.Button("Next", visible=False, interactive=False)
                reset_btn = gr.Button("Reset")
            words_html = gr.HTML(WordResultFormatter().format_words(_EMPTY_SNAPSHOT))

        view_outputs = [session_state, status_md, words_html, previous_btn, next_btn]
        form_outputs = view_outputs + [search_btn] + inputs

        for textbox in inputs:
            textbox.change(
                handlers.edited,
                inputs=[session_state] + inputs,
                outputs=[session_state, search_btn],
            )
        search_btn.click(handlers.submit, inputs=[session_state] + inputs, outputs=form_outputs)
        next_btn.click(handlers.next_page, inputs=[session_state], outputs=view_outputs)
        previous_btn.click(handlers.previous_page, inputs=[session_state], outputs=view_outputs)
        reset_btn.click(handlers.reset, inputs=[session_state], outputs=form_outputs)

    return interface


def _field_textbox(field: FieldId) -> gr.Textbox:
    help_entry = FIELD_HELP[field]
    return gr.Textbox(
        label=help_entry.label,
        placeholder=help_entry.placeholder,
        info=help_entry.as_info(),
        lines=1,
        max_lines=1,
    )


_EMPTY_SNAPSHOT = SessionSnapshot(
    criteria=FilterCriteria(),
    page_index=0,
    page=None,
    page_count=0,
    status=FetchStatus.IDLE,
    error=None,
    has_next=False,
    has_previous=False,
    generation=0,
)


__all__ = ["SearchHandlers", "create_interface", "close_session", "raw_criteria", "FIELD_ORDER"]
