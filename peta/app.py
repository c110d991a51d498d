from __future__ import annotations

from pathlib import Path
from typing import FrozenSet, Optional, Sequence

from rich.text import Text
from textual import work
from textual.app import App, ComposeResult
from textual.containers import Container, Horizontal, Vertical, VerticalScroll
from textual.screen import ModalScreen
from textual.widgets import Button, Footer, Header, Label, ListItem, ListView, Static

from peta.codec import encode_request
from peta.http_client import RequestsTransport
from peta.models import RequestDefinition, ResponseResult
from peta.session import (
    Intent,
    Session,
    Transition,
    ViewMode,
    completion_for,
    find_request,
    handle_intent,
    id_at,
    open_session,
    selected_request,
)
from peta.storage.config import Config, get_editor_command
from peta.storage.requests import find_index
from peta.utils.editor import edit_text
from peta.views import render_detail, render_response


class RequestListWidget(ListView):
    can_focus = True
    BINDINGS = [
        ("j", "cursor_down", "Down"),
        ("k", "cursor_up", "Up"),
        ("g", "first", "First"),
        ("G", "last", "Last"),
    ]
    DEFAULT_CSS = """
    RequestListWidget {
        width: 32%;
        border: round green;
    }

    RequestListWidget:focus {
        border: round yellow;
    }

    RequestListWidget .running {
        text-style: italic;
        color: $warning;
    }
    """

    def show_requests(
        self, requests: Sequence[RequestDefinition], in_flight: FrozenSet[str]
    ) -> None:
        self.clear()
        if not requests:
            self.append(ListItem(Label("no requests found")))
            return
        for number, request in enumerate(requests, start=1):
            running = request.id in in_flight
            marker = " ..." if running else ""
            label = Label(Text(f"{number}. [{request.method}] {request.name}{marker}"))
            self.append(ListItem(label, classes="running" if running else ""))

    def action_first(self) -> None:
        if self.children:
            self.index = 0

    def action_last(self) -> None:
        if self.children:
            self.index = len(self.children) - 1


class DetailPanelWidget(Static):
    can_focus = True
    DEFAULT_CSS = """
    DetailPanelWidget {
        border: round blue;
        padding: 0 1;
    }

    DetailPanelWidget:focus {
        border: round yellow;
    }
    """

    def show_request(self, request: Optional[RequestDefinition]) -> None:
        if request is None:
            self.border_title = None
            self.update("(No request selected)")
            return
        self.border_title = request.id[:8]
        self.update(Text("\n".join(render_detail(request))))


class ResponsePanelWidget(VerticalScroll):
    can_focus = True
    DEFAULT_CSS = """
    ResponsePanelWidget {
        border: round cyan;
        padding: 0 1;
    }

    ResponsePanelWidget:focus {
        border: round yellow;
    }
    """

    def compose(self) -> ComposeResult:
        yield Static(id="response-content")

    def set_content(self, response: Optional[ResponseResult], running: bool = False) -> None:
        if running:
            self.border_title = "Response (running)"
            lines = ["Running..."]
        else:
            self.border_title = "Response"
            lines = render_response(response)
        self.query_one("#response-content", Static).update(Text("\n".join(lines)))


class ConfirmDeleteScreen(ModalScreen[bool]):
    CSS = """
    ConfirmDeleteScreen {
        align: center middle;
    }

    #confirm-dialog {
        width: 64;
        height: auto;
        padding: 1 2;
        border: thick $error;
        background: $panel;
    }

    #confirm-target {
        color: $text-muted;
        margin-top: 1;
    }

    #confirm-buttons {
        margin-top: 1;
        height: auto;
        align: center middle;
    }

    #confirm-buttons Button {
        margin: 0 1;
    }
    """

    BINDINGS = [
        ("y", "confirm", "Delete"),
        ("n", "cancel", "Keep"),
        ("escape", "cancel", "Keep"),
    ]

    def __init__(self, request: RequestDefinition) -> None:
        super().__init__()
        self.request = request

    def compose(self) -> ComposeResult:
        yield Vertical(
            Static(Text(f"Delete {self.request.name}? (y/n)"), id="confirm-message"),
            Static(Text(f"{self.request.method} {self.request.url}"), id="confirm-target"),
            Horizontal(
                Button("Delete", variant="error", id="confirm-yes"),
                Button("Keep", id="confirm-no"),
                id="confirm-buttons",
            ),
            id="confirm-dialog",
        )

    def on_button_pressed(self, event: Button.Pressed) -> None:
        self.dismiss(event.button.id == "confirm-yes")

    def action_confirm(self) -> None:
        self.dismiss(True)

    def action_cancel(self) -> None:
        self.dismiss(False)


class PetaApp(App):
    TITLE = "peta"
    BINDINGS = [
        ("q", "quit", "Quit"),
        ("n", "new_request", "New"),
        ("d", "delete_request", "Delete"),
        ("e", "edit_request", "Edit"),
        ("s", "save_requests", "Save"),
        ("enter", "run_request", "Run"),
        ("escape", "back", "Back"),
        ("tab", "focus_next", "Next"),
        ("shift+tab", "focus_previous", "Prev"),
    ]

    CSS = """
    Screen {
        layout: vertical;
    }

    #main {
        height: 1fr;
    }

    #right-panel {
        width: 70%;
        layout: vertical;
        height: 1fr;
    }

    #detail-panel {
        height: 1fr;
    }

    #response-panel {
        height: 1fr;
    }
    """

    def __init__(
        self,
        store_path: Optional[Path] = None,
        config: Optional[Config] = None,
    ) -> None:
        super().__init__()
        self.config = config or Config()
        self.session = Session(store_path=store_path)
        self.transport = RequestsTransport(timeout=self.config.timeout)

    def compose(self) -> ComposeResult:
        yield Header()
        yield Container(
            Horizontal(
                RequestListWidget(id="request-list"),
                Container(
                    DetailPanelWidget(id="detail-panel"),
                    ResponsePanelWidget(id="response-panel"),
                    id="right-panel",
                ),
                id="main",
            )
        )
        yield Footer()

    def on_mount(self) -> None:
        self.session = open_session(self.session.store_path)
        self._reload_request_list()
        self.query_one(RequestListWidget).focus()

    def on_list_view_highlighted(self, event: ListView.Highlighted) -> None:
        if self.session.mode is ViewMode.LIST:
            self._show_request_details(self._highlighted_request())

    def on_list_view_selected(self, event: ListView.Selected) -> None:
        request = self._highlighted_request()
        if request is None:
            return
        self._apply(handle_intent(self.session, Intent.select(request.id)))
        self.query_one(DetailPanelWidget).focus()

    def action_new_request(self) -> None:
        if self.session.mode is not ViewMode.LIST:
            return
        self._apply(handle_intent(self.session, Intent.new()))
        request_list = self.query_one(RequestListWidget)
        request_list.index = len(self.session.requests) - 1

    def action_delete_request(self) -> None:
        if self.session.mode is not ViewMode.LIST:
            return
        request = self._highlighted_request()
        if request is None:
            return
        self.push_screen(
            ConfirmDeleteScreen(request),
            lambda confirmed: self._delete_request(request, confirmed),
        )

    def action_edit_request(self) -> None:
        if self.session.mode is ViewMode.LIST:
            request = self._highlighted_request()
            if request is None:
                return
            self._apply(handle_intent(self.session, Intent.select(request.id)))
        request = selected_request(self.session)
        if request is None:
            return
        edited = self._open_editor(encode_request(request))
        if edited is None:
            return
        self._apply(handle_intent(self.session, Intent.text_edited(edited, request.id)))

    def action_save_requests(self) -> None:
        self._apply(handle_intent(self.session, Intent.save()))

    def action_run_request(self) -> None:
        transition = handle_intent(self.session, Intent.execute())
        self._apply(transition)
        if transition.pending is not None:
            self._execute(transition.pending)

    def action_back(self) -> None:
        if self.session.mode is not ViewMode.DETAIL:
            return
        self._apply(handle_intent(self.session, Intent.escape()))
        self.query_one(RequestListWidget).focus()

    @work(thread=True)
    def _execute(self, request: RequestDefinition) -> None:
        intent = completion_for(request, self.transport)
        self.call_from_thread(self._complete, intent)

    def _complete(self, intent: Intent) -> None:
        self._apply(handle_intent(self.session, intent))

    def _apply(self, transition: Transition) -> None:
        self.session = transition.session
        for notice in transition.notices:
            self.notify(notice.message, severity=notice.severity)
        if transition.changed:
            self._reload_request_list()

    def _delete_request(self, request: RequestDefinition, confirmed: Optional[bool]) -> None:
        if not confirmed:
            return
        self._apply(handle_intent(self.session, Intent.delete(request.id)))

    def _open_editor(self, text: str) -> Optional[str]:
        editor = get_editor_command(self.config)
        if self._driver is None:
            return edit_text(text, editor)
        self._driver.stop_application_mode()
        try:
            return edit_text(text, editor)
        finally:
            self._driver.start_application_mode()
            self.refresh(layout=True)

    def _reload_request_list(self) -> None:
        request_list = self.query_one(RequestListWidget)
        previous = request_list.index
        request_list.show_requests(self.session.requests, self.session.in_flight)
        if not self.session.requests:
            self._show_request_details(None)
            return

        selected = selected_request(self.session)
        if selected is not None:
            request_list.index = find_index(list(self.session.requests), selected.id)
        elif previous is not None:
            request_list.index = min(previous, len(self.session.requests) - 1)
        else:
            request_list.index = 0
        self._show_request_details(selected or self._highlighted_request())

    def _highlighted_request(self) -> Optional[RequestDefinition]:
        request_list = self.query_one(RequestListWidget)
        if request_list.index is None:
            return None
        return find_request(self.session, id_at(self.session, request_list.index))

    def _show_request_details(self, request: Optional[RequestDefinition]) -> None:
        self.query_one(DetailPanelWidget).show_request(request)
        response_panel = self.query_one(ResponsePanelWidget)
        if request is None:
            response_panel.set_content(None)
            return
        response_panel.set_content(
            request.response, running=request.id in self.session.in_flight
        )
