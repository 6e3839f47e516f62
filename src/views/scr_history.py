from textual import events, on, work
from textual.app import ComposeResult
from textual.containers import Horizontal
from textual.events import ScreenResume
from textual.widgets import Button, DataTable, Label

from utils.messages import HistoryChangedMessage
from utils.pure import format_price
from views.base_screen import BaseScreen
from views.modal_dialog import ConfirmModal
from views.modal_prod_detail import ProdDetailModal


class HistoryScreen(BaseScreen):
    """
    Recently viewed products, newest first.
    """

    def compose(self) -> ComposeResult:
        yield from super().compose()
        yield Label("", id="label-history-count")
        yield DataTable(id="table-history")
        with Horizontal(id="hort-buttons"):
            yield Button("Clear History", id="btn-clear-history")

    def on_mount(self):
        table = self.query_one(DataTable)
        table.cursor_type = "row"
        table.zebra_stripes = True
        table.add_columns("#", "ID", "Title", "Price")
        self.reload_history()

    @on(ScreenResume)
    @on(HistoryChangedMessage)
    def reload_history(self):
        history = self.app.state.history.get_history()

        table = self.query_one(DataTable)
        table.clear()
        table.add_rows(
            [
                (i, entry.id, entry.title, format_price(entry.price))
                for i, entry in enumerate(history, start=1)
            ]
        )
        self.query_one("#label-history-count", Label).update(
            f"{len(history)} of {self.app.state.history.max_length} recently viewed"
        )

    async def on_key(self, event: events.Key) -> None:
        table = self.query_one(DataTable)
        if event.key == "enter" and self.focused == table and table.row_count:
            pid = table.get_row_at(table.cursor_row)[1]
            self.open_detail(pid)

    @work
    async def open_detail(self, pid: str) -> None:
        await self.app.push_screen_wait(ProdDetailModal(pid))
        self.reload_history()
        await self.refresh_sidebar()

    @on(Button.Pressed, "#btn-clear-history")
    @work
    async def handle_clear_history(self) -> None:
        if await self.app.push_screen_wait(ConfirmModal("Clear recently viewed items?")):
            self.app.state.history.clear_history()
            self.post_message(HistoryChangedMessage())
