from rich.markup import escape
from textual import on, work
from textual.app import ComposeResult
from textual.containers import Horizontal
from textual.events import ScreenResume
from textual.widgets import Button, Label, ListItem, ListView

from stores.models import NotificationEntry
from utils.messages import NotificationsChangedMessage
from views.base_screen import BaseScreen


class NotificationItem(ListItem):
    def __init__(self, entry: NotificationEntry):
        super().__init__()
        self.entry = entry
        if entry.unread:
            self.add_class("unread")

    def compose(self) -> ComposeResult:
        marker = "●" if self.entry.unread else " "
        yield Label(f"{marker} {self.entry.icon}  {escape(self.entry.title)}  [dim]{self.entry.time}[/]")
        yield Label(f"    ({self.entry.type}) {escape(self.entry.content)}", classes="notification-content")


class NotificationsScreen(BaseScreen):
    """
    Notifications for the signed-in user. Selecting one marks it read.
    """

    def compose(self) -> ComposeResult:
        yield from super().compose()
        yield Label("", id="label-unread")
        yield ListView(id="list-notifications")
        with Horizontal(id="hort-buttons"):
            yield Button("Check for New", id="btn-fetch")
            yield Button("Remove", id="btn-remove")
            yield Button("Mark All as Read", id="btn-read-all", variant="primary")

    async def on_mount(self):
        await self.render_notifications()

    @on(ScreenResume)
    @on(NotificationsChangedMessage)
    async def render_notifications(self):
        store = self.app.state.notifications
        list_view = self.query_one("#list-notifications", ListView)
        index = list_view.index
        await list_view.clear()
        await list_view.extend([NotificationItem(n) for n in store.notifications])
        if index is not None and len(store):
            list_view.index = min(index, len(store) - 1)

        self.query_one("#label-unread", Label).update(
            f"{store.unread_count} unread of {len(store)}"
        )

    @on(ListView.Selected, "#list-notifications")
    @work(exclusive=True)
    async def handle_select(self, event: ListView.Selected):
        entry = event.item.entry
        if entry.unread:
            await self.app.state.mark_notification_read(entry.id)
            self.post_message(NotificationsChangedMessage())

    @on(Button.Pressed, "#btn-read-all")
    @work(exclusive=True)
    async def handle_read_all(self):
        if not self.app.state.notifications.unread_count:
            self.app.notify("No unread notifications.", severity="warning")
            return
        await self.app.state.mark_all_notifications_read()
        self.post_message(NotificationsChangedMessage())

    @on(Button.Pressed, "#btn-remove")
    def handle_remove(self):
        list_view = self.query_one("#list-notifications", ListView)
        item = list_view.highlighted_child
        if item is None:
            return
        self.app.state.notifications.remove_notification(item.entry.id)
        self.post_message(NotificationsChangedMessage())

    @on(Button.Pressed, "#btn-fetch")
    @work(exclusive=True)
    async def handle_fetch(self):
        new_cnt = await self.app.state.refresh_notifications()
        if new_cnt:
            self.app.notify(f"{new_cnt} new notification(s).")
            self.post_message(NotificationsChangedMessage())
        else:
            self.app.notify("You're all caught up.")
