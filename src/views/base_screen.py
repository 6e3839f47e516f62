from textual import on, work
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Container
from textual.events import ScreenResume
from textual.screen import Screen
from textual.widgets import Button, Footer, Header, Label, ListItem, ListView, Markdown

from utils.messages import (
    CartChangedMessage,
    ModeSwitchedMessage,
    NotificationsChangedMessage,
    UserLoginMessage,
    UserLogoutMessage,
)
from utils.pure import generate_markdown_table
from views.modal_dialog import ConfirmModal, QuitDialogModal


class Sidebar(Container):
    init_mode = ""

    def compose(self) -> ComposeResult:
        yield Label("User Info", id="label-info-1")
        yield Markdown("", id="md-userinfo")
        yield Button("Log out", id="btn-logout", variant="error")
        yield Label("Menu", id="label-info-2")
        yield ListView(id="list-menu")

    async def on_mount(self):
        self.init_mode = self.app.current_mode

        list_menu: ListView = self.query_one("#list-menu")
        await list_menu.clear()
        await list_menu.extend(
            [
                ListItem(Label(v), id="list-menu-item-" + k)
                for k, v in self.app.MENU_MODES.items()
            ]
        )
        await self.update_user_info()
        self.highlight_item(self.init_mode)

    async def update_user_info(self) -> None:
        state = self.app.state
        if state.uid is None or state.profile.loading:
            return
        profile = state.profile.profile
        table_rows = [
            ["User ID", state.uid],
            ["Name", profile.display_name],
            ["Username", f"@{profile.username}"],
            ["Cart", f"{len(state.cart)} item(s)"],
            ["Unread", str(state.notifications.unread_count)],
        ]
        md_table_str = generate_markdown_table(None, table_rows, ["l", "l"])
        await self.query_one("#md-userinfo", Markdown).update(md_table_str)

    async def on_list_view_selected(self, event: ListView.Selected):
        selected_mode = event.item.id.removeprefix("list-menu-item-")
        self.highlight_item(self.init_mode)
        if self.app.current_mode != selected_mode:
            self.app.post_message(
                ModeSwitchedMessage(self.app.current_mode, selected_mode)
            )
            await self.app.switch_mode(selected_mode)

    @on(Button.Pressed, "#btn-logout")
    @work
    async def handle_logout(self):
        if not await self.app.push_screen_wait(
            ConfirmModal("Are you sure you want to log out? Your cart will be emptied.")
        ):
            return

        self.post_message(UserLogoutMessage())

    def highlight_item(self, mode_str: str):
        list_menu = self.query_one("#list-menu")
        for item in list_menu.children:
            item.highlighted = mode_str in item.id


class BaseScreen(Screen):
    """
    Inherited by all screens, contains common elements like
    headers, footers, sidebar, and keybindings.
    """

    BINDINGS = [
        Binding("ctrl+z", "quit", "Quit App", show=True),
    ]

    def __init__(self):
        super().__init__()

        self.configure()

    def configure(
        self,
        header_sub_title: str = "Marketplace",
        show_sidebar: bool = True,
    ) -> None:
        """
        configure behavior of the base screen
        """
        self.app.title = "Tackle Market"
        self.sub_title = header_sub_title
        for k, v in self.app.MODES.items():
            if isinstance(self, v) and k in self.app.MENU_MODES:
                self.sub_title = self.app.MENU_MODES[k]

        self._show_sidebar = show_sidebar

    def compose(self) -> ComposeResult:
        if self._show_sidebar:
            yield Sidebar()
        yield Header()
        yield Footer(show_command_palette=False)

    @on(UserLoginMessage)
    def handle_user_login(self):
        self.refresh()

    # messages bubble up, so the sidebar is refreshed from its screen
    @on(CartChangedMessage)
    @on(NotificationsChangedMessage)
    @on(ScreenResume)
    async def refresh_sidebar(self):
        for sidebar in self.query(Sidebar):
            await sidebar.update_user_info()

    @work()
    async def action_quit(self):
        await self.app.push_screen_wait(QuitDialogModal())
