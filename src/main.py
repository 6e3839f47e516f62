from typing import Optional

from textual import on, work
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.widgets import LoadingIndicator

from utils.logger import get_logger
from utils.messages import ModeSwitchedMessage, QuitRequestedMessage, UserLogoutMessage
from utils.state import GlobalState
from views.scr_cart import CartScreen
from views.scr_history import HistoryScreen
from views.scr_login import LoginScreen
from views.scr_notifications import NotificationsScreen
from views.scr_prod_search import ProdSearchScreen

_logger = get_logger(__name__)


class MarketApp(App):
    BINDINGS = [
        Binding("ctrl+t", "switch_light", "Toggle Theme", show=True),
    ]

    MODES = {
        "prod_search": ProdSearchScreen,
        "cart": CartScreen,
        "history": HistoryScreen,
        "notifications": NotificationsScreen,
    }

    MENU_MODES = {
        "prod_search": "Search Products",
        "cart": "Cart",
        "history": "Recently Viewed",
        "notifications": "Notifications",
    }

    CSS_PATH = "styles/market.tcss"

    state: GlobalState

    def __init__(self, state: Optional[GlobalState] = None):
        super().__init__()
        self.state = state if state is not None else GlobalState.from_settings()

    def compose(self) -> ComposeResult:
        yield LoadingIndicator()

    async def on_mount(self) -> None:
        self.main_flow()

    def action_switch_light(self):
        if self.theme == "textual-dark":
            self.theme = "solarized-light"
        else:
            self.theme = "textual-dark"
        self.notify(f"Theme changed to {self.theme}")

    @on(UserLogoutMessage)
    def handle_user_logout(self):
        self.state.logout()
        self.notify("Logout successful.")
        self.main_flow()

    @on(QuitRequestedMessage)
    def handle_quit(self):
        self.exit()

    @work
    async def main_flow(self):
        await self.push_screen_wait(LoginScreen())
        _logger.info(f"Signed in as {self.state.uid}, cart has {len(self.state.cart)} item(s).")
        self.post_message(ModeSwitchedMessage(self.current_mode, "prod_search"))
        await self.switch_mode("prod_search")


def run() -> None:
    MarketApp().run()


if __name__ == "__main__":
    run()
