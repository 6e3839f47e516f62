from textual import on, work
from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical
from textual.events import Key
from textual.widgets import Button, Input, Label

from utils.messages import UserLoginMessage
from views.base_screen import BaseScreen
from views.modal_dialog import QuitDialogModal


class LoginScreen(BaseScreen):
    """
    Dismisses once a known user id was entered; GlobalState is signed in by then.
    """

    def __init__(self):
        super().__init__()
        self.configure(header_sub_title="Login", show_sidebar=False)

    def compose(self) -> ComposeResult:
        yield from super().compose()
        with Vertical(id="div-login"):
            yield Label("User ID")
            yield Input(placeholder="u1001", id="input-login-uid")
            with Horizontal(id="div-login-btns"):
                yield Button("Quit", id="btn-quit")
                yield Button("Login", id="btn-login", variant="primary")

    def on_mount(self):
        self.query_one("#input-login-uid").focus()

    def on_key(self, event: Key) -> None:
        if event.key == "enter" and self.focused == self.query_one("#input-login-uid"):
            self.handle_login_submit()

    @on(Button.Pressed, "#btn-login")
    @work(exclusive=True)
    async def handle_login_submit(self) -> None:
        input_uid = self.query_one("#input-login-uid", Input)
        uid = input_uid.value.strip()

        if not uid:
            self.notify("User ID cannot be empty!", severity="error")
            return

        user = await self.app.state.login(uid)
        if user is None:
            self.notify(f"No user with id {uid}.", severity="error")
            input_uid.value = ""
            input_uid.focus()
            input_uid.add_class("-invalid")
            return

        self.notify(f"Hello {user.name}!")
        self.app.post_message(UserLoginMessage())
        self.dismiss()

    @on(Button.Pressed, "#btn-quit")
    def handle_quit_(self) -> None:
        self.app.push_screen(QuitDialogModal())
