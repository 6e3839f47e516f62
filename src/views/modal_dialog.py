from typing import Dict, Literal, Tuple

from typing_extensions import override

from textual.app import ComposeResult
from textual.containers import Container, Horizontal
from textual.screen import ModalScreen
from textual.widgets import Button, Label

from utils.messages import QuitRequestedMessage

Tone = Literal["default", "positive", "warning", "error"]


class DialogModal(ModalScreen[bool]):
    """
    Yes/no confirmation. Dismisses with True for the primary button.
    """

    # (primary variant, secondary variant) per tone
    VARIANT_MAP: Dict[str, Tuple[str, str]] = {
        "default": ("primary", "default"),
        "positive": ("success", "default"),
        "warning": ("warning", "default"),
        "error": ("error", "primary"),
    }

    def __init__(
        self,
        caption: str,
        primary_text: str = "OK",
        secondary_text: str = "",
        tone: Tone = "default",
    ):
        super().__init__()
        self.caption = caption
        self.primary_text = primary_text
        self.secondary_text = secondary_text
        self.tone = tone

    def compose(self) -> ComposeResult:
        primary_variant, secondary_variant = self.VARIANT_MAP[self.tone]
        with Container(id="div-dialog"):
            yield Label(self.caption, id="caption")
            with Horizontal(id="dialog"):
                if self.secondary_text:
                    yield Button(
                        self.secondary_text, variant=secondary_variant, id="btn-secondary"
                    )
                yield Button(self.primary_text, variant=primary_variant, id="btn-primary")

    def on_mount(self):
        # destructive dialogs default to the safe choice
        if self.secondary_text and self.tone == "error":
            self.query_one("#btn-secondary").focus()
        else:
            self.query_one("#btn-primary").focus()

    def on_button_pressed(self, event: Button.Pressed) -> None:
        self.dismiss(event.button.id == "btn-primary")


class ConfirmModal(DialogModal):
    def __init__(self, caption: str, tone: Tone = "warning"):
        super().__init__(caption, primary_text="Yes", secondary_text="No", tone=tone)


class QuitDialogModal(ConfirmModal):
    def __init__(self):
        super().__init__("Are you sure you want to quit?", tone="error")

    @override
    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "btn-primary":
            self.post_message(QuitRequestedMessage())
            self.dismiss(True)
        else:
            self.dismiss(False)
