from textual import events, on
from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical
from textual.screen import ModalScreen
from textual.widgets import Button, MarkdownViewer

from db.crud import get_product
from db.models import Product
from utils.messages import CartChangedMessage, HistoryChangedMessage
from utils.pure import format_price, generate_markdown_table

CONDITION_LABELS = {
    "new": "New, unused",
    "like-new": "Like new",
    "good": "No visible scratches or stains",
    "fair": "Some scratches or stains",
    "poor": "Scratched or stained",
}


class ProdDetailModal(ModalScreen[bool]):
    """
    Product detail. Opening it records the product in the recent history.
    Will return true if cart changed, false if not
    """

    def __init__(self, pid: str) -> None:
        super().__init__()

        self._pid = pid
        self._prod: Product = None

    def compose(self) -> ComposeResult:
        with Horizontal(id="hort-prod-detail"):
            yield MarkdownViewer("", show_table_of_contents=False)
            with Vertical():
                yield Button("Go Back", id="btn-quit")
                yield Button("Add to Cart", id="btn-addcart", variant="primary")

    async def on_mount(self):
        self._prod = await get_product(self._pid)
        if self._prod is None:
            self.app.notify(f"Product {self._pid} no longer exists.", severity="error")
            self.dismiss(False)
            return

        self.app.state.record_view(self._prod)
        self.app.post_message(HistoryChangedMessage())

        table_rows = [
            ["Product ID", self._prod.pid],
            ["Category", self._prod.category],
            ["Price", format_price(self._prod.price)],
            ["Condition", CONDITION_LABELS.get(self._prod.condition, self._prod.condition)],
            ["Description", self._prod.descr],
        ]
        md_table_str = generate_markdown_table(
            ["Attribute", "Value"], table_rows, ["l", "l"]
        )
        header_md = f"### {self._prod.title}\n\n"
        await self.query_one(MarkdownViewer).document.update(header_md + md_table_str)

        # one of each product per cart
        if self._prod.pid in self.app.state.cart:
            btn = self.query_one("#btn-addcart", Button)
            btn.label = "Already in Cart"
            btn.disabled = True

        self.query_one("#btn-quit").focus()

    def on_key(self, event: events.Key) -> None:
        if event.key == "escape":
            self.dismiss(False)

    @on(Button.Pressed, "#btn-quit")
    def handle_quit(self):
        self.dismiss(False)

    @on(Button.Pressed, "#btn-addcart")
    def handle_addcart(self):
        if self.app.state.add_to_cart(self._prod):
            self.app.notify("Item added to cart successfully.")
            self.app.post_message(CartChangedMessage())
            self.dismiss(True)
        else:
            self.dismiss(False)
