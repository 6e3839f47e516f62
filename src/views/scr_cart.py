from rich.markup import escape
from textual import on, work
from textual.app import ComposeResult
from textual.containers import Container, Horizontal, HorizontalGroup, VerticalScroll
from textual.events import ScreenResume
from textual.message import Message
from textual.widgets import Button, Label, Rule

from stores.models import CartLineItem
from utils.messages import CartChangedMessage, ModeSwitchedMessage
from utils.pure import compute_totals, format_price
from views.base_screen import BaseScreen
from views.modal_dialog import ConfirmModal


class CartItemActionRemoveMessage(Message):
    bubble = True


class CartItemActionLabel(Label):
    def action_remove(self):
        self.post_message(CartItemActionRemoveMessage())


class CartItemWidget(HorizontalGroup):
    def __init__(self, item: CartLineItem):
        super().__init__()
        self.item = item

    def compose(self):
        with Container(id="div-cart-item-group"):
            with Container(id="div-item"):
                yield Label(escape(self.item.title), id="label-item-name")
                yield Label(f"x{self.item.quantity}", id="label-item-qty")
                yield Label(format_price(self.item.price), id="label-item-price")
            with Container(id="div-actions"):
                yield CartItemActionLabel(
                    "[@click=remove()]Remove[/]", id="link-item-remove"
                )

    @on(CartItemActionRemoveMessage)
    @work()
    async def handle_remove_item(self):
        remove_confirmed = await self.app.push_screen_wait(
            ConfirmModal(
                f"Do you really want to remove {escape(self.item.title)} from cart?"
            )
        )

        if remove_confirmed:
            self.app.state.remove_from_cart(self.item.id)
            self.post_message(CartChangedMessage())
            self.notify("Item removed from cart.", severity="information")


class CartScreen(BaseScreen):
    """
    cart contents and totals; totals are recomputed and stored on every change
    """

    def compose(self) -> ComposeResult:
        yield from super().compose()
        yield VerticalScroll(id="vertscroll-content")
        yield Label("Subtotal: ¥0", id="label-cart-subtotal")
        yield Label("Shipping: ¥0", id="label-cart-shipping")
        yield Label("Total: ¥0", id="label-cart-total")
        yield Rule(line_style="dashed")
        with Horizontal(id="hort-buttons"):
            yield Button("Clear Cart", id="btn-clear-cart")
            yield Button("Refresh", id="btn-refresh")

    async def on_mount(self):
        self.handle_cart_change()

    @on(CartChangedMessage)
    @on(ModeSwitchedMessage)
    @on(ScreenResume)
    @on(Button.Pressed, "#btn-refresh")
    @work(exclusive=True)  # must exclusive, else might race cond and gen duplicate
    async def handle_cart_change(self):
        """
        Re-render the cart from the store
        """
        state = self.app.state
        state.update_cart_totals()
        cart_items = state.cart.items

        content = self.query_one("#vertscroll-content")
        content_items = [c.item for c in content.children]
        if content_items != cart_items:
            await content.remove_children()
            await content.mount_all([CartItemWidget(item) for item in cart_items])

        if not cart_items:
            content.add_class("no-items")
        else:
            content.remove_class("no-items")

        subtotal, _, _ = compute_totals(cart_items)
        self.query_one("#label-cart-subtotal", Label).update(
            f"Subtotal: {format_price(subtotal)}"
        )
        self.query_one("#label-cart-shipping", Label).update(
            f"Shipping: {format_price(state.cart.shipping_fee)}"
        )
        self.query_one("#label-cart-total", Label).update(
            f"Total: {format_price(state.cart.total_amount)}"
        )

    @on(Button.Pressed, "#btn-clear-cart")
    @work
    async def handle_clear_cart(self) -> None:
        if not len(self.app.state.cart):
            self.app.notify("Cart is empty.", severity="warning")
            return

        remove_confirmed = await self.app.push_screen_wait(
            ConfirmModal("Do you really want to remove all items from cart?", tone="error")
        )
        if remove_confirmed:
            self.app.state.cart.clear_cart()
            self.post_message(CartChangedMessage())
