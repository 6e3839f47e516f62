from math import ceil

from textual import events, work
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal
from textual.reactive import reactive
from textual.validation import Number
from textual.widgets import DataTable, Input, Label, Select

import db.crud
from utils.pure import format_price
from views.base_screen import BaseScreen
from views.modal_prod_detail import ProdDetailModal

PAGE_SIZE = 5

CATEGORIES = [
    ("Rods", "rod"),
    ("Reels", "reel"),
    ("Lures", "lure"),
    ("Line", "line"),
    ("Hooks", "hook"),
    ("Bait", "bait"),
    ("Wear", "wear"),
    ("Sets", "set"),
    ("Services", "service"),
    ("Other", "other"),
]


class ProdSearchScreen(BaseScreen):
    """
    product search; enter on a row opens the detail modal
    """

    # only here to be displayed in footer
    BINDINGS = [
        Binding("fn+shift+1", "abs(1)", "View Product", show=True, key_display="⏎"),
        Binding("escape", "abs(2)", "Exit Prod View", show=True),
    ]

    page_idx = reactive(1)
    page_cnt = reactive(1)
    query_str = reactive("")
    category = reactive(None)

    def __init__(self):
        super().__init__()

    def compose(self) -> ComposeResult:
        yield from super().compose()
        with Horizontal(id="hort-search"):
            yield Input(
                id="input-search", placeholder="Start typing to search something..."
            )
            yield Select(CATEGORIES, prompt="All categories", id="select-category")
        yield DataTable(id="table-search-result")
        with Horizontal():
            yield Input("1", id="input-page", type="integer")  # page idx start from 1
            yield Label(" / 1", id="label-total-page-cnt")

    def on_mount(self):
        table = self.query_one(DataTable)
        table.cursor_type = "row"
        table.zebra_stripes = True
        table.add_columns("ID", "Title", "Category", "Price", "Condition")

        self.query_one("#input-search").focus()
        self.update_search_result(self.query_str, 1)

    async def on_input_changed(self, message: Input.Changed) -> None:
        if message.input.id == "input-search":
            self.query_str = message.value
            self.page_idx = 1
            self.update_search_result(self.query_str, 1)
        if message.input.id == "input-page" and message.value:
            self.page_idx = int(message.value)

    def on_select_changed(self, message: Select.Changed) -> None:
        self.category = None if message.value is Select.BLANK else message.value
        self.page_idx = 1
        self.update_search_result(self.query_str, 1)

    async def on_key(self, event: events.Key) -> None:
        table = self.query_one(DataTable)
        if event.key == "enter" and self.focused == table and table.row_count:
            pid = table.get_row_at(table.cursor_row)[0]
            self.open_detail(pid)

    @work
    async def open_detail(self, pid: str) -> None:
        await self.app.push_screen_wait(ProdDetailModal(pid))
        await self.refresh_sidebar()

    def validate_page_idx(self, page_idx):
        return min(max(page_idx, 1), self.page_cnt)

    def watch_page_idx(self, _, new_page_idx):
        self.query_one("#input-page").value = str(new_page_idx)
        self.update_search_result(self.query_str, new_page_idx)
        self.query_one("#input-page").validators = [
            Number(minimum=1, maximum=self.page_cnt)
        ]

    @work(exclusive=True)
    async def update_search_result(self, query: str, page: int) -> None:
        products, total_res_cnt = await db.crud.search_products(
            query, page, PAGE_SIZE, category=self.category
        )

        table = self.query_one(DataTable)
        table.clear()
        table.add_rows(
            [
                (p.pid, p.title, p.category, format_price(p.price), p.condition)
                for p in products
            ]
        )
        self.page_cnt = max(ceil(total_res_cnt / PAGE_SIZE), 1)
        self.query_one("#label-total-page-cnt", Label).update(f" / {self.page_cnt}")
