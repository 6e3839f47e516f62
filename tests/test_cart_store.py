import json
import os
import sys
import unittest

# Ensure project src/ is on sys.path for imports
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), os.pardir))
src_path = os.path.join(ROOT, "src")
if src_path not in sys.path:
    sys.path.insert(0, src_path)

from db.local_storage import MemoryLocalStorage, QuotaExceededError  # noqa: E402
from stores.cart import (  # noqa: E402
    CART_STORAGE_KEY,
    CART_STORAGE_VERSION,
    CartStore,
    migrate_cart_payload,
)
from stores.models import CartProduct  # noqa: E402


def product(pid: str, title: str = "Rod", price: int = 3000) -> CartProduct:
    return CartProduct(id=pid, title=title, price=price, image=f"/img/{pid}.jpg")


class UnavailableStorage(MemoryLocalStorage):
    def available(self) -> bool:
        return False


class FullStorage(MemoryLocalStorage):
    def set_item(self, key: str, value: str) -> None:
        raise QuotaExceededError("storage full")


class CartStoreTestCase(unittest.TestCase):
    def setUp(self):
        self.storage = MemoryLocalStorage()
        self.cart = CartStore(self.storage)

    def stored(self):
        return json.loads(self.storage.get_item(CART_STORAGE_KEY))

    # ---------- Operations ----------

    def test_add_remove_scenario(self):
        self.cart.add_item(product("A", "Rod", 3000))
        self.cart.add_item(product("A", "Rod", 3000))
        self.assertEqual(len(self.cart.items), 1)

        self.cart.add_item(product("B", "Reel", 9800))
        self.assertEqual([i.id for i in self.cart.items], ["A", "B"])

        self.cart.remove_item("A")
        self.assertEqual([i.id for i in self.cart.items], ["B"])

    def test_repeated_add_is_noop(self):
        self.cart.add_item(product("A", "Rod", 3000))
        self.cart.add_item(product("A", "Renamed Rod", 1))

        (line,) = self.cart.items
        self.assertEqual(line.quantity, 1)
        self.assertEqual(line.title, "Rod")
        self.assertEqual(line.price, 3000)

    def test_distinct_ids_counted(self):
        ids = ["A", "B", "C", "B", "D", "A"]
        for pid in ids:
            self.cart.add_item(product(pid))
        self.assertEqual(len(self.cart), len(set(ids)))
        self.assertEqual([i.id for i in self.cart.items], ["A", "B", "C", "D"])
        self.assertTrue(all(i.quantity == 1 for i in self.cart.items))
        self.assertIn("C", self.cart)
        self.assertNotIn("Z", self.cart)

    def test_remove_is_idempotent(self):
        self.cart.add_item(product("A"))
        self.cart.add_item(product("B"))
        self.cart.remove_item("A")
        self.cart.remove_item("A")
        self.cart.remove_item("missing")
        self.assertEqual([i.id for i in self.cart.items], ["B"])

    def test_clear_cart_resets_everything(self):
        self.cart.add_item(product("A"))
        self.cart.set_totals(500, 3500)
        self.cart.clear_cart()
        self.assertEqual(self.cart.items, [])
        self.assertEqual(self.cart.shipping_fee, 0)
        self.assertEqual(self.cart.total_amount, 0)

        # also from an empty cart
        self.cart.clear_cart()
        self.assertEqual(self.cart.items, [])

    def test_set_totals_overwrites_without_validation(self):
        self.cart.set_totals(500, 3500)
        self.assertEqual((self.cart.shipping_fee, self.cart.total_amount), (500, 3500))
        self.cart.set_totals(-1, -2)
        self.assertEqual((self.cart.shipping_fee, self.cart.total_amount), (-1, -2))
        reloaded = CartStore(self.storage)
        self.assertEqual((reloaded.shipping_fee, reloaded.total_amount), (-1, -2))

    def test_items_is_a_copy(self):
        self.cart.add_item(product("A"))
        self.cart.items.clear()
        self.assertEqual(len(self.cart), 1)

    # ---------- Persistence ----------

    def test_every_mutation_is_persisted(self):
        self.cart.add_item(product("A", "Rod", 3000))
        self.cart.set_totals(500, 3500)
        self.assertEqual(
            self.stored(),
            {
                "state": {
                    "ownerUid": None,
                    "items": [
                        {
                            "id": "A",
                            "title": "Rod",
                            "price": 3000,
                            "image": "/img/A.jpg",
                            "quantity": 1,
                        }
                    ],
                    "shippingFee": 500,
                    "totalAmount": 3500,
                },
                "version": CART_STORAGE_VERSION,
            },
        )

        self.cart.remove_item("A")
        self.assertEqual(self.stored()["state"]["items"], [])

    def test_rehydrates_from_storage(self):
        self.cart.add_item(product("A"))
        self.cart.add_item(product("B"))
        self.cart.set_totals(500, 6500)

        reloaded = CartStore(self.storage)
        self.assertEqual([i.id for i in reloaded.items], ["A", "B"])
        self.assertEqual(reloaded.shipping_fee, 500)
        self.assertEqual(reloaded.total_amount, 6500)

    def test_malformed_json_starts_empty(self):
        self.storage.set_item(CART_STORAGE_KEY, "{not json")
        cart = CartStore(self.storage)
        self.assertEqual(cart.items, [])
        self.assertEqual(cart.total_amount, 0)

        # the store keeps working and overwrites the bad entry
        cart.add_item(product("A"))
        self.assertEqual(self.stored()["state"]["items"][0]["id"], "A")

    def test_wrong_shapes_start_empty(self):
        for raw in (
            "[]",
            '"cart"',
            '{"version": 2}',
            '{"state": [], "version": 2}',
            '{"state": {"items": [{"title": "no id"}]}, "version": 2}',
            '{"state": {"items": ["A"]}, "version": 2}',
            '{"state": {"items": []}, "version": "2"}',
        ):
            with self.subTest(raw=raw):
                self.storage.set_item(CART_STORAGE_KEY, raw)
                self.assertEqual(CartStore(self.storage).items, [])

    def test_wrong_value_types_start_empty(self):
        line = {"id": "A", "title": "Rod", "price": 3000, "image": "x", "quantity": 1}
        for bad in (
            dict(line, price="3000"),
            dict(line, price=None),
            dict(line, price=True),
            dict(line, quantity=0),
            dict(line, quantity="2"),
        ):
            with self.subTest(line=bad):
                payload = {"state": {"items": [bad]}, "version": 2}
                self.storage.set_item(CART_STORAGE_KEY, json.dumps(payload))
                self.assertEqual(CartStore(self.storage).items, [])

        payload = {"state": {"items": [line], "totalAmount": "3500"}, "version": 2}
        self.assertIsNone(migrate_cart_payload(payload))

    def test_recovers_after_wrong_value_types(self):
        bad = {"id": "A", "title": "Rod", "price": "3000", "image": "x", "quantity": 0}
        payload = {"state": {"items": [bad]}, "version": 2}
        self.storage.set_item(CART_STORAGE_KEY, json.dumps(payload))

        cart = CartStore(self.storage)
        cart.add_item(product("B", "Reel", 9800))
        self.assertEqual([(i.id, i.price, i.quantity) for i in cart.items], [("B", 9800, 1)])
        self.assertEqual(CartStore(self.storage).items, cart.items)

    def test_migrates_version_0(self):
        payload = {
            "state": {
                "items": [{"id": "A", "title": "Rod", "price": 3000, "image": "x"}],
            },
            "version": 0,
        }
        self.storage.set_item(CART_STORAGE_KEY, json.dumps(payload))

        cart = CartStore(self.storage)
        self.assertEqual([i.id for i in cart.items], ["A"])
        self.assertEqual(cart.items[0].quantity, 1)
        self.assertIsNone(cart.owner_uid)
        self.assertEqual((cart.shipping_fee, cart.total_amount), (0, 0))
        # written back in the current layout
        self.assertEqual(self.stored()["version"], CART_STORAGE_VERSION)

    def test_migrates_version_1_keeps_owner(self):
        payload = {
            "state": {"ownerUid": "u1001", "items": [], "shippingFee": 500},
            "version": 1,
        }
        cart = migrate_cart_payload(payload)
        self.assertEqual(cart.owner_uid, "u1001")
        self.assertEqual(cart.shipping_fee, 500)
        self.assertEqual(cart.total_amount, 0)

    def test_newer_version_is_discarded(self):
        payload = {"state": {"items": []}, "version": CART_STORAGE_VERSION + 1}
        self.assertIsNone(migrate_cart_payload(payload))

    def test_duplicate_ids_in_storage_are_collapsed(self):
        line = {"id": "A", "title": "Rod", "price": 3000, "image": "x", "quantity": 1}
        payload = {"state": {"items": [line, dict(line, title="Other")]}, "version": 2}
        self.storage.set_item(CART_STORAGE_KEY, json.dumps(payload))

        cart = CartStore(self.storage)
        self.assertEqual(len(cart), 1)
        self.assertEqual(cart.items[0].title, "Rod")

    # ---------- Degraded storage ----------

    def test_no_storage_is_memory_only(self):
        cart = CartStore(None)
        cart.add_item(product("A"))
        cart.set_totals(500, 3500)
        self.assertEqual(len(cart), 1)
        cart.clear_cart()
        self.assertEqual(len(cart), 0)

    def test_unavailable_storage_is_never_written(self):
        storage = UnavailableStorage()
        cart = CartStore(storage)
        cart.add_item(product("A"))
        self.assertEqual(len(cart), 1)
        self.assertEqual(storage.keys(), [])

    def test_write_failure_keeps_memory_state(self):
        cart = CartStore(FullStorage())
        cart.add_item(product("A"))
        cart.add_item(product("B"))
        cart.remove_item("A")
        self.assertEqual([i.id for i in cart.items], ["B"])

    # ---------- Owner ----------

    def test_sync_owner_clears_on_change(self):
        self.cart.sync_owner("u1001")
        self.cart.add_item(product("A"))
        self.cart.set_totals(500, 3500)

        self.cart.sync_owner("u1001")
        self.assertEqual(len(self.cart), 1)

        self.cart.sync_owner("u1002")
        self.assertEqual(self.cart.owner_uid, "u1002")
        self.assertEqual(self.cart.items, [])
        self.assertEqual((self.cart.shipping_fee, self.cart.total_amount), (0, 0))
        self.assertEqual(self.stored()["state"]["ownerUid"], "u1002")

    def test_sync_owner_to_none_clears(self):
        self.cart.sync_owner("u1001")
        self.cart.add_item(product("A"))
        self.cart.sync_owner(None)
        self.assertIsNone(self.cart.owner_uid)
        self.assertEqual(len(self.cart), 0)

    def test_owner_survives_reload(self):
        self.cart.sync_owner("u1001")
        self.cart.add_item(product("A"))
        reloaded = CartStore(self.storage)
        self.assertEqual(reloaded.owner_uid, "u1001")
        reloaded.sync_owner("u1001")
        self.assertEqual(len(reloaded), 1)


if __name__ == "__main__":
    unittest.main()
