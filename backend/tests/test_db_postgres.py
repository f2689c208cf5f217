import unittest

from backend.db import NewProduct, PostgresDbClient


class PostgresDbClientTests(unittest.TestCase):
    """
    Uses SQLite via SQLAlchemy URL for fast/local testing of the Postgres client logic.
    """

    @classmethod
    def setUpClass(cls):
        cls.db = PostgresDbClient("sqlite+pysqlite:///:memory:")
        cls.palm = cls.db.create_product(
            NewProduct("Areca Palm", 450, "/images/plant-areca-palm.png", "Indoor Plants")
        )
        cls.tulsi = cls.db.create_product(
            NewProduct("Tulsi", 149, "/images/plant-tulsi.png", "Medicinal Plants", 4)
        )

    def test_create_and_get_product(self):
        fetched = self.db.get_product(self.palm.id)
        self.assertIsNotNone(fetched)
        self.assertEqual(fetched.name, "Areca Palm")
        self.assertTrue(fetched.in_stock)
        self.assertEqual(fetched.rating, 5)
        self.assertIsNone(self.db.get_product(99999))

    def test_list_products_by_category(self):
        medicinal = self.db.list_products(category="Medicinal Plants")
        self.assertEqual([p.name for p in medicinal], ["Tulsi"])
        self.assertGreaterEqual(self.db.count_products(), 2)

    def test_cart_merges_quantity(self):
        self.db.add_cart_item("merge-session", self.palm.id)
        item = self.db.add_cart_item("merge-session", self.palm.id, 2)
        self.assertEqual(item.quantity, 3)

        items = self.db.get_cart_items("merge-session")
        self.assertEqual(len(items), 1)
        self.assertEqual(items[0].product.name, "Areca Palm")

    def test_cart_is_scoped_to_session(self):
        item = self.db.add_cart_item("owner", self.tulsi.id)
        self.assertIsNone(self.db.update_cart_item("intruder", item.id, 5))
        self.db.remove_cart_item("intruder", item.id)
        self.assertEqual(len(self.db.get_cart_items("owner")), 1)

        updated = self.db.update_cart_item("owner", item.id, 4)
        self.assertEqual(updated.quantity, 4)
        self.db.remove_cart_item("owner", item.id)
        self.assertEqual(self.db.get_cart_items("owner"), [])

    def test_merged_quantity_is_capped(self):
        self.db.add_cart_item("cap-session", self.tulsi.id, 99)
        item = self.db.add_cart_item("cap-session", self.tulsi.id, 99)
        self.assertEqual(item.quantity, 99)

    def test_update_and_delete_product(self):
        fern = self.db.create_product(NewProduct("Boston Fern", 299, "fern.png", "Indoor Plants"))
        updated = self.db.update_product(
            fern.id, {"price": 349, "in_stock": False, "unknown": "ignored"}
        )
        self.assertEqual(updated.price, 349)
        self.assertFalse(self.db.get_product(fern.id).in_stock)
        self.assertIsNone(self.db.update_product(99999, {"price": 1}))

        self.db.add_cart_item("fern-session", fern.id)
        self.assertTrue(self.db.delete_product(fern.id))
        self.assertIsNone(self.db.get_product(fern.id))
        self.assertEqual(self.db.get_cart_items("fern-session"), [])
        self.assertFalse(self.db.delete_product(fern.id))

    def test_blog_posts_and_contact_messages(self):
        post = self.db.create_blog_post("Title", "Excerpt", "/images/blog.png")
        self.assertIn(post.id, [p.id for p in self.db.list_blog_posts()])

        message = self.db.create_contact_message("Ann", "ann@example.com", "Hello")
        self.assertEqual(message.full_name, "Ann")
        self.assertIsNotNone(message.id)


if __name__ == "__main__":
    unittest.main()
