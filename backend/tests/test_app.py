import unittest
from unittest.mock import MagicMock

from fastapi.testclient import TestClient

import backend.dependencies as dependencies
from backend.app import create_app
from backend.db import InMemoryDbClient, NewProduct
from backend.dependencies import (
    get_admin_policy,
    get_db_client,
    get_document_store,
    get_identity_provider,
    get_image_resolver,
)
from backend.documents import BlogPostInput, InMemoryDocumentStore
from backend.identity import AdminPolicy, InMemoryIdentityProvider, InvalidCredentialsError
from image_delivery.urls import ImageResolver
from shared.types import PostStatus

ENDPOINT = "https://ik.imagekit.io/vvkwy0zte"
ADMIN_EMAIL = "owner@example.com"


class BackendApiTestBase(unittest.TestCase):
    def setUp(self):
        self.app = create_app()
        self.db = InMemoryDbClient()
        self.store = InMemoryDocumentStore()
        self.identity = InMemoryIdentityProvider()
        self.resolver = ImageResolver(url_endpoint=ENDPOINT)
        self.app.dependency_overrides[get_db_client] = lambda: self.db
        self.app.dependency_overrides[get_document_store] = lambda: self.store
        self.app.dependency_overrides[get_identity_provider] = lambda: self.identity
        self.app.dependency_overrides[get_image_resolver] = lambda: self.resolver
        self.app.dependency_overrides[get_admin_policy] = lambda: AdminPolicy([ADMIN_EMAIL])
        self.client = TestClient(self.app)

        self.palm = self.db.create_product(
            NewProduct("Areca Palm", 450, "/images/plant-areca-palm.png", "Indoor Plants")
        )
        self.tulsi = self.db.create_product(
            NewProduct("Tulsi", 149, "/images/plant-tulsi.png", "Medicinal Plants")
        )

    def _sign_up(self, email):
        response = self.client.post(
            "/api/auth/sign-up", json={"email": email, "password": "secret1"}
        )
        self.assertEqual(response.status_code, 201)
        return {"Authorization": f"Bearer {response.json()['id_token']}"}

    def _uid(self, headers):
        return self.client.get("/api/auth/me", headers=headers).json()["uid"]


class CatalogueApiTests(BackendApiTestBase):
    def test_list_products_with_image_descriptors(self):
        response = self.client.get("/api/products")
        self.assertEqual(response.status_code, 200)
        products = response.json()["products"]
        self.assertEqual(len(products), 2)
        image = products[0]["image"]
        self.assertEqual(image["url"], f"{ENDPOINT}/tr:f-auto,q-80/plant-areca-palm.png")
        self.assertTrue(image["placeholder_url"].startswith(f"{ENDPOINT}/tr:w-20,h-20"))
        self.assertIn("1920w", image["srcset"])

    def test_filter_by_category(self):
        response = self.client.get("/api/products", params={"category": "Medicinal Plants"})
        self.assertEqual([p["name"] for p in response.json()["products"]], ["Tulsi"])

    def test_product_detail_sets_preload_link(self):
        response = self.client.get(f"/api/products/{self.palm.id}")
        self.assertEqual(response.status_code, 200)
        link = response.headers["link"]
        self.assertIn(f"<{ENDPOINT}/tr:f-auto,q-80/plant-areca-palm.png>", link)
        self.assertIn("rel=preload", link)
        self.assertIn("imagesrcset=", link)

    def test_missing_product(self):
        self.assertEqual(self.client.get("/api/products/9999").status_code, 404)


class SessionCartApiTests(BackendApiTestBase):
    headers = {"X-Session-Id": "session-1"}

    def test_requires_session_header(self):
        self.assertEqual(self.client.get("/api/cart").status_code, 400)

    def test_add_merge_update_remove(self):
        first = self.client.post(
            "/api/cart", json={"product_id": self.palm.id}, headers=self.headers
        )
        self.assertEqual(first.status_code, 201)
        merged = self.client.post(
            "/api/cart", json={"product_id": self.palm.id, "quantity": 2}, headers=self.headers
        )
        self.assertEqual(merged.json()["quantity"], 3)
        item_id = merged.json()["id"]

        cart = self.client.get("/api/cart", headers=self.headers).json()
        self.assertEqual(len(cart["items"]), 1)
        self.assertEqual(cart["total"], 1350)
        self.assertEqual(cart["items"][0]["product"]["name"], "Areca Palm")

        patched = self.client.patch(
            f"/api/cart/{item_id}", json={"quantity": 1}, headers=self.headers
        )
        self.assertEqual(patched.json()["quantity"], 1)

        other = {"X-Session-Id": "session-2"}
        self.assertEqual(
            self.client.patch(f"/api/cart/{item_id}", json={"quantity": 1}, headers=other).status_code,
            404,
        )

        deleted = self.client.delete(f"/api/cart/{item_id}", headers=self.headers)
        self.assertEqual(deleted.status_code, 204)
        self.assertEqual(self.client.get("/api/cart", headers=self.headers).json()["items"], [])

    def test_merged_quantity_is_capped(self):
        for _ in range(3):
            response = self.client.post(
                "/api/cart", json={"product_id": self.palm.id, "quantity": 99}, headers=self.headers
            )
        self.assertEqual(response.json()["quantity"], 99)
        cart = self.client.get("/api/cart", headers=self.headers).json()
        self.assertEqual(cart["items"][0]["quantity"], 99)

    def test_invalid_quantity(self):
        response = self.client.post(
            "/api/cart", json={"product_id": self.palm.id, "quantity": 0}, headers=self.headers
        )
        self.assertEqual(response.status_code, 422)

    def test_unknown_product(self):
        response = self.client.post("/api/cart", json={"product_id": 9999}, headers=self.headers)
        self.assertEqual(response.status_code, 404)


class AuthApiTests(BackendApiTestBase):
    def test_sign_up_and_me(self):
        headers = self._sign_up("ann@example.com")
        me = self.client.get("/api/auth/me", headers=headers)
        self.assertEqual(me.status_code, 200)
        self.assertEqual(me.json()["email"], "ann@example.com")
        self.assertFalse(me.json()["is_admin"])

    def test_allowlisted_email_is_admin(self):
        headers = self._sign_up(ADMIN_EMAIL)
        self.assertTrue(self.client.get("/api/auth/me", headers=headers).json()["is_admin"])

    def test_duplicate_sign_up(self):
        self._sign_up("ann@example.com")
        response = self.client.post(
            "/api/auth/sign-up", json={"email": "ann@example.com", "password": "secret1"}
        )
        self.assertEqual(response.status_code, 409)

    def test_invalid_sign_up_details(self):
        provider = MagicMock()
        provider.sign_up.side_effect = InvalidCredentialsError("Invalid sign-up details")
        self.app.dependency_overrides[get_identity_provider] = lambda: provider
        response = self.client.post(
            "/api/auth/sign-up", json={"email": "nope", "password": "secret1"}
        )
        self.assertEqual(response.status_code, 400)

    def test_sign_in(self):
        self._sign_up("ann@example.com")
        ok = self.client.post(
            "/api/auth/sign-in", json={"email": "ann@example.com", "password": "secret1"}
        )
        self.assertEqual(ok.status_code, 200)
        self.assertTrue(ok.json()["id_token"])
        bad = self.client.post(
            "/api/auth/sign-in", json={"email": "ann@example.com", "password": "wrong12"}
        )
        self.assertEqual(bad.status_code, 401)

    def test_me_requires_token(self):
        self.assertEqual(self.client.get("/api/auth/me").status_code, 401)
        response = self.client.get("/api/auth/me", headers={"Authorization": "Bearer junk"})
        self.assertEqual(response.status_code, 401)


class UserDataApiTests(BackendApiTestBase):
    def test_user_cart(self):
        headers = self._sign_up("ann@example.com")
        added = self.client.post("/api/me/cart", json={"product_id": "1"}, headers=headers)
        self.assertEqual(added.status_code, 201)
        self.client.post("/api/me/cart", json={"product_id": "1"}, headers=headers)
        items = self.client.get("/api/me/cart", headers=headers).json()["items"]
        self.assertEqual(items[0]["quantity"], 2)

        item_id = items[0]["id"]
        self.assertEqual(
            self.client.patch(f"/api/me/cart/{item_id}", json={"quantity": 7}, headers=headers).status_code,
            200,
        )
        self.assertEqual(
            self.client.patch("/api/me/cart/missing", json={"quantity": 7}, headers=headers).status_code,
            404,
        )
        self.assertEqual(self.client.delete(f"/api/me/cart/{item_id}", headers=headers).status_code, 204)
        self.assertEqual(self.client.get("/api/me/cart", headers=headers).json()["items"], [])

    def test_wishlist(self):
        headers = self._sign_up("ann@example.com")
        self.client.post("/api/me/wishlist", json={"product_id": "2"}, headers=headers)
        self.client.post("/api/me/wishlist", json={"product_id": "2"}, headers=headers)
        self.assertEqual(len(self.client.get("/api/me/wishlist", headers=headers).json()["items"]), 1)
        self.assertTrue(
            self.client.get("/api/me/wishlist/2", headers=headers).json()["in_wishlist"]
        )
        self.client.delete("/api/me/wishlist/2", headers=headers)
        self.assertFalse(
            self.client.get("/api/me/wishlist/2", headers=headers).json()["in_wishlist"]
        )

    def test_requires_sign_in(self):
        self.assertEqual(self.client.get("/api/me/wishlist").status_code, 401)


class BlogApiTests(BackendApiTestBase):
    def test_relational_blog(self):
        self.db.create_blog_post("Guide", "Excerpt", "/images/blog-bonsai.png")
        posts = self.client.get("/api/blog").json()["posts"]
        self.assertEqual(posts[0]["image"]["url"], f"{ENDPOINT}/tr:f-auto,q-80/blog-bonsai.png")

    def test_admin_writes_and_draft_visibility(self):
        admin = self._sign_up(ADMIN_EMAIL)
        user = self._sign_up("ann@example.com")
        payload = {
            "title": "Care Guide",
            "blocks": [
                {"id": "h", "type": "heading", "text": "Watering"},
                {"id": "p", "type": "products", "productIds": [str(self.palm.id)]},
            ],
        }

        self.assertEqual(self.client.post("/api/blog/posts", json=payload).status_code, 401)
        self.assertEqual(
            self.client.post("/api/blog/posts", json=payload, headers=user).status_code, 403
        )
        created = self.client.post("/api/blog/posts", json=payload, headers=admin)
        self.assertEqual(created.status_code, 201)
        post_id = created.json()["id"]
        self.assertEqual(created.json()["slug"], "care-guide")

        self.assertEqual(self.client.get("/api/blog/posts").json()["posts"], [])
        self.assertEqual(self.client.get(f"/api/blog/posts/{post_id}").status_code, 404)
        drafts = self.client.get(
            "/api/blog/posts", params={"include_drafts": True}, headers=admin
        ).json()["posts"]
        self.assertEqual(len(drafts), 1)
        ignored = self.client.get(
            "/api/blog/posts", params={"include_drafts": True}, headers=user
        ).json()["posts"]
        self.assertEqual(ignored, [])

        payload["status"] = "published"
        self.assertEqual(
            self.client.put(f"/api/blog/posts/{post_id}", json=payload, headers=admin).status_code,
            200,
        )
        post = self.client.get(f"/api/blog/posts/{post_id}").json()
        self.assertEqual([s["type"] for s in post["sections"]], ["heading", "products"])
        self.assertEqual(post["sections"][1]["products"][0]["name"], "Areca Palm")

        self.assertEqual(
            self.client.delete(f"/api/blog/posts/{post_id}", headers=admin).status_code, 204
        )
        self.assertEqual(
            self.client.delete(f"/api/blog/posts/{post_id}", headers=admin).status_code, 404
        )

    def test_malformed_block_does_not_break_post(self):
        post = self.store.save_blog_post(
            BlogPostInput(
                title="Odd Post",
                status=PostStatus.PUBLISHED,
                blocks=[
                    {"id": "h", "type": "heading", "text": "Care", "level": "h2"},
                    {"id": "g", "type": "gallery", "columns": "wide", "images": []},
                ],
            )
        )
        response = self.client.get(f"/api/blog/posts/{post.id}")
        self.assertEqual(response.status_code, 200)
        heading = response.json()["sections"][0]
        self.assertEqual((heading["type"], heading["level"]), ("heading", 2))

    def test_template_post_renders_sections(self):
        post = self.store.save_blog_post(
            BlogPostInput(
                title="Old Post",
                status=PostStatus.PUBLISHED,
                template={"introduction": "Hello", "conclusion": "Bye"},
            )
        )
        sections = self.client.get(f"/api/blog/posts/{post.id}").json()["sections"]
        self.assertEqual([s["type"] for s in sections], ["paragraph", "paragraph"])


class ContactApiTests(BackendApiTestBase):
    def test_submit_and_admin_review(self):
        response = self.client.post(
            "/api/contact",
            json={"full_name": "Ann", "email": "ann@example.com", "message": "Do you ship?"},
        )
        self.assertEqual(response.status_code, 201)
        self.assertEqual(len(self.db.contact_messages), 1)

        user = self._sign_up("ann@example.com")
        self.assertEqual(self.client.get("/api/contact/messages", headers=user).status_code, 403)

        admin = self._sign_up(ADMIN_EMAIL)
        messages = self.client.get("/api/contact/messages", headers=admin).json()["messages"]
        self.assertEqual(messages[0]["status"], "unread")

        read = self.client.post(f"/api/contact/messages/{messages[0]['id']}/read", headers=admin)
        self.assertEqual(read.status_code, 200)
        messages = self.client.get("/api/contact/messages", headers=admin).json()["messages"]
        self.assertEqual(messages[0]["status"], "read")
        self.assertEqual(
            self.client.post("/api/contact/messages/missing/read", headers=admin).status_code, 404
        )

    def test_unknown_message_status_is_listed_as_unread(self):
        self.store.contact_messages["m1"] = {
            "fullName": "Ann",
            "email": "ann@example.com",
            "message": "Hi",
            "createdAt": "2024-05-01T00:00:00+00:00",
            "status": "archived",
        }
        admin = self._sign_up(ADMIN_EMAIL)
        response = self.client.get("/api/contact/messages", headers=admin)
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["messages"][0]["status"], "unread")

    def test_validation(self):
        bad_email = self.client.post(
            "/api/contact", json={"full_name": "Ann", "email": "nope", "message": "Hi"}
        )
        self.assertEqual(bad_email.status_code, 422)
        blank = self.client.post(
            "/api/contact", json={"full_name": "  ", "email": "a@example.com", "message": "Hi"}
        )
        self.assertEqual(blank.status_code, 400)


class AdminCatalogueApiTests(BackendApiTestBase):
    def test_product_writes_require_admin(self):
        user = self._sign_up("ann@example.com")
        payload = {
            "name": "Jade Plant",
            "price": 199,
            "image": "jade.png",
            "category": "Succulent Plants",
        }
        self.assertEqual(self.client.post("/api/products", json=payload).status_code, 401)
        self.assertEqual(
            self.client.post("/api/products", json=payload, headers=user).status_code, 403
        )
        self.assertEqual(
            self.client.delete(f"/api/products/{self.palm.id}", headers=user).status_code, 403
        )
        self.assertIsNotNone(self.db.get_product(self.palm.id))

    def test_product_create_update_delete(self):
        admin = self._sign_up(ADMIN_EMAIL)
        created = self.client.post(
            "/api/products",
            json={
                "name": "Jade Plant",
                "price": 199,
                "image": "/images/plant-jade.png",
                "category": "Succulent Plants",
                "description": "Lucky plant",
            },
            headers=admin,
        )
        self.assertEqual(created.status_code, 201)
        product = created.json()
        self.assertEqual(product["rating"], 5)
        self.assertEqual(product["image"]["url"], f"{ENDPOINT}/tr:f-auto,q-80/plant-jade.png")

        patched = self.client.patch(
            f"/api/products/{product['id']}",
            json={"price": 249, "in_stock": False, "name": None},
            headers=admin,
        )
        self.assertEqual(patched.status_code, 200)
        self.assertEqual(patched.json()["price"], 249)
        self.assertFalse(patched.json()["in_stock"])
        self.assertEqual(patched.json()["name"], "Jade Plant")
        self.assertEqual(
            self.client.patch("/api/products/9999", json={"price": 1}, headers=admin).status_code,
            404,
        )
        self.assertEqual(
            self.client.patch(
                f"/api/products/{product['id']}", json={"price": 0}, headers=admin
            ).status_code,
            422,
        )

        session = {"X-Session-Id": "session-1"}
        self.client.post("/api/cart", json={"product_id": product["id"]}, headers=session)
        deleted = self.client.delete(f"/api/products/{product['id']}", headers=admin)
        self.assertEqual(deleted.status_code, 204)
        self.assertEqual(self.client.get(f"/api/products/{product['id']}").status_code, 404)
        self.assertEqual(self.client.get("/api/cart", headers=session).json()["items"], [])
        self.assertEqual(
            self.client.delete(f"/api/products/{product['id']}", headers=admin).status_code, 404
        )

    def test_categories_start_from_defaults(self):
        categories = self.client.get("/api/categories").json()["categories"]
        self.assertEqual(
            [c["slug"] for c in categories],
            ["indoor-plants", "medicinal-plants", "succulent-plants", "flowering-plants"],
        )
        self.assertEqual(self.store.categories, {})

    def test_category_management(self):
        admin = self._sign_up(ADMIN_EMAIL)
        user = self._sign_up("ann@example.com")
        self.assertEqual(
            self.client.post("/api/categories", json={"name": "Bonsai"}, headers=user).status_code,
            403,
        )

        created = self.client.post(
            "/api/categories",
            json={"name": "Outdoor Plants", "description": "For the garden"},
            headers=admin,
        )
        self.assertEqual(created.status_code, 201)
        self.assertEqual(created.json()["slug"], "outdoor-plants")
        self.assertEqual(created.json()["order"], 5)

        renamed = self.client.patch(
            "/api/categories/indoor", json={"name": "House Plants"}, headers=admin
        )
        self.assertEqual(renamed.json()["slug"], "house-plants")
        hidden = self.client.patch(
            "/api/categories/flowering", json={"is_active": False}, headers=admin
        )
        self.assertFalse(hidden.json()["is_active"])
        self.assertEqual(
            self.client.patch("/api/categories/indoor", json={"name": "  "}, headers=admin).status_code,
            400,
        )

        self.assertEqual(
            self.client.delete("/api/categories/medicinal", headers=admin).status_code, 204
        )
        self.assertEqual(
            self.client.delete("/api/categories/medicinal", headers=admin).status_code, 404
        )
        names = [c["name"] for c in self.client.get("/api/categories").json()["categories"]]
        self.assertEqual(
            names, ["House Plants", "Succulent Plants", "Flowering Plants", "Outdoor Plants"]
        )

    def test_general_settings(self):
        defaults = self.client.get("/api/settings/general").json()
        self.assertEqual(defaults["business_name"], "Sri Kanakadurga Nursery")
        self.assertEqual(defaults["address"]["city"], "Hyderabad")
        self.assertIsNone(defaults["updated_at"])

        admin = self._sign_up(ADMIN_EMAIL)
        user = self._sign_up("ann@example.com")
        update = dict(defaults, business_name="SKD Nursery", phone="+91 90000 00000")
        update.pop("updated_at")
        self.assertEqual(
            self.client.put("/api/settings/general", json=update, headers=user).status_code, 403
        )
        saved = self.client.put("/api/settings/general", json=update, headers=admin)
        self.assertEqual(saved.status_code, 200)
        self.assertEqual(self.store.settings["general"]["businessName"], "SKD Nursery")
        self.assertEqual(self.store.settings["general"]["updatedBy"], self._uid(admin))

        current = self.client.get("/api/settings/general").json()
        self.assertEqual(current["phone"], "+91 90000 00000")
        self.assertIsNotNone(current["updated_at"])

    def test_homepage_settings_resolve_hero_images(self):
        response = self.client.get("/api/settings/homepage")
        payload = response.json()
        self.assertEqual(len(payload["hero_slides"]), 3)
        first = payload["hero_slides"][0]
        self.assertEqual(first["image"], "/images/hero-leaves.webp")
        self.assertEqual(
            first["image_descriptor"]["url"], f"{ENDPOINT}/tr:f-auto,q-80/hero-leaves.webp"
        )
        self.assertIn(f"<{ENDPOINT}/tr:f-auto,q-80/hero-leaves.webp>", response.headers["link"])

        admin = self._sign_up(ADMIN_EMAIL)
        saved = self.client.put(
            "/api/settings/homepage",
            json={
                "hero_slides": [{"id": "1", "image": "hero/spring.jpg", "title": "Spring"}],
                "featured_product_ids": [str(self.palm.id)],
            },
            headers=admin,
        )
        self.assertEqual(saved.status_code, 200)
        stored = self.store.settings["homepage"]
        self.assertEqual(stored["featuredProductIds"], [str(self.palm.id)])
        self.assertEqual(stored["heroSlides"][0]["primaryLink"], "/shop")

        payload = self.client.get("/api/settings/homepage").json()
        self.assertEqual([s["title"] for s in payload["hero_slides"]], ["Spring"])
        self.assertEqual(payload["featured_blog_ids"], [])

    def test_corrupt_settings_fall_back_to_defaults(self):
        self.store.settings["general"] = {"businessName": "", "address": "nowhere"}
        with self.assertLogs("backend.routes", level="WARNING"):
            response = self.client.get("/api/settings/general")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["business_name"], "Sri Kanakadurga Nursery")


class ImageApiTests(BackendApiTestBase):
    def test_resolve_lazy_image(self):
        response = self.client.post(
            "/api/images/resolve",
            json={"logical_path": "roses/1.jpg", "responsive": True, "blur_placeholder": True},
        )
        payload = response.json()
        self.assertEqual(payload["url"], f"{ENDPOINT}/tr:f-auto,q-80/roses/1.jpg")
        self.assertEqual(
            payload["placeholder_url"], f"{ENDPOINT}/tr:w-20,h-20,bl-10,q-20,f-auto/roses/1.jpg"
        )
        self.assertIsNone(payload["preload_link"])
        self.assertNotIn("link", response.headers)

    def test_resolve_priority_image(self):
        response = self.client.post(
            "/api/images/resolve",
            json={
                "logical_path": "hero/banner.jpg",
                "priority": True,
                "display_intent": {"width": 1200},
            },
        )
        payload = response.json()
        self.assertEqual(payload["url"], f"{ENDPOINT}/tr:w-1200,f-auto,q-80/hero/banner.jpg")
        self.assertIn(f"<{payload['url']}>", response.headers["link"])

    def test_upload_auth_not_configured(self):
        response = self.client.get("/api/imagekit-auth")
        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.json()["detail"], "ImageKit not configured")

    def test_upload_auth(self):
        self.resolver = ImageResolver(
            url_endpoint=ENDPOINT, public_key="public_x", private_key="private_y"
        )
        payload = self.client.get("/api/imagekit-auth").json()
        self.assertEqual(payload["publicKey"], "public_x")
        self.assertEqual(len(payload["signature"]), 40)


class StartupSeedTests(unittest.TestCase):
    def test_lifespan_seeds_in_memory_database(self):
        app = create_app()
        db = InMemoryDbClient()
        previous = dependencies._db_client
        dependencies._db_client = db
        try:
            with TestClient(app):
                pass
        finally:
            dependencies._db_client = previous
        self.assertEqual(db.count_products(), 10)


if __name__ == "__main__":
    unittest.main()
