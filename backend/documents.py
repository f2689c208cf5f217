"""
Document store for per-user data and editorial content.

Firestore layout:
    users/{uid}                 profile + admin flag
    users/{uid}/cart/{id}       {productId, quantity}
    users/{uid}/wishlist/{id}   {productId}
    blogPosts/{id}
    contactMessages/{id}
    categories/{id}            name, slug, description, order, isActive
    settings/{general,homepage} site settings, merged over defaults on read
"""

from __future__ import annotations

import re
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, List, Optional, Protocol

from backend.site_defaults import DEFAULT_CATEGORIES, merge_settings
from shared.constants import MAX_CART_QUANTITY
from shared.firebase_constants import (
    BLOG_POSTS_COLLECTION,
    CART_COLLECTION,
    CATEGORIES_COLLECTION,
    CONTACT_MESSAGES_COLLECTION,
    SETTINGS_COLLECTION,
    USERS_COLLECTION,
    WISHLIST_COLLECTION,
)
from shared.types import MessageStatus, PostStatus, UserRole


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def slugify(title: str) -> str:
    return re.sub(r"\s+", "-", (title or "").strip().lower())


@dataclass
class CartEntry:
    id: str
    product_id: str
    quantity: int

    def as_dict(self) -> dict:
        return {"id": self.id, "product_id": self.product_id, "quantity": self.quantity}


@dataclass
class WishlistEntry:
    id: str
    product_id: str

    def as_dict(self) -> dict:
        return {"id": self.id, "product_id": self.product_id}


@dataclass
class UserProfile:
    uid: str
    email: Optional[str]
    display_name: str = ""
    photo_url: str = ""
    is_admin: bool = False
    role: UserRole = UserRole.USER
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    def to_document(self) -> dict:
        return {
            "uid": self.uid,
            "email": self.email,
            "displayName": self.display_name,
            "photoURL": self.photo_url,
            "isAdmin": self.is_admin,
            "role": self.role.value,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }

    @classmethod
    def from_document(cls, data: dict) -> "UserProfile":
        return cls(
            uid=data.get("uid", ""),
            email=data.get("email"),
            display_name=data.get("displayName") or "",
            photo_url=data.get("photoURL") or "",
            is_admin=bool(data.get("isAdmin")),
            role=UserRole.ADMIN if data.get("role") == UserRole.ADMIN.value else UserRole.USER,
            created_at=data.get("createdAt"),
            updated_at=data.get("updatedAt"),
        )


@dataclass
class BlogPostInput:
    title: str
    excerpt: str = ""
    featured_image: str = ""
    author: str = ""
    featured: bool = False
    status: PostStatus = PostStatus.DRAFT
    blocks: List[dict] = field(default_factory=list)
    template: Optional[dict] = None

    def to_document(self) -> dict:
        return {
            "title": self.title,
            "excerpt": self.excerpt,
            "featuredImage": self.featured_image,
            "author": self.author,
            "featured": self.featured,
            "status": self.status.value,
            "slug": slugify(self.title),
            "blocks": self.blocks,
            "template": self.template,
        }


@dataclass
class BlogPostDocument:
    id: str
    title: str
    excerpt: str
    featured_image: str
    author: str
    featured: bool
    status: PostStatus
    slug: str
    blocks: List[dict]
    template: Optional[dict]
    date: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    created_by: Optional[str] = None
    updated_by: Optional[str] = None

    @property
    def is_published(self) -> bool:
        return self.status == PostStatus.PUBLISHED

    @classmethod
    def from_document(cls, doc_id: str, data: dict) -> "BlogPostDocument":
        try:
            status = PostStatus(data.get("status") or PostStatus.DRAFT)
        except ValueError:
            status = PostStatus.DRAFT
        return cls(
            id=doc_id,
            title=data.get("title") or "",
            excerpt=data.get("excerpt") or "",
            featured_image=data.get("featuredImage") or "",
            author=data.get("author") or "",
            featured=bool(data.get("featured")),
            status=status,
            slug=data.get("slug") or slugify(data.get("title") or ""),
            blocks=list(data.get("blocks") or []),
            template=data.get("template"),
            date=data.get("date"),
            created_at=data.get("createdAt"),
            updated_at=data.get("updatedAt"),
            created_by=data.get("createdBy"),
            updated_by=data.get("updatedBy"),
        )


@dataclass
class ContactMessageDocument:
    id: str
    full_name: str
    email: str
    message: str
    created_at: str
    status: MessageStatus = MessageStatus.UNREAD

    @classmethod
    def from_document(cls, doc_id: str, data: dict) -> "ContactMessageDocument":
        try:
            status = MessageStatus(data.get("status") or MessageStatus.UNREAD)
        except ValueError:
            status = MessageStatus.UNREAD
        return cls(
            id=doc_id,
            full_name=data.get("fullName") or "",
            email=data.get("email") or "",
            message=data.get("message") or "",
            created_at=data.get("createdAt") or "",
            status=status,
        )


@dataclass
class Category:
    id: str
    name: str
    slug: str
    description: str = ""
    order: int = 0
    is_active: bool = True

    def to_document(self) -> dict:
        return {
            "name": self.name,
            "slug": self.slug,
            "description": self.description,
            "order": self.order,
            "isActive": self.is_active,
        }

    @classmethod
    def from_document(cls, doc_id: str, data: dict) -> "Category":
        try:
            order = int(data.get("order") or 0)
        except (TypeError, ValueError):
            order = 0
        return cls(
            id=doc_id,
            name=data.get("name") or "",
            slug=data.get("slug") or slugify(data.get("name") or ""),
            description=data.get("description") or "",
            order=order,
            is_active=data.get("isActive", True) is not False,
        )


def _default_categories() -> List[Category]:
    return [Category.from_document(c["id"], c) for c in DEFAULT_CATEGORIES]


def _category_changes(
    name: Optional[str], description: Optional[str], is_active: Optional[bool]
) -> dict:
    changes = {}
    if name is not None:
        changes.update({"name": name, "slug": slugify(name)})
    if description is not None:
        changes["description"] = description
    if is_active is not None:
        changes["isActive"] = is_active
    return changes


class DocumentStore(Protocol):
    """Operations the API needs from the document store."""

    def get_cart_items(self, uid: str) -> List[CartEntry]:
        ...

    def add_cart_item(self, uid: str, product_id: str, quantity: int = 1) -> CartEntry:
        ...

    def update_cart_item_qty(self, uid: str, item_id: str, quantity: int) -> bool:
        ...

    def remove_cart_item(self, uid: str, item_id: str) -> None:
        ...

    def get_wishlist_items(self, uid: str) -> List[WishlistEntry]:
        ...

    def add_to_wishlist(self, uid: str, product_id: str) -> bool:
        ...

    def remove_from_wishlist(self, uid: str, product_id: str) -> None:
        ...

    def is_in_wishlist(self, uid: str, product_id: str) -> bool:
        ...

    def get_user(self, uid: str) -> Optional[UserProfile]:
        ...

    def ensure_user(
        self,
        uid: str,
        email: Optional[str],
        display_name: str = "",
        *,
        grant_admin: bool = False,
    ) -> UserProfile:
        ...

    def list_blog_posts(self, include_drafts: bool = False) -> List[BlogPostDocument]:
        ...

    def get_blog_post(self, post_id: str) -> Optional[BlogPostDocument]:
        ...

    def save_blog_post(
        self, post: BlogPostInput, *, post_id: Optional[str] = None, user_id: Optional[str] = None
    ) -> BlogPostDocument:
        ...

    def delete_blog_post(self, post_id: str) -> bool:
        ...

    def submit_contact_message(
        self, full_name: str, email: str, message: str
    ) -> ContactMessageDocument:
        ...

    def list_contact_messages(self) -> List[ContactMessageDocument]:
        ...

    def mark_message_read(self, message_id: str) -> bool:
        ...

    def list_categories(self) -> List[Category]:
        ...

    def create_category(self, name: str, description: str = "") -> Category:
        ...

    def update_category(
        self,
        category_id: str,
        *,
        name: Optional[str] = None,
        description: Optional[str] = None,
        is_active: Optional[bool] = None,
    ) -> Optional[Category]:
        ...

    def delete_category(self, category_id: str) -> bool:
        ...

    def get_site_settings(self, name: str) -> dict:
        ...

    def save_site_settings(
        self, name: str, data: dict, *, user_id: Optional[str] = None
    ) -> dict:
        ...


def _merge_admin(existing: UserProfile, grant_admin: bool) -> Optional[dict]:
    """Returns the fields to update when an allowlisted user lacks the flag."""
    if grant_admin and not existing.is_admin:
        return {"isAdmin": True, "role": UserRole.ADMIN.value, "updatedAt": _now_iso()}
    return None


def _new_profile(uid: str, email: Optional[str], display_name: str, grant_admin: bool) -> UserProfile:
    now = _now_iso()
    return UserProfile(
        uid=uid,
        email=email,
        display_name=display_name or "",
        is_admin=grant_admin,
        role=UserRole.ADMIN if grant_admin else UserRole.USER,
        created_at=now,
        updated_at=now,
    )


class InMemoryDocumentStore:
    """Dictionary-backed document store for development and tests."""

    def __init__(self):
        self.users: Dict[str, dict] = {}
        self.carts: Dict[str, Dict[str, dict]] = {}
        self.wishlists: Dict[str, Dict[str, dict]] = {}
        self.blog_posts: Dict[str, dict] = {}
        self.contact_messages: Dict[str, dict] = {}
        self.categories: Dict[str, dict] = {}
        self.settings: Dict[str, dict] = {}

    def reset(self) -> None:
        self.users.clear()
        self.carts.clear()
        self.wishlists.clear()
        self.blog_posts.clear()
        self.contact_messages.clear()
        self.categories.clear()
        self.settings.clear()

    def get_cart_items(self, uid: str) -> List[CartEntry]:
        return [
            CartEntry(id=doc_id, product_id=data["productId"], quantity=data.get("quantity", 0))
            for doc_id, data in self.carts.get(uid, {}).items()
        ]

    def add_cart_item(self, uid: str, product_id: str, quantity: int = 1) -> CartEntry:
        cart = self.carts.setdefault(uid, {})
        for doc_id, data in cart.items():
            if data["productId"] == product_id:
                merged = min((data.get("quantity") or 0) + quantity, MAX_CART_QUANTITY)
                data["quantity"] = merged
                return CartEntry(id=doc_id, product_id=product_id, quantity=data["quantity"])
        doc_id = uuid.uuid4().hex
        cart[doc_id] = {"productId": product_id, "quantity": quantity}
        return CartEntry(id=doc_id, product_id=product_id, quantity=quantity)

    def update_cart_item_qty(self, uid: str, item_id: str, quantity: int) -> bool:
        data = self.carts.get(uid, {}).get(item_id)
        if data is None:
            return False
        data["quantity"] = quantity
        return True

    def remove_cart_item(self, uid: str, item_id: str) -> None:
        self.carts.get(uid, {}).pop(item_id, None)

    def get_wishlist_items(self, uid: str) -> List[WishlistEntry]:
        return [
            WishlistEntry(id=doc_id, product_id=data["productId"])
            for doc_id, data in self.wishlists.get(uid, {}).items()
        ]

    def add_to_wishlist(self, uid: str, product_id: str) -> bool:
        if self.is_in_wishlist(uid, product_id):
            return False
        self.wishlists.setdefault(uid, {})[uuid.uuid4().hex] = {"productId": product_id}
        return True

    def remove_from_wishlist(self, uid: str, product_id: str) -> None:
        wishlist = self.wishlists.get(uid, {})
        for doc_id in [k for k, v in wishlist.items() if v["productId"] == product_id]:
            del wishlist[doc_id]

    def is_in_wishlist(self, uid: str, product_id: str) -> bool:
        return any(
            v["productId"] == product_id for v in self.wishlists.get(uid, {}).values()
        )

    def get_user(self, uid: str) -> Optional[UserProfile]:
        data = self.users.get(uid)
        return UserProfile.from_document(data) if data else None

    def ensure_user(
        self,
        uid: str,
        email: Optional[str],
        display_name: str = "",
        *,
        grant_admin: bool = False,
    ) -> UserProfile:
        existing = self.get_user(uid)
        if existing is None:
            profile = _new_profile(uid, email, display_name, grant_admin)
            self.users[uid] = profile.to_document()
            return profile
        update = _merge_admin(existing, grant_admin)
        if update:
            self.users[uid].update(update)
        return UserProfile.from_document(self.users[uid])

    def list_blog_posts(self, include_drafts: bool = False) -> List[BlogPostDocument]:
        posts = [
            BlogPostDocument.from_document(doc_id, data)
            for doc_id, data in self.blog_posts.items()
        ]
        posts.sort(key=lambda p: p.created_at or "", reverse=True)
        return [p for p in posts if include_drafts or p.is_published]

    def get_blog_post(self, post_id: str) -> Optional[BlogPostDocument]:
        data = self.blog_posts.get(post_id)
        return BlogPostDocument.from_document(post_id, data) if data else None

    def save_blog_post(
        self, post: BlogPostInput, *, post_id: Optional[str] = None, user_id: Optional[str] = None
    ) -> BlogPostDocument:
        now = _now_iso()
        data = post.to_document()
        data.update({"updatedAt": now, "updatedBy": user_id})
        if post_id and post_id in self.blog_posts:
            self.blog_posts[post_id].update(data)
        else:
            post_id = post_id or uuid.uuid4().hex
            data.update({"date": now, "createdAt": now, "createdBy": user_id})
            self.blog_posts[post_id] = data
        return BlogPostDocument.from_document(post_id, self.blog_posts[post_id])

    def delete_blog_post(self, post_id: str) -> bool:
        return self.blog_posts.pop(post_id, None) is not None

    def submit_contact_message(
        self, full_name: str, email: str, message: str
    ) -> ContactMessageDocument:
        doc_id = uuid.uuid4().hex
        self.contact_messages[doc_id] = {
            "fullName": full_name,
            "email": email,
            "message": message,
            "createdAt": _now_iso(),
            "status": MessageStatus.UNREAD.value,
        }
        return ContactMessageDocument.from_document(doc_id, self.contact_messages[doc_id])

    def list_contact_messages(self) -> List[ContactMessageDocument]:
        messages = [
            ContactMessageDocument.from_document(doc_id, data)
            for doc_id, data in self.contact_messages.items()
        ]
        messages.sort(key=lambda m: m.created_at, reverse=True)
        return messages

    def mark_message_read(self, message_id: str) -> bool:
        data = self.contact_messages.get(message_id)
        if data is None:
            return False
        data["status"] = MessageStatus.READ.value
        return True

    def _materialize_categories(self) -> None:
        if not self.categories:
            for category in _default_categories():
                self.categories[category.id] = category.to_document()

    def list_categories(self) -> List[Category]:
        if not self.categories:
            return _default_categories()
        categories = [
            Category.from_document(doc_id, data) for doc_id, data in self.categories.items()
        ]
        return sorted(categories, key=lambda c: c.order)

    def create_category(self, name: str, description: str = "") -> Category:
        self._materialize_categories()
        category = Category(
            id=uuid.uuid4().hex,
            name=name,
            slug=slugify(name),
            description=description,
            order=len(self.categories) + 1,
        )
        self.categories[category.id] = category.to_document()
        return category

    def update_category(
        self,
        category_id: str,
        *,
        name: Optional[str] = None,
        description: Optional[str] = None,
        is_active: Optional[bool] = None,
    ) -> Optional[Category]:
        self._materialize_categories()
        data = self.categories.get(category_id)
        if data is None:
            return None
        data.update(_category_changes(name, description, is_active))
        return Category.from_document(category_id, data)

    def delete_category(self, category_id: str) -> bool:
        self._materialize_categories()
        return self.categories.pop(category_id, None) is not None

    def get_site_settings(self, name: str) -> dict:
        return merge_settings(name, self.settings.get(name))

    def save_site_settings(
        self, name: str, data: dict, *, user_id: Optional[str] = None
    ) -> dict:
        self.settings[name] = {**data, "updatedAt": _now_iso(), "updatedBy": user_id}
        return self.get_site_settings(name)


class FirestoreDocumentStore:
    """Cloud Firestore implementation backed by firebase-admin."""

    def __init__(self, client=None):
        if client is None:
            from firebase_admin import firestore

            client = firestore.client()
        self.client = client

    def _user_ref(self, uid: str):
        return self.client.collection(USERS_COLLECTION).document(uid)

    def _cart_ref(self, uid: str):
        return self._user_ref(uid).collection(CART_COLLECTION)

    def _wishlist_ref(self, uid: str):
        return self._user_ref(uid).collection(WISHLIST_COLLECTION)

    @staticmethod
    def _product_query(collection_ref, product_id: str):
        from google.cloud.firestore_v1.base_query import FieldFilter

        return collection_ref.where(filter=FieldFilter("productId", "==", product_id))

    def get_cart_items(self, uid: str) -> List[CartEntry]:
        items = []
        for snapshot in self._cart_ref(uid).stream():
            data = snapshot.to_dict() or {}
            items.append(
                CartEntry(
                    id=snapshot.id,
                    product_id=data.get("productId", ""),
                    quantity=data.get("quantity", 0),
                )
            )
        return items

    def add_cart_item(self, uid: str, product_id: str, quantity: int = 1) -> CartEntry:
        cart_ref = self._cart_ref(uid)
        existing = list(self._product_query(cart_ref, product_id).limit(1).stream())
        if existing:
            snapshot = existing[0]
            current = (snapshot.to_dict() or {}).get("quantity") or 0
            merged = min(current + quantity, MAX_CART_QUANTITY)
            snapshot.reference.update({"quantity": merged})
            return CartEntry(id=snapshot.id, product_id=product_id, quantity=merged)
        _, doc_ref = cart_ref.add({"productId": product_id, "quantity": quantity})
        return CartEntry(id=doc_ref.id, product_id=product_id, quantity=quantity)

    def update_cart_item_qty(self, uid: str, item_id: str, quantity: int) -> bool:
        doc_ref = self._cart_ref(uid).document(item_id)
        if not doc_ref.get().exists:
            return False
        doc_ref.update({"quantity": quantity})
        return True

    def remove_cart_item(self, uid: str, item_id: str) -> None:
        self._cart_ref(uid).document(item_id).delete()

    def get_wishlist_items(self, uid: str) -> List[WishlistEntry]:
        return [
            WishlistEntry(id=s.id, product_id=(s.to_dict() or {}).get("productId", ""))
            for s in self._wishlist_ref(uid).stream()
        ]

    def add_to_wishlist(self, uid: str, product_id: str) -> bool:
        if self.is_in_wishlist(uid, product_id):
            return False
        self._wishlist_ref(uid).add({"productId": product_id})
        return True

    def remove_from_wishlist(self, uid: str, product_id: str) -> None:
        for snapshot in self._product_query(self._wishlist_ref(uid), product_id).stream():
            snapshot.reference.delete()

    def is_in_wishlist(self, uid: str, product_id: str) -> bool:
        query = self._product_query(self._wishlist_ref(uid), product_id).limit(1)
        return len(list(query.stream())) > 0

    def get_user(self, uid: str) -> Optional[UserProfile]:
        snapshot = self._user_ref(uid).get()
        if not snapshot.exists:
            return None
        return UserProfile.from_document(snapshot.to_dict() or {})

    def ensure_user(
        self,
        uid: str,
        email: Optional[str],
        display_name: str = "",
        *,
        grant_admin: bool = False,
    ) -> UserProfile:
        doc_ref = self._user_ref(uid)
        existing = self.get_user(uid)
        if existing is None:
            profile = _new_profile(uid, email, display_name, grant_admin)
            doc_ref.set(profile.to_document())
            return profile
        update = _merge_admin(existing, grant_admin)
        if update:
            doc_ref.set(update, merge=True)
            existing.is_admin = True
            existing.role = UserRole.ADMIN
            existing.updated_at = update["updatedAt"]
        return existing

    def list_blog_posts(self, include_drafts: bool = False) -> List[BlogPostDocument]:
        from firebase_admin import firestore

        query = self.client.collection(BLOG_POSTS_COLLECTION).order_by(
            "createdAt", direction=firestore.Query.DESCENDING
        )
        posts = [
            BlogPostDocument.from_document(s.id, s.to_dict() or {}) for s in query.stream()
        ]
        return [p for p in posts if include_drafts or p.is_published]

    def get_blog_post(self, post_id: str) -> Optional[BlogPostDocument]:
        snapshot = self.client.collection(BLOG_POSTS_COLLECTION).document(post_id).get()
        if not snapshot.exists:
            return None
        return BlogPostDocument.from_document(snapshot.id, snapshot.to_dict() or {})

    def save_blog_post(
        self, post: BlogPostInput, *, post_id: Optional[str] = None, user_id: Optional[str] = None
    ) -> BlogPostDocument:
        now = _now_iso()
        data = post.to_document()
        data.update({"updatedAt": now, "updatedBy": user_id})
        collection = self.client.collection(BLOG_POSTS_COLLECTION)
        if post_id:
            collection.document(post_id).set(data, merge=True)
        else:
            data.update({"date": now, "createdAt": now, "createdBy": user_id})
            _, doc_ref = collection.add(data)
            post_id = doc_ref.id
        return self.get_blog_post(post_id)

    def delete_blog_post(self, post_id: str) -> bool:
        doc_ref = self.client.collection(BLOG_POSTS_COLLECTION).document(post_id)
        if not doc_ref.get().exists:
            return False
        doc_ref.delete()
        return True

    def submit_contact_message(
        self, full_name: str, email: str, message: str
    ) -> ContactMessageDocument:
        data = {
            "fullName": full_name,
            "email": email,
            "message": message,
            "createdAt": _now_iso(),
            "status": MessageStatus.UNREAD.value,
        }
        _, doc_ref = self.client.collection(CONTACT_MESSAGES_COLLECTION).add(data)
        return ContactMessageDocument.from_document(doc_ref.id, data)

    def list_contact_messages(self) -> List[ContactMessageDocument]:
        from firebase_admin import firestore

        query = self.client.collection(CONTACT_MESSAGES_COLLECTION).order_by(
            "createdAt", direction=firestore.Query.DESCENDING
        )
        return [
            ContactMessageDocument.from_document(s.id, s.to_dict() or {})
            for s in query.stream()
        ]

    def mark_message_read(self, message_id: str) -> bool:
        doc_ref = self.client.collection(CONTACT_MESSAGES_COLLECTION).document(message_id)
        if not doc_ref.get().exists:
            return False
        doc_ref.update({"status": MessageStatus.READ.value})
        return True

    def _categories_ref(self):
        return self.client.collection(CATEGORIES_COLLECTION)

    def _stored_categories(self) -> List[Category]:
        return [
            Category.from_document(s.id, s.to_dict() or {})
            for s in self._categories_ref().stream()
        ]

    def _materialize_categories(self) -> List[Category]:
        stored = self._stored_categories()
        if stored:
            return stored
        batch = self.client.batch()
        defaults = _default_categories()
        for category in defaults:
            batch.set(self._categories_ref().document(category.id), category.to_document())
        batch.commit()
        return defaults

    def list_categories(self) -> List[Category]:
        stored = self._stored_categories()
        return sorted(stored, key=lambda c: c.order) if stored else _default_categories()

    def create_category(self, name: str, description: str = "") -> Category:
        existing = self._materialize_categories()
        category = Category(
            id="",
            name=name,
            slug=slugify(name),
            description=description,
            order=len(existing) + 1,
        )
        _, doc_ref = self._categories_ref().add(category.to_document())
        category.id = doc_ref.id
        return category

    def update_category(
        self,
        category_id: str,
        *,
        name: Optional[str] = None,
        description: Optional[str] = None,
        is_active: Optional[bool] = None,
    ) -> Optional[Category]:
        self._materialize_categories()
        doc_ref = self._categories_ref().document(category_id)
        snapshot = doc_ref.get()
        if not snapshot.exists:
            return None
        changes = _category_changes(name, description, is_active)
        if changes:
            doc_ref.set(changes, merge=True)
        return Category.from_document(category_id, {**(snapshot.to_dict() or {}), **changes})

    def delete_category(self, category_id: str) -> bool:
        self._materialize_categories()
        doc_ref = self._categories_ref().document(category_id)
        if not doc_ref.get().exists:
            return False
        doc_ref.delete()
        return True

    def get_site_settings(self, name: str) -> dict:
        snapshot = self.client.collection(SETTINGS_COLLECTION).document(name).get()
        return merge_settings(name, snapshot.to_dict() if snapshot.exists else None)

    def save_site_settings(
        self, name: str, data: dict, *, user_id: Optional[str] = None
    ) -> dict:
        stored = {**data, "updatedAt": _now_iso(), "updatedBy": user_id}
        self.client.collection(SETTINGS_COLLECTION).document(name).set(stored)
        return merge_settings(name, stored)
