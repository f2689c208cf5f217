"""
Relational storage for products, session carts, blog posts and contact
messages, with a Postgres (SQLAlchemy) and an in-memory implementation.
"""

from __future__ import annotations

import itertools
from dataclasses import dataclass, replace
from typing import Dict, List, Optional, Protocol

from sqlalchemy import (
    Boolean,
    Column,
    Integer,
    String,
    Text,
    create_engine,
    delete,
    func,
    select,
)
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from shared.constants import MAX_CART_QUANTITY

PRODUCT_FIELDS = (
    "name", "price", "image", "category", "rating", "description", "in_stock"
)


@dataclass
class ProductRecord:
    id: int
    name: str
    price: int
    image: str
    category: str
    rating: int = 5
    description: Optional[str] = None
    in_stock: bool = True

    def as_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "price": self.price,
            "image": self.image,
            "category": self.category,
            "rating": self.rating,
            "description": self.description,
            "in_stock": self.in_stock,
        }


@dataclass
class NewProduct:
    name: str
    price: int
    image: str
    category: str
    rating: int = 5
    description: Optional[str] = None
    in_stock: bool = True


@dataclass
class CartItemRecord:
    id: int
    product_id: int
    quantity: int
    session_id: str
    product: Optional[ProductRecord] = None


@dataclass
class BlogPostRecord:
    id: int
    title: str
    excerpt: str
    image: str
    content: Optional[str] = None


@dataclass
class ContactMessageRecord:
    id: int
    full_name: str
    email: str
    message: str


class DbClient(Protocol):
    """Interface for relational storage access."""

    def list_products(self, category: Optional[str] = None) -> List[ProductRecord]:
        ...

    def get_product(self, product_id: int) -> Optional[ProductRecord]:
        ...

    def create_product(self, product: NewProduct) -> ProductRecord:
        ...

    def update_product(self, product_id: int, changes: dict) -> Optional[ProductRecord]:
        ...

    def delete_product(self, product_id: int) -> bool:
        ...

    def count_products(self) -> int:
        ...

    def get_cart_items(self, session_id: str) -> List[CartItemRecord]:
        ...

    def add_cart_item(
        self, session_id: str, product_id: int, quantity: int = 1
    ) -> CartItemRecord:
        ...

    def update_cart_item(
        self, session_id: str, item_id: int, quantity: int
    ) -> Optional[CartItemRecord]:
        ...

    def remove_cart_item(self, session_id: str, item_id: int) -> None:
        ...

    def list_blog_posts(self) -> List[BlogPostRecord]:
        ...

    def create_blog_post(
        self, title: str, excerpt: str, image: str, content: Optional[str] = None
    ) -> BlogPostRecord:
        ...

    def create_contact_message(
        self, full_name: str, email: str, message: str
    ) -> ContactMessageRecord:
        ...


class InMemoryDbClient:
    """Simple in-memory database for development and tests."""

    def __init__(self):
        self.products: Dict[int, ProductRecord] = {}
        self.cart_items: Dict[int, CartItemRecord] = {}
        self.blog_posts: Dict[int, BlogPostRecord] = {}
        self.contact_messages: Dict[int, ContactMessageRecord] = {}
        self._ids = itertools.count(1)

    def reset(self) -> None:
        """Clear all stored data (useful in tests)."""
        self.products.clear()
        self.cart_items.clear()
        self.blog_posts.clear()
        self.contact_messages.clear()

    def list_products(self, category: Optional[str] = None) -> List[ProductRecord]:
        return [
            p for p in self.products.values() if category is None or p.category == category
        ]

    def get_product(self, product_id: int) -> Optional[ProductRecord]:
        return self.products.get(product_id)

    def create_product(self, product: NewProduct) -> ProductRecord:
        record = ProductRecord(id=next(self._ids), **product.__dict__)
        self.products[record.id] = record
        return record

    def update_product(self, product_id: int, changes: dict) -> Optional[ProductRecord]:
        record = self.products.get(product_id)
        if record is None:
            return None
        for key in PRODUCT_FIELDS:
            if key in changes:
                setattr(record, key, changes[key])
        return replace(record)

    def delete_product(self, product_id: int) -> bool:
        if self.products.pop(product_id, None) is None:
            return False
        for item_id in [k for k, v in self.cart_items.items() if v.product_id == product_id]:
            del self.cart_items[item_id]
        return True

    def count_products(self) -> int:
        return len(self.products)

    def get_cart_items(self, session_id: str) -> List[CartItemRecord]:
        return [
            replace(item, product=self.products.get(item.product_id))
            for item in self.cart_items.values()
            if item.session_id == session_id
        ]

    def add_cart_item(
        self, session_id: str, product_id: int, quantity: int = 1
    ) -> CartItemRecord:
        for item in self.cart_items.values():
            if item.session_id == session_id and item.product_id == product_id:
                item.quantity = min(item.quantity + quantity, MAX_CART_QUANTITY)
                return replace(item)
        record = CartItemRecord(
            id=next(self._ids),
            product_id=product_id,
            quantity=quantity,
            session_id=session_id,
        )
        self.cart_items[record.id] = record
        return replace(record)

    def update_cart_item(
        self, session_id: str, item_id: int, quantity: int
    ) -> Optional[CartItemRecord]:
        item = self.cart_items.get(item_id)
        if not item or item.session_id != session_id:
            return None
        item.quantity = quantity
        return replace(item)

    def remove_cart_item(self, session_id: str, item_id: int) -> None:
        item = self.cart_items.get(item_id)
        if item and item.session_id == session_id:
            del self.cart_items[item_id]

    def list_blog_posts(self) -> List[BlogPostRecord]:
        return list(self.blog_posts.values())

    def create_blog_post(
        self, title: str, excerpt: str, image: str, content: Optional[str] = None
    ) -> BlogPostRecord:
        record = BlogPostRecord(
            id=next(self._ids), title=title, excerpt=excerpt, image=image, content=content
        )
        self.blog_posts[record.id] = record
        return record

    def create_contact_message(
        self, full_name: str, email: str, message: str
    ) -> ContactMessageRecord:
        record = ContactMessageRecord(
            id=next(self._ids), full_name=full_name, email=email, message=message
        )
        self.contact_messages[record.id] = record
        return record


class PostgresDbClient:
    """
    SQLAlchemy-backed implementation. Accepts any SQLAlchemy URL (e.g., Postgres or SQLite for tests).
    """

    def __init__(self, database_url: str):
        if not database_url:
            raise ValueError("DATABASE_URL is required for PostgresDbClient")
        self.engine = create_engine(
            database_url,
            future=True,
            pool_pre_ping=True,
            pool_recycle=1800,
        )
        self.Session = sessionmaker(
            bind=self.engine, class_=Session, expire_on_commit=False, future=True
        )
        Base.metadata.create_all(self.engine)

    @staticmethod
    def _to_product(row: "ProductRow") -> ProductRecord:
        return ProductRecord(
            id=row.id,
            name=row.name,
            price=row.price,
            image=row.image,
            category=row.category,
            rating=row.rating,
            description=row.description,
            in_stock=row.in_stock,
        )

    @staticmethod
    def _to_cart_item(
        row: "CartItemRow", product: Optional[ProductRecord] = None
    ) -> CartItemRecord:
        return CartItemRecord(
            id=row.id,
            product_id=row.product_id,
            quantity=row.quantity,
            session_id=row.session_id,
            product=product,
        )

    def list_products(self, category: Optional[str] = None) -> List[ProductRecord]:
        with self.Session() as session:
            stmt = select(ProductRow).order_by(ProductRow.id.asc())
            if category is not None:
                stmt = stmt.where(ProductRow.category == category)
            return [self._to_product(row) for row in session.execute(stmt).scalars()]

    def get_product(self, product_id: int) -> Optional[ProductRecord]:
        with self.Session() as session:
            row = session.get(ProductRow, product_id)
            return self._to_product(row) if row else None

    def create_product(self, product: NewProduct) -> ProductRecord:
        with self.Session() as session:
            row = ProductRow(**product.__dict__)
            session.add(row)
            session.commit()
            session.refresh(row)
            return self._to_product(row)

    def update_product(self, product_id: int, changes: dict) -> Optional[ProductRecord]:
        with self.Session() as session:
            row = session.get(ProductRow, product_id)
            if not row:
                return None
            for key in PRODUCT_FIELDS:
                if key in changes:
                    setattr(row, key, changes[key])
            session.commit()
            session.refresh(row)
            return self._to_product(row)

    def delete_product(self, product_id: int) -> bool:
        with self.Session() as session:
            row = session.get(ProductRow, product_id)
            if not row:
                return False
            session.execute(delete(CartItemRow).where(CartItemRow.product_id == product_id))
            session.delete(row)
            session.commit()
            return True

    def count_products(self) -> int:
        with self.Session() as session:
            return session.scalar(select(func.count()).select_from(ProductRow)) or 0

    def get_cart_items(self, session_id: str) -> List[CartItemRecord]:
        with self.Session() as session:
            rows = session.execute(
                select(CartItemRow)
                .where(CartItemRow.session_id == session_id)
                .order_by(CartItemRow.id.asc())
            ).scalars()
            items = []
            for row in rows:
                product = session.get(ProductRow, row.product_id)
                items.append(
                    self._to_cart_item(row, self._to_product(product) if product else None)
                )
            return items

    def add_cart_item(
        self, session_id: str, product_id: int, quantity: int = 1
    ) -> CartItemRecord:
        with self.Session() as session:
            existing = session.execute(
                select(CartItemRow).where(
                    CartItemRow.session_id == session_id,
                    CartItemRow.product_id == product_id,
                )
            ).scalar_one_or_none()
            if existing:
                existing.quantity = min(existing.quantity + quantity, MAX_CART_QUANTITY)
                row = existing
            else:
                row = CartItemRow(
                    product_id=product_id, quantity=quantity, session_id=session_id
                )
                session.add(row)
            session.commit()
            session.refresh(row)
            return self._to_cart_item(row)

    def update_cart_item(
        self, session_id: str, item_id: int, quantity: int
    ) -> Optional[CartItemRecord]:
        with self.Session() as session:
            row = session.get(CartItemRow, item_id)
            if not row or row.session_id != session_id:
                return None
            row.quantity = quantity
            session.commit()
            session.refresh(row)
            return self._to_cart_item(row)

    def remove_cart_item(self, session_id: str, item_id: int) -> None:
        with self.Session() as session:
            row = session.get(CartItemRow, item_id)
            if row and row.session_id == session_id:
                session.delete(row)
                session.commit()

    def list_blog_posts(self) -> List[BlogPostRecord]:
        with self.Session() as session:
            rows = session.execute(
                select(BlogPostRow).order_by(BlogPostRow.id.asc())
            ).scalars()
            return [
                BlogPostRecord(
                    id=row.id,
                    title=row.title,
                    excerpt=row.excerpt,
                    image=row.image,
                    content=row.content,
                )
                for row in rows
            ]

    def create_blog_post(
        self, title: str, excerpt: str, image: str, content: Optional[str] = None
    ) -> BlogPostRecord:
        with self.Session() as session:
            row = BlogPostRow(title=title, excerpt=excerpt, image=image, content=content)
            session.add(row)
            session.commit()
            session.refresh(row)
            return BlogPostRecord(
                id=row.id,
                title=row.title,
                excerpt=row.excerpt,
                image=row.image,
                content=row.content,
            )

    def create_contact_message(
        self, full_name: str, email: str, message: str
    ) -> ContactMessageRecord:
        with self.Session() as session:
            row = ContactMessageRow(full_name=full_name, email=email, message=message)
            session.add(row)
            session.commit()
            session.refresh(row)
            return ContactMessageRecord(
                id=row.id,
                full_name=row.full_name,
                email=row.email,
                message=row.message,
            )


Base = declarative_base()


class ProductRow(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(Text, nullable=False)
    price = Column(Integer, nullable=False)
    image = Column(Text, nullable=False)
    category = Column(Text, nullable=False, index=True)
    rating = Column(Integer, nullable=False, default=5)
    description = Column(Text, nullable=True)
    in_stock = Column(Boolean, nullable=False, default=True)


class CartItemRow(Base):
    __tablename__ = "cart_items"

    id = Column(Integer, primary_key=True, autoincrement=True)
    product_id = Column(Integer, nullable=False)
    quantity = Column(Integer, nullable=False, default=1)
    session_id = Column(String, nullable=False, index=True)


class BlogPostRow(Base):
    __tablename__ = "blog_posts"

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(Text, nullable=False)
    excerpt = Column(Text, nullable=False)
    image = Column(Text, nullable=False)
    content = Column(Text, nullable=True)


class ContactMessageRow(Base):
    __tablename__ = "contact_messages"

    id = Column(Integer, primary_key=True, autoincrement=True)
    full_name = Column(Text, nullable=False)
    email = Column(Text, nullable=False)
    message = Column(Text, nullable=False)
