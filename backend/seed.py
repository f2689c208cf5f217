"""
Initial catalogue and blog content for an empty database.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional

from backend.db import DbClient, NewProduct

logger = logging.getLogger(__name__)

_LOREM = (
    "Lorem ipsum dolor sit amet, consectetur adipiscing elit. Aenean commodo, "
    "ligula eget dolor. Aenean massa. Cum sociis natoque penatibus et magnis dis "
    "parturient montes, nascetur ridiculus mus. "
)

SEED_PRODUCTS: List[NewProduct] = [
    NewProduct("Areca Palm", 450, "/images/plant-areca-palm.png", "Indoor Plants", 5,
               "Beautiful areca palm that purifies air and adds tropical vibes"),
    NewProduct("Snake Plant", 350, "/images/plant-snake-plant.png", "Indoor Plants", 5,
               "Low-maintenance snake plant perfect for beginners"),
    NewProduct("Money Plant", 199, "/images/plant-money-plant.png", "Indoor Plants", 4,
               "Lucky money plant that brings prosperity to your home"),
    NewProduct("Jade Plant", 299, "/images/plant-jade.png", "Succulent Plants", 5,
               "Elegant jade succulent with thick green leaves"),
    NewProduct("Peace Lily", 499, "/images/plant-peace-lily.png", "Flowering Plants", 5,
               "Graceful peace lily with beautiful white blooms"),
    NewProduct("Tulsi", 149, "/images/plant-tulsi.png", "Medicinal Plants", 5,
               "Sacred holy basil with medicinal properties"),
    NewProduct("Aloe Vera", 249, "/images/plant-aloe-vera.png", "Medicinal Plants", 4,
               "Natural aloe vera with healing gel for skin"),
    NewProduct("Rubber Plant", 550, "/images/plant-rubber-plant.png", "Indoor Plants", 5,
               "Stunning rubber plant with large glossy leaves"),
    NewProduct("Spider Plant", 199, "/images/plant-spider-plant.png", "Indoor Plants", 4,
               "Air-purifying spider plant with graceful arching leaves"),
    NewProduct("ZZ Plant", 399, "/images/plant-zz-plant.png", "Indoor Plants", 5,
               "Virtually indestructible ZZ plant for low light spaces"),
]

SEED_BLOG_POSTS = [
    {
        "title": "A Guide to Stunning Indoor Plants",
        "excerpt": _LOREM + "Discover the best indoor plants to transform your "
        "Hyderabad home into a green paradise.",
        "image": "/images/blog-indoor-plants.png",
        "content": "Full article content about indoor plants...",
    },
    {
        "title": "The World's Rarest Plant: A Journey of Discovery",
        "excerpt": _LOREM + "Explore the fascinating world of rare and exotic plant "
        "species from around the globe.",
        "image": "/images/blog-bonsai.png",
        "content": "Full article content about rare plants...",
    },
    {
        "title": "Indoor Plant Styling: Elevate Your Interior Decor with Greenery",
        "excerpt": _LOREM + "Learn creative ways to style your plants and create an "
        "Instagram-worthy green space.",
        "image": "/images/blog-living-room.png",
        "content": "Full article content about plant styling...",
    },
    {
        "title": "Plants and Well-being: Enhancing Mental and Physical Health",
        "excerpt": _LOREM + "Understand how plants can improve your mental health "
        "and physical well-being.",
        "image": "/images/blog-flowering.png",
        "content": "Full article content about plants and well-being...",
    },
]


@dataclass
class SeedResult:
    products_created: int = 0
    blog_posts_created: int = 0
    skipped: bool = False
    error: Optional[str] = None
    messages: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.error is None


def seed_database(db: DbClient, force: bool = False) -> SeedResult:
    """
    Inserts the starter catalogue when the products table is empty.

    Failures are logged and reported on the result; they are never raised,
    so a broken database does not stop the service from starting.
    """
    result = SeedResult()
    try:
        if not force and db.count_products() > 0:
            result.skipped = True
            result.messages.append("Products already present; skipping seed")
            logger.info("Seed skipped: products already present")
            return result

        for product in SEED_PRODUCTS:
            db.create_product(product)
            result.products_created += 1
        for post in SEED_BLOG_POSTS:
            db.create_blog_post(**post)
            result.blog_posts_created += 1
    except Exception as exc:
        logger.exception("Database seed failed")
        result.error = str(exc)
        return result

    logger.info(
        "Database seeded: %d products, %d blog posts",
        result.products_created,
        result.blog_posts_created,
    )
    return result
