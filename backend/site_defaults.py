"""
Storefront defaults used until an admin saves their own categories or
settings documents.
"""

from __future__ import annotations

DEFAULT_CATEGORIES = [
    {"id": "indoor", "name": "Indoor Plants", "slug": "indoor-plants", "order": 1},
    {"id": "medicinal", "name": "Medicinal Plants", "slug": "medicinal-plants", "order": 2},
    {"id": "succulent", "name": "Succulent Plants", "slug": "succulent-plants", "order": 3},
    {"id": "flowering", "name": "Flowering Plants", "slug": "flowering-plants", "order": 4},
]

DEFAULT_GENERAL_SETTINGS = {
    "businessName": "Sri Kanakadurga Nursery",
    "tagline": "Bringing Nature Home",
    "phone": "+91 98765 43210",
    "email": "hello@skdnursery.com",
    "whatsapp": "+919876543210",
    "address": {
        "street": "Ramanthapur",
        "city": "Hyderabad",
        "state": "Telangana",
        "pincode": "500013",
    },
    "businessHours": "Mon-Sat: 8AM - 7PM",
    "socialLinks": {"facebook": "", "instagram": "", "twitter": "", "youtube": ""},
}

DEFAULT_HOMEPAGE_SETTINGS = {
    "heroSlides": [
        {
            "id": "1",
            "image": "/images/hero-leaves.webp",
            "title": "Let's Make Your Home Beautiful",
            "subtitle": "Shop With Us",
            "description": (
                "Premium plants and landscaping in Hyderabad. "
                "Transform your living spaces with nature's finest."
            ),
            "primaryLink": "/shop",
            "primaryLabel": "Shop Now",
            "secondaryLink": "/contact",
            "secondaryLabel": "Contact Us",
        },
        {
            "id": "2",
            "image": "/images/hero-tropical.png",
            "title": "Transform Your Space with Greenery",
            "subtitle": "Bring Nature Indoors",
            "description": (
                "Discover our handpicked collection of tropical and indoor plants "
                "that purify air and elevate your decor."
            ),
            "primaryLink": "/shop",
            "primaryLabel": "Explore Plants",
            "secondaryLink": "/about",
            "secondaryLabel": "Our Story",
        },
        {
            "id": "3",
            "image": "/images/hero-collection.png",
            "title": "Plants That Grow with You",
            "subtitle": "Curated for You",
            "description": (
                "From low-maintenance succulents to statement palms, "
                "find the perfect green companion for every corner."
            ),
            "primaryLink": "/shop",
            "primaryLabel": "Browse Collection",
            "secondaryLink": "/blog",
            "secondaryLabel": "Read Blog",
        },
    ],
    "featuredProductIds": [],
    "featuredBlogIds": [],
}

SETTINGS_DEFAULTS = {
    "general": DEFAULT_GENERAL_SETTINGS,
    "homepage": DEFAULT_HOMEPAGE_SETTINGS,
}


def merge_settings(name: str, stored: dict | None) -> dict:
    """Overlays a stored settings document on its defaults, top-level keys only."""
    merged = dict(SETTINGS_DEFAULTS[name])
    merged.update(stored or {})
    return merged
