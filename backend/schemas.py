"""
Pydantic schemas for the storefront API.
"""

from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, Field

from shared.constants import MAX_CART_QUANTITY, MAX_CONTACT_MESSAGE_LENGTH
from shared.types import ObjectFit, PostStatus


class ImageDescriptor(BaseModel):
    url: str
    placeholder_url: Optional[str] = None
    srcset: Optional[str] = None
    sizes: Optional[str] = None


class ProductResponse(BaseModel):
    id: int
    name: str
    price: int
    category: str
    rating: int
    description: Optional[str] = None
    in_stock: bool
    image_path: str
    image: ImageDescriptor


class ListProductsResponse(BaseModel):
    products: list[ProductResponse]


class AddCartItemRequest(BaseModel):
    product_id: int
    quantity: int = Field(default=1, ge=1, le=MAX_CART_QUANTITY)


class UpdateCartItemRequest(BaseModel):
    quantity: int = Field(..., ge=1, le=MAX_CART_QUANTITY)


class CartItemResponse(BaseModel):
    id: int
    product_id: int
    quantity: int
    product: Optional[ProductResponse] = None


class CartResponse(BaseModel):
    items: list[CartItemResponse]
    total: int


class BlogPostSummary(BaseModel):
    id: int
    title: str
    excerpt: str
    image: ImageDescriptor
    content: Optional[str] = None


class ListBlogPostsResponse(BaseModel):
    posts: list[BlogPostSummary]


class BlogPostPayload(BaseModel):
    title: str = Field(..., min_length=1, max_length=300)
    excerpt: str = ""
    featured_image: str = ""
    author: str = ""
    featured: bool = False
    status: PostStatus = PostStatus.DRAFT
    blocks: list[dict] = Field(default_factory=list)
    template: Optional[dict] = None


class BlogPostResponse(BaseModel):
    id: str
    title: str
    excerpt: str
    featured_image: Optional[ImageDescriptor] = None
    author: str
    featured: bool
    status: PostStatus
    slug: str
    date: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    sections: Optional[list[dict]] = None


class ListBlogDocumentsResponse(BaseModel):
    posts: list[BlogPostResponse]


class ContactRequest(BaseModel):
    full_name: str = Field(..., min_length=1, max_length=200)
    email: str = Field(..., pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$", max_length=320)
    message: str = Field(..., min_length=1, max_length=MAX_CONTACT_MESSAGE_LENGTH)


class ContactResponse(BaseModel):
    id: int
    status: Literal["ok"]


class ContactMessageResponse(BaseModel):
    id: str
    full_name: str
    email: str
    message: str
    created_at: str
    status: str


class ListContactMessagesResponse(BaseModel):
    messages: list[ContactMessageResponse]


class CredentialsRequest(BaseModel):
    email: str = Field(..., max_length=320)
    password: str = Field(..., min_length=6, max_length=128)


class SignUpRequest(CredentialsRequest):
    display_name: str = Field(default="", max_length=200)


class AuthResponse(BaseModel):
    uid: str
    email: Optional[str]
    display_name: str
    is_admin: bool
    id_token: Optional[str] = None


class UserCartItemRequest(BaseModel):
    product_id: str
    quantity: int = Field(default=1, ge=1, le=MAX_CART_QUANTITY)


class UserCartItemResponse(BaseModel):
    id: str
    product_id: str
    quantity: int


class UserCartResponse(BaseModel):
    items: list[UserCartItemResponse]


class WishlistRequest(BaseModel):
    product_id: str


class WishlistItemResponse(BaseModel):
    id: str
    product_id: str


class WishlistResponse(BaseModel):
    items: list[WishlistItemResponse]


class WishlistMembershipResponse(BaseModel):
    product_id: str
    in_wishlist: bool


class DisplayIntentPayload(BaseModel):
    width: Optional[int] = Field(default=None, gt=0)
    height: Optional[int] = Field(default=None, gt=0)
    aspect_ratio: Optional[str] = None
    object_fit: ObjectFit = ObjectFit.COVER


class ResolveImageRequest(BaseModel):
    logical_path: str = Field(..., min_length=1)
    display_intent: DisplayIntentPayload = Field(default_factory=DisplayIntentPayload)
    priority: bool = False
    responsive: bool = False
    blur_placeholder: bool = False
    alt: str = ""
    sizes: Optional[str] = None
    widths: Optional[list[int]] = None


class ResolveImageResponse(BaseModel):
    url: str
    placeholder_url: Optional[str] = None
    srcset: Optional[str] = None
    sizes: Optional[str] = None
    preload_link: Optional[str] = None


class UploadAuthResponse(BaseModel):
    token: str
    expire: int
    signature: str
    publicKey: str


class StatusResponse(BaseModel):
    status: Literal["ok"]


class ProductPayload(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    price: int = Field(..., gt=0)
    image: str = Field(..., min_length=1)
    category: str = Field(..., min_length=1, max_length=100)
    rating: int = Field(default=5, ge=1, le=5)
    description: Optional[str] = None
    in_stock: bool = True


class ProductUpdatePayload(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    price: Optional[int] = Field(default=None, gt=0)
    image: Optional[str] = Field(default=None, min_length=1)
    category: Optional[str] = Field(default=None, min_length=1, max_length=100)
    rating: Optional[int] = Field(default=None, ge=1, le=5)
    description: Optional[str] = None
    in_stock: Optional[bool] = None


class CategoryRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: str = Field(default="", max_length=500)


class CategoryUpdateRequest(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    description: Optional[str] = Field(default=None, max_length=500)
    is_active: Optional[bool] = None


class CategoryResponse(BaseModel):
    id: str
    name: str
    slug: str
    description: str
    order: int
    is_active: bool


class ListCategoriesResponse(BaseModel):
    categories: list[CategoryResponse]


class Address(BaseModel):
    street: str = ""
    city: str = ""
    state: str = ""
    pincode: str = ""


class SocialLinks(BaseModel):
    facebook: str = ""
    instagram: str = ""
    twitter: str = ""
    youtube: str = ""


class GeneralSettings(BaseModel):
    business_name: str = Field(..., min_length=1, max_length=200)
    tagline: str = ""
    phone: str = ""
    email: str = ""
    whatsapp: str = ""
    address: Address = Field(default_factory=Address)
    business_hours: str = ""
    social_links: SocialLinks = Field(default_factory=SocialLinks)


class GeneralSettingsResponse(GeneralSettings):
    updated_at: Optional[str] = None


class HeroSlide(BaseModel):
    id: str = Field(..., min_length=1)
    image: str = Field(..., min_length=1)
    title: str = ""
    subtitle: str = ""
    description: str = ""
    primary_link: str = "/shop"
    primary_label: str = "Shop Now"
    secondary_link: Optional[str] = None
    secondary_label: Optional[str] = None


class HomepageSettings(BaseModel):
    hero_slides: list[HeroSlide] = Field(default_factory=list)
    featured_product_ids: list[str] = Field(default_factory=list)
    featured_blog_ids: list[str] = Field(default_factory=list)


class HeroSlideResponse(HeroSlide):
    image_descriptor: Optional[ImageDescriptor] = None


class HomepageSettingsResponse(BaseModel):
    hero_slides: list[HeroSlideResponse]
    featured_product_ids: list[str]
    featured_blog_ids: list[str]
    updated_at: Optional[str] = None
