"""
HTTP routes for the storefront API.
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Header, HTTPException, Query, Response
from pydantic import ValidationError

from backend.db import CartItemRecord, DbClient, NewProduct, ProductRecord
from backend.dependencies import (
    get_admin_policy,
    get_db_client,
    get_document_store,
    get_identity_provider,
    get_image_resolver,
)
from backend.documents import (
    BlogPostDocument,
    BlogPostInput,
    Category,
    DocumentStore,
    UserProfile,
)
from backend.identity import (
    AdminPolicy,
    EmailAlreadyExistsError,
    Identity,
    IdentityError,
    IdentityProvider,
    IdentityUnavailableError,
    InvalidCredentialsError,
    InvalidTokenError,
)
from backend.schemas import (
    AddCartItemRequest,
    AuthResponse,
    BlogPostPayload,
    BlogPostResponse,
    BlogPostSummary,
    CartItemResponse,
    CartResponse,
    CategoryRequest,
    CategoryResponse,
    CategoryUpdateRequest,
    ContactMessageResponse,
    ContactRequest,
    ContactResponse,
    CredentialsRequest,
    GeneralSettings,
    GeneralSettingsResponse,
    HeroSlideResponse,
    HomepageSettings,
    HomepageSettingsResponse,
    ImageDescriptor,
    ListBlogDocumentsResponse,
    ListBlogPostsResponse,
    ListCategoriesResponse,
    ListContactMessagesResponse,
    ListProductsResponse,
    ProductPayload,
    ProductResponse,
    ProductUpdatePayload,
    ResolveImageRequest,
    ResolveImageResponse,
    SignUpRequest,
    StatusResponse,
    UpdateCartItemRequest,
    UploadAuthResponse,
    UserCartItemRequest,
    UserCartItemResponse,
    UserCartResponse,
    WishlistItemResponse,
    WishlistMembershipResponse,
    WishlistRequest,
    WishlistResponse,
)
from backend.site_defaults import merge_settings
from blog.renderer import BlogRenderer
from image_delivery.lifecycle import ResolvedImage, resolve_image
from image_delivery.preload import PreloadHint
from image_delivery.urls import ImageKitNotConfiguredError, ImageResolver
from shared.blog_convert import blocks_from_dicts, template_from_dict
from shared.firebase_constants import GENERAL_SETTINGS_DOC, HOMEPAGE_SETTINGS_DOC
from shared.image_request import ImageRequest, image_request_from_dict
from shared.json_utils import convert_keys

logger = logging.getLogger(__name__)

router = APIRouter()


def _identity_http_error(exc: IdentityError) -> HTTPException:
    if isinstance(exc, EmailAlreadyExistsError):
        return HTTPException(status_code=409, detail=str(exc))
    if isinstance(exc, IdentityUnavailableError):
        return HTTPException(status_code=503, detail=str(exc))
    return HTTPException(status_code=401, detail=str(exc) or "Unauthorized")


def _image_descriptor(
    resolver: ImageResolver, path: str, alt: str = "", priority: bool = False
) -> ImageDescriptor:
    resolved = resolve_image(
        resolver,
        ImageRequest(
            logical_path=path,
            priority=priority,
            responsive=True,
            blur_placeholder=True,
            alt=alt,
        ),
    )
    return ImageDescriptor(**resolved.as_dict())


def _product_response(product: ProductRecord, resolver: ImageResolver) -> ProductResponse:
    return ProductResponse(
        id=product.id,
        name=product.name,
        price=product.price,
        category=product.category,
        rating=product.rating,
        description=product.description,
        in_stock=product.in_stock,
        image_path=product.image,
        image=_image_descriptor(resolver, product.image, product.name),
    )


def _cart_item_response(item: CartItemRecord, resolver: ImageResolver) -> CartItemResponse:
    return CartItemResponse(
        id=item.id,
        product_id=item.product_id,
        quantity=item.quantity,
        product=_product_response(item.product, resolver) if item.product else None,
    )


def _preload_hint(owner_id: str, resolved: ResolvedImage) -> PreloadHint:
    return PreloadHint(
        owner_id=owner_id,
        href=resolved.full_url,
        srcset=resolved.srcset,
        sizes=resolved.sizes,
    )


def _catalog(db: DbClient) -> dict:
    return {str(p.id): p.as_dict() for p in db.list_products()}


# Auth helpers


def _bearer_token(authorization: Optional[str]) -> Optional[str]:
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def get_current_identity(
    authorization: Optional[str] = Header(default=None),
    provider: IdentityProvider = Depends(get_identity_provider),
) -> Identity:
    token = _bearer_token(authorization)
    if token is None:
        raise HTTPException(status_code=401, detail="Missing bearer token")
    try:
        return provider.verify_token(token)
    except IdentityError as exc:
        raise _identity_http_error(exc) from exc


def get_optional_identity(
    authorization: Optional[str] = Header(default=None),
    provider: IdentityProvider = Depends(get_identity_provider),
) -> Optional[Identity]:
    token = _bearer_token(authorization)
    if token is None:
        return None
    try:
        return provider.verify_token(token)
    except InvalidTokenError:
        return None


def _ensure_profile(
    identity: Identity, store: DocumentStore, policy: AdminPolicy
) -> UserProfile:
    return store.ensure_user(
        identity.uid,
        identity.email,
        identity.display_name,
        grant_admin=policy.is_admin_email(identity.email),
    )


def _is_admin(
    identity: Optional[Identity], store: DocumentStore, policy: AdminPolicy
) -> bool:
    if identity is None:
        return False
    return _ensure_profile(identity, store, policy).is_admin


def require_admin(
    identity: Identity = Depends(get_current_identity),
    store: DocumentStore = Depends(get_document_store),
    policy: AdminPolicy = Depends(get_admin_policy),
) -> Identity:
    if not _is_admin(identity, store, policy):
        raise HTTPException(status_code=403, detail="Admin access required")
    return identity


def _auth_response(
    identity: Identity, profile: UserProfile, id_token: Optional[str] = None
) -> AuthResponse:
    return AuthResponse(
        uid=identity.uid,
        email=identity.email,
        display_name=identity.display_name or profile.display_name,
        is_admin=profile.is_admin,
        id_token=id_token,
    )


# Catalogue


@router.get("/products", response_model=ListProductsResponse)
def list_products(
    category: Optional[str] = Query(default=None),
    db: DbClient = Depends(get_db_client),
    resolver: ImageResolver = Depends(get_image_resolver),
):
    products = db.list_products(category=category)
    return ListProductsResponse(
        products=[_product_response(p, resolver) for p in products]
    )


@router.get("/products/{product_id}", response_model=ProductResponse)
def get_product(
    product_id: int,
    response: Response,
    db: DbClient = Depends(get_db_client),
    resolver: ImageResolver = Depends(get_image_resolver),
):
    product = db.get_product(product_id)
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")
    hero = resolve_image(
        resolver,
        ImageRequest(logical_path=product.image, priority=True, responsive=True),
    )
    response.headers["Link"] = _preload_hint(f"product-{product.id}", hero).as_link_header()
    return _product_response(product, resolver)


@router.post("/products", response_model=ProductResponse, status_code=201)
def create_product(
    payload: ProductPayload,
    admin: Identity = Depends(require_admin),
    db: DbClient = Depends(get_db_client),
    resolver: ImageResolver = Depends(get_image_resolver),
):
    product = db.create_product(NewProduct(**payload.model_dump()))
    logger.info("Product %s created by %s", product.id, admin.uid)
    return _product_response(product, resolver)


@router.patch("/products/{product_id}", response_model=ProductResponse)
def update_product(
    product_id: int,
    payload: ProductUpdatePayload,
    admin: Identity = Depends(require_admin),
    db: DbClient = Depends(get_db_client),
    resolver: ImageResolver = Depends(get_image_resolver),
):
    # Only description may be cleared; other nulls mean "leave unchanged".
    changes = {
        key: value
        for key, value in payload.model_dump(exclude_unset=True).items()
        if value is not None or key == "description"
    }
    product = db.update_product(product_id, changes)
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")
    return _product_response(product, resolver)


@router.delete("/products/{product_id}", status_code=204)
def delete_product(
    product_id: int,
    admin: Identity = Depends(require_admin),
    db: DbClient = Depends(get_db_client),
):
    if not db.delete_product(product_id):
        raise HTTPException(status_code=404, detail="Product not found")
    logger.info("Product %s deleted by %s", product_id, admin.uid)
    return Response(status_code=204)


# Categories


def _category_response(category: Category) -> CategoryResponse:
    return CategoryResponse(
        id=category.id,
        name=category.name,
        slug=category.slug,
        description=category.description,
        order=category.order,
        is_active=category.is_active,
    )


@router.get("/categories", response_model=ListCategoriesResponse)
def list_categories(store: DocumentStore = Depends(get_document_store)):
    return ListCategoriesResponse(
        categories=[_category_response(c) for c in store.list_categories()]
    )


@router.post("/categories", response_model=CategoryResponse, status_code=201)
def create_category(
    payload: CategoryRequest,
    admin: Identity = Depends(require_admin),
    store: DocumentStore = Depends(get_document_store),
):
    name = payload.name.strip()
    if not name:
        raise HTTPException(status_code=400, detail="Category name is required")
    return _category_response(store.create_category(name, payload.description.strip()))


@router.patch("/categories/{category_id}", response_model=CategoryResponse)
def update_category(
    category_id: str,
    payload: CategoryUpdateRequest,
    admin: Identity = Depends(require_admin),
    store: DocumentStore = Depends(get_document_store),
):
    name = payload.name.strip() if payload.name is not None else None
    if name == "":
        raise HTTPException(status_code=400, detail="Category name is required")
    category = store.update_category(
        category_id,
        name=name,
        description=payload.description,
        is_active=payload.is_active,
    )
    if not category:
        raise HTTPException(status_code=404, detail="Category not found")
    return _category_response(category)


@router.delete("/categories/{category_id}", status_code=204)
def delete_category(
    category_id: str,
    admin: Identity = Depends(require_admin),
    store: DocumentStore = Depends(get_document_store),
):
    if not store.delete_category(category_id):
        raise HTTPException(status_code=404, detail="Category not found")
    return Response(status_code=204)


# Session cart


def _require_session(session_id: Optional[str]) -> str:
    if not session_id or not session_id.strip():
        raise HTTPException(status_code=400, detail="X-Session-Id header required")
    return session_id.strip()


@router.get("/cart", response_model=CartResponse)
def get_cart(
    session_id: Optional[str] = Header(default=None, alias="X-Session-Id"),
    db: DbClient = Depends(get_db_client),
    resolver: ImageResolver = Depends(get_image_resolver),
):
    items = db.get_cart_items(_require_session(session_id))
    total = sum(item.product.price * item.quantity for item in items if item.product)
    return CartResponse(
        items=[_cart_item_response(item, resolver) for item in items], total=total
    )


@router.post("/cart", response_model=CartItemResponse, status_code=201)
def add_to_cart(
    payload: AddCartItemRequest,
    session_id: Optional[str] = Header(default=None, alias="X-Session-Id"),
    db: DbClient = Depends(get_db_client),
    resolver: ImageResolver = Depends(get_image_resolver),
):
    session = _require_session(session_id)
    product = db.get_product(payload.product_id)
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")
    item = db.add_cart_item(session, payload.product_id, payload.quantity)
    item.product = product
    return _cart_item_response(item, resolver)


@router.patch("/cart/{item_id}", response_model=CartItemResponse)
def update_cart_item(
    item_id: int,
    payload: UpdateCartItemRequest,
    session_id: Optional[str] = Header(default=None, alias="X-Session-Id"),
    db: DbClient = Depends(get_db_client),
    resolver: ImageResolver = Depends(get_image_resolver),
):
    item = db.update_cart_item(_require_session(session_id), item_id, payload.quantity)
    if not item:
        raise HTTPException(status_code=404, detail="Cart item not found")
    item.product = db.get_product(item.product_id)
    return _cart_item_response(item, resolver)


@router.delete("/cart/{item_id}", status_code=204)
def remove_cart_item(
    item_id: int,
    session_id: Optional[str] = Header(default=None, alias="X-Session-Id"),
    db: DbClient = Depends(get_db_client),
):
    db.remove_cart_item(_require_session(session_id), item_id)
    return Response(status_code=204)


# Blog


@router.get("/blog", response_model=ListBlogPostsResponse)
def list_blog(
    db: DbClient = Depends(get_db_client),
    resolver: ImageResolver = Depends(get_image_resolver),
):
    return ListBlogPostsResponse(
        posts=[
            BlogPostSummary(
                id=post.id,
                title=post.title,
                excerpt=post.excerpt,
                image=_image_descriptor(resolver, post.image, post.title),
                content=post.content,
            )
            for post in db.list_blog_posts()
        ]
    )


def _blog_post_response(
    post: BlogPostDocument,
    resolver: ImageResolver,
    sections: Optional[list] = None,
) -> BlogPostResponse:
    return BlogPostResponse(
        id=post.id,
        title=post.title,
        excerpt=post.excerpt,
        featured_image=(
            _image_descriptor(resolver, post.featured_image, post.title)
            if post.featured_image
            else None
        ),
        author=post.author,
        featured=post.featured,
        status=post.status,
        slug=post.slug,
        date=post.date,
        created_at=post.created_at,
        updated_at=post.updated_at,
        sections=sections,
    )


def _render_sections(post: BlogPostDocument, db: DbClient, resolver: ImageResolver) -> list:
    renderer = BlogRenderer(_catalog(db), resolver)
    if post.blocks:
        return renderer.render_blocks(blocks_from_dicts(post.blocks))
    if post.template:
        return renderer.render_template(template_from_dict(post.template))
    return []


@router.get("/blog/posts", response_model=ListBlogDocumentsResponse)
def list_blog_documents(
    include_drafts: bool = Query(default=False),
    identity: Optional[Identity] = Depends(get_optional_identity),
    store: DocumentStore = Depends(get_document_store),
    policy: AdminPolicy = Depends(get_admin_policy),
    resolver: ImageResolver = Depends(get_image_resolver),
):
    if include_drafts and not _is_admin(identity, store, policy):
        include_drafts = False
    posts = store.list_blog_posts(include_drafts=include_drafts)
    return ListBlogDocumentsResponse(
        posts=[_blog_post_response(post, resolver) for post in posts]
    )


@router.get("/blog/posts/{post_id}", response_model=BlogPostResponse)
def get_blog_document(
    post_id: str,
    identity: Optional[Identity] = Depends(get_optional_identity),
    store: DocumentStore = Depends(get_document_store),
    policy: AdminPolicy = Depends(get_admin_policy),
    db: DbClient = Depends(get_db_client),
    resolver: ImageResolver = Depends(get_image_resolver),
):
    post = store.get_blog_post(post_id)
    if not post or (not post.is_published and not _is_admin(identity, store, policy)):
        raise HTTPException(status_code=404, detail="Post not found")
    return _blog_post_response(post, resolver, _render_sections(post, db, resolver))


def _post_input(payload: BlogPostPayload) -> BlogPostInput:
    return BlogPostInput(
        title=payload.title.strip(),
        excerpt=payload.excerpt,
        featured_image=payload.featured_image,
        author=payload.author,
        featured=payload.featured,
        status=payload.status,
        blocks=payload.blocks,
        template=payload.template,
    )


@router.post("/blog/posts", response_model=BlogPostResponse, status_code=201)
def create_blog_document(
    payload: BlogPostPayload,
    admin: Identity = Depends(require_admin),
    store: DocumentStore = Depends(get_document_store),
    resolver: ImageResolver = Depends(get_image_resolver),
):
    post = store.save_blog_post(_post_input(payload), user_id=admin.uid)
    logger.info("Blog post %s created by %s", post.id, admin.uid)
    return _blog_post_response(post, resolver)


@router.put("/blog/posts/{post_id}", response_model=BlogPostResponse)
def update_blog_document(
    post_id: str,
    payload: BlogPostPayload,
    admin: Identity = Depends(require_admin),
    store: DocumentStore = Depends(get_document_store),
    resolver: ImageResolver = Depends(get_image_resolver),
):
    if not store.get_blog_post(post_id):
        raise HTTPException(status_code=404, detail="Post not found")
    post = store.save_blog_post(_post_input(payload), post_id=post_id, user_id=admin.uid)
    return _blog_post_response(post, resolver)


@router.delete("/blog/posts/{post_id}", status_code=204)
def delete_blog_document(
    post_id: str,
    admin: Identity = Depends(require_admin),
    store: DocumentStore = Depends(get_document_store),
):
    if not store.delete_blog_post(post_id):
        raise HTTPException(status_code=404, detail="Post not found")
    logger.info("Blog post %s deleted by %s", post_id, admin.uid)
    return Response(status_code=204)


# Contact


@router.post("/contact", response_model=ContactResponse, status_code=201)
def submit_contact(
    payload: ContactRequest,
    db: DbClient = Depends(get_db_client),
    store: DocumentStore = Depends(get_document_store),
):
    full_name = payload.full_name.strip()
    message = payload.message.strip()
    if not full_name or not message:
        raise HTTPException(status_code=400, detail="Name and message are required")
    record = db.create_contact_message(full_name, payload.email.strip(), message)
    store.submit_contact_message(full_name, payload.email.strip(), message)
    return ContactResponse(id=record.id, status="ok")


@router.get("/contact/messages", response_model=ListContactMessagesResponse)
def list_contact_messages(
    admin: Identity = Depends(require_admin),
    store: DocumentStore = Depends(get_document_store),
):
    return ListContactMessagesResponse(
        messages=[
            ContactMessageResponse(
                id=m.id,
                full_name=m.full_name,
                email=m.email,
                message=m.message,
                created_at=m.created_at,
                status=m.status.value,
            )
            for m in store.list_contact_messages()
        ]
    )


@router.post("/contact/messages/{message_id}/read", response_model=StatusResponse)
def mark_contact_message_read(
    message_id: str,
    admin: Identity = Depends(require_admin),
    store: DocumentStore = Depends(get_document_store),
):
    if not store.mark_message_read(message_id):
        raise HTTPException(status_code=404, detail="Message not found")
    return StatusResponse(status="ok")


# Site settings


def _read_settings(name: str, stored: dict, model):
    data = convert_keys(stored, "camel_to_snake")
    try:
        return model.model_validate(data), data.get("updated_at")
    except ValidationError:
        logger.warning("Stored %s settings are invalid; serving defaults", name, exc_info=True)
        defaults = convert_keys(merge_settings(name, None), "camel_to_snake")
        return model.model_validate(defaults), None


def _general_response(stored: dict) -> GeneralSettingsResponse:
    settings, updated_at = _read_settings(GENERAL_SETTINGS_DOC, stored, GeneralSettings)
    return GeneralSettingsResponse(**settings.model_dump(), updated_at=updated_at)


def _homepage_response(
    stored: dict, resolver: ImageResolver, response: Optional[Response] = None
) -> HomepageSettingsResponse:
    settings, updated_at = _read_settings(HOMEPAGE_SETTINGS_DOC, stored, HomepageSettings)
    slides = []
    for index, slide in enumerate(settings.hero_slides):
        slides.append(
            HeroSlideResponse(
                **slide.model_dump(),
                image_descriptor=_image_descriptor(
                    resolver, slide.image, slide.title, priority=index == 0
                ),
            )
        )
    if slides and response is not None:
        hero = resolve_image(
            resolver,
            ImageRequest(logical_path=slides[0].image, priority=True, responsive=True),
        )
        response.headers["Link"] = _preload_hint("homepage-hero", hero).as_link_header()
    return HomepageSettingsResponse(
        hero_slides=slides,
        featured_product_ids=settings.featured_product_ids,
        featured_blog_ids=settings.featured_blog_ids,
        updated_at=updated_at,
    )


@router.get("/settings/general", response_model=GeneralSettingsResponse)
def get_general_settings(store: DocumentStore = Depends(get_document_store)):
    return _general_response(store.get_site_settings(GENERAL_SETTINGS_DOC))


@router.put("/settings/general", response_model=GeneralSettingsResponse)
def save_general_settings(
    payload: GeneralSettings,
    admin: Identity = Depends(require_admin),
    store: DocumentStore = Depends(get_document_store),
):
    stored = store.save_site_settings(
        GENERAL_SETTINGS_DOC,
        convert_keys(payload.model_dump(), "snake_to_camel"),
        user_id=admin.uid,
    )
    logger.info("General settings saved by %s", admin.uid)
    return _general_response(stored)


@router.get("/settings/homepage", response_model=HomepageSettingsResponse)
def get_homepage_settings(
    response: Response,
    store: DocumentStore = Depends(get_document_store),
    resolver: ImageResolver = Depends(get_image_resolver),
):
    return _homepage_response(
        store.get_site_settings(HOMEPAGE_SETTINGS_DOC), resolver, response
    )


@router.put("/settings/homepage", response_model=HomepageSettingsResponse)
def save_homepage_settings(
    payload: HomepageSettings,
    admin: Identity = Depends(require_admin),
    store: DocumentStore = Depends(get_document_store),
    resolver: ImageResolver = Depends(get_image_resolver),
):
    stored = store.save_site_settings(
        HOMEPAGE_SETTINGS_DOC,
        convert_keys(payload.model_dump(), "snake_to_camel"),
        user_id=admin.uid,
    )
    logger.info("Homepage settings saved by %s", admin.uid)
    return _homepage_response(stored, resolver)


# Auth


@router.post("/auth/sign-in", response_model=AuthResponse)
def sign_in(
    payload: CredentialsRequest,
    provider: IdentityProvider = Depends(get_identity_provider),
    store: DocumentStore = Depends(get_document_store),
    policy: AdminPolicy = Depends(get_admin_policy),
):
    try:
        session = provider.sign_in_with_password(payload.email.strip(), payload.password)
    except IdentityError as exc:
        raise _identity_http_error(exc) from exc
    profile = _ensure_profile(session.identity, store, policy)
    return _auth_response(session.identity, profile, session.id_token)


@router.post("/auth/sign-up", response_model=AuthResponse, status_code=201)
def sign_up(
    payload: SignUpRequest,
    provider: IdentityProvider = Depends(get_identity_provider),
    store: DocumentStore = Depends(get_document_store),
    policy: AdminPolicy = Depends(get_admin_policy),
):
    try:
        session = provider.sign_up(
            payload.email.strip(), payload.password, payload.display_name.strip()
        )
    except InvalidCredentialsError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except (EmailAlreadyExistsError, IdentityUnavailableError) as exc:
        raise _identity_http_error(exc) from exc
    profile = _ensure_profile(session.identity, store, policy)
    logger.info("New account %s (admin=%s)", session.identity.uid, profile.is_admin)
    return _auth_response(session.identity, profile, session.id_token)


@router.get("/auth/me", response_model=AuthResponse)
def me(
    identity: Identity = Depends(get_current_identity),
    store: DocumentStore = Depends(get_document_store),
    policy: AdminPolicy = Depends(get_admin_policy),
):
    return _auth_response(identity, _ensure_profile(identity, store, policy))


# Per-user cart and wishlist


@router.get("/me/cart", response_model=UserCartResponse)
def get_user_cart(
    identity: Identity = Depends(get_current_identity),
    store: DocumentStore = Depends(get_document_store),
):
    return UserCartResponse(
        items=[UserCartItemResponse(**e.as_dict()) for e in store.get_cart_items(identity.uid)]
    )


@router.post("/me/cart", response_model=UserCartItemResponse, status_code=201)
def add_user_cart_item(
    payload: UserCartItemRequest,
    identity: Identity = Depends(get_current_identity),
    store: DocumentStore = Depends(get_document_store),
):
    entry = store.add_cart_item(identity.uid, payload.product_id, payload.quantity)
    return UserCartItemResponse(**entry.as_dict())


@router.patch("/me/cart/{item_id}", response_model=StatusResponse)
def update_user_cart_item(
    item_id: str,
    payload: UpdateCartItemRequest,
    identity: Identity = Depends(get_current_identity),
    store: DocumentStore = Depends(get_document_store),
):
    if not store.update_cart_item_qty(identity.uid, item_id, payload.quantity):
        raise HTTPException(status_code=404, detail="Cart item not found")
    return StatusResponse(status="ok")


@router.delete("/me/cart/{item_id}", status_code=204)
def remove_user_cart_item(
    item_id: str,
    identity: Identity = Depends(get_current_identity),
    store: DocumentStore = Depends(get_document_store),
):
    store.remove_cart_item(identity.uid, item_id)
    return Response(status_code=204)


@router.get("/me/wishlist", response_model=WishlistResponse)
def get_wishlist(
    identity: Identity = Depends(get_current_identity),
    store: DocumentStore = Depends(get_document_store),
):
    return WishlistResponse(
        items=[
            WishlistItemResponse(**e.as_dict())
            for e in store.get_wishlist_items(identity.uid)
        ]
    )


@router.post("/me/wishlist", response_model=WishlistMembershipResponse)
def add_to_wishlist(
    payload: WishlistRequest,
    identity: Identity = Depends(get_current_identity),
    store: DocumentStore = Depends(get_document_store),
):
    store.add_to_wishlist(identity.uid, payload.product_id)
    return WishlistMembershipResponse(product_id=payload.product_id, in_wishlist=True)


@router.get("/me/wishlist/{product_id}", response_model=WishlistMembershipResponse)
def wishlist_membership(
    product_id: str,
    identity: Identity = Depends(get_current_identity),
    store: DocumentStore = Depends(get_document_store),
):
    return WishlistMembershipResponse(
        product_id=product_id,
        in_wishlist=store.is_in_wishlist(identity.uid, product_id),
    )


@router.delete("/me/wishlist/{product_id}", status_code=204)
def remove_from_wishlist(
    product_id: str,
    identity: Identity = Depends(get_current_identity),
    store: DocumentStore = Depends(get_document_store),
):
    store.remove_from_wishlist(identity.uid, product_id)
    return Response(status_code=204)


# Images


@router.post("/images/resolve", response_model=ResolveImageResponse)
def resolve_image_request(
    payload: ResolveImageRequest,
    response: Response,
    resolver: ImageResolver = Depends(get_image_resolver),
):
    request = image_request_from_dict(payload.model_dump())
    resolved = resolve_image(resolver, request)
    preload_link = None
    if request.priority:
        preload_link = _preload_hint("resolve", resolved).as_link_header()
        response.headers["Link"] = preload_link
    return ResolveImageResponse(
        url=resolved.full_url,
        placeholder_url=resolved.placeholder_url,
        srcset=resolved.srcset,
        sizes=resolved.sizes,
        preload_link=preload_link,
    )


@router.get("/imagekit-auth", response_model=UploadAuthResponse)
def imagekit_auth(resolver: ImageResolver = Depends(get_image_resolver)):
    try:
        params = resolver.upload_auth_params()
    except ImageKitNotConfiguredError as exc:
        logger.error("Upload auth requested but ImageKit keys are not set")
        raise HTTPException(status_code=500, detail=str(exc)) from exc
    return UploadAuthResponse(**params.as_dict())
