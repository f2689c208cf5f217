"""
Dependency wiring for the FastAPI app.
"""

from __future__ import annotations

import logging

from backend.config import get_settings
from backend.db import DbClient, InMemoryDbClient, PostgresDbClient
from backend.documents import DocumentStore, FirestoreDocumentStore, InMemoryDocumentStore
from backend.identity import (
    AdminPolicy,
    FirebaseIdentityProvider,
    IdentityProvider,
    InMemoryIdentityProvider,
    initialize_firebase,
)
from image_delivery.urls import ImageResolver, default_resolver

logger = logging.getLogger(__name__)

_db_client: DbClient | None = None
_document_store: DocumentStore | None = None
_identity_provider: IdentityProvider | None = None
_image_resolver: ImageResolver | None = None
_admin_policy: AdminPolicy | None = None


def _use_firebase() -> bool:
    settings = get_settings()
    return not settings.use_in_memory_backends and bool(settings.firebase_project_id)


def get_db_client() -> DbClient:
    """
    Return a singleton DB client so carts and catalogue persist across requests.
    """
    global _db_client
    if _db_client:
        return _db_client

    settings = get_settings()
    if settings.use_in_memory_backends or not settings.database_url:
        _db_client = InMemoryDbClient()
    else:
        _db_client = PostgresDbClient(settings.database_url)
    return _db_client


def get_document_store() -> DocumentStore:
    global _document_store
    if _document_store:
        return _document_store

    settings = get_settings()
    if _use_firebase():
        initialize_firebase(
            settings.firebase_project_id, settings.google_application_credentials
        )
        _document_store = FirestoreDocumentStore()
    else:
        logger.info("Firebase not configured; using in-memory document store")
        _document_store = InMemoryDocumentStore()
    return _document_store


def get_identity_provider() -> IdentityProvider:
    global _identity_provider
    if _identity_provider:
        return _identity_provider

    settings = get_settings()
    if _use_firebase():
        initialize_firebase(
            settings.firebase_project_id, settings.google_application_credentials
        )
        _identity_provider = FirebaseIdentityProvider(settings.firebase_web_api_key)
    else:
        _identity_provider = InMemoryIdentityProvider()
    return _identity_provider


def get_image_resolver() -> ImageResolver:
    global _image_resolver
    if _image_resolver:
        return _image_resolver

    _image_resolver = default_resolver()
    return _image_resolver


def get_admin_policy() -> AdminPolicy:
    global _admin_policy
    if _admin_policy:
        return _admin_policy
    _admin_policy = AdminPolicy(get_settings().admin_email_set)
    return _admin_policy
