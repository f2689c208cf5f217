# Copyright 2025 Google LLC
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
# ==============================================================================

"""
Resolves logical image paths to ImageKit delivery URLs.

URLs follow the CDN convention `{endpoint}/tr:{descriptor}/{path}`, where the
descriptor is a comma separated list of `key-value` transform tokens. All
resolution is plain string composition: a bad path yields a URL that fails at
fetch time, never an exception here.
"""

from __future__ import annotations

import hashlib
import hmac
import time
import uuid
from dataclasses import dataclass
from functools import lru_cache
from typing import Iterable, Optional, Tuple

from shared.constants import (
    DEFAULT_IMAGEKIT_URL_ENDPOINT,
    DEFAULT_QUALITY,
    DEFAULT_RESPONSIVE_WIDTHS,
    LEGACY_IMAGE_PREFIX,
    PLACEHOLDER_TRANSFORM,
    RESPONSIVE_QUALITY,
    UPLOAD_AUTH_TTL_SECONDS,
)

TRANSFORM_PRESETS = {
    "thumbnail": "w-150,h-150,fo-auto,q-80,f-auto",
    "product_card": "w-400,h-400,fo-auto,q-80,f-auto",
    "product_detail": "w-800,h-800,fo-auto,q-85,f-auto",
    "blog_featured": "w-1200,h-630,fo-auto,q-85,f-auto",
    "blog_thumbnail": "w-400,h-300,fo-auto,q-80,f-auto",
    "hero_image": "w-1920,h-1080,fo-auto,q-85,f-auto",
    "gallery_image": "w-600,h-400,fo-auto,q-80,f-auto",
    "avatar": "w-100,h-100,fo-face,q-80,f-auto",
}


class ImageKitNotConfiguredError(RuntimeError):
    """Raised when upload credentials are requested but keys are missing."""


@dataclass(frozen=True)
class ResponsiveCandidate:
    url: str
    width: int


@dataclass(frozen=True)
class UploadAuthParams:
    token: str
    expire: int
    signature: str
    public_key: str

    def as_dict(self) -> dict:
        return {
            "token": self.token,
            "expire": self.expire,
            "signature": self.signature,
            "publicKey": self.public_key,
        }


def build_transform(
    *,
    width: Optional[int] = None,
    height: Optional[int] = None,
    quality: Optional[int] = None,
    fmt: Optional[str] = None,
    focus: Optional[str] = None,
    blur: Optional[int] = None,
) -> str:
    """Returns the descriptor string, always pinning a format and a quality."""
    tokens: list[str] = []
    if width:
        tokens.append(f"w-{width}")
    if height:
        tokens.append(f"h-{height}")
    if quality:
        tokens.append(f"q-{quality}")
    if fmt:
        tokens.append(f"f-{fmt}")
    if focus:
        tokens.append(f"fo-{focus}")
    if blur:
        tokens.append(f"bl-{blur}")
    if not fmt:
        tokens.append("f-auto")
    if not quality:
        tokens.append(f"q-{DEFAULT_QUALITY}")
    return ",".join(tokens)


def build_srcset(candidates: Iterable[ResponsiveCandidate]) -> str:
    return ", ".join(f"{c.url} {c.width}w" for c in candidates)


@dataclass(frozen=True)
class ImageResolver:
    """Maps logical paths onto a single ImageKit URL endpoint."""

    url_endpoint: str = DEFAULT_IMAGEKIT_URL_ENDPOINT
    public_key: Optional[str] = None
    private_key: Optional[str] = None

    @property
    def base_url(self) -> str:
        return self.url_endpoint.rstrip("/")

    def normalize_path(self, logical_path: str) -> Optional[str]:
        """
        Returns the CDN-relative path, or None if the path is an absolute URL
        hosted somewhere else and therefore cannot be transformed.
        """
        path = (logical_path or "").strip()
        if path.startswith(self.base_url + "/"):
            segments = path[len(self.base_url) + 1 :].split("/")
            if segments and segments[0].startswith("tr:"):
                segments = segments[1:]
            return "/".join(segments)
        if path.startswith(("http://", "https://")):
            return None
        if path.startswith(LEGACY_IMAGE_PREFIX):
            path = path[len(LEGACY_IMAGE_PREFIX) :]
        return path.lstrip("/")

    def _url(self, path: str, transform: str | None = None) -> str:
        if transform:
            return f"{self.base_url}/tr:{transform}/{path}"
        return f"{self.base_url}/{path}"

    def resolve_full_url(
        self,
        logical_path: str,
        *,
        width: Optional[int] = None,
        height: Optional[int] = None,
        quality: Optional[int] = None,
        fmt: Optional[str] = None,
        focus: Optional[str] = None,
        blur: Optional[int] = None,
    ) -> str:
        path = self.normalize_path(logical_path)
        if path is None:
            return logical_path.strip()
        transform = build_transform(
            width=width,
            height=height,
            quality=quality,
            fmt=fmt,
            focus=focus,
            blur=blur,
        )
        return self._url(path, transform)

    def resolve_placeholder_url(self, logical_path: str) -> Optional[str]:
        path = self.normalize_path(logical_path)
        if path is None:
            return None
        return self._url(path, PLACEHOLDER_TRANSFORM)

    def resolve_responsive_set(
        self, logical_path: str, widths: Iterable[int] | None = None
    ) -> Tuple[ResponsiveCandidate, ...]:
        path = self.normalize_path(logical_path)
        if path is None:
            return ()
        ladder = sorted({int(w) for w in (widths or DEFAULT_RESPONSIVE_WIDTHS) if w > 0})
        return tuple(
            ResponsiveCandidate(
                url=self._url(path, f"w-{w},f-auto,q-{RESPONSIVE_QUALITY}"),
                width=w,
            )
            for w in ladder
        )

    def resolve_preset(self, logical_path: str, preset: str) -> str:
        if preset not in TRANSFORM_PRESETS:
            raise KeyError(f"Unknown transform preset: {preset}")
        path = self.normalize_path(logical_path)
        if path is None:
            return logical_path.strip()
        return self._url(path, TRANSFORM_PRESETS[preset])

    def upload_auth_params(self, now: float | None = None) -> UploadAuthParams:
        """
        Signs a one-off token the browser uploader passes to ImageKit.
        """
        if not self.private_key or not self.public_key:
            raise ImageKitNotConfiguredError("ImageKit not configured")
        token = str(uuid.uuid4())
        expire = int(now if now is not None else time.time()) + UPLOAD_AUTH_TTL_SECONDS
        signature = hmac.new(
            self.private_key.encode("utf-8"),
            f"{token}{expire}".encode("utf-8"),
            hashlib.sha1,
        ).hexdigest()
        return UploadAuthParams(
            token=token, expire=expire, signature=signature, public_key=self.public_key
        )


@lru_cache(maxsize=1)
def default_resolver() -> ImageResolver:
    """Resolver configured from the service settings (`IMAGEKIT_*` environment)."""
    from backend.config import get_settings

    settings = get_settings()
    return ImageResolver(
        url_endpoint=settings.imagekit_url_endpoint,
        public_key=settings.imagekit_public_key,
        private_key=settings.imagekit_private_key,
    )


def resolve_full_url(logical_path: str, **transform) -> str:
    return default_resolver().resolve_full_url(logical_path, **transform)


def resolve_placeholder_url(logical_path: str) -> Optional[str]:
    return default_resolver().resolve_placeholder_url(logical_path)


def resolve_responsive_set(
    logical_path: str, widths: Iterable[int] | None = None
) -> Tuple[ResponsiveCandidate, ...]:
    return default_resolver().resolve_responsive_set(logical_path, widths)
