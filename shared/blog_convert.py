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

import logging
from typing import Any, List, Optional

from shared.blog import (
    BlockType,
    BlogTemplate,
    ContentBlock,
    CtaBlock,
    DividerBlock,
    GalleryBlock,
    GalleryImage,
    HeadingBlock,
    ImageBlock,
    KeyPoint,
    KeyPointsBlock,
    ProductsBlock,
    QuoteBlock,
    TemplateSection,
    TextBlock,
    VideoBlock,
)
from shared.types import ContentFormat

logger = logging.getLogger(__name__)

TEMPLATE_SECTION_COUNT = 3


def _get_value(data: dict, *keys: str) -> Any:
    for key in keys:
        if key in data:
            return data[key]
    return None


def _to_gallery_image(data: dict) -> GalleryImage:
    return GalleryImage(
        url=_get_value(data, "url") or "",
        alt=_get_value(data, "alt") or "",
    )


def _to_key_point(data: dict, index: int) -> KeyPoint:
    return KeyPoint(
        id=str(_get_value(data, "id") or index),
        title=_get_value(data, "title") or "",
        description=_get_value(data, "description"),
    )


def _to_int(value: Any, default: int) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        logger.warning("Ignoring non-numeric block setting %r", value)
        return default


def _to_format(value: Optional[str]) -> ContentFormat:
    try:
        return ContentFormat(value or ContentFormat.PARAGRAPH)
    except ValueError:
        return ContentFormat.PARAGRAPH


def block_from_dict(data: dict) -> Optional[ContentBlock]:
    """Converts one stored block; returns None for unknown block types."""
    block_id = str(_get_value(data, "id") or "")
    try:
        block_type = BlockType(_get_value(data, "type"))
    except ValueError:
        logger.warning("Skipping unknown block type %r", _get_value(data, "type"))
        return None

    if block_type == BlockType.TEXT:
        return TextBlock(id=block_id, content=_get_value(data, "content") or "")
    if block_type == BlockType.HEADING:
        level = _to_int(_get_value(data, "level") or 2, 2)
        return HeadingBlock(
            id=block_id, text=_get_value(data, "text") or "", level=min(max(level, 1), 3)
        )
    if block_type == BlockType.IMAGE:
        return ImageBlock(
            id=block_id,
            url=_get_value(data, "url") or "",
            alt=_get_value(data, "alt") or "",
            caption=_get_value(data, "caption"),
        )
    if block_type == BlockType.GALLERY:
        columns = _to_int(_get_value(data, "columns") or 3, 3)
        return GalleryBlock(
            id=block_id,
            images=[
                _to_gallery_image(img)
                for img in _get_value(data, "images") or []
                if isinstance(img, dict)
            ],
            columns=columns if columns in (2, 3, 4) else 3,
        )
    if block_type == BlockType.VIDEO:
        return VideoBlock(
            id=block_id, url=_get_value(data, "url") or "", title=_get_value(data, "title")
        )
    if block_type == BlockType.PRODUCTS:
        return ProductsBlock(
            id=block_id,
            product_ids=[
                str(pid) for pid in _get_value(data, "product_ids", "productIds") or []
            ],
            title=_get_value(data, "title"),
        )
    if block_type == BlockType.KEYPOINTS:
        return KeyPointsBlock(
            id=block_id,
            points=[
                _to_key_point(point, i)
                for i, point in enumerate(_get_value(data, "points") or [])
                if isinstance(point, dict)
            ],
            title=_get_value(data, "title"),
        )
    if block_type == BlockType.QUOTE:
        return QuoteBlock(
            id=block_id, text=_get_value(data, "text") or "", author=_get_value(data, "author")
        )
    if block_type == BlockType.DIVIDER:
        return DividerBlock(id=block_id)
    return CtaBlock(
        id=block_id,
        title=_get_value(data, "title") or "",
        description=_get_value(data, "description") or "",
        button_text=_get_value(data, "button_text", "buttonText") or "",
        button_link=_get_value(data, "button_link", "buttonLink") or "",
    )


def blocks_from_dicts(items: List[dict]) -> List[ContentBlock]:
    blocks = []
    for item in items or []:
        if not isinstance(item, dict):
            logger.warning("Skipping malformed block %r", item)
            continue
        block = block_from_dict(item)
        if block is not None:
            blocks.append(block)
    return blocks


def template_from_dict(data: dict) -> BlogTemplate:
    """Reads the flat `sectionNTitle/Content/Type` template layout."""
    sections = []
    for n in range(1, TEMPLATE_SECTION_COUNT + 1):
        sections.append(
            TemplateSection(
                title=_get_value(data, f"section{n}Title", f"section{n}_title") or "",
                content=_get_value(data, f"section{n}Content", f"section{n}_content") or "",
                format=_to_format(_get_value(data, f"section{n}Type", f"section{n}_type")),
            )
        )
    return BlogTemplate(
        introduction=_get_value(data, "introduction") or "",
        sections=sections,
        gallery_images=[
            _to_gallery_image(img)
            for img in _get_value(data, "galleryImages", "gallery_images") or []
        ],
        video_url=_get_value(data, "videoUrl", "video_url") or "",
        video_title=_get_value(data, "videoTitle", "video_title") or "",
        key_points_title=_get_value(data, "keyPointsTitle", "key_points_title") or "",
        key_points=list(_get_value(data, "keyPoints", "key_points") or []),
        featured_product_ids=[
            str(pid)
            for pid in _get_value(data, "featuredProductIds", "featured_product_ids") or []
        ],
        conclusion=_get_value(data, "conclusion") or "",
    )
