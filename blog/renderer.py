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
Turns stored blog content into a flat list of typed sections.

Two input shapes are supported: the block list written by the block editor,
and the older fixed-shape template (intro, three titled sections, gallery,
video, featured products, key points, conclusion). Both produce the same
section dictionaries so clients only need one renderer.
"""

from __future__ import annotations

import re
from typing import List, Mapping, Optional

from image_delivery.lifecycle import resolve_image
from image_delivery.urls import ImageResolver, default_resolver
from shared.blog import (
    BlogTemplate,
    ContentBlock,
    CtaBlock,
    DividerBlock,
    GalleryBlock,
    GalleryImage,
    HeadingBlock,
    ImageBlock,
    KeyPointsBlock,
    ProductsBlock,
    QuoteBlock,
    TemplateSection,
    TextBlock,
    VideoBlock,
)
from shared.image_request import ImageRequest
from shared.types import ContentFormat

DEFAULT_PRODUCTS_TITLE = "Shop These Plants"
DEFAULT_VIDEO_TITLE = "Video Coming Soon"

_YOUTUBE_ID = re.compile(r"^.*(youtu\.be/|v/|u/\w/|embed/|watch\?v=|&v=)([^#&?]*).*")
_LEADING_NUMBER = re.compile(r"^\d+\.?\s")
_LEADING_NUMBER_STRIP = re.compile(r"^\d+\.?\s*")
_LEADING_BULLET = re.compile(r"^[-•]\s*")
_TITLE_DESCRIPTION = re.compile(r"^(.+?)\s*[-–—]\s*(.+)$")

Catalog = Mapping[str, dict]


def youtube_id(url: str) -> Optional[str]:
    match = _YOUTUBE_ID.match(url or "")
    if match and len(match.group(2)) == 11:
        return match.group(2)
    return None


def _split_title(line: str) -> dict:
    match = _TITLE_DESCRIPTION.match(line)
    if match:
        return {"text": line, "title": match.group(1), "description": match.group(2)}
    return {"text": line, "title": None, "description": None}


def format_lines(content: str, kind: ContentFormat) -> List[dict]:
    """Splits prose into display items according to its layout."""
    lines = [line for line in (content or "").split("\n") if line.strip()]
    if kind == ContentFormat.PARAGRAPH:
        return [{"text": line} for line in lines]

    items = []
    for index, line in enumerate(lines, start=1):
        if kind == ContentFormat.NUMBERED:
            clean = _LEADING_NUMBER_STRIP.sub("", line) if _LEADING_NUMBER.match(line) else line
        else:
            clean = _LEADING_BULLET.sub("", line)
        item = _split_title(clean)
        if kind == ContentFormat.NUMBERED:
            item["index"] = index
        items.append(item)
    return items


class BlogRenderer:
    def __init__(self, catalog: Catalog, resolver: Optional[ImageResolver] = None):
        self.catalog = catalog
        self.resolver = resolver or default_resolver()

    def _image(self, url: str, alt: str = "") -> dict:
        request = ImageRequest(
            logical_path=url, responsive=True, blur_placeholder=True, alt=alt
        )
        descriptor = resolve_image(self.resolver, request).as_dict()
        descriptor["alt"] = alt
        return descriptor

    def _products(self, product_ids: List[str]) -> List[dict]:
        products = []
        for product_id in product_ids:
            product = self.catalog.get(str(product_id))
            if product is None:
                continue
            entry = dict(product)
            entry["image"] = self._image(product.get("image", ""), product.get("name", ""))
            products.append(entry)
        return products

    def _prose(self, content: str, kind: ContentFormat) -> Optional[dict]:
        if not (content or "").strip():
            return None
        return {"type": kind.value, "items": format_lines(content, kind)}

    def _gallery(self, images: List[GalleryImage], columns: int) -> dict:
        return {
            "type": "gallery",
            "columns": columns,
            "images": [self._image(img.url, img.alt) for img in images if img.url],
        }

    def _video(self, url: str, title: Optional[str]) -> dict:
        video_id = youtube_id(url)
        return {
            "type": "video",
            "video_id": video_id,
            "embed_url": f"https://www.youtube.com/embed/{video_id}" if video_id else None,
            "placeholder": video_id is None,
            "title": title or (None if video_id else DEFAULT_VIDEO_TITLE),
        }

    def _products_section(self, product_ids: List[str], title: Optional[str]) -> Optional[dict]:
        products = self._products(product_ids)
        if not products:
            return None
        return {
            "type": "products",
            "title": title or DEFAULT_PRODUCTS_TITLE,
            "products": products,
        }

    def render_block(self, block: ContentBlock) -> Optional[dict]:
        if isinstance(block, TextBlock):
            return {"type": "text", "id": block.id, "html": block.content}
        if isinstance(block, HeadingBlock):
            return {"type": "heading", "id": block.id, "level": block.level, "text": block.text}
        if isinstance(block, ImageBlock):
            return {
                "type": "image",
                "id": block.id,
                "image": self._image(block.url, block.alt),
                "caption": block.caption,
            }
        if isinstance(block, GalleryBlock):
            section = self._gallery(block.images, block.columns)
        elif isinstance(block, VideoBlock):
            section = self._video(block.url, block.title)
        elif isinstance(block, ProductsBlock):
            section = self._products_section(block.product_ids, block.title)
        elif isinstance(block, KeyPointsBlock):
            section = {
                "type": "keypoints",
                "title": block.title,
                "points": [
                    {"index": i, "title": p.title, "description": p.description}
                    for i, p in enumerate(block.points, start=1)
                ],
            }
        elif isinstance(block, QuoteBlock):
            section = {"type": "quote", "text": block.text, "author": block.author}
        elif isinstance(block, DividerBlock):
            section = {"type": "divider"}
        elif isinstance(block, CtaBlock):
            section = {
                "type": "cta",
                "title": block.title,
                "description": block.description,
                "button_text": block.button_text,
                "button_link": block.button_link,
            }
        else:
            return None
        if section is not None:
            section["id"] = block.id
        return section

    def render_blocks(self, blocks: List[ContentBlock]) -> List[dict]:
        sections = []
        for block in blocks:
            section = self.render_block(block)
            if section is not None:
                sections.append(section)
        return sections

    def _template_section(self, section: TemplateSection) -> List[dict]:
        out = []
        if section.title:
            out.append({"type": "heading", "level": 2, "text": section.title})
        prose = self._prose(section.content, section.format)
        if prose:
            out.append(prose)
        return out

    def render_template(self, template: BlogTemplate) -> List[dict]:
        sections = (template.sections + [TemplateSection()] * 3)[:3]
        out: List[dict] = []
        if template.introduction:
            out.append({"type": ContentFormat.PARAGRAPH.value, "items": [{"text": template.introduction}]})

        out.extend(self._template_section(sections[0]))

        images = [img for img in template.gallery_images if img.url]
        if images:
            out.append(self._gallery(images, min(len(images), 3)))

        out.extend(self._template_section(sections[1]))

        if template.video_url:
            out.append(self._video(template.video_url, template.video_title))

        products = self._products_section(template.featured_product_ids, None)
        if products:
            out.append(products)

        out.extend(self._template_section(sections[2]))

        points = [p for p in template.key_points if p.strip()]
        if points:
            if template.key_points_title:
                out.append({"type": "heading", "level": 2, "text": template.key_points_title})
            out.append(
                {"type": ContentFormat.BULLETS.value, "items": [{"text": p} for p in points]}
            )

        if template.conclusion:
            out.append({"type": ContentFormat.PARAGRAPH.value, "items": [{"text": template.conclusion}]})
        return out


def render_blocks(
    blocks: List[ContentBlock], catalog: Catalog, resolver: Optional[ImageResolver] = None
) -> List[dict]:
    return BlogRenderer(catalog, resolver).render_blocks(blocks)


def render_template(
    template: BlogTemplate, catalog: Catalog, resolver: Optional[ImageResolver] = None
) -> List[dict]:
    return BlogRenderer(catalog, resolver).render_template(template)
