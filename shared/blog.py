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

from dataclasses import dataclass, field
from enum import StrEnum
from typing import List, Optional, Union

from shared.types import ContentFormat


class BlockType(StrEnum):
    TEXT = "text"
    HEADING = "heading"
    IMAGE = "image"
    GALLERY = "gallery"
    VIDEO = "video"
    PRODUCTS = "products"
    KEYPOINTS = "keypoints"
    QUOTE = "quote"
    DIVIDER = "divider"
    CTA = "cta"


@dataclass
class TextBlock:
    id: str
    content: str
    type: BlockType = BlockType.TEXT


@dataclass
class HeadingBlock:
    id: str
    text: str
    level: int = 2
    type: BlockType = BlockType.HEADING


@dataclass
class ImageBlock:
    id: str
    url: str
    alt: str = ""
    caption: Optional[str] = None
    type: BlockType = BlockType.IMAGE


@dataclass
class GalleryImage:
    url: str
    alt: str = ""


@dataclass
class GalleryBlock:
    id: str
    images: List[GalleryImage]
    columns: int = 3
    type: BlockType = BlockType.GALLERY


@dataclass
class VideoBlock:
    id: str
    url: str
    title: Optional[str] = None
    type: BlockType = BlockType.VIDEO


@dataclass
class ProductsBlock:
    id: str
    product_ids: List[str]
    title: Optional[str] = None
    type: BlockType = BlockType.PRODUCTS


@dataclass
class KeyPoint:
    id: str
    title: str
    description: Optional[str] = None


@dataclass
class KeyPointsBlock:
    id: str
    points: List[KeyPoint]
    title: Optional[str] = None
    type: BlockType = BlockType.KEYPOINTS


@dataclass
class QuoteBlock:
    id: str
    text: str
    author: Optional[str] = None
    type: BlockType = BlockType.QUOTE


@dataclass
class DividerBlock:
    id: str
    type: BlockType = BlockType.DIVIDER


@dataclass
class CtaBlock:
    id: str
    title: str
    description: str
    button_text: str
    button_link: str
    type: BlockType = BlockType.CTA


ContentBlock = Union[
    TextBlock,
    HeadingBlock,
    ImageBlock,
    GalleryBlock,
    VideoBlock,
    ProductsBlock,
    KeyPointsBlock,
    QuoteBlock,
    DividerBlock,
    CtaBlock,
]


@dataclass
class TemplateSection:
    title: str = ""
    content: str = ""
    format: ContentFormat = ContentFormat.PARAGRAPH


@dataclass
class BlogTemplate:
    """Fixed-shape article layout used by older posts."""

    introduction: str = ""
    sections: List[TemplateSection] = field(default_factory=list)
    gallery_images: List[GalleryImage] = field(default_factory=list)
    video_url: str = ""
    video_title: str = ""
    key_points_title: str = ""
    key_points: List[str] = field(default_factory=list)
    featured_product_ids: List[str] = field(default_factory=list)
    conclusion: str = ""
