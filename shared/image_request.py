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
from typing import Optional, Tuple

from dacite import Config, from_dict

from shared.json_utils import convert_keys
from shared.types import ObjectFit


@dataclass(frozen=True)
class DisplayIntent:
    """How the resolved image should be framed."""

    width: Optional[int] = None
    height: Optional[int] = None
    aspect_ratio: Optional[str] = None
    object_fit: ObjectFit = ObjectFit.COVER


@dataclass(frozen=True)
class ImageRequest:
    """A single request to render an image, constructed per render call."""

    logical_path: str
    display_intent: DisplayIntent = field(default_factory=DisplayIntent)
    priority: bool = False
    responsive: bool = False
    blur_placeholder: bool = False
    alt: str = ""
    sizes: Optional[str] = None
    widths: Optional[Tuple[int, ...]] = None


def image_request_from_dict(data: dict) -> ImageRequest:
    """Builds an ImageRequest from a camelCase or snake_case payload."""
    data = convert_keys(data, "camel_to_snake")
    if data.get("widths") is not None:
        data["widths"] = tuple(int(w) for w in data["widths"])
    return from_dict(
        data_class=ImageRequest,
        data=data,
        config=Config(cast=[ObjectFit]),
    )
