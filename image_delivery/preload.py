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
Page-level preload hints for priority images.

Each owner (a mounted image instance) holds at most one hint and only ever
touches its own entry.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional

logger = logging.getLogger(__name__)


def _quote(value: str) -> str:
    return '"' + value.replace("\\", "\\\\").replace('"', '\\"') + '"'


@dataclass(frozen=True)
class PreloadHint:
    owner_id: str
    href: str
    srcset: Optional[str] = None
    sizes: Optional[str] = None

    def as_link_header(self) -> str:
        parts = [f"<{self.href}>", "rel=preload", "as=image", "fetchpriority=high"]
        if self.srcset:
            parts.append(f"imagesrcset={_quote(self.srcset)}")
            if self.sizes:
                parts.append(f"imagesizes={_quote(self.sizes)}")
        return "; ".join(parts)

    def as_dict(self) -> dict:
        return {
            "rel": "preload",
            "as": "image",
            "href": self.href,
            "imagesrcset": self.srcset,
            "imagesizes": self.sizes,
            "fetchpriority": "high",
        }


def link_header(hints: Iterable[PreloadHint]) -> str:
    return ", ".join(hint.as_link_header() for hint in hints)


class PreloadHintRegistry:
    """Tracks the preload hints currently registered on a page."""

    def __init__(self):
        self._hints: Dict[str, PreloadHint] = {}

    def register(
        self,
        owner_id: str,
        href: str,
        *,
        srcset: Optional[str] = None,
        sizes: Optional[str] = None,
    ) -> PreloadHint:
        hint = PreloadHint(owner_id=owner_id, href=href, srcset=srcset, sizes=sizes)
        self._hints[owner_id] = hint
        return hint

    def release(self, owner_id: str) -> None:
        if self._hints.pop(owner_id, None) is not None:
            logger.debug("Released preload hint for %s", owner_id)

    def get(self, owner_id: str) -> Optional[PreloadHint]:
        return self._hints.get(owner_id)

    def hints(self) -> List[PreloadHint]:
        return list(self._hints.values())

    def __len__(self) -> int:
        return len(self._hints)
