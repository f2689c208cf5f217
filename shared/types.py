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

from enum import StrEnum


class ImageLoadState(StrEnum):
    """Per-instance load state of a rendered image."""

    NOT_REQUESTED = "NOT_REQUESTED"
    IN_VIEW_PENDING = "IN_VIEW_PENDING"
    LOADED = "LOADED"
    ERRORED = "ERRORED"

    @property
    def is_terminal(self) -> bool:
        return self in (ImageLoadState.LOADED, ImageLoadState.ERRORED)


class ObjectFit(StrEnum):
    COVER = "cover"
    CONTAIN = "contain"
    FILL = "fill"
    NONE = "none"
    SCALE_DOWN = "scale-down"


class ContentFormat(StrEnum):
    """How a block of template prose is laid out."""

    PARAGRAPH = "paragraph"
    NUMBERED = "numbered"
    BULLETS = "bullets"


class PostStatus(StrEnum):
    DRAFT = "draft"
    PUBLISHED = "published"


class MessageStatus(StrEnum):
    UNREAD = "unread"
    READ = "read"


class UserRole(StrEnum):
    ADMIN = "admin"
    USER = "user"
