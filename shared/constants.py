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

DEFAULT_IMAGEKIT_URL_ENDPOINT = "https://ik.imagekit.io/vvkwy0zte"
LEGACY_IMAGE_PREFIX = "/images/"

# Ascending ladder covering the common viewport breakpoints.
DEFAULT_RESPONSIVE_WIDTHS = (400, 640, 768, 1024, 1280, 1920)
DEFAULT_SIZES = "100vw"

PLACEHOLDER_TRANSFORM = "w-20,h-20,bl-10,q-20,f-auto"
RESPONSIVE_QUALITY = 80
DEFAULT_QUALITY = 80

# Viewport proximity
DEFAULT_ROOT_MARGIN_PX = 200
DEFAULT_VISIBILITY_THRESHOLD = 0.01

FADE_IN_DURATION_MS = 300
FALLBACK_LABEL = "Image unavailable"
DEFAULT_IMAGE_TEST_ID = "optimized-image"

# CDN upload auth tokens are valid for 40 minutes.
UPLOAD_AUTH_TTL_SECONDS = 2400

MAX_CONTACT_MESSAGE_LENGTH = 5000
MAX_CART_QUANTITY = 99
