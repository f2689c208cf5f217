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

import unittest

from image_delivery.preload import PreloadHint, PreloadHintRegistry, link_header


class PreloadHintTest(unittest.TestCase):

    def test_link_header_without_srcset(self):
        hint = PreloadHint(owner_id="a", href="https://cdn/x.jpg")
        self.assertEqual(
            hint.as_link_header(),
            "<https://cdn/x.jpg>; rel=preload; as=image; fetchpriority=high",
        )

    def test_link_header_with_srcset(self):
        hint = PreloadHint(
            owner_id="a", href="https://cdn/x.jpg", srcset="u 400w, v 800w", sizes="50vw"
        )
        self.assertEqual(
            hint.as_link_header(),
            '<https://cdn/x.jpg>; rel=preload; as=image; fetchpriority=high; '
            'imagesrcset="u 400w, v 800w"; imagesizes="50vw"',
        )

    def test_joined_header(self):
        hints = [PreloadHint("a", "https://cdn/a"), PreloadHint("b", "https://cdn/b")]
        self.assertEqual(link_header(hints).count("rel=preload"), 2)


class PreloadHintRegistryTest(unittest.TestCase):

    def test_one_hint_per_owner(self):
        registry = PreloadHintRegistry()
        registry.register("a", "https://cdn/1")
        registry.register("a", "https://cdn/2")
        self.assertEqual(len(registry), 1)
        self.assertEqual(registry.get("a").href, "https://cdn/2")

    def test_release_is_idempotent(self):
        registry = PreloadHintRegistry()
        registry.register("a", "https://cdn/1")
        registry.register("b", "https://cdn/2")
        registry.release("a")
        registry.release("a")
        self.assertIsNone(registry.get("a"))
        self.assertEqual([h.owner_id for h in registry.hints()], ["b"])


if __name__ == "__main__":
    unittest.main()
