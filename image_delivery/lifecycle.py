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
Load/error lifecycle for rendered image instances.

The pipeline owns one explicit state object per mounted instance, keyed by
instance id. Observer and load/error callbacks only carry the id; every event
looks the instance up first, so events arriving after unmount are dropped.

    NOT_REQUESTED -> IN_VIEW_PENDING -> LOADED | ERRORED

Priority instances start in IN_VIEW_PENDING and register a preload hint.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Tuple, Union

from image_delivery.preload import PreloadHintRegistry
from image_delivery.scheduler import ProximityScheduler, Region
from image_delivery.urls import (
    ImageResolver,
    ResponsiveCandidate,
    build_srcset,
    default_resolver,
)
from shared.constants import (
    DEFAULT_IMAGE_TEST_ID,
    DEFAULT_SIZES,
    FADE_IN_DURATION_MS,
    FALLBACK_LABEL,
)
from shared.image_request import ImageRequest
from shared.types import ImageLoadState

logger = logging.getLogger(__name__)


@dataclass
class Node:
    """A DOM-equivalent element in the rendered output."""

    tag: str
    attrs: Dict[str, Any] = field(default_factory=dict)
    children: List[Union["Node", str]] = field(default_factory=list)
    handlers: Dict[str, Callable[[], None]] = field(default_factory=dict)

    def iter(self):
        yield self
        for child in self.children:
            if isinstance(child, Node):
                yield from child.iter()

    def find_role(self, role: str) -> List["Node"]:
        return [node for node in self.iter() if node.attrs.get("data-role") == role]

    def text(self) -> str:
        parts = []
        for child in self.children:
            parts.append(child.text() if isinstance(child, Node) else child)
        return "".join(parts)

    def as_dict(self) -> dict:
        return {
            "tag": self.tag,
            "attrs": dict(self.attrs),
            "handlers": sorted(self.handlers),
            "children": [
                child.as_dict() if isinstance(child, Node) else child
                for child in self.children
            ],
        }


@dataclass(frozen=True)
class ResolvedImage:
    full_url: str
    placeholder_url: Optional[str]
    candidates: Tuple[ResponsiveCandidate, ...] = ()
    sizes: Optional[str] = None

    @property
    def srcset(self) -> Optional[str]:
        return build_srcset(self.candidates) if self.candidates else None

    def as_dict(self) -> dict:
        return {
            "url": self.full_url,
            "placeholder_url": self.placeholder_url,
            "srcset": self.srcset,
            "sizes": self.sizes,
            "candidates": [{"url": c.url, "width": c.width} for c in self.candidates],
        }


def resolve_image(resolver: ImageResolver, request: ImageRequest) -> ResolvedImage:
    """Resolves the three URL kinds an ImageRequest may need."""
    intent = request.display_intent
    full_url = resolver.resolve_full_url(
        request.logical_path, width=intent.width, height=intent.height
    )
    placeholder_url = (
        resolver.resolve_placeholder_url(request.logical_path)
        if request.blur_placeholder
        else None
    )
    candidates: Tuple[ResponsiveCandidate, ...] = ()
    sizes = None
    if request.responsive:
        candidates = resolver.resolve_responsive_set(request.logical_path, request.widths)
        if candidates:
            sizes = request.sizes or DEFAULT_SIZES
    return ResolvedImage(
        full_url=full_url,
        placeholder_url=placeholder_url,
        candidates=candidates,
        sizes=sizes,
    )


@dataclass
class ImageInstance:
    instance_id: str
    request: ImageRequest
    resolved: ResolvedImage
    test_id: str
    region: Optional[Region] = None
    on_click: Optional[Callable[[], None]] = None
    state: ImageLoadState = ImageLoadState.NOT_REQUESTED


class ImagePipeline:
    """Mounts image instances and drives them through their load lifecycle."""

    def __init__(
        self,
        resolver: Optional[ImageResolver] = None,
        scheduler: Optional[ProximityScheduler] = None,
        preload: Optional[PreloadHintRegistry] = None,
    ):
        self.resolver = resolver or default_resolver()
        self.scheduler = scheduler or ProximityScheduler(None)
        self.preload = preload if preload is not None else PreloadHintRegistry()
        self._instances: Dict[str, ImageInstance] = {}

    def mount(
        self,
        request: ImageRequest,
        *,
        region: Optional[Region] = None,
        test_id: Optional[str] = None,
        on_click: Optional[Callable[[], None]] = None,
        instance_id: Optional[str] = None,
    ) -> str:
        instance_id = instance_id or uuid.uuid4().hex
        if instance_id in self._instances:
            raise ValueError(f"Image instance {instance_id} is already mounted")

        resolved = resolve_image(self.resolver, request)
        instance = ImageInstance(
            instance_id=instance_id,
            request=request,
            resolved=resolved,
            test_id=test_id or DEFAULT_IMAGE_TEST_ID,
            region=region,
            on_click=on_click,
        )
        self._instances[instance_id] = instance

        if request.priority:
            instance.state = ImageLoadState.IN_VIEW_PENDING
            self.preload.register(
                instance_id,
                resolved.full_url,
                srcset=resolved.srcset,
                sizes=resolved.sizes,
            )
        else:
            self.scheduler.schedule(
                instance_id, region or Region(top=0.0), self.mark_near_viewport
            )
        return instance_id

    def unmount(self, instance_id: str) -> None:
        self._instances.pop(instance_id, None)
        self.scheduler.cancel(instance_id)
        self.preload.release(instance_id)

    def _live(self, instance_id: str, event: str) -> Optional[ImageInstance]:
        instance = self._instances.get(instance_id)
        if instance is None:
            logger.debug("Dropping %s for unmounted image %s", event, instance_id)
        return instance

    def mark_near_viewport(self, instance_id: str) -> None:
        instance = self._live(instance_id, "viewport event")
        if instance is None:
            return
        self.scheduler.cancel(instance_id)
        if instance.state == ImageLoadState.NOT_REQUESTED:
            instance.state = ImageLoadState.IN_VIEW_PENDING

    def mark_loaded(self, instance_id: str) -> None:
        self._settle(instance_id, ImageLoadState.LOADED)

    def mark_errored(self, instance_id: str) -> None:
        self._settle(instance_id, ImageLoadState.ERRORED)

    def _settle(self, instance_id: str, outcome: ImageLoadState) -> None:
        instance = self._live(instance_id, outcome.value)
        if instance is None:
            return
        if instance.state != ImageLoadState.IN_VIEW_PENDING:
            logger.debug(
                "Ignoring %s for image %s in state %s",
                outcome.value,
                instance_id,
                instance.state.value,
            )
            return
        instance.state = outcome
        if outcome == ImageLoadState.ERRORED:
            logger.info(
                "Image %s failed to load: %s", instance_id, instance.resolved.full_url
            )

    def state(self, instance_id: str) -> Optional[ImageLoadState]:
        instance = self._instances.get(instance_id)
        return instance.state if instance else None

    def instance(self, instance_id: str) -> Optional[ImageInstance]:
        return self._instances.get(instance_id)

    def is_mounted(self, instance_id: str) -> bool:
        return instance_id in self._instances

    def render(self, instance_id: str) -> Node:
        instance = self._instances.get(instance_id)
        if instance is None:
            raise KeyError(f"Image instance {instance_id} is not mounted")
        return _render_instance(
            instance,
            on_load=lambda: self.mark_loaded(instance_id),
            on_error=lambda: self.mark_errored(instance_id),
        )


def _frame_style(instance: ImageInstance) -> dict:
    intent = instance.request.display_intent
    style: dict = {"position": "relative", "overflow": "hidden"}
    if intent.width:
        style["width"] = f"{intent.width}px"
    if intent.height:
        style["height"] = f"{intent.height}px"
    if intent.aspect_ratio:
        style["aspect-ratio"] = intent.aspect_ratio
    return style


def _background(instance: ImageInstance) -> Node:
    fit = instance.request.display_intent.object_fit.value
    placeholder_url = instance.resolved.placeholder_url
    if instance.request.blur_placeholder and placeholder_url:
        return Node(
            "img",
            {
                "data-role": "placeholder",
                "src": placeholder_url,
                "alt": "",
                "aria-hidden": "true",
                "style": {
                    "position": "absolute",
                    "inset": "0",
                    "object-fit": fit,
                    "filter": "blur(10px)",
                    "transform": "scale(1.1)",
                },
            },
        )
    return Node(
        "div",
        {
            "data-role": "skeleton",
            "aria-hidden": "true",
            "class": "animate-pulse",
            "style": {"position": "absolute", "inset": "0"},
        },
    )


def _asset(instance: ImageInstance, on_load, on_error) -> Node:
    request = instance.request
    intent = request.display_intent
    loaded = instance.state == ImageLoadState.LOADED
    attrs: Dict[str, Any] = {
        "data-role": "asset",
        "src": instance.resolved.full_url,
        "alt": request.alt,
        "loading": "eager" if request.priority else "lazy",
        "decoding": "sync" if request.priority else "async",
        "style": {
            "object-fit": intent.object_fit.value,
            "opacity": "1" if loaded else "0",
            "transition": f"opacity {FADE_IN_DURATION_MS}ms ease-in-out",
        },
    }
    if request.priority:
        attrs["fetchpriority"] = "high"
    if intent.width:
        attrs["width"] = intent.width
    if intent.height:
        attrs["height"] = intent.height
    srcset = instance.resolved.srcset
    if srcset:
        attrs["srcset"] = srcset
        attrs["sizes"] = instance.resolved.sizes
    return Node("img", attrs, handlers={"load": on_load, "error": on_error})


def _fallback() -> Node:
    return Node(
        "div",
        {"data-role": "fallback", "role": "img", "aria-label": FALLBACK_LABEL},
        [
            Node("svg", {"data-role": "fallback-icon", "data-icon": "image-off", "aria-hidden": "true"}),
            Node("span", {"data-role": "fallback-label"}, [FALLBACK_LABEL]),
        ],
    )


def _render_instance(instance: ImageInstance, on_load, on_error) -> Node:
    state = instance.state
    children: List[Union[Node, str]] = []
    if state == ImageLoadState.ERRORED:
        children.append(_fallback())
    else:
        if not state.is_terminal:
            children.append(_background(instance))
        if state != ImageLoadState.NOT_REQUESTED:
            children.append(_asset(instance, on_load, on_error))

    root = Node(
        "div",
        {
            "data-testid": instance.test_id,
            "data-state": state.value,
            "style": _frame_style(instance),
        },
        children,
    )
    if instance.on_click is not None:
        root.handlers["click"] = instance.on_click
    return root
