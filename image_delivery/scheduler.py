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
Decides when a non-priority image should start fetching.

An instance's render region is observed against the visible viewport. The
first time the region comes within `root_margin_px` of the viewport, the
scheduler fires `on_near` once and releases the observation.
"""

from __future__ import annotations

import itertools
import logging
from dataclasses import dataclass
from typing import Callable, Dict, Optional, Protocol

from shared.constants import DEFAULT_ROOT_MARGIN_PX, DEFAULT_VISIBILITY_THRESHOLD

logger = logging.getLogger(__name__)

NearCallback = Callable[[str], None]


class ObserverUnavailableError(RuntimeError):
    """The viewport observation facility cannot be used in this runtime."""


@dataclass(frozen=True)
class Region:
    """Vertical extent of a rendered element, in page pixels."""

    top: float
    height: float = 0.0

    @property
    def bottom(self) -> float:
        return self.top + max(self.height, 0.0)


class Subscription(Protocol):
    def release(self) -> None:
        ...


class ViewportObserver(Protocol):
    """Minimal interface the scheduler needs from a viewport observer."""

    def observe(
        self,
        instance_id: str,
        region: Region,
        callback: NearCallback,
        *,
        root_margin_px: float,
        threshold: float,
    ) -> Subscription:
        ...


@dataclass
class _Observation:
    key: int
    instance_id: str
    region: Region
    callback: NearCallback
    root_margin_px: float
    threshold: float
    owner: "Viewport"
    was_near: bool = False
    released: bool = False

    def release(self) -> None:
        if self.released:
            return
        self.released = True
        self.owner._drop(self.key)


class Viewport:
    """
    A scrollable viewport that notifies observers when regions come near.

    Callbacks fire on the transition from "not near" to "near", including at
    registration time when the region is already near.
    """

    def __init__(self, height: float, scroll_top: float = 0.0):
        self.height = height
        self.scroll_top = scroll_top
        self._observations: Dict[int, _Observation] = {}
        self._keys = itertools.count()

    def observe(
        self,
        instance_id: str,
        region: Region,
        callback: NearCallback,
        *,
        root_margin_px: float = DEFAULT_ROOT_MARGIN_PX,
        threshold: float = DEFAULT_VISIBILITY_THRESHOLD,
    ) -> _Observation:
        observation = _Observation(
            key=next(self._keys),
            instance_id=instance_id,
            region=region,
            callback=callback,
            root_margin_px=root_margin_px,
            threshold=threshold,
            owner=self,
        )
        self._observations[observation.key] = observation
        self._evaluate(observation)
        return observation

    def scroll_to(self, scroll_top: float) -> None:
        self.scroll_top = scroll_top
        self._evaluate_all()

    def resize(self, height: float) -> None:
        self.height = height
        self._evaluate_all()

    @property
    def active_count(self) -> int:
        return len(self._observations)

    def is_near(self, region: Region, root_margin_px: float, threshold: float) -> bool:
        lo = self.scroll_top - root_margin_px
        hi = self.scroll_top + self.height + root_margin_px
        if region.height <= 0:
            return lo <= region.top <= hi
        overlap = min(region.bottom, hi) - max(region.top, lo)
        if overlap < 0:
            return False
        return overlap / region.height >= threshold

    def _drop(self, key: int) -> None:
        self._observations.pop(key, None)

    def _evaluate_all(self) -> None:
        # Callbacks may release observations while we iterate.
        for observation in list(self._observations.values()):
            self._evaluate(observation)

    def _evaluate(self, observation: _Observation) -> None:
        if observation.released:
            return
        near = self.is_near(
            observation.region, observation.root_margin_px, observation.threshold
        )
        crossed = near and not observation.was_near
        observation.was_near = near
        if crossed:
            observation.callback(observation.instance_id)


@dataclass
class _Pending:
    instance_id: str
    on_near: NearCallback
    subscription: Optional[Subscription] = None
    done: bool = False

    def finish(self) -> bool:
        """Marks the observation done; returns False if it already was."""
        if self.done:
            return False
        self.done = True
        if self.subscription is not None:
            self.subscription.release()
        return True


class ProximityScheduler:
    """Fires `on_near` at most once per scheduled instance."""

    def __init__(
        self,
        observer: Optional[ViewportObserver],
        *,
        root_margin_px: float = DEFAULT_ROOT_MARGIN_PX,
        threshold: float = DEFAULT_VISIBILITY_THRESHOLD,
    ):
        self.observer = observer
        self.root_margin_px = root_margin_px
        self.threshold = threshold
        self._pending: Dict[str, _Pending] = {}

    def schedule(self, instance_id: str, region: Region, on_near: NearCallback) -> bool:
        """
        Starts observing `region` on behalf of `instance_id`.

        Returns True if the fetch is deferred, False if `on_near` already ran
        (the region was near on registration, or observation is unavailable).
        """
        self.cancel(instance_id)
        pending = _Pending(instance_id=instance_id, on_near=on_near)

        def _fire(fired_id: str) -> None:
            if not pending.finish():
                return
            if self._pending.get(fired_id) is pending:
                del self._pending[fired_id]
            pending.on_near(fired_id)

        if self.observer is None:
            logger.warning(
                "No viewport observer configured; loading %s immediately", instance_id
            )
            _fire(instance_id)
            return False
        try:
            subscription = self.observer.observe(
                instance_id,
                region,
                _fire,
                root_margin_px=self.root_margin_px,
                threshold=self.threshold,
            )
        except ObserverUnavailableError as e:
            logger.warning(
                "Viewport observer unavailable (%s); loading %s immediately",
                e,
                instance_id,
            )
            _fire(instance_id)
            return False
        except Exception:
            logger.warning(
                "Viewport observer failed to start; loading %s immediately",
                instance_id,
                exc_info=True,
            )
            _fire(instance_id)
            return False

        pending.subscription = subscription
        if pending.done:
            subscription.release()
            return False
        self._pending[instance_id] = pending
        return True

    def cancel(self, instance_id: str) -> None:
        pending = self._pending.pop(instance_id, None)
        if pending is not None:
            pending.finish()

    def is_pending(self, instance_id: str) -> bool:
        return instance_id in self._pending

    @property
    def pending_count(self) -> int:
        return len(self._pending)
