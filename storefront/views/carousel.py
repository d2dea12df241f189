"""Hero banner slideshow state machine.

Auto-advances every `interval` seconds while `auto_playing`. Any manual
navigation pauses auto-play; after `resume_delay` seconds without further
interaction auto-play switches back on. Timers go through a scheduler so the
same logic runs on real threads or on a test clock.
"""

from __future__ import annotations

import logging
import threading
from collections import OrderedDict
from typing import Callable, List, Optional, Sequence

from storefront.catalog.normalize import Banner
from storefront.errors import ValidationError

logger = logging.getLogger(__name__)

DEFAULT_INTERVAL = 5.0
DEFAULT_RESUME_DELAY = 10.0


class ThreadScheduler:
    """call_later() on top of threading.Timer."""

    def call_later(self, delay: float, callback: Callable[[], None]):
        timer = threading.Timer(delay, callback)
        timer.daemon = True
        timer.start()
        return timer


def visible_banners(banners: Sequence[Banner]) -> List[Banner]:
    return [b for b in banners if not b.position or b.position == "hero"]


class Carousel:
    def __init__(
        self,
        banners: Sequence[Banner] = (),
        scheduler=None,
        interval: float = DEFAULT_INTERVAL,
        resume_delay: float = DEFAULT_RESUME_DELAY,
        on_change: Optional[Callable[["Carousel"], None]] = None,
    ):
        self._scheduler = scheduler or ThreadScheduler()
        self.interval = interval
        self.resume_delay = resume_delay
        self._on_change = on_change
        self._lock = threading.RLock()

        self.banners: List[Banner] = list(banners)
        self.current_index = 0
        self.direction = 1
        self.auto_playing = True

        self._advance_timer = None
        self._resume_timer = None
        # a timer only acts if its generation is still current
        self._advance_gen = 0
        self._resume_gen = 0
        self._closed = False

    # --- derived ---
    @property
    def count(self) -> int:
        return len(self.banners)

    @property
    def is_empty(self) -> bool:
        return not self.banners

    @property
    def has_controls(self) -> bool:
        return self.count > 1

    @property
    def current(self) -> Optional[Banner]:
        if self.is_empty:
            return None
        return self.banners[self.current_index]

    def to_dict(self) -> dict:
        return {
            "banners": [b.to_dict() for b in self.banners],
            "current_index": self.current_index,
            "direction": self.direction,
            "auto_playing": self.auto_playing,
            "has_controls": self.has_controls,
            "interval": self.interval,
            "resume_delay": self.resume_delay,
        }

    # --- lifecycle ---
    def start(self) -> None:
        with self._lock:
            self._schedule_advance()

    def close(self) -> None:
        with self._lock:
            self._closed = True
            self._advance_gen += 1
            self._resume_gen += 1
            self._cancel(self._advance_timer)
            self._cancel(self._resume_timer)
            self._advance_timer = self._resume_timer = None

    def set_banners(self, banners: Sequence[Banner]) -> None:
        with self._lock:
            self.banners = list(banners)
            if self.current_index >= self.count:
                self.current_index = 0
            self._schedule_advance()
            self._changed()

    # --- navigation ---
    def next(self) -> None:
        with self._lock:
            if not self.has_controls:
                return
            self.current_index = (self.current_index + 1) % self.count
            self.direction = 1
            self._interacted()

    def prev(self) -> None:
        with self._lock:
            if not self.has_controls:
                return
            self.current_index = (self.current_index - 1) % self.count
            self.direction = -1
            self._interacted()

    def go_to(self, index: int) -> None:
        with self._lock:
            if not self.has_controls:
                return
            if not 0 <= index < self.count:
                raise ValidationError("Slide index out of range", {"index": index, "count": self.count})
            self.direction = 1 if index > self.current_index else -1
            self.current_index = index
            self._interacted()

    # --- timers ---
    def _interacted(self) -> None:
        self.auto_playing = False
        self._schedule_advance()
        self._schedule_resume()
        self._changed()

    def _schedule_advance(self) -> None:
        self._advance_gen += 1
        self._cancel(self._advance_timer)
        self._advance_timer = None
        if self._closed or not self.auto_playing or not self.has_controls:
            return
        gen = self._advance_gen
        self._advance_timer = self._scheduler.call_later(self.interval, lambda: self._tick(gen))

    def _schedule_resume(self) -> None:
        self._resume_gen += 1
        self._cancel(self._resume_timer)
        self._resume_timer = None
        if self._closed or self.auto_playing:
            return
        gen = self._resume_gen
        self._resume_timer = self._scheduler.call_later(self.resume_delay, lambda: self._resume(gen))

    def _tick(self, gen: int) -> None:
        with self._lock:
            if self._closed or gen != self._advance_gen:
                return
            if self.auto_playing and self.has_controls:
                self.current_index = (self.current_index + 1) % self.count
                self.direction = 1
                self._changed()
            self._schedule_advance()

    def _resume(self, gen: int) -> None:
        with self._lock:
            if self._closed or gen != self._resume_gen:
                return
            self._resume_timer = None
            self.auto_playing = True
            self._schedule_advance()
            self._changed()

    def _changed(self) -> None:
        if self._on_change is None:
            return
        try:
            self._on_change(self)
        except Exception:
            logger.exception("Carousel change listener failed")

    @staticmethod
    def _cancel(timer) -> None:
        if timer is not None:
            timer.cancel()


class CarouselRegistry:
    """Live carousels keyed by owner; the least recently used is closed past `capacity`."""

    def __init__(self, factory: Callable[[Sequence[Banner]], Carousel], capacity: int = 500):
        self._factory = factory
        self._capacity = capacity
        self._lock = threading.Lock()
        self._carousels: "OrderedDict[str, Carousel]" = OrderedDict()

    def __len__(self) -> int:
        with self._lock:
            return len(self._carousels)

    def get(self, owner: str) -> Optional[Carousel]:
        with self._lock:
            carousel = self._carousels.get(owner)
            if carousel is not None:
                self._carousels.move_to_end(owner)
            return carousel

    def sync(self, owner: str, banners: Sequence[Banner]) -> Carousel:
        """Return the owner's carousel showing `banners`, starting one if needed."""
        banners = list(banners)
        evicted = []
        with self._lock:
            carousel = self._carousels.get(owner)
            if carousel is None:
                carousel = self._factory(banners)
                carousel.start()
                self._carousels[owner] = carousel
                while len(self._carousels) > self._capacity:
                    evicted.append(self._carousels.popitem(last=False)[1])
            else:
                self._carousels.move_to_end(owner)

        # untouched when unchanged so the slide timer keeps its phase
        if carousel.banners != banners:
            carousel.set_banners(banners)
        for old in evicted:
            old.close()
        return carousel

    def discard(self, owner: str) -> None:
        with self._lock:
            carousel = self._carousels.pop(owner, None)
        if carousel is not None:
            carousel.close()

    def close(self) -> None:
        with self._lock:
            carousels = list(self._carousels.values())
            self._carousels.clear()
        for carousel in carousels:
            carousel.close()
