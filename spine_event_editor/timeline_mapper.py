import logging
import math
from typing import List

from .configuration import FALLBACK_DURATION, MAX_ZOOM, MIN_ZOOM, TICKS_PER_VIEW, WHEEL_ZOOM_STEP

logger = logging.getLogger(__name__)


class TimeSpaceMapper:
    """Maps animation time to timeline pixels under a zoom level and scroll offset.

    ``x_from_time`` and ``time_from_x`` are linear and mutually inverse.
    Zooming keeps the time under the cursor at the same pixel, and the
    scroll offset always stays within ``[0, max_scroll]``.
    """

    def __init__(self, duration=FALLBACK_DURATION, viewport_x=0.0, viewport_width=1.0,
                 zoom=1.0, scroll_offset=0.0):
        self.viewport_x = float(viewport_x)
        self.viewport_width = max(1.0, float(viewport_width))
        self.duration = FALLBACK_DURATION
        self.zoom = max(MIN_ZOOM, min(MAX_ZOOM, zoom))
        self.scroll_offset = float(scroll_offset)
        self.set_duration(duration)

    def set_bounds(self, viewport_x, viewport_width):
        self.viewport_x = float(viewport_x)
        self.viewport_width = max(1.0, float(viewport_width))
        self._clamp_scroll()

    def set_duration(self, duration):
        if duration <= 0:
            logger.debug("Non-positive duration %s, using %s", duration, FALLBACK_DURATION)
            duration = FALLBACK_DURATION
        self.duration = float(duration)
        self._clamp_scroll()

    @property
    def content_width(self):
        return self.viewport_width * self.zoom

    @property
    def max_scroll(self):
        return max(0.0, self.content_width - self.viewport_width)

    def _clamp_scroll(self):
        self.scroll_offset = max(0.0, min(self.max_scroll, self.scroll_offset))

    def x_from_time(self, time):
        return self.viewport_x + (time / self.duration) * self.content_width - self.scroll_offset

    def time_from_x(self, x):
        return ((x - self.viewport_x + self.scroll_offset) / self.content_width) * self.duration

    def contains_x(self, x):
        return self.viewport_x <= x <= self.viewport_x + self.viewport_width

    def zoom_at(self, cursor_x, delta):
        """Change zoom by ``delta`` keeping the time under ``cursor_x`` in place"""
        anchor_time = self.time_from_x(cursor_x)
        self.zoom = max(MIN_ZOOM, min(MAX_ZOOM, self.zoom + delta))

        # x_from_time subtracts the offset, so shift it by the drift of the anchor
        drifted_x = self.x_from_time(anchor_time)
        self.scroll_offset += drifted_x - cursor_x
        self._clamp_scroll()

    def handle_wheel(self, cursor_x, wheel_steps):
        """Mouse wheel zoom, one step per notch"""
        if wheel_steps:
            self.zoom_at(cursor_x, wheel_steps * WHEEL_ZOOM_STEP)

    def scroll_by(self, dx):
        self.scroll_offset += dx
        self._clamp_scroll()

    def tick_step(self):
        """Largest 1/2/5 x 10^k step giving at least TICKS_PER_VIEW * zoom ticks over the clip"""
        raw_step = self.duration / (TICKS_PER_VIEW * self.zoom)
        base = 10 ** math.floor(math.log10(raw_step * (1 + 1e-9)))
        for multiplier in (5, 2, 1):
            step = multiplier * base
            if step <= raw_step * (1 + 1e-9):
                return step
        return base

    def tick_times(self) -> List[float]:
        """Tick times within the clip whose x falls inside the viewport"""
        step = self.tick_step()
        count = int(math.floor(self.duration / step + 1e-9))
        ticks = []
        for i in range(count + 1):
            time = i * step
            if self.contains_x(self.x_from_time(time)):
                ticks.append(time)
        return ticks
