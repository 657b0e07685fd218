import logging
from enum import Enum
from typing import Callable, List

from .configuration import ASSUMED_FRAME_RATE
from .event_data import FrameEvent
from .event_store import EventCollection

logger = logging.getLogger(__name__)

EventListener = Callable[[FrameEvent], None]


class PlaybackState(Enum):
    IDLE = "idle"
    PLAYING = "playing"


def crossed_event(previous: float, current: float, event_time: float) -> bool:
    """Whether a tick going from ``previous`` to ``current`` passes ``event_time``.

    A forward tick fires events in ``(previous, current]``. When the clock
    went backwards (loop wrap, or a scrub while playing) every event after
    ``previous`` or up to ``current`` fires.
    """
    if previous < event_time <= current:
        return True
    return previous > current and (previous < event_time or current >= event_time)


class PlaybackController:
    """Advances the clip clock, loops it and fires the events it crosses"""

    def __init__(self, engine, events: EventCollection, duration=0.0, speed=1.0):
        self.engine = engine
        self.events = events
        self.duration = duration
        self.speed = speed
        self.state = PlaybackState.IDLE
        self._current_time = 0.0
        self._listeners: List[EventListener] = []
        self._triggered: List[FrameEvent] = []

    @property
    def current_time(self):
        return self._current_time

    def set_current_time(self, time):
        """Jump to ``time`` (not clamped to the duration) and re-pose immediately"""
        self._current_time = max(0.0, time)
        self.engine.apply_pose(self._current_time)

    @property
    def is_playing(self):
        return self.state == PlaybackState.PLAYING

    def play(self):
        self.state = PlaybackState.PLAYING

    def pause(self):
        self.state = PlaybackState.IDLE

    def toggle(self):
        if self.is_playing:
            self.pause()
        else:
            self.play()
        logger.debug("Playback %s at %.3fs", self.state.value, self._current_time)

    def stop(self):
        self.pause()
        self.set_current_time(0.0)

    def step_frame(self, direction=1):
        """Move one frame at the assumed frame rate, staying inside the clip"""
        time = self._current_time + direction / ASSUMED_FRAME_RATE
        self.set_current_time(min(max(0.0, time), max(0.0, self.duration)))

    def go_to_start(self):
        self.set_current_time(0.0)

    def go_to_end(self):
        self.set_current_time(max(0.0, self.duration))

    def add_listener(self, listener: EventListener):
        if listener not in self._listeners:
            self._listeners.append(listener)

    def remove_listener(self, listener: EventListener):
        if listener in self._listeners:
            self._listeners.remove(listener)

    def drain_triggered(self) -> List[FrameEvent]:
        """Events fired since the last drain, oldest first"""
        triggered, self._triggered = self._triggered, []
        return triggered

    def advance(self, dt) -> List[FrameEvent]:
        """One tick: move the clock, fire crossed events and re-pose the skeleton"""
        previous = self._current_time
        if self.is_playing:
            self._current_time += dt * self.speed
            if self.duration > 0 and self._current_time > self.duration:
                self._current_time = 0.0

        current = self._current_time
        fired = [evt for evt in self.events if crossed_event(previous, current, evt.time)]
        for evt in fired:
            logger.debug("Event '%s' triggered at %.3fs", evt.name, evt.time)
            self._triggered.append(evt)
            for listener in list(self._listeners):
                listener(evt)

        self.engine.apply_pose(current)
        return fired
