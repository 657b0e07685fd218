import logging
import os
from typing import List, Optional

from .configuration import (
    DEFAULT_EVENT_NAME, EVENT_FILE_SUFFIX, KEYBOARD_SCROLL_STEP, MAX_PLAYBACK_SPEED, MIN_PLAYBACK_SPEED
)
from .event_common import InputSnapshot
from .event_data import EventType, FrameEvent
from .event_store import EventCollection, load_event_file, save_clip_events
from .playback import PlaybackController
from .shape_drag import ShapeDragController
from .skeleton_player import PlaybackEngine
from .timeline_mapper import TimeSpaceMapper

logger = logging.getLogger(__name__)


def default_event_file_path(skeleton_file: str) -> Optional[str]:
    """``<dir>/<stem>_events.json`` next to the skeleton file"""
    if not skeleton_file:
        return None
    directory, filename = os.path.split(skeleton_file)
    stem = os.path.splitext(filename)[0]
    return os.path.join(directory, stem + EVENT_FILE_SUFFIX)


class AnimationSession:
    """Owns the playback engine, the events of the active clip and the editing controllers.

    The view layer only talks to this object. ``update`` runs one frame in a
    fixed order: timeline zoom/scroll, playback and triggers, shape dragging.
    """

    def __init__(self, engine: PlaybackEngine, event_file_path: Optional[str] = None,
                 skeleton_file: Optional[str] = None):
        self.engine = engine
        self.skeleton_file = skeleton_file if skeleton_file is not None else getattr(engine, "skeleton_file", "")
        self._event_file_path = event_file_path

        self.events = EventCollection()
        self.mapper = TimeSpaceMapper()
        self.playback = PlaybackController(engine, self.events)
        self.shape_drag = ShapeDragController()
        self.current_clip: Optional[str] = None

    @property
    def event_file_path(self) -> Optional[str]:
        return self._event_file_path or default_event_file_path(self.skeleton_file)

    @event_file_path.setter
    def event_file_path(self, path: Optional[str]):
        self._event_file_path = path

    @property
    def duration(self):
        return self.playback.duration

    @property
    def current_time(self):
        return self.playback.current_time

    @property
    def selected(self) -> Optional[FrameEvent]:
        return self.events.selected

    # Clips and persistence

    def switch_clip(self, name: str, loop=True, save_events=True, load_events=True) -> bool:
        """Make ``name`` the active clip, saving the outgoing clip's events first"""
        if not name or name not in self.engine.list_animation_names():
            logger.warning("Cannot switch to unknown animation '%s'", name)
            return False
        if name == self.current_clip:
            return True

        if save_events and self.current_clip is not None:
            self.save_events()

        if not self.engine.switch_animation(name, loop):
            return False

        self.current_clip = name
        self.playback.duration = self.engine.current_animation_duration()
        self.mapper.set_duration(self.playback.duration)
        self.playback.set_current_time(0.0)
        self.events.clear()
        self.shape_drag.shape = None

        if load_events:
            self.load_events()
        logger.info("Switched to animation '%s' (%.2fs, %d events)", name, self.duration, len(self.events))
        return True

    def load_events(self) -> bool:
        """Replace the active clip's events with those stored in the event file"""
        path = self.event_file_path
        if self.current_clip is None or path is None:
            return False

        event_file = load_event_file(path)
        if event_file is None:
            return False

        self.events.replace(event_file.get_events(self.current_clip))
        self._sync_shape()
        return True

    def save_events(self) -> bool:
        path = self.event_file_path
        if self.current_clip is None or path is None:
            logger.warning("Nothing to save: no animation or event file selected")
            return False

        skeleton_name = os.path.basename(self.skeleton_file) if self.skeleton_file else ""
        return save_clip_events(path, self.current_clip, self.events.events, skeleton_name)

    # Event editing

    def add_event_at_current_time(self, name=DEFAULT_EVENT_NAME, event_type=EventType.NORMAL) -> FrameEvent:
        return self.add_event_at(self.current_time, name, event_type)

    def add_event_at(self, time, name=DEFAULT_EVENT_NAME, event_type=EventType.NORMAL) -> FrameEvent:
        time = min(max(0.0, time), max(0.0, self.duration))
        event = self.events.add(name, time, event_type)
        self.select_event(event)
        return event

    def delete_selected(self) -> bool:
        selected = self.events.selected
        if selected is None:
            return False
        removed = self.events.remove_event(selected)
        self._sync_shape()
        return removed

    def select_event(self, event: Optional[FrameEvent]):
        self.events.select(event)
        self._sync_shape()

    def edit_selected(self, field_path: str, text: str) -> bool:
        selected = self.events.selected
        if selected is None:
            return False
        changed = self.events.edit_field(selected, field_path, text)
        self._sync_shape()
        return changed

    def set_event_type(self, event_type: EventType):
        selected = self.events.selected
        if selected is not None:
            self.events.set_type(selected, event_type)
            self._sync_shape()

    def move_event(self, event: FrameEvent, time):
        """Timeline marker drag; keeps the event inside the clip"""
        self.events.set_time(event, min(max(0.0, time), max(0.0, self.duration)))

    def _sync_shape(self):
        selected = self.events.selected
        self.shape_drag.shape = selected.attack.shape if selected and selected.attack else None

    # Transport

    def scrub_to(self, time):
        self.playback.set_current_time(min(max(0.0, time), max(0.0, self.duration)))

    def set_playback_speed(self, speed):
        self.playback.speed = min(MAX_PLAYBACK_SPEED, max(MIN_PLAYBACK_SPEED, speed))

    def change_playback_speed(self, delta):
        self.set_playback_speed(round(self.playback.speed + delta, 3))

    def update(self, dt, snapshot: InputSnapshot) -> List[FrameEvent]:
        """Run one frame and return the events fired during it"""
        if snapshot.over_timeline and snapshot.wheel:
            self.mapper.handle_wheel(snapshot.mouse_pos[0], snapshot.wheel)
        if snapshot.scroll_left:
            self.mapper.scroll_by(-KEYBOARD_SCROLL_STEP)
        if snapshot.scroll_right:
            self.mapper.scroll_by(KEYBOARD_SCROLL_STEP)

        self.playback.advance(dt)
        fired = self.playback.drain_triggered()

        self._sync_shape()
        if self.shape_drag.shape is not None:
            self.shape_drag.update(self.engine.position, self.engine.scale, snapshot.mouse_pos,
                                   snapshot.left, allow_start=snapshot.over_viewport)
        return fired
