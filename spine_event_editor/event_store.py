import logging
import math
import os
from dataclasses import fields, is_dataclass
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional

from .configuration import DEFAULT_EVENT_NAME, DEFAULT_FIND_TOLERANCE
from .event_data import EventPayload, EventType, FrameEvent
from .file_common import (
    EventFileFormatError, load_json_project, parse_enum, parse_event_file_data, save_json_project,
    serialize_frame_event
)

logger = logging.getLogger(__name__)


def _parse_value(value_type, text: str):
    """Parse property panel text into the declared type of a field"""
    if isinstance(value_type, type) and issubclass(value_type, Enum):
        return parse_enum(value_type, text)
    if value_type is int:
        return int(text.strip())
    if value_type is float:
        value = float(text.strip())
        if not math.isfinite(value):
            raise ValueError(f"{text!r} is not a finite number")
        return value
    if value_type is str:
        return text
    raise ValueError(f"Field of type {value_type} cannot be edited as text")


class EventCollection:
    """Frame events of the active clip, kept sorted by time.

    Every insert and every time edit re-sorts the whole list with a stable
    sort, so events sharing a time keep the order they were added in.
    """

    def __init__(self, events: Optional[Iterable[FrameEvent]] = None):
        self.events: List[FrameEvent] = list(events or [])
        self.selected: Optional[FrameEvent] = None
        self._resort()

    def __len__(self):
        return len(self.events)

    def __iter__(self):
        return iter(list(self.events))

    def __getitem__(self, index):
        return self.events[index]

    def _resort(self):
        self.events.sort(key=lambda evt: evt.time)

    def replace(self, events: Iterable[FrameEvent]):
        """Swap in another clip's events and drop the selection"""
        self.events = list(events)
        self.selected = None
        self._resort()

    def clear(self):
        self.replace([])

    def index_of(self, event: Optional[FrameEvent]) -> int:
        for i, evt in enumerate(self.events):
            if evt is event:
                return i
        return -1

    def add(self, name: str = DEFAULT_EVENT_NAME, time: float = 0.0,
            event_type: EventType = EventType.NORMAL, payload: Optional[EventPayload] = None) -> FrameEvent:
        return self.add_event(FrameEvent(name=name, time=time, event_type=event_type, payload=payload))

    def add_event(self, event: FrameEvent) -> FrameEvent:
        self.events.append(event)
        self._resort()
        logger.debug("Added event '%s' at %.3fs", event.name, event.time)
        return event

    def remove(self, index: int) -> Optional[FrameEvent]:
        """Remove by index; out of range indices are ignored"""
        if not 0 <= index < len(self.events):
            return None

        removed = self.events.pop(index)
        if self.selected is removed:
            self.selected = None
        logger.debug("Removed event '%s' at %.3fs", removed.name, removed.time)
        return removed

    def remove_event(self, event: FrameEvent) -> bool:
        return self.remove(self.index_of(event)) is not None

    def find_near(self, time: float, tolerance: float = DEFAULT_FIND_TOLERANCE) -> Optional[FrameEvent]:
        for evt in self.events:
            if abs(evt.time - time) <= tolerance:
                return evt
        return None

    def select(self, event: Optional[FrameEvent]):
        if event is not None and self.index_of(event) < 0:
            return
        self.selected = event

    # Routed edits keep the collection sorted
    def set_time(self, event: FrameEvent, time: float):
        if self.index_of(event) < 0:
            return
        event.time = max(0.0, time)
        self._resort()

    def set_name(self, event: FrameEvent, name: str):
        if self.index_of(event) >= 0:
            event.name = name

    def set_type(self, event: FrameEvent, event_type: EventType):
        if self.index_of(event) >= 0:
            event.change_type(event_type)

    def edit_field(self, event: FrameEvent, field_path: str, text: str) -> bool:
        """Apply a text edit such as ``attack.shape.width = "42"``.

        Text that does not parse for the field, or a path that does not match
        the event's payload, leaves the event untouched and returns False.
        """
        if self.index_of(event) < 0:
            return False

        try:
            if field_path == "name":
                self.set_name(event, text)
            elif field_path == "time":
                self.set_time(event, _parse_value(float, text))
            elif field_path == "type":
                self.set_type(event, parse_enum(EventType, text))
            else:
                self._edit_payload_field(event, field_path, text)
        except (AttributeError, ValueError) as e:
            logger.debug("Ignored edit of '%s' with %r: %s", field_path, text, e)
            return False
        return True

    @staticmethod
    def _edit_payload_field(event: FrameEvent, field_path: str, text: str):
        parts = field_path.split(".")
        if len(parts) < 2 or parts[0] != event.payload_key:
            raise AttributeError(f"'{field_path}' is not a field of a {event.event_type.name} event")

        target: Any = event.payload
        for attr in parts[1:-1]:
            target = getattr(target, attr)
            if not is_dataclass(target):
                raise AttributeError(f"'{attr}' has no editable fields")

        field_types = {f.name: f.type for f in fields(target)}
        attr = parts[-1]
        if attr not in field_types:
            raise AttributeError(f"Unknown field '{attr}'")
        setattr(target, attr, _parse_value(field_types[attr], text))


class AnimationEventFile:
    """Clip name to event list mapping, the unit of persistence"""

    def __init__(self, animations: Optional[Dict[str, List[FrameEvent]]] = None, skeleton_file: str = "",
                 extra: Optional[Dict[str, Any]] = None):
        self.animations: Dict[str, List[FrameEvent]] = dict(animations or {})
        self.skeleton_file = skeleton_file
        self.extra: Dict[str, Any] = dict(extra or {})

    def clip_names(self) -> List[str]:
        return list(self.animations.keys())

    def get_events(self, clip_name: str) -> List[FrameEvent]:
        """Events of a clip, an empty list for unknown clips"""
        return list(self.animations.get(clip_name, []))

    def set_events(self, clip_name: str, events: Iterable[FrameEvent]):
        self.animations[clip_name] = list(events)

    def to_dict(self) -> Dict[str, Any]:
        data = dict(self.extra)
        data["skeleton_file"] = self.skeleton_file
        data["animations"] = {
            clip: [serialize_frame_event(evt) for evt in events]
            for clip, events in self.animations.items()
        }
        return data

    @classmethod
    def from_dict(cls, data) -> "AnimationEventFile":
        animations, skeleton_file, extra, _ = parse_event_file_data(data)
        return cls(animations, skeleton_file, extra)


def load_event_file(path: str) -> Optional[AnimationEventFile]:
    """Read an event file, upgrading legacy layouts; None when absent or unparsable"""
    if not os.path.exists(path):
        logger.info("Event file not found: %s", path)
        return None

    data = load_json_project(path)
    if data is None:
        return None

    try:
        animations, skeleton_file, extra, upgraded = parse_event_file_data(data)
    except EventFileFormatError as e:
        logger.error("Error parsing event file %s: %s", path, e)
        return None

    if upgraded:
        logger.info("Upgraded legacy event file %s (%d clip(s))", path, len(animations))
    return AnimationEventFile(animations, skeleton_file, extra)


def save_clip_events(path: str, clip_name: str, events: Iterable[FrameEvent], skeleton_file: str = "") -> bool:
    """Merge one clip's events into the file at ``path``.

    Other clips already stored in the file are kept. When the file exists
    but cannot be parsed nothing is written and False is returned.
    """
    if os.path.exists(path):
        event_file = load_event_file(path)
        if event_file is None:
            logger.error("Could not load existing event file %s. Save cancelled to prevent data loss.", path)
            return False
    else:
        event_file = AnimationEventFile()

    events = list(events)
    event_file.set_events(clip_name, events)
    if skeleton_file:
        event_file.skeleton_file = skeleton_file

    return save_json_project(path, event_file.to_dict(),
                             f"Saved {len(events)} event(s) of '{clip_name}' to {path}")
