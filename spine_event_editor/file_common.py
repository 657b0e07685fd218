import json
import logging
import math
import os
import tempfile
from dataclasses import asdict
from enum import Enum
from typing import Any, Dict, List, Tuple

from .configuration import DEFAULT_EVENT_NAME, DEFAULT_SHAPE_SIZE
from .event_data import (
    AttackData, AttackShape, EffectData, EventType, FrameEvent, NormalData, ShapeType, SoundData
)

logger = logging.getLogger(__name__)

# Top-level keys owned by the canonical event file format
CANONICAL_KEYS = ("animations", "skeleton_file")


class EventFileFormatError(ValueError):
    """Raised when event file content has a structure that cannot be understood"""


class EnumJSONEncoder(json.JSONEncoder):
    """Custom JSON encoder that handles enum values"""

    def default(self, obj):
        if isinstance(obj, Enum):
            return obj.value
        return super().default(obj)


def save_json_project(filename, data, success_message=None):
    """Generic JSON saver with enum support.

    The document is written to a temporary file next to the target and moved
    over it, so a failed write never leaves a truncated file behind.
    """
    directory = os.path.dirname(os.path.abspath(filename))
    try:
        fd, temp_path = tempfile.mkstemp(prefix=".", suffix=".tmp", dir=directory)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, cls=EnumJSONEncoder, ensure_ascii=False)
            os.replace(temp_path, filename)
        except Exception:
            if os.path.exists(temp_path):
                os.unlink(temp_path)
            raise
    except (OSError, TypeError, ValueError) as e:
        logger.error("Error saving %s: %s", filename, e)
        return False

    logger.info(success_message or f"{filename} saved successfully")
    return True


def load_json_project(filename, success_message=None):
    """Generic JSON loader, returns None when the file cannot be read or parsed"""
    try:
        with open(filename, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        logger.error("Error loading %s: %s", filename, e)
        return None

    logger.info(success_message or f"{filename} loaded successfully")
    return data


# ============================================================================
# FRAME EVENT CODEC
# ============================================================================

def _field(record: Dict[str, Any], *keys, default=None):
    """First non-null value among several spellings of a key"""
    for key in keys:
        if record.get(key) is not None:
            return record[key]
    return default


def parse_enum(enum_cls, value, default=None):
    """Accept enum members, their integer values or their names (any case)"""
    if value is None:
        return default
    if isinstance(value, enum_cls):
        return value
    if isinstance(value, int) and not isinstance(value, bool):
        try:
            return enum_cls(value)
        except ValueError:
            pass
    elif isinstance(value, str):
        key = value.strip().upper()
        if key in enum_cls.__members__:
            return enum_cls[key]
        if key.isdigit():
            return parse_enum(enum_cls, int(key), default)
    raise EventFileFormatError(f"Unknown {enum_cls.__name__} value: {value!r}")


def serialize_attack_shape(shape: AttackShape) -> Dict[str, Any]:
    return {
        "type": shape.type.value,
        "x": shape.x,
        "y": shape.y,
        "width": shape.width,
        "height": shape.height,
        "rotation": shape.rotation,
    }


def serialize_frame_event(event: FrameEvent) -> Dict[str, Any]:
    """Convert an event to its file record; only the sub-object of its type is written"""
    record = {
        "name": event.name,
        "time": event.time,
        "frame": event.frame,
        "type": event.event_type.value,
    }

    payload = event.payload
    if event.event_type == EventType.ATTACK:
        record["attack"] = {
            "type": payload.attack_type,
            "damage": payload.damage,
            "shape": serialize_attack_shape(payload.shape),
        }
    elif event.event_type == EventType.EFFECT:
        record["effect"] = asdict(payload)
    elif event.event_type == EventType.SOUND:
        record["sound"] = asdict(payload)
    else:
        # Extra sub-object beside attack|effect|sound so Normal values survive a save
        record["normal"] = asdict(payload)

    return record


def _deserialize_attack_shape(data: Dict[str, Any]) -> AttackShape:
    return AttackShape(
        type=parse_enum(ShapeType, _field(data, "type", "Type"), ShapeType.RECTANGLE),
        x=float(_field(data, "x", "X", default=0.0)),
        y=float(_field(data, "y", "Y", default=0.0)),
        width=float(_field(data, "width", "Width", default=DEFAULT_SHAPE_SIZE)),
        height=float(_field(data, "height", "Height", default=DEFAULT_SHAPE_SIZE)),
        rotation=float(_field(data, "rotation", "Rotation", default=0.0)),
    )


def _deserialize_payload(event_type: EventType, record: Dict[str, Any]):
    if event_type == EventType.ATTACK:
        data = _field(record, "attack", "Attack", default={})
        return AttackData(
            attack_type=str(_field(data, "type", "Type", "attack_type", default="")),
            damage=int(_field(data, "damage", "Damage", default=0)),
            shape=_deserialize_attack_shape(_field(data, "shape", "Shape", default={})),
        )

    if event_type == EventType.EFFECT:
        data = _field(record, "effect", "Effect", default={})
        return EffectData(
            name=str(_field(data, "name", "Name", default="")),
            x=float(_field(data, "x", "X", default=0.0)),
            y=float(_field(data, "y", "Y", default=0.0)),
            scale=float(_field(data, "scale", "Scale", default=1.0)),
        )

    if event_type == EventType.SOUND:
        data = _field(record, "sound", "Sound", default={})
        return SoundData(
            name=str(_field(data, "name", "Name", default="")),
            volume=float(_field(data, "volume", "Volume", default=1.0)),
            pitch=float(_field(data, "pitch", "Pitch", default=1.0)),
        )

    # Generic values live in a "normal" sub-object, or flat on legacy records
    data = _field(record, "normal", "Normal", default=record)
    return NormalData(
        int_value=int(_field(data, "int_value", "IntValue", "intValue", default=0)),
        float_value=float(_field(data, "float_value", "FloatValue", "floatValue", default=0.0)),
        string_value=str(_field(data, "string_value", "StringValue", "stringValue", default="")),
    )


def deserialize_frame_event(record) -> FrameEvent:
    """Build an event from a canonical, PascalCase or legacy flat record"""
    if not isinstance(record, dict):
        raise EventFileFormatError(f"Frame event record must be an object, got {type(record).__name__}")

    try:
        event_type = parse_enum(EventType, _field(record, "type", "EventType", "event_type"))
        if event_type is None:
            # Untagged records: infer from whichever payload is present
            event_type = EventType.NORMAL
            for candidate in (EventType.ATTACK, EventType.EFFECT, EventType.SOUND):
                key = candidate.name.lower()
                if _field(record, key, key.capitalize()) is not None:
                    event_type = candidate
                    break

        time = float(_field(record, "time", "Time", default=0.0))
        if not math.isfinite(time):
            raise EventFileFormatError(f"Frame event time must be finite, got {time}")

        return FrameEvent(
            name=str(_field(record, "name", "Name", default=DEFAULT_EVENT_NAME)),
            time=time,
            event_type=event_type,
            payload=_deserialize_payload(event_type, record),
        )
    except EventFileFormatError:
        raise
    except (AttributeError, TypeError, ValueError) as e:
        raise EventFileFormatError(f"Invalid frame event record: {e}") from e


def _deserialize_event_list(clip_name, records) -> List[FrameEvent]:
    if not isinstance(records, list):
        raise EventFileFormatError(f"Events of clip '{clip_name}' must be a list")
    return [deserialize_frame_event(record) for record in records]


def parse_event_file_data(data) -> Tuple[Dict[str, List[FrameEvent]], str, Dict[str, Any], bool]:
    """Parse a decoded event file.

    Returns ``(animations, skeleton_file, extra_keys, upgraded)`` where
    ``upgraded`` tells whether a legacy layout was converted to the clip
    mapping. Raises EventFileFormatError for anything not understood.
    """
    if not isinstance(data, dict):
        raise EventFileFormatError("Event file root must be an object")

    skeleton_file = str(_field(data, "skeleton_file", "SpineFileName", "spine_file_name", default=""))

    if "animations" in data:
        mapping = data["animations"] or {}
        if not isinstance(mapping, dict):
            raise EventFileFormatError("'animations' must map clip names to event lists")
        animations = {str(clip): _deserialize_event_list(clip, records) for clip, records in mapping.items()}
        extra = {key: value for key, value in data.items() if key not in CANONICAL_KEYS}
        return animations, skeleton_file, extra, False

    pascal_mapping = data.get("Animations")
    if isinstance(pascal_mapping, dict) and pascal_mapping:
        animations = {str(clip): _deserialize_event_list(clip, records)
                      for clip, records in pascal_mapping.items()}
        return animations, skeleton_file, {}, True

    if "events" in data or "Events" in data:
        records = _field(data, "events", "Events", default=[])
        clip_name = str(_field(data, "animation_name", "AnimationName", default=""))
        events = _deserialize_event_list(clip_name, records)
        animations = {clip_name: events} if (events or clip_name) else {}
        return animations, skeleton_file, {}, True

    if not data or set(data) <= {"Animations", "AnimationName", "SpineFileName", "skeleton_file"}:
        return {}, skeleton_file, {}, False

    raise EventFileFormatError(f"Unrecognised event file structure (keys: {sorted(data)})")
