from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Union

from .configuration import ASSUMED_FRAME_RATE, DEFAULT_EVENT_NAME, DEFAULT_SHAPE_SIZE


class EventType(Enum):
    NORMAL = 0
    ATTACK = 1
    EFFECT = 2
    SOUND = 3


class ShapeType(Enum):
    RECTANGLE = 0
    CIRCLE = 1


@dataclass
class AttackShape:
    """Hitbox in animation-local space (origin = skeleton anchor at scale 1)"""
    type: ShapeType = ShapeType.RECTANGLE
    x: float = 0.0
    y: float = 0.0
    width: float = DEFAULT_SHAPE_SIZE  # Radius for circles
    height: float = DEFAULT_SHAPE_SIZE  # Rectangles only
    rotation: float = 0.0  # Degrees, rectangles only

    @property
    def is_circle(self) -> bool:
        return self.type == ShapeType.CIRCLE

    def half_extents(self):
        """Half width/height of the bounding box"""
        if self.is_circle:
            return self.width, self.width
        return self.width / 2, self.height / 2


@dataclass
class NormalData:
    int_value: int = 0
    float_value: float = 0.0
    string_value: str = ""


@dataclass
class AttackData:
    attack_type: str = ""
    damage: int = 0
    shape: AttackShape = field(default_factory=AttackShape)


@dataclass
class EffectData:
    name: str = ""
    x: float = 0.0
    y: float = 0.0
    scale: float = 1.0


@dataclass
class SoundData:
    name: str = ""
    volume: float = 1.0
    pitch: float = 1.0


EventPayload = Union[NormalData, AttackData, EffectData, SoundData]

PAYLOAD_CLASSES = {
    EventType.NORMAL: NormalData,
    EventType.ATTACK: AttackData,
    EventType.EFFECT: EffectData,
    EventType.SOUND: SoundData,
}

# Key of each payload in the event file and in property field paths
PAYLOAD_KEYS = {
    EventType.NORMAL: "normal",
    EventType.ATTACK: "attack",
    EventType.EFFECT: "effect",
    EventType.SOUND: "sound",
}


@dataclass(eq=False)
class FrameEvent:
    """A named, timed trigger attached to an animation clip.

    The payload always matches ``event_type``. Events compare by identity so
    that two events with identical fields stay distinct in a collection.
    """
    name: str = DEFAULT_EVENT_NAME
    time: float = 0.0
    event_type: EventType = EventType.NORMAL
    payload: Optional[EventPayload] = None

    def __post_init__(self):
        if self.time < 0:
            self.time = 0.0

        expected = PAYLOAD_CLASSES[self.event_type]
        if self.payload is None:
            self.payload = expected()
        elif not isinstance(self.payload, expected):
            raise ValueError(
                f"{type(self.payload).__name__} payload does not match event type {self.event_type.name}")

    @property
    def frame(self) -> int:
        """Frame number at the assumed frame rate, for display only"""
        return int(self.time * ASSUMED_FRAME_RATE)

    @property
    def payload_key(self) -> str:
        return PAYLOAD_KEYS[self.event_type]

    def change_type(self, event_type: EventType):
        """Switch the tag, replacing the payload with a default of the new variant"""
        if event_type == self.event_type:
            return
        self.event_type = event_type
        self.payload = PAYLOAD_CLASSES[event_type]()

    @property
    def normal(self) -> Optional[NormalData]:
        return self.payload if self.event_type == EventType.NORMAL else None

    @property
    def attack(self) -> Optional[AttackData]:
        return self.payload if self.event_type == EventType.ATTACK else None

    @property
    def effect(self) -> Optional[EffectData]:
        return self.payload if self.event_type == EventType.EFFECT else None

    @property
    def sound(self) -> Optional[SoundData]:
        return self.payload if self.event_type == EventType.SOUND else None
