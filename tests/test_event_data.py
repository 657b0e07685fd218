"""Tests for the frame event data model."""

import pytest

from spine_event_editor.event_data import (
    AttackData, AttackShape, EventType, FrameEvent, NormalData, ShapeType, SoundData
)


class TestFrameEvent:
    """FrameEvent construction and type changes."""

    def test_frame_is_derived_from_time(self) -> None:
        event = FrameEvent("hit", 0.5)
        assert event.frame == 15

    def test_negative_time_is_clamped(self) -> None:
        event = FrameEvent("early", -1.0)
        assert event.time == 0.0

    def test_default_payload_matches_type(self) -> None:
        assert isinstance(FrameEvent().payload, NormalData)
        attack = FrameEvent("hit", 0.1, EventType.ATTACK)
        assert isinstance(attack.payload, AttackData)
        assert attack.attack is attack.payload
        assert attack.sound is None

    def test_mismatched_payload_raises(self) -> None:
        with pytest.raises(ValueError):
            FrameEvent("bad", 0.0, EventType.ATTACK, SoundData())

    def test_change_type_replaces_payload(self) -> None:
        event = FrameEvent("hit", 0.1, EventType.ATTACK)
        event.attack.damage = 12
        event.change_type(EventType.SOUND)
        assert event.event_type == EventType.SOUND
        assert isinstance(event.payload, SoundData)
        assert event.payload_key == "sound"

    def test_events_compare_by_identity(self) -> None:
        first = FrameEvent("same", 1.0)
        second = FrameEvent("same", 1.0)
        assert first != second
        assert first == first


class TestAttackShape:
    """AttackShape defaults and extents."""

    def test_new_shape_is_fifty_square(self) -> None:
        shape = AttackShape()
        assert shape.type == ShapeType.RECTANGLE
        assert (shape.width, shape.height) == (50.0, 50.0)

    def test_half_extents(self) -> None:
        assert AttackShape(width=40, height=20).half_extents() == (20, 10)
        assert AttackShape(type=ShapeType.CIRCLE, width=15).half_extents() == (15, 15)
