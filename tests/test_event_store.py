"""Tests for the event collection and event file persistence."""

import json

import pytest

from spine_event_editor.event_data import EventType, FrameEvent, ShapeType
from spine_event_editor.event_store import (
    AnimationEventFile, EventCollection, load_event_file, save_clip_events
)
from spine_event_editor.file_common import (
    EventFileFormatError, deserialize_frame_event, parse_enum, serialize_frame_event
)


def times(collection):
    return [evt.time for evt in collection]


class TestEventCollection:
    """Sorted insertion, removal and lookup."""

    def test_add_keeps_events_sorted(self) -> None:
        events = EventCollection()
        events.add("c", 1.0)
        events.add("a", 0.2)
        events.add("b", 0.5)
        assert times(events) == [0.2, 0.5, 1.0]

    def test_ties_keep_insertion_order(self) -> None:
        events = EventCollection()
        events.add("a", 0.5)
        events.add("b", 0.5)
        events.add("c", 0.1)
        assert [evt.name for evt in events] == ["c", "a", "b"]

    def test_set_time_resorts(self) -> None:
        events = EventCollection()
        first = events.add("first", 0.1)
        events.add("second", 0.5)
        events.set_time(first, 0.9)
        assert [evt.name for evt in events] == ["second", "first"]

    def test_set_time_clamps_negative(self) -> None:
        events = EventCollection()
        event = events.add("a", 0.5)
        events.set_time(event, -3.0)
        assert event.time == 0.0

    def test_remove_out_of_range_is_ignored(self) -> None:
        events = EventCollection()
        events.add("a", 0.5)
        assert events.remove(5) is None
        assert events.remove(-1) is None
        assert len(events) == 1

    def test_remove_clears_selection(self) -> None:
        events = EventCollection()
        event = events.add("a", 0.5)
        events.select(event)
        assert events.remove(0) is event
        assert events.selected is None

    def test_remove_other_keeps_selection(self) -> None:
        events = EventCollection()
        keep = events.add("keep", 0.5)
        drop = events.add("drop", 0.7)
        events.select(keep)
        assert events.remove_event(drop)
        assert events.selected is keep

    def test_find_near(self) -> None:
        events = EventCollection()
        event = events.add("a", 0.5)
        assert events.find_near(0.55) is event
        assert events.find_near(0.7) is None
        assert events.find_near(0.7, tolerance=0.25) is event

    def test_select_ignores_foreign_event(self) -> None:
        events = EventCollection()
        events.select(FrameEvent("stranger", 0.0))
        assert events.selected is None


class TestEditField:
    """Text edits coming from the property panel."""

    @pytest.fixture
    def attack_event(self):
        events = EventCollection()
        event = events.add("hit", 0.5, EventType.ATTACK)
        return events, event

    def test_valid_numeric_edit(self, attack_event) -> None:
        events, event = attack_event
        assert events.edit_field(event, "attack.damage", "25")
        assert event.attack.damage == 25

    def test_invalid_number_keeps_prior_value(self, attack_event) -> None:
        events, event = attack_event
        event.attack.damage = 7
        assert not events.edit_field(event, "attack.damage", "abc")
        assert event.attack.damage == 7

    def test_nested_shape_fields(self, attack_event) -> None:
        events, event = attack_event
        assert events.edit_field(event, "attack.shape.width", "42.5")
        assert events.edit_field(event, "attack.shape.type", "circle")
        assert event.attack.shape.width == 42.5
        assert event.attack.shape.type == ShapeType.CIRCLE

    def test_path_of_other_payload_is_rejected(self, attack_event) -> None:
        events, event = attack_event
        assert not events.edit_field(event, "sound.pitch", "2")
        assert not events.edit_field(event, "attack.missing", "2")

    def test_time_edit_resorts(self, attack_event) -> None:
        events, event = attack_event
        other = events.add("later", 1.0)
        assert events.edit_field(event, "time", "2.5")
        assert list(events) == [other, event]

    def test_non_finite_time_is_rejected(self, attack_event) -> None:
        events, event = attack_event
        assert not events.edit_field(event, "time", "nan")
        assert event.time == 0.5

    def test_type_edit_swaps_payload(self, attack_event) -> None:
        events, event = attack_event
        assert events.edit_field(event, "type", "SOUND")
        assert event.sound is not None
        assert not events.edit_field(event, "type", "EXPLOSION")
        assert event.event_type == EventType.SOUND


class TestParseEnum:
    """Enum values as they appear in files and text fields."""

    def test_accepted_spellings(self) -> None:
        assert parse_enum(EventType, 1) == EventType.ATTACK
        assert parse_enum(EventType, "effect") == EventType.EFFECT
        assert parse_enum(EventType, "Sound") == EventType.SOUND
        assert parse_enum(EventType, "3") == EventType.SOUND
        assert parse_enum(EventType, None, EventType.NORMAL) == EventType.NORMAL

    def test_unknown_value_raises(self) -> None:
        with pytest.raises(EventFileFormatError):
            parse_enum(EventType, 9)
        with pytest.raises(EventFileFormatError):
            parse_enum(EventType, "explosion")


class TestEventFile:
    """Saving, merging and upgrading event files."""

    def test_saved_record_holds_only_its_payload(self) -> None:
        record = serialize_frame_event(FrameEvent("hit", 0.5, EventType.ATTACK))
        assert set(record) == {"name", "time", "frame", "type", "attack"}
        assert record["type"] == 1
        assert record["frame"] == 15
        assert record["attack"]["shape"]["width"] == 50.0

    def test_normal_values_are_saved(self, tmp_path) -> None:
        step = FrameEvent("step", 0.2)
        step.normal.int_value = 3
        step.normal.string_value = "left"
        record = serialize_frame_event(step)
        assert set(record) == {"name", "time", "frame", "type", "normal"}

        path = str(tmp_path / "hero_events.json")
        assert save_clip_events(path, "walk", [step])
        [loaded] = load_event_file(path).get_events("walk")
        assert loaded.normal.int_value == 3
        assert loaded.normal.string_value == "left"

    @pytest.mark.parametrize("time", ["NaN", "Infinity", "-Infinity"])
    def test_non_finite_time_in_file_is_rejected(self, tmp_path, time) -> None:
        with pytest.raises(EventFileFormatError):
            deserialize_frame_event(json.loads('{"name": "hit", "time": ' + time + "}"))

        path = tmp_path / "hero_events.json"
        path.write_text('{"animations": {"idle": [{"name": "hit", "time": ' + time + "}]}}")
        assert load_event_file(str(path)) is None

    def test_save_then_load(self, tmp_path) -> None:
        path = str(tmp_path / "hero_events.json")
        hit = FrameEvent("hit", 0.5, EventType.ATTACK)
        hit.attack.attack_type = "slash"
        hit.attack.damage = 10
        hit.attack.shape.rotation = 30.0

        assert save_clip_events(path, "attack", [hit], "hero.json")
        loaded = load_event_file(path)
        assert loaded.skeleton_file == "hero.json"
        [event] = loaded.get_events("attack")
        assert event.name == "hit"
        assert event.attack.attack_type == "slash"
        assert event.attack.damage == 10
        assert event.attack.shape.rotation == 30.0

    def test_save_merges_other_clips(self, tmp_path) -> None:
        path = str(tmp_path / "hero_events.json")
        assert save_clip_events(path, "idle", [FrameEvent("blink", 1.0)])
        assert save_clip_events(path, "attack", [FrameEvent("swing", 0.2)])

        loaded = load_event_file(path)
        assert sorted(loaded.clip_names()) == ["attack", "idle"]
        assert [evt.name for evt in loaded.get_events("idle")] == ["blink"]

    def test_save_replaces_only_that_clip(self, tmp_path) -> None:
        path = str(tmp_path / "hero_events.json")
        save_clip_events(path, "idle", [FrameEvent("blink", 1.0)])
        save_clip_events(path, "idle", [])
        assert load_event_file(path).get_events("idle") == []

    def test_unknown_top_level_keys_survive(self, tmp_path) -> None:
        path = tmp_path / "hero_events.json"
        path.write_text(json.dumps({"version": 3, "animations": {}}))
        assert save_clip_events(str(path), "idle", [FrameEvent("blink", 1.0)])
        data = json.loads(path.read_text())
        assert data["version"] == 3
        assert "idle" in data["animations"]

    def test_corrupt_file_is_left_untouched(self, tmp_path) -> None:
        path = tmp_path / "hero_events.json"
        original = b'{"animations": {"idle": [ broken'
        path.write_bytes(original)

        assert not save_clip_events(str(path), "idle", [FrameEvent("blink", 1.0)])
        assert path.read_bytes() == original

    def test_unrecognised_structure_is_left_untouched(self, tmp_path) -> None:
        path = tmp_path / "hero_events.json"
        original = b'{"something": "else"}'
        path.write_bytes(original)

        assert load_event_file(str(path)) is None
        assert not save_clip_events(str(path), "idle", [])
        assert path.read_bytes() == original

    def test_missing_file_loads_as_none(self, tmp_path) -> None:
        assert load_event_file(str(tmp_path / "nope.json")) is None

    def test_unknown_clip_has_no_events(self) -> None:
        assert AnimationEventFile().get_events("walk") == []


class TestLegacyFormats:
    """Older layouts are upgraded to the clip mapping on load."""

    def test_flat_event_list(self, tmp_path) -> None:
        path = tmp_path / "legacy.json"
        path.write_text(json.dumps({
            "AnimationName": "attack",
            "SpineFileName": "hero.json",
            "Events": [
                {"Name": "hit", "Time": 0.5, "EventType": "Attack",
                 "Attack": {"Type": "slash", "Damage": 5,
                            "Shape": {"Type": 0, "X": 1, "Y": 2, "Width": 30, "Height": 20, "Rotation": 0}}},
                {"Name": "step", "Time": 0.2, "IntValue": 3, "FloatValue": 1.5, "StringValue": "left"},
            ],
        }))

        loaded = load_event_file(str(path))
        assert loaded.clip_names() == ["attack"]
        assert loaded.skeleton_file == "hero.json"

        events = {evt.name: evt for evt in loaded.get_events("attack")}
        hit = events["hit"]
        assert hit.event_type == EventType.ATTACK
        assert hit.attack.attack_type == "slash"
        assert hit.attack.damage == 5
        assert (hit.attack.shape.x, hit.attack.shape.width, hit.attack.shape.height) == (1.0, 30.0, 20.0)

        step = events["step"]
        assert step.event_type == EventType.NORMAL
        assert step.normal.int_value == 3
        assert step.normal.float_value == 1.5
        assert step.normal.string_value == "left"

    def test_pascal_case_mapping(self, tmp_path) -> None:
        path = tmp_path / "legacy.json"
        path.write_text(json.dumps({
            "Animations": {
                "run": [{"Name": "dust", "Time": 0.1, "Frame": 3, "EventType": 2,
                         "Effect": {"Name": "dust_puff", "X": 4, "Y": -2, "Scale": 0.5}}],
            },
        }))

        [event] = load_event_file(str(path)).get_events("run")
        assert event.event_type == EventType.EFFECT
        assert event.effect.name == "dust_puff"
        assert (event.effect.x, event.effect.y, event.effect.scale) == (4.0, -2.0, 0.5)

    def test_upgraded_file_saves_in_canonical_form(self, tmp_path) -> None:
        path = tmp_path / "legacy.json"
        path.write_text(json.dumps({"AnimationName": "idle", "Events": [{"Name": "blink", "Time": 1.0}]}))

        assert save_clip_events(str(path), "attack", [FrameEvent("swing", 0.2)])
        data = json.loads(path.read_text())
        assert "Events" not in data
        assert sorted(data["animations"]) == ["attack", "idle"]
