import os

os.environ.setdefault("SDL_VIDEODRIVER", "dummy")
os.environ.setdefault("SDL_AUDIODRIVER", "dummy")

import pytest

from spine_event_editor.session import AnimationSession
from spine_event_editor.skeleton_player import PlaybackEngine


class FakeEngine(PlaybackEngine):
    """In-memory playback engine recording every pose request"""

    def __init__(self, clips=None):
        self.clips = dict(clips if clips is not None else {"idle": 2.0, "attack": 1.5})
        self.skeleton_file = ""
        self.poses = []
        self.loop = True
        self._position = (0.0, 0.0)
        self._scale = 1.0
        self._current = None

    def set_position(self, x, y):
        self._position = (x, y)

    def set_scale(self, scale):
        self._scale = scale

    @property
    def position(self):
        return self._position

    @property
    def scale(self):
        return self._scale

    @property
    def current_animation(self):
        return self._current

    def current_animation_duration(self):
        return self.clips.get(self._current, 0.0)

    def list_animation_names(self):
        return list(self.clips)

    def switch_animation(self, name, loop=True):
        if name not in self.clips:
            return False
        self._current = name
        self.loop = loop
        return True

    def apply_pose(self, time):
        self.poses.append(time)


@pytest.fixture
def engine():
    return FakeEngine()


@pytest.fixture
def skeleton_path(tmp_path):
    return str(tmp_path / "hero.json")


@pytest.fixture
def session(engine, skeleton_path):
    return AnimationSession(engine, skeleton_file=skeleton_path)


@pytest.fixture
def idle_session(session):
    assert session.switch_clip("idle")
    return session
