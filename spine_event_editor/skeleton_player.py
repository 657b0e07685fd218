"""
Skeleton playback for the event editor.

Loads PySpine rigs (``bones``) and bone animations (``bone_tracks`` with
eased keyframes) and poses the skeleton at any clip time.

# Usage
player = SkeletonPlayer()
player.load_skeleton("bone_project.json")
player.load_animation("bone_animation.json")
player.switch_animation("bone_animation")
player.apply_pose(0.5)
player.render_skeleton(screen)
"""

import logging
import math
import os
from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

import pygame

from .configuration import WHITE
from .file_common import load_json_project

logger = logging.getLogger(__name__)


class PlaybackEngine(ABC):
    """What the editor needs from an animation runtime"""

    @abstractmethod
    def set_position(self, x: float, y: float): ...

    @abstractmethod
    def set_scale(self, scale: float): ...

    @property
    @abstractmethod
    def position(self) -> Tuple[float, float]: ...

    @property
    @abstractmethod
    def scale(self) -> float: ...

    @property
    @abstractmethod
    def current_animation(self) -> Optional[str]: ...

    @abstractmethod
    def current_animation_duration(self) -> float: ...

    @abstractmethod
    def list_animation_names(self) -> List[str]: ...

    @abstractmethod
    def switch_animation(self, name: str, loop: bool = True) -> bool: ...

    @abstractmethod
    def apply_pose(self, time: float): ...


class AttachmentPoint(Enum):
    START = "start"
    END = "end"


class InterpolationType(Enum):
    LINEAR = "linear"
    EASE_IN = "ease_in"
    EASE_OUT = "ease_out"
    EASE_IN_OUT = "ease_in_out"
    BEZIER = "bezier"


class Bone:
    """Bone of the rig with its posed world transform"""

    def __init__(self, name: str, data: Dict[str, Any]):
        self.name = data.get("name", name)
        self.x = float(data.get("x", 0.0))
        self.y = float(data.get("y", 0.0))
        self.length = float(data.get("length", 0.0))
        self.angle = float(data.get("angle", 0.0))
        self.parent = data.get("parent")
        self.parent_attachment_point = AttachmentPoint(data.get("parent_attachment_point", "end"))

        self.world_x = self.x
        self.world_y = self.y
        self.world_rotation = self.angle
        self.world_scale = 1.0

    def end_point(self) -> Tuple[float, float]:
        rad = math.radians(self.world_rotation)
        return self.world_x + self.length * math.cos(rad), self.world_y + self.length * math.sin(rad)


class Transform:
    def __init__(self, x=0.0, y=0.0, rotation=0.0, scale=1.0):
        self.x = x
        self.y = y
        self.rotation = rotation
        self.scale = scale

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Transform":
        return cls(float(data.get("x", 0.0)), float(data.get("y", 0.0)),
                   float(data.get("rotation", 0.0)), float(data.get("scale", 1.0)))


class Keyframe:
    def __init__(self, data: Dict[str, Any]):
        self.time = float(data["time"])
        self.transform = Transform.from_dict(data.get("transform", {}))
        self.interpolation = InterpolationType(data.get("interpolation", "linear"))


def ease(interpolation: InterpolationType, t: float) -> float:
    """Easing curve applied to the blend factor of a keyframe segment"""
    if interpolation == InterpolationType.EASE_IN:
        return t * t * t
    if interpolation == InterpolationType.EASE_OUT:
        return 1 - (1 - t) ** 3
    if interpolation == InterpolationType.EASE_IN_OUT:
        return 4 * t * t * t if t < 0.5 else 1 - pow(-2 * t + 2, 3) / 2
    if interpolation == InterpolationType.BEZIER:
        return t * t * (3.0 - 2.0 * t)
    return t


class BoneTrack:
    """Keyframes of one bone, sorted by time"""

    def __init__(self, keyframes_data: List[Dict[str, Any]]):
        self.keyframes = sorted((Keyframe(kf) for kf in keyframes_data), key=lambda kf: kf.time)

    def transform_at(self, time: float) -> Transform:
        if not self.keyframes:
            return Transform()
        if time <= self.keyframes[0].time:
            return self.keyframes[0].transform
        if time >= self.keyframes[-1].time:
            return self.keyframes[-1].transform

        for kf1, kf2 in zip(self.keyframes, self.keyframes[1:]):
            if kf1.time <= time <= kf2.time:
                span = kf2.time - kf1.time
                t = ease(kf1.interpolation, (time - kf1.time) / span if span > 0 else 1.0)
                a, b = kf1.transform, kf2.transform
                return Transform(a.x + (b.x - a.x) * t, a.y + (b.y - a.y) * t,
                                 a.rotation + (b.rotation - a.rotation) * t, a.scale + (b.scale - a.scale) * t)
        return Transform()


class AnimationClip:
    def __init__(self, name: str, data: Dict[str, Any]):
        self.name = name
        self.duration = float(data.get("duration", 5.0))
        self.fps = int(data.get("fps", 30))
        self.original_bone_positions: Dict[str, Tuple[float, float, float]] = {
            bone: tuple(values) for bone, values in data.get("original_bone_positions", {}).items()
        }
        self.tracks: Dict[str, BoneTrack] = {
            bone: BoneTrack(track.get("keyframes", [])) for bone, track in data.get("bone_tracks", {}).items()
        }


class SkeletonPlayer(PlaybackEngine):
    """Poses a PySpine skeleton for the active clip"""

    def __init__(self):
        self.skeleton_file = ""
        self.bones: Dict[str, Bone] = {}
        self.clips: Dict[str, AnimationClip] = {}
        self.loop = True
        self._position = (0.0, 0.0)
        self._scale = 1.0
        self._current: Optional[AnimationClip] = None

    # PlaybackEngine

    def set_position(self, x, y):
        self._position = (float(x), float(y))

    def set_scale(self, scale):
        if scale > 0:
            self._scale = float(scale)

    @property
    def position(self):
        return self._position

    @property
    def scale(self):
        return self._scale

    @property
    def current_animation(self):
        return self._current.name if self._current else None

    def current_animation_duration(self):
        return self._current.duration if self._current else 0.0

    def list_animation_names(self):
        return list(self.clips.keys())

    def switch_animation(self, name, loop=True):
        clip = self.clips.get(name)
        if clip is None:
            logger.warning("Animation '%s' not found", name)
            return False
        self._current = clip
        self.loop = loop
        self.apply_pose(0.0)
        return True

    def apply_pose(self, time):
        """Compute world transforms of every bone at ``time`` in the active clip"""
        clip = self._current
        if clip is not None:
            time = min(max(0.0, time), clip.duration)
        processed = set()

        def process_bone(bone_name: str):
            if bone_name in processed or bone_name not in self.bones:
                return
            processed.add(bone_name)
            bone = self.bones[bone_name]

            if bone.parent:
                process_bone(bone.parent)

            if clip and bone_name in clip.original_bone_positions:
                orig_x, orig_y, orig_angle = clip.original_bone_positions[bone_name]
            else:
                orig_x, orig_y, orig_angle = bone.x, bone.y, bone.angle

            anim = Transform()
            if clip and bone_name in clip.tracks:
                anim = clip.tracks[bone_name].transform_at(time)

            parent = self.bones.get(bone.parent) if bone.parent else None
            if parent is not None:
                if bone.parent_attachment_point == AttachmentPoint.END:
                    attach_x, attach_y = parent.end_point()
                else:
                    attach_x, attach_y = parent.world_x, parent.world_y

                offset_x, offset_y = anim.x, anim.y
                if offset_x or offset_y:
                    rad = math.radians(parent.world_rotation)
                    offset_x, offset_y = (anim.x * math.cos(rad) - anim.y * math.sin(rad),
                                          anim.x * math.sin(rad) + anim.y * math.cos(rad))
                bone.world_x = attach_x + offset_x
                bone.world_y = attach_y + offset_y
            else:
                bone.world_x = orig_x + anim.x
                bone.world_y = orig_y + anim.y

            bone.world_rotation = orig_angle + anim.rotation
            bone.world_scale = max(0.1, anim.scale) if anim.scale != 0 else 1.0

        for name in self.bones:
            process_bone(name)

    # Loading

    def load_skeleton(self, filename: str) -> bool:
        """Load a rig; animations bundled in the same file become clips"""
        data = load_json_project(filename)
        if not isinstance(data, dict):
            return False

        try:
            self.bones = {name: Bone(name, bone_data) for name, bone_data in data.get("bones", {}).items()}
            for clip_name, clip_data in data.get("animations", {}).items():
                self.clips[clip_name] = AnimationClip(clip_name, clip_data)
            if "bone_tracks" in data:
                stem = os.path.splitext(os.path.basename(filename))[0]
                self.clips[stem] = AnimationClip(stem, data)
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            logger.error("Error reading skeleton %s: %s", filename, e)
            return False

        self.skeleton_file = filename
        logger.info("Loaded skeleton %s: %d bones, %d animations", filename, len(self.bones), len(self.clips))
        self.apply_pose(0.0)
        return True

    def load_animation(self, filename: str, name: Optional[str] = None) -> bool:
        """Load a single bone animation file as a clip named after the file"""
        data = load_json_project(filename)
        if not isinstance(data, dict):
            return False

        name = name or os.path.splitext(os.path.basename(filename))[0]
        try:
            clip = AnimationClip(name, data)
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            logger.error("Error reading animation %s: %s", filename, e)
            return False

        self.clips[name] = clip
        logger.info("Loaded animation '%s': %d tracks, %.2fs", name, len(clip.tracks), clip.duration)
        return True

    # Rendering

    def render_skeleton(self, screen: pygame.Surface, color: Tuple[int, int, int] = WHITE, alpha: int = 200):
        """Draw the posed bones at the player position and scale"""
        skeleton_surface = pygame.Surface(screen.get_size(), pygame.SRCALPHA)
        bone_color = (*color, alpha)
        offset_x, offset_y = self._position

        for bone in self.bones.values():
            end_x, end_y = bone.end_point()
            start = (int(offset_x + bone.world_x * self._scale), int(offset_y + bone.world_y * self._scale))
            end = (int(offset_x + end_x * self._scale), int(offset_y + end_y * self._scale))
            pygame.draw.line(skeleton_surface, bone_color, start, end, 2)
            pygame.draw.circle(skeleton_surface, bone_color, start, 4)
            pygame.draw.circle(skeleton_surface, bone_color, end, 4)

        screen.blit(skeleton_surface, (0, 0))
