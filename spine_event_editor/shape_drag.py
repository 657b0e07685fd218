import logging
import math
from dataclasses import fields, replace
from enum import Enum
from typing import Dict, List, Optional, Tuple

from .configuration import DRAG_HANDLE_SIZE, MIN_SHAPE_SIZE, ROTATION_HANDLE_DISTANCE
from .event_data import AttackShape

logger = logging.getLogger(__name__)

Point = Tuple[float, float]


class DragOperation(Enum):
    NONE = 0
    MOVE = 1
    ROTATE = 2
    TOP_LEFT = 3
    TOP_RIGHT = 4
    BOTTOM_LEFT = 5
    BOTTOM_RIGHT = 6
    LEFT = 7
    RIGHT = 8
    TOP = 9
    BOTTOM = 10


CORNER_OPERATIONS = (DragOperation.TOP_LEFT, DragOperation.TOP_RIGHT,
                     DragOperation.BOTTOM_LEFT, DragOperation.BOTTOM_RIGHT)
EDGE_OPERATIONS = (DragOperation.LEFT, DragOperation.RIGHT, DragOperation.TOP, DragOperation.BOTTOM)

HORIZONTAL_OPERATIONS = (DragOperation.LEFT, DragOperation.RIGHT) + CORNER_OPERATIONS
VERTICAL_OPERATIONS = (DragOperation.TOP, DragOperation.BOTTOM) + CORNER_OPERATIONS

# Handle offsets from the shape centre, in units of the half extents
HANDLE_FACTORS = {
    DragOperation.TOP_LEFT: (-1, -1),
    DragOperation.TOP_RIGHT: (1, -1),
    DragOperation.BOTTOM_LEFT: (-1, 1),
    DragOperation.BOTTOM_RIGHT: (1, 1),
    DragOperation.LEFT: (-1, 0),
    DragOperation.RIGHT: (1, 0),
    DragOperation.TOP: (0, -1),
    DragOperation.BOTTOM: (0, 1),
}


def rotate_point(x, y, degrees) -> Point:
    rad = math.radians(degrees)
    cos_r = math.cos(rad)
    sin_r = math.sin(rad)
    return x * cos_r - y * sin_r, x * sin_r + y * cos_r


class ShapeDragController:
    """Move, resize and rotate handles for one attack shape.

    The shape lives in animation-local space; the skeleton anchor and scale
    supplied every tick map it to the screen. Handle hits are measured in
    screen pixels, resizing keeps the shape centre in place.
    """

    def __init__(self, handle_size=DRAG_HANDLE_SIZE, min_size=MIN_SHAPE_SIZE,
                 rotation_handle_distance=ROTATION_HANDLE_DISTANCE):
        self.handle_size = handle_size
        self.min_size = min_size
        self.rotation_handle_distance = rotation_handle_distance

        self.anchor: Point = (0.0, 0.0)
        self.scale = 1.0
        self.operation = DragOperation.NONE
        self.hover = DragOperation.NONE

        self._shape: Optional[AttackShape] = None
        self._drag_start_shape: Optional[AttackShape] = None
        self._was_pressed = False

    @property
    def shape(self) -> Optional[AttackShape]:
        return self._shape

    @shape.setter
    def shape(self, shape: Optional[AttackShape]):
        if shape is not self._shape:
            self.operation = DragOperation.NONE
            self.hover = DragOperation.NONE
            self._drag_start_shape = None
        self._shape = shape

    @property
    def is_dragging(self):
        return self.operation != DragOperation.NONE

    def set_transform(self, anchor: Point, scale: float):
        self.anchor = (float(anchor[0]), float(anchor[1]))
        if scale > 0:
            self.scale = float(scale)

    # Coordinate mapping

    def screen_to_local(self, pos: Point) -> Point:
        return (pos[0] - self.anchor[0]) / self.scale, (pos[1] - self.anchor[1]) / self.scale

    def local_to_screen(self, pos: Point) -> Point:
        return self.anchor[0] + pos[0] * self.scale, self.anchor[1] + pos[1] * self.scale

    def _shape_rotation(self):
        return 0.0 if self._shape.is_circle else self._shape.rotation

    def _to_shape_frame(self, local: Point) -> Point:
        """Local point relative to the shape centre, with the shape rotation undone"""
        dx = local[0] - self._shape.x
        dy = local[1] - self._shape.y
        return rotate_point(dx, dy, -self._shape_rotation())

    def _from_shape_frame(self, offset: Point) -> Point:
        rx, ry = rotate_point(offset[0], offset[1], self._shape_rotation())
        return self._shape.x + rx, self._shape.y + ry

    # Handles

    def handle_positions(self) -> Dict[DragOperation, Point]:
        """Screen position of every handle of the current shape"""
        if self._shape is None:
            return {}

        half_w, half_h = self._shape.half_extents()
        positions = {}
        if not self._shape.is_circle:
            rotate_offset = (0.0, -(half_h + self.rotation_handle_distance))
            positions[DragOperation.ROTATE] = self.local_to_screen(self._from_shape_frame(rotate_offset))

        for operation, (fx, fy) in HANDLE_FACTORS.items():
            local = self._from_shape_frame((fx * half_w, fy * half_h))
            positions[operation] = self.local_to_screen(local)
        return positions

    def outline(self) -> List[Point]:
        """Screen corners of the (rotated) bounding box, clockwise from top left"""
        if self._shape is None:
            return []
        half_w, half_h = self._shape.half_extents()
        corners = [(-half_w, -half_h), (half_w, -half_h), (half_w, half_h), (-half_w, half_h)]
        return [self.local_to_screen(self._from_shape_frame(corner)) for corner in corners]

    def _hits_handle(self, pos: Point, handle_pos: Point):
        return abs(pos[0] - handle_pos[0]) <= self.handle_size and abs(pos[1] - handle_pos[1]) <= self.handle_size

    def hit_test(self, pos: Point) -> DragOperation:
        """Operation a press at screen ``pos`` would start; rotate, corners, edges, then body"""
        if self._shape is None:
            return DragOperation.NONE

        handles = self.handle_positions()
        for operation in (DragOperation.ROTATE,) + CORNER_OPERATIONS + EDGE_OPERATIONS:
            if operation in handles and self._hits_handle(pos, handles[operation]):
                return operation

        ux, uy = self._to_shape_frame(self.screen_to_local(pos))
        half_w, half_h = self._shape.half_extents()
        if abs(ux) <= half_w and abs(uy) <= half_h:
            return DragOperation.MOVE
        return DragOperation.NONE

    # Dragging

    def begin_drag(self, operation: DragOperation) -> bool:
        if self._shape is None or operation == DragOperation.NONE:
            return False
        self.operation = operation
        self._drag_start_shape = replace(self._shape)
        logger.debug("Shape drag started: %s", operation.name)
        return True

    def drag_to(self, pos: Point):
        """Apply the active operation for a pointer at screen ``pos``"""
        if self._shape is None or not self.is_dragging:
            return

        shape = self._shape
        local = self.screen_to_local(pos)

        if self.operation == DragOperation.MOVE:
            shape.x, shape.y = local
        elif self.operation == DragOperation.ROTATE:
            shape.rotation = math.degrees(math.atan2(local[1] - shape.y, local[0] - shape.x))
        elif shape.is_circle:
            ux, uy = self._to_shape_frame(local)
            if self.operation in CORNER_OPERATIONS:
                reach = max(abs(ux), abs(uy))
            elif self.operation in HORIZONTAL_OPERATIONS:
                reach = abs(ux)
            else:
                reach = abs(uy)
            shape.width = max(self.min_size, reach)
        else:
            ux, uy = self._to_shape_frame(local)
            if self.operation in HORIZONTAL_OPERATIONS:
                shape.width = max(self.min_size, 2 * abs(ux))
            if self.operation in VERTICAL_OPERATIONS:
                shape.height = max(self.min_size, 2 * abs(uy))

    def end_drag(self):
        if self.is_dragging:
            logger.debug("Shape drag finished: %s", self.operation.name)
        self.operation = DragOperation.NONE
        self._drag_start_shape = None

    def cancel(self) -> bool:
        """Abort the active drag and restore the shape as it was when grabbed"""
        if not self.is_dragging or self._drag_start_shape is None:
            return False
        for f in fields(AttackShape):
            setattr(self._shape, f.name, getattr(self._drag_start_shape, f.name))
        self.end_drag()
        return True

    def update(self, anchor: Point, scale: float, mouse_pos: Point, left_pressed: bool,
               allow_start=True) -> bool:
        """Per-frame entry point; returns True while a drag is in progress.

        A press edge starts the operation under the pointer (when
        ``allow_start``), a held button drags and a release ends the drag.
        """
        self.set_transform(anchor, scale)
        pressed_now = left_pressed and not self._was_pressed
        self._was_pressed = left_pressed

        if self._shape is None:
            self.end_drag()
            return False

        if not self.is_dragging:
            self.hover = self.hit_test(mouse_pos)
            if pressed_now and allow_start:
                self.begin_drag(self.hover)
        elif left_pressed:
            self.drag_to(mouse_pos)
        else:
            self.end_drag()
        return self.is_dragging
