"""Tests for interactive attack shape editing."""

import pytest

from spine_event_editor.event_data import AttackShape, ShapeType
from spine_event_editor.shape_drag import DragOperation, ShapeDragController


@pytest.fixture
def box():
    return AttackShape(x=0, y=0, width=40, height=40)


@pytest.fixture
def controller(box):
    ctrl = ShapeDragController()
    ctrl.shape = box
    ctrl.set_transform((100, 100), 1.0)
    return ctrl


class TestCoordinates:
    """Screen and animation-local space."""

    def test_round_trip(self) -> None:
        ctrl = ShapeDragController()
        ctrl.set_transform((100, 200), 2.0)
        assert ctrl.screen_to_local((160, 180)) == (30, -10)
        assert ctrl.local_to_screen((30, -10)) == (160, 180)


class TestHitTest:
    """Handle classification order."""

    @pytest.mark.parametrize("pos, expected", [
        ((100, 60), DragOperation.ROTATE),
        ((80, 80), DragOperation.TOP_LEFT),
        ((82, 83), DragOperation.TOP_LEFT),
        ((120, 120), DragOperation.BOTTOM_RIGHT),
        ((121, 101), DragOperation.RIGHT),
        ((100, 80), DragOperation.TOP),
        ((100, 100), DragOperation.MOVE),
        ((300, 300), DragOperation.NONE),
    ])
    def test_unrotated_box(self, controller, pos, expected) -> None:
        assert controller.hit_test(pos) == expected

    def test_handles_follow_rotation(self, controller, box) -> None:
        box.rotation = 90
        handles = controller.handle_positions()
        assert handles[DragOperation.TOP] == pytest.approx((120, 100))
        assert controller.hit_test((120, 100)) == DragOperation.TOP

    def test_handles_follow_scale(self, controller) -> None:
        controller.set_transform((100, 100), 2.0)
        assert controller.handle_positions()[DragOperation.RIGHT] == pytest.approx((140, 100))
        assert controller.handle_positions()[DragOperation.ROTATE] == pytest.approx((100, 20))

    def test_circle_has_no_rotate_handle(self, controller) -> None:
        controller.shape = AttackShape(type=ShapeType.CIRCLE, width=20)
        handles = controller.handle_positions()
        assert DragOperation.ROTATE not in handles
        assert handles[DragOperation.RIGHT] == pytest.approx((120, 100))

    def test_no_shape_hits_nothing(self) -> None:
        assert ShapeDragController().hit_test((0, 0)) == DragOperation.NONE


class TestDragging:
    """Move, resize and rotate."""

    def test_right_edge_resize_keeps_centre(self) -> None:
        shape = AttackShape(x=0, y=0, width=40, height=40)
        ctrl = ShapeDragController()
        ctrl.shape = shape
        ctrl.begin_drag(DragOperation.RIGHT)
        ctrl.drag_to((30, 0))
        assert shape.width == 60
        assert shape.x == 0
        assert shape.height == 40

    def test_resize_under_scale(self, controller, box) -> None:
        controller.set_transform((100, 200), 2.0)
        controller.begin_drag(DragOperation.RIGHT)
        controller.drag_to((160, 200))
        assert box.width == 60

    @pytest.mark.parametrize("operation", [
        DragOperation.LEFT, DragOperation.RIGHT, DragOperation.TOP, DragOperation.BOTTOM,
        DragOperation.TOP_LEFT, DragOperation.BOTTOM_RIGHT,
    ])
    def test_resize_never_below_minimum(self, controller, box, operation) -> None:
        controller.begin_drag(operation)
        controller.drag_to((101, 101))
        assert box.width >= 10
        assert box.height >= 10

    def test_corner_resizes_both_axes(self, controller, box) -> None:
        controller.begin_drag(DragOperation.BOTTOM_RIGHT)
        controller.drag_to((130, 125))
        assert (box.width, box.height) == (60, 50)

    def test_rotated_edge_resize(self, controller, box) -> None:
        box.rotation = 90
        controller.begin_drag(DragOperation.RIGHT)
        controller.drag_to((100, 130))
        assert box.width == pytest.approx(60)
        assert box.height == 40

    def test_circle_radius(self, controller) -> None:
        circle = AttackShape(type=ShapeType.CIRCLE, width=20)
        controller.shape = circle
        controller.begin_drag(DragOperation.RIGHT)
        controller.drag_to((135, 100))
        assert circle.width == 35
        controller.drag_to((102, 100))
        assert circle.width == 10

    def test_move_jumps_centre_to_pointer(self, controller, box) -> None:
        controller.begin_drag(DragOperation.MOVE)
        controller.drag_to((130, 90))
        assert (box.x, box.y) == (30, -10)

    def test_rotate_uses_pointer_angle(self, controller, box) -> None:
        controller.begin_drag(DragOperation.ROTATE)
        controller.drag_to((100, 60))
        assert box.rotation == pytest.approx(-90)
        controller.drag_to((140, 100))
        assert box.rotation == pytest.approx(0)

    def test_cancel_restores_shape(self, controller, box) -> None:
        controller.begin_drag(DragOperation.RIGHT)
        controller.drag_to((150, 100))
        assert controller.cancel()
        assert box.width == 40
        assert controller.operation == DragOperation.NONE
        assert controller.shape is box

    def test_cancel_without_drag(self, controller) -> None:
        assert not controller.cancel()


class TestUpdate:
    """Per-frame press, hold and release handling."""

    def test_press_drag_release(self, controller, box) -> None:
        assert controller.update((100, 100), 1.0, (120, 100), True)
        assert controller.operation == DragOperation.RIGHT
        controller.update((100, 100), 1.0, (130, 100), True)
        assert box.width == 60
        assert not controller.update((100, 100), 1.0, (130, 100), False)
        assert controller.operation == DragOperation.NONE

    def test_held_button_does_not_start_drag(self, controller) -> None:
        controller.update((100, 100), 1.0, (300, 300), True)
        assert not controller.is_dragging
        controller.update((100, 100), 1.0, (100, 100), True)
        assert not controller.is_dragging

    def test_start_can_be_blocked(self, controller) -> None:
        assert not controller.update((100, 100), 1.0, (100, 100), True, allow_start=False)
        assert controller.hover == DragOperation.MOVE

    def test_changing_shape_ends_drag(self, controller) -> None:
        controller.begin_drag(DragOperation.MOVE)
        controller.shape = AttackShape()
        assert not controller.is_dragging
