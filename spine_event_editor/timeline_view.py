import logging
from typing import List, Optional, Tuple

import pygame

from .configuration import *
from .drawing_common import draw_panel_background, is_in_rect
from .event_data import EventType, FrameEvent

logger = logging.getLogger(__name__)

TIMELINE_MARGIN = 20
MARKER_RADIUS = 6

EVENT_TYPE_COLORS = {
    EventType.NORMAL: WHITE,
    EventType.ATTACK: RED,
    EventType.EFFECT: PURPLE,
    EventType.SOUND: GREEN,
}


class ContextMenu:
    """Right-click menu of the timeline"""

    ITEM_WIDTH = 120
    ITEM_HEIGHT = 22

    def __init__(self):
        self.visible = False
        self.pos = (0, 0)
        self.time = 0.0
        self.target: Optional[FrameEvent] = None
        self.items: List[str] = []

    def open(self, pos, time, target: Optional[FrameEvent] = None):
        self.visible = True
        self.pos = pos
        self.time = time
        self.target = target
        self.items = ["Add Event"]
        if target is not None:
            self.items.append("Delete Event")

    def close(self):
        self.visible = False
        self.target = None

    def item_rects(self) -> List[Tuple[str, pygame.Rect]]:
        x, y = self.pos
        return [(label, pygame.Rect(x, y + i * self.ITEM_HEIGHT, self.ITEM_WIDTH, self.ITEM_HEIGHT))
                for i, label in enumerate(self.items)]

    def item_at(self, pos) -> Optional[str]:
        if not self.visible:
            return None
        for label, rect in self.item_rects():
            if is_in_rect(pos, rect):
                return label
        return None

    def draw(self, screen, font):
        if not self.visible:
            return
        mouse_pos = pygame.mouse.get_pos()
        for label, rect in self.item_rects():
            color = GRAY if is_in_rect(mouse_pos, rect) else DARK_GRAY
            draw_panel_background(screen, rect, color, LIGHT_GRAY)
            screen.blit(font.render(label, True, WHITE), (rect.x + 6, rect.y + 4))


class TimelineView:
    """Event track under the viewport: ruler, markers, playhead and context menu.

    The top half is the ruler where dragging scrubs the clip; markers sit in
    the lower half and can be selected and dragged in time.
    """

    def __init__(self, session, rect: pygame.Rect):
        self.session = session
        self.context_menu = ContextMenu()
        self.scrubbing = False
        self.dragging_event: Optional[FrameEvent] = None
        self.rect = rect
        self.set_rect(rect)

    def set_rect(self, rect: pygame.Rect):
        self.rect = rect
        self.session.mapper.set_bounds(rect.x + TIMELINE_MARGIN, rect.width - 2 * TIMELINE_MARGIN)

    @property
    def mapper(self):
        return self.session.mapper

    @property
    def marker_y(self):
        return self.rect.y + self.rect.height * 3 // 4

    def playhead_x(self):
        return self.mapper.x_from_time(self.session.current_time)

    def time_at(self, x):
        return min(max(0.0, self.mapper.time_from_x(x)), self.session.duration)

    def marker_at(self, pos) -> Optional[FrameEvent]:
        """Closest event marker within hit range of ``pos`` (lower half only)"""
        if not is_in_rect(pos, self.rect) or pos[1] < self.rect.centery:
            return None

        best, best_distance = None, None
        for evt in self.session.events:
            distance = abs(pos[0] - self.mapper.x_from_time(evt.time))
            if distance <= EVENT_MARKER_HIT_WIDTH and (best is None or distance < best_distance):
                best, best_distance = evt, distance
        return best

    # Input

    def handle_mouse_down(self, pos, button) -> bool:
        """Returns True when the press was consumed by the timeline"""
        if self.context_menu.visible:
            item = self.context_menu.item_at(pos)
            target = self.context_menu.target
            time = self.context_menu.time
            self.context_menu.close()
            if item == "Add Event":
                self.session.add_event_at(time)
                return True
            if item == "Delete Event":
                self.session.select_event(target)
                self.session.delete_selected()
                return True

        if not is_in_rect(pos, self.rect):
            return False

        if button == 1:
            marker = self.marker_at(pos)
            if marker is not None:
                self.session.select_event(marker)
                self.dragging_event = marker
            elif pos[1] < self.rect.centery or abs(pos[0] - self.playhead_x()) <= PLAYHEAD_HIT_WIDTH:
                self.scrubbing = True
                self.session.scrub_to(self.time_at(pos[0]))
            else:
                self.session.select_event(None)
            return True

        if button == 3:
            self.context_menu.open(pos, self.time_at(pos[0]), self.marker_at(pos))
            return True
        return False

    def handle_mouse_motion(self, pos):
        if self.scrubbing:
            self.session.scrub_to(self.time_at(pos[0]))
        elif self.dragging_event is not None:
            self.session.move_event(self.dragging_event, self.time_at(pos[0]))

    def handle_mouse_up(self, button):
        if button == 1:
            if self.dragging_event is not None:
                logger.debug("Moved event '%s' to %.3fs", self.dragging_event.name, self.dragging_event.time)
            self.scrubbing = False
            self.dragging_event = None

    # Drawing

    def draw(self, screen, font, small_font):
        draw_panel_background(screen, self.rect, GRAY, LIGHT_GRAY)
        previous_clip = screen.get_clip()
        screen.set_clip(self.rect)

        ruler_bottom = self.rect.centery
        pygame.draw.line(screen, DARK_GRAY, (self.rect.x, ruler_bottom), (self.rect.right, ruler_bottom))

        for tick in self.mapper.tick_times():
            x = int(self.mapper.x_from_time(tick))
            pygame.draw.line(screen, BLACK, (x, self.rect.y), (x, self.rect.y + 10))
            label = small_font.render(f"{tick:g}s", True, BLACK)
            screen.blit(label, (x + 2, self.rect.y + 12))

        selected = self.session.selected
        for evt in self.session.events:
            x = int(self.mapper.x_from_time(evt.time))
            color = YELLOW if evt is selected else EVENT_TYPE_COLORS[evt.event_type]
            pygame.draw.circle(screen, color, (x, self.marker_y), MARKER_RADIUS)
            pygame.draw.circle(screen, BLACK, (x, self.marker_y), MARKER_RADIUS, 2)
            if evt is selected:
                name = small_font.render(evt.name, True, BLACK)
                screen.blit(name, (x + MARKER_RADIUS + 2, self.marker_y - MARKER_RADIUS * 2 - 6))

        playhead = int(self.playhead_x())
        pygame.draw.line(screen, YELLOW, (playhead, self.rect.y), (playhead, self.rect.bottom), 2)

        screen.set_clip(previous_clip)
        self.context_menu.draw(screen, font)
