import logging
from dataclasses import fields, is_dataclass
from enum import Enum
from typing import List, Optional, Tuple

import pygame

from .configuration import *
from .drawing_common import draw_panel_background, draw_text_lines, is_in_rect
from .event_data import EventType, FrameEvent

logger = logging.getLogger(__name__)

ROW_HEIGHT = 22
ROWS_TOP = 40

# (label, field path or None for read-only rows, display text)
PropertyRow = Tuple[str, Optional[str], str]


def _format_value(value):
    if isinstance(value, Enum):
        return value.name
    if isinstance(value, float):
        return f"{value:g}"
    return str(value)


def _payload_rows(prefix, payload, indent="") -> List[PropertyRow]:
    rows = []
    for f in fields(payload):
        value = getattr(payload, f.name)
        path = f"{prefix}.{f.name}"
        if is_dataclass(value):
            rows.append((f"{indent}{f.name}:", None, ""))
            rows.extend(_payload_rows(path, value, indent + "  "))
        else:
            rows.append((f"{indent}{f.name}", path, _format_value(value)))
    return rows


def event_rows(event: FrameEvent) -> List[PropertyRow]:
    """Rows shown for an event, payload fields addressed by their edit path"""
    rows = [
        ("name", "name", event.name),
        ("time", "time", _format_value(event.time)),
        ("frame", None, str(event.frame)),
        ("type", "type", event.event_type.name),
        (f"{event.payload_key}:", None, ""),
    ]
    rows.extend(_payload_rows(event.payload_key, event.payload, "  "))
    return rows


class EventPropertyPanel:
    """Live editor for the selected event.

    Clicking a row starts a text edit; Enter commits through the session,
    Escape cancels, Tab on the type row cycles the event type.
    """

    def __init__(self, session, rect: pygame.Rect):
        self.session = session
        self.rect = rect
        self.editing_field: Optional[str] = None
        self.edit_text = ""

    @property
    def is_editing(self):
        return self.editing_field is not None

    def rows(self) -> List[PropertyRow]:
        selected = self.session.selected
        return event_rows(selected) if selected is not None else []

    def row_rect(self, index) -> pygame.Rect:
        return pygame.Rect(self.rect.x + 10, self.rect.y + ROWS_TOP + index * ROW_HEIGHT,
                           self.rect.width - 20, ROW_HEIGHT)

    def row_at(self, pos) -> Optional[PropertyRow]:
        for i, row in enumerate(self.rows()):
            if is_in_rect(pos, self.row_rect(i)):
                return row
        return None

    def begin_edit(self, field_path: str, text: str):
        self.editing_field = field_path
        self.edit_text = text

    def commit_edit(self) -> bool:
        if not self.is_editing:
            return False
        changed = self.session.edit_selected(self.editing_field, self.edit_text)
        if not changed:
            logger.info("Invalid value %r for %s", self.edit_text, self.editing_field)
        self.cancel_edit()
        return changed

    def cancel_edit(self):
        self.editing_field = None
        self.edit_text = ""

    def cycle_type(self):
        selected = self.session.selected
        if selected is None:
            return
        members = list(EventType)
        next_type = members[(members.index(selected.event_type) + 1) % len(members)]
        self.session.set_event_type(next_type)
        if self.editing_field == "type":
            self.edit_text = next_type.name

    def handle_mouse_down(self, pos) -> bool:
        if not is_in_rect(pos, self.rect):
            if self.is_editing:
                self.commit_edit()
            return False

        if self.is_editing:
            self.commit_edit()
        row = self.row_at(pos)
        if row is not None and row[1] is not None:
            self.begin_edit(row[1], row[2])
        return True

    def handle_keydown(self, event) -> bool:
        """Keys go to the text being edited; returns True when consumed"""
        if not self.is_editing:
            return False
        # Ctrl shortcuts such as save still reach the editor mid-edit
        if getattr(event, "mod", 0) & pygame.KMOD_CTRL:
            return False

        if event.key in (pygame.K_RETURN, pygame.K_KP_ENTER):
            self.commit_edit()
        elif event.key == pygame.K_ESCAPE:
            self.cancel_edit()
        elif event.key == pygame.K_TAB and self.editing_field == "type":
            self.cycle_type()
        elif event.key == pygame.K_BACKSPACE:
            self.edit_text = self.edit_text[:-1]
        elif getattr(event, "unicode", "") and event.unicode.isprintable():
            self.edit_text += event.unicode
        return True

    def sync_selection(self):
        """Drop an edit whose event is no longer selected"""
        if self.session.selected is None:
            self.cancel_edit()

    def draw(self, screen, font, small_font):
        draw_panel_background(screen, self.rect)
        screen.blit(font.render("Event Properties", True, WHITE), (self.rect.x + 10, self.rect.y + 10))

        rows = self.rows()
        if not rows:
            draw_text_lines(screen, small_font, ["No event selected", "",
                                                 "Right-click the timeline", "or press N to add one"],
                            (self.rect.x + 10, self.rect.y + ROWS_TOP), LIGHT_GRAY)
            return

        for i, (label, field_path, value) in enumerate(rows):
            rect = self.row_rect(i)
            editing = field_path is not None and field_path == self.editing_field
            if editing:
                pygame.draw.rect(screen, GRAY, rect)
                value = self.edit_text + "|"
            color = LIGHT_GRAY if field_path is None else WHITE
            screen.blit(small_font.render(label, True, color), (rect.x, rect.y + 4))
            screen.blit(small_font.render(value, True, YELLOW if editing else CYAN), (rect.x + 120, rect.y + 4))
