import logging
from typing import List, Optional

import pygame

from .configuration import *
from .drawing_common import draw_attack_shape, draw_panel_background, draw_text_lines, is_in_rect
from .event_common import BaseEventHandler, InputSnapshot
from .event_data import FrameEvent
from .property_panel import EventPropertyPanel
from .session import AnimationSession
from .timeline_view import TimelineView

logger = logging.getLogger(__name__)

EVENT_EDITOR_NAME_VERSION = "PySpine Event Editor v0.1"
LIST_ITEM_HEIGHT = 24
TRIGGER_FLASH_DURATION = 0.5


class Toast:
    """Short status message drawn over the viewport"""

    def __init__(self, duration=TOAST_DURATION):
        self.duration = duration
        self.message = ""
        self.color = WHITE
        self.remaining = 0.0

    @property
    def visible(self):
        return self.remaining > 0 and bool(self.message)

    def show(self, message, color=GREEN):
        self.message = message
        self.color = color
        self.remaining = self.duration

    def update(self, dt):
        self.remaining = max(0.0, self.remaining - dt)

    def draw(self, screen, font, center_x, y):
        if not self.visible:
            return
        text = font.render(self.message, True, self.color)
        rect = text.get_rect(midtop=(center_x, y))
        draw_panel_background(screen, rect.inflate(16, 8), BLACK, self.color)
        screen.blit(text, rect)


class AnimationList:
    """Clip names of the engine; clicking one switches clips"""

    def __init__(self, session: AnimationSession, rect: pygame.Rect):
        self.session = session
        self.rect = rect

    def item_rect(self, index) -> pygame.Rect:
        return pygame.Rect(self.rect.x + 5, self.rect.y + 35 + index * LIST_ITEM_HEIGHT,
                           self.rect.width - 10, LIST_ITEM_HEIGHT - 2)

    def clip_at(self, pos) -> Optional[str]:
        for i, name in enumerate(self.session.engine.list_animation_names()):
            if is_in_rect(pos, self.item_rect(i)):
                return name
        return None

    def draw(self, screen, font, small_font):
        draw_panel_background(screen, self.rect)
        screen.blit(font.render("Animations", True, WHITE), (self.rect.x + 10, self.rect.y + 8))

        names = self.session.engine.list_animation_names()
        if not names:
            draw_text_lines(screen, small_font, ["No animations loaded"], (self.rect.x + 10, self.rect.y + 40),
                            LIGHT_GRAY)
        for i, name in enumerate(names):
            rect = self.item_rect(i)
            if name == self.session.current_clip:
                pygame.draw.rect(screen, (64, 64, 0), rect)
            color = YELLOW if name == self.session.current_clip else WHITE
            screen.blit(small_font.render(name, True, color), (rect.x + 5, rect.y + 5))


class FrameEventEditor(BaseEventHandler):
    def __init__(self, session: AnimationSession, width=SCREEN_WIDTH, height=SCREEN_HEIGHT):
        super().__init__()
        self.session = session
        self.width = width
        self.height = height

        self.screen = pygame.display.set_mode((width, height))
        pygame.display.set_caption(EVENT_EDITOR_NAME_VERSION)
        self.clock = pygame.time.Clock()
        self.font = pygame.font.Font(None, 24)
        self.small_font = pygame.font.Font(None, 18)

        # Layout
        body_height = height - TOOLBAR_HEIGHT
        center_width = width - ANIMATION_LIST_WIDTH - PROPERTY_PANEL_WIDTH
        self.viewport_rect = pygame.Rect(ANIMATION_LIST_WIDTH, TOOLBAR_HEIGHT, center_width,
                                         body_height - TIMELINE_HEIGHT)
        timeline_rect = pygame.Rect(ANIMATION_LIST_WIDTH, height - TIMELINE_HEIGHT, center_width, TIMELINE_HEIGHT)
        list_rect = pygame.Rect(0, TOOLBAR_HEIGHT, ANIMATION_LIST_WIDTH, body_height)
        panel_rect = pygame.Rect(width - PROPERTY_PANEL_WIDTH, TOOLBAR_HEIGHT, PROPERTY_PANEL_WIDTH, body_height)

        self.timeline = TimelineView(session, timeline_rect)
        self.property_panel = EventPropertyPanel(session, panel_rect)
        self.animation_list = AnimationList(session, list_rect)
        self.toast = Toast()

        self.session.engine.set_position(*self.viewport_rect.center)
        self.recent_triggers: List[List] = []
        self.session.playback.add_listener(self._on_event_triggered)
        self._wheel = 0

        self.setup_editor_keys()

    def setup_editor_keys(self):
        """Setup transport and event shortcuts"""
        self.key_handlers.update({
            (pygame.K_COMMA, None): lambda: self.session.playback.step_frame(-1),
            (pygame.K_PERIOD, None): lambda: self.session.playback.step_frame(1),
            (pygame.K_HOME, None): self.session.playback.go_to_start,
            (pygame.K_END, None): self.session.playback.go_to_end,
            (pygame.K_PLUS, None): self._faster,
            (pygame.K_EQUALS, None): self._faster,
            (pygame.K_KP_PLUS, None): self._faster,
            (pygame.K_MINUS, None): self._slower,
            (pygame.K_KP_MINUS, None): self._slower,
            (pygame.K_n, None): self._add_event,
        })

    def _faster(self):
        self.session.change_playback_speed(PLAYBACK_SPEED_STEP)

    def _slower(self):
        self.session.change_playback_speed(-PLAYBACK_SPEED_STEP)

    def _add_event(self):
        event = self.session.add_event_at_current_time()
        self.toast.show(f"Added '{event.name}' at {event.time:.2f}s")

    def _on_event_triggered(self, event: FrameEvent):
        self.recent_triggers.append([event.name, TRIGGER_FLASH_DURATION])

    # BaseEventHandler overrides

    def save_project(self):
        if self.session.save_events():
            self.toast.show(f"Saved {len(self.session.events)} event(s) for '{self.session.current_clip}'")
        else:
            self.toast.show("Save failed, event file left unchanged", RED)

    def delete_selected(self):
        if self.session.delete_selected():
            self.property_panel.cancel_edit()

    def toggle_playback(self):
        self.session.playback.toggle()

    def cancel_action(self):
        if not self.session.shape_drag.cancel():
            self.timeline.context_menu.close()

    # Input

    def switch_clip(self, name):
        if self.session.current_clip is not None and not self.session.save_events():
            self.toast.show(f"Could not save events of '{self.session.current_clip}'", RED)
        if self.session.switch_clip(name, save_events=False):
            self.property_panel.cancel_edit()
            self.toast.show(f"Editing '{name}'")

    def handle_events(self):
        self._wheel = 0
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                return False

            elif event.type == pygame.KEYDOWN:
                if not self.property_panel.handle_keydown(event):
                    self.handle_keydown(event)

            elif event.type == pygame.MOUSEBUTTONDOWN:
                self._handle_mouse_down(event)

            elif event.type == pygame.MOUSEBUTTONUP:
                self.timeline.handle_mouse_up(event.button)

            elif event.type == pygame.MOUSEMOTION:
                self.timeline.handle_mouse_motion(event.pos)

            elif event.type == pygame.MOUSEWHEEL:
                self._wheel += event.y

        return True

    def _handle_mouse_down(self, event):
        if event.button not in (1, 3):
            return

        if self.property_panel.handle_mouse_down(event.pos):
            return
        if self.timeline.handle_mouse_down(event.pos, event.button):
            return
        if event.button == 1:
            name = self.animation_list.clip_at(event.pos)
            if name is not None:
                self.switch_clip(name)

    def sample_input(self) -> InputSnapshot:
        mouse_pos = pygame.mouse.get_pos()
        keys = pygame.key.get_pressed()
        typing = self.property_panel.is_editing
        timeline_busy = self.timeline.scrubbing or self.timeline.dragging_event is not None
        return InputSnapshot(
            mouse_pos=mouse_pos,
            left=pygame.mouse.get_pressed()[0] and not timeline_busy,
            right=pygame.mouse.get_pressed()[2],
            wheel=self._wheel,
            scroll_left=keys[pygame.K_LEFT] and not typing,
            scroll_right=keys[pygame.K_RIGHT] and not typing,
            over_timeline=is_in_rect(mouse_pos, self.timeline.rect),
            over_viewport=is_in_rect(mouse_pos, self.viewport_rect) and not self.timeline.context_menu.visible,
        )

    def update(self, dt):
        self.session.update(dt, self.sample_input())
        self.property_panel.sync_selection()
        self.toast.update(dt)
        for trigger in self.recent_triggers:
            trigger[1] -= dt
        self.recent_triggers = [trigger for trigger in self.recent_triggers if trigger[1] > 0]

    # Drawing

    def draw(self):
        self.screen.fill(BLACK)
        self._draw_viewport()
        self.animation_list.draw(self.screen, self.font, self.small_font)
        self.property_panel.draw(self.screen, self.font, self.small_font)
        self.timeline.draw(self.screen, self.font, self.small_font)
        self._draw_toolbar()
        self.toast.draw(self.screen, self.font, self.viewport_rect.centerx, self.viewport_rect.y + 10)
        pygame.display.flip()

    def _draw_viewport(self):
        previous_clip = self.screen.get_clip()
        self.screen.set_clip(self.viewport_rect)
        self.screen.fill((32, 32, 32), self.viewport_rect)

        anchor_x, anchor_y = self.session.engine.position
        pygame.draw.line(self.screen, DARK_GRAY, (self.viewport_rect.x, anchor_y), (self.viewport_rect.right, anchor_y))
        pygame.draw.line(self.screen, DARK_GRAY, (anchor_x, self.viewport_rect.y), (anchor_x, self.viewport_rect.bottom))

        render_skeleton = getattr(self.session.engine, "render_skeleton", None)
        if render_skeleton is not None:
            render_skeleton(self.screen)

        draw_attack_shape(self.screen, self.session.shape_drag, RED, selected=True)

        for i, (name, _) in enumerate(self.recent_triggers):
            text = self.small_font.render(f"> {name}", True, ORANGE)
            self.screen.blit(text, (self.viewport_rect.x + 10, self.viewport_rect.bottom - 20 - i * 18))

        self.screen.set_clip(previous_clip)

    def _draw_toolbar(self):
        rect = pygame.Rect(0, 0, self.width, TOOLBAR_HEIGHT)
        draw_panel_background(self.screen, rect, DARK_GRAY, GRAY)

        playback = self.session.playback
        state = "PLAYING" if playback.is_playing else "PAUSED"
        clip = self.session.current_clip or "-"
        status = (f"{EVENT_EDITOR_NAME_VERSION}  |  {clip}  |  {playback.current_time:.2f}s / "
                  f"{self.session.duration:.2f}s  |  {state}  |  x{playback.speed:.1f}  |  "
                  f"Zoom {self.session.mapper.zoom:.1f}  |  {len(self.session.events)} event(s)")
        self.screen.blit(self.small_font.render(status, True, WHITE), (10, 8))

    def run(self):
        """Main run loop"""
        running = True
        while running:
            dt = self.clock.tick(FPS) / 1000.0
            running = self.handle_events()
            self.update(dt)
            self.draw()

        pygame.quit()
