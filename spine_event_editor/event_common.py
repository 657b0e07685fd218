from dataclasses import dataclass
from typing import Tuple

import pygame


@dataclass
class InputSnapshot:
    """Input state sampled once per frame"""
    mouse_pos: Tuple[int, int] = (0, 0)
    left: bool = False
    right: bool = False
    wheel: int = 0  # Notches this frame, positive = away from the user
    scroll_left: bool = False
    scroll_right: bool = False
    over_timeline: bool = False
    over_viewport: bool = False


class BaseEventHandler:
    """Base class for common event handling patterns"""

    def __init__(self):
        self.key_handlers = {}
        self.setup_common_keys()

    def setup_common_keys(self):
        """Setup common keyboard shortcuts"""
        self.key_handlers.update({
            (pygame.K_s, pygame.KMOD_CTRL): self.save_project,
            (pygame.K_DELETE, None): self.delete_selected,
            (pygame.K_SPACE, None): self.toggle_playback,
            (pygame.K_ESCAPE, None): self.cancel_action,
        })

    def handle_keydown(self, event):
        """Handle keydown events using registered handlers"""
        ctrl_pressed = bool(getattr(event, "mod", 0) & pygame.KMOD_CTRL)
        key_combo = (event.key, pygame.KMOD_CTRL if ctrl_pressed else None)

        if key_combo in self.key_handlers:
            self.key_handlers[key_combo]()
            return True
        return False

    # These methods should be overridden by subclasses
    def save_project(self): pass

    def delete_selected(self): pass

    def toggle_playback(self): pass

    def cancel_action(self): pass
