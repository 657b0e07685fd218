import pygame

from .configuration import *
from .shape_drag import DragOperation


def draw_panel_background(screen, rect, color=DARK_GRAY, border_color=GRAY, border_width=1):
    """Draw a standard panel background"""
    pygame.draw.rect(screen, color, rect)
    pygame.draw.rect(screen, border_color, rect, border_width)


def draw_text_lines(screen, font, lines, start_pos, color=WHITE, line_height=20):
    """Draw multiple lines of text"""
    x, y = start_pos
    for line in lines:
        if line:  # Skip empty lines
            text_surface = font.render(line, True, color)
            screen.blit(text_surface, (x, y))
        y += line_height
    return y


def is_in_rect(pos, rect):
    """Check if position is within rectangle"""
    x, y = pos
    return rect.x <= x <= rect.right and rect.y <= y <= rect.bottom


def draw_attack_shape(screen, shape_drag, color=RED, selected=False):
    """Draw the shape held by a ShapeDragController, with handles when selected"""
    shape = shape_drag.shape
    if shape is None:
        return

    if shape.is_circle:
        center = shape_drag.local_to_screen((shape.x, shape.y))
        radius = max(1, int(shape.width * shape_drag.scale))
        pygame.draw.circle(screen, color, (int(center[0]), int(center[1])), radius, 2)
    else:
        outline = [(int(x), int(y)) for x, y in shape_drag.outline()]
        pygame.draw.polygon(screen, color, outline, 2)

    if selected:
        draw_handles(screen, shape_drag)


def draw_handles(screen, shape_drag):
    """Square resize handles plus the round rotate handle"""
    size = shape_drag.handle_size
    active = shape_drag.operation if shape_drag.is_dragging else shape_drag.hover
    handles = shape_drag.handle_positions()

    if DragOperation.ROTATE in handles:
        top = handles[DragOperation.TOP]
        rotate = handles[DragOperation.ROTATE]
        pygame.draw.line(screen, YELLOW, (int(top[0]), int(top[1])), (int(rotate[0]), int(rotate[1])), 1)

    for operation, (x, y) in handles.items():
        color = YELLOW if operation == active else CYAN
        if operation == DragOperation.ROTATE:
            pygame.draw.circle(screen, color, (int(x), int(y)), size // 2 + 1)
        else:
            pygame.draw.rect(screen, color, (int(x) - size // 2, int(y) - size // 2, size, size))
