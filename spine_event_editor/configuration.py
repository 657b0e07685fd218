SCREEN_WIDTH = 1400
SCREEN_HEIGHT = 800
FPS = 60

# Layout
ANIMATION_LIST_WIDTH = 200
PROPERTY_PANEL_WIDTH = 300
TIMELINE_HEIGHT = 140
TOOLBAR_HEIGHT = 30

# Colors
BLACK = (0, 0, 0)
WHITE = (255, 255, 255)
GRAY = (128, 128, 128)
DARK_GRAY = (50, 50, 50)
LIGHT_GRAY = (200, 200, 200)
RED = (255, 0, 0)
GREEN = (0, 255, 0)
BLUE = (0, 0, 255)
YELLOW = (255, 255, 0)
CYAN = (0, 255, 255)
ORANGE = (255, 165, 0)
PURPLE = (160, 32, 240)

# Frame events
ASSUMED_FRAME_RATE = 30
DEFAULT_EVENT_NAME = "New Event"
DEFAULT_FIND_TOLERANCE = 0.1
DEFAULT_SHAPE_SIZE = 50.0
EVENT_FILE_SUFFIX = "_events.json"

# Timeline
MIN_ZOOM = 0.1
MAX_ZOOM = 10.0
WHEEL_ZOOM_STEP = 0.1
KEYBOARD_SCROLL_STEP = 5
TICKS_PER_VIEW = 20
PLAYHEAD_HIT_WIDTH = 10
EVENT_MARKER_HIT_WIDTH = 10
FALLBACK_DURATION = 1.0

# Playback
MIN_PLAYBACK_SPEED = 0.1
MAX_PLAYBACK_SPEED = 10.0
PLAYBACK_SPEED_STEP = 0.1

# Attack shape editing
DRAG_HANDLE_SIZE = 8
MIN_SHAPE_SIZE = 10.0
ROTATION_HANDLE_DISTANCE = 20.0

# Toast
TOAST_DURATION = 3.0
