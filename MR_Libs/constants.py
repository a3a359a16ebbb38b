"""
Constants and configuration values for Mask Refiner.

This module centralizes all constant values, magic numbers, and
configuration settings used throughout the application.
"""

# Brush constants
BRUSH_MODE_ERASE = "erase"
BRUSH_MODE_RESTORE = "restore"
BRUSH_MODES = (BRUSH_MODE_ERASE, BRUSH_MODE_RESTORE)
DEFAULT_BRUSH_MODE = BRUSH_MODE_ERASE
DEFAULT_BRUSH_SIZE = 50
MIN_BRUSH_SIZE = 10
MAX_BRUSH_SIZE = 200
BRUSH_SIZE_STEP = 10

# Selection marker colors (Qt/PIL color strings)
ERASE_MARKER_COLOR = "#ef4444"
RESTORE_MARKER_COLOR = "#22c55e"

# View constants
DEFAULT_ZOOM = 1.0
MIN_ZOOM = 0.1
MAX_ZOOM = 5.0
ZOOM_IN_FACTOR = 1.1
ZOOM_OUT_FACTOR = 0.9
ZOOM_BUTTON_STEP = 0.1

# Layer opacities (0.0-1.0)
GHOST_LAYER_OPACITY = 0.3
SELECTION_LAYER_OPACITY = 0.4

# Smart selection
DEFAULT_COLOR_TOLERANCE = 80.0
PARALLEL_PIXEL_THRESHOLD = 1_000_000
DEFAULT_MAX_WORKERS = 4

# History
MAX_HISTORY_DEPTH = 10

# Upload / download
SUPPORTED_UPLOAD_FORMATS = {".png", ".jpg", ".jpeg", ".webp"}
MAX_UPLOAD_BYTES = 10 * 1024 * 1024
UPLOAD_FILE_FILTER = "Images (*.png *.jpg *.jpeg *.webp)"
DEFAULT_EXPORT_FILENAME = "removed-background.png"
DEFAULT_OUTPUT_FORMAT = "PNG"

# Messages
BACKGROUND_REMOVAL_ERROR = "Failed to remove background. Please try again."

# UI constants
DEFAULT_WINDOW_WIDTH = 1200
DEFAULT_WINDOW_HEIGHT = 820
CHECKERBOARD_TILE_SIZE = 10
CHECKERBOARD_DARK_COLOR = "#18181b"
CHECKERBOARD_LIGHT_COLOR = "#27272a"
CURSOR_CROSSHAIR_HALF = 5
CURSOR_LINE_WIDTH = 2

# Default rembg model
DEFAULT_REMBG_MODEL = "isnet-general-use"
