"""
MR_Libs - Mask Refiner Library Modules

This package contains core functionality for the Mask Refiner project,
organized into specialized sub-packages:

- RasterLib: Raster models, decode/encode helpers, coordinate mapping and layer compositing
- SelectionLib: Brush painting into the selection buffer and smart selection resolution
- SessionLib: Undo/redo history, the editing session and the input state machine
- EditorLib: PyQt5 editor window
"""

__version__ = "0.1.0"
