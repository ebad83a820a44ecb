"""sinewave-art: render raster images as brightness-modulated sine waves.

Each band of grid rows becomes one continuous sine trace whose amplitude
swells over dark regions and settles to a small floor over bright ones,
giving an oscilloscope-style line drawing.

Architecture layers (strict one-way dependency):
    cli → {data_pipeline, renderer} → utils

Key invariants:
    - Images are grayscale uint8 (H, W) between loader and renderer
    - Geometry in pixels of the scaled image, image frame (top-left, +Y down)
    - Configs validated once (pydantic), frozen afterwards
    - Outputs written atomically: one complete file or none
"""

__version__ = "0.1.0"
