"""Source image preparation.

Modules:
    - loader: Decode any Pillow-readable file to grayscale, percentage rescaling

Workflow:
    1. Raw image → EXIF-upright grayscale uint8 (H, W)
    2. Optional resample by scale_percent
    3. Hand off to renderer.grid
"""
