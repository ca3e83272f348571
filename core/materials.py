from typing import Tuple

# Define a type hint for colors (e.g., RGBA)
ColorTuple = Tuple[int, int, int, int]

WALL_COLOR: ColorTuple = (175, 177, 174, 255)  # Brushed steel gray
CONE_COLOR: ColorTuple = (43, 126, 193, 255)  # Acoustic blue
FLATTENED_CONE_COLOR: ColorTuple = (15, 15, 0, 255)  # Vent black
FLOOR_COLOR: ColorTuple = (238, 238, 238, 255)
LABEL_COLOR: ColorTuple = (255, 255, 255, 255)


def color_to_rgb(color: ColorTuple) -> Tuple[float, float, float]:
    """Converts a 0-255 RGBA tuple to a 0-1 RGB tuple for the renderer."""
    return tuple(channel / 255.0 for channel in color[:3])
