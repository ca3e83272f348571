"""
Enclosure Generator Constants Module

Centralized constants for the enclosure generator.
Extracts magic numbers and repeated values from across the codebase.

Usage:
    from core.constants import DOOR_WIDTH, DEFAULT_CONE_RADIUS
"""

import math

# =============================================================================
# Door Opening
# =============================================================================

DOOR_WIDTH = 1.05
DOOR_HEIGHT = 2.0
# Door volume is thicker than the wall so the cut faces never coincide
DOOR_THICKNESS_MARGIN = 0.1

# =============================================================================
# Cone Tiling
# =============================================================================

DEFAULT_CONE_RADIUS = 0.125
DEFAULT_CONE_HEIGHT = 0.25
DEFAULT_CONE_SEGMENTS = 4  # Square pyramid footprint
FLATTENED_CONE_HEIGHT = 0.001

# Three-style cones start their base ring at -45 degrees so a 4-segment
# footprint is an axis-aligned square of side sqrt(2) * radius.
CONE_THETA_START = -math.pi / 4

# Central region of floor/roof grids, in eighths of the usable span
REGION_DIVISIONS = 8
REGION_LOWER_MARK = 3
REGION_UPPER_MARK = 5

# =============================================================================
# Floor Plane
# =============================================================================

FLOOR_PLANE_OFFSET = 0.5  # Distance below the enclosure base
FLOOR_DIVISION_SIZE = 2.0  # World units per division
FLOOR_TEXTURE_DIVISOR = 10.0  # divisions / divisor = texture repeat

# =============================================================================
# Anchors
# =============================================================================

MODEL_ANCHOR_INSET = 1.25  # Multiplier of wall thickness
MODEL_ANCHOR_ROTATION = (math.pi, -math.pi / 4, 0.0)
LABEL_ANCHOR_ROTATION = (0.0, math.pi, 0.0)
LABEL_TEXT_SIZE = 0.25
LABEL_TEXT_DEPTH = 0.05

# =============================================================================
# Default Enclosure
# =============================================================================

DEFAULT_WIDTH = 25.0
DEFAULT_LENGTH = 10.0
DEFAULT_HEIGHT = 5.0
DEFAULT_THICKNESS = 0.5

COMPACT_WIDTH = 4.0
COMPACT_LENGTH = 4.0
COMPACT_HEIGHT = 3.0
COMPACT_THICKNESS = 0.5

# =============================================================================
# Viewport Helpers
# =============================================================================

GRID_HELPER_SIZE = 10.0
GRID_HELPER_DIVISIONS = 10
