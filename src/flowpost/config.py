"""
Configuration & Constants
=========================
Central registry for field names and numeric defaults used by the engine.

Exports:
    VELOCITY_FIELD (str): Point-data vector field used by the gradient engine.
    FLOW_REGION_FIELD, SECONDARY_SDF_FIELD (str): Prerequisites of the classifier.
    HUE_RANGE (tuple): Hue ramp of the lookup table, blue to red.
"""
from typing import Tuple

# Field names
VELOCITY_FIELD: str = "U"
FLOW_REGION_FIELD: str = "flowRegion"
SECONDARY_SDF_FIELD: str = "sdf2"
SIGNED_DISTANCE_FIELD: str = "sdf1"
GRADIENTS_FIELD: str = "gradients"
VORTICITY_FIELD: str = "vorticity"
VALID_POINT_MASK: str = "vtkValidPointMask"

# Streamline integration (cell-length units)
INITIAL_INTEGRATION_STEP: float = 0.5
MINIMUM_INTEGRATION_STEP: float = 0.1

# Lookup table
HUE_RANGE: Tuple[float, float] = (0.667, 0.0)
TABLE_VALUES: int = 256

# Boundary surface filter (vtkDataSetSurfaceFilter)
SURFACE_ALGORITHM: str = "dataset_surface"

# Integration
EXTENT_TOLERANCE: float = 1e-12

# Accepted enum-like arguments
COMPONENTS: Tuple[str, ...] = ("surface", "plane", "streamlines")
INTEGRATION_TARGETS: Tuple[str, ...] = ("grid", "component")
OPERATIONS: Tuple[str, ...] = ("gradients", "vorticity")
