"""Default configurations for depgraph-layout."""

import math

# Simulation budget
DEFAULT_ITERATIONS = 300  # Fixed number of ticks, no convergence check
DEFAULT_ALPHA = 1.0
DEFAULT_ALPHA_MIN = 0.001
DEFAULT_ALPHA_TARGET = 0.0
DEFAULT_VELOCITY_DECAY = 0.4  # Fraction of velocity lost per tick
DEFAULT_SEED = 1  # Seed of the jiggle generator

# Phyllotaxis initial placement
INITIAL_RADIUS = 10.0
INITIAL_ANGLE = math.pi * (3 - math.sqrt(5))  # Golden angle

# Link force
LINK_DISTANCE = 50.0
LINK_STRENGTH = 1.0
LINK_ITERATIONS = 10

# Collision force
COLLIDE_PADDING = 1.0  # Added to the rendered radius
COLLIDE_STRENGTH = 1.0
COLLIDE_ITERATIONS = 1

# One-axis centering bias
BIAS_AXIS = "x"
BIAS_STRENGTH = 0.05

# Many-body force
CHARGE_STRENGTH = -100.0  # Negative = repulsive
CHARGE_THETA = 0.9  # Barnes-Hut accuracy
CHARGE_DISTANCE_MIN = 1.0
CHARGE_DISTANCE_MAX = math.inf

# Centering force
CENTER_STRENGTH = 1.0

# Size scale
SCALE_DOMAIN_MIN = 1.0
SCALE_RANGE_MIN = 5.0
SCALE_RANGE_MAX = 30.0

# Bias axes accepted by the configuration
BIAS_AXES = ("x", "y")

# Path segment marking third-party modules
VENDOR_DIRECTORY = "node_modules"
