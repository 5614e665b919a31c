TRAJECTORY_TYPES = ["Line", "Arc", "Circle"]

# DXF entity names recorded on taught trajectories
LINE_ENTITY = "LINE"
ARC_ENTITY = "ARC"
CIRCLE_ENTITY = "CIRCLE"
POLYLINE_ENTITY = "LWPOLYLINE"

# Controller type codes
PRIMITIVE_CODES = {"Line": 1, "Circle": 2, "Arc": 3}
UNKNOWN_PRIMITIVE_CODE = 0

# Nozzle flag codes (on, off)
UPPER_GAS_CODES = (11, 10)
UPPER_LIQUID_CODES = (12, 10)
LOWER_GAS_CODES = (21, 20)
LOWER_LIQUID_CODES = (22, 20)
RESERVED_VALUE_COUNT = 3

# Tolerances
CIRCLE_TOLERANCE = 1e-9
ARC_TOLERANCE = 1e-6
BULGE_TOLERANCE = 1e-6
MATCH_TOLERANCE = 1e-3
CHORD_EPSILON = 1e-9
MAX_BULGE_RADIUS = 1e9
RADIUS_RELATIVE_TOLERANCE = 0.001  # 0.1 % of the radius
CLOSING_POINT_TOLERANCE = 1e-6
KEY_DECIMALS = 6

# Discretization
DEFAULT_RESOLUTION_DEGREES = 15.0
ARBITRARY_AXIS_THRESHOLD = 1.0 / 64.0
CIRCLE_SELECTION_ANGLES = (0.0, 120.0, 240.0)

# Spraying
DEFAULT_SPRAY_SPEED = 2.0  # m/s
MM_PER_M = 1000.0
MIN_PATH_LENGTH = 1e-9  # m

# Modbus defaults for the controller link
DEFAULT_MODBUS_HOST = "127.0.0.1"
DEFAULT_MODBUS_PORT = 502

# Helper layers that never count towards the drawing extents
IGNORED_LAYERS = [
    "DEFPOINTS",
    "AXES",
    "CONSTRUCTION",
    "0_REF",
    "REFERENCE",
    "DIMENSIONS",
    "TEXT_NOTES",
    "VIEWPORT",
]
