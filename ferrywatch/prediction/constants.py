"""
Fleet, terminal and timing constants for the Ċirkewwa - Mġarr channel
"""
from ferrywatch.models.vessel import Terminal, TerminalCoordinates

VESSEL_NAMES = {
    248692000: "MV Ta' Pinu",
    237593100: "MV Nikolaos",
    215145000: "MV Malita",
    248928000: "MV Gaudos",
}

# The vessel users want to avoid
DISTINGUISHED_MMSI = 237593100
DISTINGUISHED_SHORT_NAME = "Nikolaos"

TERMINALS = {
    Terminal.CIRKEWWA: TerminalCoordinates(lat=35.989, lon=14.329),
    Terminal.MGARR: TerminalCoordinates(lat=36.025, lon=14.299),
}

TERMINAL_LABELS = {
    Terminal.CIRKEWWA: "Ċirkewwa",
    Terminal.MGARR: "Mġarr",
}

# Distance threshold for considering vessel "docked" (in km)
DOCKED_RADIUS_KM = 0.5

# Speed threshold for considering vessel "moving" (in tenths of knots, so 10 = 1 knot)
MOVING_SPEED_THRESHOLD = 10

# SE direction (roughly 90-180) heads toward Cirkewwa, everything else toward Mgarr
HEADING_TO_CIRKEWWA_MIN = 90
HEADING_TO_CIRKEWWA_MAX = 180

# Minutes
AVERAGE_CROSSING_TIME = 25
BUFFER_TIME = 15  # parking and boarding
TURNAROUND_TIME = 15
ROUND_TRIP_TIME = 2 * (AVERAGE_CROSSING_TIME + TURNAROUND_TIME)

# Car-equivalent deck space
FERRY_CAPACITIES = {
    "MV Ta' Pinu": 138,
    "MV Gaudos": 138,
    "MV Malita": 138,
    "MV Nikolaos": 160,
}
DEFAULT_FERRY_CAPACITY = 100
TRUCK_CAR_EQUIVALENT = 3
MOTORBIKE_CAR_EQUIVALENT = 0.25

# Straight-line drive time estimate
ROAD_WINDING_FACTOR = 1.3
AVERAGE_DRIVE_SPEED_KMH = 40

LOCAL_TIMEZONE = "Europe/Malta"
MINUTES_PER_DAY = 24 * 60
