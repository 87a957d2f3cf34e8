"""Internal constants shared across the library."""

# ------------------------------------------------------------------
# Ultralight wire format
# ------------------------------------------------------------------

PAIR_SEPARATOR = "|"
COMMAND_SEPARATOR = "@"

ACK_OK = " OK"
ACK_NOT_OK = " NOT OK"

# ------------------------------------------------------------------
# Attribute keys and values
# ------------------------------------------------------------------

KEY_STATUS = "s"
KEY_LUMINOSITY = "l"
KEY_COUNT = "c"

STATUS_ON = "ON"
STATUS_OFF = "OFF"
STATUS_OPEN = "OPEN"
STATUS_CLOSED = "CLOSED"
STATUS_LOCKED = "LOCKED"

# ------------------------------------------------------------------
# Encoded device states
# ------------------------------------------------------------------

DOOR_LOCKED = "s|LOCKED"
DOOR_OPEN = "s|OPEN"
DOOR_CLOSED = "s|CLOSED"

BELL_OFF = "s|OFF"
BELL_ON = "s|ON"

LAMP_ON = "s|ON|l|1750"
LAMP_OFF = "s|OFF|l|0"

INITIAL_COUNT = "c|0"

# ------------------------------------------------------------------
# Lamp luminosity model
# ------------------------------------------------------------------

LUMINOSITY_MIN = 0
LUMINOSITY_MAX = 2000
LUMINOSITY_BOOST_BELOW = 1900
LUMINOSITY_DIM_ABOVE = 1000
LUMINOSITY_DEFAULT = 1000
LUMINOSITY_STEP = 30

# A draw in [1, 10] strictly greater than this threshold "succeeds".
MOTION_THRESHOLD = 3
LAMP_DIM_THRESHOLD = 3
DOOR_THRESHOLD_LAMP_ON = 3
DOOR_THRESHOLD_LAMP_OFF = 6

# ------------------------------------------------------------------
# Publish/subscribe topic markers
# ------------------------------------------------------------------

TOPIC_COMMAND = "cmd"
TOPIC_COMMAND_EXE = "cmdexe"
TOPIC_ATTRS = "attrs"

DEFAULT_MQTT_PORT = 1883
DEFAULT_MQTTS_PORT = 8883
