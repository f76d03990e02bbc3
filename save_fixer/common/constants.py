"""Constants used throughout the application."""

# Entity config asset identifying a rail drone
RAIL_DRONE_CONFIG_PATH = "/Game/Chimera/Drones/DA_RailDroneConfig.DA_RailDroneConfig"

# Type tag of the fragment carrying a drone's movement state
LOGISTICS_FRAGMENT_PREFIX = "/Script/Chimera.CrLogisticsAgentFragment"

# Path to the entities map inside a save document
ENTITIES_PATH = ("itemData", "Mass", "entities")

# zlib header written in front of the deflate stream (deflate, 32K window, level 9)
ZLIB_HEADER = b"\x78\x9c"
ZLIB_MARKER = 0x78

# Fix policies, keyed by their CLI name
POLICY_SELECTIVE = "selective"
POLICY_REMOVE_ALL = "remove-all"
POLICY_NAMES = (POLICY_SELECTIVE, POLICY_REMOVE_ALL)

DEFAULT_POLICY = POLICY_SELECTIVE
DEFAULT_PROGRESS_INTERVAL = 50
DEFAULT_COMPRESSION_LEVEL = 9
