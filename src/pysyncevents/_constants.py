"""Internal constants shared across the library."""

BASE_URL = "http://127.0.0.1:8384"
USER_AGENT = "pysyncevents"
API_KEY_HEADER = "X-API-Key"

EVENTS_ENDPOINT = "/rest/events"
PING_ENDPOINT = "/rest/system/ping"

#: Seconds between two poll cycles.
EVENT_UPDATE_INTERVAL: float = 15.0

#: Offset store key holding the last processed event id.
OFFSET_KEY = "last_sync_id"

#: Long-poll requests to /rest/events may block for up to 60 s on the daemon.
DEFAULT_REQUEST_TIMEOUT: float = 90.0

# ------------------------------------------------------------------
# Notification text
# ------------------------------------------------------------------

SHORT_DEVICE_ID_LENGTH = 7

DEVICE_REJECTED_TITLE = "Device {device} wants to connect"
FOLDER_REJECTED_TITLE = "Device {device} wants to share folder {folder}"


def short_device_id(device_id: str) -> str:
    """Return the abbreviated form of a device id used in user-facing text."""
    return device_id[:SHORT_DEVICE_ID_LENGTH]
