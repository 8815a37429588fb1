DOMAIN = "guardian"
VERSION = "0.3.0"

# Contact store keys
POLICE_KEY = "guardian_police"
FIRE_KEY = "guardian_fire"
FAMILY_KEY = "guardian_family"
NAME_KEY = "guardian_name"
SESSION_ID_KEY = "guardian_session_id"

DEFAULT_NAME = "Unknown"

# Permission gate (seconds)
PERMISSION_REQUEST_TIMEOUT = 15     # single foreground permission/position request
PERMISSION_POLL_INTERVAL = 1.5      # status poll while the recovery prompt is open
PERMISSION_MAX_WAIT = 120           # poll ceiling; the prompt stays open afterwards

BLOCKED_MESSAGE = "Location permission is blocked. Please enable Location for this site and press Retry."
STILL_BLOCKED_MESSAGE = "Still blocked. Open Settings then Retry."

# Best-effort targets for "Open Settings", tried in order
SETTINGS_URLS = (
    "chrome://settings/content/location",
    "edge://settings/content/location",
    "about:preferences#privacy",
)
SETTINGS_HELP_URL = "https://support.google.com/chrome/answer/142065?hl=en"

# Live tracking
TRACKING_INTERVAL = 12              # seconds between live-location pushes
SESSION_ID_LENGTH = 10
TRACK_PAGE = "track.html"
DEFAULT_ORIGIN = "http://localhost:8000"

# Dispatch timings (seconds)
DIAL_DELAY = 0.9                    # let the dial intent take effect before the messaging handoff
MESSAGING_FALLBACK_DELAY = 1.2      # app-scheme link → web link
ACK_DURATION = 6                    # "Sent" chip lifetime

# Link formats
GOOGLE_MAPS_URL = "https://maps.google.com/?q={lat},{lon}"
OSM_URL = "https://www.openstreetmap.org/?mlat={lat}&mlon={lon}#map=18/{lat}/{lon}"
WHATSAPP_APP_URL = "whatsapp://send?phone={phone}&text={text}"
WHATSAPP_WEB_URL = "https://wa.me/{phone}?text={text}"
DIAL_URL = "tel:{number}"

COMBINED_LABEL = "ALL - Combined"
TEST_LABEL = "TEST"
SHARE_TITLE = "Emergency"

# Remote feed HTTP
FEED_REQUEST_TIMEOUT = 5            # seconds, multiplied by attempt number for each retry
FEED_REQUEST_ATTEMPTS = 3
