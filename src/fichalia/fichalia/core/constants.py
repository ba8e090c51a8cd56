"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

APP_NAME = "Fichalia"

DEFAULT_TIMEZONE = "Europe/Madrid"

IN_PROGRESS_LABEL = "En curso..."
PENDING_LABEL = "Pendiente"
NOT_AVAILABLE = "N/A"

DATE_FORMAT_INPUT = "%Y-%m-%d"
DATE_FORMAT_DISPLAY = "%d/%m/%Y"
TIME_FORMAT = "%H:%M:%S"
TIME_FORMAT_SHORT = "%H:%M"

DEFAULT_HISTORY_DAYS = 30
MAPS_URL = "https://www.google.com/maps/search/?api=1&query={lat},{lon}"

# Matches time_entries.address VARCHAR(500).
ADDRESS_MAX_LENGTH = 500
