"""Internal constants shared across the library."""

API_URL = "http://localhost:8080"
WS_URL = "ws://localhost:8080/ws"
API_KEY_HEADER = "X-Geo-Key"
API_KEY_QUERY_PARAM = "key"

# ------------------------------------------------------------------
# Endpoints
# ------------------------------------------------------------------

NEARBY_DRIVERS_ENDPOINT = "/drivers/nearby"
DRIVER_ROUTE_ENDPOINT = "/drivers/{device_id}/route"
GEOFENCES_ENDPOINT = "/geofences"
GEOFENCE_ENDPOINT = "/geofences/{geofence_id}"

# ------------------------------------------------------------------
# Console defaults
# ------------------------------------------------------------------

DEFAULT_CENTER_LATITUDE = 28.6353
DEFAULT_CENTER_LONGITUDE = -106.0889
DEFAULT_SEARCH_RADIUS_M = 50_000.0
ALERT_FEED_CAPACITY = 4

#: Smallest polygon an operator may keep or save.
MIN_POLYGON_VERTICES = 3

#: Prefix for registry entries created from the stream for devices the
#: bulk fetch never reported.
LIVE_DRIVER_ID_PREFIX = "live-"
