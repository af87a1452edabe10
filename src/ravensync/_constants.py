"""Internal constants shared across the library."""

USER_AGENT = "ravensync"

AUTH_ENDPOINT = "/auth/token"
RAVENS_ENDPOINT = "/ravens"
GEOFENCES_ENDPOINT = "/geofences"

VIN_DECODE_URL = "https://vpic.nhtsa.dot.gov/api/vehicles/DecodeVin"
#: Placeholder VIN reported by ravens that have not read the vehicle yet.
UNINITIALIZED_VIN = "UNINITIALIZED"
VIN_LENGTH = 17

#: Parallel per-vehicle detail fetches during a sync pass.
DEFAULT_DETAIL_CONCURRENCY = 5

#: Key under which credentials are persisted by the credential store.
CREDENTIALS_STORAGE_KEY = "ravenApiCredentials"

MASK = "********"
UNNAMED_VEHICLE = "Unnamed Vehicle"
