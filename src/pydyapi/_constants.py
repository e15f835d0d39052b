"""Internal constants shared across the library."""

US_BASE_URL = "https://dy-api.com/v2"
EU_BASE_URL = "https://dy-api.eu/v2"

API_KEY_HEADER = "dy-api-key"
JSON_CONTENT_TYPE = "application/json"

# Cookie names the serve endpoints hand back in the ``cookies`` array.
USER_ID_COOKIE = "_dyid_server"
SESSION_ID_COOKIE = "_dyjsession"

# Storage key under which the server-assigned user id is persisted.
USER_ID_STORAGE_KEY = USER_ID_COOKIE
