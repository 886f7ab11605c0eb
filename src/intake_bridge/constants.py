"""
Project-wide constants for the intake backend integration layer
"""  # noqa: D200, D212, D415

# ==============================================================================
# Transport
# ==============================================================================

# Keeps browser-originated calls in the "simple request" profile; the
# Apps Script endpoint does not answer CORS preflight requests.
REQUEST_CONTENT_TYPE = "text/plain;charset=utf-8"

# Query parameter used to defeat intermediate caches on read operations
CACHE_BUST_PARAM = "t"

# Upper bound on raw response text carried into diagnostics
DIAGNOSTIC_SNIPPET_CHARS = 200

# ==============================================================================
# Response classification
# ==============================================================================

PERMISSION_PAGE_MARKERS: tuple[str, ...] = (
    "You need access",
    "You need permission",
    "accounts.google.com/ServiceLogin",
    "<title>Sign in",
)

SCRIPT_CRASH_MARKERS: tuple[str, ...] = (
    "Script function not found",
    "TypeError:",
    "ReferenceError:",
    "Exception:",
)

GENERIC_BACKEND_ERROR = "Backend reported a failure without an error message."

# ==============================================================================
# Degraded mode
# ==============================================================================

FALLBACK_DELAY_SECONDS = 0.8  # avoids an instantaneous flash into demo mode

# ==============================================================================
# Intake submission
# ==============================================================================

_MB = 1024 * 1024

MAX_ATTACHMENT_BYTES = 2 * _MB
DEFAULT_ATTACHMENT_NAME = "image.jpg"
DEFAULT_ATTACHMENT_TYPE = "application/octet-stream"
DATA_URI_BASE64_MARKER = "base64,"

RECOVERY_KEY = "lastSurvey"
DRAFT_KEY = "surveyDraft"
API_URL_KEY = "scriptUrl"
UNKNOWN_PROPERTY_NAME = "Unknown Property"
UNKNOWN_PROPERTY_ADDRESS = "Unknown Address"
EMPTY_NOTES = "N/A"

# Option sets offered by the intake form
SERVICES: tuple[str, ...] = (
    "Countertops - Quartz",
    "Countertops - Granite",
    "Cabinets - Refacing",
    "Cabinets - Replacement",
    "Contract Make-Ready",
    "Tile - Wall",
    "Tile - Flooring",
    "Other: we have many Associate Subs",
)

TIMELINES: tuple[str, ...] = (
    "Emergency",
    "Service - Time Sensitive",
    "Service - Repairs",
    "Consultation",
    "CapEx Budget - Future",
    "CapEx Budget - Surplus",
)

CONTACT_METHODS: tuple[str, ...] = (
    "Phone Call (immediate)",
    "Email Reply",
    "Text Message (SMS)",
    "Schedule Meeting Link",
)

# ==============================================================================
# Generation service
# ==============================================================================

DEFAULT_MODEL = "gemini-2.5-flash"

CHAT_APOLOGY_MESSAGE = "Sorry, I'm having trouble connecting right now."

DEFAULT_COMPANY_NAME = "JES STONE"
DEFAULT_BRAND_NAME = "Jes Stone Remodeling and Granite"
