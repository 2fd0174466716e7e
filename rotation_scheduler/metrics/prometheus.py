# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Prometheus metrics — single source of truth for all metric objects.
Imported by services and middleware. Never instantiated in controllers.
"""

from prometheus_client import Counter, Gauge, Histogram

# ── HTTP Metrics (used by middleware) ──
REQUEST_COUNT = Counter(
    "rotation_requests_total",
    "Total HTTP requests to rotation service",
    ["method", "endpoint", "status"],
)
REQUEST_LATENCY = Histogram(
    "rotation_request_duration_seconds",
    "Request latency in seconds",
    ["method", "endpoint"],
)
HTTP_ERRORS = Counter(
    "rotation_http_errors_total",
    "Total HTTP error responses",
    ["method", "endpoint", "status"],
)

# ── Business Metrics (updated by service layer only) ──
ASSIGNMENTS_TOTAL = Counter(
    "rotation_assignments_total",
    "Total rotations assigned by the scheduler",
    ["group"],
)
SELECTION_FAILURES = Counter(
    "rotation_selection_failures_total",
    "Selector runs that found no assignee",
    ["kind"],
)
CALENDAR_CALLS = Counter(
    "rotation_calendar_calls_total",
    "Calendar API calls by operation and outcome",
    ["operation", "outcome"],
)
CREDENTIAL_REFRESHES = Counter(
    "rotation_credential_refreshes_total",
    "OAuth credential refreshes",
    ["outcome"],
)
SWAPS_TOTAL = Counter(
    "rotation_swaps_total",
    "Total rotation swaps",
)
CANCELLATIONS_TOTAL = Counter(
    "rotation_cancellations_total",
    "Total rotations cancelled",
)
MEMBERS_REMOVED = Counter(
    "rotation_members_removed_total",
    "Total members removed from groups",
)
SKIP_WEEKS_TOTAL = Counter(
    "rotation_skip_weeks_total",
    "Total skip weeks recorded",
)
ACTIVE_GROUPS = Gauge(
    "rotation_active_groups",
    "Number of rotation groups",
)
