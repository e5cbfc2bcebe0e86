"""Log field names shared by every lakeblob backend."""

TIMESTAMP = "timestamp"
LEVEL = "level"
LOGGER = "logger"
MESSAGE = "message"
EXCEPTION = "exception"
EVENT = "event"

# Public operation events.
PUBLIC_API_INVOCATION_EVENT = "public_api_invocation"
PUBLIC_API_COMPLETION_EVENT = "public_api_completion"
PUBLIC_API_INSTRUMENTATION_FAILURE_EVENT = "public_api_instrumentation_failure"

COMPONENT_ID = "component_id"
API_NAME = "api_name"
SUCCESS = "success"
DURATION_MS = "duration_ms"
ERRORS = "errors"
ERROR_CATEGORY = "error_category"
ERRNO = "errno"
STAGE = "stage"
CONCERN = "concern"

# Per-request correlation, passed through ``extra=`` on remote call logs.
REMOTE_OP = "remote_op"
REMOTE_URL = "remote_url"
REQUEST_ID = "request_id"
RESPONSE_ID = "response_id"
STATUS_CODE = "status_code"

CORRELATION_FIELDS = (REMOTE_OP, REMOTE_URL, REQUEST_ID, RESPONSE_ID, STATUS_CODE)

SERVICE = "service"
ENVIRONMENT = "environment"
