"""
Streaming client defaults.

Central location for default values and the environment variable names
read by StreamingOptions.from_env().
"""

# Backend location
DEFAULT_API_BASE_URL = "http://localhost:8000"
DEFAULT_STREAM_ENDPOINT = "/llm/stream"
DEFAULT_TIMEOUT_SECONDS = 60.0

# Environment variables
API_BASE_URL_ENV_VAR = "LLM_STREAM_API_BASE_URL"
STREAM_ENDPOINT_ENV_VAR = "LLM_STREAM_ENDPOINT"
TIMEOUT_ENV_VAR = "LLM_STREAM_TIMEOUT"

# Headers sent with every streaming request
STREAM_REQUEST_HEADERS = {
    "Content-Type": "application/json",
    "Accept": "text/event-stream",
    "Cache-Control": "no-cache",
}

# Frame labels
DEFAULT_EVENT_TYPE = "token"
TOKEN_EVENT_TYPES = ("token", "message", "data")
TOOL_CALL_EVENT_TYPES = ("tool_call", "tool_call_start")
TOOL_RESULT_EVENT_TYPES = ("tool_result", "tool_execution_result")

# Messages
UNKNOWN_STREAM_ERROR = "Unknown streaming error"
EXECUTION_ABORTED = "Execution aborted"
