"""HTTP interface for repair orders."""

from api.base import (
    APIError,
    APIMeta,
    APIResponse,
    success_response,
    error_response,
    ErrorCodes,
    request_id_of,
)
