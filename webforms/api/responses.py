from fastapi.responses import JSONResponse

from webforms.core.errors import FormError
from webforms.services.pipeline import Success

"""
RESPONSE BUILDER => ONE {success, message} BODY PER OUTCOME

200 success, 400 any pipeline failure, 403 method gate
"""

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "X-XSS-Protection": "1; mode=block",
}


def build_response(outcome: Success | FormError) -> JSONResponse:
    return JSONResponse(
        content={
            "success": isinstance(outcome, Success),
            "message": outcome.message,
        },
        status_code=outcome.status_code,
        headers=SECURITY_HEADERS,
    )
