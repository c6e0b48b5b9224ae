"""
Uniform response envelope: {success, message, data, timestamp}
"""
from typing import Any, Optional

from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from tinylearn.utils.pagination import Page
from tinylearn.utils.timeutils import isoformat_utc, utcnow


def envelope(success: bool, message: str, data: Any = None, **extra) -> dict:
    body = {
        "success": success,
        "message": message,
        "data": data,
        "timestamp": isoformat_utc(utcnow()),
    }
    body.update({k: v for k, v in extra.items() if v is not None})
    return body


def success_response(data: Any = None, message: str = "Success", status_code: int = 200) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=jsonable_encoder(envelope(True, message, data)))


def error_response(status_code: int, message: str, error_code: Optional[str] = None,
                   errors: Optional[list] = None, error: Optional[dict] = None,
                   headers: Optional[dict] = None) -> JSONResponse:
    body = envelope(False, message, None, error_code=error_code, errors=errors, error=error)
    return JSONResponse(status_code=status_code, content=jsonable_encoder(body), headers=headers)


def page_payload(page: Page, key: str, serializer) -> dict:
    return {
        key: [serializer(item) for item in page.items],
        "pagination": page.pagination(),
    }
