"""
API Gateway proxy responses for the image handlers.

JSON bodies carry CORS headers and, on errors, ``error``/``message``/
``timestamp``. Variant files go out base64-encoded with a cache policy that
depends on whether the tier is public.
"""

from __future__ import annotations

import base64
import json
from enum import Enum
from http import HTTPStatus
from typing import Any

from core.models.errors import ImageServiceError
from core.utils.constants import (
    CORS_HEADERS,
    CORS_METHODS,
    CORS_ORIGIN,
    DEFAULT_CONTENT_TYPE,
    ERROR_CODE_VALIDATION_FAILED,
    EXPOSE_HEADERS,
    PROTECTED_CACHE_CONTROL,
    PUBLIC_CACHE_CONTROL,
)
from core.utils.time import utc_now_iso

JsonDict = dict[str, Any]


class ResponseBuilder:
    """Factory for API Gateway-compatible HTTP responses."""

    CORS_RESPONSE_HEADERS: dict[str, str] = {
        "Access-Control-Allow-Origin": CORS_ORIGIN,
        "Access-Control-Allow-Headers": CORS_HEADERS,
        "Access-Control-Allow-Methods": CORS_METHODS,
        "Access-Control-Expose-Headers": EXPOSE_HEADERS,
    }

    @classmethod
    def _cors_headers(cls, cors_origin: str | None) -> dict[str, str]:
        headers = dict(cls.CORS_RESPONSE_HEADERS)
        if cors_origin:
            headers["Access-Control-Allow-Origin"] = cors_origin
        return headers

    @classmethod
    def json_response(
        cls,
        status: HTTPStatus,
        body: JsonDict | None = None,
        *,
        request_id: str | None = None,
        cors_origin: str | None = None,
    ) -> JsonDict:
        payload: JsonDict = dict(body or {})
        if request_id:
            payload["request_id"] = request_id

        return {
            "statusCode": status.value,
            "headers": {
                "Content-Type": DEFAULT_CONTENT_TYPE,
                **cls._cors_headers(cors_origin),
            },
            "body": json.dumps(payload),
        }

    @classmethod
    def ok(cls, body: JsonDict, **context: Any) -> JsonDict:
        return cls.json_response(HTTPStatus.OK, body, **context)

    @classmethod
    def created(cls, body: JsonDict, **context: Any) -> JsonDict:
        return cls.json_response(HTTPStatus.CREATED, body, **context)

    @classmethod
    def no_content(cls, *, cors_origin: str | None = None) -> JsonDict:
        """Empty 204, used for CORS preflight."""
        return {
            "statusCode": HTTPStatus.NO_CONTENT.value,
            "headers": {
                "Content-Type": DEFAULT_CONTENT_TYPE,
                **cls._cors_headers(cors_origin),
            },
            "body": "",
        }

    @classmethod
    def error(
        cls,
        *,
        status: HTTPStatus,
        message: str,
        error: str | Enum | None = None,
        details: JsonDict | None = None,
        request_id: str | None = None,
        cors_origin: str | None = None,
    ) -> JsonDict:
        """
        Build an error body.

        ``error`` defaults to the status name (``NOT_FOUND``); enum members
        are written as their value.
        """
        if isinstance(error, Enum):
            error = error.value

        payload: JsonDict = {
            "error": error or status.name,
            "message": message,
            "timestamp": utc_now_iso(),
        }
        if details:
            payload["details"] = details

        return cls.json_response(
            status, payload, request_id=request_id, cors_origin=cors_origin
        )

    @classmethod
    def from_service_error(
        cls,
        exc: ImageServiceError,
        *,
        status: HTTPStatus,
        **context: Any,
    ) -> JsonDict:
        """Render a domain error with its own code; details stay server-side."""
        return cls.error(
            status=status, error=exc.error_code, message=exc.message, **context
        )

    @classmethod
    def bad_request(
        cls, message: str, *, details: JsonDict | None = None, **context: Any
    ) -> JsonDict:
        return cls.error(
            status=HTTPStatus.BAD_REQUEST, message=message, details=details, **context
        )

    @classmethod
    def validation_error(
        cls, *, message: str, details: JsonDict | None = None, **context: Any
    ) -> JsonDict:
        return cls.error(
            status=HTTPStatus.UNPROCESSABLE_ENTITY,
            error=ERROR_CODE_VALIDATION_FAILED,
            message=message,
            details=details,
            **context,
        )

    @classmethod
    def unauthorized(
        cls,
        message: str = "Unauthorized",
        *,
        reason: str | Enum | None = None,
        **context: Any,
    ) -> JsonDict:
        """401 whose ``error`` is the deny reason (``expired`` etc.) when given."""
        return cls.error(
            status=HTTPStatus.UNAUTHORIZED, error=reason, message=message, **context
        )

    @classmethod
    def forbidden(cls, message: str = "Forbidden", **context: Any) -> JsonDict:
        return cls.error(status=HTTPStatus.FORBIDDEN, message=message, **context)

    @classmethod
    def not_found(cls, message: str = "Resource not found", **context: Any) -> JsonDict:
        return cls.error(status=HTTPStatus.NOT_FOUND, message=message, **context)

    @classmethod
    def internal_error(
        cls, message: str = "Internal server error", **context: Any
    ) -> JsonDict:
        return cls.error(
            status=HTTPStatus.INTERNAL_SERVER_ERROR, message=message, **context
        )

    @classmethod
    def variant(
        cls,
        content: bytes,
        *,
        content_type: str,
        public: bool,
        cors_origin: str | None = None,
    ) -> JsonDict:
        """
        Serve variant bytes.

        Public tiers are cacheable; protected tiers are ``private, no-store``.
        """
        headers: dict[str, str] = {
            "Content-Type": content_type,
            "Content-Length": str(len(content)),
            "Cache-Control": PUBLIC_CACHE_CONTROL if public else PROTECTED_CACHE_CONTROL,
            "Access-Control-Expose-Headers": EXPOSE_HEADERS,
        }
        if cors_origin:
            headers.update(cls._cors_headers(cors_origin))

        return {
            "statusCode": HTTPStatus.OK.value,
            "headers": headers,
            "body": base64.b64encode(content).decode("utf-8"),
            "isBase64Encoded": True,
        }
