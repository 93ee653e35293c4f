"""
Lambda handler serving variant files behind the tiered access gate.
"""

from typing import Any

from aws_lambda_powertools import Logger, Metrics, Tracer
from aws_lambda_powertools.utilities.typing import LambdaContext

from core.models.errors import AccessDeniedError, NotFoundError, StorageError
from core.models.image import Access
from core.utils.constants import EXPIRES_QUERY_PARAM, TOKEN_QUERY_PARAM
from core.utils.decorators import api_gateway_handler
from core.utils.response import ResponseBuilder

from .service import AccessGate

logger = Logger(UTC=True)
tracer = Tracer()
metrics = Metrics()


@api_gateway_handler
@tracer.capture_lambda_handler
@metrics.log_metrics()
def handler(event: dict[str, Any], context: LambdaContext) -> dict[str, Any]:
    """
    Serve ``GET /files/{proxy+}``.

    ``thumb/...`` is public. ``preview/...`` and ``original/...`` require the
    ``token`` and ``expires`` query parameters of a URL minted for exactly
    that path; otherwise the response is 401 with ``error`` set to
    ``missing-token``, ``expired`` or ``bad-signature``.

    Args:
        event: API Gateway event payload.
        context: AWS Lambda runtime context.

    Returns:
        Base64-encoded binary response, or a JSON error response.
    """
    path_params = event.get("pathParameters") or {}
    query_params = event.get("queryStringParameters") or {}

    path = path_params.get("proxy")
    if not path:
        return ResponseBuilder.not_found("Image not found")

    logger.info(
        "Received file request",
        extra={
            "path": path,
            "has_token": TOKEN_QUERY_PARAM in query_params,
            "request_id": getattr(context, "aws_request_id", None),
        },
    )

    gate = AccessGate()

    try:
        decision, content, content_type = gate.serve(
            path,
            query_params.get(TOKEN_QUERY_PARAM),
            query_params.get(EXPIRES_QUERY_PARAM),
        )
    except AccessDeniedError as exc:
        logger.info(
            "File access denied",
            extra={"path": path, "reason": exc.reason},
        )
        return ResponseBuilder.unauthorized(exc.message, reason=exc.reason)

    except NotFoundError:
        logger.info("Requested variant does not exist", extra={"path": path})
        return ResponseBuilder.not_found("Image not found")

    except StorageError as exc:
        logger.exception("Variant read failed", extra={"path": path})
        return ResponseBuilder.internal_error(exc.message)

    return ResponseBuilder.variant(
        content,
        content_type=content_type,
        public=decision.access is Access.PUBLIC,
    )
