"""
Lambda handler responsible for minting signed variant URLs.
"""

import json
from typing import Any

from aws_lambda_powertools import Logger, Metrics, Tracer
from aws_lambda_powertools.utilities.typing import LambdaContext
from pydantic import ValidationError

from core.utils.decorators import api_gateway_handler
from core.utils.response import ResponseBuilder
from core.utils.validators import sanitize_validation_errors, validate_request

from .models import SignUrlRequest, SignUrlResponse
from .service import SignUrlService

logger = Logger(UTC=True)
tracer = Tracer()
metrics = Metrics()


@api_gateway_handler
@tracer.capture_lambda_handler
@metrics.log_metrics()
def handler(event: dict[str, Any], context: LambdaContext) -> dict[str, Any]:
    """
    Mint a time-limited URL for the original, preview or thumb tier.

    Expected body:
    {
        "file_key": "img_<hex>",
        "tier": "preview",          # optional, default preview
        "expiry_minutes": 30        # optional, default from configuration
    }

    Args:
        event: API Gateway event payload.
        context: AWS Lambda runtime context.

    Returns:
        API Gateway-compatible response with ``url`` and ``expires``.
    """
    logger.info(
        "Received signed URL request",
        extra={
            "http_method": event.get("httpMethod"),
            "path": event.get("path"),
            "request_id": getattr(context, "aws_request_id", None),
        },
    )

    try:
        body = json.loads(event.get("body") or "{}")
    except json.JSONDecodeError as exc:
        logger.exception("Invalid JSON body received", exc_info=exc)
        return ResponseBuilder.bad_request(message="Invalid JSON body")

    if not isinstance(body, dict):
        return ResponseBuilder.bad_request(message="Invalid JSON body")

    try:
        request = validate_request(SignUrlRequest, body)
    except ValidationError as exc:
        logger.error(
            "Request validation failed",
            extra={"errors": exc.errors()},
        )
        return ResponseBuilder.bad_request(
            message="Invalid request params",
            details={"errors": sanitize_validation_errors(exc.errors())},
        )

    signed = SignUrlService().sign(
        request.file_key,
        tier=request.tier,
        ttl_minutes=request.expiry_minutes,
    )

    response = SignUrlResponse(
        file_key=request.file_key,
        tier=request.tier,
        url=signed.url,
        expires=signed.expires,
        expires_at_ms=signed.expires_at_ms,
    )

    return ResponseBuilder.ok(response.model_dump(mode="json"))
