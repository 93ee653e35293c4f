"""
Lambda handler responsible for image upload and tier derivation.
"""

from http import HTTPStatus
import json
from typing import Any

from aws_lambda_powertools import Logger, Metrics, Tracer
from aws_lambda_powertools.utilities.typing import LambdaContext
from pydantic import ValidationError as PydanticValidationError

from core.models.errors import DecodeError, StorageError, ValidationError
from core.utils.decorators import api_gateway_handler
from core.utils.response import ResponseBuilder
from core.utils.validators import sanitize_validation_errors, validate_request

from .models import (
    BatchUploadRequest,
    BatchUploadResponse,
    ImageUploadRequest,
    ImageUploadResponse,
    UploadFailure,
)
from .service import DerivationService

logger = Logger(UTC=True)
tracer = Tracer()
metrics = Metrics()


def _handle_batch(body: dict[str, Any]) -> dict[str, Any]:
    try:
        request = validate_request(BatchUploadRequest, body)
    except PydanticValidationError as exc:
        logger.error("Batch request validation failed", extra={"errors": exc.errors()})
        return ResponseBuilder.bad_request(
            message="Invalid request params",
            details={"errors": sanitize_validation_errors(exc.errors())},
        )

    service = DerivationService()
    uploads = [
        (item.image_name, service.decode_file(item.file)) for item in request.files
    ]
    outcomes = service.derive_many(uploads)

    derived = [o for o in outcomes if not isinstance(o, UploadFailure)]
    failures = [o for o in outcomes if isinstance(o, UploadFailure)]

    response = BatchUploadResponse(
        files=derived,
        errors=failures,
        total=len(outcomes),
        success_count=len(derived),
        error_count=len(failures),
    ).model_dump(mode="json")

    if derived:
        return ResponseBuilder.created(response)

    return ResponseBuilder.error(
        status=HTTPStatus.UNPROCESSABLE_ENTITY,
        message="No image could be processed",
        details=response,
    )


@api_gateway_handler
@tracer.capture_lambda_handler
@metrics.log_metrics()
def handler(event: dict[str, Any], context: LambdaContext) -> dict[str, Any]:
    """
    Handle image upload requests.

    The handler decodes base64-encoded image data, derives the original,
    preview and thumbnail tiers, and returns the new identifier with the
    canonical path of every tier.

    Expected API Gateway event structure:
    {
        "body": "{\"file\": \"<base64>\", \"image_name\": \"a.jpg\"}"
    }
    or, for several images at once:
    {
        "body": "{\"files\": [{\"file\": ..., \"image_name\": ...}, ...]}"
    }

    Args:
        event: API Gateway Lambda proxy event containing the upload payload
        context: AWS Lambda execution context

    Returns:
        API Gateway-compatible HTTP response containing derivation metadata
    """
    logger.info(
        "Received image upload request",
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

    if "files" in body:
        return _handle_batch(body)

    try:
        request = validate_request(ImageUploadRequest, body)
    except PydanticValidationError as exc:
        logger.error(
            "Request validation failed",
            extra={"errors": exc.errors()},
        )
        return ResponseBuilder.bad_request(
            message="Invalid request params",
            details={"errors": sanitize_validation_errors(exc.errors())},
        )

    service = DerivationService()

    try:
        file_data = service.decode_file(request.file)
        result = service.derive(
            file_data=file_data,
            original_filename=request.image_name,
        )

    except ValidationError as exc:
        logger.exception("Validation error during image upload")
        return ResponseBuilder.validation_error(message=exc.message)

    except DecodeError as exc:
        logger.warning(
            "Uploaded payload is not a decodable image",
            extra={"image_name": request.image_name, "cause": exc.details.get("cause")},
        )
        return ResponseBuilder.from_service_error(exc, status=HTTPStatus.UNPROCESSABLE_ENTITY)

    except StorageError as exc:
        logger.exception(
            "Storage error during image derivation",
            extra={"details": exc.details},
        )
        image_id = exc.details.get("image_id")
        if image_id:
            leftovers = service.discard(image_id)
            if leftovers:
                logger.warning(
                    "Partial derivation could not be fully removed",
                    extra={"image_id": image_id, "paths": leftovers},
                )
        return ResponseBuilder.internal_error(exc.message)

    response = ImageUploadResponse(
        **result.model_dump(),
        message="Image uploaded successfully",
    )

    return ResponseBuilder.created(response.model_dump(mode="json"))
