import base64
import json
from types import SimpleNamespace
from typing import Any

import pytest

SAMPLE_IMAGE_ID = "img_" + "ab" * 16


@pytest.fixture
def lambda_context(monkeypatch):
    context = SimpleNamespace(
        aws_request_id="test-request-id",
        function_name="test-function",
        memory_limit_in_mb=256,
        invoked_function_arn="arn:aws:lambda:us-east-1:000000000000:function:test",
        log_group_name="/aws/lambda/test-function",
        log_stream_name="2024/01/01/[$LATEST]test",
    )

    monkeypatch.setattr(
        "aws_lambda_powertools.utilities.typing.LambdaContext",
        lambda: context,
        raising=False,
    )

    return context


@pytest.fixture
def sample_image_id() -> str:
    return SAMPLE_IMAGE_ID


@pytest.fixture
def upload_image_event(sample_jpeg_binary) -> dict[str, Any]:
    return {
        "httpMethod": "POST",
        "path": "/images",
        "body": json.dumps(
            {
                "file": base64.b64encode(sample_jpeg_binary).decode("utf-8"),
                "image_name": "holiday.jpg",
            }
        ),
        "headers": {"Content-Type": "application/json"},
    }


@pytest.fixture
def sign_url_event() -> dict[str, Any]:
    return {
        "httpMethod": "POST",
        "path": "/files/sign",
        "body": json.dumps({"file_key": SAMPLE_IMAGE_ID, "tier": "preview"}),
        "headers": {"Content-Type": "application/json"},
    }


@pytest.fixture
def get_file_event():
    def _event(path: str, query: dict[str, str] | None = None) -> dict[str, Any]:
        return {
            "httpMethod": "GET",
            "path": f"/files/{path}",
            "pathParameters": {"proxy": path},
            "queryStringParameters": query,
        }

    return _event


@pytest.fixture
def delete_image_event() -> dict[str, Any]:
    return {
        "httpMethod": "DELETE",
        "path": f"/images/{SAMPLE_IMAGE_ID}",
        "pathParameters": {"image_id": SAMPLE_IMAGE_ID},
    }
