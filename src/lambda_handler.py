"""AWS Lambda handler serving the canteen API through API Gateway.

Requests are translated to ASGI by Mangum and served by the cached FastAPI app.
"""

import logging
from typing import Any

from mangum import Mangum

from canteen_service import config
from lambda_dependencies import get_fastapi_app, initialize_lambda_environment

logger = logging.getLogger(__name__)

# Build the app during cold start (skipped in test mode)
if config.get_environment() != "test":
    initialize_lambda_environment()
    mangum_handler: Mangum | None = Mangum(get_fastapi_app(), lifespan="off")
else:
    mangum_handler = None


def lambda_handler(event: dict[str, Any], context: Any) -> dict[str, Any]:
    """Lambda entry point for API Gateway requests.

    Args:
        event: The API Gateway event payload
        context: The Lambda context object

    Returns:
        Response dict with statusCode and body
    """
    logger.info(f"Received Lambda invocation, request_id: {context.aws_request_id}")

    try:
        handler = mangum_handler or Mangum(get_fastapi_app(), lifespan="off")
        result: dict[str, Any] = handler(event, context)
        return result

    except Exception as e:
        logger.exception(f"Unhandled error in Lambda handler: {e}")
        return {
            "statusCode": 500,
            "body": f"Internal server error: {str(e)}",
        }
