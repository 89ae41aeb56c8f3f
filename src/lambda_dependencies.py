"""Cached dependency factory for the Lambda handler.

Dependencies are created once per Lambda container and reused across
invocations to keep warm starts cheap.
"""

import logging

from fastapi import FastAPI

from canteen_service import config
from canteen_service.handlers.api_handler import create_app
from canteen_service.observability import configure_logging
from canteen_service.services.container import (
    ServiceContainer,
    build_services,
    collect_credentials,
    get_dynamodb_resource,
    get_s3_client,
)

logger = logging.getLogger(__name__)

_services: ServiceContainer | None = None
_fastapi_app: FastAPI | None = None


def get_services() -> ServiceContainer:
    """Create or retrieve cached services.

    Provisioning runs once per container when enabled.
    """
    global _services

    if _services is not None:
        return _services

    services = build_services(get_dynamodb_resource(), get_s3_client())
    if config.get_provision_on_startup():
        services.provisioning_service.provision(create_tables=config.get_create_tables())

    _services = services
    logger.info("Services initialized")
    return _services


def get_fastapi_app() -> FastAPI:
    """Create or retrieve cached FastAPI application."""
    global _fastapi_app

    if _fastapi_app is not None:
        return _fastapi_app

    services = get_services()
    _fastapi_app = create_app(
        menu_service=services.menu_service,
        menu_item_service=services.menu_item_service,
        recipe_service=services.recipe_service,
        settings_service=services.settings_service,
        credentials=collect_credentials(services),
    )

    logger.info("FastAPI application initialized")
    return _fastapi_app


def reset_cache() -> None:
    """Drop cached dependencies."""
    global _services, _fastapi_app
    _services = None
    _fastapi_app = None


def initialize_lambda_environment() -> None:
    """Initialize logging. Called once during Lambda cold start."""
    configure_logging(config.get_log_level())
    logger.info("Lambda environment initialized")
