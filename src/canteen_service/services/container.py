"""Wiring of repositories and services shared by every entry point."""

import logging
import os
from dataclasses import dataclass
from typing import Any

import boto3

from canteen_service import config
from canteen_service.repositories.collection_store import CollectionStore, default_table_names
from canteen_service.repositories.file_store import S3FileStore
from canteen_service.services.menu_item_service import MenuItemService
from canteen_service.services.menu_service import MenuService
from canteen_service.services.provisioning_service import ProvisioningService
from canteen_service.services.recipe_service import RecipeService
from canteen_service.services.reference_resolver import ReferenceResolver
from canteen_service.services.settings_service import SettingsService

logger = logging.getLogger(__name__)


@dataclass
class ServiceContainer:
    """Every service the API needs, built over one store."""

    store: CollectionStore
    menu_service: MenuService
    menu_item_service: MenuItemService
    recipe_service: RecipeService
    settings_service: SettingsService
    provisioning_service: ProvisioningService


def _aws_kwargs(endpoint_url: str | None) -> dict[str, Any]:
    kwargs: dict[str, Any] = {"region_name": config.get_aws_region()}
    if endpoint_url:
        # Local endpoint - credentials from environment variables
        kwargs["endpoint_url"] = endpoint_url
        kwargs["aws_access_key_id"] = os.getenv("AWS_ACCESS_KEY_ID")
        kwargs["aws_secret_access_key"] = os.getenv("AWS_SECRET_ACCESS_KEY")
    return kwargs


def get_dynamodb_resource() -> Any:
    """Create DynamoDB resource with appropriate configuration.

    Returns:
        Boto3 DynamoDB resource configured for environment
    """
    endpoint_url = config.get_dynamodb_endpoint()
    if endpoint_url:
        logger.info(f"Using local DynamoDB at {endpoint_url}")
    else:
        logger.info(f"Using AWS DynamoDB in region {config.get_aws_region()}")
    return boto3.resource("dynamodb", **_aws_kwargs(endpoint_url))


def get_s3_client() -> Any:
    """Create S3 client for recipe documents."""
    endpoint_url = config.get_s3_endpoint()
    if endpoint_url:
        logger.info(f"Using local S3 at {endpoint_url}")
    return boto3.client("s3", **_aws_kwargs(endpoint_url))


def build_services(dynamodb_resource: Any, s3_client: Any) -> ServiceContainer:
    """Create repositories and services from configuration.

    Args:
        dynamodb_resource: Boto3 DynamoDB resource
        s3_client: Boto3 S3 client for recipe documents

    Returns:
        ServiceContainer with every service wired
    """
    table_names = default_table_names(config.get_table_prefix())
    store = CollectionStore(dynamodb_resource=dynamodb_resource, table_names=table_names)
    file_store = S3FileStore(s3_client=s3_client, bucket=config.get_recipe_bucket())

    logger.info(f"Collections configured - tables: {', '.join(table_names.values())}")

    return ServiceContainer(
        store=store,
        menu_service=MenuService(
            store=store,
            resolver=ReferenceResolver(store),
            max_retries=config.get_menu_update_max_retries(),
        ),
        menu_item_service=MenuItemService(store),
        recipe_service=RecipeService(store, file_store),
        settings_service=SettingsService(store),
        provisioning_service=ProvisioningService(
            store=store,
            days=config.get_canteen_days(),
            opening_time=config.get_default_opening_time(),
            closing_time=config.get_default_closing_time(),
            food_pantry_notice=config.get_default_food_pantry_notice(),
            token_key=config.get_token_key(),
        ),
    )


def collect_credentials(services: ServiceContainer) -> list[str]:
    """Gather the bearer credentials accepted for write operations.

    Configured admin keys are always accepted; the stored token key is added
    when provisioning has seeded one. The result is fixed for the lifetime of
    the app, so a rotated token key is accepted after the next start.
    """
    credentials = config.get_admin_api_keys()

    token_key = services.settings_service.get_token_key()
    if token_key:
        credentials.append(token_key)

    if not credentials:
        logger.warning("No ADMIN_API_KEY or TokenKey configured - using development key")
        credentials = ["dummy-key-for-development"]

    return credentials
