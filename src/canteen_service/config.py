"""Environment-driven configuration for the canteen service.

Every setting is read lazily through a small getter so tests can patch the
environment without reloading modules.
"""

import os

DEFAULT_DAYS = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday")


def _get_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def _get_list(name: str) -> list[str]:
    return [part.strip() for part in os.getenv(name, "").split(",") if part.strip()]


def get_environment() -> str:
    """Deployment environment name (``test`` disables app creation on import)."""
    return os.getenv("ENVIRONMENT", "development")


def get_log_level() -> str:
    return os.getenv("LOG_LEVEL", "INFO")


def get_aws_region() -> str:
    return os.getenv("AWS_REGION", "us-east-1")


def get_dynamodb_endpoint() -> str | None:
    """Local DynamoDB endpoint, or None to use AWS."""
    return os.getenv("DYNAMODB_ENDPOINT") or None


def get_s3_endpoint() -> str | None:
    return os.getenv("S3_ENDPOINT") or None


def get_table_prefix() -> str:
    return os.getenv("DYNAMODB_TABLE_PREFIX", "canteen-")


def get_recipe_bucket() -> str:
    return os.getenv("RECIPE_BUCKET", "canteen-recipes")


def get_admin_api_keys() -> list[str]:
    """Comma-separated bearer tokens accepted for write operations."""
    return _get_list("ADMIN_API_KEY")


def get_token_key() -> str | None:
    """Token key to seed into the settings store on first provisioning."""
    return os.getenv("CANTEEN_TOKEN_KEY") or None


def get_canteen_days() -> list[str]:
    """Days that get a menu and opening hours during provisioning."""
    return _get_list("CANTEEN_DAYS") or list(DEFAULT_DAYS)


def get_default_opening_time() -> str:
    return os.getenv("DEFAULT_OPENING_TIME", "08:00")


def get_default_closing_time() -> str:
    return os.getenv("DEFAULT_CLOSING_TIME", "16:00")


def get_default_food_pantry_notice() -> str:
    return os.getenv(
        "DEFAULT_FOOD_PANTRY_NOTICE",
        "The food pantry is open during canteen opening hours.",
    )


def get_provision_on_startup() -> bool:
    return _get_bool("PROVISION_ON_STARTUP", True)


def get_create_tables() -> bool:
    """Whether provisioning should create missing DynamoDB tables."""
    return _get_bool("CREATE_TABLES", False)


def get_menu_update_max_retries() -> int:
    return int(os.getenv("MENU_UPDATE_MAX_RETRIES", "5"))


def get_otel_enabled() -> bool:
    return _get_bool("OTEL_ENABLED", False)
