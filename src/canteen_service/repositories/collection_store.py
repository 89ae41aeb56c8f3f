"""Generic DynamoDB document store over named collections.

Each collection is a DynamoDB table keyed by the string attribute ``id``.
Expected misses are reported with simple return values (None/False); any
other DynamoDB or botocore failure is raised as StoreError so callers can
tell a missing document apart from a broken store.
"""

import logging
from collections.abc import Iterable
from enum import Enum
from typing import Any

from boto3.dynamodb.conditions import Attr
from botocore.exceptions import BotoCoreError, ClientError
from mypy_boto3_dynamodb.service_resource import DynamoDBServiceResource, Table

from canteen_service.models.canteen_models import new_identifier

logger = logging.getLogger(__name__)

KEY_ATTRIBUTE = "id"
VERSION_ATTRIBUTE = "version"
BATCH_GET_LIMIT = 100
MAX_UNPROCESSED_ATTEMPTS = 5


class Collection(str, Enum):
    """Enumeration of document collections."""

    MENU_ITEMS = "menuItems"
    MENUS = "menus"
    RECIPES = "recipes"
    MISC = "misc"
    OPENING_HOURS = "openingHours"


class StoreError(Exception):
    """Raised when the underlying document store fails."""

    def __init__(self, operation: str, collection: Collection, detail: str) -> None:
        self.operation = operation
        self.collection = collection
        self.detail = detail
        super().__init__(detail)


def _is_condition_failure(error: ClientError) -> bool:
    return error.response.get("Error", {}).get("Code") == "ConditionalCheckFailedException"


def default_table_names(prefix: str) -> dict[Collection, str]:
    """Build table names for every collection from a common prefix."""
    return {collection: f"{prefix}{collection.value}" for collection in Collection}


class CollectionStore:
    """Document access over named DynamoDB-backed collections."""

    def __init__(
        self,
        dynamodb_resource: DynamoDBServiceResource,
        table_names: dict[Collection, str],
    ) -> None:
        """Initialize store.

        Args:
            dynamodb_resource: Boto3 DynamoDB resource
            table_names: Mapping of collection to DynamoDB table name
        """
        self.dynamodb = dynamodb_resource
        self.table_names = dict(table_names)
        self.tables: dict[Collection, Table] = {
            collection: dynamodb_resource.Table(name) for collection, name in table_names.items()
        }

    def table(self, collection: Collection) -> Table:
        return self.tables[collection]

    def _fail(self, operation: str, collection: Collection, error: Exception) -> StoreError:
        logger.error(f"Store {operation} failed on {collection.value}: {error}")
        return StoreError(operation, collection, str(error))

    def find_all(self, collection: Collection) -> list[dict[str, Any]]:
        """Return every document in a collection.

        Returns:
            list: Documents (empty list if the collection is empty)

        Raises:
            StoreError: If the scan fails
        """
        try:
            table = self.table(collection)
            response = table.scan()
            items = list(response.get("Items", []))
            while "LastEvaluatedKey" in response:
                response = table.scan(ExclusiveStartKey=response["LastEvaluatedKey"])
                items.extend(response.get("Items", []))
            return items

        except (ClientError, BotoCoreError) as e:
            raise self._fail("find_all", collection, e) from e

    def find_by_id(self, collection: Collection, document_id: str) -> dict[str, Any] | None:
        """Retrieve a document by identifier.

        Returns:
            dict if found, None otherwise
        """
        try:
            response = self.table(collection).get_item(Key={KEY_ATTRIBUTE: document_id})
            return response.get("Item")

        except (ClientError, BotoCoreError) as e:
            raise self._fail("find_by_id", collection, e) from e

    def find_one_by_field(
        self, collection: Collection, field: str, value: Any
    ) -> dict[str, Any] | None:
        """Retrieve the first document whose field equals value.

        Args:
            collection: Collection to search
            field: Attribute name to match
            value: Exact value to match

        Returns:
            dict if a document matches, None otherwise
        """
        if field == KEY_ATTRIBUTE:
            return self.find_by_id(collection, value)

        try:
            table = self.table(collection)
            scan_kwargs: dict[str, Any] = {"FilterExpression": Attr(field).eq(value)}
            while True:
                response = table.scan(**scan_kwargs)
                items = response.get("Items", [])
                if items:
                    return items[0]
                if "LastEvaluatedKey" not in response:
                    return None
                scan_kwargs["ExclusiveStartKey"] = response["LastEvaluatedKey"]

        except (ClientError, BotoCoreError) as e:
            raise self._fail("find_one_by_field", collection, e) from e

    def find_many_by_ids(
        self, collection: Collection, document_ids: Iterable[str]
    ) -> dict[str, dict[str, Any]]:
        """Retrieve many documents in batches.

        Identifiers that do not exist are simply absent from the result.

        Returns:
            dict: Mapping of identifier to document
        """
        unique_ids = list(dict.fromkeys(document_ids))
        found: dict[str, dict[str, Any]] = {}
        if not unique_ids:
            return found

        table_name = self.table_names[collection]
        try:
            for start in range(0, len(unique_ids), BATCH_GET_LIMIT):
                chunk = unique_ids[start : start + BATCH_GET_LIMIT]
                request: dict[str, Any] = {
                    table_name: {"Keys": [{KEY_ATTRIBUTE: doc_id} for doc_id in chunk]}
                }
                attempts = 0
                while request:
                    response = self.dynamodb.batch_get_item(RequestItems=request)
                    for item in response.get("Responses", {}).get(table_name, []):
                        found[item[KEY_ATTRIBUTE]] = item
                    request = response.get("UnprocessedKeys") or {}
                    attempts += 1
                    if request and attempts >= MAX_UNPROCESSED_ATTEMPTS:
                        raise StoreError(
                            "find_many_by_ids",
                            collection,
                            "Batch lookup left unprocessed keys after retries",
                        )
            return found

        except (ClientError, BotoCoreError) as e:
            raise self._fail("find_many_by_ids", collection, e) from e

    def insert(self, collection: Collection, document: dict[str, Any]) -> dict[str, Any]:
        """Insert a new document, assigning an identifier when absent.

        Returns:
            dict: The stored document including its identifier

        Raises:
            StoreError: If the write fails or the identifier is already taken
        """
        item = dict(document)
        item.setdefault(KEY_ATTRIBUTE, new_identifier())
        try:
            self.table(collection).put_item(
                Item=item,
                ConditionExpression=Attr(KEY_ATTRIBUTE).not_exists(),
            )
            return item

        except ClientError as e:
            if _is_condition_failure(e):
                raise StoreError(
                    "insert", collection, f"Document {item[KEY_ATTRIBUTE]} already exists"
                ) from e
            raise self._fail("insert", collection, e) from e
        except BotoCoreError as e:
            raise self._fail("insert", collection, e) from e

    def insert_if_absent(self, collection: Collection, document: dict[str, Any]) -> bool:
        """Insert a document under its own identifier unless one already exists.

        Returns:
            bool: True if written, False if the identifier was already taken

        Raises:
            StoreError: If the write fails for any other reason
        """
        try:
            self.table(collection).put_item(
                Item=document,
                ConditionExpression=Attr(KEY_ATTRIBUTE).not_exists(),
            )
            return True

        except ClientError as e:
            if _is_condition_failure(e):
                return False
            raise self._fail("insert_if_absent", collection, e) from e
        except BotoCoreError as e:
            raise self._fail("insert_if_absent", collection, e) from e

    def replace_by_id(
        self, collection: Collection, document_id: str, fields: dict[str, Any]
    ) -> dict[str, Any] | None:
        """Replace every field of an existing document.

        Returns:
            dict: The stored document, or None if no document has this id
        """
        if self.find_by_id(collection, document_id) is None:
            return None

        item = {**fields, KEY_ATTRIBUTE: document_id}
        try:
            self.table(collection).put_item(
                Item=item,
                ConditionExpression=Attr(KEY_ATTRIBUTE).exists(),
            )
            return item

        except ClientError as e:
            if _is_condition_failure(e):
                return None
            raise self._fail("replace_by_id", collection, e) from e
        except BotoCoreError as e:
            raise self._fail("replace_by_id", collection, e) from e

    def delete_by_id(self, collection: Collection, document_id: str) -> bool:
        """Delete an existing document.

        Returns:
            bool: True if deleted, False if no document has this id
        """
        if self.find_by_id(collection, document_id) is None:
            return False

        try:
            self.table(collection).delete_item(
                Key={KEY_ATTRIBUTE: document_id},
                ConditionExpression=Attr(KEY_ATTRIBUTE).exists(),
            )
            return True

        except ClientError as e:
            if _is_condition_failure(e):
                return False
            raise self._fail("delete_by_id", collection, e) from e
        except BotoCoreError as e:
            raise self._fail("delete_by_id", collection, e) from e

    def append_to_list(
        self, collection: Collection, document_id: str, field: str, value: Any
    ) -> bool:
        """Atomically append a value to a list attribute and bump the version.

        Returns:
            bool: True if appended, False if no document has this id
        """
        try:
            self.table(collection).update_item(
                Key={KEY_ATTRIBUTE: document_id},
                UpdateExpression=(
                    "SET #field = list_append(if_not_exists(#field, :empty), :values), "
                    "#version = if_not_exists(#version, :zero) + :one"
                ),
                ConditionExpression=Attr(KEY_ATTRIBUTE).exists(),
                ExpressionAttributeNames={"#field": field, "#version": VERSION_ATTRIBUTE},
                ExpressionAttributeValues={
                    ":empty": [],
                    ":values": [value],
                    ":zero": 0,
                    ":one": 1,
                },
            )
            return True

        except ClientError as e:
            if _is_condition_failure(e):
                return False
            raise self._fail("append_to_list", collection, e) from e
        except BotoCoreError as e:
            raise self._fail("append_to_list", collection, e) from e

    def replace_list_if_version(
        self,
        collection: Collection,
        document_id: str,
        field: str,
        values: list[Any],
        expected_version: int,
    ) -> bool:
        """Overwrite a list attribute only if the document version is unchanged.

        Returns:
            bool: True if written, False if the version moved or the document is gone
        """
        version_matches = Attr(VERSION_ATTRIBUTE).eq(expected_version)
        if expected_version == 0:
            version_matches = version_matches | Attr(VERSION_ATTRIBUTE).not_exists()

        try:
            self.table(collection).update_item(
                Key={KEY_ATTRIBUTE: document_id},
                UpdateExpression="SET #field = :values, #version = :next",
                ConditionExpression=Attr(KEY_ATTRIBUTE).exists() & version_matches,
                ExpressionAttributeNames={"#field": field, "#version": VERSION_ATTRIBUTE},
                ExpressionAttributeValues={":values": values, ":next": expected_version + 1},
            )
            return True

        except ClientError as e:
            if _is_condition_failure(e):
                return False
            raise self._fail("replace_list_if_version", collection, e) from e
        except BotoCoreError as e:
            raise self._fail("replace_list_if_version", collection, e) from e

    def _existing_table_names(self) -> set[str]:
        names: set[str] = set()
        paginator = self.dynamodb.meta.client.get_paginator("list_tables")
        for page in paginator.paginate():
            names.update(page.get("TableNames", []))
        return names

    def ensure_collections(self) -> list[str]:
        """Create any missing collection tables.

        Returns:
            list: Names of the tables that were created
        """
        try:
            existing = self._existing_table_names()
        except (ClientError, BotoCoreError) as e:
            raise self._fail("ensure_collections", Collection.MENUS, e) from e

        created: list[str] = []
        for collection, name in self.table_names.items():
            if name in existing:
                continue
            try:
                table = self.dynamodb.create_table(
                    TableName=name,
                    KeySchema=[{"AttributeName": KEY_ATTRIBUTE, "KeyType": "HASH"}],
                    AttributeDefinitions=[{"AttributeName": KEY_ATTRIBUTE, "AttributeType": "S"}],
                    BillingMode="PAY_PER_REQUEST",
                )
                table.wait_until_exists()
                created.append(name)
                logger.info(f"Created table {name} for {collection.value}")

            except (ClientError, BotoCoreError) as e:
                raise self._fail("ensure_collections", collection, e) from e
        return created
