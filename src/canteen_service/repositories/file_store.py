"""S3-backed storage for uploaded recipe documents.

The file store assigns every uploaded file an identifier. Recipes reuse that
identifier as their own id, so a recipe and its file join without a link table.
"""

import logging
from typing import Any

from botocore.exceptions import BotoCoreError, ClientError

from canteen_service.models.canteen_models import new_identifier

logger = logging.getLogger(__name__)

PDF_EXTENSION = ".pdf"


class FileStoreError(Exception):
    """Raised when the file store cannot be reached or rejects a request."""


def file_name_for(file_id: str) -> str:
    """Stored base name for a file identifier."""
    return f"{file_id}{PDF_EXTENSION}"


class S3FileStore:
    """Stores recipe PDFs as objects in an S3 bucket."""

    def __init__(self, s3_client: Any, bucket: str, prefix: str = "recipes/") -> None:
        """Initialize file store.

        Args:
            s3_client: Boto3 S3 client
            bucket: Bucket holding the files
            prefix: Key prefix for stored files
        """
        self.s3 = s3_client
        self.bucket = bucket
        self.prefix = prefix

    def _key(self, file_id: str) -> str:
        return f"{self.prefix}{file_name_for(file_id)}"

    def save(self, content: bytes, content_type: str = "application/pdf") -> str:
        """Store file content under a newly assigned identifier.

        Returns:
            str: The file identifier
        """
        file_id = new_identifier()
        try:
            self.s3.put_object(
                Bucket=self.bucket,
                Key=self._key(file_id),
                Body=content,
                ContentType=content_type,
            )
            logger.info(f"Stored file {file_id} ({len(content)} bytes)")
            return file_id

        except (ClientError, BotoCoreError) as e:
            logger.error(f"Failed to store file: {e}")
            raise FileStoreError(str(e)) from e

    def load(self, file_id: str) -> bytes | None:
        """Read file content.

        Returns:
            bytes if the file exists, None otherwise
        """
        try:
            response = self.s3.get_object(Bucket=self.bucket, Key=self._key(file_id))
            content: bytes = response["Body"].read()
            return content

        except ClientError as e:
            if e.response.get("Error", {}).get("Code") in ("NoSuchKey", "404"):
                return None
            logger.error(f"Failed to load file {file_id}: {e}")
            raise FileStoreError(str(e)) from e
        except BotoCoreError as e:
            logger.error(f"Failed to load file {file_id}: {e}")
            raise FileStoreError(str(e)) from e

    def delete(self, file_id: str) -> None:
        """Remove a stored file. Deleting a missing file is not an error."""
        try:
            self.s3.delete_object(Bucket=self.bucket, Key=self._key(file_id))

        except (ClientError, BotoCoreError) as e:
            logger.error(f"Failed to delete file {file_id}: {e}")
            raise FileStoreError(str(e)) from e
