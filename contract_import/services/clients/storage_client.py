"""Object storage access for previously uploaded contract files."""

from typing import Optional

import httpx

from contract_import.core.config import StorageSettings, settings
from contract_import.core.exceptions import ConfigurationError, StorageError
from contract_import.utils.logging import get_logger

LOGGER = get_logger(__name__)


class StorageClient:
    """Downloads objects from Supabase-style storage.

    Args:
        client: Optional shared httpx client; one is opened per call otherwise.
        config: Storage settings; the application settings by default.
    """

    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        config: Optional[StorageSettings] = None,
    ):
        self.client = client
        self.config = config or settings.storage
        self.base_api_url = f"{self.config.url.rstrip('/')}/storage/v1"
        self.headers = {
            "Authorization": f"Bearer {self.config.service_role_key}",
            "apikey": self.config.service_role_key,
        }

    async def _get(self, client: httpx.AsyncClient, url: str, bucket: str, path: str) -> bytes:
        response = await client.get(url, headers=self.headers, timeout=self.config.timeout_seconds)
        if response.status_code != 200:
            LOGGER.error(
                f"Failed to download file from storage: {response.text}",
                extra={"bucket": bucket, "path": path, "status_code": response.status_code},
            )
            raise StorageError(f"Download failed: {response.text}")
        return response.content

    async def download_file(self, path: str, bucket: Optional[str] = None) -> bytes:
        """Download an object's bytes.

        Args:
            path: Object path within the bucket
            bucket: Bucket name; the configured bucket by default

        Returns:
            File content

        Raises:
            ConfigurationError: If no storage URL is configured
            StorageError: If the download fails
        """
        if not self.config.url:
            raise ConfigurationError("STORAGE_URL is not configured")
        bucket = bucket or self.config.bucket
        url = f"{self.base_api_url}/object/{bucket}/{path.lstrip('/')}"
        try:
            if self.client is not None:
                return await self._get(self.client, url, bucket, path)
            async with httpx.AsyncClient() as client:
                return await self._get(client, url, bucket, path)
        except httpx.HTTPError as e:
            LOGGER.error(f"Error downloading file from storage: {str(e)}", exc_info=True)
            raise StorageError(f"Storage download error: {str(e)}", original_error=e)
