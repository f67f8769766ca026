"""Abstract base class for object storage of audio clips."""

from abc import ABC, abstractmethod


class BlobStoreError(Exception):
    """Raised when an upload fails."""


class BlobStore(ABC):
    """Object storage that turns uploaded bytes into a durable URL.

    Hides where blobs live and how their URLs are formed.
    """

    @abstractmethod
    async def upload(
        self,
        data: bytes,
        filename: str,
        content_type: str = "audio/webm",
    ) -> str:
        """Upload a blob.

        Args:
            data: Raw bytes
            filename: Object name within the store
            content_type: MIME type of the data

        Returns:
            Public URL of the stored object

        Raises:
            BlobStoreError: If the upload fails
        """

    @property
    @abstractmethod
    def backend_type(self) -> str:
        """Get the backend type identifier."""
