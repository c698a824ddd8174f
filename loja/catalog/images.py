"""Product image ingestion.

Decodes base64 image payloads, writes them to the image directory and
returns the public URL under which the static file host serves them.
"""

import base64
import binascii
import re
from pathlib import Path
from uuid import uuid4

import aiofiles
import structlog

from loja.domain.exceptions import ImageStorageError, InvalidImageEncodingError

logger = structlog.get_logger()

DATA_URI_PREFIX = re.compile(r"^data:image/[a-z]+;base64,")

IMAGE_EXTENSION = ".jpg"


class ImageIngestor:
    """Stores uploaded product images.

    Every stored image gets a fresh ``<uuid>.jpg`` filename; the subtype
    declared in a data URI prefix is not kept.

    Example usage:
        ingestor = ImageIngestor(
            storage_dir=Path("wwwroot/images"),
            base_url="https://shop.example.com",
        )
        url = await ingestor.ingest("data:image/png;base64,iVBORw0KGgo=")
    """

    def __init__(
        self,
        storage_dir: Path,
        base_url: str,
        url_path: str = "/images",
    ) -> None:
        """Initialize ingestor.

        Args:
            storage_dir: Directory image files are written to.
            base_url: Public base URL of the service.
            url_path: URL path the storage directory is served under.
        """
        self.storage_dir = Path(storage_dir)
        self.base_url = base_url.rstrip("/")
        self.url_path = "/" + url_path.strip("/")

    def decode(self, payload: str) -> bytes:
        """Decode a base64 payload, with or without a data URI prefix.

        Args:
            payload: Base64 text, optionally prefixed with
                ``data:image/<subtype>;base64,``.

        Returns:
            Decoded bytes.

        Raises:
            InvalidImageEncodingError: If the payload is not valid base64.
        """
        data = DATA_URI_PREFIX.sub("", payload, count=1)
        data = "".join(data.split())
        try:
            return base64.b64decode(data, validate=True)
        except (binascii.Error, ValueError) as e:
            raise InvalidImageEncodingError(str(e)) from e

    def url_for(self, filename: str) -> str:
        """Build the public URL of a stored image."""
        return f"{self.base_url}{self.url_path}/{filename}"

    async def ingest(self, payload: str) -> str:
        """Decode and store an image payload.

        Args:
            payload: Base64 image payload.

        Returns:
            Public URL of the stored image.

        Raises:
            InvalidImageEncodingError: If the payload is not valid base64.
            ImageStorageError: If the file cannot be written.
        """
        content = self.decode(payload)
        filename = f"{uuid4()}{IMAGE_EXTENSION}"

        try:
            self.storage_dir.mkdir(parents=True, exist_ok=True)
            async with aiofiles.open(self.storage_dir / filename, "wb") as f:
                await f.write(content)
        except OSError as e:
            raise ImageStorageError(filename, str(e)) from e

        logger.info("Image stored", filename=filename, size=len(content))
        return self.url_for(filename)
