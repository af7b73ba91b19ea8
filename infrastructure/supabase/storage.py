"""
Attachment uploads through the `upload-image` edge function
"""
from typing import Optional

import httpx
import structlog

from config import settings

logger = structlog.get_logger()


class UploadError(Exception):
    pass


class AttachmentUploader:
    """Posts multipart {file, bucket} to the edge function and returns the public URL"""

    def __init__(
        self,
        base_url: Optional[str] = None,
        function_path: Optional[str] = None,
        bucket: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = (base_url or settings.supabase_url).rstrip("/")
        self.function_path = function_path or settings.upload_function_path
        self.bucket = bucket or settings.upload_bucket
        self.timeout = timeout or settings.http_timeout_seconds
        self.transport = transport

    async def upload(
        self,
        filename: str,
        content: bytes,
        content_type: Optional[str] = None,
        access_token: Optional[str] = None,
    ) -> str:
        """
        Upload one file

        Args:
            filename: Original file name
            content: File bytes
            content_type: MIME type, defaults to application/octet-stream
            access_token: Caller's session token; anonymous uploads use "anon"

        Returns:
            Public URL of the stored object
        """
        headers = {"Authorization": f"Bearer {access_token or 'anon'}"}
        files = {"file": (filename, content, content_type or "application/octet-stream")}

        logger.info("attachment_upload_started", filename=filename, size=len(content))

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.post(
                    f"{self.base_url}{self.function_path}",
                    headers=headers,
                    files=files,
                    data={"bucket": self.bucket},
                )
        except httpx.HTTPError as e:
            raise UploadError(f"Upload request failed: {e}") from e

        if response.status_code >= 400:
            try:
                message = response.json().get("error")
            except ValueError:
                message = None
            raise UploadError(message or f"Upload failed with status {response.status_code}")

        public_url = response.json().get("publicUrl")
        if not public_url:
            raise UploadError("Upload response did not include a public URL")

        logger.info("attachment_uploaded", public_url=public_url)
        return public_url
