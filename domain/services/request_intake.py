"""Public FOI request intake"""
from dataclasses import dataclass
from typing import Optional

import structlog
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel.ext.asyncio.session import AsyncSession

from domain.models import FoiRequest
from domain.models.foi_request import FoiRequestSubmit, RequestStatus
from infrastructure.supabase.storage import AttachmentUploader, UploadError

logger = structlog.get_logger()

SUBMIT_FAILED = "Failed to submit request"
UNEXPECTED_ERROR = "An unexpected error occurred"


@dataclass
class Attachment:
    filename: str
    content: bytes
    content_type: Optional[str] = None


@dataclass
class IntakeResult:
    success: bool
    reference_number: Optional[str] = None
    error: Optional[str] = None


class RequestIntake:
    def __init__(self, session: AsyncSession, uploader: Optional[AttachmentUploader] = None):
        self.session = session
        self.uploader = uploader or AttachmentUploader()

    async def _upload(self, attachment: Attachment, access_token: Optional[str]) -> Optional[str]:
        """Upload the attachment; any failure means the request goes in without it."""
        try:
            return await self.uploader.upload(
                attachment.filename,
                attachment.content,
                attachment.content_type,
                access_token=access_token,
            )
        except UploadError as e:
            logger.warning("attachment_upload_failed", filename=attachment.filename, error=str(e))
        except Exception as e:
            logger.warning("attachment_upload_error", filename=attachment.filename, error=str(e))
        return None

    async def submit(
        self,
        form: FoiRequestSubmit,
        attachment: Optional[Attachment] = None,
        access_token: Optional[str] = None,
    ) -> IntakeResult:
        try:
            image_url = None
            if attachment is not None and attachment.content:
                image_url = await self._upload(attachment, access_token)

            request = FoiRequest(
                full_name=form.full_name,
                email=form.email,
                contact_number=form.contact_number,
                barangay=form.barangay,
                street=form.street,
                concern=form.resolved_concern,
                image_url=image_url,
                status=RequestStatus.PENDING.value,
            )

            try:
                self.session.add(request)
                await self.session.commit()
                await self.session.refresh(request)
            except SQLAlchemyError as e:
                await self.session.rollback()
                logger.error("foi_request_insert_failed", error=str(e))
                return IntakeResult(success=False, error=SUBMIT_FAILED)

            logger.info(
                "foi_request_submitted",
                request_id=str(request.id),
                reference_number=request.reference_number,
                has_attachment=image_url is not None,
            )
            return IntakeResult(success=True, reference_number=request.reference_number)

        except Exception as e:
            logger.error("foi_request_submit_error", error=str(e))
            return IntakeResult(success=False, error=UNEXPECTED_ERROR)
