"""FOI requests API - public submission and staff handling"""
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile
from pydantic import ValidationError
from sqlmodel.ext.asyncio.session import AsyncSession

from api.deps import (
    get_activity_logger,
    get_bearer_token,
    get_current_staff,
    get_uploader,
    require_editor,
)
from domain.models import StaffMember
from domain.models.foi_request import (
    CONCERN_TYPES,
    DEPARTMENTS,
    FoiRequestRead,
    FoiRequestSubmit,
    ReferralRequest,
    RequestStatus,
    RequestStatusUpdate,
    SubmissionResponse,
)
from domain.services.activity_logger import ActivityLogger
from domain.services.request_intake import Attachment, RequestIntake
from domain.services.request_lifecycle import RequestLifecycle
from infrastructure.database import get_session
from infrastructure.supabase.storage import AttachmentUploader

router = APIRouter()

NO_REFERENCE_MESSAGE = (
    "Your request was received. Your reference number is not available yet; "
    "please keep your submission email for follow-up."
)


@router.get("/concerns", response_model=List[str])
async def list_concerns():
    return CONCERN_TYPES


@router.get("/departments", response_model=List[str])
async def list_departments():
    return DEPARTMENTS


@router.post("/", response_model=SubmissionResponse, status_code=201)
async def submit_request(
    full_name: str = Form(...),
    email: str = Form(...),
    contact_number: str = Form(...),
    barangay: str = Form(...),
    street: str = Form(...),
    concern: str = Form(...),
    custom_concern: Optional[str] = Form(None),
    attachment: Optional[UploadFile] = File(None),
    token: Optional[str] = Depends(get_bearer_token),
    session: AsyncSession = Depends(get_session),
    uploader: AttachmentUploader = Depends(get_uploader),
):
    """
    Submit a citizen request (public form)
    The attachment is optional and never blocks the submission
    """
    try:
        form = FoiRequestSubmit(
            full_name=full_name,
            email=email,
            contact_number=contact_number,
            barangay=barangay,
            street=street,
            concern=concern,
            custom_concern=custom_concern,
        )
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=e.errors(include_url=False, include_context=False))

    file = None
    if attachment is not None and attachment.filename:
        file = Attachment(
            filename=attachment.filename,
            content=await attachment.read(),
            content_type=attachment.content_type,
        )

    result = await RequestIntake(session, uploader).submit(form, file, access_token=token)
    if not result.success:
        raise HTTPException(status_code=500, detail=result.error)

    if result.reference_number:
        message = f"Your request has been submitted. Reference number: {result.reference_number}"
    else:
        message = NO_REFERENCE_MESSAGE

    return SubmissionResponse(success=True, reference_number=result.reference_number, message=message)


@router.get("/", response_model=List[FoiRequestRead])
async def list_requests(
    status: Optional[RequestStatus] = None,
    staff: StaffMember = Depends(get_current_staff),
    session: AsyncSession = Depends(get_session),
    audit: ActivityLogger = Depends(get_activity_logger),
):
    """List submitted requests, newest first"""
    return await RequestLifecycle(session, audit, staff.id).list(status)


@router.get("/{request_id}", response_model=FoiRequestRead)
async def get_request(
    request_id: UUID,
    staff: StaffMember = Depends(get_current_staff),
    session: AsyncSession = Depends(get_session),
    audit: ActivityLogger = Depends(get_activity_logger),
):
    return await RequestLifecycle(session, audit, staff.id).get(request_id)


@router.patch("/{request_id}/status", response_model=FoiRequestRead)
async def update_request_status(
    request_id: UUID,
    body: RequestStatusUpdate,
    staff: StaffMember = Depends(require_editor),
    session: AsyncSession = Depends(get_session),
    audit: ActivityLogger = Depends(get_activity_logger),
):
    return await RequestLifecycle(session, audit, staff.id).set_status(request_id, body.status)


@router.post("/{request_id}/refer", response_model=FoiRequestRead)
async def refer_request(
    request_id: UUID,
    body: ReferralRequest,
    staff: StaffMember = Depends(require_editor),
    session: AsyncSession = Depends(get_session),
    audit: ActivityLogger = Depends(get_activity_logger),
):
    """Refer to a department; the request moves to in_review"""
    return await RequestLifecycle(session, audit, staff.id).refer(
        request_id, body.department, body.note
    )
