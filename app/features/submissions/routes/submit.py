from typing import Any

from fastapi import APIRouter, Depends, Request, status

from app.features.submissions.dependencies.secret import require_form_secret
from app.features.submissions.dependencies.store import get_store
from app.features.submissions.schemas.submission import SubmissionIn
from app.features.submissions.services.contact_store import ContactStore
from app.features.submissions.services.submission_service import SubmissionService
from app.features.submissions.utils.normalize import client_ip
from app.platform.exceptions import SERVER_ERROR_MESSAGE, MissingFieldsError
from app.platform.logger import get_logger
from app.platform.response import error_response, ok_response

router = APIRouter(tags=["Submissions"])
logger = get_logger(__name__)

_BODY_SCHEMA = {
    "requestBody": {
        "required": True,
        "content": {"application/json": {"schema": SubmissionIn.model_json_schema()}},
    }
}


async def _read_payload(request: Request) -> Any:
    # Parsed by hand: the secret dependency must run before any body handling.
    try:
        return await request.json()
    except ValueError:
        return None


@router.post("/api/submit", dependencies=[Depends(require_form_secret)], openapi_extra=_BODY_SCHEMA)
@router.post("/submit", dependencies=[Depends(require_form_secret)], include_in_schema=False)
async def submit_form(request: Request, store: ContactStore = Depends(get_store)):
    """
    Form submission
    - Silently accepts honeypot hits without storing anything
    - Finds or creates the contact by email / phone
    - Replaces the contact's communication preferences
    - Logs the raw submission for audit
    """
    payload = await _read_payload(request)
    submission = SubmissionIn.model_validate(payload if isinstance(payload, dict) else {})

    if submission.is_bot:
        logger.info("Honeypot tripped, dropping submission")
        return ok_response()

    ip = client_ip(
        request.headers.get("x-forwarded-for"),
        request.client.host if request.client else None,
    )
    service = SubmissionService(store)

    try:
        contact_id = await service.process(
            submission,
            raw_payload=payload,
            ip=ip,
            user_agent=request.headers.get("user-agent"),
        )
    except MissingFieldsError as exc:
        logger.info("Rejected submission with missing required fields")
        return error_response(exc.message, exc.status_code)
    except Exception as exc:
        logger.exception("submit error", exc_info=exc)
        return error_response(SERVER_ERROR_MESSAGE, status.HTTP_500_INTERNAL_SERVER_ERROR)

    logger.info(f"Submission accepted for contact {contact_id} (source={submission.source or 'web'})")
    return ok_response(contact_id=contact_id)
