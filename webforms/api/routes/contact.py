from fastapi import APIRouter, Depends, Request
from starlette.concurrency import run_in_threadpool

from webforms.api.deps import FORM_METHODS, get_form_fields, get_submission_context
from webforms.api.responses import build_response
from webforms.core.errors import MethodNotAllowed
from webforms.schemas.public import SubmissionOut
from webforms.services.pipeline import SubmissionContext, handle_contact

router = APIRouter(
    prefix="/contact",
    tags=["Contact"],
)


# =========================
# 🔓 PUBLIC: submit contact
# =========================
@router.api_route("", methods=FORM_METHODS, response_model=SubmissionOut)
async def submit_contact(
    request: Request,
    form: dict[str, str] = Depends(get_form_fields),
    ctx: SubmissionContext = Depends(get_submission_context),
):
    if request.method != "POST":
        return build_response(MethodNotAllowed())

    #Mail delivery blocks, keep it off the event loop
    outcome = await run_in_threadpool(handle_contact, form, ctx)
    return build_response(outcome)
