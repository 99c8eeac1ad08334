from fastapi import APIRouter, Depends, Request
from starlette.concurrency import run_in_threadpool

from webforms.api.deps import FORM_METHODS, get_form_fields, get_submission_context
from webforms.api.responses import build_response
from webforms.core.errors import MethodNotAllowed
from webforms.schemas.public import SubmissionOut
from webforms.services.pipeline import SubmissionContext, handle_newsletter

router = APIRouter(
    prefix="/newsletter",
    tags=["Newsletter"],
)


# ============================
# 🔓 PUBLIC: newsletter signup
# ============================
@router.api_route("", methods=FORM_METHODS, response_model=SubmissionOut)
async def subscribe_newsletter(
    request: Request,
    form: dict[str, str] = Depends(get_form_fields),
    ctx: SubmissionContext = Depends(get_submission_context),
):
    if request.method != "POST":
        return build_response(MethodNotAllowed())

    outcome = await run_in_threadpool(handle_newsletter, form, ctx)
    return build_response(outcome)
