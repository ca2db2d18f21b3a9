"""Attempt API endpoints for Color Quiz.

Routes stay thin: application errors propagate to the exception handlers in
``colorquiz.api.middleware.error_handler``.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, Request, status

from colorquiz.api.dependencies import get_attempt_service, get_request_id
from colorquiz.schemas.attempt_schemas import (
    AnswerRecordedResponse,
    AnswerSubmitRequest,
    AttemptCreatedResponse,
    AttemptResultsResponse,
    AttemptView,
    ProgressResponse,
)
from colorquiz.schemas.base import SuccessResponse, create_success_response
from colorquiz.services.attempt_service import AttemptService
from colorquiz.utils.logger import get_api_logger

router = APIRouter(
    prefix="/attempts",
    tags=["Attempts"],
    responses={
        400: {"description": "Invalid input"},
        404: {"description": "Attempt not found"},
        422: {"description": "Validation error"},
        500: {"description": "Internal server error"}
    }
)

logger = get_api_logger()


@router.post(
    "",
    response_model=SuccessResponse[AttemptCreatedResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Create attempt",
    description="Create an attempt with a freshly allocated question battery"
)
async def create_attempt(
    request: Request,
    service: AttemptService = Depends(get_attempt_service),
) -> SuccessResponse[AttemptCreatedResponse]:
    attempt = await service.create_attempt()
    return create_success_response(
        data=AttemptCreatedResponse(attempt_id=attempt.id, question_count=attempt.assigned_count),
        message="Attempt created successfully",
        request_id=get_request_id(request),
    )


@router.get(
    "/{attempt_id}",
    response_model=SuccessResponse[AttemptView],
    summary="Get attempt questions",
    description="Questions in position order with localized text and per-attempt option order"
)
async def get_attempt(
    attempt_id: str,
    request: Request,
    lang: Optional[str] = Query(None, description="Locale, e.g. en or es"),
    service: AttemptService = Depends(get_attempt_service),
) -> SuccessResponse[AttemptView]:
    view = await service.get_attempt_view(attempt_id, lang)
    return create_success_response(data=view, request_id=get_request_id(request))


@router.post(
    "/{attempt_id}/answers",
    response_model=SuccessResponse[AnswerRecordedResponse],
    summary="Record answer",
    description="Record or replace the answer to one assigned question"
)
async def submit_answer(
    attempt_id: str,
    answer_request: AnswerSubmitRequest,
    request: Request,
    service: AttemptService = Depends(get_attempt_service),
) -> SuccessResponse[AnswerRecordedResponse]:
    answer = await service.record_answer(
        attempt_id,
        answer_request.question_id,
        answer_request.qtype,
        answer_request.answer_value(),
    )
    return create_success_response(
        data=AnswerRecordedResponse(
            attempt_id=answer.attempt_id,
            question_id=answer.question_id,
            qtype=answer.qtype,
        ),
        message="Answer recorded",
        request_id=get_request_id(request),
    )


@router.get(
    "/{attempt_id}/progress",
    response_model=SuccessResponse[ProgressResponse],
    summary="Get attempt progress"
)
async def get_progress(
    attempt_id: str,
    request: Request,
    service: AttemptService = Depends(get_attempt_service),
) -> SuccessResponse[ProgressResponse]:
    progress = await service.get_progress(attempt_id)
    return create_success_response(
        data=ProgressResponse.from_progress(attempt_id, progress),
        request_id=get_request_id(request),
    )


@router.post(
    "/{attempt_id}/finish",
    response_model=SuccessResponse[AttemptResultsResponse],
    summary="Finish attempt",
    description="Score a completed attempt. Safe to call repeatedly.",
    responses={409: {"description": "Attempt has unanswered questions"}}
)
async def finish_attempt(
    attempt_id: str,
    request: Request,
    service: AttemptService = Depends(get_attempt_service),
) -> SuccessResponse[AttemptResultsResponse]:
    result = await service.finish(attempt_id)
    return create_success_response(
        data=AttemptResultsResponse.from_result(attempt_id, result),
        message="Attempt finished",
        request_id=get_request_id(request),
    )


@router.get(
    "/{attempt_id}/results",
    response_model=SuccessResponse[AttemptResultsResponse],
    summary="Get attempt results",
    responses={409: {"description": "Attempt has unanswered questions"}}
)
async def get_results(
    attempt_id: str,
    request: Request,
    service: AttemptService = Depends(get_attempt_service),
) -> SuccessResponse[AttemptResultsResponse]:
    result = await service.get_results(attempt_id)
    return create_success_response(
        data=AttemptResultsResponse.from_result(attempt_id, result),
        request_id=get_request_id(request),
    )
