"""Ranking session API endpoints for Color Quiz."""

from typing import Optional

from fastapi import APIRouter, Depends, Query, Request, status

from colorquiz.api.dependencies import get_ranking_service, get_request_id
from colorquiz.schemas.base import SuccessResponse, create_success_response
from colorquiz.schemas.ranking_schemas import (
    NextQuestionResponse,
    RankingSavedResponse,
    RankingSubmitRequest,
    SessionCreatedResponse,
    SessionProgressResponse,
    SessionResultsResponse,
)
from colorquiz.services.ranking_service import RankingService

router = APIRouter(
    prefix="/sessions",
    tags=["Ranking Sessions"],
    responses={
        400: {"description": "Invalid input"},
        404: {"description": "Session not found"},
        422: {"description": "Validation error"},
        500: {"description": "Internal server error"}
    }
)


@router.post(
    "",
    response_model=SuccessResponse[SessionCreatedResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Create ranking session"
)
async def create_session(
    request: Request,
    service: RankingService = Depends(get_ranking_service),
) -> SuccessResponse[SessionCreatedResponse]:
    session = await service.create_session()
    return create_success_response(
        data=SessionCreatedResponse(session_id=session.id, question_count=session.assigned_count),
        message="Ranking session created successfully",
        request_id=get_request_id(request),
    )


@router.get(
    "/{session_id}/question",
    response_model=SuccessResponse[NextQuestionResponse],
    summary="Get next ranking question",
    description="First question of the session without stored ranks, or done"
)
async def get_next_question(
    session_id: str,
    request: Request,
    lang: Optional[str] = Query(None, description="Locale, e.g. en or es"),
    service: RankingService = Depends(get_ranking_service),
) -> SuccessResponse[NextQuestionResponse]:
    next_question = await service.get_next_question(session_id, lang)
    return create_success_response(data=next_question, request_id=get_request_id(request))


@router.post(
    "/{session_id}/rankings",
    response_model=SuccessResponse[RankingSavedResponse],
    summary="Submit ranking",
    description="Rank all four candidate answers of one question"
)
async def submit_ranking(
    session_id: str,
    ranking_request: RankingSubmitRequest,
    request: Request,
    service: RankingService = Depends(get_ranking_service),
) -> SuccessResponse[RankingSavedResponse]:
    totals = await service.submit_ranking(
        session_id,
        ranking_request.question_id,
        [item.model_dump() for item in ranking_request.ranked],
    )
    return create_success_response(
        data=RankingSavedResponse.from_totals(ranking_request.question_id, totals),
        message="Ranking saved",
        request_id=get_request_id(request),
    )


@router.get(
    "/{session_id}/progress",
    response_model=SuccessResponse[SessionProgressResponse],
    summary="Get session progress"
)
async def get_progress(
    session_id: str,
    request: Request,
    service: RankingService = Depends(get_ranking_service),
) -> SuccessResponse[SessionProgressResponse]:
    progress = await service.get_progress(session_id)
    return create_success_response(
        data=SessionProgressResponse.from_progress(session_id, progress),
        request_id=get_request_id(request),
    )


@router.get(
    "/{session_id}/results",
    response_model=SuccessResponse[SessionResultsResponse],
    summary="Get session results",
    responses={409: {"description": "Session has unranked questions"}}
)
async def get_results(
    session_id: str,
    request: Request,
    service: RankingService = Depends(get_ranking_service),
) -> SuccessResponse[SessionResultsResponse]:
    result = await service.get_results(session_id)
    return create_success_response(
        data=SessionResultsResponse.from_result(session_id, result),
        request_id=get_request_id(request),
    )
