from fastapi import APIRouter, Depends, status
from typing import List
from app.schemas.review import ReviewCreateRequest, ReviewResponse
from app.schemas.report import ReportCreateRequest, ReportResponse
from app.services.review_service import create_review, get_reviews_by_property
from app.services.report_service import create_report
from app.utils.dependencies import get_current_user_email, ensure_identity_matches

router = APIRouter(tags=["Reviews & Reports"])


@router.post("/reviews", response_model=ReviewResponse, status_code=status.HTTP_201_CREATED)
async def add_review(
    request: ReviewCreateRequest,
    current_email: str = Depends(get_current_user_email)
):
    """Review a listing as the authenticated user"""
    ensure_identity_matches(current_email, request.reviewer_email)
    review = await create_review(
        property_id=request.property_id,
        reviewer_email=request.reviewer_email,
        rating=request.rating,
        comment=request.comment,
        reviewer_name=request.reviewer_name,
        property_title=request.property_title,
    )
    return ReviewResponse(**review)


@router.get("/reviews/{property_id}", response_model=List[ReviewResponse])
async def list_property_reviews(property_id: str):
    """Reviews for one listing"""
    reviews = await get_reviews_by_property(property_id)
    return [ReviewResponse(**r) for r in reviews]


@router.post("/report-property", response_model=ReportResponse, status_code=status.HTTP_201_CREATED)
async def report_property(
    request: ReportCreateRequest,
    current_email: str = Depends(get_current_user_email)
):
    """Report a listing to the admins"""
    ensure_identity_matches(current_email, request.reporter_email)
    report = await create_report(
        property_id=request.property_id,
        reporter_email=request.reporter_email,
        reason=request.reason,
        property_title=request.property_title,
    )
    return ReportResponse(**report)
