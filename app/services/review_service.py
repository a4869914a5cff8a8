from typing import List, Dict, Optional
from sqlalchemy import select, desc
from app.database.connection import AsyncSessionLocal
from app.models.review import Review
from app.utils.validators import ensure_valid_id, new_id, normalize_email


def _review_to_dict(review: Review) -> Dict:
    return {
        "id": review.id,
        "property_id": review.property_id,
        "property_title": review.property_title,
        "reviewer_email": review.reviewer_email,
        "reviewer_name": review.reviewer_name,
        "rating": review.rating,
        "comment": review.comment,
        "created_at": review.created_at.isoformat() if review.created_at else "",
    }


async def create_review(
    property_id: str,
    reviewer_email: str,
    rating: int,
    comment: Optional[str] = None,
    reviewer_name: Optional[str] = None,
    property_title: Optional[str] = None,
) -> Dict:
    property_id = ensure_valid_id(property_id, "property id")

    async with AsyncSessionLocal() as session:
        review = Review(
            id=new_id(),
            property_id=property_id,
            property_title=property_title,
            reviewer_email=normalize_email(reviewer_email),
            reviewer_name=reviewer_name,
            rating=rating,
            comment=comment,
        )
        session.add(review)
        await session.commit()
        await session.refresh(review)
        return _review_to_dict(review)


async def get_reviews_by_property(property_id: str) -> List[Dict]:
    property_id = ensure_valid_id(property_id, "property id")

    async with AsyncSessionLocal() as session:
        stmt = select(Review).where(Review.property_id == property_id).order_by(desc(Review.created_at))
        result = await session.execute(stmt)
        return [_review_to_dict(r) for r in result.scalars().all()]
