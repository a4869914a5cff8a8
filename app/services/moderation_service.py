"""
Moderation Service - destructive admin cascades

Both cascades are sequential deletes with no compensating rollback. Each step commits
on its own; when a step fails the counts of the completed steps are reported through
PartialCascadeFailure instead of being hidden.
"""
from typing import Dict
import logging
from sqlalchemy import select, update, delete
from sqlalchemy.exc import SQLAlchemyError
from app.database.connection import AsyncSessionLocal
from app.models.user import User
from app.models.property import Property
from app.models.review import Review
from app.models.report import Report
from app.utils.errors import NotFound, PartialCascadeFailure
from app.utils.validators import ensure_valid_id

logger = logging.getLogger(__name__)


async def mark_fraudulent(user_id: str) -> Dict:
    """
    Flag a user as fraudulent and delete EVERY listing they own, whatever its status
    (verified and sold listings included). Irreversible.
    """
    user_id = ensure_valid_id(user_id, "user id")

    async with AsyncSessionLocal() as session:
        stmt = select(User).where(User.id == user_id)
        result = await session.execute(stmt)
        user = result.scalar_one_or_none()
        if not user:
            raise NotFound("User not found")

        email = user.email
        completed = {"fraud_flag_set": False, "properties_deleted": 0}

        # Step 1: fraud flag (blocks new listings from here on)
        flag_result = await session.execute(
            update(User).where(User.id == user_id, User.is_fraud.is_(False)).values(is_fraud=True)
        )
        await session.commit()
        completed["fraud_flag_set"] = flag_result.rowcount > 0

        # Step 2: remove all their listings
        try:
            delete_result = await session.execute(
                delete(Property).where(Property.agent_email == email)
            )
            await session.commit()
        except SQLAlchemyError:
            await session.rollback()
            logger.error(f"[MODERATION] Fraud cascade for {email} failed while deleting listings", exc_info=True)
            raise PartialCascadeFailure("delete_properties", completed)

        completed["properties_deleted"] = delete_result.rowcount or 0
        logger.warning(
            f"[MODERATION] User {email} marked fraudulent; "
            f"{completed['properties_deleted']} listing(s) permanently deleted"
        )

        return {"user_id": user_id, "email": email, **completed}


async def remove_reported_property(property_id: str) -> Dict:
    """Delete a reported listing, then its reviews, then its reports. Returns per-collection counts."""
    property_id = ensure_valid_id(property_id, "property id")
    completed = {"property_deleted": 0, "reviews_deleted": 0, "reports_deleted": 0}

    steps = (
        ("property_deleted", delete(Property).where(Property.id == property_id)),
        ("reviews_deleted", delete(Review).where(Review.property_id == property_id)),
        ("reports_deleted", delete(Report).where(Report.property_id == property_id)),
    )

    async with AsyncSessionLocal() as session:
        for key, stmt in steps:
            try:
                result = await session.execute(stmt)
                await session.commit()
            except SQLAlchemyError:
                await session.rollback()
                logger.error(
                    f"[MODERATION] Reported-property cascade for {property_id} failed at {key}; completed={completed}",
                    exc_info=True,
                )
                raise PartialCascadeFailure(key, dict(completed))
            completed[key] = result.rowcount or 0

    logger.warning(
        f"[MODERATION] Removed reported property {property_id}: "
        f"property={completed['property_deleted']}, reviews={completed['reviews_deleted']}, "
        f"reports={completed['reports_deleted']}"
    )
    return {"property_id": property_id, **completed}
