"""
Offer Service - offer ledger

Invariant: for a (property, buyer) pair at most one offer is live (pending or accepted).
The application check gives precise errors; the partial unique index on offers closes the race.
"""
from typing import Optional, List, Dict
import logging
from sqlalchemy import select, update, desc
from sqlalchemy.exc import IntegrityError
from app.database.connection import AsyncSessionLocal
from app.models.offer import Offer, OFFER_PENDING, OFFER_ACCEPTED, OFFER_REJECTED, LIVE_OFFER_STATUSES
from app.models.property import Property, STATUS_SOLD
from app.utils.errors import NotFound, Forbidden, Conflict, InvalidInput, ALREADY_SOLD, DUPLICATE_OFFER
from app.utils.validators import ensure_valid_id, new_id, normalize_email

logger = logging.getLogger(__name__)

TRANSITION_TARGETS = (OFFER_ACCEPTED, OFFER_REJECTED)


def offer_to_dict(offer: Offer) -> Dict:
    return {
        "id": offer.id,
        "property_id": offer.property_id,
        "property_title": offer.property_title,
        "property_location": offer.property_location,
        "agent_email": offer.agent_email,
        "buyer_email": offer.buyer_email,
        "buyer_name": offer.buyer_name,
        "offered_amount": str(offer.offered_amount),
        "status": offer.status,
        "transaction_id": offer.transaction_id,
        "created_at": offer.created_at.isoformat() if offer.created_at else "",
        "updated_at": offer.updated_at.isoformat() if offer.updated_at else "",
    }


async def submit_offer(
    property_id: str,
    buyer_email: str,
    offered_amount: float,
    buyer_name: Optional[str] = None,
) -> Dict:
    """
    Submit a pending offer. Checks run in a fixed order so the caller gets the precise cause:
    malformed id -> missing listing -> sold listing -> duplicate live offer.
    """
    property_id = ensure_valid_id(property_id, "property id")
    buyer_email = normalize_email(buyer_email)

    async with AsyncSessionLocal() as session:
        stmt = select(Property).where(Property.id == property_id)
        result = await session.execute(stmt)
        prop = result.scalar_one_or_none()
        if not prop:
            raise NotFound("Property not found")

        if prop.status == STATUS_SOLD:
            raise Conflict("Property is already sold", reason=ALREADY_SOLD)

        existing_stmt = select(Offer.id).where(
            Offer.property_id == property_id,
            Offer.buyer_email == buyer_email,
            Offer.status.in_(LIVE_OFFER_STATUSES),
        )
        existing = await session.execute(existing_stmt)
        if existing.first() is not None:
            raise Conflict("You already have an active offer on this property", reason=DUPLICATE_OFFER)

        offer = Offer(
            id=new_id(),
            property_id=property_id,
            property_title=prop.title,
            property_location=prop.location,
            agent_email=prop.agent_email,
            buyer_email=buyer_email,
            buyer_name=buyer_name,
            offered_amount=offered_amount,
            status=OFFER_PENDING,
        )
        session.add(offer)

        try:
            await session.commit()
        except IntegrityError:
            # Lost a race with a near-simultaneous submission from the same buyer
            await session.rollback()
            logger.info(f"[OFFERS] Duplicate live offer rejected by constraint: {buyer_email} on {property_id}")
            raise Conflict("You already have an active offer on this property", reason=DUPLICATE_OFFER)

        await session.refresh(offer)
        logger.info(f"[OFFERS] {buyer_email} offered {offered_amount} on {property_id} (offer {offer.id})")
        return offer_to_dict(offer)


async def get_offer_by_id(offer_id: str) -> Dict:
    offer_id = ensure_valid_id(offer_id, "offer id")

    async with AsyncSessionLocal() as session:
        stmt = select(Offer).where(Offer.id == offer_id)
        result = await session.execute(stmt)
        offer = result.scalar_one_or_none()
        if not offer:
            raise NotFound("Offer not found")
        return offer_to_dict(offer)


async def get_offers_by_buyer(buyer_email: str) -> List[Dict]:
    async with AsyncSessionLocal() as session:
        stmt = (
            select(Offer)
            .where(Offer.buyer_email == normalize_email(buyer_email))
            .order_by(desc(Offer.created_at))
        )
        result = await session.execute(stmt)
        return [offer_to_dict(o) for o in result.scalars().all()]


async def get_offers_by_agent(agent_email: str) -> List[Dict]:
    async with AsyncSessionLocal() as session:
        stmt = (
            select(Offer)
            .where(Offer.agent_email == normalize_email(agent_email))
            .order_by(desc(Offer.created_at))
        )
        result = await session.execute(stmt)
        return [offer_to_dict(o) for o in result.scalars().all()]


async def set_offer_status(offer_id: str, new_status: str, agent_email: str) -> Dict:
    """
    pending -> accepted | rejected, performed by the offer's agent.
    An offer that is no longer pending is left alone and reported with modified=False.
    """
    offer_id = ensure_valid_id(offer_id, "offer id")
    if new_status not in TRANSITION_TARGETS:
        raise InvalidInput("Status must be 'accepted' or 'rejected'")

    async with AsyncSessionLocal() as session:
        stmt = select(Offer).where(Offer.id == offer_id)
        result = await session.execute(stmt)
        offer = result.scalar_one_or_none()
        if not offer:
            raise NotFound("Offer not found")

        if offer.agent_email != normalize_email(agent_email):
            raise Forbidden()

        if offer.status != OFFER_PENDING:
            return {"id": offer_id, "status": offer.status, "modified": False}

        result = await session.execute(
            update(Offer)
            .where(Offer.id == offer_id, Offer.status == OFFER_PENDING)
            .values(status=new_status)
        )
        await session.commit()

        if result.rowcount == 0:
            await session.refresh(offer)
            return {"id": offer_id, "status": offer.status, "modified": False}

        logger.info(f"[OFFERS] Offer {offer_id} -> {new_status}")
        return {"id": offer_id, "status": new_status, "modified": True}


async def accept_offer(offer_id: str, agent_email: str) -> Dict:
    return await set_offer_status(offer_id, OFFER_ACCEPTED, agent_email)


async def reject_offer(offer_id: str, agent_email: str) -> Dict:
    return await set_offer_status(offer_id, OFFER_REJECTED, agent_email)
