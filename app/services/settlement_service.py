"""
Settlement Service - converts a paid offer into a sale

One logical operation with four effects, each written as its own idempotent step:
  1. accept the offer and attach the transaction id
  2. reject every other live offer on the same property
  3. insert the immutable sale record (unique on offer, transaction and property)
  4. mark the property sold

No transaction spans the steps. A crash between steps leaves partial state that a
retry with the same (offer_id, transaction_id) completes. Step 1 claims the listing:
at most one offer per property can carry a transaction id (partial unique index), so
two rival offers settling at once cannot both get past it.
"""
from typing import Dict, Optional
import logging
from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from app.database.connection import AsyncSessionLocal
from app.models.offer import Offer, OFFER_ACCEPTED, OFFER_REJECTED, LIVE_OFFER_STATUSES
from app.models.property import Property
from app.models.sale_record import SaleRecord
from app.services.property_service import mark_property_sold
from app.utils.errors import (
    NotFound,
    Forbidden,
    Conflict,
    ALREADY_SOLD,
    DUPLICATE_SETTLEMENT,
    OFFER_REJECTED as OFFER_REJECTED_REASON,
)
from app.utils.validators import ensure_valid_id, new_id, normalize_email

logger = logging.getLogger(__name__)


def sale_record_to_dict(sale: SaleRecord) -> Dict:
    return {
        "id": sale.id,
        "offer_id": sale.offer_id,
        "transaction_id": sale.transaction_id,
        "property_id": sale.property_id,
        "property_title": sale.property_title,
        "property_location": sale.property_location,
        "sold_price": str(sale.sold_price),
        "buyer_email": sale.buyer_email,
        "buyer_name": sale.buyer_name,
        "agent_email": sale.agent_email,
        "sold_at": sale.sold_at.isoformat() if sale.sold_at else "",
    }


async def _get_sale_for_property(session, property_id: str) -> Optional[SaleRecord]:
    result = await session.execute(
        select(SaleRecord).where(SaleRecord.property_id == property_id)
    )
    return result.scalar_one_or_none()


async def _get_claiming_offer_id(session, property_id: str, offer_id: str) -> Optional[str]:
    """Id of another offer on the listing that already carries a transaction id"""
    result = await session.execute(
        select(Offer.id).where(
            Offer.property_id == property_id,
            Offer.id != offer_id,
            Offer.transaction_id.is_not(None),
        )
    )
    return result.scalars().first()


def _check_preconditions(offer: Offer, transaction_id: str) -> None:
    if offer.status == OFFER_REJECTED:
        raise Conflict("Offer has been rejected and cannot be settled", reason=OFFER_REJECTED_REASON)

    if offer.transaction_id and offer.transaction_id != transaction_id:
        raise Conflict(
            "Offer is already settled under a different transaction",
            reason=DUPLICATE_SETTLEMENT,
        )


async def settle(offer_id: str, transaction_id: str, actor_email: str) -> Dict:
    """Settle an offer. Safe to call again with the same arguments."""
    offer_id = ensure_valid_id(offer_id, "offer id")
    actor_email = normalize_email(actor_email)

    async with AsyncSessionLocal() as session:
        stmt = select(Offer).where(Offer.id == offer_id)
        result = await session.execute(stmt)
        offer = result.scalar_one_or_none()
        if not offer:
            raise NotFound("Offer not found")

        if actor_email not in (offer.buyer_email, offer.agent_email):
            raise Forbidden()

        _check_preconditions(offer, transaction_id)

        property_id = offer.property_id

        stmt = select(Property.id).where(Property.id == property_id)
        result = await session.execute(stmt)
        if result.scalar_one_or_none() is None:
            logger.warning(f"[SETTLEMENT] Refusing to settle offer {offer_id}: listing {property_id} no longer exists")
            raise NotFound("Property not found")

        existing_sale = await _get_sale_for_property(session, property_id)
        if existing_sale and existing_sale.offer_id != offer_id:
            raise Conflict("Property is already sold", reason=ALREADY_SOLD)

        if await _get_claiming_offer_id(session, property_id, offer_id):
            raise Conflict("Property is already sold", reason=ALREADY_SOLD)

        logger.info(f"[SETTLEMENT] Settling offer {offer_id} (property {property_id}, txn {transaction_id})")

        # Step 1: accept the offer and attach the transaction id, claiming the listing
        try:
            step1 = await session.execute(
                update(Offer)
                .where(
                    Offer.id == offer_id,
                    Offer.status.in_(LIVE_OFFER_STATUSES),
                    Offer.transaction_id.is_(None),
                )
                .values(status=OFFER_ACCEPTED, transaction_id=transaction_id)
            )
            await session.commit()
        except IntegrityError:
            await session.rollback()
            claimant = await _get_claiming_offer_id(session, property_id, offer_id)
            if claimant:
                logger.info(f"[SETTLEMENT] Offer {offer_id} lost listing {property_id} to offer {claimant}")
                raise Conflict("Property is already sold", reason=ALREADY_SOLD)
            # transaction_id is unique: it already settled some other offer
            raise Conflict("Transaction id already used for another settlement", reason=DUPLICATE_SETTLEMENT)

        updated = step1.rowcount > 0
        if not updated:
            # Either a replay or a concurrent change; re-read and decide
            await session.refresh(offer)
            _check_preconditions(offer, transaction_id)
            if offer.transaction_id != transaction_id or offer.status != OFFER_ACCEPTED:
                raise Conflict("Offer changed during settlement, please retry", reason=DUPLICATE_SETTLEMENT)
            logger.info(f"[SETTLEMENT] Step 1 already applied for offer {offer_id}")

        # Step 2: competing-offer invalidation
        step2 = await session.execute(
            update(Offer)
            .where(
                Offer.property_id == property_id,
                Offer.id != offer_id,
                Offer.status.in_(LIVE_OFFER_STATUSES),
            )
            .values(status=OFFER_REJECTED)
        )
        await session.commit()
        rivals_rejected = step2.rowcount or 0
        logger.info(f"[SETTLEMENT] Step 2 rejected {rivals_rejected} competing offer(s) on {property_id}")

        # Step 3: immutable sale record, at most one per offer / transaction / property
        inserted = False
        result = await session.execute(select(SaleRecord).where(SaleRecord.offer_id == offer_id))
        sale = result.scalar_one_or_none()

        if sale is None:
            sale = SaleRecord(
                id=new_id(),
                offer_id=offer_id,
                transaction_id=transaction_id,
                property_id=property_id,
                property_title=offer.property_title,
                property_location=offer.property_location,
                sold_price=offer.offered_amount,
                buyer_email=offer.buyer_email,
                buyer_name=offer.buyer_name,
                agent_email=offer.agent_email,
            )
            session.add(sale)
            try:
                await session.commit()
                inserted = True
            except IntegrityError:
                await session.rollback()
                winner = await _get_sale_for_property(session, property_id)
                if winner is None or winner.offer_id != offer_id:
                    logger.error(
                        f"[SETTLEMENT] Sale record for {property_id} belongs to another offer "
                        f"while offer {offer_id} holds txn {transaction_id}; needs manual review"
                    )
                    raise Conflict("Property is already sold", reason=ALREADY_SOLD)
                sale = winner
        else:
            logger.info(f"[SETTLEMENT] Step 3 already applied, sale record {sale.id}")

        # Step 4: listing becomes sold
        property_marked_sold = await mark_property_sold(session, property_id)
        await session.commit()

        logger.info(
            f"[SETTLEMENT] Offer {offer_id} settled: updated={updated}, rivals_rejected={rivals_rejected}, "
            f"inserted={inserted}, property_marked_sold={property_marked_sold}"
        )

        return {
            "message": "Payment recorded and property marked as sold",
            "offer_id": offer_id,
            "transaction_id": transaction_id,
            "updated": updated,
            "rivals_rejected": rivals_rejected,
            "inserted": inserted,
            "property_marked_sold": property_marked_sold,
            "sale_id": sale.id if sale else None,
        }


async def get_sale_records_by_agent(agent_email: str) -> list:
    async with AsyncSessionLocal() as session:
        stmt = (
            select(SaleRecord)
            .where(SaleRecord.agent_email == normalize_email(agent_email))
            .order_by(SaleRecord.sold_at.desc())
        )
        result = await session.execute(stmt)
        return [sale_record_to_dict(s) for s in result.scalars().all()]
