"""
Property Service - listing store and publication state machine

pending -> verified | rejected   (admin decision, one-way)
verified | pending | rejected -> sold   (settlement only, terminal)
"""
from typing import Optional, List, Dict, Tuple
import logging
from sqlalchemy import select, update, delete, or_, and_, desc, func
from app.database.connection import AsyncSessionLocal
from app.models.property import (
    Property,
    STATUS_PENDING,
    STATUS_VERIFIED,
    STATUS_REJECTED,
    STATUS_SOLD,
    SEARCHABLE_STATUSES,
)
from app.models.user import User, ROLE_AGENT
from app.utils.errors import NotFound, Forbidden, Rejected, Conflict, InvalidInput, FRAUDULENT_AGENT, INVALID_TRANSITION
from app.utils.validators import ensure_valid_id, new_id, normalize_email

logger = logging.getLogger(__name__)


def property_to_dict(prop: Property) -> Dict:
    return {
        "id": prop.id,
        "agent_email": prop.agent_email,
        "agent_name": prop.agent_name,
        "title": prop.title,
        "location": prop.location,
        "image": prop.image,
        "price_min": str(prop.price_min) if prop.price_min is not None else None,
        "price_max": str(prop.price_max) if prop.price_max is not None else None,
        "status": prop.status,
        "advertised": bool(prop.advertised),
        "created_at": prop.created_at.isoformat() if prop.created_at else "",
        "updated_at": prop.updated_at.isoformat() if prop.updated_at else "",
    }


def _check_price_range(price_min, price_max) -> None:
    if price_min is not None and price_max is not None and float(price_min) > float(price_max):
        raise InvalidInput("price_min cannot exceed price_max")


async def create_property(owner_email: str, property_data: Dict) -> Dict:
    """Create a new pending listing. The owner must be a non-fraudulent agent."""
    owner_email = normalize_email(owner_email)
    _check_price_range(property_data.get("price_min"), property_data.get("price_max"))

    async with AsyncSessionLocal() as session:
        result = await session.execute(select(User).where(User.email == owner_email))
        owner = result.scalar_one_or_none()

        if not owner or owner.role != ROLE_AGENT:
            raise Forbidden("Only agents can create listings")

        if owner.is_fraud:
            logger.warning(f"[LISTINGS] Blocked listing creation by fraudulent agent {owner_email}")
            raise Rejected("Agent is marked as fraudulent", reason=FRAUDULENT_AGENT)

        new_property = Property(
            id=new_id(),
            agent_email=owner_email,
            agent_name=property_data.get("agent_name") or owner.name,
            title=property_data["title"],
            location=property_data["location"],
            image=property_data.get("image"),
            price_min=property_data.get("price_min"),
            price_max=property_data.get("price_max"),
            status=STATUS_PENDING,
            advertised=False,
        )

        session.add(new_property)
        await session.commit()
        await session.refresh(new_property)

        logger.info(f"[LISTINGS] {owner_email} created listing {new_property.id}")
        return property_to_dict(new_property)


async def get_property_by_id(property_id: str) -> Dict:
    """Get a listing by id. Raises InvalidInput for a malformed id and NotFound if absent."""
    property_id = ensure_valid_id(property_id, "property id")

    async with AsyncSessionLocal() as session:
        stmt = select(Property).where(Property.id == property_id)
        result = await session.execute(stmt)
        prop = result.scalar_one_or_none()
        if not prop:
            raise NotFound("Property not found")
        return property_to_dict(prop)


async def search_properties(
    search: Optional[str] = None,
    page: int = 1,
    page_size: int = 16,
) -> Tuple[List[Dict], int]:
    """
    Public search over verified and sold listings only.
    Results are ordered by created_at DESC (latest first). Returns (items, total).
    """
    async with AsyncSessionLocal() as session:
        conditions = [Property.status.in_(SEARCHABLE_STATUSES)]

        if search:
            search_pattern = f"%{search}%"
            conditions.append(
                or_(
                    Property.title.ilike(search_pattern),
                    Property.location.ilike(search_pattern),
                )
            )

        where_clause = and_(*conditions)

        count_stmt = select(func.count()).select_from(Property).where(where_clause)
        total_result = await session.execute(count_stmt)
        total = total_result.scalar_one() or 0

        stmt = (
            select(Property)
            .where(where_clause)
            .order_by(desc(Property.created_at))
            .offset(max(page - 1, 0) * page_size)
            .limit(page_size)
        )
        result = await session.execute(stmt)
        items = [property_to_dict(p) for p in result.scalars().all()]

        return items, total


async def get_properties_by_agent_email(agent_email: str) -> List[Dict]:
    """All listings owned by an agent, any status"""
    async with AsyncSessionLocal() as session:
        stmt = (
            select(Property)
            .where(Property.agent_email == normalize_email(agent_email))
            .order_by(desc(Property.created_at))
        )
        result = await session.execute(stmt)
        return [property_to_dict(p) for p in result.scalars().all()]


async def get_all_properties(status: Optional[str] = None) -> List[Dict]:
    """Admin view of every listing, optionally filtered by status"""
    async with AsyncSessionLocal() as session:
        stmt = select(Property)
        if status:
            stmt = stmt.where(Property.status == status)
        stmt = stmt.order_by(desc(Property.created_at))
        result = await session.execute(stmt)
        return [property_to_dict(p) for p in result.scalars().all()]


async def get_advertised_properties() -> List[Dict]:
    """Advertised listings that are also publicly searchable"""
    async with AsyncSessionLocal() as session:
        stmt = (
            select(Property)
            .where(Property.advertised.is_(True), Property.status.in_(SEARCHABLE_STATUSES))
            .order_by(desc(Property.created_at))
        )
        result = await session.execute(stmt)
        return [property_to_dict(p) for p in result.scalars().all()]


async def update_property(property_id: str, owner_email: str, update_data: Dict) -> Dict:
    """Owner updates listing details. Status and advertised are not editable here."""
    property_id = ensure_valid_id(property_id, "property id")

    async with AsyncSessionLocal() as session:
        stmt = select(Property).where(Property.id == property_id)
        result = await session.execute(stmt)
        prop = result.scalar_one_or_none()
        if not prop:
            raise NotFound("Property not found")

        if prop.agent_email != normalize_email(owner_email):
            raise Forbidden()

        _check_price_range(
            update_data.get("price_min", prop.price_min),
            update_data.get("price_max", prop.price_max),
        )

        for field in ("title", "location", "image", "price_min", "price_max"):
            if field in update_data:
                setattr(prop, field, update_data[field])

        await session.commit()
        await session.refresh(prop)
        return property_to_dict(prop)


async def delete_property(property_id: str, actor_email: str, is_admin: bool = False) -> bool:
    """Delete a listing. Only its owner or an admin may do so."""
    property_id = ensure_valid_id(property_id, "property id")

    async with AsyncSessionLocal() as session:
        stmt = select(Property).where(Property.id == property_id)
        result = await session.execute(stmt)
        prop = result.scalar_one_or_none()
        if not prop:
            raise NotFound("Property not found")

        if not is_admin and prop.agent_email != normalize_email(actor_email):
            raise Forbidden()

        result = await session.execute(delete(Property).where(Property.id == property_id))
        await session.commit()
        return result.rowcount > 0


async def _review_transition(property_id: str, target_status: str) -> Dict:
    """Admin decision on a pending listing. Replaying the same decision is a no-op."""
    property_id = ensure_valid_id(property_id, "property id")

    async with AsyncSessionLocal() as session:
        stmt = select(Property).where(Property.id == property_id)
        result = await session.execute(stmt)
        prop = result.scalar_one_or_none()
        if not prop:
            raise NotFound("Property not found")

        if prop.status == target_status:
            return {"id": property_id, "status": prop.status, "modified": False}

        if prop.status != STATUS_PENDING:
            raise Conflict(
                f"Cannot move a {prop.status} listing to {target_status}",
                reason=INVALID_TRANSITION,
            )

        # Conditional on pending so two racing admin decisions cannot both apply
        result = await session.execute(
            update(Property)
            .where(Property.id == property_id, Property.status == STATUS_PENDING)
            .values(status=target_status)
        )
        await session.commit()

        if result.rowcount == 0:
            await session.refresh(prop)
            if prop.status != target_status:
                raise Conflict(
                    f"Cannot move a {prop.status} listing to {target_status}",
                    reason=INVALID_TRANSITION,
                )
            return {"id": property_id, "status": prop.status, "modified": False}

        logger.info(f"[LISTINGS] Listing {property_id} -> {target_status}")
        return {"id": property_id, "status": target_status, "modified": True}


async def verify_property(property_id: str) -> Dict:
    return await _review_transition(property_id, STATUS_VERIFIED)


async def reject_property(property_id: str) -> Dict:
    return await _review_transition(property_id, STATUS_REJECTED)


async def mark_property_sold(session, property_id: str) -> bool:
    """
    Terminal transition used by the settlement engine, inside its session.
    Idempotent: returns False when the listing is already sold or no longer exists.
    """
    result = await session.execute(
        update(Property)
        .where(Property.id == property_id, Property.status != STATUS_SOLD)
        .values(status=STATUS_SOLD)
    )
    return result.rowcount > 0


async def set_advertised(property_id: str, owner_email: Optional[str] = None) -> Dict:
    """
    Mark a listing as advertised. Orthogonal to status.
    When owner_email is given the caller must own the listing (admins pass None).
    """
    property_id = ensure_valid_id(property_id, "property id")

    async with AsyncSessionLocal() as session:
        stmt = select(Property).where(Property.id == property_id)
        result = await session.execute(stmt)
        prop = result.scalar_one_or_none()
        if not prop:
            raise NotFound("Property not found")

        if owner_email is not None and prop.agent_email != normalize_email(owner_email):
            raise Forbidden()

        if prop.advertised:
            return {"id": property_id, "advertised": True, "modified": False}

        prop.advertised = True
        await session.commit()
        return {"id": property_id, "advertised": True, "modified": True}
