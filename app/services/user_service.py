"""
User Service - sign-in registration, role lookup and admin role management
"""
from typing import Optional, List, Dict, Tuple
import logging
from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from app.config import settings
from app.database.connection import AsyncSessionLocal
from app.models.user import User, ROLE_BUYER, ROLE_ADMIN, ROLES
from app.utils.errors import NotFound, InvalidInput
from app.utils.validators import ensure_valid_id, new_id, normalize_email

logger = logging.getLogger(__name__)


def _user_to_dict(user: User) -> Dict:
    return {
        "id": user.id,
        "email": user.email,
        "name": user.name,
        "photo_url": user.photo_url,
        "role": user.role,
        "is_fraud": bool(user.is_fraud),
        "created_at": user.created_at.isoformat() if user.created_at else "",
    }


def _initial_role(email: str) -> str:
    bootstrap = settings.ADMIN_BOOTSTRAP_EMAIL
    if bootstrap and normalize_email(bootstrap) == email:
        return ROLE_ADMIN
    return ROLE_BUYER


async def get_user_by_email(email: str) -> Optional[Dict]:
    """Get user by email"""
    async with AsyncSessionLocal() as session:
        stmt = select(User).where(User.email == normalize_email(email))
        result = await session.execute(stmt)
        user = result.scalar_one_or_none()

        if not user:
            return None

        return _user_to_dict(user)


async def get_or_create_user(email: str, name: Optional[str] = None, photo_url: Optional[str] = None) -> Tuple[Dict, bool]:
    """
    Sign-in registration. Returns (user, created).
    A user that already exists is returned untouched; role and fraud flag are never set here.
    """
    email = normalize_email(email)

    async with AsyncSessionLocal() as session:
        stmt = select(User).where(User.email == email)
        result = await session.execute(stmt)
        user = result.scalar_one_or_none()

        if user:
            return _user_to_dict(user), False

        new_user = User(
            id=new_id(),
            email=email,
            name=name,
            photo_url=photo_url,
            role=_initial_role(email),
            is_fraud=False,
        )
        session.add(new_user)
        try:
            await session.commit()
        except IntegrityError:
            # Concurrent first sign-in: the unique email index kept a single row
            await session.rollback()
            result = await session.execute(select(User).where(User.email == email))
            return _user_to_dict(result.scalar_one()), False

        await session.refresh(new_user)
        logger.info(f"[USERS] Registered {email} with role={new_user.role}")
        return _user_to_dict(new_user), True


async def resolve_role(email: str) -> Optional[str]:
    """
    Read the caller's stored role. Always hits the store so that a role change
    takes effect on the next request without re-issuing tokens.
    """
    async with AsyncSessionLocal() as session:
        stmt = select(User.role).where(User.email == normalize_email(email))
        result = await session.execute(stmt)
        return result.scalar_one_or_none()


async def get_all_users(role: Optional[str] = None) -> List[Dict]:
    """Get all users (admin view), newest first"""
    async with AsyncSessionLocal() as session:
        stmt = select(User)
        if role:
            stmt = stmt.where(User.role == role)
        stmt = stmt.order_by(User.created_at.desc())
        result = await session.execute(stmt)
        return [_user_to_dict(u) for u in result.scalars().all()]


async def set_user_role(user_id: str, role: str) -> Dict:
    """Admin: assign a role to a user"""
    user_id = ensure_valid_id(user_id, "user id")
    if role not in ROLES:
        raise InvalidInput(f"Role must be one of: {', '.join(ROLES)}")

    async with AsyncSessionLocal() as session:
        stmt = select(User).where(User.id == user_id)
        result = await session.execute(stmt)
        user = result.scalar_one_or_none()
        if not user:
            raise NotFound("User not found")

        await session.execute(
            update(User).where(User.id == user_id).values(role=role)
        )
        await session.commit()
        await session.refresh(user)

        logger.info(f"[USERS] Role of {user.email} set to {role}")
        return _user_to_dict(user)
