from .models import AsyncSessionLocal
from .models.users import User
from .auth import create_access_token, hash_password, verify_password
from .errors import EmailTaken, UserNotFound
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
import logging

logger = logging.getLogger(__name__)

PROFILE_FIELDS = ('nickname', 'bio', 'social_links', 'sticker')

def normalize_email(email: str) -> str:
    return email.strip().lower()

async def create_user(payload):
    email = normalize_email(payload.email)
    async with AsyncSessionLocal() as session:
        q = await session.execute(select(User.id).where(User.email == email))
        if q.scalars().first() is not None:
            raise EmailTaken()
        user = User(
            email=email,
            hashed_password=hash_password(payload.password),
            nickname=payload.nickname or email.split('@')[0][:30],
            social_links={},
        )
        session.add(user)
        try:
            await session.commit()
        except IntegrityError:
            await session.rollback()
            raise EmailTaken()
        await session.refresh(user)
        logger.info({'msg': 'user_registered', 'user_id': user.id})
        return user

async def authenticate_user(email: str, password: str):
    async with AsyncSessionLocal() as session:
        q = await session.execute(select(User).where(User.email == normalize_email(email)))
        user = q.scalars().first()
        if not user or not verify_password(password, user.hashed_password):
            return None
        access = create_access_token({'id': user.id, 'email': user.email})
        return {'access_token': access, 'token_type': 'bearer'}

async def get_user_by_id(user_id: int):
    async with AsyncSessionLocal() as session:
        q = await session.execute(select(User).where(User.id == user_id))
        return q.scalars().first()

async def require_user(user_id: int) -> User:
    user = await get_user_by_id(user_id)
    if not user:
        raise UserNotFound()
    return user

async def get_users_by_ids(user_ids):
    ids = set(user_ids)
    if not ids:
        return []
    async with AsyncSessionLocal() as session:
        q = await session.execute(select(User).where(User.id.in_(ids)).order_by(User.id))
        return q.scalars().all()

# Profile Management
async def update_profile(user_id: int, changes: dict):
    """Apply the given profile fields; keys outside PROFILE_FIELDS are ignored."""
    async with AsyncSessionLocal() as session:
        q = await session.execute(select(User).where(User.id == user_id))
        user = q.scalars().first()
        if not user:
            raise UserNotFound()
        for field in PROFILE_FIELDS:
            if field in changes:
                setattr(user, field, changes[field])
        await session.commit()
        await session.refresh(user)
        return user

async def set_image_url(user_id: int, field: str, url: str):
    """Point avatar_url or cover_url at a new file; returns (user, old_url)."""
    if field not in ('avatar_url', 'cover_url'):
        raise ValueError(f'not an image field: {field}')
    async with AsyncSessionLocal() as session:
        q = await session.execute(select(User).where(User.id == user_id))
        user = q.scalars().first()
        if not user:
            raise UserNotFound()
        old_url = getattr(user, field)
        setattr(user, field, url)
        await session.commit()
        await session.refresh(user)
        return user, old_url
