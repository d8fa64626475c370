import logging
from datetime import datetime, timedelta, timezone
from urllib.parse import urlparse

from fastapi import Response
from jose import JOSEError, JWTError, jwt
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from planets.config import settings
from planets.errors import AppError
from planets.models.auth_provider import PlayerAuthProvider
from planets.models.player import Player, PlayerRole

logger = logging.getLogger(__name__)

AUTH_COOKIE_NAME = "auth_token"


def create_access_token(player: Player) -> str:
    now = datetime.now(timezone.utc)
    payload = {
        "sub": str(player.id),
        "username": player.username,
        "email": player.email,
        "role": player.role.value,
        "iat": now,
        "exp": now + timedelta(minutes=settings.access_token_expire_minutes),
    }
    try:
        return jwt.encode(payload, settings.secret_key, algorithm=settings.algorithm)
    except JOSEError as exc:
        raise AppError.wrap_internal("failed to sign access token", exc)


def decode_access_token(token: str) -> int | None:
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[settings.algorithm])
        player_id = payload.get("sub")
        if player_id is None:
            return None
        return int(player_id)
    except (JWTError, ValueError):
        return None


def _cookie_domain() -> str | None:
    host = urlparse(settings.frontend_url).hostname
    if not host or host == "localhost":
        return None
    return host


def set_auth_cookie(response: Response, token: str) -> None:
    response.set_cookie(
        AUTH_COOKIE_NAME,
        token,
        max_age=settings.access_token_expire_minutes * 60,
        path="/",
        domain=_cookie_domain(),
        secure=settings.cookie_secure,
        httponly=True,
        samesite="lax",
    )


def clear_auth_cookie(response: Response) -> None:
    response.delete_cookie(
        AUTH_COOKIE_NAME,
        path="/",
        domain=_cookie_domain(),
        secure=settings.cookie_secure,
        httponly=True,
        samesite="lax",
    )


async def get_player_by_id(db: AsyncSession, player_id: int) -> Player | None:
    result = await db.execute(select(Player).where(Player.id == player_id))
    return result.scalar_one_or_none()


async def get_player_by_email(db: AsyncSession, email: str) -> Player | None:
    result = await db.execute(select(Player).where(Player.email == email))
    return result.scalar_one_or_none()


async def find_player_by_auth_provider(
    db: AsyncSession, provider: str, provider_user_id: str
) -> Player | None:
    result = await db.execute(
        select(Player)
        .join(PlayerAuthProvider, PlayerAuthProvider.player_id == Player.id)
        .where(
            PlayerAuthProvider.provider == provider,
            PlayerAuthProvider.provider_user_id == provider_user_id,
        )
    )
    return result.scalar_one_or_none()


async def create_auth_provider(
    db: AsyncSession, player_id: int, provider: str, provider_user_id: str, email: str
) -> PlayerAuthProvider:
    link = PlayerAuthProvider(
        player_id=player_id,
        provider=provider,
        provider_user_id=provider_user_id,
        provider_email=email,
    )
    db.add(link)
    await db.commit()
    await db.refresh(link)
    return link


def username_from_email(email: str) -> str:
    local, _, _ = email.partition("@")
    return local or "player"


async def find_or_create_player_by_oauth(
    db: AsyncSession, email: str, display_name: str, avatar_url: str | None
) -> Player:
    """Return the player owning ``email``, creating one if needed.

    The configured admin email always ends up with the admin role, whether the
    player is new or already exists.
    """
    is_admin = bool(settings.admin_email) and email == settings.admin_email

    player = await get_player_by_email(db, email)
    if player is not None:
        if is_admin and player.role != PlayerRole.admin:
            logger.info("Upgrading player %s to admin", player.id)
            player.role = PlayerRole.admin
            await db.commit()
            await db.refresh(player)
        return player

    username = username_from_email(email)
    if is_admin:
        username = settings.admin_username
        display_name = settings.admin_display_name

    player = Player(
        username=username,
        email=email,
        display_name=display_name or username,
        avatar_url=avatar_url or None,
        role=PlayerRole.admin if is_admin else PlayerRole.user,
    )
    db.add(player)
    await db.commit()
    await db.refresh(player)
    logger.info("Created player %s (%s) with role %s", player.id, username, player.role.value)
    return player


async def resolve_oauth_player(
    db: AsyncSession,
    provider: str,
    provider_user_id: str,
    email: str,
    display_name: str,
    avatar_url: str | None,
) -> Player:
    """Existing provider link wins; otherwise find-or-create by email and link it."""
    try:
        player = await find_player_by_auth_provider(db, provider, provider_user_id)
        if player is not None:
            return player
        player = await find_or_create_player_by_oauth(db, email, display_name, avatar_url)
        await create_auth_provider(db, player.id, provider, provider_user_id, email)
        return player
    except SQLAlchemyError as exc:
        await db.rollback()
        raise AppError.wrap_internal("failed to resolve player for OAuth login", exc)
