from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from planets.database import get_db
from planets.errors import AppError
from planets.models.player import Player, PlayerRole
from planets.services.auth_service import AUTH_COOKIE_NAME, decode_access_token, get_player_by_id
from planets.services.oauth_providers import OAuthProvider
from planets.services.oauth_state import OAuthStateRegistry

bearer_scheme = HTTPBearer(auto_error=False)


async def get_current_player(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db),
) -> Player:
    # The browser flow sends the cookie, API clients send a bearer token.
    token = request.cookies.get(AUTH_COOKIE_NAME)
    if not token and credentials is not None:
        token = credentials.credentials
    if not token:
        raise AppError.unauthorized("authentication required")

    player_id = decode_access_token(token)
    if player_id is None:
        raise AppError.unauthorized("invalid or expired token")
    player = await get_player_by_id(db, player_id)
    if player is None:
        raise AppError.unauthorized("player not found")
    return player


async def require_admin(player: Player = Depends(get_current_player)) -> Player:
    if player.role != PlayerRole.admin:
        raise AppError.forbidden("admin role required")
    return player


def get_state_registry(request: Request) -> OAuthStateRegistry:
    return request.app.state.oauth_states


def get_oauth_provider(provider: str, request: Request) -> OAuthProvider:
    providers: dict[str, OAuthProvider] = request.app.state.oauth_providers
    oauth_provider = providers.get(provider)
    if oauth_provider is None:
        raise AppError.not_found(f"unknown OAuth provider {provider}")
    if not oauth_provider.configured:
        raise AppError.external(f"{provider} OAuth is not properly configured")
    return oauth_provider
