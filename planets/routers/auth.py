"""OAuth login: redirect to the provider, then handle its callback.

The callback never answers with an error body. Every failure ends in a
redirect to the frontend error page with a short code the client can show.
"""

import asyncio
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Request, Response, status
from fastapi.responses import RedirectResponse
from sqlalchemy.ext.asyncio import AsyncSession

from planets.config import settings
from planets.database import get_db
from planets.dependencies import get_current_player, get_oauth_provider, get_state_registry
from planets.errors import AppError
from planets.models.player import Player
from planets.schemas.auth import PlayerResponse
from planets.services.auth_service import (
    clear_auth_cookie,
    create_access_token,
    resolve_oauth_player,
    set_auth_cookie,
)
from planets.services.oauth_providers import OAuthProvider, OAuthUser
from planets.services.oauth_state import OAuthStateRegistry

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


def _error_redirect(code: str) -> RedirectResponse:
    return RedirectResponse(f"{settings.frontend_url}/auth/error?error={code}", status_code=307)


def _user_agent(request: Request) -> str:
    return request.headers.get("user-agent", "")


async def _fetch_user(oauth_provider: OAuthProvider, code: str) -> OAuthUser:
    access_token = await oauth_provider.exchange_code(code)
    return await oauth_provider.get_user_info(access_token)


@router.get("/me", response_model=PlayerResponse)
async def me(current_player: Player = Depends(get_current_player)):
    return current_player


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
async def logout(response: Response):
    # Stateless JWT: dropping the cookie is all there is to do.
    clear_auth_cookie(response)
    return None


@router.get("/{provider}")
async def login(
    provider: str,
    request: Request,
    oauth_provider: OAuthProvider = Depends(get_oauth_provider),
    states: OAuthStateRegistry = Depends(get_state_registry),
):
    state = await states.issue(provider, _user_agent(request))
    return RedirectResponse(oauth_provider.get_auth_url(state), status_code=307)


@router.get("/{provider}/callback")
async def callback(
    provider: str,
    request: Request,
    code: Optional[str] = None,
    state: Optional[str] = None,
    error: Optional[str] = None,
    oauth_provider: OAuthProvider = Depends(get_oauth_provider),
    states: OAuthStateRegistry = Depends(get_state_registry),
    db: AsyncSession = Depends(get_db),
):
    if error:
        logger.warning(
            "OAuth authorization denied by %s: %s %s",
            provider,
            error,
            request.query_params.get("error_description", ""),
        )
        return _error_redirect("oauth_denied")
    if not code:
        logger.error("OAuth callback from %s missing authorization code", provider)
        return _error_redirect("oauth_error")

    try:
        await states.validate(state or "", provider, _user_agent(request))
    except AppError as exc:
        logger.warning("OAuth state rejected for %s: %s", provider, exc)
        return _error_redirect("oauth_error")

    try:
        user = await asyncio.wait_for(
            _fetch_user(oauth_provider, code), timeout=settings.oauth_exchange_timeout_seconds
        )
    except asyncio.TimeoutError:
        logger.error("OAuth exchange with %s timed out", provider)
        return _error_redirect("oauth_error")
    except AppError as exc:
        logger.error("OAuth exchange with %s failed: %s", provider, exc)
        return _error_redirect("oauth_error")

    if not user.email or not user.email_verified:
        logger.error("%s user %s has no verified email", provider, user.id)
        return _error_redirect("oauth_error")

    try:
        player = await resolve_oauth_player(
            db, provider, user.id, user.email, user.name, user.avatar_url
        )
    except AppError as exc:
        logger.error("Failed to resolve player for %s user %s: %s", provider, user.id, exc)
        return _error_redirect("database_error")

    try:
        token = create_access_token(player)
    except AppError as exc:
        logger.error("Failed to issue token for player %s: %s", player.id, exc)
        return _error_redirect("auth_error")

    logger.info("OAuth login via %s for player %s (%s)", provider, player.id, player.username)
    response = RedirectResponse(f"{settings.frontend_url}/auth/callback?success=true", status_code=307)
    set_auth_cookie(response, token)
    return response
