"""OAuth2 authorization-code clients for GitHub, Google and Discord."""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any

import httpx

from planets.config import Settings
from planets.errors import AppError

logger = logging.getLogger(__name__)


@dataclass
class OAuthUser:
    id: str
    email: str
    name: str
    avatar_url: str | None = None
    email_verified: bool = True


class OAuthProvider(ABC):
    name: str = ""
    authorize_url: str = ""
    token_url: str = ""
    scopes: tuple[str, ...] = ()

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        redirect_url: str,
        timeout_seconds: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.client_id = client_id
        self.client_secret = client_secret
        self.redirect_url = redirect_url
        self.timeout_seconds = timeout_seconds
        self.transport = transport

    @property
    def configured(self) -> bool:
        return bool(self.client_id and self.client_secret)

    def _client(self, access_token: str | None = None) -> httpx.AsyncClient:
        headers = {"Accept": "application/json"}
        if access_token:
            headers["Authorization"] = f"Bearer {access_token}"
        return httpx.AsyncClient(
            timeout=self.timeout_seconds, transport=self.transport, headers=headers
        )

    def get_auth_url(self, state: str) -> str:
        params = {
            "client_id": self.client_id,
            "redirect_uri": self.redirect_url,
            "response_type": "code",
            "scope": " ".join(self.scopes),
            "state": state,
            "access_type": "offline",
        }
        return str(httpx.URL(self.authorize_url, params=params))

    async def exchange_code(self, code: str) -> str:
        """Trade an authorization code for an access token."""
        form = {
            "client_id": self.client_id,
            "client_secret": self.client_secret,
            "code": code,
            "redirect_uri": self.redirect_url,
            "grant_type": "authorization_code",
        }
        try:
            async with self._client() as client:
                response = await client.post(self.token_url, data=form)
                response.raise_for_status()
                data = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            logger.error("Failed to exchange %s authorization code: %s", self.name, exc)
            raise AppError.wrap_external("failed to exchange authorization code", exc)

        access_token = data.get("access_token") if isinstance(data, dict) else None
        if not access_token:
            raise AppError.external(f"{self.name} token response has no access token")
        return access_token

    async def _get_json(self, client: httpx.AsyncClient, url: str) -> Any:
        try:
            response = await client.get(url)
            response.raise_for_status()
            return response.json()
        except (httpx.HTTPError, ValueError) as exc:
            logger.error("%s API request to %s failed: %s", self.name, url, exc)
            raise AppError.wrap_external(f"failed to request user info from {self.name}", exc)

    async def _get_object(self, client: httpx.AsyncClient, url: str) -> dict[str, Any]:
        data = await self._get_json(client, url)
        if not isinstance(data, dict):
            raise AppError.external(f"{self.name} returned an unexpected response from {url}")
        return data

    async def _get_list(self, client: httpx.AsyncClient, url: str) -> list[Any]:
        data = await self._get_json(client, url)
        if not isinstance(data, list):
            raise AppError.external(f"{self.name} returned an unexpected response from {url}")
        return data

    @abstractmethod
    async def get_user_info(self, access_token: str) -> OAuthUser: ...


class GitHubProvider(OAuthProvider):
    name = "github"
    authorize_url = "https://github.com/login/oauth/authorize"
    token_url = "https://github.com/login/oauth/access_token"
    user_url = "https://api.github.com/user"
    emails_url = "https://api.github.com/user/emails"
    scopes = ("user:email",)

    async def get_user_info(self, access_token: str) -> OAuthUser:
        async with self._client(access_token) as client:
            raw = await self._get_object(client, self.user_url)
            if not raw.get("id"):
                raise AppError.external("GitHub user info missing user ID")

            email = raw.get("email") or ""
            verified = True
            if not email:
                try:
                    email = await self._fetch_verified_email(client)
                except AppError as exc:
                    logger.warning("Failed to fetch GitHub user email: %s", exc)
                    email, verified = "", False

        return OAuthUser(
            id=str(raw["id"]),
            email=email,
            name=raw.get("name") or raw.get("login") or "",
            avatar_url=raw.get("avatar_url"),
            email_verified=verified,
        )

    async def _fetch_verified_email(self, client: httpx.AsyncClient) -> str:
        entries = [e for e in await self._get_list(client, self.emails_url) if isinstance(e, dict)]
        for entry in entries:
            if entry.get("primary") and entry.get("verified") and entry.get("email"):
                return entry["email"]
        for entry in entries:
            if entry.get("verified") and entry.get("email"):
                return entry["email"]
        raise AppError.external("no verified email found")


class GoogleProvider(OAuthProvider):
    name = "google"
    authorize_url = "https://accounts.google.com/o/oauth2/auth"
    token_url = "https://oauth2.googleapis.com/token"
    user_url = "https://www.googleapis.com/oauth2/v2/userinfo"
    scopes = ("openid", "profile", "email")

    async def get_user_info(self, access_token: str) -> OAuthUser:
        async with self._client(access_token) as client:
            raw = await self._get_object(client, self.user_url)
        if not raw.get("id"):
            raise AppError.external("Google user info missing user ID")
        if not raw.get("email"):
            raise AppError.external("Google user info missing email")
        return OAuthUser(
            id=str(raw["id"]),
            email=raw["email"],
            name=raw.get("name") or "",
            avatar_url=raw.get("picture"),
        )


class DiscordProvider(OAuthProvider):
    name = "discord"
    authorize_url = "https://discord.com/api/oauth2/authorize"
    token_url = "https://discord.com/api/oauth2/token"
    user_url = "https://discord.com/api/users/@me"
    scopes = ("identify", "email")

    async def get_user_info(self, access_token: str) -> OAuthUser:
        async with self._client(access_token) as client:
            raw = await self._get_object(client, self.user_url)
        if not raw.get("id"):
            raise AppError.external("Discord user info missing user ID")
        avatar_url = None
        if raw.get("avatar"):
            avatar_url = f"https://cdn.discordapp.com/avatars/{raw['id']}/{raw['avatar']}.png"
        return OAuthUser(
            id=str(raw["id"]),
            email=raw.get("email") or "",
            name=raw.get("global_name") or raw.get("username") or "",
            avatar_url=avatar_url,
            email_verified=bool(raw.get("verified")),
        )


PROVIDER_CLASSES: dict[str, type[OAuthProvider]] = {
    cls.name: cls for cls in (GitHubProvider, GoogleProvider, DiscordProvider)
}


def build_providers(
    settings: Settings, transport: httpx.AsyncBaseTransport | None = None
) -> dict[str, OAuthProvider]:
    providers = {}
    for name, cls in PROVIDER_CLASSES.items():
        providers[name] = cls(
            client_id=getattr(settings, f"{name}_client_id"),
            client_secret=getattr(settings, f"{name}_client_secret"),
            redirect_url=getattr(settings, f"{name}_redirect_url"),
            timeout_seconds=settings.oauth_exchange_timeout_seconds,
            transport=transport,
        )
        if not providers[name].configured:
            logger.info("OAuth provider %s is not configured", name)
    return providers
