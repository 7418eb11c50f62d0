"""Google sign-in through Authlib's Starlette OAuth client.

The OAuth state lives in the signed session cookie managed by Starlette's
``SessionMiddleware``; after the callback only the local user id is kept
in the session.
"""

from typing import Any

from authlib.integrations.starlette_client import OAuth, OAuthError
from starlette.requests import Request
from starlette.responses import Response

from ocrpro.database.repositories import GoogleProfile
from ocrpro.errors import ConfigurationError
from ocrpro.utils.config import AuthConfig
from ocrpro.utils.logger import get_logger

logger = get_logger(__name__)

GOOGLE_METADATA_URL = "https://accounts.google.com/.well-known/openid-configuration"
SESSION_USER_KEY = "user_id"


class SignInError(Exception):
    """The identity provider callback could not be completed."""


def profile_from_userinfo(userinfo: dict[str, Any]) -> GoogleProfile:
    """Map OpenID Connect claims onto the stored profile fields."""
    subject = userinfo.get("sub")
    if not subject:
        raise SignInError("Google response carried no subject id")
    name = userinfo.get("name")
    if not name:
        parts = [userinfo.get("given_name"), userinfo.get("family_name")]
        name = " ".join(p for p in parts if p) or None
    return GoogleProfile(
        google_id=str(subject),
        email=userinfo.get("email"),
        name=name,
        picture=userinfo.get("picture"),
    )


class GoogleSignIn:
    """Redirect-and-callback handshake with Google."""

    def __init__(self, config: AuthConfig) -> None:
        self.config = config
        self._oauth: OAuth | None = None
        if config.google_configured:
            self._oauth = OAuth()
            self._oauth.register(
                name="google",
                client_id=config.google_client_id,
                client_secret=config.google_client_secret,
                server_metadata_url=GOOGLE_METADATA_URL,
                client_kwargs={"scope": "openid email profile"},
            )
        else:
            logger.error(
                "Google OAuth credentials missing: client_id=%s client_secret=%s "
                "redirect_uri=%s",
                bool(config.google_client_id),
                bool(config.google_client_secret),
                bool(config.google_redirect_uri),
            )

    @property
    def configured(self) -> bool:
        return self._oauth is not None

    def _client(self):
        if self._oauth is None:
            raise ConfigurationError("Google sign-in is not configured")
        return self._oauth.google

    async def login_redirect(self, request: Request) -> Response:
        """Send the browser to Google's consent page."""
        return await self._client().authorize_redirect(
            request, self.config.google_redirect_uri
        )

    async def complete(self, request: Request) -> GoogleProfile:
        """Exchange the callback code and return the signed-in profile.

        Raises:
            SignInError: The code exchange or the ID token was rejected.
        """
        client = self._client()
        try:
            token = await client.authorize_access_token(request)
        except OAuthError as exc:
            raise SignInError(str(exc)) from exc

        userinfo = token.get("userinfo")
        if not userinfo:
            userinfo = await client.userinfo(token=token)
        return profile_from_userinfo(dict(userinfo))
