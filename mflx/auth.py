"""Login against MFL and session lifecycle.

The login command answers with a small XML document. Parsing is kept in
parse_login_response so it can be swapped for a real XML parser without
touching the Authenticator contract.
"""

import html
import logging
import re
from typing import TYPE_CHECKING, Optional
from urllib.parse import quote, unquote, urlencode

import httpx

from .constants import DEFAULT_COOKIE_NAME
from .errors import AuthenticationFailed, MFLError
from .models import AuthResult, AuthSession
from .request_builder import build_url
from .utils import unix_now

if TYPE_CHECKING:
    from .client import MFLClient

logger = logging.getLogger('mflx.auth')

INVALID_RESPONSE = 'Invalid response from server'

ERROR_PATTERN = re.compile(r'<error[^>]*>([^<]*)</error>')
STATUS_PATTERN = re.compile(r'<status[^>]*>([^<]*)</status>')


def _success_pattern(cookie_name: str) -> re.Pattern:
    return re.compile(rf'<status[^>]*\b{re.escape(cookie_name)}="([^"]+)"[^>]*>\s*OK\s*</status>')


def encode_session_token(token: str) -> str:
    """Percent-encode a session token for the Cookie header.

    MFL tokens are Base64 and routinely contain '+', '/' and '='.
    """
    return quote(token, safe='')


def decode_session_token(value: str) -> str:
    """Inverse of encode_session_token."""
    return unquote(value)


def parse_login_response(text: str, cookie_name: str = DEFAULT_COOKIE_NAME) -> AuthResult:
    """
    Interpret the body returned by the login command.

    Patterns are tried in order:
    1. <status COOKIE="token" ...>OK</status>  -> success with token
    2. <error>message</error>                  -> failure with message
    3. <status>body</status>, body not OK      -> failure with body

    Anything else is a failure with a generic message.

    Args:
        text: Raw response body
        cookie_name: Attribute carrying the session token

    Returns:
        AuthResult
    """
    success = _success_pattern(cookie_name).search(text)
    if success:
        return AuthResult(success=True, token=html.unescape(success.group(1)))

    error = ERROR_PATTERN.search(text)
    if error:
        return AuthResult(success=False, error=html.unescape(error.group(1).strip()) or INVALID_RESPONSE)

    status = STATUS_PATTERN.search(text)
    if status and status.group(1).strip() != 'OK':
        return AuthResult(success=False, error=html.unescape(status.group(1).strip()) or INVALID_RESPONSE)

    return AuthResult(success=False, error=INVALID_RESPONSE)


class Authenticator:
    """Owns login and logout for one MFLClient."""

    def __init__(self, client: 'MFLClient'):
        self.client = client

    async def login(self, username: str, password: str) -> AuthResult:
        """
        Log in and arm the client with the session token.

        Never raises for upstream or transport failures; those come back
        as an unsuccessful AuthResult carrying the error message.
        """
        username = (username or '').strip()
        if not username or not (password or '').strip():
            return AuthResult(success=False, error='Username and password are required')

        config = self.client.config
        # Credentials only ever travel over HTTPS to the main API host
        url = build_url('login', host=config.api_host, config=config.model_copy(update={'protocol': 'https'}))
        body = urlencode({'USERNAME': username, 'PASSWORD': password, 'XML': 1})

        try:
            response = await self.client.request(url, method='POST', body=body)
        except MFLError as e:
            logger.warning(f'Login request for {username} failed: {e.message}')
            self.client.clear_session()
            return AuthResult(success=False, error=e.message)
        except httpx.HTTPError as e:
            logger.error(f'Unclassified transport failure during login for {username}: {e}')
            self.client.clear_session()
            return AuthResult(success=False, error='Login failed: Network error')

        if not isinstance(response, str):
            logger.warning(f'Login for {username} returned a non-text body')
            self.client.clear_session()
            return AuthResult(success=False, error=INVALID_RESPONSE)

        result = parse_login_response(response, config.cookie_name)
        if result.success:
            self.client.arm_session(AuthSession(username=username, token=result.token, issued_at=unix_now()))
            logger.info(f'Logged in as {username}')
        else:
            self.client.clear_session()
            logger.info(f'Login rejected for {username}: {result.error}')
        return result

    def logout(self) -> None:
        self.client.clear_session()

    def clear_session(self) -> None:
        self.client.clear_session()

    @property
    def session(self) -> Optional[AuthSession]:
        return self.client.session

    @property
    def is_authenticated(self) -> bool:
        return self.client.session is not None

    def require_session(self) -> AuthSession:
        """Return the live session or raise AuthenticationFailed."""
        session = self.client.session
        if session is None:
            raise AuthenticationFailed('Not logged in or session expired')
        return session
