"""Tests for login parsing and the Authenticator."""

import httpx
import pytest

from conftest import corrupt_gzip_response, redirect_to_self, xml_response
from mflx.auth import (
    Authenticator,
    decode_session_token,
    encode_session_token,
    parse_login_response,
)
from mflx.errors import AuthenticationFailed
from mflx.models import AuthResult

SUCCESS_XML = '<status MFL_USER_ID="aGVsbG8+d29ybGQ/Zm9v=" CookieName="MFL_USER_ID">OK</status>'


class TestParseLoginResponse:
    """Tests for the login response adapter."""

    def test_success_extracts_token(self):
        """Test the token attribute of an OK status is returned."""
        result = parse_login_response(SUCCESS_XML)
        assert result == AuthResult(success=True, token='aGVsbG8+d29ybGQ/Zm9v=')

    def test_error_element(self):
        """Test an <error> element becomes the failure message."""
        result = parse_login_response('<error>Invalid username or password</error>')
        assert result == AuthResult(success=False, error='Invalid username or password')

    def test_status_not_ok(self):
        """Test a non-OK status body becomes the failure message."""
        result = parse_login_response('<status>Account locked</status>')
        assert result.success is False
        assert result.error == 'Account locked'

    def test_ok_status_without_token(self):
        """Test an OK status lacking the token attribute is not a success."""
        result = parse_login_response('<status>OK</status>')
        assert result == AuthResult(success=False, error='Invalid response from server')

    def test_unrecognized_body(self):
        """Test unknown bodies get the generic message."""
        result = parse_login_response('<html>maintenance</html>')
        assert result.error == 'Invalid response from server'

    def test_success_wins_over_later_error(self):
        """Test the success pattern is tried first."""
        result = parse_login_response(SUCCESS_XML + '<error>ignored</error>')
        assert result.success is True

    def test_entities_unescaped(self):
        """Test XML entities in messages are decoded."""
        result = parse_login_response('<error>Bad user &amp; password</error>')
        assert result.error == 'Bad user & password'

    def test_empty_token_is_not_success(self):
        """Test an OK status with a blank token attribute is rejected."""
        result = parse_login_response('<status MFL_USER_ID="">OK</status>')
        assert result == AuthResult(success=False, error='Invalid response from server')

    def test_custom_cookie_name(self):
        """Test the token attribute name follows configuration."""
        result = parse_login_response('<status SESSION="xyz">OK</status>', cookie_name='SESSION')
        assert result.token == 'xyz'


class TestTokenEncoding:
    """Tests for cookie value encoding."""

    @pytest.mark.parametrize('token', ['abc', 'a+b/c==', '+/=', 'YWJj+ZGVm/Z2hp='])
    def test_round_trip(self, token):
        """Test decode(encode(token)) is the identity for Base64 tokens."""
        encoded = encode_session_token(token)
        assert decode_session_token(encoded) == token

    def test_reserved_characters_escaped(self):
        """Test '+', '/' and '=' are percent-encoded."""
        assert encode_session_token('a+b/c=') == 'a%2Bb%2Fc%3D'


class TestAuthenticator:
    """Tests for login and logout against a stubbed upstream."""

    @pytest.mark.anyio
    async def test_login_success_arms_client(self, make_client):
        """Test a successful login stores the raw token on the client."""
        seen = {}

        def handler(request):
            seen['url'] = request.url
            seen['body'] = request.content
            return xml_response(SUCCESS_XML)

        async with make_client(handler) as client:
            auth = Authenticator(client)
            result = await auth.login(' owner ', 'p@ss word')

            assert result.success is True
            assert auth.is_authenticated
            assert auth.session.username == 'owner'
            assert auth.session.token == 'aGVsbG8+d29ybGQ/Zm9v='

        assert seen['url'].scheme == 'https'
        assert seen['url'].host == 'api.myfantasyleague.com'
        assert seen['url'].path == '/2025/login'
        assert seen['url'].query == b''
        assert seen['body'] == b'USERNAME=owner&PASSWORD=p%40ss+word&XML=1'

    @pytest.mark.anyio
    async def test_login_failure_arms_nothing(self, make_client):
        """Test an <error> response yields a failure and no token."""
        async with make_client(lambda r: xml_response('<error>Invalid username or password</error>')) as client:
            auth = Authenticator(client)
            result = await auth.login('owner', 'wrong')

            assert result == AuthResult(success=False, error='Invalid username or password')
            assert not auth.is_authenticated
            assert client.session is None

    @pytest.mark.anyio
    async def test_login_failure_clears_previous_session(self, make_client):
        """Test a rejected login drops any earlier session."""
        responses = iter([SUCCESS_XML, '<error>Invalid username or password</error>'])

        async with make_client(lambda r: xml_response(next(responses))) as client:
            auth = Authenticator(client)
            await auth.login('owner', 'right')
            assert auth.is_authenticated
            await auth.login('owner', 'wrong')
            assert not auth.is_authenticated

    @pytest.mark.anyio
    async def test_login_never_raises_on_transport_error(self, make_client):
        """Test network failures come back as a failure result."""
        def handler(request):
            raise httpx.ConnectTimeout('timed out', request=request)

        async with make_client(handler) as client:
            result = await Authenticator(client).login('owner', 'secret')

        assert result == AuthResult(success=False, error='Request timeout')

    @pytest.mark.anyio
    async def test_login_server_error_message(self, make_client):
        """Test HTTP errors are reported with their classified message."""
        async with make_client(lambda r: httpx.Response(502)) as client:
            result = await Authenticator(client).login('owner', 'secret')

        assert result.success is False
        assert result.error == 'HTTP 502: Bad Gateway'

    @pytest.mark.anyio
    async def test_login_redirect_loop_is_failure(self, make_client):
        """Test a redirect loop comes back as a failure result."""
        async with make_client(redirect_to_self) as client:
            result = await Authenticator(client).login('owner', 'secret')
            assert not client.is_authenticated

        assert result.success is False
        assert result.error.startswith('Network error')

    @pytest.mark.anyio
    async def test_login_corrupt_encoding_is_failure(self, make_client):
        """Test a body that fails Content-Encoding decoding is a failure result."""
        async with make_client(lambda r: corrupt_gzip_response('text/xml')) as client:
            result = await Authenticator(client).login('owner', 'secret')

        assert result.success is False
        assert result.error.startswith('Network error')

    @pytest.mark.anyio
    async def test_login_empty_token_stays_anonymous(self, make_client):
        """Test a blank token never arms a session."""
        cookies = []

        def handler(request):
            cookies.append(request.headers.get('cookie'))
            if request.url.path.endswith('/login'):
                return xml_response('<status MFL_USER_ID="">OK</status>')
            return httpx.Response(200, json={})

        async with make_client(handler) as client:
            auth = Authenticator(client)
            result = await auth.login('owner', 'secret')
            await client.request(client.build_url('export', {'TYPE': 'league'}))

            assert result.success is False
            assert not auth.is_authenticated

        assert cookies == [None, None]

    @pytest.mark.anyio
    async def test_blank_credentials_rejected_locally(self, make_client):
        """Test blank credentials never reach the upstream."""
        calls = []

        def handler(request):
            calls.append(request)
            return xml_response(SUCCESS_XML)

        async with make_client(handler) as client:
            result = await Authenticator(client).login('   ', 'secret')

        assert result.success is False
        assert result.error == 'Username and password are required'
        assert calls == []

    @pytest.mark.anyio
    async def test_logout(self, make_client):
        """Test logout clears the session."""
        async with make_client(lambda r: xml_response(SUCCESS_XML)) as client:
            auth = Authenticator(client)
            await auth.login('owner', 'secret')
            auth.logout()

            assert not auth.is_authenticated
            with pytest.raises(AuthenticationFailed):
                auth.require_session()

    @pytest.mark.anyio
    async def test_later_requests_carry_cookie(self, make_client):
        """Test requests after login send the encoded token."""
        cookies = []

        def handler(request):
            cookies.append(request.headers.get('cookie'))
            if request.url.path.endswith('/login'):
                return xml_response(SUCCESS_XML)
            return httpx.Response(200, json={})

        async with make_client(handler) as client:
            await Authenticator(client).login('owner', 'secret')
            await client.request(client.build_url('export', {'TYPE': 'league'}))

        assert cookies == [None, 'MFL_USER_ID=aGVsbG8%2Bd29ybGQ%2FZm9v%3D']
