"""Error taxonomy for upstream and cache failures."""

from typing import Optional


class MFLError(Exception):
    """Base class for classified errors raised by mflx."""

    code = 'MFL_ERROR'

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class AuthenticationFailed(MFLError):
    """Bad credentials or an unparsable login response."""

    code = 'AUTHENTICATION_FAILED'


class RateLimited(MFLError):
    """Upstream answered HTTP 429."""

    code = 'RATE_LIMITED'

    def __init__(self, message: str = 'API rate limit exceeded', retry_after: Optional[int] = None):
        super().__init__(message)
        self.retry_after = retry_after


class ServerError(MFLError):
    """Any other non-2xx response, or a body that could not be decoded."""

    code = 'SERVER_ERROR'

    def __init__(self, status: int, reason: str = ''):
        super().__init__(f'HTTP {status}: {reason}' if reason else f'HTTP {status}')
        self.status = status
        self.reason = reason


class NetworkError(MFLError):
    """Timeout or connection failure."""

    code = 'NETWORK_ERROR'


class CacheReadError(MFLError):
    """Missing or corrupt cache file, or an envelope that fails validation."""

    code = 'CACHE_READ_ERROR'

    def __init__(self, collection: str, reason: str):
        super().__init__(f'Failed to load cached data for {collection}: {reason}')
        self.collection = collection
        self.reason = reason


class ValidationError(MFLError):
    """A single cached record failed its schema check.

    Raised per item and caught by the cache read path; never fatal for a
    whole collection.
    """

    code = 'VALIDATION_ERROR'

    def __init__(self, collection: str, index: int, detail: str):
        super().__init__(f'{collection}[{index}] is invalid: {detail}')
        self.collection = collection
        self.index = index
        self.detail = detail
