"""
Custom exceptions for channel tags.
"""


class ChannelTagsError(Exception):
    """Base exception for channel tag errors."""
    pass


# =============================================================================
# Registry errors (local, recoverable)
# =============================================================================

class InvalidTagError(ChannelTagsError):
    """Tag value is empty, too long, or already present."""
    
    def __init__(self, value: str, reason: str = None):
        self.value = value
        self.reason = reason
        message = f"Invalid tag: {value!r}"
        if reason:
            message += f" - {reason}"
        super().__init__(message)


class TagNotFoundError(ChannelTagsError):
    """Tag is not present in the registry."""
    
    def __init__(self, value: str):
        self.value = value
        super().__init__(f"Tag not found: {value!r}")


class TagIndexError(ChannelTagsError, IndexError):
    """Positional access outside the registry bounds."""
    
    def __init__(self, index: int, count: int):
        self.index = index
        self.count = count
        super().__init__(f"Tag index {index} out of range for {count} tags")


# =============================================================================
# Registration errors (remote)
# =============================================================================

class RegistrationAPIError(ChannelTagsError):
    """Error from the channel registration API."""
    
    def __init__(self, message: str, status_code: int = None, endpoint: str = None, response_body: str = None):
        self.status_code = status_code
        self.endpoint = endpoint
        self.response_body = response_body
        super().__init__(message)


class RateLimitExceededError(RegistrationAPIError):
    """Rate limit exceeded (HTTP 429)."""
    
    def __init__(self, endpoint: str = None, response_body: str = None):
        super().__init__(
            "Rate limit exceeded",
            status_code=429,
            endpoint=endpoint,
            response_body=response_body
        )


class AuthenticationError(RegistrationAPIError):
    """App key or secret rejected (HTTP 401/403)."""
    
    def __init__(self, message: str = "Authentication failed", status_code: int = 401, endpoint: str = None):
        super().__init__(message, status_code=status_code, endpoint=endpoint)


class NetworkTimeoutError(ChannelTagsError):
    """Network request timed out."""
    
    def __init__(self, endpoint: str = None, timeout: float = None):
        self.endpoint = endpoint
        self.timeout = timeout
        message = f"Request timed out after {timeout}s" if timeout else "Request timed out"
        super().__init__(message)


# =============================================================================
# Local errors
# =============================================================================

class ConfigurationError(ChannelTagsError):
    """Configuration is missing required values."""
    
    def __init__(self, missing: list):
        self.missing = list(missing)
        super().__init__(f"Invalid configuration, missing: {', '.join(self.missing)}")


class TagStoreError(ChannelTagsError):
    """Error reading or writing the local tag store."""
    
    def __init__(self, filepath: str, reason: str = None):
        self.filepath = filepath
        message = f"Tag store error: {filepath}"
        if reason:
            message += f" - {reason}"
        super().__init__(message)
