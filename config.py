"""Guard configuration"""
import os
import re
from dataclasses import dataclass

from errors import ConfigurationError

DEFAULT_TOKEN_KEY = 'csrf_token'
MIN_TOKEN_BYTES = 16  # 128 bits

_TOKEN_KEY_RE = re.compile(r'^[A-Za-z0-9_-]+$')
_TRUE_VALUES = {'1', 'true', 'yes', 'on'}


def _read_flag(name, default=False):
    """Parse a boolean environment variable, falling back to ``default``."""
    value = os.environ.get(name)
    if value is None or not value.strip():
        return default
    return value.strip().lower() in _TRUE_VALUES


def validate_token_key(key):
    """Return ``key`` if it is usable as a session key and form field name."""
    if not isinstance(key, str) or not _TOKEN_KEY_RE.fullmatch(key):
        raise ConfigurationError('Invalid CSRF token key %r' % (key,))
    return key


@dataclass(frozen=True)
class GuardConfig:
    token_key: str = DEFAULT_TOKEN_KEY
    # False keeps the historical behaviour: with no excluded routes, nothing is checked.
    check_without_exclusions: bool = False
    rotate_on_success: bool = False
    token_bytes: int = 32

    def __post_init__(self):
        validate_token_key(self.token_key)
        if (isinstance(self.token_bytes, bool) or not isinstance(self.token_bytes, int)
                or self.token_bytes < MIN_TOKEN_BYTES):
            raise ConfigurationError(
                'token_bytes must be an integer >= %d, got %r' % (MIN_TOKEN_BYTES, self.token_bytes)
            )

    @classmethod
    def from_env(cls, prefix='CSRF_'):
        """Build a config from ``<prefix>TOKEN_KEY`` and friends."""
        raw_bytes = os.environ.get(prefix + 'TOKEN_BYTES', '').strip()
        if raw_bytes:
            try:
                token_bytes = int(raw_bytes)
            except ValueError:
                raise ConfigurationError('%sTOKEN_BYTES must be an integer' % prefix) from None
        else:
            token_bytes = 32
        return cls(
            token_key=os.environ.get(prefix + 'TOKEN_KEY', DEFAULT_TOKEN_KEY),
            check_without_exclusions=_read_flag(prefix + 'CHECK_WITHOUT_EXCLUSIONS'),
            rotate_on_success=_read_flag(prefix + 'ROTATE_ON_SUCCESS'),
            token_bytes=token_bytes,
        )
