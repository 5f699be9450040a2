"""Short code generation utilities."""

import re
import secrets
import string
from typing import Callable, Optional

from .errors import InvalidCodeError


CUSTOM_CODE_PATTERN = re.compile(r"[A-Za-z0-9_-]{2,30}")


class ShortCodeGenerator:
    """Generate short codes for links."""

    # Base62 characters (alphanumeric, case-sensitive)
    BASE62_CHARS = string.ascii_letters + string.digits  # a-zA-Z0-9

    def __init__(
        self,
        default_length: int = 7,
        random_bytes: Optional[Callable[[int], bytes]] = None,
    ):
        """Initialize short code generator.

        Args:
            default_length: Default length for generated codes
            random_bytes: Secure random source returning N bytes
                (defaults to ``secrets.token_bytes``)
        """
        self.default_length = default_length
        self.random_bytes = random_bytes or secrets.token_bytes

    def generate(self, length: Optional[int] = None) -> str:
        """Generate a random short code.

        Each character is taken from one random byte reduced modulo 62. The
        slight bias toward the first few characters is accepted.

        Args:
            length: Length of the code (uses default if not specified)

        Returns:
            Random short code
        """
        length = length or self.default_length
        alphabet = self.BASE62_CHARS
        return "".join(alphabet[b % len(alphabet)] for b in self.random_bytes(length))

    @staticmethod
    def validate_custom_code(code: str) -> str:
        """Validate a caller-supplied short code.

        Args:
            code: The custom code

        Returns:
            The code with surrounding whitespace removed

        Raises:
            InvalidCodeError: If the code does not match the allowed pattern
        """
        code = code.strip() if isinstance(code, str) else ""
        if not CUSTOM_CODE_PATTERN.fullmatch(code):
            raise InvalidCodeError(
                "Custom code must be 2-30 characters: letters, numbers, '-' or '_'"
            )
        return code

    @staticmethod
    def is_valid_format(code: str) -> bool:
        """Check if code has valid format."""
        return isinstance(code, str) and CUSTOM_CODE_PATTERN.fullmatch(code) is not None
