"""
Salt normalization.

Every CREATE2 salt ends up as a canonical 32-byte value.  Normalization is
idempotent: a value already in canonical form is returned unchanged, never
re-hashed.
"""

from typing import Optional, Union

from eth_abi import encode
from eth_utils import keccak

from ..exceptions import InvalidLengthError
from .constants import BYTES32_PATTERN, BYTES32_ZERO
from .utils import bytes_to_hex

SaltLike = Union[None, int, str, bytes]

_MAX_UINT256 = 2 ** 256


def number_to_bytes32(num: Optional[int] = None) -> str:
    """
    Big-endian, left-zero-padded 32-byte hex form of ``num``.

    ``None`` maps to the all-zero salt.

    Raises:
        TypeError: If ``num`` is not an int (``bool`` is rejected too).
        ValueError: If ``num`` is negative or does not fit in 256 bits.
    """
    if num is None:
        return BYTES32_ZERO
    if isinstance(num, bool) or not isinstance(num, int):
        raise TypeError(f"salt number must be an int, got {type(num).__name__}")
    if num < 0 or num >= _MAX_UINT256:
        raise ValueError(f"salt number out of uint256 range: {num}")
    return bytes_to_hex(num.to_bytes(32, "big"))


def hash_salt_string(value: str) -> str:
    """``keccak256(abi.encode(["string"], [value]))`` as 0x-prefixed hex."""
    return bytes_to_hex(keccak(encode(["string"], [value])))


def normalize_salt(value: SaltLike = None) -> str:
    """
    Normalize a salt into its canonical 32-byte hex form.

    - ``None``: the all-zero value
    - ``int``: big-endian, left-zero-padded to 32 bytes
    - ``str`` matching ``0x`` + 64 lowercase hex digits: used verbatim
    - any other ``str``: ``keccak256(abi.encode(["string"], [value]))``
    - ``bytes`` of length 32: used verbatim

    Returns:
        str: 0x-prefixed, 64 lowercase hex digits

    Raises:
        InvalidLengthError: For ``bytes`` input that is not 32 bytes long.
        TypeError: For unsupported input types.

    Example:
        >>> normalize_salt(1)[-2:]
        '01'
        >>> normalize_salt("0x" + "ab" * 32) == "0x" + "ab" * 32
        True
    """
    if value is None or isinstance(value, int):
        return number_to_bytes32(value)
    if isinstance(value, str):
        if BYTES32_PATTERN.fullmatch(value):
            return value
        return hash_salt_string(value)
    if isinstance(value, (bytes, bytearray)):
        if len(value) != 32:
            raise InvalidLengthError(f"Salt must be 32 bytes, got {len(value)}")
        return bytes_to_hex(value)
    raise TypeError(f"Unsupported salt type: {type(value).__name__}")
