"""Hex and address helpers shared by the EVM codecs."""

from typing import Dict, Iterable, List, Union

from eth_utils import is_address, is_hex, to_bytes, to_checksum_address

from ..exceptions import DuplicateGuardianAddress


def to_address(value: str) -> str:
    """
    Validate an address string and return its EIP-55 checksum form.

    Any casing is accepted as long as a mixed-case value carries a valid
    checksum.

    Raises:
        ValueError: If ``value`` is not a 20-byte hex address.
    """
    if not isinstance(value, str) or not is_address(value):
        raise ValueError(f"Invalid EVM address: {value!r}")
    return to_checksum_address(value)


def address_to_int(value: str) -> int:
    """Numeric value of an address, used as the canonical sort key."""
    return int(to_address(value), 16)


def hex_to_bytes(value: Union[str, bytes]) -> bytes:
    """
    Decode a hex string (``0x`` prefix optional) into bytes.

    ``bytes`` input is returned unchanged, ``"0x"`` and ``""`` decode to ``b""``.

    Raises:
        ValueError: If the string is not even-length hexadecimal.
    """
    if isinstance(value, (bytes, bytearray)):
        return bytes(value)
    if not isinstance(value, str):
        raise ValueError(f"Expected hex string, got {type(value).__name__}")
    stripped = strip_hex_prefix(value)
    if len(stripped) % 2 != 0 or (stripped and not is_hex(stripped)):
        raise ValueError(f"Invalid hex string: {value!r}")
    return to_bytes(hexstr=stripped)


def bytes_to_hex(value: bytes) -> str:
    return "0x" + bytes(value).hex()


def strip_hex_prefix(value: str) -> str:
    if value[:2] in ("0x", "0X"):
        return value[2:]
    return value


def sort_unique_addresses(addresses: Iterable[str]) -> List[str]:
    """
    Return a new list of checksummed addresses sorted ascending by numeric value.

    The input is not modified.  Two entries with the same numeric value,
    whatever their casing, are a duplicate and are rejected rather than
    collapsed.

    Raises:
        DuplicateGuardianAddress: On the first repeated address.
        ValueError: If an entry is not a valid address.
    """
    seen: Dict[int, str] = {}
    for address in addresses:
        key = address_to_int(address)
        if key in seen:
            raise DuplicateGuardianAddress(address)
        seen[key] = to_address(address)
    return [seen[key] for key in sorted(seen)]
