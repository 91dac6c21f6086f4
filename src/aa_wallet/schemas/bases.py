"""
Shared Pydantic Bases

Every model in ``aa_wallet`` derives from one of the classes below so that
serialization and alias handling behave the same across configuration,
signature and on-chain state models.

Classes:
    - CanonicalModel: deterministic JSON output, alias-or-name input
    - BaseSignature: a signer's contribution to an aggregated signature
    - BaseContractState: immutable snapshot of a contract read
"""

import json
from abc import ABC, abstractmethod

from pydantic import BaseModel, ConfigDict, Field


class CanonicalModel(BaseModel):
    """
    Model whose JSON form is byte-stable.

    Keys are sorted and separators compact, so the same model always
    serializes to the same string (useful when a payload is hashed or
    compared across processes).  Fields may be populated by name or alias,
    which lets camelCase JSON-RPC payloads load directly.

    Example:
        class Quote(CanonicalModel):
            token: str
            price: int

        Quote(token="0xabc", price=1).to_canonical_json()  # '{"price":1,"token":"0xabc"}'
    """

    model_config = ConfigDict(populate_by_name=True)

    def to_canonical_json(self) -> str:
        """Sorted-key, whitespace-free JSON using field aliases."""
        return json.dumps(
            self.model_dump(mode="json", by_alias=True),
            separators=(",", ":"),
            sort_keys=True,
            ensure_ascii=False,
        )


class BaseSignature(CanonicalModel, ABC):
    """
    One signer's contribution to an aggregated signature.

    Subclasses fix the allowed ``signature_type`` values and implement
    ``validate_format``, which is expected to run from a model validator.

    Attributes:
        signature_type: Scheme tag, e.g. ``"ECDSA"`` or ``"EIP1271"``.
    """

    signature_type: str = Field(..., description="Signature scheme tag")

    @abstractmethod
    def validate_format(self) -> bool:
        """
        Check the payload against the scheme's rules.

        Returns:
            bool: True when the signature is well formed.

        Raises:
            ValueError: Describing the first rule that failed.
        """


class BaseContractState(CanonicalModel, ABC):
    """Immutable snapshot of on-chain contract state; rebuilt on every read."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)
