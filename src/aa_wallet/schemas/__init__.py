from .bases import CanonicalModel, BaseSignature, BaseContractState

__all__ = [
    "CanonicalModel",
    "BaseSignature",
    "BaseContractState",
]
