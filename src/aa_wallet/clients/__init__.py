from .bundler_client import BundlerClient

__all__ = [
    "BundlerClient",
]
