"""NFT marketplace ledger service package."""


def __getattr__(name):
    """Lazy import so scripts and migrations can use the models without FastAPI."""
    if name == "create_app":
        from .main import create_app
        return create_app
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
