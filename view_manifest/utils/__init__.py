from .concurrency import FirstCommit, InFlight

__all__ = ["FirstCommit", "InFlight"]
