"""Census API client module.

Usage:
    from census_provider.api import CensusClient

    async with CensusClient.from_settings() as census:
        sync = await census.syncs.get(123)
"""

from .client import CensusClient, CensusConfig, is_not_found
from .syncs import SyncsAPI

__all__ = [
    "CensusClient",
    "CensusConfig",
    "SyncsAPI",
    "is_not_found",
]
