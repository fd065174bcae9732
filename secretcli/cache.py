"""
On-disk cache of deployed contracts.

Each cached contract lives in its own JSON file named after the logical
name passed at deployment time, so repeated test runs can skip storing
and instantiating a contract that is already on chain.
"""
import logging
from pathlib import Path
from typing import List, Optional, Union

import portalocker
from portalocker.exceptions import BaseLockException

from .config import CLIConfig
from .exceptions import ContractNotCachedError, NoCachedContractError
from .models import CacheLookup, NetContract

logger = logging.getLogger(__name__)

LOCK_FILE = ".lock"


class ContractCache:
    """File-per-contract cache of NetContract records"""

    def __init__(self, cache_dir: Optional[Union[str, Path]] = None, config: Optional[CLIConfig] = None):
        """
        Initialize the cache.

        Args:
            cache_dir: Directory holding cached contracts
            config: Used for the default directory when cache_dir is not given
        """
        if cache_dir is None:
            cache_dir = (config or CLIConfig()).cache_dir
        self.cache_dir = Path(cache_dir)

    def path_for(self, name: str) -> Path:
        return self.cache_dir / name

    def _lock_path(self) -> str:
        return str(self.cache_dir / LOCK_FILE)

    def save(self, name: str, contract: NetContract) -> bool:
        """
        Write a contract to the cache, replacing any previous entry.

        Failures are logged and swallowed so a deployment never fails
        because its result could not be cached.

        Args:
            name: Logical contract name
            contract: Contract to cache

        Returns:
            True if the contract was written
        """
        path = self.path_for(name)
        try:
            self.cache_dir.mkdir(parents=True, exist_ok=True)
            with portalocker.Lock(self._lock_path(), timeout=10):
                path.write_text(contract.model_dump_json(), encoding="utf-8")
        except (OSError, BaseLockException) as e:
            logger.warning(f"Could not cache contract '{name}' at {path}: {e}")
            return False

        logger.info(f"Cached contract '{name}' at {path}")
        return True

    def load(self, name: Optional[str]) -> NetContract:
        """
        Load a cached contract.

        Args:
            name: Logical contract name, or None when caching is not in use

        Returns:
            The cached NetContract

        Raises:
            NoCachedContractError: If name is None (no file is touched)
            ContractNotCachedError: If the entry is missing, unreadable or invalid
        """
        if name is None:
            raise NoCachedContractError()

        path = self.path_for(name)
        try:
            contract = NetContract.model_validate_json(path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            raise ContractNotCachedError(f"No cached contract '{name}' at {path}: {e}", name=name) from e

        logger.info(f"Using cached contract '{name}'")
        return contract

    def lookup(self, name: Optional[str]) -> CacheLookup:
        """
        Look up a contract without raising on a miss.

        Returns:
            CacheLookup with ``hit`` set and the contract on a hit
        """
        try:
            contract = self.load(name)
        except NoCachedContractError as e:
            logger.debug(f"Cache miss: {e}")
            return CacheLookup(hit=False, name=name)
        return CacheLookup(hit=True, name=name, contract=contract)

    def delete(self, name: str) -> None:
        """Remove a cached contract if present"""
        path = self.path_for(name)
        if path.exists():
            path.unlink()

    def names(self) -> List[str]:
        """List the names of all cached contracts"""
        if not self.cache_dir.is_dir():
            return []
        return sorted(
            p.name for p in self.cache_dir.iterdir()
            if p.is_file() and not p.name.startswith(".")
        )


_default_cache: Optional[ContractCache] = None


def _get_default_cache() -> ContractCache:
    global _default_cache
    if _default_cache is None:
        _default_cache = ContractCache(config=CLIConfig.from_env())
    return _default_cache


def save_contract(name: str, contract: NetContract) -> bool:
    """Save a contract to the default cache"""
    return _get_default_cache().save(name, contract)


def load_cached_contract(name: Optional[str]) -> NetContract:
    """Load a contract from the default cache"""
    return _get_default_cache().load(name)
