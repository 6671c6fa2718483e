"""
Asset Resolution Chain

Resolves logical asset references by trying an ordered chain of sources
per asset name. Resolution never raises: every failure is logged and the
chain falls through, ending in an unavailable result that renderers treat
as "omit the image".
"""

import os
import threading
import time
from concurrent.futures import ThreadPoolExecutor, TimeoutError as FutureTimeout
from typing import Callable, Dict, Mapping, Optional, Sequence, Tuple

import httpx
from dotenv import load_dotenv

from folio.contexts.assets.exceptions import AssetResolutionFailure
from folio.contexts.assets.logger import _log_warning, log_asset_resolved, log_source_failure
from folio.contexts.assets.references import AssetName, AssetReference, ResolvedAsset
from folio.contexts.assets.sources import (
    ASSET_TIMEOUT_S,
    PRESIGN_ABOVE_BYTES,
    AssetSource,
    BrandingProvider,
    LocalFileSource,
    ObjectStore,
    ObjectStoreSource,
    TenantBrandingSource,
)

load_dotenv()
ASSET_CACHE_TTL_S = float(os.getenv("FOLIO_ASSET_CACHE_TTL_S", "300"))

CacheKey = Tuple[str, Optional[str], Optional[str], Optional[str]]


def _cache_key(reference: AssetReference) -> CacheKey:
    return (reference.name.value, reference.tenant_id, reference.key, reference.owner_id)


class AssetCache:
    """
    Thread-safe TTL cache of resolved assets.

    Only available results are stored, so a transient outage never pins a
    document to a missing logo. Owned and injected by the caller; one cache
    may be shared across requests.

    Args:
        ttl_s: Seconds an entry stays valid
        clock: Monotonic time source (injectable for tests)
    """

    def __init__(self, ttl_s: float = ASSET_CACHE_TTL_S, clock: Callable[[], float] = time.monotonic):
        self.ttl_s = ttl_s
        self._clock = clock
        self._entries: Dict[CacheKey, Tuple[float, ResolvedAsset]] = {}
        self._lock = threading.Lock()

    def get(self, reference: AssetReference) -> Optional[ResolvedAsset]:
        key = _cache_key(reference)
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            expires_at, asset = entry
            if self._clock() >= expires_at:
                del self._entries[key]
                return None
            return asset

    def put(self, reference: AssetReference, asset: ResolvedAsset) -> None:
        if not asset.is_available:
            return
        with self._lock:
            self._entries[_cache_key(reference)] = (self._clock() + self.ttl_s, asset)

    def invalidate(self, tenant_id: str) -> int:
        """Drop every entry for a tenant (e.g., after a branding change). Returns the count."""
        with self._lock:
            stale = [key for key in self._entries if key[1] == tenant_id]
            for key in stale:
                del self._entries[key]
            return len(stale)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


class AssetResolver:
    """
    Resolve asset references through per-name source chains.

    Args:
        chains: Ordered sources to try for each asset name
        cache: Optional AssetCache shared by the caller
        timeout: Seconds each asset may take in resolve_all()

    Example:
        resolver = AssetResolver.default(branding_provider=provider, object_store=store)
        assets = resolver.resolve_all({"logo": AssetReference(AssetName.TENANT_LOGO, tenant_id="t1")})
        assets["logo"].src  # data URI, URL, or ""
    """

    def __init__(
        self,
        chains: Mapping[AssetName, Sequence[AssetSource]],
        cache: Optional[AssetCache] = None,
        timeout: float = ASSET_TIMEOUT_S,
    ):
        self.chains = {AssetName(name): tuple(sources) for name, sources in chains.items()}
        self.cache = cache
        self.timeout = timeout

    @classmethod
    def default(
        cls,
        branding_provider: Optional[BrandingProvider] = None,
        object_store: Optional[ObjectStore] = None,
        client: Optional[httpx.Client] = None,
        assets_path=None,
        uploads_root=None,
        cache: Optional[AssetCache] = None,
        timeout: float = ASSET_TIMEOUT_S,
        presign_above_bytes: Optional[int] = PRESIGN_ABOVE_BYTES,
    ) -> "AssetResolver":
        """
        Build the standard chains.

        tenant-logo: tenant branding URL -> default logo file
        employee-photo, customer-logo: object store -> file under uploads root

        Stored objects above presign_above_bytes resolve to presigned URLs.
        """
        local = LocalFileSource(assets_path=assets_path, uploads_root=uploads_root)

        logo_chain = []
        if branding_provider is not None:
            logo_chain.append(TenantBrandingSource(branding_provider, client=client, timeout=timeout))
        logo_chain.append(local)

        stored_chain = []
        if object_store is not None:
            stored_chain.append(ObjectStoreSource(object_store, presign_above_bytes=presign_above_bytes))
        stored_chain.append(local)

        return cls(
            chains={
                AssetName.TENANT_LOGO: logo_chain,
                AssetName.EMPLOYEE_PHOTO: stored_chain,
                AssetName.CUSTOMER_LOGO: stored_chain,
            },
            cache=cache,
            timeout=timeout,
        )

    def resolve(self, reference: AssetReference) -> ResolvedAsset:
        """Resolve one reference. Never raises."""
        if self.cache is not None:
            cached = self.cache.get(reference)
            if cached is not None:
                return cached

        for source in self.chains.get(reference.name, ()):
            try:
                asset = source.fetch(reference)
            except AssetResolutionFailure as e:
                log_source_failure(reference, source.name, e.reason)
                continue
            except Exception as e:
                log_source_failure(reference, source.name, f"{type(e).__name__}: {e}")
                continue

            if asset is not None and asset.is_available:
                if self.cache is not None:
                    self.cache.put(reference, asset)
                log_asset_resolved(reference, asset.status.value, source.name)
                return asset

        log_asset_resolved(reference, "unavailable")
        return ResolvedAsset.unavailable(reference)

    def resolve_all(self, references: Mapping[str, AssetReference]) -> Dict[str, ResolvedAsset]:
        """
        Resolve several references concurrently.

        Each asset is bounded by the resolver timeout; one that has not
        finished by then is reported unavailable. The worker is abandoned
        rather than joined, so a hung fetch never holds up the document.

        Args:
            references: slot -> reference

        Returns:
            slot -> resolved asset, with every slot present
        """
        if not references:
            return {}

        executor = ThreadPoolExecutor(max_workers=len(references), thread_name_prefix="folio-asset")
        try:
            futures = {slot: executor.submit(self.resolve, ref) for slot, ref in references.items()}
            deadline = time.monotonic() + self.timeout

            resolved = {}
            for slot, future in futures.items():
                reference = references[slot]
                try:
                    resolved[slot] = future.result(timeout=max(0.0, deadline - time.monotonic()))
                except FutureTimeout:
                    _log_warning(f"{reference.describe()}: not resolved within {self.timeout}s")
                    log_asset_resolved(reference, "unavailable")
                    resolved[slot] = ResolvedAsset.unavailable(reference)
            return resolved
        finally:
            executor.shutdown(wait=False, cancel_futures=True)
