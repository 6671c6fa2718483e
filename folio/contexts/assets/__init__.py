"""Asset resolution: logos and photos fetched into self-contained image sources."""

from folio.contexts.assets.references import AssetName, AssetReference, AssetStatus, ResolvedAsset
from folio.contexts.assets.resolver import AssetCache, AssetResolver
from folio.contexts.assets.rewriting import StoredReferenceRewriter
from folio.contexts.assets.sources import (
    Branding,
    BrandingProvider,
    HttpObjectStore,
    LocalFileSource,
    ObjectStore,
    ObjectStoreSource,
    StaticBrandingProvider,
    TenantBrandingSource,
)

__all__ = [
    "AssetCache",
    "AssetName",
    "AssetReference",
    "AssetResolver",
    "AssetStatus",
    "Branding",
    "BrandingProvider",
    "HttpObjectStore",
    "LocalFileSource",
    "ObjectStore",
    "ObjectStoreSource",
    "ResolvedAsset",
    "StaticBrandingProvider",
    "StoredReferenceRewriter",
    "TenantBrandingSource",
]
