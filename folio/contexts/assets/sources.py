"""
Asset Sources

One class per place an asset can come from. A source either returns a
ResolvedAsset, returns None (it has nothing for this reference), or raises
AssetResolutionFailure. The resolver turns all three into a chain.
"""

import base64
import binascii
import os
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Mapping, Optional, Union

import httpx
from dotenv import load_dotenv

from folio.contexts.assets.exceptions import AssetResolutionFailure
from folio.contexts.assets.logger import _log_warning
from folio.contexts.assets.references import AssetReference, ResolvedAsset, guess_mime_type
from folio.contexts.assets.rewriting import UPLOADS_MARKER, UPLOADS_ROOT

load_dotenv()
ASSETS_PATH = Path(os.getenv("FOLIO_ASSETS_PATH", "assets"))
ASSET_TIMEOUT_S = float(os.getenv("FOLIO_ASSET_TIMEOUT_S", "5"))
PRESIGN_TTL_S = int(os.getenv("FOLIO_PRESIGN_TTL_S", "3600"))
# Stored objects larger than this are linked by presigned URL instead of inlined; unset inlines everything
_presign_above = os.getenv("FOLIO_PRESIGN_ABOVE_BYTES", "")
PRESIGN_ABOVE_BYTES = int(_presign_above) if _presign_above else None

DEFAULT_LOGO_FILES = ("logo.png", "logo.svg", "logo.jpg")


# --- Collaborators ---


@dataclass(frozen=True)
class Branding:
    logo_url: Optional[str] = None


class BrandingProvider(ABC):
    """Looks up a tenant's branding settings."""

    @abstractmethod
    def get_branding(self, tenant_id: str) -> Optional[Branding]:
        ...


class StaticBrandingProvider(BrandingProvider):
    """Branding from an in-memory mapping of tenant id -> logo URL."""

    def __init__(self, logo_urls: Optional[Mapping[str, str]] = None):
        self.logo_urls: Dict[str, str] = dict(logo_urls or {})

    def get_branding(self, tenant_id: str) -> Optional[Branding]:
        if tenant_id not in self.logo_urls:
            return None
        return Branding(logo_url=self.logo_urls[tenant_id])


class ObjectStore(ABC):
    """Blob storage holding uploaded photos and logos."""

    @abstractmethod
    def fetch(self, key: str) -> Optional[bytes]:
        """Return the object's bytes, or None when it does not exist."""

    @abstractmethod
    def presign(self, key: str, ttl_s: int = 3600) -> str:
        """Return a time-limited URL for the object."""


class HttpObjectStore(ObjectStore):
    """
    Object store exposed over a public base URL (e.g., an R2/S3 public bucket).

    Args:
        base_url: Public base URL; keys are appended after a "/"
        client: httpx client (injected so tests can use a MockTransport)
        timeout: Per-request timeout in seconds
    """

    def __init__(self, base_url: str, client: Optional[httpx.Client] = None, timeout: float = ASSET_TIMEOUT_S):
        self.base_url = base_url.rstrip("/")
        self.client = client or httpx.Client()
        self.timeout = timeout

    def url_for(self, key: str) -> str:
        return f"{self.base_url}/{key.lstrip('/')}"

    def fetch(self, key: str) -> Optional[bytes]:
        response = self.client.get(self.url_for(key), timeout=self.timeout)
        if response.status_code == 404:
            return None
        response.raise_for_status()
        return response.content

    def presign(self, key: str, ttl_s: int = 3600) -> str:
        # Public bucket: the public URL never expires
        return self.url_for(key)


# --- Sources ---


class AssetSource(ABC):
    name = "source"

    @abstractmethod
    def fetch(self, reference: AssetReference) -> Optional[ResolvedAsset]:
        ...


def _decode_data_uri(uri: str):
    header, _, payload = uri.partition(",")
    mime_type = header[len("data:"):].split(";", 1)[0] or "image/png"
    if ";base64" not in header:
        raise ValueError("only base64 data URIs are supported")
    return base64.b64decode(payload, validate=True), mime_type


class TenantBrandingSource(AssetSource):
    """Tenant logo from the logo URL in the tenant's branding settings."""

    name = "tenant-branding"

    def __init__(
        self,
        provider: BrandingProvider,
        client: Optional[httpx.Client] = None,
        timeout: float = ASSET_TIMEOUT_S,
    ):
        self.provider = provider
        self.client = client or httpx.Client(follow_redirects=True)
        self.timeout = timeout

    def fetch(self, reference: AssetReference) -> Optional[ResolvedAsset]:
        if not reference.tenant_id:
            return None
        try:
            branding = self.provider.get_branding(reference.tenant_id)
        except Exception as e:
            raise AssetResolutionFailure(self.name, "branding lookup failed", e) from e

        logo_url = branding.logo_url if branding else None
        if not logo_url:
            return None

        if logo_url.startswith("data:"):
            try:
                data, mime_type = _decode_data_uri(logo_url)
            except (ValueError, binascii.Error) as e:
                raise AssetResolutionFailure(self.name, "malformed data URI", e) from e
            return ResolvedAsset.inline(reference, data, mime_type, self.name)

        if not logo_url.startswith(("http://", "https://")):
            return None

        try:
            response = self.client.get(logo_url, timeout=self.timeout)
            response.raise_for_status()
        except httpx.TimeoutException as e:
            raise AssetResolutionFailure(self.name, f"timed out fetching {logo_url}", e) from e
        except httpx.HTTPStatusError as e:
            raise AssetResolutionFailure(self.name, f"HTTP {e.response.status_code} for {logo_url}", e) from e
        except httpx.HTTPError as e:
            raise AssetResolutionFailure(self.name, f"request failed for {logo_url}", e) from e

        if not response.content:
            raise AssetResolutionFailure(self.name, f"empty response body from {logo_url}")

        mime_type = response.headers.get("content-type", "").split(";", 1)[0].strip()
        return ResolvedAsset.inline(
            reference,
            response.content,
            mime_type or guess_mime_type(logo_url, response.content),
            self.name,
        )


class ObjectStoreSource(AssetSource):
    """
    Stored photos and customer logos from the object store.

    Objects are inlined as data URIs. When presign_above_bytes is set, larger
    objects resolve to a presigned URL instead so the page stays small; a
    presign failure falls back to inlining the bytes already fetched.

    Args:
        store: Object store holding the uploads
        presign_above_bytes: Size above which a presigned URL is used (None: always inline)
        presign_ttl_s: Lifetime of presigned URLs in seconds
    """

    name = "object-store"

    def __init__(
        self,
        store: ObjectStore,
        presign_above_bytes: Optional[int] = PRESIGN_ABOVE_BYTES,
        presign_ttl_s: int = PRESIGN_TTL_S,
    ):
        self.store = store
        self.presign_above_bytes = presign_above_bytes
        self.presign_ttl_s = presign_ttl_s

    def fetch(self, reference: AssetReference) -> Optional[ResolvedAsset]:
        if not reference.key or reference.key.startswith("data:"):
            return None
        try:
            data = self.store.fetch(reference.key)
        except Exception as e:
            raise AssetResolutionFailure(self.name, f"fetch failed for {reference.key}", e) from e
        if not data:
            return None
        if self.presign_above_bytes is not None and len(data) > self.presign_above_bytes:
            try:
                url = self.store.presign(reference.key, self.presign_ttl_s)
            except Exception as e:
                _log_warning(f"{reference.describe()}: presign failed ({type(e).__name__}: {e}); inlining instead")
            else:
                if url:
                    return ResolvedAsset.remote(reference, url, self.name)
        return ResolvedAsset.inline(reference, data, guess_mime_type(reference.key, data), self.name)


class LocalFileSource(AssetSource):
    """
    Assets from the local filesystem.

    Tenant logos come from well-known default files in the assets directory;
    keyed assets are looked up under the uploads root.
    """

    name = "local-file"

    def __init__(
        self,
        assets_path: Union[str, Path, None] = None,
        uploads_root: Union[str, Path, None] = None,
        default_logo_files=DEFAULT_LOGO_FILES,
    ):
        self.assets_path = Path(assets_path or ASSETS_PATH)
        self.uploads_root = Path(uploads_root or UPLOADS_ROOT)
        self.default_logo_files = tuple(default_logo_files)

    def candidates(self, reference: AssetReference):
        if reference.key:
            normalized = reference.key.replace("\\", "/")
            marker = normalized.find(UPLOADS_MARKER)
            relative = normalized[marker + len(UPLOADS_MARKER):] if marker != -1 else normalized.lstrip("/")
            parts = [p for p in relative.split("/") if p not in ("", "..")]
            if parts:
                yield self.uploads_root.joinpath(*parts)
        else:
            for filename in self.default_logo_files:
                yield self.assets_path / filename

    def fetch(self, reference: AssetReference) -> Optional[ResolvedAsset]:
        for path in self.candidates(reference):
            if not path.is_file():
                continue
            try:
                data = path.read_bytes()
            except OSError as e:
                raise AssetResolutionFailure(self.name, f"cannot read {path}", e) from e
            return ResolvedAsset.inline(reference, data, guess_mime_type(path.name, data), self.name)
        return None
