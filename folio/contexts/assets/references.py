"""
Asset Reference Types

Logical names for the images a document needs, and the result of resolving
them. Section templates only ever see ResolvedAsset.src; where the bytes came
from is the resolver's business.
"""

import base64
import mimetypes
from dataclasses import dataclass
from enum import Enum
from typing import Optional


class AssetName(str, Enum):
    TENANT_LOGO = "tenant-logo"
    EMPLOYEE_PHOTO = "employee-photo"
    CUSTOMER_LOGO = "customer-logo"


class AssetStatus(str, Enum):
    INLINE = "inline"
    REMOTE_URL = "remote-url"
    UNAVAILABLE = "unavailable"


@dataclass(frozen=True)
class AssetReference:
    """
    A logical asset needed by a document.

    Attributes:
        name: Logical asset name
        tenant_id: Tenant that owns the asset
        key: Stored object key or path (employee photos, customer logos)
        owner_id: Person or record the asset belongs to (e.g., the employee of a photo)
    """

    name: AssetName
    tenant_id: Optional[str] = None
    key: Optional[str] = None
    owner_id: Optional[str] = None

    def describe(self) -> str:
        parts = [self.name.value]
        if self.tenant_id:
            parts.append(f"tenant={self.tenant_id}")
        if self.owner_id:
            parts.append(f"owner={self.owner_id}")
        if self.key:
            parts.append(f"key={self.key}")
        return " ".join(parts)


@dataclass(frozen=True)
class ResolvedAsset:
    """
    Outcome of resolving one AssetReference.

    Attributes:
        reference: The reference that was resolved
        status: inline (data URI), remote-url (fetchable URL) or unavailable
        data: Raw bytes for inline assets
        mime_type: MIME type for inline assets
        url: URL for remote-url assets
        source: Name of the source that produced the asset
    """

    reference: AssetReference
    status: AssetStatus
    data: Optional[bytes] = None
    mime_type: Optional[str] = None
    url: Optional[str] = None
    source: str = ""

    @property
    def is_available(self) -> bool:
        return self.status is not AssetStatus.UNAVAILABLE

    @property
    def src(self) -> str:
        """Value for an <img src>: a data URI, a URL, or "" when unavailable."""
        if self.status is AssetStatus.INLINE and self.data is not None:
            encoded = base64.b64encode(self.data).decode("ascii")
            return f"data:{self.mime_type or 'application/octet-stream'};base64,{encoded}"
        if self.status is AssetStatus.REMOTE_URL and self.url:
            return self.url
        return ""

    @classmethod
    def inline(cls, reference: AssetReference, data: bytes, mime_type: str, source: str) -> "ResolvedAsset":
        return cls(reference=reference, status=AssetStatus.INLINE, data=data, mime_type=mime_type, source=source)

    @classmethod
    def remote(cls, reference: AssetReference, url: str, source: str) -> "ResolvedAsset":
        return cls(reference=reference, status=AssetStatus.REMOTE_URL, url=url, source=source)

    @classmethod
    def unavailable(cls, reference: AssetReference) -> "ResolvedAsset":
        return cls(reference=reference, status=AssetStatus.UNAVAILABLE)


def guess_mime_type(name: Optional[str], data: Optional[bytes] = None) -> str:
    """Guess an image MIME type from a file name, falling back to magic bytes."""
    if name:
        guessed, _ = mimetypes.guess_type(name.split("?", 1)[0])
        if guessed:
            return guessed
    if data:
        if data.startswith(b"\x89PNG"):
            return "image/png"
        if data.startswith(b"\xff\xd8"):
            return "image/jpeg"
        if data.startswith(b"GIF8"):
            return "image/gif"
        if data.lstrip().startswith(b"<svg") or b"<svg" in data[:256]:
            return "image/svg+xml"
    return "image/png"
