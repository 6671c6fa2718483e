"""
Stored Reference Rewriting

Turns a stored image reference (a URL, an object key, or a local upload
path recorded on some other operating system) into something the rendering
engine can fetch. Pure string work: nothing here touches the network or the
filesystem.
"""

import os
from pathlib import Path, PurePosixPath
from typing import Optional, Union

from dotenv import load_dotenv

load_dotenv()
UPLOADS_ROOT = os.getenv("FOLIO_UPLOADS_ROOT", "uploads")
OBJECT_STORE_PUBLIC_URL = os.getenv("FOLIO_OBJECT_STORE_PUBLIC_URL") or None

PASS_THROUGH_PREFIXES = ("http://", "https://", "data:")
UPLOADS_MARKER = "uploads/"


class StoredReferenceRewriter:
    """
    Rewrite stored references into engine-fetchable URLs.

    Rules, in order:
        1. "" or None -> ""
        2. http(s):// and data: references are returned unchanged
        3. Backslashes are normalised to forward slashes
        4. Paths containing "uploads/" -> file:// URI of the part after the
           marker, under the uploads root
        5. Anything else is an object key -> public object-store URL when one
           is configured, else a file:// URI under the uploads root

    Example:
        rewriter = StoredReferenceRewriter(uploads_root="/srv/app/uploads")
        rewriter.rewrite("C:\\app\\uploads\\case-studies\\a.jpg")
        # "file:///srv/app/uploads/case-studies/a.jpg"
    """

    def __init__(
        self,
        uploads_root: Union[str, Path, None] = None,
        public_base_url: Optional[str] = None,
    ):
        self.uploads_root = Path(uploads_root or UPLOADS_ROOT).absolute()
        base = public_base_url if public_base_url is not None else OBJECT_STORE_PUBLIC_URL
        self.public_base_url = base.rstrip("/") if base else None

    def rewrite(self, reference: Optional[str]) -> str:
        if not reference:
            return ""
        reference = str(reference).strip()
        if reference.lower().startswith(PASS_THROUGH_PREFIXES):
            return reference

        normalized = reference.replace("\\", "/")
        marker = normalized.find(UPLOADS_MARKER)
        if marker != -1:
            return self._local_uri(normalized[marker + len(UPLOADS_MARKER):])

        key = normalized.lstrip("/")
        if self.public_base_url:
            return f"{self.public_base_url}/{key}"
        return self._local_uri(key)

    __call__ = rewrite

    def _local_uri(self, relative: str) -> str:
        parts = [p for p in PurePosixPath(relative).parts if p not in ("", "/", "..")]
        return self.uploads_root.joinpath(*parts).as_uri()
