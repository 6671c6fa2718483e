"""
Markup Document Structure

Structured representation of a rendered document: an ordered tree of styled
blocks plus a separable head (page-level styling). Documents stay structured
until the very last step, so composing one document into another never needs
to re-parse serialized HTML.
"""

import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Tuple

from dotenv import load_dotenv
from jinja2 import Environment, FileSystemLoader, StrictUndefined, Template
from markupsafe import Markup

load_dotenv()
TEMPLATE_PATH = Path(
    os.getenv("FOLIO_TEMPLATE_PATH", Path(__file__).resolve().parent / "template")
)

EMPTY = Markup("")

# Page-level rules owned by the outermost document. Embedded documents never
# contribute @page rules.
PAGE_STYLE = Markup(
    "@page { size: letter; }\n"
    "* { box-sizing: border-box; }\n"
    "html, body { margin: 0; padding: 0; }\n"
    "img { max-width: 100%; }\n"
    ".folio-page { break-before: page; page-break-before: always; }\n"
)


def is_empty(html: Optional[str]) -> bool:
    """True when rendered markup carries no content (None, "" or whitespace)."""
    return html is None or not str(html).strip()


@dataclass(frozen=True)
class MarkupBlock:
    """
    One node in the block tree.

    Leaf blocks carry rendered HTML (a section, a header, a footer).
    Container blocks carry children and a CSS class (columns, sidebars,
    document roots, embedded-document page wrappers).

    Attributes:
        key: Block identifier (section key for section blocks)
        html: Rendered markup for leaf blocks
        label: Section heading shown to the reader ("" for non-section blocks)
        children: Child blocks for container blocks
        css_class: Class applied to the wrapping element of a container
        region: Layout region the block belongs to (e.g., "left", "sidebar")
        page_break_before: Start this block on a new page
        style: Inline style for the wrapping element (CSS custom properties)
    """

    key: str
    html: Markup = EMPTY
    label: str = ""
    children: Tuple["MarkupBlock", ...] = ()
    css_class: str = ""
    region: str = ""
    page_break_before: bool = False
    style: str = ""

    def walk(self) -> Iterator["MarkupBlock"]:
        """Depth-first traversal, this block first."""
        yield self
        for child in self.children:
            yield from child.walk()

    def render(self) -> Markup:
        """Serialize this block (and its children) to HTML."""
        classes = " ".join(
            c for c in (self.css_class, "folio-page" if self.page_break_before else "") if c
        )
        if not self.children and not classes and not self.style:
            return Markup(self.html)

        opening = Markup('<div class="{}" data-block="{}"').format(classes, self.key)
        if self.style:
            opening += Markup(' style="{}"').format(self.style)
        opening += Markup(">")

        if not self.children:
            return opening + Markup(self.html) + Markup("</div>")

        inner = Markup("\n").join(child.render() for child in self.children)
        return opening + Markup("\n") + inner + Markup("\n</div>")


@dataclass(frozen=True)
class DocumentHead:
    """
    Page-level styling and metadata for a document.

    Attributes:
        title: Document title (HTML <title>)
        page_style: Page rules (@page and page-break utilities)
        stylesheets: (kind, css) pairs; each kind's css is scoped under .doc-<kind>
    """

    title: str
    page_style: Markup = PAGE_STYLE
    stylesheets: Tuple[Tuple[str, Markup], ...] = ()

    def with_stylesheets(self, extra: Tuple[Tuple[str, Markup], ...]) -> "DocumentHead":
        """Return a head that also carries the given stylesheets (one per kind)."""
        present = {kind for kind, _ in self.stylesheets}
        merged = list(self.stylesheets)
        for kind, css in extra:
            if kind not in present:
                merged.append((kind, css))
                present.add(kind)
        return replace(self, stylesheets=tuple(merged))


@dataclass(frozen=True)
class MarkupDocument:
    """
    A complete rendered document: structurally separate head and body.

    Attributes:
        kind: Document kind that produced the document
        head: Page-level styling
        body: Top-level blocks, in reading order
    """

    kind: str
    head: DocumentHead
    body: Tuple[MarkupBlock, ...] = field(default_factory=tuple)

    def blocks(self) -> Iterator[MarkupBlock]:
        """All blocks of the body tree, depth first, in reading order."""
        for block in self.body:
            yield from block.walk()

    def block(self, key: str) -> Optional[MarkupBlock]:
        """First block with the given key, or None."""
        for block in self.blocks():
            if block.key == key:
                return block
        return None

    def sections(self) -> List[MarkupBlock]:
        """Section blocks (blocks with a visible heading), in reading order."""
        return [block for block in self.blocks() if block.label and not block.children]

    def headings(self) -> List[str]:
        """Headings of all rendered sections, in reading order."""
        return [block.label for block in self.sections()]

    def section_keys(self) -> List[str]:
        return [block.key for block in self.sections()]

    def to_html(self) -> str:
        """Serialize to a complete HTML document."""
        return _document_template().render(head=self.head, body=self.body)


# structure directory -> loaded document template
_document_templates: Dict[str, Template] = {}


def _document_template() -> Template:
    """Load the document skeleton once per template directory."""
    directory = str(TEMPLATE_PATH / "structure")
    template = _document_templates.get(directory)
    if template is None:
        environment = Environment(
            loader=FileSystemLoader(directory),
            undefined=StrictUndefined,
            autoescape=True,
            keep_trailing_newline=True,
        )
        template = environment.get_template("document.html.jinja")
        _document_templates[directory] = template
    return template


def clear_document_template_cache() -> None:
    """Forget the loaded document skeleton (e.g., after editing it on disk)."""
    _document_templates.clear()
