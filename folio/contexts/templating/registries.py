"""
Templating Registries

Registries for loading and caching section templates, default layout
configurations, and the document kinds themselves.
"""

from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Optional

from jinja2 import Environment, FileSystemLoader, StrictUndefined, Template, TemplateNotFound
from markupsafe import Markup, escape

from folio.contexts.templating.exceptions import UnknownDocumentKind
from folio.contexts.templating.layout import LayoutConfiguration
from folio.contexts.templating.markup import TEMPLATE_PATH
from folio.utils.text_processing import format_currency, format_number, html_to_text
from folio.utils.timestamp import format_long_date, format_short_date


def paragraphs(value: Any) -> Markup:
    """Escape plain text and keep its line breaks (blank line = new paragraph)."""
    if value is None or str(value).strip() == "":
        return Markup("")
    blocks = [b for b in str(value).replace("\r\n", "\n").split("\n\n") if b.strip()]
    rendered = [
        Markup("<p>") + Markup("<br />").join(escape(line) for line in block.strip().split("\n")) + Markup("</p>")
        for block in blocks
    ]
    return Markup("").join(rendered)


def rich_text(value: Any) -> Markup:
    """Render stored editor HTML as sanitized paragraphs (tags dropped, text escaped)."""
    return paragraphs(html_to_text(value))


FILTERS: Dict[str, Callable[..., Any]] = {
    "currency": format_currency,
    "number": format_number,
    "long_date": format_long_date,
    "short_date": format_short_date,
    "paragraphs": paragraphs,
    "rich_text": rich_text,
}


class TemplateRegistry:
    """
    Registry for loading and caching Jinja2 templates for HTML generation.

    Kind templates are stored in folio/contexts/templating/template/kinds/{kind}.html.jinja
    and define one macro per section plus stylesheet/header/footer macros.
    Autoescaping is always on: every record field is untrusted text.
    """

    def __init__(self, template_path: Optional[Path] = None):
        """
        Initialize the template registry.

        Args:
            template_path: Root template directory. Defaults to FOLIO_TEMPLATE_PATH
                           or the package's bundled templates
        """
        self.template_path = Path(template_path or TEMPLATE_PATH)
        self._cache: Dict[str, Template] = {}

        self.env = Environment(
            loader=FileSystemLoader(str(self.template_path)),
            # Catches silent failures (misspelled record fields)
            undefined=StrictUndefined,
            autoescape=True,
            trim_blocks=True,
            lstrip_blocks=True,
        )
        self.env.filters.update(FILTERS)

    def get_template(self, name: str) -> Template:
        """
        Get a template by path relative to the template root, loading and caching it.

        Raises:
            TemplateNotFound: If template file doesn't exist
            TemplateSyntaxError: If template has Jinja2 syntax errors
        """
        if name in self._cache:
            return self._cache[name]

        try:
            template = self.env.get_template(name)
        except TemplateNotFound as e:
            raise TemplateNotFound(f"Template not found: {self.template_path / name}") from e

        self._cache[name] = template
        return template

    def macro(self, template_name: str, macro_name: str) -> Callable[..., Markup]:
        """
        Get a macro exported by a template.

        Raises:
            AttributeError: If the template defines no such macro
        """
        module = self.get_template(template_name).module
        return getattr(module, macro_name)

    def clear_cache(self):
        """Clear the template cache."""
        self._cache.clear()

    def is_cached(self, name: str) -> bool:
        return name in self._cache


class LayoutRegistry:
    """
    Registry for loading and caching default layout configurations.

    Defaults are stored in folio/contexts/templating/template/layouts/{kind}.yaml
    and are validated with the same rules as tenant configurations.
    """

    def __init__(self, template_path: Optional[Path] = None):
        self.layouts_path = Path(template_path or TEMPLATE_PATH) / "layouts"
        self._cache: Dict[str, LayoutConfiguration] = {}

    def get_config_path(self, kind: str) -> Path:
        return self.layouts_path / f"{kind}.yaml"

    def get_default(self, kind: str) -> LayoutConfiguration:
        """
        Get the default layout for a kind, loading and caching it if necessary.

        Raises:
            FileNotFoundError: If the kind has no default layout file
            SectionCompositionAmbiguity: If the shipped default is ambiguous
        """
        if kind in self._cache:
            return self._cache[kind]

        config_path = self.get_config_path(kind)
        if not config_path.exists():
            raise FileNotFoundError(f"Default layout not found for kind '{kind}' at {config_path}")

        layout = LayoutConfiguration.load(config_path)
        self._cache[kind] = layout
        return layout

    def clear_cache(self):
        self._cache.clear()


class DocumentKindRegistry:
    """
    Registry of document kinds.

    Each entry exposes the same shape (default layout, section renderers,
    stylesheet, asset references, filename), so adding a kind never touches
    the compositor, the asset chain, or the rendering engine adapter.
    """

    def __init__(self, kinds: Iterable[Any] = ()):
        self._kinds: Dict[str, Any] = {}
        for kind in kinds:
            self.register(kind)

    def register(self, kind_spec) -> None:
        """
        Register a kind spec under its name.

        Raises:
            ValueError: If the name is already registered
        """
        name = getattr(kind_spec.name, "value", kind_spec.name)
        if name in self._kinds:
            raise ValueError(f"Document kind '{name}' is already registered")
        self._kinds[name] = kind_spec

    def get(self, kind) -> Any:
        """
        Look up a kind spec.

        Raises:
            UnknownDocumentKind: If nothing is registered under the name
        """
        name = getattr(kind, "value", kind)
        try:
            return self._kinds[name]
        except KeyError:
            raise UnknownDocumentKind(name, self._kinds) from None

    def kinds(self) -> List[str]:
        return list(self._kinds)

    def __contains__(self, kind) -> bool:
        return getattr(kind, "value", kind) in self._kinds
