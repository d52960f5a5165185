"""
Document adapter for the Product Scout extraction engine.

Wraps a parsed HTML snapshot and exposes the read-only tree capabilities the
extractors rely on: CSS queries, visible text, strikethrough styling and
image dimensions. No component outside this module touches BeautifulSoup
parsing directly.
"""
import re
from typing import Callable, Iterable, List, Optional, Tuple, Union
from urllib.parse import urljoin, urlparse

import soupsieve
from bs4 import BeautifulSoup, Tag
from bs4.element import (
    CData,
    Comment,
    Declaration,
    Doctype,
    NavigableString,
    ProcessingInstruction,
)
from soupsieve import SelectorSyntaxError

from product_scout.config import config
from product_scout.utils.logger import LayerLogger

Scope = Union[BeautifulSoup, Tag]

INVISIBLE_TAGS = {"script", "style", "noscript", "template", "head", "title", "meta", "link"}
BLOCK_TAGS = {
    "address", "article", "aside", "blockquote", "dd", "details", "dialog", "div",
    "dl", "dt", "fieldset", "figcaption", "figure", "footer", "form", "h1", "h2",
    "h3", "h4", "h5", "h6", "header", "hr", "li", "main", "nav", "ol", "p", "pre",
    "section", "summary", "table", "tbody", "td", "tfoot", "th", "thead", "tr", "ul",
}
STRIKE_TAGS = {"s", "del", "strike"}
SKIPPED_STRINGS = (Comment, Declaration, Doctype, ProcessingInstruction)

_LINE_BREAK = object()
_SPACES_RE = re.compile(r"\s+")
_HIDDEN_STYLE_RE = re.compile(r"display\s*:\s*none|visibility\s*:\s*hidden", re.I)
_LINE_THROUGH_RE = re.compile(r"text-decoration[^;]*line-through", re.I)
_CSS_RULE_RE = re.compile(r"([^{}]+)\{([^{}]*)\}")
_CSS_COMMENT_RE = re.compile(r"/\*.*?\*/", re.S)
_PX_RE = r"{}\s*:\s*(\d+(?:\.\d+)?)\s*px"
_STRIKE_ANCESTOR_LEVELS = 2


class ProductDocument:
    """
    A single parsed document snapshot plus its location.

    Extraction components receive one of these instead of a live browser DOM.
    All queries are read-only; the snapshot is never mutated.
    """

    def __init__(
        self,
        html: str,
        url: str = "",
        hostname: Optional[str] = None,
        parser: Optional[str] = None,
    ):
        self.raw_html = html or ""
        self.url = url or ""
        self.hostname = (hostname or urlparse(self.url).hostname or "").lower()
        self.soup = BeautifulSoup(self.raw_html, parser or config.HTML_PARSER)
        self.logger = LayerLogger("document")
        self._struck_selectors: Optional[List[str]] = None

    # =========================================================================
    # TREE QUERIES
    # =========================================================================

    @property
    def root(self) -> BeautifulSoup:
        return self.soup

    @property
    def body(self) -> Scope:
        return self.soup.body or self.soup

    @property
    def path(self) -> str:
        return urlparse(self.url).path.lower()

    @property
    def title(self) -> str:
        """The document <title> text."""
        title_tag = self.soup.find("title")
        return title_tag.get_text(strip=True) if title_tag else ""

    def select(self, selector: str, scope: Optional[Scope] = None) -> List[Tag]:
        """
        Run a CSS query, returning [] for selectors the query engine rejects.

        One bad selector must never abort a list of selectors, so syntax and
        unsupported-feature errors are logged and swallowed here.
        """
        target = scope if scope is not None else self.soup
        try:
            return target.select(selector)
        except (SelectorSyntaxError, NotImplementedError, ValueError) as e:
            self.logger.log_action(
                "css_select",
                "selector_skipped",
                selector=selector,
                reason=str(e)[:120],
            )
            return []

    def select_one(self, selector: str, scope: Optional[Scope] = None) -> Optional[Tag]:
        matches = self.select(selector, scope)
        return matches[0] if matches else None

    def select_first(self, selectors: Iterable[str], scope: Optional[Scope] = None) -> Optional[Tag]:
        """Return the first element matched by the first matching selector."""
        for selector in selectors:
            element = self.select_one(selector, scope)
            if element is not None:
                return element
        return None

    def matches(self, element: Tag, selector: str) -> bool:
        try:
            return soupsieve.match(selector, element)
        except (SelectorSyntaxError, NotImplementedError, ValueError):
            return False

    def closest(self, element: Tag, selector: str) -> Optional[Tag]:
        """The element itself or its nearest ancestor matching selector."""
        try:
            return soupsieve.closest(selector, element)
        except (SelectorSyntaxError, NotImplementedError, ValueError):
            return None

    def meta_content(self, **attrs) -> Optional[str]:
        """Return the trimmed content of the first <meta> matching attrs."""
        meta = self.soup.find("meta", attrs=attrs)
        if meta and meta.get("content"):
            return meta["content"].strip()
        return None

    def ancestors(self, element: Tag, limit: int) -> List[Tag]:
        """Return up to `limit` parent elements, never past the document root."""
        found = []
        parent = element.parent
        while parent is not None and isinstance(parent, Tag) and len(found) < limit:
            if isinstance(parent, BeautifulSoup):
                break
            found.append(parent)
            parent = parent.parent
        return found

    # =========================================================================
    # VISIBLE TEXT
    # =========================================================================

    def text_of(
        self,
        element: Optional[Scope],
        single_line: bool = False,
        skip: Optional[Callable[[Tag], bool]] = None,
    ) -> str:
        """
        Approximate the rendered text of an element (innerText).

        Block elements and <br> produce line breaks; hidden and non-rendered
        content is skipped; whitespace inside a line collapses. Descendants
        for which `skip` returns True are left out with their subtrees.
        """
        if element is None:
            return ""
        if isinstance(element, NavigableString):
            return _SPACES_RE.sub(" ", str(element)).strip()

        parts: List[str] = []
        stack = list(reversed(list(element.children)))
        while stack:
            node = stack.pop()
            if node is _LINE_BREAK:
                parts.append("\n")
            elif isinstance(node, Tag):
                if node.name in INVISIBLE_TAGS or self.is_hidden(node):
                    continue
                if skip is not None and skip(node):
                    continue
                if node.name == "br":
                    parts.append("\n")
                    continue
                block = node.name in BLOCK_TAGS
                if block:
                    parts.append("\n")
                    stack.append(_LINE_BREAK)
                stack.extend(reversed(list(node.children)))
            elif isinstance(node, NavigableString) and not isinstance(node, SKIPPED_STRINGS):
                if isinstance(node, CData) or node.parent is None or node.parent.name not in INVISIBLE_TAGS:
                    parts.append(_SPACES_RE.sub(" ", str(node)))

        lines = [line.strip() for line in "".join(parts).split("\n")]
        lines = [_SPACES_RE.sub(" ", line) for line in lines if line]
        return " ".join(lines) if single_line else "\n".join(lines)

    def is_hidden(self, element: Tag) -> bool:
        if element.has_attr("hidden"):
            return True
        style = element.get("style")
        return bool(style and _HIDDEN_STYLE_RE.search(style))

    # =========================================================================
    # STYLE AND GEOMETRY SIGNALS
    # =========================================================================

    def is_struck_through(self, element: Optional[Tag]) -> bool:
        """
        Static stand-in for a computed `text-decoration: line-through`.

        Checks the element and its nearest ancestors for strike tags, inline
        line-through styles, or embedded stylesheet rules declaring it.
        """
        if element is None:
            return False
        for node in [element] + self.ancestors(element, _STRIKE_ANCESTOR_LEVELS):
            if node.name in STRIKE_TAGS:
                return True
            style = node.get("style")
            if style and _LINE_THROUGH_RE.search(style):
                return True
            for selector in self._line_through_selectors():
                if self.matches(node, selector):
                    return True
        return False

    def _line_through_selectors(self) -> List[str]:
        if self._struck_selectors is None:
            selectors = []
            for style_tag in self.soup.find_all("style"):
                css = _CSS_COMMENT_RE.sub("", style_tag.get_text())
                for selector_text, body in _CSS_RULE_RE.findall(css):
                    if "line-through" not in body.lower():
                        continue
                    for selector in selector_text.split(","):
                        selector = selector.strip()
                        if selector and not selector.startswith("@"):
                            selectors.append(selector)
            self._struck_selectors = selectors
        return self._struck_selectors

    def image_size(self, img: Tag) -> Tuple[int, int]:
        """Best-effort natural size of an image from its markup."""
        width = self._dimension(img, "width")
        height = self._dimension(img, "height")
        return width, height

    def _dimension(self, img: Tag, name: str) -> int:
        for attr in (name, f"data-{name}"):
            value = img.get(attr)
            if value:
                match = re.match(r"\s*(\d+)", str(value))
                if match:
                    return int(match.group(1))
        style = img.get("style")
        if style:
            match = re.search(_PX_RE.format(name), style, re.I)
            if match:
                return int(float(match.group(1)))
        return 0

    def resolve_url(self, src: Optional[str]) -> str:
        """Resolve a possibly relative URL against the document location."""
        if not src:
            return ""
        src = src.strip()
        if src.startswith("data:"):
            return src
        return urljoin(self.url, src) if self.url else src

    def image_source(self, element: Tag) -> str:
        """Return the absolute source URL an element points at, or ''."""
        for attr in ("src", "data-src", "data-old-hires"):
            value = element.get(attr)
            if value:
                return self.resolve_url(value)
        if element.name == "meta" and element.get("content"):
            return self.resolve_url(element["content"])
        if element.name == "link" and element.get("href"):
            return self.resolve_url(element["href"])
        return ""
