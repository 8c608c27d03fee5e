"""
HTML tree helpers shared by the resource parsers.

pfSense renders its status pages with Bootstrap markup: resources live in
``<div class="panel">`` containers titled by ``<h2 class="panel-title">``,
labelled values are ``<dt>label</dt><dd>value</dd>`` pairs, and every POST
form carries a ``__csrf_magic`` hidden input injected by csrf-magic.
"""

from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Any

from bs4 import BeautifulSoup, Tag

from ..exceptions import StructureNotFound, ValueFormatError
from ..logging_setup import log
from ..models import HiddenForm

_BS4_PARSER = "lxml"


def parse_document(html: str) -> BeautifulSoup:
    """Parse *html* into a navigable tree (lxml backend)."""
    return BeautifulSoup(html or "", _BS4_PARSER)


def text_of(node: Tag | None) -> str:
    """Trimmed text content of *node* with internal whitespace collapsed."""
    if node is None:
        return ""
    return " ".join(node.get_text(" ", strip=True).split())


def require(node: Tag | None, resource: str, element: str) -> Tag:
    if node is None:
        raise StructureNotFound(resource, element)
    return node


# ---------------------------------------------------------------------------
# Panels and tables
# ---------------------------------------------------------------------------

def panel_title(panel: Tag) -> str | None:
    title = panel.select_one(".panel-heading .panel-title") or panel.find("h2")
    return text_of(title) if title is not None else None


def panels(soup: BeautifulSoup) -> list[Tag]:
    return soup.select("div.panel")


def find_panel_by_title(soup: BeautifulSoup, predicate: Callable[[str], bool]) -> Tag | None:
    return next((p for p in panels(soup) if predicate(panel_title(p) or "")), None)


def striped_table(container: Tag) -> Tag | None:
    """The first ``table.table-striped`` inside *container*."""
    return container.select_one("table.table-striped")


def body_rows(table: Tag) -> list[Tag]:
    """``<tr>`` rows of the table's ``<tbody>`` (empty when there is none)."""
    tbody = table.find("tbody")
    if tbody is None:
        return []
    return tbody.find_all("tr")


def row_cells(row: Tag) -> list[Tag]:
    """Direct ``<td>`` children of *row*; header cells are not data."""
    return row.find_all("td", recursive=False)


# ---------------------------------------------------------------------------
# Forms
# ---------------------------------------------------------------------------

def hidden_form(form: Tag) -> HiddenForm:
    """Capture the hidden inputs a browser would resubmit with *form*."""
    fields = tuple(
        (inp["name"], inp.get("value", ""))
        for inp in form.find_all("input", attrs={"type": "hidden"})
        if inp.get("name")
    )
    return HiddenForm(fields)


def input_value(form: Tag, name: str) -> str | None:
    inp = form.find("input", attrs={"name": name})
    if inp is None:
        return None
    return inp.get("value", "")


# ---------------------------------------------------------------------------
# Labelled <dt>/<dd> fields
# ---------------------------------------------------------------------------

def find_label(container: Tag, label: str) -> Tag | None:
    """The ``<dt>`` whose text equals *label*."""
    for dt in container.find_all("dt"):
        if text_of(dt) == label:
            return dt
    return None


def value_after(dt: Tag | None) -> Tag | None:
    """The ``<dd>`` immediately following *dt*, if that is what follows."""
    if dt is None:
        return None
    nxt = dt.find_next_sibling()
    return nxt if nxt is not None and nxt.name == "dd" else None


def label_chain(container: Tag, label: str) -> list[str]:
    """
    Values of a labelled list: the ``<dd>`` after *label*, then every
    ``<dt></dt><dd>`` continuation pair (empty label) that follows it.
    """
    dd = value_after(find_label(container, label))
    values: list[str] = []
    while dd is not None:
        values.append(text_of(dd))
        dt = dd.find_next_sibling()
        if dt is None or dt.name != "dt" or text_of(dt):
            break
        dd = value_after(dt)
    return values


@dataclass(frozen=True)
class FieldRule:
    """
    Declarative extraction of one labelled value.

    ``convert`` turns the text into the model value; for optional fields a
    conversion failure degrades to None, for required ones it propagates.
    """

    attr: str
    label: str
    required: bool = False
    convert: Callable[[str], Any] | None = None


def extract_fields(container: Tag, rules: Iterable[FieldRule], resource: str) -> dict[str, Any]:
    """Evaluate *rules* against *container* and return ``{attr: value}``."""
    values: dict[str, Any] = {}
    for rule in rules:
        dd = value_after(find_label(container, rule.label))
        if dd is None:
            if rule.required:
                raise StructureNotFound(resource, f"<dt>{rule.label}</dt><dd>")
            values[rule.attr] = None
            continue
        raw = text_of(dd)
        if rule.convert is None:
            values[rule.attr] = raw
            continue
        try:
            values[rule.attr] = rule.convert(raw)
        except ValueError as exc:
            if rule.required:
                raise ValueFormatError(
                    f"Cannot convert {rule.label!r}", resource=resource,
                    field=rule.label, raw_value=raw,
                ) from exc
            log.debug("%s: ignoring unparseable %r value %r", resource, rule.label, raw)
            values[rule.attr] = None
    return values
