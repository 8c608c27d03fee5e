"""
pfsense_control.extraction.gateways
===================================
Parser for ``system_gateways.php``.

The page holds one ``<form method="post">`` with:

* ``<table id="gateways">`` – one row per gateway; cells are
  [select, icons, Name, Default, Interface, Gateway, Monitor IP,
  Description, Actions]
* ``<select name="defaultgw4">`` / ``<select name="defaultgw6">`` – the
  default gateway selectors, with ``""`` (Automatic) and ``"-"`` (None)
  sentinel options
* the ``__csrf_magic`` hidden input and the ``save`` button

When configuration changes are pending, an "apply changes" box with its
own form and ``apply`` button is rendered above it.
"""

from ..config import APPLY_SUBMIT, CSRF_FIELD, DEFAULT_GW_FIELDS, GATEWAYS_TABLE_ID
from ..exceptions import StructureNotFound
from ..logging_setup import log
from ..models import DefaultGatewaySelection, GatewayOption, GatewaySet, GatewayTableEntry
from .html_parser import body_rows, hidden_form, parse_document, require, row_cells, text_of

RESOURCE = "gateways"

# Cell positions within a gateways table row
_NAME, _INTERFACE, _GATEWAY, _MONITOR, _DESCRIPTION = 2, 4, 5, 6, 7


def _parse_table(soup) -> tuple[GatewayTableEntry, ...]:
    table = require(soup.find("table", id=GATEWAYS_TABLE_ID), RESOURCE, f"table#{GATEWAYS_TABLE_ID}")
    require(table.find("tbody"), RESOURCE, f"table#{GATEWAYS_TABLE_ID} > tbody")

    entries = []
    for row in body_rows(table):
        cells = row_cells(row)
        if len(cells) <= _DESCRIPTION:
            log.debug("%s: skipping row with %d cells", RESOURCE, len(cells))
            continue
        entries.append(GatewayTableEntry(
            name=text_of(cells[_NAME]),
            interface=text_of(cells[_INTERFACE]),
            gateway=text_of(cells[_GATEWAY]),
            monitor=text_of(cells[_MONITOR]),
            description=text_of(cells[_DESCRIPTION]),
        ))
    return tuple(entries)


def _parse_selection(select) -> DefaultGatewaySelection:
    options = []
    selected = None
    for opt in select.find_all("option"):
        option = GatewayOption(option_id=opt.get("value", ""), label=text_of(opt))
        options.append(option)
        if opt.has_attr("selected"):
            selected = option
    # A browser submits the first option when none is marked selected
    if selected is None and options:
        selected = options[0]
    return DefaultGatewaySelection(options=tuple(options), selected=selected)


def parse_gateways(html: str) -> GatewaySet:
    """Parse ``system_gateways.php`` into a GatewaySet snapshot."""
    soup = parse_document(html)
    entries = _parse_table(soup)

    selects = {}
    for version, field_name in DEFAULT_GW_FIELDS.items():
        selects[version] = require(
            soup.find("select", attrs={"name": field_name}), RESOURCE, f"select[name={field_name}]"
        )

    save_form_el = require(selects[4].find_parent("form"), RESOURCE, "default gateway form")
    save_form = hidden_form(save_form_el)
    if save_form.csrf_token is None:
        raise StructureNotFound(RESOURCE, f"default gateway form input[name={CSRF_FIELD}]")

    apply_form = None
    apply_button = soup.find(["button", "input"], attrs={"name": APPLY_SUBMIT[0]})
    if apply_button is not None:
        apply_form_el = apply_button.find_parent("form")
        if apply_form_el is not None:
            apply_form = hidden_form(apply_form_el)
            if apply_form.csrf_token is None:
                raise StructureNotFound(RESOURCE, f"apply changes form input[name={CSRF_FIELD}]")

    snapshot = GatewaySet(
        entries=entries,
        ipv4=_parse_selection(selects[4]),
        ipv6=_parse_selection(selects[6]),
        save_form=save_form,
        apply_form=apply_form,
    )
    log.debug(
        "%s: %d gateway(s), default v4=%r v6=%r, pending changes=%s",
        RESOURCE, len(entries),
        snapshot.ipv4.selected and snapshot.ipv4.selected.option_id,
        snapshot.ipv6.selected and snapshot.ipv6.selected.option_id,
        snapshot.has_pending_changes,
    )
    return snapshot
