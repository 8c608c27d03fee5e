"""Default gateway selection, save and apply."""

from dataclasses import replace

from ..auth.session import SessionManager
from ..config import APPLY_SUBMIT, DEFAULT_GW_FIELDS, GATEWAYS_PATH, SAVE_SUBMIT
from ..exceptions import ProtocolViolation, ValidationError
from ..extraction.gateways import parse_gateways
from ..logging_setup import log
from ..models import GatewaySet, IpVersion
from .base import refreshed_snapshot, submit_form


def fetch_gateways(manager: SessionManager) -> GatewaySet:
    return parse_gateways(manager.get_page(GATEWAYS_PATH))


def select_default_gateway(snapshot: GatewaySet, ip_version: IpVersion | int, option_id: str) -> GatewaySet:
    """
    Return a copy of *snapshot* with *option_id* selected as the default
    gateway for *ip_version*.  Nothing is sent to the appliance.

    Raises ValidationError if the option is not offered by that selector.
    """
    try:
        version = IpVersion(ip_version)
    except ValueError:
        raise ValidationError(f"Unknown IP version {ip_version!r}; expected 4 or 6") from None
    if version is IpVersion.V4:
        return replace(snapshot, ipv4=snapshot.ipv4.select(option_id))
    return replace(snapshot, ipv6=snapshot.ipv6.select(option_id))


def _selected_id(snapshot: GatewaySet, version: IpVersion) -> str | None:
    selection = snapshot.selection(version)
    return selection.selected.option_id if selection.selected is not None else None


def _check_selections(snapshot: GatewaySet) -> None:
    """Every selected gateway must be one of its own selector's options."""
    for version in IpVersion:
        selection = snapshot.selection(version)
        selected = selection.selected
        if selected is not None and selection.get(selected.option_id) is None:
            raise ValidationError(
                f"IPv{version.value} default gateway {selected.option_id!r} is not an option of its selector"
            )


def save_default_gateways(
    manager: SessionManager,
    snapshot: GatewaySet,
    apply_immediately: bool = False,
) -> GatewaySet:
    """
    Submit the default gateway form with the selections held by *snapshot*.

    The appliance stores the change and marks routing dirty; with
    *apply_immediately* the pending change is applied right away.
    Returns the freshly fetched gateways snapshot.
    """
    _check_selections(snapshot)
    data = list(snapshot.save_form.fields)
    for version in IpVersion:
        option_id = _selected_id(snapshot, version)
        if option_id is not None:
            data.append((DEFAULT_GW_FIELDS[version.value], option_id))
    data.append(SAVE_SUBMIT)

    log.info(
        "Saving default gateways: IPv4=%r IPv6=%r",
        _selected_id(snapshot, IpVersion.V4), _selected_id(snapshot, IpVersion.V6),
    )
    response = submit_form(manager, GATEWAYS_PATH, data)
    refreshed = refreshed_snapshot(manager, response, GATEWAYS_PATH, parse_gateways, "save default gateways")

    if not apply_immediately:
        return refreshed
    if not refreshed.has_pending_changes:
        raise ProtocolViolation("save default gateways: no 'Apply Changes' form after saving")
    return apply_gateway_changes(manager, refreshed)


def apply_gateway_changes(manager: SessionManager, snapshot: GatewaySet) -> GatewaySet:
    """Apply pending routing changes using the snapshot's apply form."""
    if snapshot.apply_form is None:
        raise ValidationError("No pending gateway changes to apply")
    log.info("Applying pending gateway changes")
    data = list(snapshot.apply_form.fields) + [APPLY_SUBMIT]
    response = submit_form(manager, GATEWAYS_PATH, data)
    return refreshed_snapshot(manager, response, GATEWAYS_PATH, parse_gateways, "apply gateway changes")
