"""
Tests for the system_gateways.php parser and default gateway selection.
"""

import unittest

from pfsense_control.actions.gateways import select_default_gateway
from pfsense_control.exceptions import StructureNotFound, ValidationError
from pfsense_control.extraction.gateways import parse_gateways
from pfsense_control.models import DefaultGatewaySelection, IpVersion

from html_pages import PAGE_CSRF, gateways_page


class TestParseGateways(unittest.TestCase):
    def setUp(self):
        self.snapshot = parse_gateways(gateways_page())

    def test_table_entries(self):
        names = [e.name for e in self.snapshot.entries]
        self.assertEqual(names, ["WAN_DHCP", "WAN2_DHCP", "WAN_DHCP6"])
        wan2 = self.snapshot.entries[1]
        self.assertEqual(wan2.interface, "WAN2")
        self.assertEqual(wan2.gateway, "198.51.100.1")
        self.assertEqual(wan2.monitor, "198.51.100.1")
        self.assertEqual(wan2.description, "Backup uplink")

    def test_short_rows_skipped(self):
        self.assertEqual(len(self.snapshot.entries), 3)

    def test_selections(self):
        self.assertEqual(self.snapshot.ipv4.selected.option_id, "WAN_DHCP")
        self.assertEqual(self.snapshot.ipv6.selected.option_id, DefaultGatewaySelection.AUTOMATIC)
        self.assertEqual(
            [o.option_id for o in self.snapshot.ipv4.options],
            ["", "-", "WAN_DHCP", "WAN2_DHCP"],
        )
        self.assertEqual(self.snapshot.ipv4.get("-").label, "None")

    def test_save_form_tokens(self):
        self.assertEqual(self.snapshot.save_form.csrf_token, PAGE_CSRF)
        self.assertFalse(self.snapshot.has_pending_changes)
        self.assertIsNone(self.snapshot.apply_form)

    def test_pending_changes(self):
        snapshot = parse_gateways(gateways_page(pending=True))
        self.assertTrue(snapshot.has_pending_changes)
        self.assertEqual(snapshot.apply_form.csrf_token, PAGE_CSRF)

    def test_tokens_not_in_repr(self):
        self.assertNotIn(PAGE_CSRF, repr(self.snapshot))

    def test_missing_table(self):
        html = gateways_page().replace('id="gateways"', 'id="other"')
        with self.assertRaises(StructureNotFound) as ctx:
            parse_gateways(html)
        self.assertEqual(ctx.exception.resource, "gateways")

    def test_missing_selector(self):
        html = gateways_page().replace('name="defaultgw6"', 'name="something"')
        with self.assertRaises(StructureNotFound):
            parse_gateways(html)

    def test_missing_csrf(self):
        html = gateways_page().replace('name="__csrf_magic"', 'name="token"')
        with self.assertRaises(StructureNotFound):
            parse_gateways(html)

    def test_unrelated_page(self):
        with self.assertRaises(StructureNotFound):
            parse_gateways("<html><body><p>Nothing here</p></body></html>")


class TestSelectDefaultGateway(unittest.TestCase):
    def setUp(self):
        self.snapshot = parse_gateways(gateways_page())

    def test_select_returns_new_snapshot(self):
        changed = select_default_gateway(self.snapshot, IpVersion.V4, "WAN2_DHCP")
        self.assertEqual(changed.ipv4.selected.option_id, "WAN2_DHCP")
        self.assertEqual(self.snapshot.ipv4.selected.option_id, "WAN_DHCP")
        self.assertEqual(changed.ipv6, self.snapshot.ipv6)

    def test_select_by_int_version(self):
        changed = select_default_gateway(self.snapshot, 6, "-")
        self.assertEqual(changed.ipv6.selected.option_id, DefaultGatewaySelection.NONE)

    def test_reselecting_current_is_noop(self):
        same = select_default_gateway(self.snapshot, 4, "WAN_DHCP")
        self.assertEqual(same, self.snapshot)

    def test_unknown_option(self):
        with self.assertRaises(ValidationError):
            select_default_gateway(self.snapshot, 4, "WAN3_DHCP")

    def test_option_from_other_family(self):
        with self.assertRaises(ValidationError):
            select_default_gateway(self.snapshot, 6, "WAN2_DHCP")

    def test_unknown_ip_version(self):
        with self.assertRaises(ValidationError):
            select_default_gateway(self.snapshot, 5, "WAN_DHCP")


if __name__ == "__main__":
    unittest.main()
