"""
Tests for the shared HTML tree helpers.
"""

import unittest

from pfsense_control.exceptions import StructureNotFound, ValueFormatError
from pfsense_control.extraction.html_parser import (
    FieldRule,
    extract_fields,
    find_label,
    hidden_form,
    label_chain,
    parse_document,
    value_after,
)

DL = """
<dl>
  <dt>Status</dt><dd> up </dd>
  <dt>MTU</dt><dd>1500</dd>
  <dt>Broken</dt><dd>abc</dd>
  <dt>Orphan</dt><dt>Next</dt><dd>x</dd>
  <dt>List</dt><dd>a</dd><dt></dt><dd>b</dd><dt></dt><dd>c</dd><dt>After</dt><dd>z</dd>
</dl>
"""


class TestLabelledValues(unittest.TestCase):
    def setUp(self):
        self.soup = parse_document(DL)

    def test_value_after_requires_adjacent_dd(self):
        self.assertIsNone(value_after(find_label(self.soup, "Orphan")))
        self.assertIsNone(value_after(None))

    def test_label_chain(self):
        self.assertEqual(label_chain(self.soup, "List"), ["a", "b", "c"])
        self.assertEqual(label_chain(self.soup, "Missing"), [])

    def test_extract_fields(self):
        rules = (
            FieldRule("status", "Status", required=True),
            FieldRule("mtu", "MTU", convert=int),
            FieldRule("broken", "Broken", convert=int),
            FieldRule("missing", "Missing"),
        )
        self.assertEqual(
            extract_fields(self.soup, rules, "test"),
            {"status": "up", "mtu": 1500, "broken": None, "missing": None},
        )

    def test_required_missing(self):
        with self.assertRaises(StructureNotFound) as ctx:
            extract_fields(self.soup, (FieldRule("x", "Missing", required=True),), "test")
        self.assertEqual(ctx.exception.resource, "test")

    def test_required_unconvertible(self):
        with self.assertRaises(ValueFormatError) as ctx:
            extract_fields(self.soup, (FieldRule("x", "Broken", required=True, convert=int),), "test")
        self.assertEqual(ctx.exception.field, "Broken")
        self.assertEqual(ctx.exception.raw_value, "abc")


class TestHiddenForm(unittest.TestCase):
    def test_hidden_inputs_in_order(self):
        soup = parse_document("""
        <form method="post">
          <input type="hidden" name="__csrf_magic" value="sid:a,1" />
          <input type="text" name="visible" value="no" />
          <input type="hidden" name="id" value="3" />
          <input type="hidden" value="nameless" />
        </form>""")
        form = hidden_form(soup.find("form"))
        self.assertEqual(form.fields, (("__csrf_magic", "sid:a,1"), ("id", "3")))
        self.assertEqual(form.csrf_token, "sid:a,1")
        self.assertNotIn("sid:a,1", repr(form))


if __name__ == "__main__":
    unittest.main()
