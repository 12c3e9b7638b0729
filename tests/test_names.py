"""Tests for relnet/names.py."""
from types import SimpleNamespace

from relnet.names import format_full_name, format_person_name


class TestFormatPersonName:
    def test_name_only(self):
        assert format_person_name("John") == "John"

    def test_surname(self):
        assert format_person_name("John", "Smith") == "John Smith"

    def test_nickname_only(self):
        assert format_person_name("Charles", None, "Charlie") == "Charles 'Charlie'"

    def test_all_parts(self):
        assert format_person_name("Charles", "Brown", "Charlie") == "Charles 'Charlie' Brown"

    def test_empty_strings_are_missing(self):
        assert format_person_name("John", "", "") == "John"

    def test_unicode(self):
        assert format_person_name("José", "García", "Pepe") == "José 'Pepe' García"


class TestFormatFullName:
    def test_object(self):
        person = SimpleNamespace(name="John", surname="Doe", nickname="Johnny")
        assert format_full_name(person) == "John 'Johnny' Doe"
