# tests/test_registry.py
"""
Test the webhook registry.

Verifies whole-table replacement, all-or-nothing validation and that
duplicate rows are kept.
"""

import threading

import pytest

from formhooks.webhooks import ValidationError, WebhookMapping, WebhookRegistry
from formhooks.webhooks.models import normalize_form_id
from formhooks.webhooks.registry import validate_webhook_url


class TestReplace:
    """Tests for replace() and list()."""

    def test_empty_by_default(self, registry):
        """A new registry has no mappings."""
        assert registry.list() == []

    def test_replace_overwrites_whole_table(self, registry):
        """Rows not in the new table are gone."""
        registry.replace([
            {"form_id": 1, "webhook_url": "https://a.example/hook"},
            {"form_id": 2, "webhook_url": "https://b.example/hook"},
        ])
        registry.replace([{"form_id": 3, "webhook_url": "https://c.example/hook"}])

        assert registry.list() == [WebhookMapping(3, "https://c.example/hook")]

    def test_order_is_kept(self, registry):
        """list() returns rows in the order they were saved."""
        rows = [
            WebhookMapping(2, "https://b.example/hook"),
            WebhookMapping(1, "https://a.example/hook"),
        ]
        registry.replace(rows)

        assert registry.list() == rows

    def test_duplicates_are_kept(self, registry):
        """Identical rows are stored twice."""
        row = {"form_id": 7, "webhook_url": "https://a.example/hook"}
        registry.replace([row, row])

        assert len(registry.list()) == 2

    def test_replace_with_empty_clears(self, registry):
        """Saving an empty table removes every mapping."""
        registry.replace([{"form_id": 1, "webhook_url": "https://a.example/hook"}])
        registry.replace([])

        assert registry.list() == []

    def test_values_are_stripped(self, registry):
        """Surrounding whitespace is removed before saving."""
        saved = registry.replace([{"form_id": " 5 ", "webhook_url": " https://a.example/hook "}])

        assert saved == [WebhookMapping("5", "https://a.example/hook")]


class TestValidation:
    """Tests for rejected replacements."""

    def test_invalid_url_keeps_previous_state(self, registry):
        """One bad URL rejects the save and leaves the old table intact."""
        original = [
            WebhookMapping(1, "https://a.example/hook"),
            WebhookMapping(2, "https://b.example/hook"),
        ]
        registry.replace(original)

        with pytest.raises(ValidationError) as exc_info:
            registry.replace([
                {"form_id": 1, "webhook_url": "https://ok.example/hook"},
                {"form_id": 2, "webhook_url": "not-a-url"},
            ])

        assert registry.list() == original
        errors = exc_info.value.errors
        assert len(errors) == 1
        assert errors[0].index == 1
        assert errors[0].field == "webhook_url"

    def test_missing_form_id(self, registry):
        """Empty or missing form ids are reported."""
        with pytest.raises(ValidationError) as exc_info:
            registry.replace([
                {"form_id": "", "webhook_url": "https://a.example/hook"},
                {"webhook_url": "https://a.example/hook"},
                {"form_id": "   ", "webhook_url": "https://a.example/hook"},
            ])

        assert [(e.index, e.field) for e in exc_info.value.errors] == [
            (0, "form_id"),
            (1, "form_id"),
            (2, "form_id"),
        ]

    def test_all_errors_reported(self, registry):
        """Both fields of a bad row are reported, and other bad rows too."""
        with pytest.raises(ValidationError) as exc_info:
            registry.replace([
                {"form_id": None, "webhook_url": "ftp://a.example/file"},
                {"form_id": 1, "webhook_url": "https://fine.example/hook"},
                {"form_id": 2, "webhook_url": ""},
            ])

        assert [(e.index, e.field) for e in exc_info.value.errors] == [
            (0, "form_id"),
            (0, "webhook_url"),
            (2, "webhook_url"),
        ]

    def test_non_mapping_row(self, registry):
        """A row that is not an object is rejected."""
        with pytest.raises(ValidationError) as exc_info:
            registry.replace(["https://a.example/hook"])

        assert exc_info.value.errors[0].field == "mapping"

    def test_error_message_names_entry(self, registry):
        """The exception text points at the failing row."""
        with pytest.raises(ValidationError, match=r"\[0\] webhook_url"):
            registry.replace([{"form_id": 1, "webhook_url": "not-a-url"}])


class TestUrlValidation:
    """Tests for validate_webhook_url."""

    @pytest.mark.parametrize("url", [
        "https://hooks.example.com/abc",
        "http://localhost:8080/hook",
        "https://example.com:8443/path?x=1",
    ])
    def test_valid_urls(self, url):
        assert validate_webhook_url(url) is None

    @pytest.mark.parametrize("url", [
        "not-a-url",
        "",
        None,
        "mailto:someone@example.com",
        "https://",
        "http://example.com:99999/",
        "//example.com/hook",
    ])
    def test_invalid_urls(self, url):
        assert validate_webhook_url(url) is not None


class TestForForm:
    """Tests for form id matching."""

    def test_integer_normalized_match(self, registry):
        """String and integer form ids match each other."""
        registry.replace([
            {"form_id": "7", "webhook_url": "https://a.example/hook"},
            {"form_id": 7, "webhook_url": "https://b.example/hook"},
            {"form_id": 8, "webhook_url": "https://c.example/hook"},
        ])

        assert len(registry.for_form(7)) == 2
        assert len(registry.for_form("7")) == 2
        assert len(registry.for_form("9")) == 0

    @pytest.mark.parametrize("raw, expected", [
        (7, 7),
        ("7", 7),
        (" 7 ", 7),
        ("-3", -3),
        ("+4", 4),
        ("1_0", "1_0"),
        ("²", "²"),
        ("contact-form", "contact-form"),
        ("1e3", "1e3"),
    ])
    def test_normalize_form_id(self, raw, expected):
        """Only plain decimal digits are read as integers."""
        assert normalize_form_id(raw) == expected

    def test_underscored_id_is_not_another_form(self, registry):
        """A "1_0" mapping does not fire for form 10."""
        registry.replace([{"form_id": "1_0", "webhook_url": "https://a.example/hook"}])

        assert registry.for_form(10) == []
        assert len(registry.for_form("1_0")) == 1


class TestConcurrency:
    """Readers never see a half-written table."""

    def test_list_sees_old_or_new_table(self, registry):
        old = [{"form_id": 1, "webhook_url": f"https://old.example/{i}"} for i in range(50)]
        new = [{"form_id": 2, "webhook_url": f"https://new.example/{i}"} for i in range(50)]
        registry.replace(old)

        seen = []
        stop = threading.Event()

        def reader():
            while not stop.is_set():
                seen.append({m.form_id for m in registry.list()})

        threads = [threading.Thread(target=reader) for _ in range(4)]
        for t in threads:
            t.start()
        for _ in range(20):
            registry.replace(new)
            registry.replace(old)
        stop.set()
        for t in threads:
            t.join()

        assert all(ids in ({1}, {2}) for ids in seen)

    def test_separate_registries_share_store(self, store):
        """Two registry objects over one store see the same table."""
        WebhookRegistry(store).replace([{"form_id": 1, "webhook_url": "https://a.example/hook"}])

        assert len(WebhookRegistry(store).list()) == 1
