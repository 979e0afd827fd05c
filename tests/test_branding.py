from datetime import datetime

import pytest

from branding import BrandingStore, validate_logo_upload
from errors import TransientIOError, ValidationError
from schemas import LogoHistoryEntry


def at(day):
    return datetime(2025, 1, day, 12, 0)


@pytest.fixture
def store(fake_db):
    return BrandingStore.from_db(fake_db)


def test_defaults_when_record_missing(store):
    config = store.get_config()
    assert config.whatsapp == "+918217469646"
    assert config.logo_url == ""
    assert config.logo_history == []


def test_defaults_when_store_unreadable(store):
    store.replace_logo("https://cdn/a.png", "a@siraq.test", at(1))
    store.collection.fail_reads = True
    assert store.get_config().logo_url == ""


def test_first_upload_does_not_archive_empty_logo(store):
    config = store.replace_logo("https://cdn/a.png", "a@siraq.test", at(1))
    assert config.logo_url == "https://cdn/a.png"
    assert config.logo_history == []


def test_replace_archives_previous_logo(store):
    store.replace_logo("https://cdn/a.png", "a@siraq.test", at(1))
    config = store.replace_logo("https://cdn/b.png", "b@siraq.test", at(2))
    assert config.logo_url == "https://cdn/b.png"
    assert config.logo_history == [LogoHistoryEntry(url="https://cdn/a.png", uploaded_by="a@siraq.test", uploaded_at=at(1))]


def test_history_is_capped_at_three(store):
    for day, name in enumerate("abcd", start=1):
        store.replace_logo(f"https://cdn/{name}.png", "admin", at(day))
    assert [h.url for h in store.get_config().logo_history] == [
        "https://cdn/c.png", "https://cdn/b.png", "https://cdn/a.png",
    ]

    config = store.replace_logo("https://cdn/e.png", "admin", at(5))
    assert [h.url for h in config.logo_history] == [
        "https://cdn/d.png", "https://cdn/c.png", "https://cdn/b.png",
    ]


def test_remove_logo(store):
    store.replace_logo("https://cdn/a.png", "a@siraq.test", at(1))
    config = store.remove_logo()
    assert config.logo_url == ""
    assert config.logo_uploaded_by == ""
    assert config.logo_uploaded_at is None
    assert [h.url for h in config.logo_history] == ["https://cdn/a.png"]

    # nothing active, nothing new archived
    assert len(store.remove_logo().logo_history) == 1


def test_replace_after_remove_does_not_archive_empty_logo(store):
    store.replace_logo("https://cdn/a.png", "a@siraq.test", at(1))
    store.replace_logo("https://cdn/b.png", "b@siraq.test", at(2))
    assert [h.url for h in store.remove_logo().logo_history] == ["https://cdn/b.png", "https://cdn/a.png"]

    config = store.replace_logo("https://cdn/c.png", "c@siraq.test", at(3))
    assert config.logo_url == "https://cdn/c.png"
    assert [h.url for h in config.logo_history] == ["https://cdn/b.png", "https://cdn/a.png"]


def test_revert_to_history_entry(store):
    store.replace_logo("https://cdn/a.png", "a@siraq.test", at(1))
    store.replace_logo("https://cdn/b.png", "b@siraq.test", at(2))
    entry = store.get_config().logo_history[0]

    store.revert_to(entry)
    config = store.get_config()
    assert config.logo_url == "https://cdn/a.png"
    assert config.logo_uploaded_by == "a@siraq.test"
    assert [h.url for h in config.logo_history] == ["https://cdn/b.png"]


def test_revert_to_entry_missing_from_history_still_succeeds(store):
    store.replace_logo("https://cdn/a.png", "a@siraq.test", at(1))
    config = store.revert_to(LogoHistoryEntry(url="https://cdn/gone.png", uploaded_by="x"))
    assert config.logo_url == "https://cdn/gone.png"
    assert [h.url for h in config.logo_history] == ["https://cdn/a.png"]


def test_failed_write_leaves_snapshot_unchanged(store):
    store.replace_logo("https://cdn/a.png", "a@siraq.test", at(1))
    before = store.get_config()
    store.collection.fail_writes = True
    with pytest.raises(TransientIOError):
        store.replace_logo("https://cdn/b.png", "b@siraq.test", at(2))
    assert store.get_config() == before


def test_mutations_do_not_fall_back_to_defaults_on_read_error(store):
    store.replace_logo("https://cdn/a.png", "a@siraq.test", at(1))
    store.collection.fail_reads = True
    with pytest.raises(TransientIOError):
        store.remove_logo()


def test_contact_number_update_keeps_logo(store):
    store.replace_logo("https://cdn/a.png", "a@siraq.test", at(1))
    config = store.update_contact_number("+91 90000 00000")
    assert config.whatsapp == "+91 90000 00000"
    assert store.get_config().logo_url == "https://cdn/a.png"


@pytest.mark.parametrize("content_type,size", [
    ("image/gif", 1000),
    ("application/pdf", 10),
    ("image/png", 2 * 1024 * 1024 + 1),
])
def test_logo_upload_validation_rejects(content_type, size):
    with pytest.raises(ValidationError):
        validate_logo_upload(content_type, size)


@pytest.mark.parametrize("content_type", ["image/svg+xml", "image/png", "image/jpeg", "image/webp"])
def test_logo_upload_validation_accepts(content_type):
    validate_logo_upload(content_type, 2 * 1024 * 1024)
