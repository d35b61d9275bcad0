#!/usr/bin/env python
"""Treadmill address cache tests."""

from termwatch.cache import AddressCache, user_cache_dir


def test_user_cache_dir_honours_xdg(tmp_path, monkeypatch):
    monkeypatch.setenv("XDG_CACHE_HOME", str(tmp_path))
    assert user_cache_dir() == tmp_path / "termwatch"


def test_address_round_trip(tmp_path):
    cache = AddressCache(tmp_path / "termwatch")

    assert cache.load() is None
    cache.save("AA:BB:CC:DD:EE:FF")
    assert cache.load() == "AA:BB:CC:DD:EE:FF"
    assert (tmp_path / "termwatch" / "device_address.json").exists()

    cache.clear()
    assert cache.load() is None
    cache.clear()


def test_corrupt_cache_file(tmp_path):
    cache = AddressCache(tmp_path)
    cache.path.write_text("{not json")
    assert cache.load() is None
