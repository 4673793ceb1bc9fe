import pytest

from lunara.errors import LunaraError
from lunara.ptx_cache import cache_dir, fnv1a_64_hex, load_ptx, store_ptx


def test_fnv_empty_is_offset_basis():
    assert fnv1a_64_hex("") == f"{1469598103934665603:016x}"


def test_fnv_known_value():
    assert fnv1a_64_hex("a") == "af63dc4c8601ec8c"


def test_fnv_format_and_determinism():
    key = fnv1a_64_hex("v1|fuse{2(0,1)->2;}")
    assert len(key) == 16
    assert set(key) <= set("0123456789abcdef")
    assert key == fnv1a_64_hex("v1|fuse{2(0,1)->2;}")
    assert key != fnv1a_64_hex("v1|fuse{3(0,1)->2;}")


def test_cache_dir_from_env(monkeypatch, tmp_path):
    monkeypatch.setenv("LUNARA_CACHE_DIR", str(tmp_path))
    assert cache_dir() == str(tmp_path)


def test_cache_dir_from_home(monkeypatch):
    monkeypatch.delenv("LUNARA_CACHE_DIR", raising=False)
    monkeypatch.setenv("HOME", "/home/someone")
    assert cache_dir() == "/home/someone/.cache/lunara"


def test_cache_dir_fallback(monkeypatch):
    monkeypatch.delenv("LUNARA_CACHE_DIR", raising=False)
    monkeypatch.delenv("HOME", raising=False)
    assert cache_dir() == ".lunara_cache"


def test_store_then_load_round_trip(monkeypatch, tmp_path):
    target = tmp_path / "nested" / "cache"
    monkeypatch.setenv("LUNARA_CACHE_DIR", str(target))
    key = fnv1a_64_hex("v1|sig")
    store_ptx(key, ".version 7.0\n.entry k()\n")
    assert load_ptx(key) == ".version 7.0\n.entry k()\n"
    assert (target / f"ptx_{key}.ptx").is_file()


def test_store_overwrites(monkeypatch, tmp_path):
    monkeypatch.setenv("LUNARA_CACHE_DIR", str(tmp_path))
    store_ptx("abc", "first")
    store_ptx("abc", "second")
    assert load_ptx("abc") == "second"


def test_load_miss(monkeypatch, tmp_path):
    monkeypatch.setenv("LUNARA_CACHE_DIR", str(tmp_path))
    with pytest.raises(LunaraError, match="cache: miss"):
        load_ptx("0000000000000000")


def test_store_fails_when_dir_is_a_file(monkeypatch, tmp_path):
    blocker = tmp_path / "blocker"
    blocker.write_text("x")
    monkeypatch.setenv("LUNARA_CACHE_DIR", str(blocker))
    with pytest.raises(LunaraError, match="cannot write ptx"):
        store_ptx("abc", "ptx")