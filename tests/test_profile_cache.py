try:
    from . import _bootstrap  # noqa: F401
except Exception:  # pragma: no cover - fallback for direct execution
    import _bootstrap  # type: ignore # noqa: F401

from setoran_auth.services.profile_cache import ProfilePhotoCache
from setoran_auth.services.session_notice import SessionNotice


def test_clear_removes_cached_photo(tmp_path) -> None:
    cache = ProfilePhotoCache(str(tmp_path / "profile"))
    cache.path.parent.mkdir(parents=True)
    cache.path.write_bytes(b"\x89PNG")

    cache.clear()
    assert not cache.path.exists()
    cache.clear()


def test_notice_persists_until_resolved() -> None:
    notice = SessionNotice()
    assert notice.message is None

    notice.show_expired()
    notice.show_expired()
    assert notice.message == SessionNotice.EXPIRED_MESSAGE

    notice.resolve()
    assert notice.message is None
