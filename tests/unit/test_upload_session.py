"""UploadSession 단위 테스트 (폼 단위 후보 수명)."""

from __future__ import annotations

import pytest

from catalog_client.ingestion.files import CandidateOrigin, RawFile
from catalog_client.ingestion.rules import IngestionConfig
from catalog_client.ingestion.session import UploadSession


def png(name: str) -> RawFile:
    return RawFile.from_bytes(name, b"\x89PNG" * 4, "image/png")


def test_session_starts_from_existing_references():
    session = UploadSession(existing=["https://cdn.example.com/a.jpg", "", "https://cdn.example.com/b.jpg"])

    assert len(session) == 2
    assert all(c.origin == CandidateOrigin.EXISTING for c in session.candidates)
    assert session.existing_references() == ["https://cdn.example.com/a.jpg", "https://cdn.example.com/b.jpg"]


def test_add_and_remove():
    session = UploadSession(IngestionConfig(max_files=3))
    session.add([png("a.png"), png("b.png")])

    removed = session.remove(0)

    assert removed.name == "a.png"
    assert [c.name for c in session.candidates] == ["b.png"]
    assert session.previews.revoked_count == 1


def test_close_revokes_all_previews_once():
    session = UploadSession(IngestionConfig(max_files=5), existing=["https://cdn.example.com/a.jpg"])
    session.add([png("a.png"), png("b.png")])

    session.close()
    session.close()

    assert session.closed
    assert session.previews.live_count == 0
    assert session.previews.revoked_count == 2


def test_context_manager_releases_on_exit():
    with UploadSession() as session:
        session.add([png("a.png")])
        previews = session.previews
    assert previews.live_count == 0


def test_closed_session_rejects_changes():
    session = UploadSession()
    session.close()
    with pytest.raises(RuntimeError):
        session.add([png("a.png")])


def test_set_existing_replaces_and_revokes():
    session = UploadSession()
    session.add([png("a.png")])

    session.set_existing(["https://cdn.example.com/saved.png"])

    assert session.previews.live_count == 0
    assert session.existing_references() == ["https://cdn.example.com/saved.png"]
    assert session.new_candidates() == []


def test_promote_uploaded_keeps_positions_and_revokes_previews():
    session = UploadSession(IngestionConfig(max_files=5), existing=["https://cdn.example.com/old.jpg"])
    session.add([png("a.png"), png("b.png")])

    session.promote_uploaded(["https://cdn.example.com/a.png", "https://cdn.example.com/b.png"])

    assert session.new_candidates() == []
    assert session.existing_references() == [
        "https://cdn.example.com/old.jpg",
        "https://cdn.example.com/a.png",
        "https://cdn.example.com/b.png",
    ]
    assert [c.sequence_index for c in session.candidates] == [0, 1, 2]
    assert session.previews.live_count == 0


def test_promote_uploaded_rejects_count_mismatch():
    session = UploadSession(IngestionConfig(max_files=5))
    session.add([png("a.png"), png("b.png")])

    with pytest.raises(ValueError):
        session.promote_uploaded(["https://cdn.example.com/a.png"])
    assert len(session.new_candidates()) == 2
