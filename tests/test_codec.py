"""Tests for the persistence codec."""

import json

import pytest

from docsgpt.constants import PARSE_INTERRUPTED_ERROR, STORAGE_KEYS
from docsgpt.state import (
    ChatMessage,
    ChatRole,
    Document,
    DocumentMetadata,
    DocumentState,
    MemorySubstrate,
    PersistenceCodec,
    Session,
    SessionState,
    UploadedFile,
)


def make_document(doc_id="d1", state=DocumentState.UPLOADED, artifact_id=None, parse_error=None):
    return Document(
        id=doc_id,
        state=state,
        metadata=DocumentMetadata(name="a.txt", size=12, type="text/plain", uploaded_at=1000),
        file=UploadedFile("a.txt", "text/plain", b"hello world!"),
        artifact_id=artifact_id,
        parse_error=parse_error,
    )


def store_documents(substrate, records, version=2):
    """Write raw document records straight into the substrate."""
    payload = {
        "version": version,
        "documents": [[r["id"], r] for r in records],
        "timestamp": 1,
    }
    substrate.set(STORAGE_KEYS["documents"], json.dumps(payload))


def raw_record(doc_id="d1", state="UPLOADED", artifact_id=None, parse_error=None):
    return {
        "id": doc_id,
        "state": state,
        "metadata": {"name": "a.txt", "size": 12, "type": "text/plain", "uploadedAt": 1000},
        "artifactId": artifact_id,
        "parseError": parse_error,
    }


class TestDocumentPersistence:
    """Tests for saving and loading documents."""

    def test_round_trip_drops_file_handle(self, codec):
        """Test canonical fields survive a round trip and the file does not."""
        document = make_document(state=DocumentState.PARSED, artifact_id="a1")

        assert codec.save_documents({"d1": document}) is True
        loaded = codec.load_documents()

        assert len(loaded) == 1
        restored = loaded[0]
        assert restored.id == "d1"
        assert restored.state is DocumentState.PARSED
        assert restored.artifact_id == "a1"
        assert restored.metadata == document.metadata
        assert restored.file is None

    def test_saved_record_uses_allow_list(self, codec, substrate):
        """Test only canonical fields are written."""
        codec.save_documents({"d1": make_document()})

        data = json.loads(substrate.get(STORAGE_KEYS["documents"]))
        assert data["version"] == 2
        assert "timestamp" in data
        _, record = data["documents"][0]
        assert set(record) == {"id", "state", "metadata", "artifactId", "parseError"}
        assert set(record["metadata"]) == {"name", "size", "type", "uploadedAt"}

    def test_parsed_without_artifact_downgrades_to_uploaded(self, codec, substrate):
        """Test a PARSED claim without an artifact id is not trusted."""
        store_documents(substrate, [raw_record(state="PARSED", artifact_id=None)])

        (document,) = codec.load_documents()

        assert document.state is DocumentState.UPLOADED
        assert document.artifact_id is None

    def test_parsing_becomes_parse_failed(self, codec):
        """Test a document saved mid-parse comes back as PARSE_FAILED."""
        codec.save_documents({"d1": make_document(state=DocumentState.PARSING)})

        (document,) = codec.load_documents()

        assert document.state is DocumentState.PARSE_FAILED
        assert document.parse_error == PARSE_INTERRUPTED_ERROR

    def test_parse_error_dropped_outside_parse_failed(self, codec, substrate):
        """Test a stray parseError is discarded on non-failed documents."""
        store_documents(
            substrate, [raw_record(state="PARSED", artifact_id="a1", parse_error="old failure")]
        )

        (document,) = codec.load_documents()

        assert document.state is DocumentState.PARSED
        assert document.parse_error is None

    def test_parse_failed_keeps_error(self, codec, substrate):
        store_documents(substrate, [raw_record(state="PARSE_FAILED", parse_error="Bad file")])

        (document,) = codec.load_documents()

        assert document.parse_error == "Bad file"

    def test_invalid_records_are_dropped(self, codec, substrate):
        """Test malformed records are skipped while valid ones load."""
        bad_state = raw_record("d2", state="EXPLODED")
        no_metadata = raw_record("d3")
        del no_metadata["metadata"]
        store_documents(substrate, [raw_record("d1"), bad_state, no_metadata])

        loaded = codec.load_documents()

        assert [d.id for d in loaded] == ["d1"]

    def test_nothing_stored_returns_none(self, codec):
        assert codec.load_documents() is None

    def test_malformed_json_returns_none(self, codec, substrate):
        substrate.set(STORAGE_KEYS["documents"], "{not json")

        assert codec.load_documents() is None

    @pytest.mark.parametrize("version", [None, 1])
    def test_outdated_version_is_cleared(self, codec, substrate, version):
        """Test storage from an older schema is removed, not migrated."""
        store_documents(substrate, [raw_record()], version=version)

        assert codec.load_documents() is None
        assert substrate.get(STORAGE_KEYS["documents"]) is None


class TestSessionPersistence:
    """Tests for saving and loading sessions."""

    def test_round_trip(self, codec):
        session = Session(
            id="s1",
            name="Research",
            state=SessionState.ACTIVE,
            created_at=2000,
            document_ids=["d1", "d2"],
            active_document_id="d2",
        )

        codec.save_sessions({"s1": session}, "s1")
        loaded = codec.load_sessions()

        assert loaded.active_session_id == "s1"
        assert loaded.sessions == [session]

    def test_active_document_outside_session_is_cleared(self, codec, substrate):
        record = {
            "id": "s1",
            "name": "Research",
            "state": "ACTIVE",
            "documentIds": ["d1", "d1"],
            "activeDocumentId": "d9",
            "createdAt": 2000,
        }
        payload = {"version": 2, "sessions": [["s1", record]], "activeSessionId": "s1"}
        substrate.set(STORAGE_KEYS["sessions"], json.dumps(payload))

        (session,) = codec.load_sessions().sessions

        assert session.document_ids == ["d1"]
        assert session.active_document_id is None

    def test_unknown_active_session_loads_as_none(self, codec):
        session = Session(id="s1", name="A", state=SessionState.ACTIVE, created_at=1)

        codec.save_sessions({"s1": session}, "missing")

        assert codec.load_sessions().active_session_id is None

    @pytest.mark.parametrize("active", [["s1"], {"id": "s1"}, 7])
    def test_malformed_active_session_loads_as_none(self, codec, substrate, active):
        """Test a non-string activeSessionId is discarded with the sessions kept."""
        session = Session(id="s1", name="A", state=SessionState.ACTIVE, created_at=1)
        codec.save_sessions({"s1": session}, "s1")
        payload = json.loads(substrate.get(STORAGE_KEYS["sessions"]))
        payload["activeSessionId"] = active
        substrate.set(STORAGE_KEYS["sessions"], json.dumps(payload))

        loaded = codec.load_sessions()

        assert loaded.active_session_id is None
        assert [s.id for s in loaded.sessions] == ["s1"]


class TestMessagePersistence:
    """Tests for saving and loading chat logs."""

    def test_round_trip(self, codec):
        messages = {
            "s1": [
                ChatMessage(id="m1", role=ChatRole.USER, content="hi", created_at=1),
                ChatMessage(
                    id="m2",
                    role=ChatRole.ASSISTANT,
                    content="hello",
                    created_at=2,
                    evidence={"page": 1},
                ),
            ]
        }

        codec.save_messages(messages)

        assert codec.load_messages() == messages

    def test_invalid_message_is_dropped(self, codec, substrate):
        payload = {
            "version": 2,
            "sessionMessages": [
                [
                    "s1",
                    [
                        {"id": "m1", "role": "user", "content": "hi", "createdAt": 1},
                        {"id": "m2", "role": "robot", "content": "?", "createdAt": 2},
                    ],
                ]
            ],
        }
        substrate.set(STORAGE_KEYS["messages"], json.dumps(payload))

        loaded = codec.load_messages()

        assert [m.id for m in loaded["s1"]] == ["m1"]


class TestFailuresAndClearing:
    """Tests for quota failures and clearing."""

    def test_quota_exceeded_returns_false(self):
        """Test a substrate write failure is reported, not raised."""
        codec = PersistenceCodec(MemorySubstrate(quota_bytes=10))

        assert codec.save_documents({"d1": make_document()}) is False
        assert codec.load_documents() is None

    def test_family_clears_keep_config(self, codec):
        codec.save_config({"service": "gemini"})
        codec.save_documents({"d1": make_document()})

        codec.clear_sessions()
        codec.clear_documents()
        codec.clear_messages()

        assert codec.load_documents() is None
        assert codec.load_config() == {"service": "gemini"}

    def test_clear_all_removes_config(self, codec, substrate):
        codec.save_config({"service": "gemini"})
        codec.save_documents({"d1": make_document()})

        codec.clear_all()

        assert codec.load_config() is None
        assert substrate.keys() == []
