import json
import math

import pytest
from a2a.types import Message, Part, Role, TextPart

from aion.taskstore.exceptions import DeserializationError, SerializationError
from aion.taskstore.serialization import from_json, model_to_json, to_json


class TestToJson:
    """Tests for to_json and model_to_json."""

    def test_none_stays_none(self):
        assert to_json(None) is None
        assert model_to_json(None) is None

    def test_keeps_non_ascii_text(self):
        assert to_json({"greeting": "grüß dich"}) == '{"greeting": "grüß dich"}'

    def test_rejects_values_json_cannot_represent(self):
        with pytest.raises(SerializationError):
            to_json({"when": object()})
        with pytest.raises(SerializationError):
            to_json({"score": math.nan})

    def test_model_uses_wire_names_without_nulls(self):
        message = Message(message_id="m1", role=Role.agent, parts=[Part(root=TextPart(text="done"))])
        payload = json.loads(model_to_json(message))

        assert payload["messageId"] == "m1"
        assert payload["role"] == "agent"
        assert "taskId" not in payload
        assert payload["parts"] == [{"kind": "text", "text": "done"}]


class TestFromJson:
    """Tests for from_json."""

    def test_decodes_text(self):
        assert from_json('{"a": 1}') == {"a": 1}
        assert from_json(b'[1, 2]') == [1, 2]

    def test_accepts_already_decoded_values(self):
        assert from_json({"a": 1}, dict) == {"a": 1}
        assert from_json([{"type": "TEXT"}], list) == [{"type": "TEXT"}]

    def test_null_and_blank(self):
        assert from_json(None) is None
        assert from_json("") is None
        assert from_json("   ") is None
        assert from_json("null") is None

    def test_unwraps_doubly_encoded_document(self):
        document = [{"type": "TEXT", "text": "legacy"}]
        doubly_encoded = json.dumps(json.dumps(document))

        assert from_json(doubly_encoded, list) == document

    def test_unwraps_only_once(self):
        triply_encoded = json.dumps(json.dumps(json.dumps({"a": 1})))
        with pytest.raises(DeserializationError):
            from_json(triply_encoded, dict)

    def test_invalid_json_is_an_error(self):
        with pytest.raises(DeserializationError):
            from_json("{not json", dict)

    def test_type_mismatch_is_an_error(self):
        with pytest.raises(DeserializationError, match="expected list"):
            from_json('{"a": 1}', list)
