import sys
from pathlib import Path

import pytest
from pydantic import ValidationError

sys.path.insert(0, str(Path(__file__).parent.parent))

from pitchgen.models import PitchInput, PitchRecord, PitchRequest


def test_request_accepts_camel_case_audience():
    request = PitchRequest(**{"title": "T", "problem": "P", "solution": "S", "targetAudience": "Founders"})
    assert request.target_audience == "Founders"
    assert request.to_input() == PitchInput(problem="P", solution="S", target_audience="Founders")


def test_blank_audience_is_treated_as_absent():
    request = PitchRequest(title="T", problem="P", solution="S", targetAudience="   ")
    assert request.target_audience is None


@pytest.mark.parametrize("field", ["title", "problem", "solution"])
def test_blank_required_fields_are_rejected(field):
    body = {"title": "T", "problem": "P", "solution": "S"}
    body[field] = "  "
    with pytest.raises(ValidationError):
        PitchRequest(**body)


def test_record_document_round_trip_keeps_owner():
    record = PitchRecord(
        id="abc",
        owner_id="user-1",
        title="T",
        input_data=PitchInput(problem="P", solution="S"),
        generated_pitch="Pitch",
        created_at="2025-01-01T00:00:00",
    )
    restored = PitchRecord.from_document("abc", record.to_document())
    assert restored == record
    assert record.to_response()["ownerId"] == "user-1"
    assert record.to_response()["inputData"]["targetAudience"] is None
