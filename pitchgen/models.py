from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from pitchgen.config import MAX_TITLE_LENGTH


class PitchInput(BaseModel):
    """
    The problem/solution description a pitch is generated from.
    Stored as an embedded copy on every PitchRecord.
    """
    model_config = ConfigDict(populate_by_name=True)

    problem: str
    solution: str
    target_audience: Optional[str] = Field(None, alias="targetAudience")

    @field_validator("target_audience")
    @classmethod
    def _blank_audience_is_absent(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and not value.strip():
            return None
        return value


class PitchRequest(PitchInput):
    """Request body for pitch generation."""
    title: str = Field(..., min_length=1, max_length=MAX_TITLE_LENGTH)

    @field_validator("title", "problem", "solution")
    @classmethod
    def _required_text(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must not be blank")
        return value

    def to_input(self) -> PitchInput:
        return PitchInput(
            problem=self.problem,
            solution=self.solution,
            target_audience=self.target_audience,
        )


class GeneratedPitch(BaseModel):
    """Pitch text together with the stage that produced it."""
    text: str
    strategy: str


class PitchRecord(BaseModel):
    """A stored pitch, owned by exactly one user."""
    model_config = ConfigDict(populate_by_name=True)

    id: str
    owner_id: str = Field(..., alias="ownerId")
    title: str
    input_data: PitchInput = Field(..., alias="inputData")
    generated_pitch: str = Field(..., alias="generatedPitch")
    created_at: str = Field(..., alias="createdAt")

    @classmethod
    def from_document(cls, doc_id: str, data: Dict[str, Any]) -> "PitchRecord":
        """Build a record from a Firestore document snapshot's data."""
        input_data = data.get("input_data") or {}
        return cls(
            id=doc_id,
            owner_id=data["owner_id"],
            title=data.get("title", ""),
            input_data=PitchInput(
                problem=input_data.get("problem", ""),
                solution=input_data.get("solution", ""),
                target_audience=input_data.get("target_audience"),
            ),
            generated_pitch=data.get("generated_pitch", ""),
            created_at=data.get("created_at", ""),
        )

    def to_document(self) -> Dict[str, Any]:
        """Firestore representation (the id lives in the document path)."""
        return {
            "owner_id": self.owner_id,
            "title": self.title,
            "input_data": {
                "problem": self.input_data.problem,
                "solution": self.input_data.solution,
                "target_audience": self.input_data.target_audience,
            },
            "generated_pitch": self.generated_pitch,
            "created_at": self.created_at,
        }

    def to_response(self) -> Dict[str, Any]:
        """JSON shape returned to clients."""
        return self.model_dump(by_alias=True)
