from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

class BaseDTO(BaseModel):
    """
    Base class for every DTO (Data Transfer Object) of the ISIM project.

    Features:
        - from_attributes=True (build from plain objects)
        - str_strip_whitespace=True (strings are stripped)
    """
    model_config = ConfigDict(
        from_attributes=True,
        str_strip_whitespace=True,
        populate_by_name=True
    )


class PersistedModel(BaseModel):
    """
    Base class for models that are written to local storage.
    Attribute names are snake_case in Python and camelCase on disk.
    Strings are kept verbatim (answers and transcripts must not be altered).
    """
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        validate_assignment=False
    )

    def to_storage(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


# -------------------------------------------------------------------------
# LLM Provider DTOs
# -------------------------------------------------------------------------
class LLMMessageDTO(BaseDTO):
    role: str  # "system", "user", "assistant"
    content: str

class LLMResponseDTO(BaseDTO):
    content: str
    token_usage: dict[str, int] | None = None
    finish_reason: str | None = None


# -------------------------------------------------------------------------
# Résumé Extraction DTOs
# -------------------------------------------------------------------------
class ResumeExtractionDTO(BaseDTO):
    name: str = ""
    email: str = ""
    phone: str = ""
    text: str = ""


# -------------------------------------------------------------------------
# Summary Generator DTOs
# -------------------------------------------------------------------------
class SummaryResultDTO(BaseDTO):
    score: int = Field(..., ge=0, le=100)
    summary: str
