import json
from dataclasses import dataclass
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

CANONICAL_TIME_SUFFIX = "T00:00:00.000+00:00"


class LinkRecord(BaseModel):
    """An event detail URL and the thumbnail shown next to it on the listing page."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    link: str
    image_url: str = Field("", alias="imageUrl")

    def serialize(self) -> str:
        """Deterministic form used as the deduplication key."""
        return json.dumps({"link": self.link, "imageUrl": self.image_url})

    @classmethod
    def deserialize(cls, raw: str) -> "LinkRecord":
        return cls.model_validate(json.loads(raw))


class EventRecord(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    title: Optional[str] = Field(None, description="None only when the title element was missing.")
    date: str = Field(..., description="YYYY-MM-DDT00:00:00.000+00:00, or the invalid-date rendering.")
    genre: str = Field(..., min_length=1)
    time: Optional[str] = None
    location: str
    price: Optional[str] = None
    image: str = ""
    excerpt: str = ""
    is_featured: bool = Field(False, alias="isFeatured")

    @field_validator('date')
    @classmethod
    def date_has_canonical_time(cls, v: str) -> str:
        if not v.endswith(CANONICAL_TIME_SUFFIX):
            raise ValueError(f"date must end with {CANONICAL_TIME_SUFFIX!r}, got {v!r}")
        return v


@dataclass(frozen=True)
class FieldResult:
    """Outcome of extracting one field from a detail page."""
    field_name: str
    value: Optional[str] = None
    error: Optional[BaseException] = None
    selector: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, field_name: str, value: str, selector: str) -> "FieldResult":
        return cls(field_name=field_name, value=value, selector=selector)

    @classmethod
    def failure(cls, field_name: str, error: BaseException, selector: Optional[str] = None) -> "FieldResult":
        return cls(field_name=field_name, error=error, selector=selector)
