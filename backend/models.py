from dataclasses import dataclass, field
from typing import Optional

from pydantic import BaseModel, Field

from backend.data_url import encode_bytes, sniff_image_mime
from backend.prompts import HoodieColor


@dataclass(frozen=True)
class UploadedImage:
    filename: str
    content: bytes = field(repr=False)
    data_url: str = field(repr=False)

    @classmethod
    def from_bytes(cls, filename: str, content: bytes, content_type: Optional[str] = None) -> "UploadedImage":
        return cls(filename, content, encode_bytes(sniff_image_mime(content, content_type), content))


@dataclass(frozen=True)
class GenerationResult:
    image: Optional[str] = None
    error: Optional[str] = None
    # Kept so callers can map the failure by type
    exc: Optional[Exception] = field(default=None, repr=False, compare=False)

    @property
    def ok(self) -> bool:
        return self.image is not None


@dataclass
class StudioState:
    photo: Optional[UploadedImage] = None
    color: HoodieColor = HoodieColor.GREEN
    adjustment: str = ""
    result: Optional[GenerationResult] = None
    is_generating: bool = False


class GenerateBody(BaseModel):
    image: str = Field(..., description="Data URL of the user's portrait")
    color: HoodieColor = HoodieColor.GREEN
    adjustment: str = ""
    # Overrides the stored template for this call only
    reference_image: Optional[str] = None


class GenerateResponse(BaseModel):
    image: str
    mime_type: str = "image/png"


class TemplateEntry(BaseModel):
    color: HoodieColor
    has_image: bool
    data_url: Optional[str] = None
