import logging
from typing import Optional

from backend.errors import GenerationInProgress, NoPhotoUploaded
from backend.gemini_client import PortraitClient
from backend.models import GenerationResult, StudioState, UploadedImage
from backend.prompts import HoodieColor
from backend.templates import TemplateStore

logger = logging.getLogger("hoodie_portrait_studio.studio")


class Studio:
    """Single-user controller tying the upload, color choice and client together."""

    def __init__(self, client: PortraitClient, templates: TemplateStore, state: Optional[StudioState] = None):
        self.client = client
        self.templates = templates
        self.state = state or StudioState()

    def upload(self, filename: str, content: bytes, content_type: Optional[str] = None) -> UploadedImage:
        self.state.photo = UploadedImage.from_bytes(filename, content, content_type)
        return self.state.photo

    def select_color(self, color: HoodieColor) -> None:
        self.state.color = HoodieColor(color)

    def set_adjustment(self, text: str) -> None:
        self.state.adjustment = text or ""

    def generate(self) -> GenerationResult:
        if self.state.photo is None:
            raise NoPhotoUploaded()

        # Reference is read at call time so a template swap applies immediately
        reference = self.templates.get(self.state.color)
        self.state.is_generating = True
        self.state.result = None
        try:
            image = self.client.generate(
                self.state.photo.data_url, reference, self.state.color, self.state.adjustment
            )
            result = GenerationResult(image=image)
        except GenerationInProgress:
            raise
        except Exception as e:
            logger.warning("generation failed: %s", e)
            result = GenerationResult(error=str(e) or "Failed to generate", exc=e)
        finally:
            self.state.is_generating = False
        self.state.result = result
        return result
