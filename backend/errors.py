class PortraitError(Exception):
    """Base class for failures raised by the portrait pipeline."""


class NoImageGenerated(PortraitError):
    def __init__(self, message: str = "No image generated."):
        super().__init__(message)


class GenerationInProgress(PortraitError):
    def __init__(self, message: str = "A portrait is already being generated."):
        super().__init__(message)


class NoPhotoUploaded(PortraitError):
    def __init__(self, message: str = "Upload a photo before generating."):
        super().__init__(message)
