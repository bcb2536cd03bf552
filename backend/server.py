import logging
import os
from typing import List, Optional

import requests
import uvicorn
from fastapi import Depends, FastAPI, File, Form, HTTPException, Request, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse

from backend import config
from backend.errors import GenerationInProgress, NoPhotoUploaded, PortraitError
from backend.gemini_client import PortraitClient
from backend.models import GenerateBody, GenerateResponse, TemplateEntry, UploadedImage
from backend.prompts import HoodieColor
from backend.studio import Studio
from backend.templates import TemplateStore

logger = logging.getLogger("hoodie_portrait_studio")

MAX_UPLOAD_BYTES = 12 * 1024 * 1024


app = FastAPI(title="Hoodie Portrait Studio API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,  # use wildcard CORS header reliably
    allow_methods=["*"],
    allow_headers=["*"],
)

app.state.templates = TemplateStore()
if config.TEMPLATES_DIR:
    app.state.templates.load_dir(config.TEMPLATES_DIR)
# One client per process: its in-flight lock answers 409 to every caller while
# any generation is running. Run one worker per user for concurrent sessions.
app.state.client = PortraitClient(config.GEMINI_API_KEY)


def get_templates(request: Request) -> TemplateStore:
    return request.app.state.templates


def get_client(request: Request) -> PortraitClient:
    client = request.app.state.client
    if not client.api_key:
        logger.error("GEMINI_API_KEY not set in environment for process PID=%s", os.getpid())
        raise HTTPException(status_code=500, detail="GEMINI_API_KEY not set")
    return client


def _http_error(exc: Exception) -> HTTPException:
    if isinstance(exc, GenerationInProgress):
        return HTTPException(status_code=409, detail=str(exc))
    if isinstance(exc, NoPhotoUploaded):
        return HTTPException(status_code=400, detail=str(exc))
    if isinstance(exc, requests.HTTPError) and exc.response is not None:
        return HTTPException(status_code=exc.response.status_code, detail=exc.response.text)
    if isinstance(exc, requests.RequestException):
        return HTTPException(status_code=502, detail=f"Upstream error: {exc}")
    return HTTPException(status_code=502, detail=str(exc) or "Failed to generate")


def _read_upload(upload: UploadFile) -> bytes:
    content = upload.file.read()
    if not content:
        raise HTTPException(status_code=400, detail="Empty image payload")
    if len(content) > MAX_UPLOAD_BYTES:
        raise HTTPException(status_code=413, detail="Image too large (max 12MB)")
    return content


@app.get("/health")
def health():
    return {"ok": True}


@app.post("/api/generate", response_model=GenerateResponse)
def generate(
    body: GenerateBody,
    client: PortraitClient = Depends(get_client),
    templates: TemplateStore = Depends(get_templates),
):
    if not body.image:
        raise HTTPException(status_code=400, detail="Empty image payload")
    reference = body.reference_image or templates.get(body.color)
    try:
        image = client.generate(body.image, reference, body.color, body.adjustment)
    except (PortraitError, requests.RequestException) as e:
        raise _http_error(e)
    return GenerateResponse(image=image)


@app.post("/api/generate/upload", response_model=GenerateResponse)
def generate_upload(
    photo: UploadFile = File(...),
    color: HoodieColor = Form(HoodieColor.GREEN),
    adjustment: str = Form(""),
    client: PortraitClient = Depends(get_client),
    templates: TemplateStore = Depends(get_templates),
):
    studio = Studio(client, templates)
    studio.upload(photo.filename or "photo", _read_upload(photo), photo.content_type)
    studio.select_color(color)
    studio.set_adjustment(adjustment)
    try:
        result = studio.generate()
    except PortraitError as e:
        raise _http_error(e)
    if not result.ok:
        if result.exc is not None:
            raise _http_error(result.exc)
        raise HTTPException(status_code=502, detail=result.error)
    return GenerateResponse(image=result.image)


@app.get("/api/templates", response_model=List[TemplateEntry])
def list_templates(templates: TemplateStore = Depends(get_templates)):
    return [
        TemplateEntry(color=color, has_image=bool(data_url), data_url=data_url)
        for color, data_url in templates.snapshot().items()
    ]


@app.put("/api/templates/{color}", response_model=TemplateEntry)
def replace_template(
    color: HoodieColor,
    file: UploadFile = File(...),
    templates: TemplateStore = Depends(get_templates),
):
    uploaded = UploadedImage.from_bytes(file.filename or color.value, _read_upload(file), file.content_type)
    templates.replace(color, uploaded.data_url)
    return TemplateEntry(color=color, has_image=True, data_url=uploaded.data_url)


@app.get("/api/templates/export", response_class=PlainTextResponse)
def export_templates(templates: TemplateStore = Depends(get_templates)):
    return templates.export_source()


def main(host: Optional[str] = None, port: Optional[int] = None):
    logging.basicConfig(level=config.LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    uvicorn.run(app, host=host or config.HOST, port=port or config.PORT)


if __name__ == "__main__":
    main()
