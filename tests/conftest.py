from io import BytesIO

import pytest
from PIL import Image


@pytest.fixture
def png_bytes():
    buf = BytesIO()
    Image.new("RGB", (4, 4), (0, 128, 0)).save(buf, format="PNG")
    return buf.getvalue()


@pytest.fixture
def jpeg_bytes():
    buf = BytesIO()
    Image.new("RGB", (4, 4), (0, 0, 0)).save(buf, format="JPEG")
    return buf.getvalue()
