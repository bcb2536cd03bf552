import logging
import threading
from typing import Any, Dict, List, Optional

import requests

from backend import config
from backend.data_url import decode, encode
from backend.errors import GenerationInProgress, NoImageGenerated
from backend.prompts import HoodieColor, build_prompt

logger = logging.getLogger("hoodie_portrait_studio.client")

OUTPUT_MIME = "image/png"


def _inline_part(data_url: str) -> Dict[str, Any]:
    mime_type, payload = decode(data_url)
    return {"inlineData": {"mimeType": mime_type, "data": payload}}


def build_parts(subject: str, reference: Optional[str], prompt: str) -> List[Dict[str, Any]]:
    # Order matters to the model: subject, then garment reference, then text
    parts = [_inline_part(subject)]
    if reference:
        parts.append(_inline_part(reference))
    parts.append({"text": prompt})
    return parts


def build_payload(parts: List[Dict[str, Any]]) -> Dict[str, Any]:
    return {
        "contents": [{"role": "user", "parts": parts}],
        "generationConfig": {"responseModalities": ["IMAGE"]},
    }


def extract_image(data: Any) -> str:
    """Return the first candidate's first part as a PNG data URL.

    Only that one part is consulted. Anything else in the response is ignored.
    """
    def first(seq):
        return seq[0] if isinstance(seq, list) and seq else None

    def get(obj, key):
        return obj.get(key) if isinstance(obj, dict) else None

    candidate = first(get(data, "candidates"))
    part = first(get(get(candidate, "content"), "parts"))
    inline_b64 = get(get(part, "inlineData"), "data")
    if not inline_b64 or not isinstance(inline_b64, str):
        raise NoImageGenerated()
    return encode(OUTPUT_MIME, inline_b64)


class PortraitClient:
    """Stateless wrapper around one ``generateContent`` round trip.

    A single-slot lock rejects overlapping calls on the same instance instead
    of queueing them.
    """

    def __init__(
        self,
        api_key: str,
        endpoint: str = config.GEMINI_ENDPOINT,
        timeout: Optional[float] = config.GEMINI_TIMEOUT,
        session: Optional[requests.Session] = None,
    ):
        self.api_key = api_key
        self.endpoint = endpoint
        self.timeout = timeout
        self._http = session or requests
        self._in_flight = threading.Lock()

    @property
    def busy(self) -> bool:
        return self._in_flight.locked()

    def generate(
        self,
        subject: str,
        reference: Optional[str],
        color: HoodieColor,
        adjustment: str = "",
    ) -> str:
        color = HoodieColor(color)
        if not self._in_flight.acquire(blocking=False):
            raise GenerationInProgress()
        try:
            return self._generate(subject, reference, color, adjustment)
        finally:
            self._in_flight.release()

    def _generate(self, subject: str, reference: Optional[str], color: HoodieColor, adjustment: str) -> str:
        prompt = build_prompt(color, adjustment)
        payload = build_payload(build_parts(subject, reference, prompt))
        logger.info(
            "generate color=%s reference=%s adjustment_len=%s",
            color.value, bool(reference), len(adjustment),
        )

        try:
            resp = self._http.post(
                self.endpoint,
                headers={
                    "Content-Type": "application/json",
                    "X-goog-api-key": self.api_key,
                },
                json=payload,
                timeout=self.timeout,
            )
            resp.raise_for_status()
            data = resp.json()
        except requests.HTTPError as e:
            body = e.response.text[:400] if e.response is not None else ""
            logger.exception("Gemini API error: %s body=%s", e, body)
            raise
        except requests.RequestException as e:
            logger.exception("Gemini API error: %s", e)
            raise

        try:
            return extract_image(data)
        except NoImageGenerated:
            logger.error(
                "No image returned from model for color=%s body=%s",
                color.value, str(data)[:400],
            )
            raise


def generate_portrait(
    api_key: str,
    subject: str,
    reference: Optional[str],
    color: HoodieColor,
    adjustment: str = "",
) -> str:
    return PortraitClient(api_key).generate(subject, reference, color, adjustment)
