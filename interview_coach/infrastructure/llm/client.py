"""
Gemini REST client for generative AI interactions.

Talks to either the Gemini API (API key) or Vertex AI (OAuth via google-auth).
Every call is bounded by a caller-side deadline and retried with a short
linear backoff when the failure looks transient.
"""
import json
import time
import logging
from concurrent.futures import ThreadPoolExecutor, TimeoutError as FutureTimeoutError
from typing import Optional, Dict, Any, List, Callable

import requests
import google.auth
import google.auth.transport.requests
from google.oauth2 import service_account

from ...config import (
    VERTEX_LOCATION, FAST_MODEL, TTS_MODEL, TTS_VOICE, GEMINI_API_BASE,
    LLM_TIMEOUT, LLM_RETRIES, LLM_RETRY_DELAY, TRANSIENT_STATUS_CODES
)
from ...errors import RemoteCallError, GenerationTimeoutError, MalformedResponseError

logger = logging.getLogger("llm_client")

Part = Dict[str, Any]


def text_part(text: str) -> Part:
    return {"text": text}


def inline_part(data_b64: str, mime_type: str) -> Part:
    return {"inlineData": {"mimeType": mime_type, "data": data_b64}}


class GeminiRestClient:
    """REST-based client for Gemini models."""

    def __init__(self,
                 api_key: Optional[str] = None,
                 project: Optional[str] = None,
                 location: str = VERTEX_LOCATION,
                 credentials_json: Optional[str] = None,
                 timeout: float = LLM_TIMEOUT,
                 retries: int = LLM_RETRIES,
                 retry_delay: float = LLM_RETRY_DELAY,
                 sleep: Callable[[float], None] = time.sleep):
        if not api_key and not project:
            raise ValueError("Either api_key or project is required")
        self.api_key = api_key
        self.project = project
        self.location = location
        self.credentials_json = credentials_json
        self.timeout = timeout
        self.retries = max(1, int(retries))
        self.retry_delay = retry_delay
        self._sleep = sleep
        self._token = None

    # ------------------------------------------------------------------
    # Auth / endpoints
    # ------------------------------------------------------------------

    def _refresh_token(self):
        """Refresh the OAuth token for Vertex API calls."""
        if self.credentials_json:
            creds = service_account.Credentials.from_service_account_file(
                self.credentials_json,
                scopes=["https://www.googleapis.com/auth/cloud-platform"],
            )
        else:
            creds, _ = google.auth.default(scopes=["https://www.googleapis.com/auth/cloud-platform"])

        auth_req = google.auth.transport.requests.Request()
        creds.refresh(auth_req)
        self._token = creds.token

    def _endpoint(self, model: str) -> str:
        if self.api_key:
            return f"{GEMINI_API_BASE}/models/{model}:generateContent"
        resource = f"projects/{self.project}/locations/{self.location}/publishers/google/models/{model}"
        return f"https://{self.location}-aiplatform.googleapis.com/v1/{resource}:generateContent"

    def _headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["x-goog-api-key"] = self.api_key
        else:
            if not self._token:
                self._refresh_token()
            headers["Authorization"] = f"Bearer {self._token}"
        return headers

    # ------------------------------------------------------------------
    # Core request
    # ------------------------------------------------------------------

    def generate(self,
                 parts: List[Part],
                 model: str = FAST_MODEL,
                 system_instruction: Optional[str] = None,
                 response_mime_type: Optional[str] = None,
                 response_schema: Optional[Dict[str, Any]] = None,
                 response_modalities: Optional[List[str]] = None,
                 speech_config: Optional[Dict[str, Any]] = None,
                 temperature: Optional[float] = None,
                 timeout: Optional[float] = None) -> Dict[str, Any]:
        """
        Call generateContent and return the raw response JSON.

        Raises:
            GenerationTimeoutError: if the deadline passes on the final attempt
            RemoteCallError: on transport or HTTP errors that survive retries
        """
        body: Dict[str, Any] = {"contents": [{"role": "user", "parts": list(parts)}]}
        if system_instruction:
            body["systemInstruction"] = {"parts": [{"text": system_instruction}]}

        generation_config: Dict[str, Any] = {}
        if response_mime_type:
            generation_config["responseMimeType"] = response_mime_type
        if response_schema:
            generation_config["responseSchema"] = response_schema
        if response_modalities:
            generation_config["responseModalities"] = list(response_modalities)
        if speech_config:
            generation_config["speechConfig"] = speech_config
        if temperature is not None:
            generation_config["temperature"] = float(temperature)
        if generation_config:
            body["generationConfig"] = generation_config

        deadline = timeout or self.timeout
        url = self._endpoint(model)
        logger.debug("generateContent model=%s parts=%d deadline=%.0fs", model, len(parts), deadline)
        return self._with_retry(lambda: self._post_with_deadline(url, body, deadline), model)

    def _with_retry(self, operation: Callable[[], Dict[str, Any]], label: str) -> Dict[str, Any]:
        for attempt in range(self.retries):
            try:
                return operation()
            except RemoteCallError as e:
                if not e.transient or attempt == self.retries - 1:
                    logger.error("Gemini call to %s failed: %s", label, e)
                    raise
                delay = self.retry_delay * (attempt + 1)
                logger.warning("Gemini attempt %d/%d failed (%s), retrying in %.1fs",
                               attempt + 1, self.retries, e, delay)
                self._sleep(delay)
        raise RemoteCallError("Operation failed after retries")

    def _post_with_deadline(self, url: str, body: Dict[str, Any], deadline: float) -> Dict[str, Any]:
        executor = ThreadPoolExecutor(max_workers=1)
        future = executor.submit(self._post, url, body, deadline)
        try:
            return future.result(timeout=deadline)
        except FutureTimeoutError:
            future.cancel()
            raise GenerationTimeoutError(f"Generation did not finish within {deadline:.0f}s")
        finally:
            executor.shutdown(wait=False)

    def _post(self, url: str, body: Dict[str, Any], timeout: float) -> Dict[str, Any]:
        try:
            resp = requests.post(url, headers=self._headers(), json=body, timeout=timeout)
        except requests.Timeout as e:
            raise GenerationTimeoutError(f"Request timed out: {e}")
        except requests.RequestException as e:
            raise RemoteCallError(f"Network error: {e}", transient=True)

        if resp.status_code >= 400:
            raise RemoteCallError(
                f"Gemini REST error {resp.status_code}: {resp.text[:500]}",
                status_code=resp.status_code,
                transient=resp.status_code in TRANSIENT_STATUS_CODES,
            )
        try:
            return resp.json()
        except ValueError:
            raise MalformedResponseError(f"Response was not JSON: {resp.text[:200]}")

    # ------------------------------------------------------------------
    # Response helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _candidate_parts(resp_json: Dict[str, Any]) -> List[Part]:
        cands = resp_json.get("candidates") or []
        if not cands:
            feedback = resp_json.get("promptFeedback")
            raise MalformedResponseError(f"Response had no candidates (feedback: {feedback})")
        content = cands[0].get("content") or {}
        parts = content.get("parts") or []
        return [p for p in parts if isinstance(p, dict)]

    def response_text(self, resp_json: Dict[str, Any]) -> str:
        """Concatenate the text parts of the first candidate."""
        return "".join(p["text"] for p in self._candidate_parts(resp_json) if isinstance(p.get("text"), str))

    def generate_text(self, parts: List[Part], **kwargs) -> str:
        return self.response_text(self.generate(parts, **kwargs))

    def generate_json(self, parts: List[Part], response_schema: Dict[str, Any], **kwargs) -> Dict[str, Any]:
        """
        Generate a JSON object constrained by a response schema.

        Falls back to the outermost {...} substring when the model wraps the
        JSON in prose or code fences.
        """
        text = self.generate_text(
            parts, response_mime_type="application/json", response_schema=response_schema, **kwargs
        )
        logger.debug("Raw LLM output: %s", repr(text[:2000]))

        try:
            parsed = json.loads(text)
        except ValueError as e:
            logger.warning("json.loads failed: %s", e)
            start = text.find("{")
            end = text.rfind("}")
            if start == -1 or end <= start:
                raise MalformedResponseError(f"LLM did not return valid JSON: {text[:200]}")
            try:
                parsed = json.loads(text[start:end + 1])
            except ValueError as e2:
                raise MalformedResponseError(f"LLM did not return valid JSON: {e2}")

        if not isinstance(parsed, dict):
            raise MalformedResponseError(f"Expected a JSON object, got {type(parsed).__name__}")
        return parsed

    def generate_audio(self, text: str, voice: str = TTS_VOICE, model: str = TTS_MODEL, **kwargs) -> str:
        """Synthesize speech; returns base64-encoded 16-bit PCM."""
        resp = self.generate(
            [text_part(text)],
            model=model,
            response_modalities=["AUDIO"],
            speech_config={"voiceConfig": {"prebuiltVoiceConfig": {"voiceName": voice}}},
            **kwargs,
        )
        for part in self._candidate_parts(resp):
            inline = part.get("inlineData") or {}
            if inline.get("data"):
                return inline["data"]
        raise MalformedResponseError("Failed to generate audio from text.")
