from __future__ import annotations

import logging
from pathlib import Path

import requests

from labelsnip.core.config import Settings
from labelsnip.core.errors import CompletionError
from labelsnip.core.schemas import Completion

logger = logging.getLogger(__name__)


def _load_prompt(name: str) -> str:
    here = Path(__file__).resolve().parents[1] / "prompts"
    return (here / name).read_text(encoding="utf-8").rstrip("\n")


LABEL_PROMPT = _load_prompt("label_snippets.txt")


def _preview(text: str, limit: int = 400) -> str:
    return text if len(text) <= limit else text[:limit] + "...(truncated)"


class CompletionClient:
    """Synchronous chat-completion client for one OpenAI-compatible endpoint."""

    def __init__(self, settings: Settings, session: requests.Session | None = None):
        self.settings = settings
        self.session = session or requests.Session()

    def close(self) -> None:
        self.session.close()

    def __enter__(self) -> "CompletionClient":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def build_payload(self, chunk: str) -> dict:
        s = self.settings
        return {
            "model": s.model,
            "messages": [{"role": "user", "content": LABEL_PROMPT.format(text=chunk)}],
            "temperature": s.temperature,
            "max_tokens": s.max_tokens,
            "top_p": s.top_p,
            "n": s.n,
        }

    def request(self, chunk: str) -> Completion:
        url = self.settings.endpoint
        headers = {
            "Authorization": f"Bearer {self.settings.api_key}",
            "Content-Type": "application/json",
        }

        try:
            r = self.session.post(
                url,
                json=self.build_payload(chunk),
                headers=headers,
                timeout=self.settings.timeout_s,
            )
        except requests.RequestException as e:
            raise CompletionError(f"Request to {url} failed: {e}") from e

        raw = r.text
        if not r.ok:
            raise CompletionError(
                f"Completion error {r.status_code} for {url}\n"
                f"Model: {self.settings.model}\n"
                f"Response:\n{_preview(raw)}\n"
            )

        try:
            data = r.json()
        except ValueError as e:
            raise CompletionError(f"Non-JSON response body from {url}: {_preview(raw)}") from e

        choices = data.get("choices") if isinstance(data, dict) else None
        if not isinstance(choices, list):
            raise CompletionError(f"Malformed completion payload: {_preview(raw)}")
        if not choices:
            logger.warning("No choices were returned by %s", url)
            return Completion(raw=raw, content=None)

        try:
            content = choices[0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as e:
            raise CompletionError(f"Malformed completion payload: {_preview(raw)}") from e
        if not isinstance(content, str):
            raise CompletionError("Unexpected response content type")

        return Completion(raw=raw, content=content)
