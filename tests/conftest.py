"""Test configuration ensuring the src/ package is importable."""
from __future__ import annotations

import sys
from pathlib import Path
from typing import List

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from labelsnip.core.errors import CompletionError  # noqa: E402
from labelsnip.core.schemas import Completion  # noqa: E402

TWO_PAIR_REPLY = (
    "Here are the label/snippet objects:\n"
    "[\n"
    '  {"label": "Origins", "snippet": "The town was founded in 1820."},\n'
    '  {"label": "Economy", "snippet": "Fishing remains the main trade."}\n'
    "]"
)


class DummyClient:
    """Replays canned replies; an Exception instance in the queue is raised instead."""

    def __init__(self, responses: List[object] | None = None, default: str | None = None) -> None:
        self.responses = list(responses or [])
        self.default = default
        self.chunks: List[str] = []

    def request(self, chunk: str) -> Completion:
        self.chunks.append(chunk)
        if self.responses:
            item = self.responses.pop(0)
        elif self.default is not None:
            item = self.default
        else:
            raise CompletionError("No responses remaining")
        if isinstance(item, Exception):
            raise item
        if item is None:
            return Completion(raw='{"choices": []}', content=None)
        return Completion(raw=f"<raw:{item}>", content=item)


@pytest.fixture
def two_pair_reply() -> str:
    return TWO_PAIR_REPLY


@pytest.fixture(autouse=True)
def _clean_openai_env(monkeypatch: pytest.MonkeyPatch) -> None:
    # setenv first so monkeypatch records the key and undoes anything load_dotenv writes
    for key in ("OPENAI_API_KEY", "OPENAI_MODEL", "OPENAI_ENDPOINT"):
        monkeypatch.setenv(key, "")
        monkeypatch.delenv(key)
