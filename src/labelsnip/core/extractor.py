from __future__ import annotations

import json
import logging
import re
from typing import List

from pydantic import ValidationError

from labelsnip.core.errors import ExtractionError
from labelsnip.core.schemas import SnippetLabelPair

logger = logging.getLogger(__name__)

PAIR_PATTERN = re.compile(r'\{\s*"label":\s*"(.*?)"\s*,\s*"snippet":\s*"(.*?)"\s*\}')
FENCE_PATTERN = re.compile(r"^```[A-Za-z]*\s*(.*?)\s*```$", re.DOTALL)


def normalize_reply(reply: str) -> str:
    """Drop literal \\n escapes, unescape \\" and trim."""
    reply = reply.replace("\\n", "")
    reply = reply.replace('\\"', '"')
    return reply.strip()


class PairExtractor:
    """Turns a model reply into label/snippet pairs."""

    name = "base"

    def extract(self, reply: str) -> List[SnippetLabelPair]:
        raise NotImplementedError


class BestEffortExtractor(PairExtractor):
    """
    Pattern-matches every {"label": ..., "snippet": ...} object in the reply.

    The reply does not have to be valid JSON: prose, code fences and broken
    list syntax around the objects are ignored. No match means no pairs.
    """

    name = "best-effort"

    def extract(self, reply: str) -> List[SnippetLabelPair]:
        text = normalize_reply(reply)
        pairs = [
            SnippetLabelPair(label=m.group(1), snippet=m.group(2))
            for m in PAIR_PATTERN.finditer(text)
        ]
        if not pairs:
            logger.debug("No label/snippet objects found in reply: %r", text[:200])
        return pairs


class StrictJsonExtractor(PairExtractor):
    """Expects the reply to be a JSON array of pairs (optionally fenced, or wrapped as {"pairs": [...]})."""

    name = "strict"

    def extract(self, reply: str) -> List[SnippetLabelPair]:
        text = reply.strip()
        m = FENCE_PATTERN.match(text)
        if m:
            text = m.group(1)

        try:
            obj = json.loads(text)
        except json.JSONDecodeError as e:
            raise ExtractionError(f"Reply is not valid JSON: {e}\nRaw:\n{reply[:1000]}") from e

        if isinstance(obj, dict) and isinstance(obj.get("pairs"), list):
            obj = obj["pairs"]
        if not isinstance(obj, list):
            raise ExtractionError(f"Expected a JSON array of pairs, got {type(obj).__name__}")

        try:
            return [SnippetLabelPair.model_validate(item) for item in obj]
        except ValidationError as e:
            raise ExtractionError(f"Reply item does not match the pair schema: {e}") from e


EXTRACTORS = {
    BestEffortExtractor.name: BestEffortExtractor,
    StrictJsonExtractor.name: StrictJsonExtractor,
}


def get_extractor(name: str = BestEffortExtractor.name) -> PairExtractor:
    try:
        return EXTRACTORS[name]()
    except KeyError:
        raise ValueError(f"Unknown extractor {name!r}; choose from {sorted(EXTRACTORS)}") from None
