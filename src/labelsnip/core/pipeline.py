from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, List, Optional, Protocol, Set

from labelsnip.core.chunking import DEFAULT_MAX_CHUNK_CHARS, split_text
from labelsnip.core.errors import CompletionError, ExtractionError
from labelsnip.core.extractor import PairExtractor
from labelsnip.core.schemas import Completion, DocumentResult, SnippetLabelPair
from labelsnip.utils.fs import dump_pairs, iter_files, output_path_for, read_text_file, write_json

logger = logging.getLogger(__name__)


class SupportsRequest(Protocol):
    def request(self, chunk: str) -> Completion: ...


def label_text(
    text: str,
    *,
    client: SupportsRequest,
    extractor: PairExtractor,
    max_chars: int = DEFAULT_MAX_CHUNK_CHARS,
    on_completion: Optional[Callable[[Completion], None]] = None,
    label: str = "<text>",
) -> DocumentResult:
    """
    Chunk text and collect pairs chunk by chunk, in order.

    A chunk whose request or extraction fails is logged and skipped; its
    1-based index is recorded in failed_chunks.
    """
    chunks = split_text(text, max_chars=max_chars)
    pairs: List[SnippetLabelPair] = []
    failed: List[int] = []

    for idx, chunk in enumerate(chunks, start=1):
        try:
            completion = client.request(chunk)
            if on_completion is not None:
                on_completion(completion)
            if completion.content is None:
                continue
            found = extractor.extract(completion.content)
        except (CompletionError, ExtractionError) as e:
            logger.error("%s chunk %d/%d skipped: %s", label, idx, len(chunks), e)
            failed.append(idx)
            continue

        logger.debug("%s chunk %d/%d: %d pairs", label, idx, len(chunks), len(found))
        pairs.extend(found)

    return DocumentResult(path=label, chunks=len(chunks), pairs=pairs, failed_chunks=failed)


def label_document(
    path: Path,
    *,
    client: SupportsRequest,
    extractor: PairExtractor,
    max_chars: int = DEFAULT_MAX_CHUNK_CHARS,
    on_completion: Optional[Callable[[Completion], None]] = None,
) -> DocumentResult:
    return label_text(
        read_text_file(path),
        client=client,
        extractor=extractor,
        max_chars=max_chars,
        on_completion=on_completion,
        label=str(path),
    )


@dataclass
class BatchEntry:
    input_path: Path
    output_path: Optional[Path] = None
    result: Optional[DocumentResult] = None
    error: Optional[str] = None


@dataclass
class BatchSummary:
    entries: List[BatchEntry] = field(default_factory=list)

    @property
    def written(self) -> List[Path]:
        return [e.output_path for e in self.entries if e.error is None and e.output_path is not None]

    @property
    def failed(self) -> List[Path]:
        return [e.input_path for e in self.entries if e.error is not None]


def run_batch(
    input_dir: Path,
    output_dir: Path,
    *,
    client: SupportsRequest,
    extractor: PairExtractor,
    max_chars: int = DEFAULT_MAX_CHUNK_CHARS,
) -> BatchSummary:
    """
    Label every regular file in input_dir, writing <stem>.json into output_dir.

    A file whose chunks all failed is not written, so an outage or a bad key
    never replaces earlier results with an empty array. A file whose output
    name was already written in this run is not written either.
    """
    summary = BatchSummary()
    claimed: Set[Path] = set()

    for fp in iter_files(input_dir):
        entry = BatchEntry(input_path=fp)
        summary.entries.append(entry)

        try:
            result = label_document(fp, client=client, extractor=extractor, max_chars=max_chars)
        except (OSError, UnicodeDecodeError) as e:
            logger.error("Failed to read %s: %s", fp, e)
            entry.error = f"read failed: {e}"
            continue
        entry.result = result

        if result.chunks and len(result.failed_chunks) == result.chunks:
            logger.error("All %d chunks of %s failed; not writing output", result.chunks, fp)
            entry.error = f"all {result.chunks} chunks failed"
            continue

        out_path = output_path_for(fp, output_dir)
        if out_path in claimed:
            logger.error("Output %s for %s was already written in this run; skipping", out_path, fp)
            entry.error = f"output name collides with {out_path.name}"
            continue

        try:
            data = dump_pairs(result.pairs)
        except (TypeError, ValueError) as e:
            logger.error("Failed to marshal pairs for %s: %s", fp, e)
            entry.error = f"marshal failed: {e}"
            continue

        try:
            write_json(out_path, data)
        except OSError as e:
            logger.error("Failed to write %s: %s", out_path, e)
            entry.error = f"write failed: {e}"
            continue

        claimed.add(out_path)
        entry.output_path = out_path
        logger.info("Wrote %d pairs from %s to %s", len(result.pairs), fp, out_path)

    return summary
