from __future__ import annotations
import json
from pathlib import Path
from typing import Iterable

from labelsnip.core.schemas import SnippetLabelPair

def iter_files(directory: str | Path) -> list[Path]:
    """Regular files directly inside directory; subdirectories are not entered."""
    p = Path(directory)
    return sorted(fp for fp in p.iterdir() if fp.is_file())

def read_text_file(path: Path) -> str:
    return path.read_text(encoding="utf-8")

def output_path_for(input_path: Path, output_dir: Path) -> Path:
    return output_dir / f"{input_path.stem}.json"

def dump_pairs(pairs: Iterable[SnippetLabelPair]) -> str:
    return json.dumps([p.model_dump() for p in pairs], ensure_ascii=False, indent=2)

def write_json(path: Path, text: str) -> None:
    path.write_text(text, encoding="utf-8")
