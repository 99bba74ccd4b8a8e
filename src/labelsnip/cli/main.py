from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Sequence

from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from labelsnip.core.chunking import DEFAULT_MAX_CHUNK_CHARS
from labelsnip.core.client import CompletionClient
from labelsnip.core.config import Settings, load_settings
from labelsnip.core.errors import ConfigError
from labelsnip.core.extractor import EXTRACTORS, BestEffortExtractor, get_extractor
from labelsnip.core.pipeline import BatchSummary, label_document, run_batch
from labelsnip.core.schemas import Completion, SnippetLabelPair
from labelsnip.utils.fs import dump_pairs, write_json

console = Console()

SINGLE_OUTPUT = "output.json"


def configure_logging(verbose: bool = False) -> None:
    root = logging.getLogger()
    if not any(isinstance(h, RichHandler) for h in root.handlers):
        root.addHandler(RichHandler(console=Console(stderr=True), show_path=False))
    root.setLevel(logging.DEBUG if verbose else logging.INFO)


def _add_common_args(ap: argparse.ArgumentParser) -> None:
    ap.add_argument("--model", default=None, help="Chat model name (default: $OPENAI_MODEL or gpt-3.5-turbo)")
    ap.add_argument("--endpoint", default=None, help="Chat-completion URL (default: $OPENAI_ENDPOINT or OpenAI)")
    ap.add_argument("--temperature", type=float, default=None, help="Sampling temperature (default: 0.7)")
    ap.add_argument("--max-tokens", type=int, default=None, help="Maximum response tokens (default: 2000)")
    ap.add_argument(
        "--max-chunk-chars",
        type=int,
        default=None,
        help=f"Approximate character budget per chunk (default: {DEFAULT_MAX_CHUNK_CHARS})",
    )
    ap.add_argument("--timeout", type=float, default=None, help="HTTP timeout in seconds (default: 300)")
    ap.add_argument(
        "--extractor",
        choices=sorted(EXTRACTORS),
        default=BestEffortExtractor.name,
        help="How to parse model replies into pairs",
    )
    ap.add_argument("--env-file", default=".env", help="Optional environment file loaded at startup")
    ap.add_argument("-v", "--verbose", action="store_true", help="Debug logging")


def _settings_from_args(args: argparse.Namespace) -> Settings:
    try:
        return load_settings(
            env_file=args.env_file,
            model=args.model,
            endpoint=args.endpoint,
            temperature=args.temperature,
            max_tokens=args.max_tokens,
            max_chunk_chars=args.max_chunk_chars,
            timeout_s=args.timeout,
        )
    except ConfigError as e:
        console.print(f"[red]{escape(str(e))}[/red]")
        raise SystemExit(2)


def render_pairs_console(pairs: Sequence[SnippetLabelPair], title: str = "Pairs") -> None:
    if not pairs:
        console.print("[yellow]No label/snippet pairs extracted.[/yellow]")
        return

    t = Table(title=title, show_lines=True)
    t.add_column("#", justify="right")
    t.add_column("Label")
    t.add_column("Snippet")
    for i, p in enumerate(pairs, start=1):
        t.add_row(str(i), escape(p.label), escape(p.snippet))
    console.print(t)


def render_summary_console(summary: BatchSummary) -> None:
    t = Table(title="Batch summary")
    t.add_column("Input")
    t.add_column("Pairs", justify="right")
    t.add_column("Failed chunks")
    t.add_column("Output")

    for e in summary.entries:
        if e.error is not None:
            t.add_row(escape(str(e.input_path)), "-", "-", f"[red]{escape(e.error)}[/red]")
            continue
        failed = ", ".join(str(i) for i in e.result.failed_chunks) or "-"
        t.add_row(escape(str(e.input_path)), str(len(e.result.pairs)), failed, escape(str(e.output_path)))

    console.print(t)


def main(argv: Sequence[str] | None = None) -> int:
    ap = argparse.ArgumentParser(
        prog="labelsnip",
        description="Label thematic snippets in every text file of a directory using a chat-completion model",
    )
    ap.add_argument("--input", required=True, help="Directory of text files to process")
    ap.add_argument("--output", default="output", help="Directory for the per-file JSON results")
    _add_common_args(ap)
    args = ap.parse_args(argv)
    configure_logging(args.verbose)

    if not args.input:
        console.print("[red]Please specify an input directory using the --input flag.[/red]")
        raise SystemExit(2)
    in_dir = Path(args.input)
    if not in_dir.is_dir():
        console.print(f"[red]Input directory not found: {escape(str(in_dir))}[/red]")
        raise SystemExit(2)

    settings = _settings_from_args(args)

    out_dir = Path(args.output)
    try:
        out_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        console.print(f"[red]Failed to create output directory {escape(str(out_dir))}: {escape(str(e))}[/red]")
        raise SystemExit(2)

    with CompletionClient(settings) as client:
        summary = run_batch(
            in_dir,
            out_dir,
            client=client,
            extractor=get_extractor(args.extractor),
            max_chars=settings.max_chunk_chars,
        )

    if not summary.entries:
        console.print(f"[yellow]No files found in {escape(str(in_dir))}.[/yellow]")
        return 0

    render_summary_console(summary)
    return 1 if summary.failed else 0


def main_file(argv: Sequence[str] | None = None) -> int:
    ap = argparse.ArgumentParser(
        prog="labelsnip-file",
        description=f"Label thematic snippets in one text file; writes {SINGLE_OUTPUT} and echoes it",
    )
    ap.add_argument("--input", required=True, help="Path to the input text file")
    _add_common_args(ap)
    args = ap.parse_args(argv)
    configure_logging(args.verbose)

    if not args.input:
        console.print("[red]Please specify an input file path using the --input flag.[/red]")
        raise SystemExit(2)

    settings = _settings_from_args(args)

    def echo(completion: Completion) -> None:
        console.out(completion.raw, highlight=False)

    fp = Path(args.input)
    with CompletionClient(settings) as client:
        try:
            result = label_document(
                fp,
                client=client,
                extractor=get_extractor(args.extractor),
                max_chars=settings.max_chunk_chars,
                on_completion=echo,
            )
        except (OSError, UnicodeDecodeError) as e:
            console.print(f"[red]Failed to read input file: {escape(str(e))}[/red]")
            raise SystemExit(1)

    data = dump_pairs(result.pairs)
    console.out(data, highlight=False)

    out_path = Path(SINGLE_OUTPUT)
    try:
        write_json(out_path, data)
    except OSError as e:
        console.print(f"[red]Failed to write output to file: {escape(str(e))}[/red]")
        raise SystemExit(1)

    console.print(f"[dim]Saved:[/dim] {out_path}")
    render_pairs_console(result.pairs, title=str(fp))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
