import asyncio
import json
from collections.abc import Callable, Iterable
from pathlib import Path

import typer
from dotenv import load_dotenv

from receiptkeeper.extraction.receipt import ReceiptExtractor, extract_fields
from receiptkeeper.integrations.local_export import LocalExporter
from receiptkeeper.integrations.ocr import SUPPORTED_LANGUAGES, OCREngine
from receiptkeeper.models import (
    ExtractionResult,
    OCRStatus,
    ProcessingResult,
    RawDocument,
)

load_dotenv()

IMAGE_SUFFIXES = {".jpg", ".jpeg", ".png", ".gif", ".webp"}

DEFAULT_LANGUAGE = "eng"
DEFAULT_TIMEOUT = 30.0

app = typer.Typer(no_args_is_help=True)


@app.callback(invoke_without_command=True)
def callback(ctx: typer.Context):
    """Receiptkeeper CLI tool."""
    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())


def collect_image_paths(inputs: Iterable[Path]) -> list[Path]:
    """Expand files and directories into a sorted list of receipt images.

    Directories are scanned (non-recursively) for supported image suffixes.
    Explicitly named files are kept regardless of suffix.

    Raises:
        FileNotFoundError: If an input path does not exist
    """
    found: set[Path] = set()
    for path in inputs:
        if path.is_dir():
            found.update(
                child
                for child in path.iterdir()
                if child.is_file() and child.suffix.lower() in IMAGE_SUFFIXES
            )
        elif path.is_file():
            found.add(path)
        else:
            raise FileNotFoundError(f"Path not found: {path}")
    return sorted(found)


async def process_receipt_file(
    image_path: Path,
    extractor: ReceiptExtractor,
    timeout: float | None = None,
    on_progress: Callable[[str, str], None] | None = None,
) -> ProcessingResult:
    """Process a single receipt image through OCR and field extraction.

    Args:
        image_path: Path to the receipt image
        extractor: Receipt extractor wrapping the OCR engine
        timeout: Seconds to wait for the extraction before marking it failed
        on_progress: Optional callback for progress updates (event_type, message)

    Returns:
        ProcessingResult marked completed with the extraction, or failed with
        the error message
    """
    result = ProcessingResult(file_name=image_path.name, image_path=image_path)

    try:
        result.extraction = await asyncio.wait_for(
            extractor.extract_receipt(image_path), timeout=timeout
        )
        result.status = OCRStatus.COMPLETED
    except TimeoutError as e:
        result.status = OCRStatus.FAILED
        if timeout is None:
            # Raised by the engine itself, not by the deadline
            result.error = str(e) or type(e).__name__
        else:
            result.error = f"OCR timed out after {timeout:g}s"
    except Exception as e:
        # Engine failures are fatal for this file only
        result.status = OCRStatus.FAILED
        result.error = str(e) or type(e).__name__

    if result.status is OCRStatus.FAILED and on_progress:
        message = f"Failed to process {image_path.name}: {result.error}"
        on_progress("ocr_error", message)

    return result


async def run_pipeline(
    image_paths: list[Path],
    extractor: ReceiptExtractor,
    timeout: float | None = None,
    exporter: LocalExporter | None = None,
    export_path: Path | None = None,
    on_progress: Callable[[str, str], None] | None = None,
) -> list[ProcessingResult]:
    """Process all receipt images concurrently.

    Args:
        image_paths: Receipt images to process
        extractor: Receipt extractor wrapping the OCR engine
        timeout: Per-image deadline in seconds
        exporter: Optional local exporter for completed results
        export_path: CSV path used together with exporter
        on_progress: Optional callback for progress updates (event_type, message)

    Returns:
        One ProcessingResult per image, in input order
    """
    tasks = [
        process_receipt_file(path, extractor, timeout, on_progress)
        for path in image_paths
    ]
    results = await asyncio.gather(*tasks)

    if exporter and export_path:
        completed = [r for r in results if r.status is OCRStatus.COMPLETED]
        if completed:
            try:
                exporter.export(completed, export_path)
                if on_progress:
                    on_progress(
                        "export_success",
                        f"Saved {len(completed)} receipts to {export_path}",
                    )
            except OSError as e:
                if on_progress:
                    on_progress("export_error", f"Failed to save receipts locally: {e}")

    return list(results)


def _echo_result(extraction: ExtractionResult) -> None:
    def show(value) -> str:
        return "n/a" if value is None else str(value)

    typer.echo(f"  Merchant: {show(extraction.merchant_name)}")
    typer.echo(f"  Date: {show(extraction.purchase_date)}")
    typer.echo(f"  Total: {show(extraction.total_amount)}")
    typer.echo(f"  Tax: {show(extraction.tax_amount)}")
    typer.echo(f"  Confidence: {extraction.confidence:.1f}%")
    if extraction.needs_review:
        typer.echo("  Low OCR confidence, review recommended")
    for item in extraction.line_items:
        typer.echo(f"  - {item.name} x{item.quantity}: {item.unit_price:.2f}")


def cli_progress(event_type: str, message: str):
    """Callback to handle progress events and output to CLI."""
    if "error" in event_type:
        typer.echo(message, err=True)
    else:
        typer.echo(message)


def cli_errors_only(event_type: str, message: str):
    """Progress callback for --json mode, where stdout carries only JSON."""
    if "error" in event_type:
        typer.echo(message, err=True)


@app.command()
def extract(
    paths: list[Path] = typer.Argument(
        ..., help="Receipt image files or directories containing them"
    ),
    language: str = typer.Option(
        DEFAULT_LANGUAGE,
        "--language",
        "-l",
        envvar="RECEIPTKEEPER_OCR_LANGUAGE",
        help="OCR language code",
    ),
    timeout: float = typer.Option(
        DEFAULT_TIMEOUT,
        "--timeout",
        "-t",
        envvar="RECEIPTKEEPER_OCR_TIMEOUT",
        help="Seconds allowed per receipt",
    ),
    save_local: Path | None = typer.Option(
        None, "--save-local", help="Append completed extractions to this CSV file"
    ),
    as_json: bool = typer.Option(False, "--json", help="Print results as JSON"),
):
    """Run OCR and field extraction on receipt images."""
    if language not in SUPPORTED_LANGUAGES:
        typer.echo(
            f"Error: unsupported language '{language}'. "
            f"Choose one of: {', '.join(SUPPORTED_LANGUAGES)}",
            err=True,
        )
        raise typer.Exit(code=1)

    try:
        image_paths = collect_image_paths(paths)
    except FileNotFoundError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1) from e

    if not image_paths:
        typer.echo("No supported images found.", err=True)
        raise typer.Exit(code=1)

    try:
        ocr_engine = OCREngine()
        # Create the Vision client in the main thread before executor use
        _ = ocr_engine.client
    except Exception as e:
        typer.echo(f"Failed to initialize OCR engine: {e}", err=True)
        raise typer.Exit(code=1) from e

    progress = cli_errors_only if as_json else cli_progress
    extractor = ReceiptExtractor(ocr_engine, language=language, on_progress=progress)

    results = asyncio.run(
        run_pipeline(
            image_paths,
            extractor,
            timeout=timeout,
            exporter=LocalExporter() if save_local else None,
            export_path=save_local,
            on_progress=progress,
        )
    )

    if as_json:
        typer.echo(
            json.dumps([r.model_dump(mode="json") for r in results], indent=2)
        )
    else:
        for result in results:
            if result.extraction is None:
                continue
            typer.echo(f"{result.file_name}:")
            _echo_result(result.extraction)

    failed = [r for r in results if r.status is OCRStatus.FAILED]
    if failed:
        typer.echo(f"{len(failed)} of {len(results)} receipts failed.", err=True)
        raise typer.Exit(code=1)


@app.command()
def parse(
    text_file: Path = typer.Argument(..., help="File containing captured OCR text"),
    confidence: float = typer.Option(
        100.0, "--confidence", "-c", help="OCR confidence (0-100) of the text"
    ),
    as_json: bool = typer.Option(False, "--json", help="Print result as JSON"),
):
    """Extract receipt fields from previously captured OCR text."""
    if not text_file.is_file():
        typer.echo(f"Error: file not found: {text_file}", err=True)
        raise typer.Exit(code=1)
    if not 0.0 <= confidence <= 100.0:
        typer.echo("Error: confidence must be between 0 and 100", err=True)
        raise typer.Exit(code=1)

    try:
        text = text_file.read_text(encoding="utf-8")
    except UnicodeDecodeError as e:
        typer.echo(f"Error: {text_file} is not valid UTF-8 text: {e}", err=True)
        raise typer.Exit(code=1) from e

    document = RawDocument(text=text, confidence=confidence)
    extraction = extract_fields(document)
    if as_json:
        typer.echo(extraction.model_dump_json(indent=2))
    else:
        _echo_result(extraction)


def main():
    app()


if __name__ == "__main__":
    main()
