"""Command-line interface for the statement extractor."""

import argparse
import sys
from pathlib import Path

from dotenv import load_dotenv
from rich.console import Console
from rich.progress import BarColumn, Progress, SpinnerColumn, TextColumn
from rich.table import Table

from finpal_extractor import __version__
from finpal_extractor.config import Config, ConfigError, load_config
from finpal_extractor.utils.logging_config import get_logger, setup_logging

# Load environment variables from .env file (if it exists)
load_dotenv()

console = Console()
logger = get_logger(__name__)


def create_parser() -> argparse.ArgumentParser:
    """Create and configure the argument parser.

    Returns:
        Configured ArgumentParser.
    """
    parser = argparse.ArgumentParser(
        prog="finpal-extractor",
        description=(
            "Extract, normalize and categorize transactions from Indian UPI "
            "and bank statements (CSV, XLS/XLSX, PDF)"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s phonepe_statement.pdf
  %(prog)s -i ./statements -o result.json --csv transactions.csv
  %(prog)s gpay.csv --no-ai
  %(prog)s --inspect statement.pdf
        """,
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    parser.add_argument(
        "files",
        nargs="*",
        type=Path,
        help="Statement files to process",
    )

    parser.add_argument(
        "-i", "--input-dir",
        type=Path,
        default=None,
        help="Directory containing statement files",
    )

    parser.add_argument(
        "-o", "--output",
        type=Path,
        default=None,
        help="Write the JSON result to this file (default: print to stdout)",
    )

    parser.add_argument(
        "--csv",
        type=Path,
        default=None,
        metavar="FILE",
        help="Also write a flat transactions CSV",
    )

    parser.add_argument(
        "--category-csv",
        type=Path,
        default=None,
        metavar="FILE",
        help="Also write debit totals per category as CSV",
    )

    parser.add_argument(
        "-c", "--config",
        type=Path,
        default=None,
        help="Path to settings.yaml",
    )

    parser.add_argument(
        "--categories",
        type=Path,
        default=None,
        help="Path to categories.yaml",
    )

    parser.add_argument(
        "--config-dir",
        type=Path,
        default=Path("config"),
        help="Configuration directory (default: ./config)",
    )

    parser.add_argument(
        "--no-ai",
        action="store_true",
        help="Disable AI categorization fallback",
    )

    parser.add_argument(
        "--inspect",
        action="store_true",
        help="Show extracted text details instead of processing",
    )

    parser.add_argument(
        "--validate-only",
        action="store_true",
        help="Only validate configuration files",
    )

    parser.add_argument(
        "-v", "--verbose",
        action="count",
        default=0,
        help="Increase verbosity (-v for INFO, -vv for DEBUG)",
    )

    return parser


def get_log_level(verbosity: int) -> str:
    """Convert verbosity count to log level.

    Args:
        verbosity: Number of -v flags.

    Returns:
        Log level string.
    """
    if verbosity >= 2:
        return "DEBUG"
    elif verbosity >= 1:
        return "INFO"
    else:
        return "WARNING"


def validate_output_path(path: Path, base_dir: Path | None = None) -> Path:
    """Validate that output path is within allowed directory.

    Prevents path traversal by ensuring the resolved path is within the
    base directory (defaults to current working directory).

    Args:
        path: The path to validate.
        base_dir: Base directory to constrain paths within (default: cwd).

    Returns:
        The resolved, validated path.

    Raises:
        ValueError: If the path escapes the allowed directory.
    """
    if base_dir is None:
        base_dir = Path.cwd()

    resolved_base = base_dir.resolve()
    resolved_path = (base_dir / path).resolve()

    try:
        resolved_path.relative_to(resolved_base)
    except ValueError:
        raise ValueError(
            f"Invalid path: '{path}' escapes the allowed directory. "
            f"Paths must be within '{resolved_base}'"
        ) from None

    return resolved_path


def validate_config(args: argparse.Namespace) -> int:
    """Validate configuration files.

    Args:
        args: Parsed command-line arguments.

    Returns:
        0 if valid, 1 if errors found.
    """
    console.print("[bold]Validating configuration files...[/bold]\n")

    warnings = []
    config_dir = args.config_dir

    settings_path = args.config or (config_dir / "settings.yaml")
    if settings_path.exists():
        console.print(f"[green]✓[/green] Settings: {settings_path}")
    else:
        warnings.append(f"Settings file not found: {settings_path} (defaults apply)")

    categories_path = args.categories or (config_dir / "categories.yaml")
    if categories_path.exists():
        console.print(f"[green]✓[/green] Categories: {categories_path}")
    else:
        warnings.append(f"Categories file not found: {categories_path} (built-in taxonomy applies)")

    try:
        config = load_config(
            settings_path=args.config,
            categories_path=args.categories,
            config_dir=config_dir,
        )
    except (ConfigError, FileNotFoundError) as e:
        console.print(f"\n[red]Errors:[/red]\n  - Failed to load configuration: {e}")
        return 1

    taxonomy = config.taxonomy
    console.print("\n[green]✓[/green] Configuration loaded successfully")
    console.print(f"  - {len(taxonomy.categories)} categories")
    console.print(f"  - {len(taxonomy.merchant_rules)} merchant rules")
    console.print(f"  - {len(taxonomy.keyword_rules)} keyword rules")
    console.print(f"  - {len(taxonomy.special_rules)} special-pattern rules")
    console.print(f"  - AI fallback: {'enabled' if config.ai.enabled else 'disabled'} ({config.ai.model})")

    if warnings:
        console.print("\n[yellow]Warnings:[/yellow]")
        for w in warnings:
            console.print(f"  - {w}")

    console.print("\n[green]Configuration is valid.[/green]")
    return 0


def collect_files(args: argparse.Namespace) -> list[Path]:
    """Combine explicit file arguments with files discovered in --input-dir.

    Args:
        args: Parsed command-line arguments.

    Returns:
        Paths in argument order, then discovered files sorted by name.

    Raises:
        NotADirectoryError: If --input-dir is not a directory.
    """
    from finpal_extractor.parsers import discover_files

    files = list(args.files)
    if args.input_dir is not None:
        if not args.input_dir.is_dir():
            raise NotADirectoryError(f"Not a directory: {args.input_dir}")
        files.extend(f for f in discover_files(args.input_dir) if f not in files)
    return files


def run_inspect(files: list[Path], config: Config) -> int:
    """Print inspection reports for each file.

    Args:
        files: Files to inspect.
        config: Application configuration.

    Returns:
        Exit code.
    """
    from finpal_extractor.parsers import ParseError
    from finpal_extractor.processing import StatementPipeline

    pipeline = StatementPipeline(config, use_ai=False)
    exit_code = 0

    for file_path in files:
        try:
            report = pipeline.inspect_file(file_path)
        except (ParseError, OSError) as e:
            console.print(f"[red]{file_path.name}: {e}[/red]")
            exit_code = 1
            continue

        console.print(f"\n[bold]{report.file_name}[/bold] ({report.source.value})")
        console.print(f"  Units (pages/rows): {report.unit_count}")
        console.print(f"  Text length: {report.text_length}")
        console.print(f"  Rupee symbol: {'yes' if report.has_rupee_symbol else 'no'}")
        console.print(f"  Date pattern: {'yes' if report.has_date_pattern else 'no'}")
        console.print(f"  Amount pattern: {'yes' if report.has_amount_pattern else 'no'}")
        console.print("  First lines:")
        for number, line in enumerate(report.first_lines, start=1):
            console.print(f"    {number:>3}: {line}", markup=False)

    return exit_code


def display_summary(results: list, errors: dict[str, str]) -> None:
    """Display a per-file processing summary table.

    Args:
        results: ProcessingResult objects.
        errors: File name to error message for failed files.
    """
    table = Table(title="Processing Summary")
    table.add_column("File")
    table.add_column("Source")
    table.add_column("Strategy")
    table.add_column("Confidence")
    table.add_column("Transactions", justify="right")
    table.add_column("Debits", justify="right")
    table.add_column("Credits", justify="right")

    for result in results:
        summary = result.summary
        table.add_row(
            result.file_name,
            result.source.value,
            result.strategy or "-",
            result.confidence.value,
            str(summary.total_transactions),
            f"₹{summary.total_debits:,.2f}",
            f"₹{summary.total_credits:,.2f}",
        )
    for file_name, message in errors.items():
        table.add_row(file_name, "-", "[red]failed[/red]", "-", "-", "-", "-")

    console.print(table)

    for result in results:
        for warning in result.warnings:
            console.print(f"[yellow]{result.file_name}: {warning}[/yellow]")
    for file_name, message in errors.items():
        console.print(f"[red]{file_name}: {message}[/red]")


def create_progress() -> Progress:
    """Create a progress display.

    Returns:
        Rich Progress instance.
    """
    return Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        TextColumn("[progress.percentage]{task.percentage:>3.0f}%"),
        console=Console(stderr=True),
    )


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the CLI.

    Args:
        argv: Arguments (default: sys.argv[1:]).

    Returns:
        Exit code (0 for success, non-zero for errors).
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    log_level = get_log_level(args.verbose)
    setup_logging(level=log_level, console_output=args.verbose > 0)

    if args.validate_only:
        return validate_config(args)

    try:
        config = load_config(
            settings_path=args.config,
            categories_path=args.categories,
            config_dir=args.config_dir,
        )
    except (ConfigError, FileNotFoundError) as e:
        console.print(f"[red]Error: {e}[/red]")
        console.print("Run with --validate-only to check configuration files.")
        return 1

    if config.logging.file:
        setup_logging(
            level=log_level if args.verbose else config.logging.level,
            log_file=config.logging.file,
            console_output=args.verbose > 0,
        )

    try:
        files = collect_files(args)
    except NotADirectoryError as e:
        console.print(f"[red]Error: {e}[/red]")
        return 1

    if not files:
        console.print("[red]Error: no input files (pass files or --input-dir)[/red]")
        parser.print_usage()
        return 1

    if args.inspect:
        return run_inspect(files, config)

    try:
        output_path = validate_output_path(args.output) if args.output else None
        csv_path = validate_output_path(args.csv) if args.csv else None
        category_csv_path = validate_output_path(args.category_csv) if args.category_csv else None
    except ValueError as e:
        console.print(f"[red]Error: {e}[/red]")
        return 1

    from finpal_extractor.output import CSVExporter, results_to_json, write_json
    from finpal_extractor.parsers import ParseError, get_detector
    from finpal_extractor.processing import StatementPipeline

    detector = get_detector()
    pipeline = StatementPipeline(config, use_ai=not args.no_ai, detector=detector)

    results = []
    errors: dict[str, str] = {}

    with create_progress() as progress:
        task = progress.add_task("Processing statements...", total=len(files))

        for file_path in files:
            progress.update(task, description=f"Processing {file_path.name}")
            try:
                detector.detect_extractor(file_path)
                detector.check_size(file_path, config.extraction.max_file_size_bytes)
                results.append(pipeline.process_file(file_path))
            except ParseError as e:
                errors[file_path.name] = str(e)
                logger.warning(f"{file_path.name}: {e}")
            except OSError as e:
                errors[file_path.name] = f"Cannot read file: {e}"
                logger.error(f"{file_path.name}: {e}")
            progress.update(task, advance=1)

    ai_usage = None
    if pipeline.classifier is not None and pipeline.classifier.client.usage_stats.total_requests:
        ai_usage = pipeline.classifier.client.usage_stats.to_dict()

    written: list[Path] = []
    exporter = CSVExporter()
    if csv_path is not None and results:
        written.append(exporter.export(csv_path, results))
    if category_csv_path is not None and results:
        written.append(exporter.export_category_summary(category_csv_path, results))

    if output_path is None:
        # stdout carries only the JSON
        print(results_to_json(results, errors, ai_usage))
    else:
        write_json(output_path, results, errors, ai_usage)
        console.print(f"[green]JSON written to {output_path}[/green]")
        for path in written:
            console.print(f"[green]CSV written to {path}[/green]")
        display_summary(results, errors)
        if ai_usage is not None:
            console.print(pipeline.classifier.client.get_usage_summary(), markup=False)

    return 1 if errors else 0


if __name__ == "__main__":
    sys.exit(main())
