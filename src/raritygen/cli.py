import logging
import os
import tempfile
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Annotated, TextIO

import srsly
import typer
from pydantic import ValidationError as PydanticValidationError

from raritygen.allocation.engine import (
    DEFAULT_MAX_RETRIES,
    DEFAULT_PROGRESS_EVERY,
    run_generation,
)
from raritygen.config import (
    EXPECTED_CATEGORY_COUNT,
    EXPECTED_VARIANT_COUNT,
    config_issues,
    config_summary,
    read_config,
)
from raritygen.core.errors import ConfigurationError, ValidationError
from raritygen.core.models import GenerationResult, RarityConfig
from raritygen.core.sampling import DEFAULT_SEED, make_rng
from raritygen.presets import reference_config_data
from raritygen.report import render_distribution, score_stats, tier_distribution

app = typer.Typer(help="Allocate rarity tiers and trait variants to a population.")


class _ResultRowError(Exception):
    def __init__(self, *, line_number: int, reason: str):
        self.line_number = line_number
        self.reason = reason
        super().__init__(reason)


def _expected_count(value: int) -> int | None:
    return None if value <= 0 else value


def _load_or_exit(
    config_file: Path,
    *,
    expected_categories: int,
    expected_variants: int,
    strict: bool,
    log_issues: bool = True,
) -> RarityConfig:
    try:
        return read_config(
            config_file,
            expected_categories=_expected_count(expected_categories),
            expected_variants=_expected_count(expected_variants),
            strict=strict,
            log_issues=log_issues,
        )
    except ConfigurationError as err:
        typer.echo(f"Error: {err}", err=True)
        raise typer.Exit(1) from err


def _iter_validated_results(input_file: Path) -> Iterator[GenerationResult]:
    with input_file.open("r", encoding="utf-8") as input_handle:
        for line_number, line in enumerate(input_handle, start=1):
            stripped = line.strip()
            if not stripped:
                continue
            try:
                raw = srsly.json_loads(stripped)
            except ValueError as err:
                raise _ResultRowError(
                    line_number=line_number,
                    reason=f"malformed JSON ({err})",
                ) from err
            try:
                yield GenerationResult.model_validate(raw)
            except PydanticValidationError as err:
                first_error = err.errors(include_url=False)[0]
                loc = ".".join(str(item) for item in first_error["loc"])
                message = first_error["msg"]
                raise _ResultRowError(
                    line_number=line_number,
                    reason=f"invalid result row at '{loc}': {message}",
                ) from err


def _render_result_row_error(input_file: Path, error: _ResultRowError) -> str:
    return (
        f"Error: invalid JSONL row in {input_file} at line "
        f"{error.line_number}: {error.reason}"
    )


def _safe_unlink(path: Path) -> None:
    try:
        path.unlink()
    except FileNotFoundError:
        return


@contextmanager
def _atomic_output(output: Path) -> Iterator[TextIO]:
    fd, tmp_name = tempfile.mkstemp(
        prefix=f".{output.name}.",
        suffix=".tmp",
        dir=output.parent,
    )
    tmp = Path(tmp_name)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            yield handle
        os.replace(tmp, output)
    except Exception:
        _safe_unlink(tmp)
        raise


def _write_result_line(handle: TextIO, result: GenerationResult) -> None:
    handle.write(srsly.json_dumps(result.model_dump(mode="json")))
    handle.write("\n")


@app.callback()
def main(
    log_level: Annotated[
        str,
        typer.Option(
            "--log-level",
            help="Logging level: DEBUG, INFO, WARNING, ERROR",
        ),
    ] = "WARNING",
) -> None:
    level = logging.getLevelName(log_level.upper())
    if not isinstance(level, int):
        raise typer.BadParameter(f"Unknown log level '{log_level}'")
    logging.basicConfig(
        level=level,
        format="%(levelname)s %(name)s: %(message)s",
        force=True,
    )


@app.command()
def preset(
    output: Annotated[Path, typer.Argument(help="Output JSON file")],
) -> None:
    """Write the reference configuration."""
    srsly.write_json(output, reference_config_data())
    typer.echo(f"Wrote reference configuration to {output}")


@app.command()
def check(
    config_file: Annotated[
        Path, typer.Argument(help="Rarity config (JSON or YAML)")
    ],
    strict: Annotated[
        bool,
        typer.Option("--strict", help="Treat warnings as errors"),
    ] = False,
    expected_categories: Annotated[
        int,
        typer.Option(
            "--expected-categories", help="Required category count (0: any)"
        ),
    ] = EXPECTED_CATEGORY_COUNT,
    expected_variants: Annotated[
        int,
        typer.Option(
            "--expected-variants",
            help="Required variants per category (0: any)",
        ),
    ] = EXPECTED_VARIANT_COUNT,
) -> None:
    """Validate a configuration and print its summary."""
    config = _load_or_exit(
        config_file,
        expected_categories=expected_categories,
        expected_variants=expected_variants,
        strict=strict,
        log_issues=False,
    )
    typer.echo(config_summary(config))
    issues = config_issues(config)
    if not issues:
        typer.echo("\nNo issues found.")
        return
    typer.echo(f"\n{len(issues)} issue(s):")
    for issue in issues:
        typer.echo(
            f"  [{issue.severity.value}] {issue.code} {issue.location}: "
            f"{issue.message}"
        )


@app.command()
def generate(
    config_file: Annotated[
        Path, typer.Argument(help="Rarity config (JSON or YAML)")
    ],
    output: Annotated[
        Path, typer.Option("--output", "-o", help="Output JSONL file")
    ],
    count: Annotated[
        int | None,
        typer.Option(
            "--count", "-n", help="Items to generate (default: population)"
        ),
    ] = None,
    seed: Annotated[
        int, typer.Option("--seed", "-s", help="Random seed")
    ] = DEFAULT_SEED,
    rng_kind: Annotated[
        str,
        typer.Option("--rng", help="Generator: lcg (reference) or mt"),
    ] = "lcg",
    max_retries: Annotated[
        int,
        typer.Option("--max-retries", help="Attempts per item"),
    ] = DEFAULT_MAX_RETRIES,
    strict: Annotated[
        bool,
        typer.Option("--strict", help="Fail on config warnings"),
    ] = False,
    summary_path: Annotated[
        Path | None,
        typer.Option("--summary", help="Write the run summary as JSON"),
    ] = None,
    validate: Annotated[
        bool,
        typer.Option(
            "--validate/--no-validate",
            help="Refuse to write output unless every quota reaches zero",
        ),
    ] = True,
    progress_every: Annotated[
        int,
        typer.Option("--progress-every", help="Log progress every N items"),
    ] = DEFAULT_PROGRESS_EVERY,
    expected_categories: Annotated[
        int,
        typer.Option(
            "--expected-categories", help="Required category count (0: any)"
        ),
    ] = EXPECTED_CATEGORY_COUNT,
    expected_variants: Annotated[
        int,
        typer.Option(
            "--expected-variants",
            help="Required variants per category (0: any)",
        ),
    ] = EXPECTED_VARIANT_COUNT,
) -> None:
    """Generate a population and write one JSON line per item."""
    if count is not None and count < 0:
        typer.echo("Error: --count must be >= 0", err=True)
        raise typer.Exit(1)
    if max_retries < 1:
        typer.echo("Error: --max-retries must be >= 1", err=True)
        raise typer.Exit(1)
    try:
        rng = make_rng(rng_kind, seed)
    except ValueError as err:
        raise typer.BadParameter(str(err), param_hint="--rng") from err

    config = _load_or_exit(
        config_file,
        expected_categories=expected_categories,
        expected_variants=expected_variants,
        strict=strict,
    )

    results, summary = run_generation(
        config,
        count=count,
        rng=rng,
        max_retries=max_retries,
        progress_every=progress_every,
        validate=False,
    )

    typer.echo(
        f"Successful: {summary.succeeded}, Failed: {summary.failed}, "
        f"Attempts: {summary.total_attempts}"
    )
    if summary.succeeded:
        typer.echo(
            f"Score min/mean/max: {summary.min_score}/"
            f"{summary.mean_score:.2f}/{summary.max_score}"
        )
    typer.echo("Tier distribution:")
    typer.echo(render_distribution(summary.tier_distribution, config))

    if summary_path is not None:
        srsly.write_json(summary_path, summary.model_dump(mode="json"))

    if validate and summary.issues:
        typer.echo(f"Error: {ValidationError(summary.issues)}", err=True)
        typer.echo(f"Output not written to {output}", err=True)
        raise typer.Exit(1)

    written = 0
    try:
        with _atomic_output(output) as handle:
            for result in results:
                if result.success:
                    _write_result_line(handle, result)
                    written += 1
    except OSError as err:
        typer.echo(f"Error: file operation failed for {output}: {err}", err=True)
        raise typer.Exit(1) from err

    typer.echo(f"Generated {written} items to {output}")
    if summary.failed:
        raise typer.Exit(1)


@app.command()
def info(
    input_file: Annotated[Path, typer.Argument(help="Results JSONL file")],
) -> None:
    """Show tier counts and score stats of a results file."""
    if not input_file.exists():
        typer.echo(f"Error: results file not found: {input_file}", err=True)
        raise typer.Exit(1)
    try:
        results = list(_iter_validated_results(input_file))
    except _ResultRowError as err:
        typer.echo(_render_result_row_error(input_file, err), err=True)
        raise typer.Exit(1) from err

    stats = score_stats(results)
    typer.echo(f"{input_file}: {len(results)} items")
    for tier_id, count in tier_distribution(results).items():
        typer.echo(f"  {tier_id}: {count}")
    if stats.count:
        typer.echo(
            f"Score min/mean/max: {stats.min_score}/"
            f"{stats.mean_score:.2f}/{stats.max_score}"
        )
