"""Command-line entry points for hashing and verifying block files."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Optional

import typer

from blockdigest.config import BlockDigestConfig, ConfigError, dump_example_config, load_config
from blockdigest.metadata.errors import HashError
from blockdigest.metadata.files import gather_file_stats, read_files_document, verify_files, write_files_document
from blockdigest.metadata.hash import calculate_hash
from blockdigest.util.logging import configure_logging
from blockdigest.util.manifest import write_manifest

app = typer.Typer(add_completion=False, help="Block content-integrity hashing CLI")

EXIT_MISMATCH = 1
EXIT_DIGEST_UNAVAILABLE = 2


def _setup(config_path: Optional[Path], hash_func: Optional[str] = None) -> tuple[BlockDigestConfig, logging.Logger]:
    overrides: dict[str, Any] = {}
    if hash_func is not None:
        overrides["hashing.hash_func"] = hash_func
    try:
        cfg = load_config(config_path, overrides=overrides)
    except ConfigError as exc:
        typer.echo(f"Configuration error: {exc}", err=True)
        raise typer.Exit(code=EXIT_DIGEST_UNAVAILABLE) from exc
    logger = configure_logging(level=cfg.logging.level, log_path=cfg.logging.log_path)
    return cfg, logger


def _storage_root(cfg: BlockDigestConfig) -> Path:
    return Path(cfg.runtime.storage_root).expanduser().resolve()


@app.command("hash")
def hash_file(
    path: Path = typer.Argument(..., help="File to hash"),
    hash_func: Optional[str] = typer.Option(None, "--hash-func", help="Hash function (default from config)"),
    config: Optional[Path] = typer.Option(None, "--config", help="Config file (YAML/TOML/JSON)"),
) -> None:
    """Print the object hash of a single file as JSON."""

    cfg, logger = _setup(config, hash_func)
    try:
        digest = calculate_hash(path, cfg.hashing.hash_func, logger, chunk_size=cfg.hashing.chunk_size_bytes)
    except HashError as exc:
        logger.error("Digest unavailable for %s: %s", path, exc)
        raise typer.Exit(code=EXIT_DIGEST_UNAVAILABLE) from exc

    typer.echo(json.dumps(digest.model_dump(by_alias=True, mode="json")))


@app.command()
def gather(
    block_dir: Path = typer.Argument(..., help="Block directory containing chunks/ and index"),
    hash_func: Optional[str] = typer.Option(None, "--hash-func", help="Hash function, NONE to skip hashing"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write the files document here"),
    config: Optional[Path] = typer.Option(None, "--config", help="Config file (YAML/TOML/JSON)"),
) -> None:
    """Gather size and hash of every file of a block."""

    cfg, logger = _setup(config, hash_func)
    try:
        files = gather_file_stats(block_dir, cfg.hashing.hash_func, logger, chunk_size=cfg.hashing.chunk_size_bytes)
    except HashError as exc:
        logger.error("Could not gather file stats for %s: %s", block_dir, exc)
        raise typer.Exit(code=EXIT_DIGEST_UNAVAILABLE) from exc

    if output:
        write_files_document(output, files)
        logger.info("Wrote %s entries to %s", len(files), output)
    else:
        typer.echo(json.dumps({"files": [f.to_dict() for f in files]}, indent=2))

    write_manifest(
        "gather",
        {"block_dir": str(block_dir), "hash_func": cfg.hashing.hash_func.value, "files": len(files)},
        root=_storage_root(cfg),
    )


@app.command()
def verify(
    block_dir: Path = typer.Argument(..., help="Block directory to verify"),
    files_document: Path = typer.Argument(..., help="JSON document with the recorded 'files' list"),
    fail_fast: Optional[bool] = typer.Option(None, "--fail-fast/--no-fail-fast", help="Stop at the first mismatch"),
    config: Optional[Path] = typer.Option(None, "--config", help="Config file (YAML/TOML/JSON)"),
) -> None:
    """Recompute recorded hashes of a block and report mismatches."""

    cfg, logger = _setup(config)
    try:
        recorded = read_files_document(files_document)
    except (OSError, ValueError) as exc:
        typer.echo(f"Could not read {files_document}: {exc}", err=True)
        raise typer.Exit(code=EXIT_DIGEST_UNAVAILABLE) from exc

    stop_early = cfg.runtime.fail_fast if fail_fast is None else fail_fast
    mismatches = verify_files(
        block_dir, recorded, logger, fail_fast=stop_early, chunk_size=cfg.hashing.chunk_size_bytes
    )

    for mismatch in mismatches:
        typer.echo(f"MISMATCH {mismatch.rel_path}: {mismatch.reason}")

    write_manifest(
        "verify",
        {
            "block_dir": str(block_dir),
            "checked": len(recorded),
            "mismatches": [m.model_dump() for m in mismatches],
        },
        root=_storage_root(cfg),
    )

    if mismatches:
        raise typer.Exit(code=EXIT_MISMATCH)
    typer.echo("OK")


@app.command("dump-config")
def dump_config(dest: Path = typer.Argument(..., help="Destination YAML or JSON file")) -> None:
    """Write the default configuration to a file."""

    try:
        dump_example_config(dest)
    except ConfigError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(code=EXIT_DIGEST_UNAVAILABLE) from exc
    typer.echo(f"Wrote {dest}")


def main() -> None:
    app()


__all__ = ["main", "app"]
