"""pileup-caller: genotype calling from pileup data at SNP panel positions."""

import json
import logging
import time
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console

from . import __version__
from .config import load_config
from .errors import ConfigurationError, PileupCallerError
from .export import eigenstrat_paths, export_eigenstrat, export_freqsum
from .filters import is_transition
from .parsers import read_pileup, read_sample_names, read_snp_file
from .pipeline import PileupCallerPipeline

logger = logging.getLogger(__name__)


def version_callback(value: bool) -> None:
    if value:
        print(__version__)
        raise typer.Exit()


app = typer.Typer(
    name="pileup-caller",
    help="Call genotypes from samtools mpileup output at SNP panel positions",
)
console = Console(stderr=True)


@app.callback()
def main_callback(
    version: Annotated[
        bool | None,
        typer.Option(
            "--version", callback=version_callback, is_eager=True, help="Show version and exit"
        ),
    ] = None,
) -> None:
    pass


def setup_logging(verbose: bool, quiet: bool) -> None:
    """Configure logging based on verbosity flags."""
    if quiet:
        level = logging.WARNING
    elif verbose:
        level = logging.DEBUG
    else:
        level = logging.INFO

    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%H:%M:%S",
    )
    logging.getLogger("pileup_caller").setLevel(level)


def _resolve_mode(random_haploid: bool, random_diploid: bool, majority_call: bool) -> str | None:
    chosen = [
        mode
        for mode, flag in (
            ("random-haploid", random_haploid),
            ("random-diploid", random_diploid),
            ("majority", majority_call),
        )
        if flag
    ]
    if len(chosen) > 1:
        raise ConfigurationError(
            "Choose only one of --random-haploid, --random-diploid and --majority-call"
        )
    return chosen[0] if chosen else None


def _resolve_transitions_mode(skip_transitions: bool, transitions_missing: bool) -> str | None:
    if skip_transitions and transitions_missing:
        raise ConfigurationError(
            "Choose only one of --skip-transitions and --transitions-missing"
        )
    if skip_transitions:
        return "skip-transitions"
    if transitions_missing:
        return "transitions-missing"
    return None


@app.command()
def call(
    snp_file: Annotated[
        Path,
        typer.Option(
            "--snp-file",
            "-f",
            help="Eigenstrat SNP file with the positions and alleles to call. "
            "Every position is written, with missing data where not covered",
        ),
    ],
    pileup: Annotated[
        str, typer.Option("--pileup", "-p", help="samtools mpileup file ('-' for stdin)")
    ] = "-",
    random_haploid: bool = typer.Option(
        False,
        "--random-haploid",
        help="Sample one read at random per site and call a haploid genotype from its allele",
    ),
    random_diploid: bool = typer.Option(
        False,
        "--random-diploid",
        help="Sample two reads without replacement and call a diploid genotype. "
        "Sites with a single read are always missing",
    ),
    majority_call: bool = typer.Option(
        False,
        "--majority-call",
        help="Call the allele supported by most reads, breaking ties at random",
    ),
    down_sampling: bool = typer.Option(
        False,
        "--down-sampling",
        help="With --majority-call, first draw --min-depth reads without replacement",
    ),
    seed: Annotated[
        int | None,
        typer.Option("--seed", help="Random seed. If not given, seed from system entropy"),
    ] = None,
    min_depth: Annotated[
        int | None,
        typer.Option("--min-depth", "-d", help="Minimum read depth for a call [default: 1]"),
    ] = None,
    skip_transitions: bool = typer.Option(
        False, "--skip-transitions", help="Leave transition SNPs out of the output"
    ),
    transitions_missing: bool = typer.Option(
        False, "--transitions-missing", help="Output transition SNPs with all calls missing"
    ),
    eigenstrat_out: Annotated[
        str | None,
        typer.Option(
            "--eigenstrat-out",
            "-e",
            help="Write Eigenstrat output to <PREFIX>geno.txt, <PREFIX>snp.txt and <PREFIX>ind.txt "
            "instead of FreqSum",
        ),
    ] = None,
    output: Annotated[
        Path | None,
        typer.Option("--output", "-o", help="FreqSum output file (default: stdout)"),
    ] = None,
    sample_names: Annotated[
        str | None,
        typer.Option("--sample-names", help="Comma-separated sample names, in pileup order"),
    ] = None,
    sample_name_file: Annotated[
        Path | None,
        typer.Option("--sample-name-file", help="File with one sample name per line"),
    ] = None,
    sample_pop_name: Annotated[
        str | None,
        typer.Option(
            "--sample-pop-name", help="Population label for the Eigenstrat ind file [default: Unknown]"
        ),
    ] = None,
    natural_chrom_order: bool = typer.Option(
        False,
        "--natural-chrom-order",
        help="Expect chromosomes sorted 1..22, X, Y, MT instead of as plain strings",
    ),
    strict_pileup: bool = typer.Option(
        False,
        "--strict-pileup",
        help="Fail on pileup positions that are not in the SNP panel",
    ),
    config_file: Annotated[
        Path | None, typer.Option("--config", "-c", help="TOML configuration file")
    ] = None,
    report: Annotated[
        Path | None, typer.Option("--report", "-r", help="Write JSON report to file")
    ] = None,
    log_file: Annotated[Path | None, typer.Option("--log", help="Write log to file")] = None,
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose logging"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Suppress non-error output"),
) -> None:
    """Call genotypes at SNP panel positions from a multi-sample pileup.

    Reads samtools mpileup output (stdin by default) sorted like the SNP
    file, and writes FreqSum to stdout or Eigenstrat files with --eigenstrat-out.
    """
    setup_logging(verbose, quiet)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(
            logging.Formatter(
                "%(asctime)s - %(name)s - %(levelname)s - %(message)s", datefmt="%Y-%m-%d %H:%M:%S"
            )
        )
        logging.getLogger("pileup_caller").addHandler(file_handler)

    if not snp_file.exists():
        console.print(f"[red]Error: SNP file not found: {snp_file}[/red]")
        raise typer.Exit(1)

    if pileup != "-" and not Path(pileup).exists():
        console.print(f"[red]Error: Pileup file not found: {pileup}[/red]")
        raise typer.Exit(1)

    start = time.monotonic()
    try:
        overrides = {
            "mode": _resolve_mode(random_haploid, random_diploid, majority_call),
            "transitions_mode": _resolve_transitions_mode(skip_transitions, transitions_missing),
            "min_depth": min_depth,
            "seed": seed,
            "sample_pop_name": sample_pop_name,
            "downsample": True if down_sampling else None,
            "chrom_order": "natural" if natural_chrom_order else None,
            "unmatched_pileup": "error" if strict_pileup else None,
        }
        settings = load_config(config_file, overrides)
        if not verbose and not quiet:
            logging.getLogger("pileup_caller").setLevel(settings.log_level)

        names = read_sample_names(sample_names, sample_name_file)
        pipeline = PileupCallerPipeline(settings, names)
        records = pipeline.run(read_snp_file(snp_file), read_pileup(pileup))

        if eigenstrat_out is not None:
            count = export_eigenstrat(records, eigenstrat_out, names, settings.sample_pop_name)
            destination = ", ".join(str(p) for p in eigenstrat_paths(eigenstrat_out))
        else:
            count = export_freqsum(records, names, pipeline.ploidy, output)
            destination = str(output) if output else "stdout"

    except (OSError, UnicodeDecodeError) as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1) from None
    except PileupCallerError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1) from None

    elapsed = time.monotonic() - start

    if not quiet:
        console.print(
            f"[green]✓[/green] Wrote {count:,} of {pipeline.stats.panel_sites:,} panel sites "
            f"to {destination}"
        )
        console.print(f"  Covered sites: {pipeline.stats.covered_sites:,}")

    if report:
        report_data = {
            "status": "success",
            "mode": pipeline.calling_config.mode.value,
            "min_depth": pipeline.calling_config.min_depth,
            "downsample": pipeline.calling_config.downsample,
            "seed": pipeline.calling_config.seed,
            "transitions_mode": settings.transitions_mode.value,
            "snp_file": str(snp_file),
            "pileup": pileup,
            "output": destination,
            "elapsed_seconds": round(elapsed, 3),
            "timestamp": time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime()),
            **pipeline.stats.to_dict(names),
        }
        with open(report, "w") as f:
            json.dump(report_data, f, indent=2)
            f.write("\n")
        if not quiet:
            console.print(f"  Report: {report}")


@app.command()
def classify(
    ref: str = typer.Argument(..., help="Reference allele"),
    alt: str = typer.Argument(..., help="Alternate allele"),
) -> None:
    """Classify a SNP as transition or transversion."""
    print("transition" if is_transition(ref, alt) else "transversion")
