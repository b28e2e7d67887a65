"""Local files produced by a run."""

import logging
import shutil
from collections.abc import Mapping
from pathlib import Path

log = logging.getLogger(__name__)


def save_outputs(output_dir: Path, outputs: Mapping[str, str]) -> None:
    """Write each scenario's output tail to ``<output_dir>/<scenario>.log``."""
    output_dir.mkdir(parents=True, exist_ok=True)
    for scenario, output in outputs.items():
        (output_dir / f"{scenario}.log").write_text(output)
    log.info("Saved %d output file(s) to %s", len(outputs), output_dir)


def cleanup_files(output_dir: Path, results_file: Path) -> None:
    """Remove the output directory and the results file, if present."""
    if output_dir.exists():
        shutil.rmtree(output_dir)
        log.info("Removed %s", output_dir)
    if results_file.exists():
        results_file.unlink()
        log.info("Removed %s", results_file)
