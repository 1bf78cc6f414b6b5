"""GitHub Actions step outputs."""

import logging
import os
from pathlib import Path

logger = logging.getLogger(__name__)


def set_outputs(outputs: dict[str, object]) -> None:
    """Publish step outputs for the surrounding workflow.

    Appends ``name=value`` lines to the file named by ``$GITHUB_OUTPUT``.
    Outside Actions (local runs, older runners) the legacy ``::set-output``
    workflow commands are printed instead.
    """
    output_path = os.environ.get("GITHUB_OUTPUT")
    if output_path:
        with Path(output_path).open("a", encoding="utf-8") as fh:
            for name, value in outputs.items():
                fh.write(f"{name}={value}\n")
        logger.debug(f"Wrote {len(outputs)} step outputs to {output_path}")
        return

    for name, value in outputs.items():
        print(f"::set-output name={name}::{value}")
