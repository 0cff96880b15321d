from datetime import timedelta
from pathlib import Path
from typing import Optional

import click
import yaml

from cwindow.temporal_window import SelectionOptions

# Path to the bundled default config within the package
PACKAGE_DIR    = Path(__file__).resolve().parent
BUNDLED_CONFIG = PACKAGE_DIR / "configs" / "window.yml"


def load_options(config_path: Optional[Path] = None) -> SelectionOptions:
    """
    Build SelectionOptions from the `selection` section of a YAML config.
    A caller-supplied file overrides the bundled one.
    """
    config = Path(config_path) if config_path else BUNDLED_CONFIG
    click.echo(f"🔧 Using config: {config}", err=True)

    try:
        cfg = yaml.safe_load(config.read_text(encoding="utf-8")) or {}
    except (OSError, yaml.YAMLError) as e:
        raise ValueError(f"Failed to load config {config}: {e}") from e

    sel = cfg.get("selection") or {}
    minutes = sel.get("granularity_minutes")
    partial = sel.get("allow_partial_edge_samples", True)
    try:
        if not isinstance(partial, bool):
            raise ValueError(f"allow_partial_edge_samples must be true or false, got {partial!r}")
        return SelectionOptions(
            granularity=timedelta(minutes=float(minutes)) if minutes is not None else None,
            tie_break=str(sel.get("tie_break", "earliest")),
            allow_partial_edge_samples=partial,
            tie_epsilon=float(sel.get("tie_epsilon", 1e-9)),
        )
    except (TypeError, ValueError) as e:
        raise ValueError(f"Invalid selection settings in {config}: {e}") from e
