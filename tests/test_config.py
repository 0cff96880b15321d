from datetime import timedelta

import pytest

from cwindow.config import BUNDLED_CONFIG, load_options
from cwindow.temporal_window import SelectionOptions


def test_bundled_config_matches_defaults():
    assert BUNDLED_CONFIG.exists()
    assert load_options() == SelectionOptions()


def test_custom_config(tmp_path):
    path = tmp_path / "window.yml"
    path.write_text(
        "selection:\n"
        "  granularity_minutes: 15\n"
        "  tie_break: latest\n"
        "  allow_partial_edge_samples: false\n",
        encoding="utf-8",
    )
    opts = load_options(path)
    assert opts.granularity == timedelta(minutes=15)
    assert opts.tie_break == "latest"
    assert opts.allow_partial_edge_samples is False


def test_invalid_tie_break(tmp_path):
    path = tmp_path / "window.yml"
    path.write_text("selection:\n  tie_break: sometimes\n", encoding="utf-8")
    with pytest.raises(ValueError, match="Invalid selection settings"):
        load_options(path)


def test_unparseable_yaml(tmp_path):
    path = tmp_path / "window.yml"
    path.write_text("selection: [unclosed\n", encoding="utf-8")
    with pytest.raises(ValueError, match="Failed to load config"):
        load_options(path)


@pytest.mark.parametrize("value", ['"false"', "0", "no-thanks"])
def test_partial_edges_must_be_boolean(tmp_path, value):
    path = tmp_path / "window.yml"
    path.write_text(f"selection:\n  allow_partial_edge_samples: {value}\n", encoding="utf-8")
    with pytest.raises(ValueError, match="allow_partial_edge_samples"):
        load_options(path)
