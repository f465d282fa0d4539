"""
Capability switches for the grid editor.

Every optional behaviour of the editor is a named boolean on one immutable
configuration object; hosts build it once (from code or a JSON mapping) and
pass it to ``TableEditor``.
"""
import json
import logging
from dataclasses import dataclass, fields
from typing import Any, Dict, Mapping

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TableConfig:
    """
    Editor configuration (immutable).

    Attributes:
        enable_cell_merging: Merge/unmerge actions are available
        enable_cell_blanking: Blank/unblank actions are available
        enable_checkbox: Cells carry a checkbox driving the blocked flag
        enable_cell_editing: Cell text values can be edited
        show_add_row_button: "Add row" entry point is exposed
        show_add_column_button: "Add column" entry point is exposed
        show_generate_button: "Generate table" entry point is exposed
        default_rows: Rows used when neither snapshot nor host supply a size
        default_columns: Columns used when neither snapshot nor host supply a size
        save_settle_ms: Delay before a finished save stops masking inbound updates
    """
    enable_cell_merging: bool = True
    enable_cell_blanking: bool = True
    enable_checkbox: bool = True
    enable_cell_editing: bool = True
    show_add_row_button: bool = True
    show_add_column_button: bool = True
    show_generate_button: bool = True
    default_rows: int = 3
    default_columns: int = 3
    save_settle_ms: int = 100

    @property
    def selection_allowed(self) -> bool:
        """Selection only makes sense when merging or blanking is enabled."""
        return self.enable_cell_merging or self.enable_cell_blanking

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'TableConfig':
        """
        Build a config from a mapping.

        Unknown keys and values of the wrong type are logged and ignored, so
        the field keeps its default. Switches only accept real booleans.
        """
        known = {f.name: f for f in fields(cls)}
        values: Dict[str, Any] = {}
        for key, value in data.items():
            if key not in known:
                logger.warning(f"Ignoring unknown config key: {key}")
                continue
            if known[key].type in (int, "int"):
                if isinstance(value, bool):
                    logger.warning(f"Ignoring non-integer value for {key}: {value!r}")
                    continue
                try:
                    values[key] = int(value)
                except (TypeError, ValueError):
                    logger.warning(f"Ignoring non-integer value for {key}: {value!r}")
            elif isinstance(value, bool):
                values[key] = value
            else:
                logger.warning(f"Ignoring non-boolean value for {key}: {value!r}")
        return cls(**values)


def load_config(filename: str) -> TableConfig:
    """Load a TableConfig from a JSON file."""
    with open(filename, 'r') as f:
        data = json.load(f)
    if not isinstance(data, dict):
        raise ValueError(f"Config file must contain a JSON object: {filename}")
    return TableConfig.from_dict(data)
