from .aggregate import Aggregate, CellAggregate
from .config import (
    SweepConfig,
    SELECTION_MODES,
    CELL_COLUMNS,
    parse_config,
    config_from_dict,
    validate_config
)
from .driver import run_sweep, run_replicate, exposure_effects
