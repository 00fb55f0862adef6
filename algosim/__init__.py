"""Step-by-step simulations of graph, maze and consensus algorithms.

Logging is silent by default. Enable it with one of the helpers::

    import algosim
    algosim.enable_console_logging("DEBUG")

or set ``ALGOSIM_LOGGING=DEBUG`` and call ``algosim.configure_from_env()``.
"""

import logging

from algosim.config import EngineConfig
from algosim.core import (
    ControllerState,
    ExecutorKind,
    RunOutcome,
    Step,
    StepController,
    StepKind,
    StepTrace,
    TraceEntry,
    WorkbenchSnapshot,
)
from algosim.edits import edit_from_dict
from algosim.errors import AlgosimError, TopologyError
from algosim.logging_config import (
    configure_from_env,
    disable_logging,
    enable_console_logging,
    enable_file_logging,
    enable_json_file_logging,
    enable_json_logging,
    set_level,
    set_module_level,
)
from algosim.models import Graph, Grid, PaxosCluster, PbftCluster
from algosim.workbench import Workbench

logging.getLogger(__name__).addHandler(logging.NullHandler())

__version__ = "0.1.0"

__all__ = [
    "AlgosimError",
    "ControllerState",
    "EngineConfig",
    "ExecutorKind",
    "Graph",
    "Grid",
    "PaxosCluster",
    "PbftCluster",
    "RunOutcome",
    "Step",
    "StepController",
    "StepKind",
    "StepTrace",
    "TopologyError",
    "TraceEntry",
    "Workbench",
    "WorkbenchSnapshot",
    "configure_from_env",
    "disable_logging",
    "edit_from_dict",
    "enable_console_logging",
    "enable_file_logging",
    "enable_json_file_logging",
    "enable_json_logging",
    "set_level",
    "set_module_level",
]
