"""Entry point for serving the workbench API.

Usage:
    python -m algosim.visual

Reads ``ALGOSIM_*`` environment variables for logging and engine defaults.
"""

from algosim.config import EngineConfig
from algosim.logging_config import configure_from_env
from algosim.visual import serve
from algosim.workbench import Workbench

if __name__ == "__main__":
    configure_from_env()
    serve(Workbench(EngineConfig.from_env()))
