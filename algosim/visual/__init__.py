"""Browser front end for the workbench.

Usage::

    from algosim import Workbench
    from algosim.visual import serve

    serve(Workbench())  # serves the JSON API, step through interactively
"""

from __future__ import annotations

import webbrowser
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from algosim.workbench import Workbench

__all__ = ["serve"]


def serve(
    bench: Workbench,
    *,
    host: str = "127.0.0.1",
    port: int = 8765,
    open_browser: bool = False,
) -> None:
    """Serve the workbench API. Blocks until the server is stopped (Ctrl+C).

    Args:
        bench: The workbench to expose.
        host: Bind address for the web server.
        port: Port for the web server.
        open_browser: Whether to open the API docs in the default browser.
    """
    try:
        import uvicorn
    except ImportError:
        raise ImportError(
            "The visual server requires extra dependencies.\n"
            "Install them with:  pip install algo-simulator[visual]"
        ) from None

    from algosim.visual.bridge import WorkbenchBridge
    from algosim.visual.server import create_app

    bridge = WorkbenchBridge(bench)
    app = create_app(bridge)

    if open_browser:
        webbrowser.open(f"http://{host}:{port}/docs")

    try:
        uvicorn.run(app, host=host, port=port, log_level="warning")
    finally:
        bridge.close()
