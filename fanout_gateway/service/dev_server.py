from __future__ import annotations

import uvicorn

from fanout_gateway.base.logging import configure_logger
from fanout_gateway.config.env import resolve_log_file, resolve_service_bind


def main() -> None:
    """Start the development server for the gateway FastAPI app.

    Host/port and reload behavior are controlled via environment variables:

    - GATEWAY_SERVICE_HOST: interface to bind (default "127.0.0.1")
    - GATEWAY_SERVICE_PORT: port to bind (default 8091)
    - GATEWAY_SERVICE_RELOAD: "true"/"false" to toggle auto-reload (default False)
    - GATEWAY_LOG_FILE: optional rotating JSON log file next to stderr output
    """
    host, port, reload_enabled = resolve_service_bind()
    configure_logger(file_path=resolve_log_file())

    uvicorn.run(
        "fanout_gateway.service.app:app",
        host=host,
        port=port,
        reload=reload_enabled,
    )


if __name__ == "__main__":
    main()
