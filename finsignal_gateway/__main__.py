"""Run the gateway with uvicorn: python -m finsignal_gateway"""

import uvicorn
from finsignal_gateway.config import settings


def main() -> None:
    uvicorn.run(
        "finsignal_gateway.api.main:app",
        host=settings.host,
        port=settings.port,
        log_config=None,  # keep the JSON root handler from setup_logging
    )


if __name__ == "__main__":
    main()
