"""
Main entrypoint: FastAPI server for URL trust analysis.

Env: DB_PATH, API_HOST, API_PORT, LOG_LEVEL, vendor API keys (see .env.example).

Equivalent: uvicorn backend_trustscan.api_server.app:app --host 0.0.0.0 --port 8000
"""

import os

# Configure structured JSON logging before other imports that may log
from backend_trustscan.trustscan_logging import get_logger

logger = get_logger("main")


def main() -> None:
    """Run the FastAPI server in the main thread."""
    from backend_trustscan.config import get_settings
    from backend_trustscan.config.env import mask_key

    settings = get_settings()
    if not settings.virustotal_api_key and not settings.blocklist_api_key:
        logger.warning(
            "main_config_warning",
            message="Neither VIRUSTOTAL_API_KEY nor a blocklist API key is set; every analysis will return an error",
        )
    logger.info(
        "main_sources_configured",
        virustotal=mask_key(settings.virustotal_api_key),
        blocklist_provider=settings.blocklist_provider,
        blocklist=mask_key(settings.blocklist_api_key),
        abuseipdb=mask_key(settings.abuseipdb_api_key),
    )

    from backend_trustscan.api_server.app import app
    import uvicorn

    logger.info("main_server_starting", host=settings.api_host, port=settings.api_port)
    uvicorn.run(app, host=settings.api_host, port=settings.api_port, log_level=os.getenv("LOG_LEVEL", "info").lower())


if __name__ == "__main__":
    main()
