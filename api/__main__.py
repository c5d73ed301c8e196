"""Command line interface for running the API server."""
import asyncio
import logging
import uvicorn

from config import settings_conf

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

class UvicornServer:
    """Wrapper for running uvicorn with proper lifecycle management."""

    def __init__(self, app_path: str = "api:app", host: str = "0.0.0.0", port: int = 3000):
        self.config = uvicorn.Config(
            app_path,
            host=host,
            port=port,
            log_level="info"
        )
        self.server = uvicorn.Server(self.config)

    async def run(self):
        """Run the server until it receives SIGINT or SIGTERM."""
        await self.server.serve()

async def main():
    """Run the API server."""
    server = UvicornServer(
        host=settings_conf['api_host'],
        port=settings_conf['api_port']
    )

    logger.info(f"Marketplace API on http://{settings_conf['api_host']}:{settings_conf['api_port']}")
    logger.info(f"Network: {settings_conf['network_name']}")
    if settings_conf['contract_address']:
        logger.info(f"Contract: {settings_conf['contract_address']}")
    else:
        logger.info("No contract configured, POST /deploy-contract first")

    try:
        await server.run()
    finally:
        logger.info("Server stopped.")

if __name__ == "__main__":
    asyncio.run(main())
