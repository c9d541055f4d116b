"""
Main entry point for the OAuth Verifier service.
"""
import logging

from dotenv import load_dotenv
import uvicorn
from oauth_verifier.app.factory import create_app
from oauth_verifier.settings import get_settings

# Load environment variables from a .env file if present
load_dotenv()

# Create the FastAPI application
app = create_app()

logger = logging.getLogger("oauth_verifier")


def main() -> None:
    """Main entry point for running the application."""
    s = get_settings()
    configured = [name for name, creds in (("apple", s.apple), ("line", s.line)) if creds.configured]
    logger.info("starting oauth-verifier", extra={"provider": ",".join(configured) or "none"})

    uvicorn.run(
        "oauth_verifier.main:app",
        host=s.server.host,
        port=s.server.port,
        reload=s.server.reload,
        log_level=s.server.log_level,
    )


if __name__ == "__main__":
    main()
