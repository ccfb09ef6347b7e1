import logging

import uvicorn
from handshake.config import settings

if __name__ == "__main__":
    logging.basicConfig(
        level=settings.LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logging.getLogger(__name__).info(f"Starting Steam Handshake API on {settings.API_HOST}:{settings.API_PORT}")
    uvicorn.run(
        "handshake.main:app",
        host=settings.API_HOST,
        port=settings.API_PORT,
        reload=settings.API_RELOAD
    )
