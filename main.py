"""
Entry point for the photo bluff room server

Server flow:
1. Clients read and stream room state from /api/rooms/{code}/state|stream
2. Players submit photos, join, volunteer and vote
3. The host console drives the queue and phases
4. The auto-advance driver moves timed phases along on its own
"""

import argparse
import logging

import uvicorn

from config.settings import LOG_LEVEL

logging.basicConfig(
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    level=LOG_LEVEL
)
logger = logging.getLogger(__name__)


def main():
    """Run the API server"""
    parser = argparse.ArgumentParser(description="Photo bluff room server")
    parser.add_argument("--host", default="0.0.0.0")
    parser.add_argument("--port", type=int, default=8000)
    parser.add_argument("--reload", action="store_true")
    args = parser.parse_args()

    logger.info("Starting room server on %s:%d", args.host, args.port)
    uvicorn.run("backend.main:app", host=args.host, port=args.port, reload=args.reload)


if __name__ == "__main__":
    main()
