"""
Entry point: python -m birdbird
"""

import logging
import os
import time

from .client import FlappyClient


def setup_logging(debug: bool = False) -> None:
    """Configure logging."""
    level = logging.DEBUG if debug else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S"
    )


def main():
    setup_logging(debug=bool(os.environ.get("BIRDBIRD_DEBUG")))
    player_name = input("Enter your name: ") or f"Player{time.time() * 1000 % 1000:0.0f}"

    client = FlappyClient(player_name)
    client.run()


if __name__ == "__main__":
    main()
