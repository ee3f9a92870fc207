"""
Ask the advisor a question from the command line.

Can be run as a module:
  python -m advisor.client "How to increase wheat yield?"
  python -m advisor.client "What disease is this?" --image leaf.jpg
"""

import argparse
import asyncio
import base64
import logging
import sys
from pathlib import Path

from .ai_client import AIClient


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="EcoFarm AI advisor client")
    parser.add_argument("question", help="Question to ask")
    parser.add_argument("--image", type=Path, help="Crop/farm photo to analyze")
    parser.add_argument("--endpoint", help="Proxy URL (defaults to AI_API_ENDPOINT)")
    parser.add_argument("--retries", type=int, default=None, help="Retries for transient failures")
    parser.add_argument("--verbose", action="store_true", help="Log retries and failures")

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.CRITICAL,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    image_base64 = None
    if args.image is not None:
        try:
            image_base64 = base64.b64encode(args.image.read_bytes()).decode("ascii")
        except OSError as e:
            print(f"Cannot read image: {e}", file=sys.stderr)
            return 2

    client = AIClient(endpoint=args.endpoint, retries=args.retries)
    result = asyncio.run(client.ask(args.question, image_base64=image_base64))

    print(result.value)
    return 0 if result.ok else 1


if __name__ == "__main__":
    sys.exit(main())
