"""
Question Bank Parser Service — Main Entry Point
================================================
Starts the Flask-based parsing service.

Usage:
    python main.py                    # Default: 0.0.0.0:5000
    python main.py --port 8000        # Custom port
    python main.py --debug            # Debug mode
    python main.py --no-ocr           # Never OCR image-only PDFs
"""

import argparse
import logging

from qbank_parser.server import app, create_app

logging.basicConfig(
    level=logging.INFO,
    format="[%(asctime)s] %(levelname)-8s %(name)s: %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger(__name__)


def main():
    parser = argparse.ArgumentParser(description="Question Bank Parser Service")
    parser.add_argument("--host", default="0.0.0.0", help="Bind host")
    parser.add_argument("--port", type=int, default=5000, help="Bind port")
    parser.add_argument("--debug", action="store_true", help="Debug mode")
    parser.add_argument("--no-ocr", action="store_true", help="Disable OCR")
    args = parser.parse_args()

    create_app({"OCR_FALLBACK": not args.no_ocr})

    logger.info(f"Upload dir: {app.config['UPLOAD_DIR']}")
    logger.info(f"Starting server on {args.host}:{args.port}")
    app.run(host=args.host, port=args.port, debug=args.debug)


if __name__ == "__main__":
    main()
