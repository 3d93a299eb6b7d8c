"""Yatra engine — CLI entry point."""

import logging
import os
import sys

from yatra import analyze, generate_report
from yatra.config import LOG_FORMAT_ENV, LOG_LEVEL_ENV
from yatra.logging import setup_logging

if __name__ == "__main__":
    setup_logging(
        os.environ.get(LOG_FORMAT_ENV, "json"),
        getattr(logging, os.environ.get(LOG_LEVEL_ENV, "WARNING").upper(), logging.WARNING),
    )
    path = sys.argv[1] if len(sys.argv) > 1 else "sample_yatra.json"
    result = analyze(path)
    print(generate_report(result))
