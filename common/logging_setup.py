"""
common.logging_setup

Set up standard logging for the project.
"""
import logging
import sys

def setup_logging(level: int = logging.INFO):
    # stderr so JSON output on stdout stays parseable
    logging.basicConfig(
        level=level,
        stream=sys.stderr,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s"
    )
    # urllib3 debug lines include full request URLs (with api keys)
    logging.getLogger("urllib3").setLevel(max(level, logging.WARNING))
