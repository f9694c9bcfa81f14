import logging
import sys

logger = logging.getLogger("ascolour_curation")
logger.setLevel(logging.INFO)

# Use StreamHandler instead of FileHandler
if not logger.handlers:
    handler = logging.StreamHandler(sys.stdout)
    formatter = logging.Formatter(
        '%(asctime)s - %(levelname)s - %(message)s'
    )
    handler.setFormatter(formatter)
    logger.addHandler(handler)
