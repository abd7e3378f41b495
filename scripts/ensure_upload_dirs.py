"""Create the public image upload directories.

Usage:
    python -m scripts.ensure_upload_dirs
"""

import logging
import sys

from cms.services.uploads import IMAGE_DIRS, ensure_upload_dirs, upload_dir

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


def main() -> int:
    try:
        created = ensure_upload_dirs()
    except OSError as exc:
        logger.error("Could not create upload directories: %s", exc)
        return 1

    for kind in IMAGE_DIRS:
        directory = upload_dir(kind)
        state = "created" if directory in created else "exists"
        print(f"  {directory}  ({state})")
    return 0


if __name__ == "__main__":
    sys.exit(main())
