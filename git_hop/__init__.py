"""Interactive terminal front-end for switching git branches."""
import logging
from pathlib import Path

# Load version from VERSION file
_version_file = Path(__file__).parent / 'VERSION'
if _version_file.exists():
    __version__ = _version_file.read_text().strip()
else:
    __version__ = 'unknown'

logging.getLogger(__name__).addHandler(logging.NullHandler())
