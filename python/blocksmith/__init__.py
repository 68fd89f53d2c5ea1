from importlib.metadata import PackageNotFoundError, version
from pathlib import Path

from blocksmith.generator import generate
from blocksmith.models import BlockInstance, BlockKind, GenerationFlags, Issue
from blocksmith.validation import validate, validate_blocks

try:
    __version__ = version("blocksmith")
except PackageNotFoundError:
    # Running from a source checkout without an install.
    _version_file = Path(__file__).parent / "VERSION"
    if _version_file.is_file():
        __version__ = _version_file.read_text().strip()
    else:
        __version__ = "0.0.0-dev"

__all__ = [
    "generate",
    "validate",
    "validate_blocks",
    "BlockInstance",
    "BlockKind",
    "GenerationFlags",
    "Issue",
    "__version__",
]
