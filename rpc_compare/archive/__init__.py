"""Chain archives the snapshot tests are derived from."""

from .base import ChainArchive
from .export import ExportArchive

__all__ = ['ChainArchive', 'ExportArchive']
