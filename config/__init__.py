"""
Initializes the config package.

The config package holds the suite-wide defaults of the blob simulator, making them
accessible throughout the application.
"""

# This import is done to facilitate cleaner imports in the project
# `from config import BlobSuiteConfig` instead of `from config.blobs import BlobSuiteConfig`
from .blobs import BlobSuiteConfig

__all__ = ["BlobSuiteConfig"]
