"""Bundle staging and release packaging.

``crank.packaging.archive`` (the ``Packager``) sits on top of the pipeline and
is imported from there directly.
"""

from .bundler import (
    DEVICE_BINARY_NAME,
    PDXINFO_FILENAME,
    PDX_SUFFIX,
    BundleAssembler,
    StagingBundle,
)

__all__ = [
    "BundleAssembler",
    "DEVICE_BINARY_NAME",
    "PDXINFO_FILENAME",
    "PDX_SUFFIX",
    "StagingBundle",
]
