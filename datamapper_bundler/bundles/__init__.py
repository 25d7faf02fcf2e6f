"""Bundling pipeline.

This package handles:
- Module discovery
- Workspace preparation and generated configs
- Source staging and bundle collection
- Running toolchain goals through Maven
- Cleanup of transient files
"""

from datamapper_bundler.bundles.service import bundle_data_mappers

__all__ = ["bundle_data_mappers"]
