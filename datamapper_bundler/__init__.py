"""Data Mapper Bundler - build-step orchestration for TypeScript data mappers.

This package stages each data mapper module of a project into a shared
workspace, drives the Node/npm toolchain through Maven, and collects the
resulting single-file bundle back into the project's resource tree.
"""

__version__ = "0.1.0"
__all__ = ["__version__"]
