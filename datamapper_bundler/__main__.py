"""Allow running as ``python -m datamapper_bundler``."""

from datamapper_bundler.cli import app

app(prog_name="dm-bundler")
