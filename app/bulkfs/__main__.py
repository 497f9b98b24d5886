"""Allow ``python -m bulkfs``."""

from bulkfs.cli.main import app

app()
