"""Allow ``python -m ragcore.cli`` execution."""

from ragcore.cli.ingest import main

main()
