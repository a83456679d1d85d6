"""Allow ``python -m outline_rag.cli`` execution."""

from outline_rag.cli.app import main

main()
