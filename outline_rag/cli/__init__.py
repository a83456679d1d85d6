"""Command-line tools for outline-rag.

- ``outline-rag ingest`` -- load the Outline knowledge base into the vector store
- ``outline-rag ask "..."`` -- answer one question
- ``outline-rag chat`` -- interactive question/answer shell
- ``outline-rag stats`` -- corpus statistics
- ``outline-rag purge-document <id>`` -- forget one document so it is re-ingested

Heavy imports (providers, chromadb) are deferred into the handlers so that
``--help`` stays fast.  Log output goes to stderr; command output to stdout.
"""
