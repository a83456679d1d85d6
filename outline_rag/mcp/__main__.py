from outline_rag.mcp.server import main

main()
