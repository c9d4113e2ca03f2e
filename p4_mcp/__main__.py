from p4_mcp.cli.main import main

main()
