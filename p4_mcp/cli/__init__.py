"""p4-mcp command-line interface."""
