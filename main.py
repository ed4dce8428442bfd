#!/usr/bin/env python3
"""
mcpdesk - Main entry point for CLI interaction with MCP tool servers.
"""

from mcpdesk.cli import main

if __name__ == "__main__":
    main()
