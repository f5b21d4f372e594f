"""Main module for the feedmee MCP server.

This module allows the server to be run as a Python module using:
python -m feedmee

It delegates to the server application's main function.
"""

from feedmee.server.app import main

if __name__ == "__main__":
    main()
