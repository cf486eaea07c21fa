"""Module entrypoint.

Allows:
    python -m mcp_log_forensics
"""

from __future__ import annotations

from mcp_log_forensics.server.log_server import main

if __name__ == "__main__":
    main()
