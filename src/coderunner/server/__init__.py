"""
Expose the MCP server factory and entry point.

Run the server over stdio with either of:

```sh
coderunner
python -m coderunner.server
```
"""

from .main import create_server, main

__all__ = ["create_server", "main"]
