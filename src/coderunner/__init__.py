"""Sandboxed code runner package.

This package runs untrusted code snippets in short‑lived, network‑isolated
Docker containers and exposes that capability as a single MCP tool called
``run``.

The top‑level modules include:

* ``config`` – configuration handling for environment variables.
* ``errors`` – the exception taxonomy shared by all modules.
* ``languages`` – the language registry (images and commands).
* ``models`` – Pydantic models for the tool's payloads.
* ``runtime`` – async facade over the Docker SDK.
* ``executor`` – the container execution engine.
* ``server`` – FastMCP server exposing the ``run`` tool over stdio.
"""

__version__ = "0.0.1"
