#!/usr/bin/env python3
"""Start the Companion Agents API server."""
import os
import socket
import sys

import uvicorn

from app.config import DEFAULT_ENV_FILE, load_settings


def check_api_key():
    """Check if OpenAI API key is configured."""
    settings = load_settings()

    if not settings.openai_api_key:
        print("=" * 80)
        print("WARNING: OPENAI_API_KEY not configured!")
        print("=" * 80)
        print()
        if not DEFAULT_ENV_FILE.exists():
            print("No .env file found. Create one with:")
            print("  OPENAI_API_KEY=sk-...")
        else:
            print(".env file exists but OPENAI_API_KEY is not set.")
        print()
        print("The API will run, but /v1/chat answers with a configuration error.")
        print("Routing (/v1/agents/route) works without a key.")
        print("Check readiness: GET http://localhost:8000/health/ready")
        print("=" * 80)
        print()
    elif not settings.has_valid_api_key:
        print("WARNING: OPENAI_API_KEY does not look like a valid key (expected 'sk-...').")
        print()
    else:
        source = "environment variable" if os.environ.get("OPENAI_API_KEY") else ".env file"
        print(f"OpenAI API key configured ({source})")
        print()


if __name__ == "__main__":
    check_api_key()

    # Allow port override via environment variable or command line
    port = int(os.environ.get("PORT", 8000))
    if len(sys.argv) > 1:
        try:
            port = int(sys.argv[1])
        except ValueError:
            print(f"Invalid port: {sys.argv[1]}. Using default port 8000.")
            port = 8000

    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    result = sock.connect_ex(("127.0.0.1", port))
    sock.close()

    if result == 0:
        print(f"Port {port} is already in use!")
        print(f"   Use a different port: python run_server.py {port + 1}")
        sys.exit(1)

    print(f"Starting server on http://0.0.0.0:{port}")
    print(f"   API docs: http://localhost:{port}/docs")
    print()

    uvicorn.run(
        "app.main:app",
        host="0.0.0.0",
        port=port,
        reload=True,
        log_level="info",
    )
