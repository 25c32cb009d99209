#!/usr/bin/env python3
"""
Niche Navigator web server
Run: python3 web_server.py
"""

import uvicorn

from niche_navigator.core.settings import get_settings


def main():
    """Start the API server"""
    settings = get_settings()

    print("Niche Navigator API server")
    print("=" * 50)
    print(f"Environment: {settings.environment}")
    print("Address: http://localhost:8000")
    print("API docs: http://localhost:8000/docs")
    print("=" * 50)
    print("Press Ctrl+C to stop the server.")
    print()

    uvicorn.run(
        "niche_navigator.api.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.is_development,
        log_level=settings.log_level.lower(),
        access_log=True
    )


if __name__ == "__main__":
    main()
