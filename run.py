"""
Development Server Entry Point
==============================

Runs the FastAPI application under uvicorn.

Usage:
    python run.py              # Development mode with reload
    python run.py --no-reload  # Development mode without reload
    python run.py --port 8080  # Custom port
"""

import argparse


def main():
    """Run the development server."""
    import uvicorn
    from incidentdesk.core.config import settings

    parser = argparse.ArgumentParser(description=f"Run the {settings.APP_NAME} development server")
    parser.add_argument(
        "--no-reload",
        action="store_true",
        help="Disable auto-reload",
    )
    parser.add_argument(
        "--host",
        default=settings.HOST,
        help=f"Host to bind to (default: {settings.HOST})",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=settings.PORT,
        help=f"Port to bind to (default: {settings.PORT})",
    )
    args = parser.parse_args()

    print(f"\n{'='*50}")
    print(f"  {settings.APP_NAME} v{settings.APP_VERSION}")
    print(f"  Environment: {settings.ENVIRONMENT}")
    print(f"{'='*50}\n")

    print(f"Server: http://{args.host}:{args.port}")
    print(f"API:    http://{args.host}:{args.port}{settings.API_PREFIX}/incidents")
    print("Press CTRL+C to stop\n")

    uvicorn.run(
        "incidentdesk.main:app",
        host=args.host,
        port=args.port,
        reload=not args.no_reload,
        log_level=settings.LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    main()
