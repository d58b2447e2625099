#!/usr/bin/env python3
"""Simple runner script for the Video Relay API server."""

import sys
from pathlib import Path

def main():
    # Defaults
    temp_dir = Path("./temp")
    host = "0.0.0.0"
    port = 3000

    # Parse simple args
    args = sys.argv[1:]
    if "--help" in args or "-h" in args:
        print("""
Video Relay - media page extraction + download relay

Usage:
    python run.py [options]

Options:
    --temp DIR      Temp artifact directory (default: ./temp)
    --host HOST     Bind address (default: 0.0.0.0)
    --port PORT     Server port (default: 3000)
    -h, --help      Show this help

Examples:
    python run.py
    python run.py --temp /tmp/video-relay --port 8080
""")
        return

    for i, arg in enumerate(args):
        if arg == "--temp" and i + 1 < len(args):
            temp_dir = Path(args[i + 1])
        elif arg == "--host" and i + 1 < len(args):
            host = args[i + 1]
        elif arg == "--port" and i + 1 < len(args):
            port = int(args[i + 1])

    print(f"""
╔══════════════════════════════════════════════════╗
║       Video Relay v0.1.0                         ║
╠══════════════════════════════════════════════════╣
║  Temp directory: {str(temp_dir)[:32]:<32}║
║  Server: http://{host}:{port:<26}║
╚══════════════════════════════════════════════════╝
""")

    # Import and run
    try:
        from video_relay.config import AppConfig
        from video_relay.server import run_server
        from video_relay.utils.log import configure_logging
    except ImportError as e:
        print(f"❌ Import failed: {e}")
        print("\nInstall with:")
        print("  pip install -e .")
        sys.exit(1)

    config = AppConfig()
    config.storage.temp_dir = str(temp_dir)
    config.server.host = host
    config.server.port = port

    configure_logging(config.logging.level)
    run_server(config)

if __name__ == "__main__":
    main()
