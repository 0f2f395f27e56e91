#!/usr/bin/env python3
"""
Demo Banking Entry Point

Starts the FastAPI server with settings taken from DEMO_BANK_* environment
variables or a .env file.
"""

import sys

from demo_banking.api import run_server
from demo_banking.config import get_config


if __name__ == "__main__":
    config = get_config()
    print("🏦 Starting Demo Banking API...")
    print(f"💾 Storage backend: {config.storage_backend} ({config.data_dir})")
    print(f"🌐 API available at: http://localhost:{config.api_port}")
    print(f"📚 Documentation at: http://localhost:{config.api_port}/docs")
    print()
    
    try:
        run_server()
    except KeyboardInterrupt:
        print("\n👋 Shutting down Demo Banking API...")
    except Exception as e:
        print(f"❌ Error starting server: {e}")
        sys.exit(1)
