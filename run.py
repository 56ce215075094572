#!/usr/bin/env python3
"""
Card Management Service Entry Point

Starts the FastAPI server with the in-memory card store.
"""

import sys
from pathlib import Path

# Add the project root to Python path
project_root = Path(__file__).parent
sys.path.insert(0, str(project_root))

from card_management.api_modular import run_server
from card_management.config import get_config


if __name__ == "__main__":
    config = get_config()
    print("💳 Starting Card Management Service...")
    print("🗄️  In-memory store, data is lost on restart")
    if config.seed_demo_data:
        print("👤 Demo login: testuser / password123")
    print(f"🌐 API available at: http://localhost:{config.api_port}")
    print(f"📚 Documentation at: http://localhost:{config.api_port}/docs")
    print()

    try:
        run_server()
    except KeyboardInterrupt:
        print("\n👋 Shutting down Card Management Service...")
    except Exception as e:
        print(f"❌ Error starting server: {e}")
        sys.exit(1)
