#!/usr/bin/env python3
"""
Script to run the HashEBooks edge functions server.
"""

import uvicorn
import sys
from pathlib import Path

# Add project root to Python path
project_root = Path(__file__).parent
sys.path.insert(0, str(project_root))

from edge_functions.config import config
from utilities.config import config as platform_config


def main():
    """Run the API server."""
    print("🚀 Starting HashEBooks Edge Functions")
    print(f"📡 Host: {config.host}")
    print(f"🔌 Port: {config.port}")
    print(f"🌐 Debug: {config.debug}")
    print(f"🔐 Platform: {platform_config.supabase_url}")
    print("=" * 50)

    uvicorn.run(
        "edge_functions.main:app",
        host=config.host,
        port=config.port,
        reload=config.debug,
        log_level=config.log_level.lower(),
        access_log=True
    )


if __name__ == "__main__":
    main()
