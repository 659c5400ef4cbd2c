#!/usr/bin/env python3
"""
Run the Frame Manager backend API server
"""

import logging
import os
import uvicorn
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

API_PORT = int(os.getenv("API_PORT", "8001"))


def main():
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    print("🚀 Starting Frame Manager backend...")
    print(f"📖 API Documentation: http://localhost:{API_PORT}/docs")
    print("\n" + "="*60 + "\n")

    uvicorn.run(
        "frame_manager.backend.main:app",
        host="0.0.0.0",
        port=API_PORT,
        reload=os.getenv("API_RELOAD", "false").lower() == "true",
        log_level="info"
    )


if __name__ == "__main__":
    main()
