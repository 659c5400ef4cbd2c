"""
Configuration and constants for the Frame Manager admin UI
"""
import os
from dotenv import load_dotenv

load_dotenv()

# Backend API URL - Use 127.0.0.1 instead of localhost for Gradio compatibility
API_URL = os.getenv("API_URL", "http://127.0.0.1:8001")
API_KEY = os.getenv("API_KEY")

# Storage bucket holding the frame images
FRAMES_BUCKET = os.getenv("FRAMES_BUCKET", "frames")

REQUEST_TIMEOUT = float(os.getenv("REQUEST_TIMEOUT", "30"))

# Login is enabled only when both are set
ADMIN_USERNAME = os.getenv("ADMIN_USERNAME")
ADMIN_PASSWORD = os.getenv("ADMIN_PASSWORD")

SERVER_PORT = int(os.getenv("GRADIO_SERVER_PORT", "7860"))
