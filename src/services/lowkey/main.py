"""
Main entry point for the Lowkey steganography service

This file provides the router that can be included in the main FastAPI application.
"""

from .api.routes import router

# Export the router for easy inclusion in main app
__all__ = ["router"]
