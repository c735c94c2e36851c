"""
FastAPI server module for the chat router.
"""
