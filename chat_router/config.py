"""
Configuration entry point for the chat router.

Reads a .env file into the environment, then loads config/config.yaml
(which references those variables) into the shared ``config`` object.
"""

from dotenv import load_dotenv

from .config_loader import load_app_config

load_dotenv()

# Global config instance
config = load_app_config()
