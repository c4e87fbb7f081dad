"""LLM Router

Routes text-generation requests across interchangeable LLM providers with
health tracking, cost accounting and transparent fallback.
"""

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

try:
    from importlib.metadata import PackageNotFoundError, version

    __version__ = version("llm-router")
except PackageNotFoundError:
    # Fallback for source checkouts
    __version__ = "0.1.0"
__author__ = "LLM Router"
