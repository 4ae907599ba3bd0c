"""
Configuration management for the WhatsApp relay bridge.

Loads environment variables from .env file and provides typed access to configuration.
"""

import os
from pathlib import Path
from dotenv import load_dotenv

# Load environment variables from .env file
env_path = Path(__file__).parent / ".env"
load_dotenv(env_path)


class Config:
    """Configuration class for the relay bridge."""

    # Bridge API Configuration
    BRIDGE_PORT = int(os.getenv("BRIDGE_PORT", "3000"))

    # Downstream webhook consumer
    WEBHOOK_URL = os.getenv("WEBHOOK_URL", "http://127.0.0.1:8001/webhook/")
    WEBHOOK_TIMEOUT_SECONDS = float(os.getenv("WEBHOOK_TIMEOUT_SECONDS", "15"))

    # Retry queue
    RETRY_DELAY_SECONDS = float(os.getenv("RETRY_DELAY_SECONDS", "10"))
    RETRY_QUEUE_MAX_ITEMS = int(os.getenv("RETRY_QUEUE_MAX_ITEMS", "0"))  # 0 = unbounded

    # Phone number normalization
    HOME_COUNTRY_CODE = os.getenv("HOME_COUNTRY_CODE", "963")
    TRUNK_PREFIX = os.getenv("TRUNK_PREFIX", "09")

    # Messaging client
    CLIENT_BACKEND = os.getenv("CLIENT_BACKEND", "gateway")
    GATEWAY_URL = os.getenv("GATEWAY_URL", "http://127.0.0.1:3100")
    GATEWAY_TIMEOUT_SECONDS = float(os.getenv("GATEWAY_TIMEOUT_SECONDS", "30"))

    # Environment
    ENVIRONMENT = os.getenv("ENVIRONMENT", "development")
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    @classmethod
    def validate(cls) -> bool:
        """Validate that required configuration is set."""
        required = ["WEBHOOK_URL", "HOME_COUNTRY_CODE"]
        if cls.CLIENT_BACKEND == "gateway":
            required.append("GATEWAY_URL")
        missing = [key for key in required if not getattr(cls, key)]

        if missing:
            print(f"⚠️  Missing required environment variables: {', '.join(missing)}")
            print(f"   Please set them in .env file")
            return False

        return True


if __name__ == "__main__":
    # Test configuration loading
    print("Configuration loaded:")
    print(f"  Bridge Port: {Config.BRIDGE_PORT}")
    print(f"  Webhook URL: {Config.WEBHOOK_URL}")
    print(f"  Retry Delay: {Config.RETRY_DELAY_SECONDS}s")
    print(f"  Client Backend: {Config.CLIENT_BACKEND}")
    print(f"  Environment: {Config.ENVIRONMENT}")
    print(f"\n  Validation: {'✓ PASSED' if Config.validate() else '✗ FAILED'}")
