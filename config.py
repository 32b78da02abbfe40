"""
Configuration management for the WhatsApp Checker API.

Loads environment variables from .env file and provides typed access to configuration.
Backend selection (client, throttle, shutdown budget) lives in infra.config.
"""

import os
from pathlib import Path
from dotenv import load_dotenv

# Load environment variables from .env file
env_path = Path(__file__).parent / ".env"
load_dotenv(env_path)


class Config:
    """Configuration class for the WhatsApp Checker API."""

    # HTTP server
    HOST = os.getenv("HOST", "0.0.0.0")
    PORT = int(os.getenv("PORT", "3000"))

    # Environment
    ENVIRONMENT = os.getenv("ENVIRONMENT", "development")
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    # Number validation and batching
    MIN_DIGITS = int(os.getenv("MIN_DIGITS", "10"))
    MAX_BATCH_SIZE = int(os.getenv("MAX_BATCH_SIZE", "50"))

    @classmethod
    def validate(cls) -> bool:
        """Validate that configuration values are usable."""
        problems = []
        if cls.MAX_BATCH_SIZE < 1:
            problems.append("MAX_BATCH_SIZE must be at least 1")
        if cls.MIN_DIGITS < 1:
            problems.append("MIN_DIGITS must be at least 1")

        if problems:
            print(f"⚠️  Invalid configuration: {'; '.join(problems)}")
            print(f"   Please fix them in .env file")
            return False

        return True


if __name__ == "__main__":
    # Test configuration loading
    print("Configuration loaded:")
    print(f"  Listen: {Config.HOST}:{Config.PORT}")
    print(f"  Environment: {Config.ENVIRONMENT}")
    print(f"  Log level: {Config.LOG_LEVEL}")
    print(f"  Min digits: {Config.MIN_DIGITS}")
    print(f"  Batch limit: {Config.MAX_BATCH_SIZE}")
    print(f"\n  Validation: {'✓ PASSED' if Config.validate() else '✗ FAILED'}")
