"""Configuration manager for loading and validating settings."""

import os
from typing import Dict, Optional
from dotenv import load_dotenv


TRUE_VALUES = {"1", "true", "yes", "on"}


class Config:
    """Manages configuration loading and validation."""

    @staticmethod
    def load_from_env(env_path: Optional[str] = None) -> Dict:
        """Load configuration from .env file.

        Args:
            env_path: Path to .env file. If None, searches for .env in current directory.

        Returns:
            Dictionary containing configuration parameters.
        """
        if env_path:
            load_dotenv(env_path)
        else:
            load_dotenv()

        seed = os.getenv("SAMPLING_SEED", "")

        config = {
            # Question bank sources
            "bank_dir": os.getenv("CERTPREP_BANK_DIR", ""),
            "bundle_path": os.getenv("CERTPREP_BUNDLE_PATH", ""),
            "bundle_url": os.getenv("CERTPREP_BUNDLE_URL", ""),
            "bank_base_url": os.getenv("CERTPREP_BANK_BASE_URL", ""),

            # Compositions
            "composition": os.getenv("CERTPREP_COMPOSITION", "tableau-consultant"),
            "compositions_file": os.getenv("CERTPREP_COMPOSITIONS_FILE", ""),

            # HTTP loading
            "http_timeout": int(os.getenv("HTTP_TIMEOUT", "30")),
            "http_retry_times": int(os.getenv("HTTP_RETRY_TIMES", "3")),

            # Sampling
            "restricted_fallback": os.getenv("RESTRICTED_FALLBACK", "false").strip().lower() in TRUE_VALUES,
            "seed": int(seed) if seed else None,
        }

        return config

    @staticmethod
    def validate_config(config: Dict) -> bool:
        """Validate configuration parameters.

        Args:
            config: Configuration dictionary to validate.

        Returns:
            True if configuration is valid.

        Raises:
            ValueError: If required parameters are missing or invalid.
        """
        if not config.get("composition"):
            raise ValueError("Missing required configuration: composition")

        if config["http_timeout"] <= 0:
            raise ValueError("http_timeout must be positive")

        if config["http_retry_times"] < 0:
            raise ValueError("http_retry_times must be non-negative")

        if config.get("seed") is not None and config["seed"] < 0:
            raise ValueError("seed must be non-negative")

        return True

    @staticmethod
    def get_loader_config(config: Dict) -> Dict:
        """Return bank-loader configuration.

        Args:
            config: Full configuration dictionary.

        Returns:
            Dictionary containing only loading-related parameters.
        """
        return {
            "bank_dir": config["bank_dir"],
            "bundle_path": config["bundle_path"],
            "bundle_url": config["bundle_url"],
            "bank_base_url": config["bank_base_url"],
            "timeout": config["http_timeout"],
            "retry_times": config["http_retry_times"],
        }
