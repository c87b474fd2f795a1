import logging
import os
from dataclasses import dataclass

from dotenv import load_dotenv

# Load environment variables
load_dotenv()


@dataclass(frozen=True)
class Settings:
    api_base_url: str = "http://localhost:8080"
    flows_base_url: str = "http://localhost:8080"
    request_timeout: float = 20.0
    other_category_label: str = "Other"
    log_level: str = "INFO"
    show_demo_credentials: bool = False

    @classmethod
    def from_env(cls) -> "Settings":
        """
        Builds settings from the environment (and ``.env`` if present).

        ``FLOWS_BASE_URL`` falls back to ``API_BASE_URL`` so a single dev
        stub can serve every endpoint.
        """
        api_base_url = os.getenv("API_BASE_URL", cls.api_base_url).rstrip("/")
        return cls(
            api_base_url=api_base_url,
            flows_base_url=os.getenv("FLOWS_BASE_URL", api_base_url).rstrip("/"),
            request_timeout=float(os.getenv("REQUEST_TIMEOUT", cls.request_timeout)),
            other_category_label=os.getenv("OTHER_CATEGORY_LABEL", cls.other_category_label),
            log_level=os.getenv("LOG_LEVEL", cls.log_level).upper(),
            show_demo_credentials=os.getenv("SHOW_DEMO_CREDENTIALS", "false").lower() == "true",
        )


def configure_logging(settings: Settings):
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
