import os
from dataclasses import dataclass, field
from typing import Dict

from dotenv import load_dotenv

from bustrack.constants import DEFAULT_BASE_URL, ENDPOINTS, PROGRAM_STORAGE


@dataclass
class ApiConfig:
    base_url: str = DEFAULT_BASE_URL
    endpoints: Dict[str, str] = field(default_factory=lambda: dict(ENDPOINTS))

    def url(self, name):
        return f"{self.base_url.rstrip('/')}{self.endpoints[name]}"

    @classmethod
    def from_env(cls):
        """Build the config from BUSTRACK_* variables, reading .env first."""
        load_dotenv()
        endpoints = dict(ENDPOINTS)
        for name in endpoints:
            override = os.getenv(f"BUSTRACK_ENDPOINT_{name.upper()}")
            if override:
                endpoints[name] = override
        return cls(
            base_url=os.getenv("BUSTRACK_BASE_URL", DEFAULT_BASE_URL),
            endpoints=endpoints,
        )


def data_dir():
    load_dotenv()
    return os.getenv("BUSTRACK_DATA_DIR", PROGRAM_STORAGE)
