"""
Runtime configuration for the Brainwave Mood service.

All settings can be supplied through ``BRAINWAVE_*`` environment variables.
Credentials are held as ``SecretStr`` and must be injected at runtime; they
are never part of the source tree.
"""

import os
import string
from collections.abc import Mapping

from pydantic import BaseModel, Field, SecretStr, field_validator

from .models import SourceDescriptor

ENV_PREFIX = "BRAINWAVE_"

DEFAULT_SOURCE_IDS = [
    "bafybeihqztclrpb7fquiieuroekmsxmlqqasz4n3qieikrashalbof75a4",
    "bafybeih5o5u5tc56g5wfo7vwe3d2ouad7lkgmf4t3wgffbfehiijarzmmm",
    "bafybeibbvtojt6y3c4xldijyak25qbut2l7zqojji37542l2nx2th7dqlu",
    "bafybeifutyztz6juicmi5qubj3p7mmiirdc5dpt6rchst4gqni3vhrgaiy",
]
DEFAULT_SOURCE_URL_TEMPLATE = "https://gateway.pinata.cloud/ipfs/{source_id}"
DEFAULT_ANALYSIS_ENDPOINT = "https://api.sambanova.ai/v1/chat/completions"
DEFAULT_ANALYSIS_MODEL = "Meta-Llama-3.1-405B-Instruct"


class Settings(BaseModel):
    """Settings for fetching, analysis and playback."""

    source_ids: list[str] = Field(
        default_factory=lambda: list(DEFAULT_SOURCE_IDS),
        description="Content identifiers of the recordings to fetch",
    )
    source_url_template: str = Field(
        DEFAULT_SOURCE_URL_TEMPLATE,
        description="Retrieval URL with a {source_id} placeholder",
    )
    source_token: SecretStr | None = Field(
        None, description="Bearer credential for the file store"
    )

    analysis_endpoint: str = Field(DEFAULT_ANALYSIS_ENDPOINT)
    analysis_model: str = Field(DEFAULT_ANALYSIS_MODEL)
    analysis_token: SecretStr | None = Field(
        None, description="Bearer credential for the analysis service"
    )
    analysis_max_concurrency: int = Field(
        8, gt=0, description="Upper bound on in-flight analysis requests"
    )

    window_interval: float = Field(3.0, gt=0, description="Window length in seconds")
    tick_period: float = Field(0.1, gt=0, description="Playback period in seconds")
    request_timeout: float = Field(15.0, gt=0, description="Per-request timeout")

    refresh_on_startup: bool = True
    log_level: str = "INFO"
    host: str = "0.0.0.0"
    port: int = Field(8000, gt=0, lt=65536)

    @field_validator("source_url_template")
    @classmethod
    def _check_template(cls, template: str) -> str:
        try:
            fields = {
                name
                for _, name, _, _ in string.Formatter().parse(template)
                if name is not None
            }
            template.format(source_id="")
        except (ValueError, KeyError, IndexError) as e:
            raise ValueError(f"invalid source URL template: {e}") from e
        if fields != {"source_id"}:
            raise ValueError("source URL template needs a {source_id} placeholder only")
        return template

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "Settings":
        """
        Build settings from ``BRAINWAVE_*`` environment variables.

        Args:
            environ: Mapping to read from (defaults to ``os.environ``)

        Returns:
            Settings with every variable that is present applied over the defaults
        """
        env = os.environ if environ is None else environ
        values: dict[str, object] = {}

        for name in cls.model_fields:
            raw = env.get(ENV_PREFIX + name.upper())
            if raw is None or raw == "":
                continue
            if name == "source_ids":
                values[name] = [part.strip() for part in raw.split(",") if part.strip()]
            else:
                values[name] = raw

        return cls.model_validate(values)

    def source_descriptors(self) -> list[SourceDescriptor]:
        """Resolve every configured source id into a retrieval descriptor."""
        return [
            SourceDescriptor(
                source_id=source_id,
                url=self.source_url_template.format(source_id=source_id),
            )
            for source_id in self.source_ids
        ]
