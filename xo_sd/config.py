"""Configuration models using Pydantic for validation."""
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
import os

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class XoConfig(BaseModel):
    """Xen Orchestra REST API connection settings."""
    url: str
    token: Optional[str] = None
    token_path: Optional[str] = None
    timeout_s: float = 10.0
    verify_tls: bool = True

    @field_validator('url')
    @classmethod
    def validate_url(cls, v):
        """Require an http(s) URL and drop the trailing slash."""
        if not v.startswith(("http://", "https://")):
            raise ValueError(f"XO URL must start with http:// or https://, got '{v}'")
        return v.rstrip("/")

    @model_validator(mode='after')
    def validate_credentials(self):
        """Ensure a token or a token file is configured."""
        if not self.token and not self.token_path:
            raise ValueError("Either xo.token or xo.token_path must be set")
        return self


class DiscoveryConfig(BaseModel):
    """Tag discovery settings."""
    tag_prefix: str = "prom"
    metrics_prefix: str = "xo_"

    @field_validator('tag_prefix')
    @classmethod
    def validate_tag_prefix(cls, v):
        if not v or ":" in v:
            raise ValueError(f"Tag prefix must be non-empty and must not contain ':', got '{v}'")
        return v


class GlobalConfig(BaseModel):
    """Global configuration settings."""
    log_level: str = "INFO"
    bind_address: str = "0.0.0.0"
    port: int = 8000

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v):
        level = v.upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"Invalid log level: {v}")
        return level


class Config(BaseModel):
    """Root configuration model."""
    model_config = ConfigDict(populate_by_name=True)

    global_: GlobalConfig = Field(default_factory=GlobalConfig, alias="global")
    xo: XoConfig
    discovery: DiscoveryConfig = Field(default_factory=DiscoveryConfig)


def load_config(config_path: Optional[str] = None) -> Config:
    """Load and validate configuration from an optional YAML file and the environment."""
    import yaml

    raw_config = {}
    if config_path is not None:
        if not os.path.exists(config_path):
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        with open(config_path, 'r') as f:
            raw_config = yaml.safe_load(f) or {}

        if not isinstance(raw_config, dict):
            raise ValueError(
                f"Configuration validation failed: top level of {config_path} must be a mapping"
            )
        for section in ('global', 'xo', 'discovery'):
            if raw_config.get(section) is None:
                raw_config.pop(section, None)
            elif not isinstance(raw_config[section], dict):
                raise ValueError(
                    f"Configuration validation failed: section '{section}' must be a mapping"
                )

    # Apply environment variable overrides
    xo = raw_config.setdefault('xo', {})
    if env_url := os.getenv('XOA_URL'):
        xo['url'] = env_url
    if env_token := os.getenv('XOA_TOKEN'):
        xo['token'] = env_token
    if env_token_path := os.getenv('XOA_TOKEN_PATH'):
        xo['token_path'] = env_token_path

    if env_log_level := os.getenv('LOG_LEVEL'):
        raw_config.setdefault('global', {})['log_level'] = env_log_level
    if env_port := os.getenv('PORT'):
        raw_config.setdefault('global', {})['port'] = env_port

    try:
        config = Config(**raw_config)
    except Exception as e:
        raise ValueError(f"Configuration validation failed: {e}")

    if not config.xo.token:
        config.xo.token = read_token(config.xo.token_path)

    return config


def read_token(token_path: str) -> str:
    """Read the XO authentication token from a file."""
    if not os.path.exists(token_path):
        raise FileNotFoundError(f"Token file not found: {token_path}")

    with open(token_path, 'r') as f:
        token = f.read().strip()

    if not token:
        raise ValueError(f"Token file is empty: {token_path}")
    return token
