import os
from typing import Optional

from pydantic import BaseModel, field_validator, ValidationError

INFURA_MAINNET = "https://mainnet.infura.io/v3/{key}"


class RPC(BaseModel):
    url: str = "https://example.invalid"
    timeout: int = 10

    @field_validator("url")
    @classmethod
    def must_be_https(cls, v: str) -> str:
        # allow placeholder during tests by swapping in a safe default
        if "${" in v:
            return "https://example.invalid"
        if not v.startswith("https://"):
            raise ValueError("RPC URL must be HTTPS")
        return v


class Etherscan(BaseModel):
    base_url: str = "https://api.etherscan.io/api"
    api_key: Optional[str] = None


class Registry(BaseModel):
    module_endpoint: Optional[str] = None


class HTTP(BaseModel):
    max_retries: int = 3
    backoff_seconds: float = 0.5


class Schema(BaseModel):
    abi_dir: str = "abi"


class Defaults(BaseModel):
    module: str = "TransferManager"
    version: str = "1.6.0"
    wallet: str = "0xc4d46ecbc83f41d0bf71a39868d3f830299068b8"
    method: Optional[str] = "addModule"
    from_block: int = 10000000
    to_block: int = 20000000


class Pipeline(BaseModel):
    concurrency: int = 8
    on_error: str = "fail"

    @field_validator("on_error")
    @classmethod
    def known_policy(cls, v: str) -> str:
        if v not in ("fail", "skip"):
            raise ValueError("on_error must be 'fail' or 'skip'")
        return v

    @field_validator("concurrency")
    @classmethod
    def positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError("concurrency must be at least 1")
        return v


class Settings(BaseModel):
    network: str = "ethereum"
    rpc: RPC = RPC()
    etherscan: Etherscan = Etherscan()
    registry: Registry = Registry()
    http: HTTP = HTTP()
    schema_source: Schema = Schema()
    defaults: Defaults = Defaults()
    pipeline: Pipeline = Pipeline()


def _apply_env(cfg: dict) -> dict:
    """Secrets and endpoints come from the environment, never from config.yaml."""
    rpc_url = os.environ.get("RPC_URL_OVERRIDE")
    infura_key = os.environ.get("INFURA_API_KEY")
    if rpc_url:
        cfg.setdefault("rpc", {})["url"] = rpc_url
    elif infura_key:
        cfg.setdefault("rpc", {})["url"] = INFURA_MAINNET.format(key=infura_key)

    etherscan_key = os.environ.get("ETHERSCAN_API_KEY")
    if etherscan_key:
        cfg.setdefault("etherscan", {})["api_key"] = etherscan_key

    endpoint = os.environ.get("MODULE_ENDPOINT")
    if endpoint:
        cfg.setdefault("registry", {})["module_endpoint"] = endpoint
    return cfg


def load_settings(path: str = "config.yaml") -> Settings:
    import yaml
    cfg = {}
    if os.path.exists(path):
        with open(path, "r") as f:
            cfg = yaml.safe_load(f) or {}

    # config.yaml uses "schema", which would shadow BaseModel.schema
    if "schema" in cfg:
        cfg["schema_source"] = cfg.pop("schema")

    cfg = _apply_env(cfg)

    try:
        settings = Settings.model_validate(cfg)
    except ValidationError as e:
        raise RuntimeError(f"Configuration error in {path}: {e}") from e

    # relative ABI dirs live next to the config file, not the working directory
    abi_dir = settings.schema_source.abi_dir
    if not os.path.isabs(abi_dir):
        settings.schema_source.abi_dir = os.path.join(os.path.dirname(os.path.abspath(path)), abi_dir)
    return settings
