from __future__ import annotations

import os
from typing import Any, Dict, List, Literal, Optional, Tuple, Type, TypedDict

import yaml
from pydantic import BaseModel, ConfigDict, Field, computed_field
from pydantic.fields import FieldInfo
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)
from web3 import Web3
from web3.types import Wei

__all__ = [
    "Config",
    "NetworkConfig",
    "CaptchaConfig",
    "LockConfig",
    "get_config",
    "set_config",
    "set_data_dir",
    "TxOption",
    "CooldownScope",
]


_data_dir: str = ""
_config_dir: str = "config"


def config_file_path():
    return os.path.join(_data_dir, _config_dir, "config.yml")


class YamlConfigSettingsSource(PydanticBaseSettingsSource):
    """
    A simple settings source class that loads variables from a YAML file

    Note: slightly adapted version of JsonConfigSettingsSource from docs.
    """

    _yaml_data: Dict[str, Any] | None = None

    @property
    def yaml_data(self) -> Dict[str, Any]:
        if self._yaml_data is None:
            yaml_file = config_file_path()
            if os.path.exists(yaml_file):
                with open(yaml_file, mode="r", encoding="utf-8") as f:
                    self._yaml_data = yaml.safe_load(f) or {}
            else:
                self._yaml_data = {}
        return self._yaml_data  # type: ignore

    def get_field_value(
        self, field: FieldInfo, field_name: str
    ) -> Tuple[Any, str, bool]:
        field_value = self.yaml_data.get(field_name)
        return field_value, field_name, False

    def prepare_field_value(
        self, field_name: str, field: FieldInfo, value: Any, value_is_complex: bool
    ) -> Any:
        return value

    def __call__(self) -> Dict[str, Any]:
        d: Dict[str, Any] = {}

        for field_name, field in self.settings_cls.model_fields.items():
            field_value, field_key, value_is_complex = self.get_field_value(
                field, field_name
            )
            field_value = self.prepare_field_value(
                field_name, field, field_value, value_is_complex
            )
            if field_value is not None:
                d[field_key] = field_value

        return d


LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "FATAL", "CRITICAL"]

# "client" blocks a client on every network after a claim, "network" only on
# the network it claimed on
CooldownScope = Literal["client", "network"]


def set_data_dir(dirname: str):
    global _data_dir

    _data_dir = dirname


class LogConfig(BaseModel):
    m_dir: str = Field(alias="dir", default="logs")
    level: LogLevel = "INFO"
    filename: str = "faucet-relay.log"

    @computed_field
    @property
    def dir(self) -> str:
        return os.path.abspath(os.path.join(_data_dir, self.m_dir))


class TxOption(TypedDict, total=False):
    chainId: int
    gas: int
    gasPrice: Wei
    maxFeePerGas: Wei
    maxPriorityFeePerGas: Wei


class NetworkConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    provider: str
    contract: str

    chain_id: Optional[int] = None
    gas: Optional[int] = None
    gas_price: Optional[int] = None
    max_fee_per_gas: Optional[int] = None
    max_priority_fee_per_gas: Optional[int] = None

    def tx_option(self) -> TxOption:
        res: TxOption = {}

        if self.chain_id is not None:
            res["chainId"] = self.chain_id
        if self.gas is not None:
            res["gas"] = self.gas
        if self.gas_price is not None:
            res["gasPrice"] = Web3.to_wei(self.gas_price, "wei")
        if self.max_fee_per_gas is not None:
            res["maxFeePerGas"] = Web3.to_wei(self.max_fee_per_gas, "wei")
        if self.max_priority_fee_per_gas is not None:
            res["maxPriorityFeePerGas"] = Web3.to_wei(
                self.max_priority_fee_per_gas, "wei"
            )
        return res


class CaptchaConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    secret: str = ""
    verify_url: str = "https://hcaptcha.com/siteverify"
    required: bool = True
    timeout: float = 10


class LockConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    m_dir: str = Field(alias="dir", default="data/locks")
    pending_ttl: int = 60
    cooldown_ttl: int = 24 * 60 * 60
    cooldown_scope: CooldownScope = "client"
    purge_interval: int = 60 * 60

    @computed_field
    @property
    def dir(self) -> str:
        return os.path.abspath(os.path.join(_data_dir, self.m_dir))


class Config(BaseSettings):
    log: LogConfig = LogConfig()

    networks: Dict[str, NetworkConfig] = {}

    owner_privkey: str = ""

    captcha: CaptchaConfig = CaptchaConfig()
    lock: LockConfig = LockConfig()

    trust_proxy: bool = False
    rpc_timeout: int = 30
    tx_timeout: float = 120

    server_host: str = "0.0.0.0"
    server_port: int = 3000
    cors_origins: List[str] = ["*"]

    model_config = SettingsConfigDict(
        env_nested_delimiter="__",
        env_file=".env",
        frozen=True,
    )

    @property
    def privkey(self) -> str:
        if len(self.owner_privkey) > 0:
            return self.owner_privkey
        privkey_file = os.path.join(_data_dir, _config_dir, "private_key.txt")
        if os.path.exists(privkey_file):
            with open(privkey_file, mode="r", encoding="utf-8") as f:
                return f.read().strip()
        return ""

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: Type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> Tuple[PydanticBaseSettingsSource, ...]:
        return (
            init_settings,
            YamlConfigSettingsSource(settings_cls),
            env_settings,
            dotenv_settings,
            file_secret_settings,
        )


_config: Optional[Config] = None


def get_config():
    global _config

    if _config is None:
        _config = Config()  # type: ignore

    return _config


def set_config(config: Config):
    global _config
    _config = config
