import json
import os
from functools import lru_cache
from typing import Any, Type

import boto3
from dotenv import find_dotenv, load_dotenv
from pydantic import computed_field
from pydantic.fields import FieldInfo
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

# read from .env if it exists (local development only)
_dotenv_path = find_dotenv()
load_dotenv(str(_dotenv_path), override=False)


class Settings(BaseSettings):
    DEBUG: bool = False
    LOGLEVEL: str = "INFO"

    # set by deployment
    REPOHUB_ENV: str = "dev"
    AWS_SECRET_NAME: str | None = None

    # for globus auth confidential client
    API_CLIENT_ID: str
    API_CLIENT_SECRET: str

    REPOHUB_DEFAULT_SCOPE: str = "openid"

    DB_USERNAME: str
    DB_PASSWORD: str
    DB_ENDPOINT: str

    DEFAULT_BRANCH: str = "main"
    # upper bounds for the commit tree walker
    TREE_MAX_ENTRIES: int = 100_000
    HISTORY_MAX_COMMITS: int = 10_000

    @computed_field
    @property
    def SQLALCHEMY_DATABASE_URL(self) -> str:
        return f"postgresql+asyncpg://{self.DB_USERNAME}:{self.DB_PASSWORD}@{self.DB_ENDPOINT}/repohub_db_{self.REPOHUB_ENV}"

    model_config = SettingsConfigDict(env_file=_dotenv_path, case_sensitive=True)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: Type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ):
        # earlier sources win: explicit kwargs, then env, then .env, then aws
        sources = [init_settings, env_settings, dotenv_settings]
        secret_name = os.getenv("AWS_SECRET_NAME")
        if secret_name:
            sources.append(SecretsmanagerSettingsSource(settings_cls, secret_name))
        return tuple(sources)


class SecretsmanagerSettingsSource(PydanticBaseSettingsSource):
    """Settings stored as a JSON object in an AWS Secrets Manager secret.

    Keys of the secret are field names; keys that are not fields are ignored.
    """

    def __init__(self, settings_cls: Type[BaseSettings], secret_name: str):
        super().__init__(settings_cls)
        self.secret_name = secret_name
        self.secrets: dict = _read_secret(secret_name)

    def get_field_value(self, field: FieldInfo, field_name: str) -> tuple:
        # values in the secret are plain strings, never json to be decoded
        return self.secrets.get(field_name), field_name, False

    def __call__(self) -> dict[str, Any]:
        values = {}
        for name, field in self.settings_cls.model_fields.items():
            raw, key, is_complex = self.get_field_value(field, name)
            value = self.prepare_field_value(key, field, raw, is_complex)
            if value is not None:
                values[key] = value
        return values


def _read_secret(secret_name: str) -> dict:
    client = boto3.session.Session().client(
        service_name="secretsmanager",
        region_name=os.getenv("AWS_REGION", "us-east-1"),
    )
    response = client.get_secret_value(SecretId=secret_name)
    return json.loads(response["SecretString"])


# for use as dependency with `Depends(get_settings)`
@lru_cache()
def get_settings() -> Settings:
    return Settings()
