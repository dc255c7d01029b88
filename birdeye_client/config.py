from pydantic import BaseModel, ConfigDict, Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

from .constants import DEFAULT_CHAIN, DEFAULT_TIMEOUT


class ClientConfig(BaseModel):
    """
    Immutable client configuration, fixed for the lifetime of a client.
    """

    model_config = ConfigDict(frozen=True)

    api_key: str = Field(..., repr=False)
    default_chain: str = DEFAULT_CHAIN
    timeout: float = Field(default=DEFAULT_TIMEOUT, gt=0, description="HTTP timeout in seconds")


class BirdeyeSettings(BaseSettings):
    """
    Credentials and defaults read from the environment or a .env file.

    BIRDEYE_KEY is required; BIRDEYE_CHAIN and BIRDEYE_TIMEOUT are optional.
    """

    model_config = SettingsConfigDict(env_prefix="BIRDEYE_", env_file=".env", extra="ignore")

    key: SecretStr = Field(..., description="Birdeye API key")
    chain: str = Field(default=DEFAULT_CHAIN, description="Default x-chain header value")
    timeout: float = Field(default=DEFAULT_TIMEOUT, gt=0, description="HTTP timeout in seconds")

    def client_config(self) -> ClientConfig:
        return ClientConfig(
            api_key=self.key.get_secret_value(),
            default_chain=self.chain,
            timeout=self.timeout,
        )
