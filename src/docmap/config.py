from pydantic_settings import BaseSettings


class Config(BaseSettings):
    """Mapper configuration loaded from environment variables."""

    database_url: str  # MongoDB URL, database name is taken from the path
    debug: bool = False
    extensions: list[str] = []  # Write extensions to register by name, e.g. ["atomic_counter"]

    model_config = {
        "env_file": [".env"],
        "env_prefix": "DOCMAP_",
        "extra": "ignore",
    }
