# ---------------------------------------------------------------------------
# config.py
# Connection settings and default RAG query parameters.
#
# Values come from a properties-style key/value file (application.properties
# by default), read with python-dotenv. Every key can be overridden by an
# environment variable: opensearch.rag.timeout -> OPENSEARCH_RAG_TIMEOUT.
# ---------------------------------------------------------------------------

from __future__ import annotations

import os
from pathlib import Path
from typing import Mapping

from dotenv import dotenv_values

from conversational_search.errors import ConfigLoadError, ConfigParseError

CONFIG_PATH_ENV = "CONVERSATIONAL_SEARCH_CONFIG"
DEFAULT_CONFIG_FILE = "application.properties"

# Default connection settings
DEFAULT_HOST = "localhost"
DEFAULT_PORT = 9200
DEFAULT_SCHEME = "https"

# Default query parameters
DEFAULT_INDEX_NAME = "opensearch_kl_index"
DEFAULT_SEARCH_PIPELINE = "my-conversation-search-pipeline-deepseek-zh"
DEFAULT_EMBEDDING_MODEL_ID = "<embedding-model-id>"
DEFAULT_CONTEXT_SIZE = 5
DEFAULT_RAG_TIMEOUT = 15          # seconds, forwarded to the RAG pipeline
DEFAULT_LLM_MODEL = "bedrock/claude"
DEFAULT_RESULT_SIZE = 2
DEFAULT_NEURAL_K = 5
DEFAULT_SOURCE_FIELDS = ("text",)

# Client-side socket timeout, separate from the pipeline timeout above
DEFAULT_CLIENT_TIMEOUT = 30

DEFAULT_AWS_REGION = "us-east-1"
DEFAULT_AWS_SERVICE = "es"

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


def env_var_for(key: str) -> str:
    """Return the environment variable that overrides *key*."""
    return key.replace(".", "_").replace("-", "_").upper()


class Config:
    """
    Read-only view over a key/value source with typed accessors.

    Accessors fall back to hard-coded defaults when a key is absent.
    Numeric and boolean values are parsed on access; malformed values
    raise ConfigParseError. No range validation is performed.
    """

    def __init__(self, values: Mapping[str, str | None], environ: Mapping[str, str] | None = None):
        # dotenv yields None for keys written without '='
        self._values = {k: v for k, v in values.items() if v is not None}
        # Snapshot: later changes to os.environ do not reach a loaded Config
        self._environ = dict(os.environ if environ is None else environ)

    @classmethod
    def from_mapping(cls, values: Mapping[str, str | None], environ: Mapping[str, str] | None = None) -> "Config":
        return cls(dict(values), environ=environ)

    def __repr__(self) -> str:
        return (
            f"Config(host={self.get('opensearch.host', DEFAULT_HOST)!r}, "
            f"port={self.get('opensearch.port', str(DEFAULT_PORT))!r}, "
            f"index_name={self.get('opensearch.index.name', DEFAULT_INDEX_NAME)!r})"
        )

    # -- raw access --------------------------------------------------------

    def get(self, key: str, default: str | None = None) -> str | None:
        env_value = self._environ.get(env_var_for(key))
        if env_value is not None:
            return env_value
        return self._values.get(key, default)

    def get_int(self, key: str, default: int) -> int:
        raw = self.get(key)
        if raw is None:
            return default
        try:
            return int(raw.strip())
        except ValueError:
            raise ConfigParseError(key, raw, "integer") from None

    def get_bool(self, key: str, default: bool) -> bool:
        raw = self.get(key)
        if raw is None:
            return default
        value = raw.strip().lower()
        if value in _TRUE:
            return True
        if value in _FALSE:
            return False
        raise ConfigParseError(key, raw, "boolean")

    def get_list(self, key: str, default: tuple[str, ...]) -> tuple[str, ...]:
        raw = self.get(key)
        if raw is None:
            return default
        return tuple(part.strip() for part in raw.split(",") if part.strip())

    # -- connection --------------------------------------------------------

    @property
    def host(self) -> str:
        return self.get("opensearch.host", DEFAULT_HOST)

    @property
    def port(self) -> int:
        return self.get_int("opensearch.port", DEFAULT_PORT)

    @property
    def scheme(self) -> str:
        return self.get("opensearch.scheme", DEFAULT_SCHEME)

    @property
    def verify_certs(self) -> bool:
        return self.get_bool("opensearch.verify.certs", False)

    @property
    def client_timeout(self) -> int:
        return self.get_int("opensearch.client.timeout", DEFAULT_CLIENT_TIMEOUT)

    @property
    def username(self) -> str | None:
        return self.get("opensearch.username")

    @property
    def password(self) -> str | None:
        return self.get("opensearch.password")

    # Carried through for SigV4 setups; not used by the search path.
    @property
    def aws_region(self) -> str:
        return self.get("aws.region", DEFAULT_AWS_REGION)

    @property
    def aws_service(self) -> str:
        return self.get("aws.service", DEFAULT_AWS_SERVICE)

    # -- query defaults ----------------------------------------------------

    @property
    def index_name(self) -> str:
        return self.get("opensearch.index.name", DEFAULT_INDEX_NAME)

    @property
    def search_pipeline(self) -> str:
        return self.get("opensearch.search.pipeline", DEFAULT_SEARCH_PIPELINE)

    @property
    def embedding_model_id(self) -> str:
        return self.get("opensearch.embedding.model.id", DEFAULT_EMBEDDING_MODEL_ID)

    @property
    def context_size(self) -> int:
        return self.get_int("opensearch.rag.context.size", DEFAULT_CONTEXT_SIZE)

    @property
    def timeout(self) -> int:
        return self.get_int("opensearch.rag.timeout", DEFAULT_RAG_TIMEOUT)

    @property
    def llm_model(self) -> str:
        return self.get("opensearch.rag.llm.model", DEFAULT_LLM_MODEL)

    @property
    def result_size(self) -> int:
        return self.get_int("opensearch.rag.result.size", DEFAULT_RESULT_SIZE)

    @property
    def neural_k(self) -> int:
        return self.get_int("opensearch.neural.k", DEFAULT_NEURAL_K)

    @property
    def source_fields(self) -> tuple[str, ...]:
        return self.get_list("opensearch.source.fields", DEFAULT_SOURCE_FIELDS)


def resolve_config_path(path: str | Path | None = None) -> Path:
    """Explicit path, else $CONVERSATIONAL_SEARCH_CONFIG, else ./application.properties."""
    if path is None:
        path = os.getenv(CONFIG_PATH_ENV, DEFAULT_CONFIG_FILE)
    return Path(path)


def load_config(path: str | Path | None = None, environ: Mapping[str, str] | None = None) -> Config:
    """
    Load configuration from a properties file.

    Raises:
        ConfigLoadError: If the file does not exist or cannot be read.
    """
    config_path = resolve_config_path(path)
    if not config_path.is_file():
        raise ConfigLoadError(f"Unable to find {config_path}")
    try:
        values = dotenv_values(config_path, interpolate=False, encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise ConfigLoadError(f"Unable to read {config_path}: {exc}") from exc
    return Config(values, environ=environ)
