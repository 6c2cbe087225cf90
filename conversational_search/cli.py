# ---------------------------------------------------------------------------
# cli.py
# ---------------------------------------------------------------------------
# Example program: ask one question through the RAG search pipeline and
# print the generated answer with the retrieved documents, then repeat
# with explicit per-call parameters.
#
# Usage:
#   python -m conversational_search.cli                      # sample question
#   python -m conversational_search.cli "What is OpenSearch?"
#
# Credentials, if the cluster needs them, come from OPENSEARCH_USERNAME /
# OPENSEARCH_PASSWORD (a .env file is honoured).
# ---------------------------------------------------------------------------

from __future__ import annotations

import logging
import sys

from dotenv import load_dotenv

from conversational_search.config import load_config
from conversational_search.errors import ConfigError, ConnectionError, SearchError
from conversational_search.open_search_connect import Connection, connect, resolve_credentials
from conversational_search.query import SearchOverrides
from conversational_search.response import extract_answer, format_results
from conversational_search.search import conversational_search

logger = logging.getLogger("conversational_search.cli")

DEFAULT_QUESTION = (
    "OpenSearch Serverless 是什么，和OpenSearch集群模式有什么区别，"
    "使用 OpenSearch Serverless，还需要管理服务器资源么？"
)

CUSTOM_QUESTION = "What are the key features of OpenSearch?"
CUSTOM_OVERRIDES = SearchOverrides(
    result_size=3,
    source_fields=("text", "title"),
    timeout_seconds=20,
)


def run_custom_example(connection: Connection, config) -> None:
    """Search again with explicit parameters; failures are reported only."""
    print("\n\n=== Example with Custom Parameters ===\n")
    try:
        response = conversational_search(connection, config, CUSTOM_QUESTION, CUSTOM_OVERRIDES)
    except SearchError as exc:
        logger.error("Error in custom parameters example: %s", exc)
        print(f"Error in custom example: {exc}", file=sys.stderr)
        return
    print(format_results(response))


def main(argv: list[str] | None = None) -> int:
    argv = sys.argv[1:] if argv is None else argv
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logger.info("Starting OpenSearch conversational search example")

    try:
        load_dotenv()
        config = load_config()
    except ConfigError as exc:
        logger.error("Error loading configuration: %s", exc)
        print(f"Error loading configuration: {exc}", file=sys.stderr)
        return 1

    if argv:
        question = argv[0]
        logger.info("Using question from command line: %s", question)
    else:
        question = DEFAULT_QUESTION
        logger.info("Using default question: %s", question)

    try:
        with connect(config, resolve_credentials(config)) as connection:
            print("\nExecuting conversational search...")
            print(f"Question: {question}")

            response = conversational_search(connection, config, question)
            print(format_results(response))

            if extract_answer(response) is not None:
                logger.info("Successfully retrieved generated answer")
            else:
                logger.warning("No generated answer found in response")

            run_custom_example(connection, config)
    except (ConnectionError, SearchError, ConfigError) as exc:
        logger.error("Error during search operation: %s", exc)
        print(f"Error performing search: {exc}", file=sys.stderr)
        return 1

    logger.info("Example completed successfully")
    return 0


if __name__ == "__main__":
    sys.exit(main())
