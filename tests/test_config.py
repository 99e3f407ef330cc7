from __future__ import annotations

"""Configuration and logging setup tests."""

import logging

import pytest

from search_common.config import BM25Params, SearchConfig, configure_logging
from search_common.exceptions import InvalidParameterError


def test_defaults() -> None:
    config = SearchConfig()

    assert config.bm25_params() == BM25Params(k1=1.2, b=0.75, epsilon=0.0)
    assert config.rrf_k == 60
    assert config.to_dict()["parallel_search"] is True


def test_from_env(monkeypatch) -> None:
    monkeypatch.setenv("BM25_K1", "1.6")
    monkeypatch.setenv("BM25_B", "0.3")
    monkeypatch.setenv("BM25_EPSILON", "0.1")
    monkeypatch.setenv("RRF_K", "20")
    monkeypatch.setenv("SEARCH_LIMIT", "7")
    monkeypatch.setenv("CANDIDATE_MULTIPLIER", "3")
    monkeypatch.setenv("PARALLEL_SEARCH", "false")
    monkeypatch.setenv("LOG_LEVEL", "DEBUG")
    monkeypatch.delenv("LOG_FILE", raising=False)

    config = SearchConfig.from_env()

    assert config.bm25_params() == BM25Params(k1=1.6, b=0.3, epsilon=0.1)
    assert (config.rrf_k, config.default_limit, config.candidate_multiplier) == (20, 7, 3)
    assert config.parallel_search is False
    assert config.log_level == "DEBUG"
    assert config.log_file is None


def test_invalid_env_parameters_fail_when_params_built(monkeypatch) -> None:
    monkeypatch.setenv("BM25_B", "-0.5")

    with pytest.raises(InvalidParameterError):
        SearchConfig.from_env().bm25_params()


def test_params_reject_non_numbers() -> None:
    with pytest.raises(InvalidParameterError):
        BM25Params(k1="1.2")
    with pytest.raises(InvalidParameterError):
        BM25Params(b=True)


def test_params_are_immutable() -> None:
    params = BM25Params()
    with pytest.raises(AttributeError):
        params.k1 = 2.0


def test_configure_logging_writes_to_file(tmp_path) -> None:
    log_file = tmp_path / "search.log"
    root = logging.getLogger()
    previous_handlers, previous_level = root.handlers[:], root.level

    try:
        configure_logging(SearchConfig(log_level="debug", log_file=str(log_file)))
        logging.getLogger("bm25").debug("indexed corpus")
        for handler in root.handlers:
            handler.flush()

        assert root.level == logging.DEBUG
        assert "bm25 - DEBUG - indexed corpus" in log_file.read_text(encoding="utf-8")
    finally:
        for handler in root.handlers[:]:
            root.removeHandler(handler)
            handler.close()
        for handler in previous_handlers:
            root.addHandler(handler)
        root.setLevel(previous_level)
