"""Unit tests for the backend factory and inference context."""

from __future__ import annotations

from unittest.mock import Mock

import pytest

from photo_finder.backends import factory
from photo_finder.backends.factory import InferenceContext, create_extractor, create_inference_context
from photo_finder.core.config import Config


@pytest.fixture
def fake_create_extractor(monkeypatch):
    """Replace model loading with a mock."""
    mock = Mock(side_effect=lambda pipeline, config: Mock(name=f"{pipeline}-extractor"))
    monkeypatch.setattr(factory, "create_extractor", mock)
    return mock


def test_extractor_requires_initialize(fake_create_extractor):
    """Test that the extractor is unavailable before initialize()."""
    context = InferenceContext(Config())

    assert not context.is_initialized
    with pytest.raises(RuntimeError, match="initialize"):
        _ = context.extractor
    fake_create_extractor.assert_not_called()


def test_initialize_and_close(fake_create_extractor):
    """Test the context lifecycle."""
    context = InferenceContext(Config())

    assert context.initialize() is context
    assert context.is_initialized
    extractor = context.extractor

    # Second initialize keeps the loaded models
    context.initialize()
    assert context.extractor is extractor
    fake_create_extractor.assert_called_once()

    context.close()
    assert not context.is_initialized
    with pytest.raises(RuntimeError):
        _ = context.extractor


def test_context_manager(fake_create_extractor):
    """Test using the context in a with block."""
    with create_inference_context(Config(), pipeline="enriched") as context:
        assert context.is_initialized
        assert context.pipeline == "enriched"

    assert not context.is_initialized
    fake_create_extractor.assert_called_once()
    assert fake_create_extractor.call_args[0][0] == "enriched"


def test_contexts_are_independent(fake_create_extractor):
    """Test that contexts do not share models."""
    first = InferenceContext(Config()).initialize()
    second = InferenceContext(Config()).initialize()

    assert first.extractor is not second.extractor

    first.close()
    assert second.is_initialized


def test_pipeline_defaults_to_config(fake_create_extractor):
    """Test that the pipeline comes from config unless overridden."""
    assert InferenceContext(Config(pipeline="enriched")).pipeline == "enriched"
    assert InferenceContext(Config(pipeline="enriched"), pipeline="minimal").pipeline == "minimal"


def test_unknown_pipeline():
    """Test that unknown pipelines are rejected."""
    with pytest.raises(ValueError, match="Unknown pipeline"):
        InferenceContext(Config(), pipeline="full")

    with pytest.raises(ValueError, match="Unknown pipeline"):
        create_extractor("full", Config())


def test_repr(fake_create_extractor):
    """Test string representation of context."""
    context = InferenceContext(Config())

    assert "not initialized" in repr(context)
    context.initialize()
    assert "initialized" in repr(context)
    assert "minimal" in repr(context)
