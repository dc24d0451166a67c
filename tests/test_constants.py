"""Tests for studio contract constants."""

import pytest

from studio.config.constants import STUDIO, StudioConstants


class TestStudioConstants:
    """Contract values are fixed and immutable."""

    def test_singleton_is_frozen(self):
        with pytest.raises(AttributeError):
            STUDIO.SUBTITLE_HISTORY_LIMIT = 10

    def test_subtitle_history(self):
        assert STUDIO.SUBTITLE_HISTORY_LIMIT == 5

    def test_quality_bounds(self):
        assert STUDIO.QUALITY_MIN == 60
        assert STUDIO.QUALITY_MAX == 100
        assert STUDIO.QUALITY_MIN <= STUDIO.QUALITY_INITIAL <= STUDIO.QUALITY_MAX

    def test_random_walk_steps(self):
        assert (STUDIO.VIEWER_STEP_MIN, STUDIO.VIEWER_STEP_MAX) == (-2, 3)
        assert (STUDIO.QUALITY_STEP_MIN, STUDIO.QUALITY_STEP_MAX) == (-10, 10)

    def test_default_stream_quality(self):
        assert STUDIO.DEFAULT_RESOLUTION == "1080p"
        assert STUDIO.DEFAULT_BITRATE_KBPS == 2500
        assert STUDIO.DEFAULT_FPS == 30
        assert STUDIO.DEFAULT_LATENCY_MS == 100

    def test_retention_limits(self):
        assert STUDIO.RETAINED_TERMINAL_SESSIONS == 32
        assert STUDIO.UTTERANCE_HISTORY_LIMIT == 16

    def test_fresh_instance_matches_singleton(self):
        assert StudioConstants() == STUDIO
