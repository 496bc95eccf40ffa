"""Shared fixtures."""

import pytest

from proprio.motion import AnalysisMode, MotionAnalyzer


@pytest.fixture
def tremor_analyzer():
    analyzer = MotionAnalyzer(mode=AnalysisMode.TREMOR)
    analyzer.start()
    return analyzer


@pytest.fixture
def gait_analyzer():
    analyzer = MotionAnalyzer(mode=AnalysisMode.GAIT)
    analyzer.start()
    return analyzer
