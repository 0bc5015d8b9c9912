import sys
from pathlib import Path

import pytest

# Ensure the `leadrank` package is importable when running pytest from the repo root.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from leadrank.core.config import GenerationConfig, Settings  # noqa: E402


@pytest.fixture
def settings(tmp_path):
    return Settings(
        maps_api_key="maps-key",
        ai_api_key="ai-key",
        model="gemini-test",
        center_address="Main St 1, Gotham",
        radius=500,
        max_in_flight=2,
        analysis_workers=4,
        request_timeout=5,
        page_token_delay=0,
        output_dir=str(tmp_path),
        generation=GenerationConfig(),
    )
