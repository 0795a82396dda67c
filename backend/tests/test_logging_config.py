import pytest
from structlog.testing import capture_logs

from quizhub.logging_config import log_function_call


async def test_log_function_call_passes_result_through():
    @log_function_call("double")
    async def double(value):
        return value * 2

    with capture_logs() as logs:
        assert await double(21) == 42

    assert [entry["event"] for entry in logs] == ["Calling double", "Completed double"]
    assert double.__name__ == "double"


async def test_log_function_call_reraises():
    @log_function_call("explode")
    async def explode():
        raise KeyError("missing")

    with capture_logs() as logs:
        with pytest.raises(KeyError):
            await explode()

    assert logs[-1]["event"] == "explode failed"
    assert logs[-1]["error_type"] == "KeyError"
    assert logs[-1]["log_level"] == "warning"
