import asyncio
import os

import pytest

from synax_agent.display import DisplayState, poll_cwd


def test_status_line_shows_model_and_mcp_indicator(display):
    display.state.cwd = "/srv/notes"
    plain = display.render_status_line().plain
    assert plain.startswith(" -> /srv/notes")
    assert plain.endswith("test-model")
    assert "MCP" not in plain

    display.state.mcp_connected = True
    assert "● MCP" in display.render_status_line().plain


def test_status_bar_can_be_disabled(display, output):
    display.show_status_line()
    assert output.getvalue() == ""


def test_messages_are_not_parsed_as_markup(display, output):
    display.info("[bold]literal[/bold]")
    display.failure("Could not connect")
    text = output.getvalue()
    assert "[bold]literal[/bold]" in text
    assert "✗ Could not connect" in text


@pytest.mark.asyncio
async def test_poll_cwd_tracks_directory_changes(tmp_path):
    target = tmp_path / "sub"
    target.mkdir()
    state = DisplayState(cwd="/nowhere", model="m")

    task = asyncio.create_task(poll_cwd(state, interval=0.01))
    try:
        await asyncio.sleep(0.05)
        assert os.path.realpath(state.cwd) == os.path.realpath(tmp_path)
        os.chdir(target)
        await asyncio.sleep(0.05)
        assert os.path.realpath(state.cwd) == os.path.realpath(target)
    finally:
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task


@pytest.mark.asyncio
async def test_polling_lifecycle(display):
    display.start_polling(0.01)
    assert display._poller is not None
    await display.stop_polling()
    assert display._poller is None
