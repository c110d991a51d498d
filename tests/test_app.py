from __future__ import annotations

import asyncio
import dataclasses
from pathlib import Path

from textual.widgets import ListItem

from peta.app import ConfirmDeleteScreen, PetaApp, RequestListWidget


def test_list_marks_running_request(tmp_path: Path) -> None:
    async def scenario() -> list:
        app = PetaApp(store_path=tmp_path / "requests.json")
        async with app.run_test() as pilot:
            await pilot.pause()
            running_id = app.session.requests[1].id
            app.session = dataclasses.replace(app.session, in_flight=frozenset({running_id}))
            app._reload_request_list()
            await pilot.pause()
            items = app.query_one(RequestListWidget).query(ListItem)
            return [item.has_class("running") for item in items]

    assert asyncio.run(scenario()) == [False, True]


def test_delete_dialog_targets_highlighted_request(tmp_path: Path) -> None:
    async def scenario() -> tuple:
        app = PetaApp(store_path=tmp_path / "requests.json")
        async with app.run_test() as pilot:
            await pilot.pause()
            await pilot.press("d")
            await pilot.pause()
            screen = app.screen
            target = screen.request.name if isinstance(screen, ConfirmDeleteScreen) else None
            await pilot.press("n")
            await pilot.pause()
            return target, len(app.session.requests)

    assert asyncio.run(scenario()) == ("GET Example", 2)
