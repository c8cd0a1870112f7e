"""
Integration Tests for the Application.

End-to-end flows through NotesApp: first start population, restarts,
sort order persistence and the interactive shell.
"""

import random

import pytest
from rich.console import Console

from notekeeper.app import NotesApp
from notekeeper.cli.shell import InteractiveShell
from notekeeper.core.exceptions import DataCorruptionError
from notekeeper.core.preferences import PreferenceStore
from notekeeper.viewmodels.sort_order import SortOrder

pytestmark = pytest.mark.integration


def _ids(items) -> list[int]:
    return [item.note.id for item in items]


@pytest.fixture
async def app(tmp_path):
    """Started application with an empty database."""
    notes_app = NotesApp.in_directory(tmp_path, seed_count=0, rng=random.Random(11))
    await notes_app.start()
    yield notes_app
    await notes_app.close()


class TestStartup:
    async def test_first_start_populates_database(self, tmp_path):
        """Should seed ten notes the first time the data directory is used."""
        async with NotesApp.in_directory(tmp_path, rng=random.Random(1)) as app:
            assert await app.snapshot(app.view_model.observe_count()) == 10
            notes = await app.snapshot(app.view_model.observe_all())
            assert _ids(notes) == list(range(1, 11))

    async def test_restart_does_not_populate_again(self, tmp_path):
        """Should report an existing database and leave its notes alone."""
        first = NotesApp.in_directory(tmp_path)
        assert await first.start() is True
        await first.close()

        second = NotesApp.in_directory(tmp_path)
        assert await second.start() is False
        assert await second.snapshot(second.view_model.observe_count()) == 10
        await second.close()

    async def test_close_without_start_is_noop(self, tmp_path):
        await NotesApp.in_directory(tmp_path).close()

    async def test_notes_available_to_first_observer(self, tmp_path, recorder):
        """Population finishes before start() returns."""
        app = NotesApp.in_directory(tmp_path, seed_count=3)
        await app.start()

        app.view_model.observe_count().subscribe(recorder)
        await app.store.join()

        assert recorder.values == [3]
        await app.close()


class TestScenario:
    async def test_generate_sort_and_delete(self, app, recorder):
        """Should keep the sorted list in step with generate, sort and delete."""
        view_model = app.view_model
        view_model.observe_sorted().subscribe(recorder)

        for _ in range(10):
            view_model.generate_note()
        await app.store.join()

        assert len(recorder.last) == 10
        assert await app.snapshot(view_model.observe_count()) == 10

        view_model.set_sort_order(SortOrder.BY_CREATION_DATE)
        dates = [item.note.creation_date for item in recorder.last]
        assert dates == sorted(dates, reverse=True)

        view_model.set_sort_order(SortOrder.BY_ETA)
        scheduled = [item for item in recorder.last if item.is_scheduled]
        assert list(recorder.last[:len(scheduled)]) == scheduled
        assert [i.schedule.date for i in scheduled] == sorted(i.schedule.date for i in scheduled)

        view_model.delete_all_notes()
        await app.store.join()

        assert recorder.last == ()
        assert await app.snapshot(view_model.observe_count()) == 0

    async def test_sort_order_survives_restart(self, tmp_path):
        """Should read back the order chosen before the restart."""
        async with NotesApp.in_directory(tmp_path, seed_count=0) as app:
            app.view_model.set_sort_order("by_eta")

        async with NotesApp.in_directory(tmp_path, seed_count=0) as app:
            assert app.view_model.sort_order is SortOrder.BY_ETA

    async def test_corrupt_sort_order_fails_fast(self, tmp_path):
        """Should refuse to sort with a persisted order nobody recognizes."""
        (tmp_path / "notes_prefs.yaml").write_text("sort_order: SIDEWAYS\n")

        async with NotesApp.in_directory(tmp_path, seed_count=0) as app:
            with pytest.raises(DataCorruptionError):
                await app.snapshot(app.view_model.observe_sorted())


class TestShell:
    @pytest.fixture
    def shell(self, app):
        console = Console(record=True, width=140, color_system=None)
        return InteractiveShell(app, console)

    async def test_generate_and_count(self, shell, app):
        """Should print the new count after generating notes."""
        await shell.execute("generate 3")
        await shell.execute("count")

        assert "3 notes" in shell.console.export_text()

    async def test_sort_command_persists(self, shell, app):
        """Should write the chosen order to the preference file."""
        await shell.execute("sort by_creation_date")
        assert app.view_model.sort_order is SortOrder.BY_CREATION_DATE
        assert app.preferences.get_string("sort_order") == "BY_CREATION_DATE"

    async def test_sort_from_another_process_reaches_attached_views(self, shell, app, tmp_path):
        """Should show a sort order another process wrote, before running the next command."""
        shell.attach()
        other = PreferenceStore(tmp_path / "notes_prefs.yaml")
        other.edit().put_string("sort_order", "BY_ETA").apply()

        await shell.execute("count")
        shell.detach()

        assert "Sorted by BY_ETA" in shell.console.export_text()
        assert app.view_model.sort_order is SortOrder.BY_ETA

    async def test_invalid_sort_is_reported(self, shell, app):
        """Should print the error and keep the current order."""
        await shell.execute("sort sideways")

        assert "Unknown sort order" in shell.console.export_text()
        assert app.view_model.sort_order is SortOrder.NONE

    async def test_generate_rejects_bad_counts(self, shell, app):
        """Should reject non-numeric and out-of-range counts without writing."""
        await shell.execute("generate lots")
        await shell.execute("generate 0")
        await app.store.join()

        output = shell.console.export_text()
        assert "Not a number: lots" in output
        assert "Generate between 1 and 1000 notes" in output
        assert await app.snapshot(app.view_model.observe_count()) == 0

    async def test_unknown_command(self, shell):
        await shell.execute("fly")
        assert "Unknown command: fly" in shell.console.export_text()

    async def test_attached_views_redraw_on_changes(self, shell, app):
        """Should redraw every bound view as the data changes, and unbind on detach."""
        shell.attach()
        await app.store.join()

        await shell.execute("generate")
        await app.store.join()
        await shell.execute("delete")
        await app.store.join()
        shell.detach()

        output = shell.console.export_text()
        assert "Sorted by NONE" in output
        assert "1 note" in output
        assert output.count("0 notes") >= 2
        assert not app.view_model.observe_sorted().has_observers

    async def test_watch_toggles_list(self, shell, app):
        shell.attach()
        assert shell.watching
        await shell.execute("watch")
        assert not shell.watching
        await shell.execute("watch")
        assert shell.watching
        shell.detach()
        await app.store.join()

    async def test_quit_stops_loop(self, shell):
        """Should leave the command loop."""
        shell.running = True
        await shell.execute("quit")
        assert not shell.running
