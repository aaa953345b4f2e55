import os
import sys
import unittest

from PyQt6.QtCore import QCoreApplication

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))
from git_graph_data import HistoryItem, HistoryProviderSnapshot
import threads
from threads import HistoryLoadThread, LoadMoreHistoryThread


class FakeGitManager:
    def __init__(self, pages=None, error=None):
        self.pages = pages or {}
        self.error = error
        self.calls = []

    def get_git_history(self, limit=None, cursor=None, base_ref=None):
        self.calls.append((limit, cursor, base_ref))
        if self.error:
            raise self.error
        return self.pages[cursor]


FIRST_PAGE = HistoryProviderSnapshot(
    items=[HistoryItem(id="a", parent_ids=["b"]), HistoryItem(id="b", parent_ids=["c"])],
    next_cursor="b-full",
    has_more=True,
)
SECOND_PAGE = HistoryProviderSnapshot(
    items=[HistoryItem(id="c", parent_ids=["d"]), HistoryItem(id="d", parent_ids=[])],
    next_cursor="d-full",
    has_more=False,
)


class ThreadTestCase(unittest.TestCase):
    @classmethod
    def setUpClass(cls):
        cls.app = QCoreApplication.instance() or QCoreApplication([])

    def capture(self, thread):
        results = []
        errors = []
        thread.finished.connect(lambda snapshot, view_models: results.append((snapshot, view_models)))
        thread.error.connect(errors.append)
        return results, errors


class TestHistoryLoadThread(ThreadTestCase):
    def test_module_documents_signal_usage(self):
        for name in ("finished", "error", "start()", "LoadMoreHistoryThread"):
            self.assertIn(name, threads.__doc__)

    def test_emits_snapshot_and_view_models(self):
        manager = FakeGitManager(pages={None: FIRST_PAGE})
        thread = HistoryLoadThread(manager, limit=2, base_ref="main")
        results, errors = self.capture(thread)

        thread.run()

        self.assertEqual(errors, [])
        self.assertEqual(manager.calls, [(2, None, "main")])
        snapshot, view_models = results[0]
        self.assertIs(snapshot, FIRST_PAGE)
        self.assertEqual([vm.history_item.id for vm in view_models], ["a", "b"])

    def test_emits_error(self):
        thread = HistoryLoadThread(FakeGitManager(error=RuntimeError("boom")))
        results, errors = self.capture(thread)

        with self.assertLogs(level="WARNING"):
            thread.run()

        self.assertEqual(results, [])
        self.assertEqual(errors, ["boom"])


class TestLoadMoreHistoryThread(ThreadTestCase):
    def test_appends_next_page_and_relays_whole_history(self):
        manager = FakeGitManager(pages={"b-full": SECOND_PAGE})
        thread = LoadMoreHistoryThread(manager, FIRST_PAGE, limit=2)
        results, errors = self.capture(thread)

        thread.run()

        self.assertEqual(errors, [])
        self.assertEqual(manager.calls, [(2, "b-full", None)])
        snapshot, view_models = results[0]
        self.assertEqual([history_item.id for history_item in snapshot.items], ["a", "b", "c", "d"])
        self.assertFalse(snapshot.has_more)
        self.assertEqual(snapshot.next_cursor, "d-full")
        # lanes continue across the page boundary
        self.assertEqual(view_models[2].input_swimlanes, view_models[1].output_swimlanes)
        self.assertEqual([node.id for node in view_models[2].input_swimlanes], ["c"])
        self.assertEqual(view_models[3].output_swimlanes, [])
        # first page snapshot is untouched
        self.assertEqual(len(FIRST_PAGE.items), 2)

    def test_nothing_more_to_load(self):
        manager = FakeGitManager()
        thread = LoadMoreHistoryThread(manager, SECOND_PAGE)
        results, errors = self.capture(thread)

        thread.run()

        self.assertEqual(manager.calls, [])
        self.assertIs(results[0][0], SECOND_PAGE)

    def test_lost_cursor_replaces_history_instead_of_duplicating(self):
        reloaded = HistoryProviderSnapshot(
            items=[HistoryItem(id="a", parent_ids=["b"]), HistoryItem(id="b", parent_ids=["c"])],
            next_cursor="b-full",
            has_more=True,
            restarted=True,
        )
        manager = FakeGitManager(pages={"b-full": reloaded})
        thread = LoadMoreHistoryThread(manager, FIRST_PAGE, limit=2)
        results, errors = self.capture(thread)

        thread.run()

        self.assertEqual(errors, [])
        snapshot, view_models = results[0]
        self.assertEqual([history_item.id for history_item in snapshot.items], ["a", "b"])
        self.assertEqual(len(view_models), 2)
        self.assertTrue(snapshot.has_more)


if __name__ == "__main__":
    unittest.main()
