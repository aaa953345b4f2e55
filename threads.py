"""后台加载提交历史的线程

A history view connects `finished(snapshot, view_models)` to redraw its rows and
`error(str)` to show a notification, then calls `start()`; for the next page it
starts a `LoadMoreHistoryThread` with the snapshot it currently shows.
"""

import logging
from typing import TYPE_CHECKING, Optional

from PyQt6.QtCore import QThread, pyqtSignal

from git_graph_data import HistoryProviderSnapshot
from git_graph_layout import to_view_model

if TYPE_CHECKING:
    from git_manager import GitManager


class HistoryLoadThread(QThread):
    """在后台加载提交历史并计算泳道布局"""

    finished = pyqtSignal(object, object)  # (HistoryProviderSnapshot, list[HistoryItemViewModel])
    error = pyqtSignal(str)

    def __init__(
        self,
        git_manager: "GitManager",
        limit: Optional[int] = None,
        base_ref: Optional[str] = None,
        parent=None,
    ):
        super().__init__(parent)
        self.git_manager = git_manager
        self.limit = limit
        self.base_ref = base_ref

    def load_snapshot(self) -> HistoryProviderSnapshot:
        return self.git_manager.get_git_history(limit=self.limit, base_ref=self.base_ref)

    def run(self):
        try:
            snapshot = self.load_snapshot()
            view_models = to_view_model(snapshot)
            self.finished.emit(snapshot, view_models)
        except Exception as e:
            logging.warning(f"Loading history failed: {e!s}")
            self.error.emit(str(e))


class LoadMoreHistoryThread(HistoryLoadThread):
    """加载下一页，并对拼接后的完整历史重新布局

    If the cursor no longer exists the provider restarts from the top and the
    shown snapshot is replaced rather than extended.
    """

    def __init__(
        self,
        git_manager: "GitManager",
        snapshot: HistoryProviderSnapshot,
        limit: Optional[int] = None,
        base_ref: Optional[str] = None,
        parent=None,
    ):
        super().__init__(git_manager, limit=limit, base_ref=base_ref, parent=parent)
        self.snapshot = snapshot

    def load_snapshot(self) -> HistoryProviderSnapshot:
        if not self.snapshot.has_more or not self.snapshot.next_cursor:
            return self.snapshot
        page = self.git_manager.get_git_history(
            limit=self.limit, cursor=self.snapshot.next_cursor, base_ref=self.base_ref
        )
        return self.snapshot.extend(page)
