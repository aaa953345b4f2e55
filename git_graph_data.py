# git_graph_data.py

from dataclasses import dataclass, field, replace


def _drop_none(data: dict) -> dict:
    return {key: value for key, value in data.items() if value is not None}


@dataclass
class HistoryItemRef:
    """A named pointer (branch, tag, remote branch) resolving to a commit."""

    id: str  # stable key across the whole history, e.g. 'refs/heads/main'
    name: str  # display text, e.g. 'main'
    revision: str | None = None  # only set on the current/remote/base pointers
    color: str | None = None
    icon: str | None = None  # 'branch' | 'tag' | 'remote' | 'base' | None

    def to_dict(self) -> dict:
        return _drop_none(
            {"id": self.id, "name": self.name, "revision": self.revision, "color": self.color, "icon": self.icon}
        )


@dataclass
class HistoryItem:
    id: str
    parent_ids: list[str] = field(default_factory=list)  # index 0 is the primary parent
    subject: str = ""
    author: str = ""
    timestamp: int = 0  # milliseconds
    references: list[HistoryItemRef] = field(default_factory=list)
    summary: str | None = None
    full_hash: str | None = None

    def to_dict(self) -> dict:
        return _drop_none(
            {
                "id": self.id,
                "parentIds": list(self.parent_ids),
                "subject": self.subject,
                "author": self.author,
                "timestamp": self.timestamp,
                "references": [ref.to_dict() for ref in self.references],
                "summary": self.summary,
                "fullHash": self.full_hash,
            }
        )

    def __repr__(self) -> str:
        return (
            f"HistoryItem(id='{self.id}', "
            f"parent_ids={self.parent_ids}, "
            f"references={[ref.name for ref in self.references]}, "
            f"subject='{self.subject[:20]}')"
        )


@dataclass
class HistoryGraphNode:
    """One lane segment of a row.

    `id` is not the lane number: it is the commit this lane is still heading
    toward.
    """

    id: str
    color: str

    def to_dict(self) -> dict:
        return {"id": self.id, "color": self.color}


@dataclass
class HistoryItemViewModel:
    history_item: HistoryItem
    is_current: bool
    input_swimlanes: list[HistoryGraphNode]
    output_swimlanes: list[HistoryGraphNode]

    def to_dict(self) -> dict:
        return {
            "historyItem": self.history_item.to_dict(),
            "isCurrent": self.is_current,
            "inputSwimlanes": [node.to_dict() for node in self.input_swimlanes],
            "outputSwimlanes": [node.to_dict() for node in self.output_swimlanes],
        }


@dataclass
class HistoryProviderSnapshot:
    """A page of history as handed over by the git-log provider."""

    items: list[HistoryItem] = field(default_factory=list)
    current_ref: HistoryItemRef | None = None
    current_remote_ref: HistoryItemRef | None = None
    current_base_ref: HistoryItemRef | None = None
    next_cursor: str | None = None
    has_more: bool = False
    restarted: bool = False  # the cursor was lost and this page starts again from the top

    def extend(self, page: "HistoryProviderSnapshot") -> "HistoryProviderSnapshot":
        """Return a new snapshot with `page` appended.

        The ref pointers of the first page are kept; cursor state comes from
        the newer page. A restarted page replaces the snapshot instead, since
        its items repeat the ones already loaded.
        """
        if page.restarted:
            return page
        return replace(
            self,
            items=self.items + page.items,
            next_cursor=page.next_cursor,
            has_more=page.has_more,
        )

    def to_dict(self) -> dict:
        return _drop_none(
            {
                "items": [item.to_dict() for item in self.items],
                "currentRef": self.current_ref.to_dict() if self.current_ref else None,
                "currentRemoteRef": self.current_remote_ref.to_dict() if self.current_remote_ref else None,
                "currentBaseRef": self.current_base_ref.to_dict() if self.current_base_ref else None,
                "nextCursor": self.next_cursor,
                "hasMore": self.has_more,
                "restarted": self.restarted or None,
            }
        )
