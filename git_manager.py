import logging
from typing import Dict, List, Optional

import git

from git_graph_data import HistoryItem, HistoryItemRef, HistoryProviderSnapshot

DEFAULT_HISTORY_LIMIT = 400
SHORT_ID_LENGTH = 7

REF_PREFIX_ICONS = [
    ("refs/heads/", "branch"),
    ("refs/remotes/", "remote"),
    ("refs/tags/", "tag"),
]


def short_id(hexsha: str) -> str:
    return hexsha[:SHORT_ID_LENGTH]


def short_ref_name(path: str) -> str:
    """'refs/heads/main' -> 'main', 'refs/remotes/origin/main' -> 'origin/main'"""
    for prefix, _ in REF_PREFIX_ICONS:
        if path.startswith(prefix):
            return path[len(prefix) :]
    return path


def icon_for_ref(path: str) -> Optional[str]:
    for prefix, icon in REF_PREFIX_ICONS:
        if path.startswith(prefix):
            return icon
    return None


class GitManager:
    def __init__(self, repo_path: str):
        self.repo_path = repo_path
        self.repo: Optional[git.Repo] = None

    def initialize(self) -> bool:
        """Open the repository, False when the path is not a git work tree."""
        try:
            self.repo = git.Repo(self.repo_path)
            return True
        except (git.InvalidGitRepositoryError, git.NoSuchPathError):
            logging.warning("Not a git repository: %s", self.repo_path)
            return False

    def _resolved_refs(self) -> Dict[str, str]:
        """Map every branch, remote branch and tag path to the commit it points to."""
        resolved = {}
        for ref in self.repo.references:
            if icon_for_ref(ref.path) is None:
                continue
            try:
                resolved[ref.path] = ref.commit.hexsha
            except (ValueError, TypeError) as e:
                # dangling symbolic refs, tags on trees or blobs
                logging.debug("Skipping unresolvable ref %s: %s", ref.path, e)
        return resolved

    @staticmethod
    def _find_base_path(base_ref: Optional[str], resolved: Dict[str, str]) -> Optional[str]:
        if not base_ref:
            return None
        for candidate in (base_ref, f"refs/heads/{base_ref}", f"refs/remotes/{base_ref}"):
            if candidate in resolved:
                return candidate
        logging.debug("Base ref %s not found", base_ref)
        return None

    def _decorations(self, resolved: Dict[str, str], base_path: Optional[str]) -> Dict[str, List[HistoryItemRef]]:
        decorations_map: Dict[str, List[HistoryItemRef]] = {}
        for path, hexsha in resolved.items():
            history_ref = HistoryItemRef(
                id=path,
                name=short_ref_name(path),
                revision=short_id(hexsha),
                icon="base" if path == base_path else icon_for_ref(path),
            )
            decorations_map.setdefault(hexsha, []).append(history_ref)
        return decorations_map

    def _current_refs(self, resolved: Dict[str, str], base_path: Optional[str]):
        head = self.repo.head
        if not head.is_valid():
            # unborn branch
            return None, None, None

        if head.is_detached:
            current_ref = HistoryItemRef(
                id="HEAD", name="HEAD", revision=short_id(head.commit.hexsha), icon="branch"
            )
            current_remote_ref = None
        else:
            branch_path = head.reference.path
            current_ref = HistoryItemRef(
                id=branch_path,
                name=short_ref_name(branch_path),
                revision=short_id(head.commit.hexsha),
                icon="branch",
            )
            remote_path = f"refs/remotes/origin/{current_ref.name}"
            current_remote_ref = None
            if remote_path in resolved:
                current_remote_ref = HistoryItemRef(
                    id=remote_path,
                    name=f"origin/{current_ref.name}",
                    revision=short_id(resolved[remote_path]),
                    icon="remote",
                )

        current_base_ref = None
        if base_path is not None:
            current_base_ref = HistoryItemRef(
                id=base_path,
                name=short_ref_name(base_path),
                revision=short_id(resolved[base_path]),
                icon="base",
            )
        return current_ref, current_remote_ref, current_base_ref

    def _walk_roots(self, resolved: Dict[str, str]) -> List[str]:
        roots = []
        for path, hexsha in resolved.items():
            if path.startswith("refs/heads/") and hexsha not in roots:
                roots.append(hexsha)
        if not roots and self.repo.head.is_valid():
            roots.append(self.repo.head.commit.hexsha)
        return roots

    @staticmethod
    def _to_history_item(commit: git.Commit, references: List[HistoryItemRef]) -> HistoryItem:
        summary = commit.summary
        if isinstance(summary, bytes):
            summary = summary.decode("utf-8", errors="replace")
        return HistoryItem(
            id=short_id(commit.hexsha),
            parent_ids=[short_id(parent.hexsha) for parent in commit.parents],
            subject=summary or "(no message)",
            author=commit.author.name or "Unknown",
            timestamp=commit.committed_date * 1000,
            references=list(references),
            full_hash=commit.hexsha,
        )

    def get_git_history(
        self, limit: Optional[int] = None, cursor: Optional[str] = None, base_ref: Optional[str] = None
    ) -> HistoryProviderSnapshot:
        """Load one page of history for the commit graph.

        Args:
            limit: page size, non-positive or None means DEFAULT_HISTORY_LIMIT
            cursor: full hash of the last commit of the previous page
            base_ref: branch to mark as the base ref, e.g. 'main' or 'origin/main'

        Returns:
            the snapshot, ordered children before parents
        """
        if not self.repo:
            return HistoryProviderSnapshot()

        effective_limit = limit if limit and limit > 0 else DEFAULT_HISTORY_LIMIT
        resolved = self._resolved_refs()
        base_path = self._find_base_path(base_ref, resolved)
        decorations_map = self._decorations(resolved, base_path)
        current_ref, current_remote_ref, current_base_ref = self._current_refs(resolved, base_path)

        roots = self._walk_roots(resolved)
        if not roots:
            return HistoryProviderSnapshot(current_ref=current_ref)

        items: List[HistoryItem] = []
        cursor_seen = cursor is None
        last_full_hash = None
        has_more = False

        for commit in self.repo.iter_commits(roots, topo_order=True):
            if len(items) >= effective_limit:
                has_more = True
                break

            if not cursor_seen:
                if commit.hexsha == cursor:
                    cursor_seen = True
                continue

            items.append(self._to_history_item(commit, decorations_map.get(commit.hexsha, [])))
            last_full_hash = commit.hexsha

        if not cursor_seen:
            logging.warning("History cursor %s not found, reloading from the top", cursor)
            first_page = self.get_git_history(effective_limit, None, base_ref)
            first_page.restarted = True
            return first_page

        logging.debug("Loaded %d history items from %s (has_more=%s)", len(items), self.repo_path, has_more)
        return HistoryProviderSnapshot(
            items=items,
            current_ref=current_ref,
            current_remote_ref=current_remote_ref,
            current_base_ref=current_base_ref,
            next_cursor=last_full_hash,
            has_more=has_more,
        )
