# git_graph_layout.py

import logging
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Optional, Sequence

from git_graph_data import HistoryGraphNode, HistoryItem, HistoryItemRef, HistoryItemViewModel, HistoryProviderSnapshot

# Colors handed out to newly opened lanes, in rotation
SWIMLANE_COLORS = [
    "#FFB000",
    "#DC267F",
    "#994F00",
    "#40B0A6",
    "#B66DFF",
]

DEFAULT_REF_COLOR = "#81b88b"
DEFAULT_REMOTE_REF_COLOR = "#b180d7"
DEFAULT_BASE_REF_COLOR = "#ea5c00"
DEFAULT_TAG_REF_COLOR = "#e5c07b"

ICON_DEFAULT_COLORS = {
    "branch": DEFAULT_REF_COLOR,
    "remote": DEFAULT_REMOTE_REF_COLOR,
    "base": DEFAULT_BASE_REF_COLOR,
    "tag": DEFAULT_TAG_REF_COLOR,
}

# Display priority of reference chips, lower first
REF_ORDER_CURRENT = 1
REF_ORDER_REMOTE = 2
REF_ORDER_BASE = 3
REF_ORDER_COLORED = 4
REF_ORDER_OTHER = 99


class SwimlaneMatch(Enum):
    """How an incoming lane relates to the commit of the current row."""

    REPLACEMENT_TARGET = "replacement_target"  # first lane reaching the commit, continues to parent 0
    DUPLICATE_CONVERGENCE = "duplicate_convergence"  # further lane reaching the commit, ends here
    PASS_THROUGH = "pass_through"  # lane heading elsewhere


@dataclass
class LayoutState:
    """Scan state threaded from row to row during one layout call."""

    color_index: int = 0
    ref_colors: dict[str, str] = field(default_factory=dict)

    def rotate_color(self) -> str:
        color = SWIMLANE_COLORS[self.color_index % len(SWIMLANE_COLORS)]
        self.color_index += 1
        return color


def get_default_color_for_icon(icon: Optional[str]) -> str:
    return ICON_DEFAULT_COLORS.get(icon, DEFAULT_REF_COLOR)


def select_label_color(history_item: HistoryItem, ref_colors: dict[str, str]) -> Optional[str]:
    """Color of the first reference on the commit that already has one."""
    for ref in history_item.references:
        if ref.color:
            return ref.color
        color = ref_colors.get(ref.id)
        if color is not None:
            return color
    return None


def classify_swimlane(node: HistoryGraphNode, history_item: HistoryItem, first_parent_assigned: bool) -> SwimlaneMatch:
    if node.id != history_item.id:
        return SwimlaneMatch.PASS_THROUGH
    if first_parent_assigned:
        return SwimlaneMatch.DUPLICATE_CONVERGENCE
    return SwimlaneMatch.REPLACEMENT_TARGET


def _ref_order(
    ref: HistoryItemRef,
    current_ref: Optional[HistoryItemRef],
    current_remote_ref: Optional[HistoryItemRef],
    current_base_ref: Optional[HistoryItemRef],
) -> int:
    if current_ref and ref.id == current_ref.id:
        return REF_ORDER_CURRENT
    if current_remote_ref and ref.id == current_remote_ref.id:
        return REF_ORDER_REMOTE
    if current_base_ref and ref.id == current_base_ref.id:
        return REF_ORDER_BASE
    if ref.color:
        return REF_ORDER_COLORED
    return REF_ORDER_OTHER


def _first_index(nodes: Sequence[HistoryGraphNode], node_id: str) -> int:
    for index, node in enumerate(nodes):
        if node.id == node_id:
            return index
    return -1


def _last_index(nodes: Sequence[HistoryGraphNode], node_id: str) -> int:
    for index in range(len(nodes) - 1, -1, -1):
        if nodes[index].id == node_id:
            return index
    return -1


def _circle_color(
    circle_index: int, input_swimlanes: list[HistoryGraphNode], output_swimlanes: list[HistoryGraphNode]
) -> Optional[str]:
    if circle_index < len(output_swimlanes):
        return output_swimlanes[circle_index].color
    if circle_index < len(input_swimlanes):
        return input_swimlanes[circle_index].color
    return None


def _build_output_swimlanes(
    history_item: HistoryItem,
    input_swimlanes: list[HistoryGraphNode],
    label_color: Optional[str],
    item_lookup: dict[str, HistoryItem],
    state: LayoutState,
) -> list[HistoryGraphNode]:
    output_swimlanes: list[HistoryGraphNode] = []
    parent_ids = history_item.parent_ids
    first_parent_assigned = False

    # A root commit ends every lane that reaches its row
    if parent_ids:
        for node in input_swimlanes:
            match = classify_swimlane(node, history_item, first_parent_assigned)
            if match is SwimlaneMatch.REPLACEMENT_TARGET:
                output_swimlanes.append(HistoryGraphNode(id=parent_ids[0], color=label_color or node.color))
                first_parent_assigned = True
            elif match is SwimlaneMatch.PASS_THROUGH:
                output_swimlanes.append(replace(node))

    start = 1 if first_parent_assigned else 0
    for parent_index in range(start, len(parent_ids)):
        color = label_color
        if parent_index > 0:
            parent = item_lookup.get(parent_ids[parent_index])
            if parent is not None:
                color = select_label_color(parent, state.ref_colors)

        if not color:
            color = state.rotate_color()

        output_swimlanes.append(HistoryGraphNode(id=parent_ids[parent_index], color=color))

    return output_swimlanes


def _resolve_references(
    history_item: HistoryItem,
    circle_color: Optional[str],
    state: LayoutState,
    current_ref: Optional[HistoryItemRef],
    current_remote_ref: Optional[HistoryItemRef],
    current_base_ref: Optional[HistoryItemRef],
) -> list[HistoryItemRef]:
    resolved = []
    for ref in history_item.references:
        color = ref.color
        if color is None:
            color = circle_color
        if color is None:
            color = state.ref_colors.get(ref.id)
        if not color:
            color = get_default_color_for_icon(ref.icon)

        state.ref_colors[ref.id] = color
        resolved.append((ref, replace(ref, color=color)))

    # Ranked on the incoming ref so only caller-supplied colors count as explicit.
    # The sort is stable, so ties keep their attachment order.
    resolved.sort(key=lambda pair: _ref_order(pair[0], current_ref, current_remote_ref, current_base_ref))
    return [enriched for _, enriched in resolved]


def layout_step(
    history_item: HistoryItem,
    previous_output: list[HistoryGraphNode],
    state: LayoutState,
    item_lookup: dict[str, HistoryItem],
    current_ref: Optional[HistoryItemRef] = None,
    current_remote_ref: Optional[HistoryItemRef] = None,
    current_base_ref: Optional[HistoryItemRef] = None,
) -> HistoryItemViewModel:
    """Lay out a single row given the lanes leaving the row above it."""
    input_swimlanes = [replace(node) for node in previous_output]
    label_color = select_label_color(history_item, state.ref_colors)

    output_swimlanes = _build_output_swimlanes(history_item, input_swimlanes, label_color, item_lookup, state)

    input_index = _first_index(input_swimlanes, history_item.id)
    circle_index = input_index if input_index != -1 else len(input_swimlanes)
    circle_color = _circle_color(circle_index, input_swimlanes, output_swimlanes)

    references = _resolve_references(
        history_item, circle_color, state, current_ref, current_remote_ref, current_base_ref
    )

    return HistoryItemViewModel(
        history_item=replace(history_item, references=references),
        is_current=current_ref is not None and history_item.id == current_ref.revision,
        input_swimlanes=input_swimlanes,
        output_swimlanes=output_swimlanes,
    )


def layout(
    items: Sequence[HistoryItem],
    current_ref: Optional[HistoryItemRef] = None,
    current_remote_ref: Optional[HistoryItemRef] = None,
    current_base_ref: Optional[HistoryItemRef] = None,
) -> list[HistoryItemViewModel]:
    """
    Turns an ordered list of commits into one view model per commit.

    `items` must be ordered children before parents, as produced by a
    topological `git log` walk. The result mirrors that order. Each row's
    input lanes are a copy of the previous row's output lanes.

    Lane and reference colors only depend on `items` and the three ref
    pointers; the color memo table lives for this call only.
    """
    state = LayoutState()
    item_lookup = {item.id: item for item in items}
    view_models: list[HistoryItemViewModel] = []
    previous_output: list[HistoryGraphNode] = []

    for history_item in items:
        view_model = layout_step(
            history_item,
            previous_output,
            state,
            item_lookup,
            current_ref,
            current_remote_ref,
            current_base_ref,
        )
        view_models.append(view_model)
        previous_output = view_model.output_swimlanes

    logging.debug("Laid out %d history items using %d lane colors", len(view_models), state.color_index)
    return view_models


def to_view_model(snapshot: HistoryProviderSnapshot) -> list[HistoryItemViewModel]:
    return layout(snapshot.items, snapshot.current_ref, snapshot.current_remote_ref, snapshot.current_base_ref)


# --- Helpers for the row renderer ---


def find_graph_width(nodes: Sequence[HistoryGraphNode]) -> int:
    """Number of lane columns needed to draw a row, including the marker column."""
    return len(nodes) + 1


def graph_placeholder(columns: Sequence[HistoryGraphNode], highlight: Optional[int] = None) -> list[HistoryGraphNode]:
    col = list(columns)
    if highlight is not None and 0 <= highlight < len(col):
        col[highlight] = replace(col[highlight])
    return col


def find_swimlane_index(view_model: HistoryItemViewModel) -> int:
    """Lane slot of the commit marker."""
    index = _first_index(view_model.input_swimlanes, view_model.history_item.id)
    return index if index != -1 else len(view_model.input_swimlanes)


def find_circle_color(view_model: HistoryItemViewModel) -> Optional[str]:
    return _circle_color(find_swimlane_index(view_model), view_model.input_swimlanes, view_model.output_swimlanes)


def find_extra_parents(view_model: HistoryItemViewModel) -> list[HistoryGraphNode]:
    """Output lanes opened toward the merge parents (index >= 1) of a commit."""
    extras = []
    for parent_id in view_model.history_item.parent_ids[1:]:
        index = _last_index(view_model.output_swimlanes, parent_id)
        if index != -1:
            extras.append(view_model.output_swimlanes[index])
    return extras


if __name__ == "__main__":
    demo = [
        HistoryItem(id="a", parent_ids=["b"], subject="A"),
        HistoryItem(id="b", parent_ids=["c", "d"], subject="Merge"),
        HistoryItem(id="d", parent_ids=["c"], subject="Topic"),
        HistoryItem(id="c", parent_ids=["e"], subject="C"),
        HistoryItem(id="e", parent_ids=[], subject="E"),
    ]
    for vm in layout(demo):
        print(
            f"{vm.history_item.id}: "
            f"in={[(n.id, n.color) for n in vm.input_swimlanes]} "
            f"out={[(n.id, n.color) for n in vm.output_swimlanes]}"
        )
