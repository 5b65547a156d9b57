# snapping.py - board and neighbor snapping after a drag is released
"""
Snap resolution runs once per drop with the ids of the group that was dragged.

The board is tried first: the first piece within reach of its assembled spot pulls
the whole group onto the board and locks it. Neighbors are tried next, whether or
not the board snap fired: the first grid neighbor (from another group) sitting
within reach of its ideal offset is merged in, locks spread across the merged
group, and the dropped pieces are nudged into exact alignment unless the board
already placed them. At most one neighbor merge happens per drop; there is no
ranking by distance.
"""
import logging
import math
from dataclasses import dataclass

from jigsaw_madness.settings import SNAP_DISTANCE

log = logging.getLogger(__name__)

NEIGHBOR_STEPS = ((-1, 0), (1, 0), (0, -1), (0, 1))


@dataclass
class SnapResult:
    board_snapped: bool
    merged: bool
    group_id: int


def snap_to_board(session, piece_ids, snap_distance=SNAP_DISTANCE):
    if session.board.w <= 0:
        return False
    for pid in piece_ids:
        p = session.piece(pid)
        target_x, target_y = session.board_target(p)
        if math.hypot(p.x - target_x, p.y - target_y) < snap_distance:
            session.translate(piece_ids, target_x - p.x, target_y - p.y)
            session.lock(piece_ids)
            log.debug("piece %d snapped to the board, locked %d pieces", pid, len(piece_ids))
            return True
    return False


def snap_to_neighbor(session, piece_ids, board_snapped, snap_distance=SNAP_DISTANCE):
    """Merge with the first neighbor close to its ideal offset; returns the merged group id or None."""
    sw, sh = session.scaled_piece_size
    groups = session.groups
    for pid in groups.group_of(piece_ids[0]):
        p = session.piece(pid)
        for dr, dc in NEIGHBOR_STEPS:
            neighbor = session.piece_at(p.row + dr, p.col + dc)
            if neighbor is None or groups.same_group(neighbor.id, p.id):
                continue
            ideal_dx = (p.col - neighbor.col) * sw
            ideal_dy = (p.row - neighbor.row) * sh
            deviation = math.hypot(p.x - neighbor.x - ideal_dx, p.y - neighbor.y - ideal_dy)
            if deviation >= snap_distance:
                continue
            neighbor_locked = session.group_locked(groups.group_id_of(neighbor.id))
            self_locked = session.group_locked(groups.group_id_of(p.id))
            gid = groups.merge(p.id, neighbor.id)
            if neighbor_locked or self_locked:
                session.lock(groups.members(gid))
            if not board_snapped:
                session.translate(piece_ids, neighbor.x + ideal_dx - p.x, neighbor.y + ideal_dy - p.y)
            log.debug("piece %d joined neighbor %d (group %d, %d pieces)",
                      p.id, neighbor.id, gid, len(groups.members(gid)))
            return gid
    return None


def resolve_snaps(session, group_id, snap_distance=SNAP_DISTANCE):
    piece_ids = session.groups.members(group_id)
    board_snapped = snap_to_board(session, piece_ids, snap_distance)
    merged_gid = snap_to_neighbor(session, piece_ids, board_snapped, snap_distance)
    return SnapResult(
        board_snapped=board_snapped,
        merged=merged_gid is not None,
        group_id=session.groups.resolve(group_id),
    )
