# groups.py - union-find over piece ids
"""
Tracks which pieces are fused into one rigid body.

Groups only ever merge. Each group carries an integer id; a merge retires both
ids and forwards them to the freshly created group, so anyone still holding an
old id (such as an in-flight drag) can `resolve` it.
"""
import logging

from jigsaw_madness.errors import InvariantError

log = logging.getLogger(__name__)


class GroupTracker:
    def __init__(self, piece_ids=()):
        self._groups = {}       # group id -> member piece ids, in creation order
        self._owner = {}        # piece id -> group id
        self._forward = {}      # retired group id -> group it was merged into
        self._next_id = 0
        for pid in piece_ids:
            self._add([pid])

    @classmethod
    def from_lists(cls, groups, piece_ids):
        """Rebuild a tracker from plain lists, rejecting anything that is not a partition."""
        tracker = cls()
        for members in groups:
            tracker._add([int(pid) for pid in members])
        tracker.check_partition(piece_ids)
        return tracker

    def _add(self, members):
        gid = self._next_id
        self._next_id += 1
        for pid in members:
            if pid in self._owner:
                raise InvariantError(f"piece {pid} already belongs to group {self._owner[pid]}")
            self._owner[pid] = gid
        self._groups[gid] = list(members)
        return gid

    # --- Lookup ---
    def __len__(self):
        return len(self._groups)

    def __iter__(self):
        for members in self._groups.values():
            yield list(members)

    def group_ids(self):
        return list(self._groups)

    def group_id_of(self, piece_id):
        try:
            return self._owner[piece_id]
        except KeyError:
            raise InvariantError(f"piece {piece_id} is not in any group") from None

    def members(self, group_id):
        try:
            return list(self._groups[group_id])
        except KeyError:
            raise InvariantError(f"group {group_id} does not exist") from None

    def group_of(self, piece_id):
        return self.members(self.group_id_of(piece_id))

    def same_group(self, a, b):
        return self.group_id_of(a) == self.group_id_of(b)

    def resolve(self, group_id):
        """Follow merges from a possibly retired group id to the live group."""
        while group_id in self._forward:
            group_id = self._forward[group_id]
        if group_id not in self._groups:
            raise InvariantError(f"group {group_id} does not exist")
        return group_id

    # --- Merging ---
    def merge(self, a, b):
        """Fuse the groups holding pieces `a` and `b`; returns the surviving group id."""
        ga = self.group_id_of(a)
        gb = self.group_id_of(b)
        if ga == gb:
            return ga
        merged = self._groups.pop(ga) + self._groups.pop(gb)
        for pid in merged:
            del self._owner[pid]
        gid = self._add(merged)
        self._forward[ga] = gid
        self._forward[gb] = gid
        log.debug("merged groups %d and %d into %d (%d pieces)", ga, gb, gid, len(merged))
        return gid

    # --- Invariants ---
    def check_partition(self, piece_ids):
        expected = set(piece_ids)
        seen = set()
        for gid, members in self._groups.items():
            if not members:
                raise InvariantError(f"group {gid} is empty")
            for pid in members:
                if pid in seen:
                    raise InvariantError(f"piece {pid} appears in more than one group")
                seen.add(pid)
        if seen != expected:
            missing = sorted(expected - seen)
            extra = sorted(seen - expected)
            raise InvariantError(f"groups do not partition the pieces (missing {missing}, unknown {extra})")

    def as_lists(self):
        return [list(members) for members in self._groups.values()]
