"""Root-to-leaf path enumeration and pruned-tree reconstruction.

The detection pipeline treats this module as a black box behind the
``PathAlgorithm`` protocol:

- ``enumerate_paths(track, lookup)`` returns every root-to-leaf path of the
  template on which each step is live under the lookup.
- ``rebuild_pruned_tree(track, lookup, paths)`` merges those paths back into
  a single tree, keeping the template's declared sibling order and dropping
  every step that is not on a surviving path.

``AllPathsHandler`` is the default strategy. Callers may inject any object
satisfying ``PathAlgorithm`` into the engine (e.g. a stub in tests).
"""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from typing import Protocol

from kubechains.core.attacktrack.models import (
    AttackStep,
    AttackTrack,
    PrunedAttackTrack,
    PrunedStep,
    TrackControl,
)


class ControlsLookupView(Protocol):
    """Query side of a controls lookup, as seen by the path algorithm."""

    def has_live_category(self, attack_track: str, category: str) -> bool: ...

    def controls_for(self, attack_track: str, category: str) -> list[TrackControl]: ...


class PathAlgorithm(Protocol):
    """Strategy that turns a template plus a lookup into a pruned tree."""

    def enumerate_paths(
        self, track: AttackTrack, lookup: ControlsLookupView
    ) -> list[list[str]]: ...

    def rebuild_pruned_tree(
        self,
        track: AttackTrack,
        lookup: ControlsLookupView,
        paths: Sequence[Sequence[str]],
    ) -> PrunedAttackTrack: ...


class AllPathsHandler:
    """Default ``PathAlgorithm``: exhaustive DFS over the template tree.

    A path must start at the root and end at a template leaf, and every step
    on it must be live. A live step whose children are all dead does not end
    a path; that branch is dropped.

    The handler is stateless and never mutates the template.
    """

    def enumerate_paths(
        self, track: AttackTrack, lookup: ControlsLookupView
    ) -> list[list[str]]:
        if track.root is None:
            return []
        return list(self._live_paths(track.name, track.root, [], lookup))

    def _live_paths(
        self,
        track_name: str,
        step: AttackStep,
        prefix: list[str],
        lookup: ControlsLookupView,
    ) -> Iterator[list[str]]:
        if not lookup.has_live_category(track_name, step.name):
            return
        path = prefix + [step.name]
        if step.is_leaf:
            yield path
            return
        for child in step.sub_steps:
            yield from self._live_paths(track_name, child, path, lookup)

    def rebuild_pruned_tree(
        self,
        track: AttackTrack,
        lookup: ControlsLookupView,
        paths: Sequence[Sequence[str]],
    ) -> PrunedAttackTrack:
        """Merge ``paths`` back into one tree.

        Raises:
            ValueError: If ``paths`` is empty or a path does not follow the
                template from its root.
        """
        if not paths:
            raise ValueError(f"No paths to rebuild attack track '{track.name}' from")
        if track.root is None:
            raise ValueError(f"Attack track '{track.name}' has no root step")

        kept: set[int] = set()
        for path in paths:
            if not path or path[0] != track.root.name:
                raise ValueError(
                    f"Path {list(path)} does not start at root '{track.root.name}'"
                )
            step = track.root
            kept.add(id(step))
            for name in path[1:]:
                child = step.find_child(name)
                if child is None:
                    raise ValueError(
                        f"Path {list(path)}: '{name}' is not a sub-step of '{step.name}'"
                    )
                step = child
                kept.add(id(step))

        root = self._copy_kept(track.name, track.root, kept, lookup)
        return PrunedAttackTrack(
            name=track.name, description=track.description, root=root
        )

    def _copy_kept(
        self,
        track_name: str,
        step: AttackStep,
        kept: set[int],
        lookup: ControlsLookupView,
    ) -> PrunedStep:
        return PrunedStep(
            name=step.name,
            description=step.description,
            checks_vulnerabilities=step.checks_vulnerabilities,
            controls=list(lookup.controls_for(track_name, step.name)),
            sub_steps=[
                self._copy_kept(track_name, child, kept, lookup)
                for child in step.sub_steps
                if id(child) in kept
            ],
        )
