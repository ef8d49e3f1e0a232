"""Structural validation for attack-track templates.

A template is usable for detection only if:

1. It has a non-empty name.
2. It has a root step.
3. Every step in the tree has a non-empty name.
4. Sibling steps have distinct names, and no step name reappears among
   that step's own descendants. Paths are expressed as lists of step
   names, so a repeated name would make them ambiguous.
5. The tree is acyclic: no step object is its own ancestor.
"""

from __future__ import annotations

from kubechains.core.attacktrack.models import AttackStep, AttackTrack


def validate_attack_track(track: AttackTrack) -> list[str]:
    """Return the list of structural problems found in ``track``.

    An empty list means the template is valid.
    """
    problems: list[str] = []

    if not track.name:
        problems.append("attack track has no name")
    if track.root is None:
        problems.append(f"attack track '{track.name}' has no root step")
        return problems

    # Iterative DFS carrying the ancestor chain as object ids (cycles) and
    # names (repeated names within a subtree).
    stack: list[tuple[AttackStep, tuple[int, ...], tuple[str, ...]]] = [
        (track.root, (), ())
    ]
    while stack:
        step, ancestor_ids, ancestor_names = stack.pop()
        if id(step) in ancestor_ids:
            problems.append(
                f"attack track '{track.name}' contains a cycle at step '{step.name}'"
            )
            continue
        if not step.name:
            problems.append(f"attack track '{track.name}' has a step with no name")
        elif step.name in ancestor_names:
            problems.append(
                f"attack track '{track.name}': step '{step.name}' repeats an ancestor name"
            )

        seen: set[str] = set()
        for child in step.sub_steps:
            if child.name and child.name in seen:
                problems.append(
                    f"attack track '{track.name}': duplicate sibling step "
                    f"'{child.name}' under '{step.name}'"
                )
            seen.add(child.name)

        ids = ancestor_ids + (id(step),)
        names = ancestor_names + (step.name,)
        for child in reversed(step.sub_steps):
            stack.append((child, ids, names))

    return problems


def is_valid_attack_track(track: AttackTrack) -> bool:
    """Return True if ``track`` has no structural problems."""
    return not validate_attack_track(track)
