"""Attack-track data models: template steps, templates, and pruned trees.

An attack track is a tree of steps describing the stages of a hypothetical
attacker's progression through a workload. Each step's name doubles as the
category key that policy controls declare they belong to, so a step is
"live" for a workload when at least one of its failed controls maps to that
category.

Two shapes are defined here:

- ``AttackStep`` / ``AttackTrack`` -- the immutable templates, loaded once
  and shared read-only across every detection call.
- ``PrunedStep`` / ``PrunedAttackTrack`` -- the subset of a template whose
  root-to-leaf paths are fully live, with each kept step carrying its
  backing controls.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Protocol


class TrackControl(Protocol):
    """Anything that can back an attack-track step."""

    @property
    def control_id(self) -> str: ...


# ---------------------------------------------------------------------------
# Templates
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class AttackStep:
    """One node in an attack-track template.

    Attributes:
        name: Step name. Also the category key used to find backing controls.
        description: Human-readable description of the attacker stage.
        checks_vulnerabilities: True if the step is satisfied by container
            image vulnerabilities rather than posture controls.
        sub_steps: Child steps in declared order.
    """

    name: str
    description: str = ""
    checks_vulnerabilities: bool = False
    sub_steps: tuple[AttackStep, ...] = ()

    @property
    def is_leaf(self) -> bool:
        return not self.sub_steps

    def iter_steps(self) -> Iterator[AttackStep]:
        """Yield this step and all descendants in pre-order."""
        stack: list[AttackStep] = [self]
        while stack:
            step = stack.pop()
            yield step
            stack.extend(reversed(step.sub_steps))

    def find_child(self, name: str) -> AttackStep | None:
        for child in self.sub_steps:
            if child.name == name:
                return child
        return None


@dataclass(frozen=True)
class AttackTrack:
    """A named attack-track template.

    Attributes:
        name: Template name, unique within a template set.
        description: Human-readable summary of the attack scenario.
        root: Root step of the tree, or None for an unusable template.
        version: Template schema version.
    """

    name: str
    description: str = ""
    root: AttackStep | None = None
    version: str = "1.0"

    def steps_checking_vulnerabilities(self) -> list[str]:
        """Return names of steps flagged ``checks_vulnerabilities``.

        Names are returned in pre-order and de-duplicated, so the result is
        stable for a given template.
        """
        if self.root is None:
            return []
        names: dict[str, None] = {}
        for step in self.root.iter_steps():
            if step.checks_vulnerabilities and step.name:
                names.setdefault(step.name, None)
        return list(names)


# ---------------------------------------------------------------------------
# Pruned trees
# ---------------------------------------------------------------------------


@dataclass
class PrunedStep:
    """A step kept in a pruned attack track, with its backing controls."""

    name: str
    description: str = ""
    checks_vulnerabilities: bool = False
    controls: list[TrackControl] = field(default_factory=list)
    sub_steps: list[PrunedStep] = field(default_factory=list)

    def shape(self) -> tuple:
        """Return a nested ``(name, (children...))`` tuple for comparisons."""
        return (self.name, tuple(child.shape() for child in self.sub_steps))


@dataclass
class PrunedAttackTrack:
    """The live portion of an attack track for one workload."""

    name: str
    description: str
    root: PrunedStep
