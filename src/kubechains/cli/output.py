"""Rich output formatting helpers for the kubechains CLI.

Provides terminal rendering for detected attack chains (summary table plus
one tree per chain) and for the loaded attack-track templates.
"""

from __future__ import annotations

from rich.console import Console
from rich.table import Table
from rich.text import Text
from rich.tree import Tree

from kubechains.core.attacktrack import AttackStep, AttackTrack
from kubechains.core.chains import AttackChain, AttackChainNode

console = Console()

_VULNERABILITY_STYLE = "bold red"
_CONTROL_STYLE = "yellow"


def _node_label(node: AttackChainNode) -> Text:
    label = Text(node.name, style="bold")
    if node.control_ids:
        label.append("  controls: ", style="dim")
        label.append(", ".join(node.control_ids), style=_CONTROL_STYLE)
    for ref in node.vulnerabilities:
        label.append(f"  {ref.container_name or '-'}: ", style="dim")
        label.append(", ".join(ref.names) or "-", style=_VULNERABILITY_STYLE)
    return label


def _add_nodes(tree: Tree, node: AttackChainNode) -> None:
    branch = tree.add(_node_label(node))
    for child in node.next_nodes:
        _add_nodes(branch, child)


def print_attack_chains(chains: list[AttackChain]) -> None:
    """Print a summary table of chains followed by one tree per chain.

    Args:
        chains: Detected attack chains.
    """
    if not chains:
        console.print("[green]No attack chains detected.[/green]")
        return

    table = Table(title="Attack Chains", show_header=True, header_style="bold")
    table.add_column("Attack Track", style="bold")
    table.add_column("Cluster", style="dim")
    table.add_column("Workload")
    table.add_column("Steps", justify="right")
    table.add_column("Chain ID", style="dim")

    for chain in chains:
        resource = chain.resource
        workload = f"{resource.kind}/{resource.namespace}/{resource.name}"
        steps = sum(1 for _ in chain.root.iter_nodes())
        table.add_row(chain.name, chain.cluster_name, workload, str(steps), chain.attack_chain_id)

    console.print(table)

    for chain in chains:
        tree = Tree(Text.assemble(
            (chain.name, "bold cyan"), ("  ", ""),
            (f"{chain.resource.kind}/{chain.resource.name}", ""),
        ))
        _add_nodes(tree, chain.root)
        console.print(tree)

    workloads = {chain.resource.workload_key() for chain in chains}
    console.print(
        f"[bold]{len(chains)}[/bold] attack chain(s) across "
        f"[bold]{len(workloads)}[/bold] workload(s)"
    )


def _add_steps(tree: Tree, step: AttackStep) -> None:
    label = Text(step.name, style="bold")
    if step.checks_vulnerabilities:
        label.append("  [vulnerabilities]", style=_VULNERABILITY_STYLE)
    branch = tree.add(label)
    for child in step.sub_steps:
        _add_steps(branch, child)


def print_attack_tracks(tracks: list[AttackTrack]) -> None:
    """Print each template as a tree of steps."""
    if not tracks:
        console.print("[dim]No attack tracks found.[/dim]")
        return
    for track in tracks:
        tree = Tree(Text.assemble((track.name, "bold cyan"), ("  ", ""), (track.description, "dim")))
        if track.root is not None:
            _add_steps(tree, track.root)
        console.print(tree)
