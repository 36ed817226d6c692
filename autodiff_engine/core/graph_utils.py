"""
Graph inspection helpers: statistics, a text listing and a JSON-friendly
dump of the nodes recorded on a tape.
"""

import numpy as np
from typing import Dict, List
from collections import Counter


def get_graph_stats(tape) -> Dict:
    """
    Graph statistics (no printing).

    Returns:
        dict with node/edge counts, fan-in/fan-out figures and op breakdown
    """
    nodes = tape.nodes
    if not nodes:
        return {
            'nodes': 0,
            'edges': 0,
            'leaves': 0,
            'max_fan_in': 0,
            'avg_fan_in': 0.0,
            'max_fan_out': 0,
            'avg_fan_out': 0.0,
            'operations': {}
        }

    n_nodes = len(nodes)
    fan_ins = [len(node.parents) for node in nodes]
    fan_outs = [0] * n_nodes
    for node in nodes:
        for p in node.parents:
            fan_outs[p] += 1

    op_counter = Counter(node.op_tag for node in nodes)

    return {
        'nodes': n_nodes,
        'edges': sum(fan_ins),
        'leaves': sum(1 for node in nodes if node.is_leaf),
        'max_fan_in': max(fan_ins),
        'avg_fan_in': float(np.mean(fan_ins)),
        'max_fan_out': max(fan_outs),
        'avg_fan_out': float(np.mean(fan_outs)),
        'operations': dict(op_counter)
    }


def format_graph(tape, max_nodes: int = 20) -> str:
    """
    Text listing of the first `max_nodes` nodes:

        Node    0: leaf         (  2.000000) [leaf/input] x
        Node    2: mul          (  4.000000) <- [Node0, Node0]
    """
    nodes = tape.nodes
    if not nodes:
        return "Empty graph"

    lines = []
    for i, node in enumerate(nodes[:max_nodes]):
        head = f"Node {i:4d}: {node.op_tag:12s} ({float(node.value):10.6f})"
        if node.parents:
            parent_info = ", ".join(f"Node{p}" for p in node.parents)
            lines.append(f"{head} <- [{parent_info}]")
        else:
            label = f" {node.name}" if node.name else ""
            lines.append(f"{head} [leaf/input]{label}")

    if len(nodes) > max_nodes:
        lines.append(f"... ({len(nodes) - max_nodes} more nodes)")
    return "\n".join(lines)


def graph_records(tape) -> List[Dict]:
    """Plain-dict dump of every node, rules included, suitable for json.dumps."""
    records = []
    for i, node in enumerate(tape.nodes):
        records.append({
            'index': i,
            'op': node.op_tag,
            'value': float(node.value),
            'name': node.name,
            'parents': list(node.parents),
            'rules': [
                {'kind': r.kind, 'operands': list(r.operands), 'constant': float(r.constant)}
                for r in node.rules
            ],
        })
    return records
