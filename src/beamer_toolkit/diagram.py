"""
Mermaid to TikZ Translation

Supports the flowchart subset of Mermaid:

    graph LR
        A[Load] --> B[Transform]
        B --> C[Store]
        D[Orphan]

Nodes are laid out as a linear chain in first-seen order (each node placed
to the right of / below the previous one). Graphs that branch or reconverge
still render as a chain; edges are drawn between the real endpoints, so the
arrows remain correct but the arrangement can be misleading.
"""

import re
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from .formatting import escape_latex

logger = logging.getLogger(__name__)

EDGE_PATTERN = re.compile(r'(\w+)(?:\[([^\]]+)\])?\s*-->\s*(\w+)(?:\[([^\]]+)\])?')
NODE_PATTERN = re.compile(r'(\w+)\[([^\]]+)\]')
HEADER_PATTERN = re.compile(r'^\s*(graph|flowchart)\b(.*)$', re.IGNORECASE)

PARSE_FAILURE = '% Could not parse mermaid diagram\n'


@dataclass
class DiagramGraph:
    """Nodes (id -> label, insertion ordered) and directed edges."""
    nodes: Dict[str, str] = field(default_factory=dict)
    edges: List[Tuple[str, str]] = field(default_factory=list)

    def add_node(self, node_id: str, label: Optional[str] = None) -> None:
        """Set an explicit label, or default the label to the id if unseen."""
        if label:
            self.nodes[node_id] = label
        elif node_id not in self.nodes:
            self.nodes[node_id] = node_id

    def add_edge(self, from_id: str, to_id: str) -> None:
        self.edges.append((from_id, to_id))


def detect_direction(header: str, has_header: bool) -> str:
    """Return the TikZ positioning keyword for the graph direction."""
    if not has_header:
        # Bare edge lists read left to right
        return 'right'
    direction = header.upper()
    if 'LR' in direction or 'RL' in direction:
        return 'right'
    return 'below'


def parse_mermaid(source: str) -> Tuple[str, DiagramGraph]:
    """Parse a Mermaid flowchart into a direction and a graph.

    Args:
        source: Mermaid source (contents of the fenced block)

    Returns:
        Tuple of ('right' | 'below', DiagramGraph)
    """
    lines = source.strip().split('\n')
    graph = DiagramGraph()

    header_match = HEADER_PATTERN.match(lines[0]) if lines else None
    if header_match:
        direction = detect_direction(header_match.group(2), True)
        body = lines[1:]
    else:
        direction = detect_direction('', False)
        body = lines

    for line in body:
        pos = 0
        matched_edge = False
        # Chained edges (A --> B --> C) share their middle endpoint
        while True:
            edge = EDGE_PATTERN.search(line, pos)
            if not edge:
                break
            matched_edge = True
            from_id, from_label, to_id, to_label = edge.groups()
            graph.add_node(from_id, from_label)
            graph.add_node(to_id, to_label)
            graph.add_edge(from_id, to_id)
            pos = edge.start(3)

        if matched_edge:
            continue

        node = NODE_PATTERN.search(line)
        if node:
            graph.add_node(node.group(1), node.group(2))

    return direction, graph


def graph_to_tikz(direction: str, graph: DiagramGraph) -> str:
    """Render a parsed graph as a tikzpicture environment."""
    lines = [
        r'\begin{tikzpicture}[node distance=2cm, auto,',
        r'  box/.style={draw, rounded corners, minimum width=2cm, minimum height=0.8cm}]',
    ]

    prev_node = None
    for node_id, label in graph.nodes.items():
        if prev_node is None:
            lines.append(f'  \\node[box] ({node_id}) {{{escape_latex(label)}}};')
        else:
            lines.append(f'  \\node[box, {direction}=of {prev_node}] ({node_id}) {{{escape_latex(label)}}};')
        prev_node = node_id

    for from_id, to_id in graph.edges:
        lines.append(f'  \\draw[->] ({from_id}) -- ({to_id});')

    lines.append(r'\end{tikzpicture}')
    return '\n'.join(lines)


def mermaid_to_tikz(source: str) -> str:
    """Convert a Mermaid flowchart to TikZ, or a comment placeholder."""
    direction, graph = parse_mermaid(source)
    if not graph.nodes:
        logger.warning("Could not parse mermaid diagram; emitting placeholder")
        return PARSE_FAILURE
    return graph_to_tikz(direction, graph)
