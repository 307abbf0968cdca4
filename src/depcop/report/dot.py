"""
DOT graph output for dependency listings.

Renders DependencyNode trees as a Graphviz digraph. Every module gets a
numeric node id in order of first appearance; edges of a module are emitted
once, where it was expanded.

Example output:
    digraph {
      node[shape=record,style=solid]
      edge[arrowhead=vee]
      graph[rankdir=TB,splines=true]
      0->{1 2}
      0[label="acme/api"]
      1[label="acme/core"]
      2[label="json",stdlib=true]
    }
"""

from depcop.schema import DependencyNode

DOT_HEADER = """digraph {
  node[shape=record,style=solid]
  edge[arrowhead=vee]
  graph[rankdir=TB,splines=true]
"""


def render_dot(trees: list[DependencyNode]) -> str:
    """Render dependency trees as a DOT digraph."""
    ids: dict[str, int] = {}
    stdlib: dict[str, bool] = {}
    edges: list[str] = []
    expanded: set[str] = set()

    def node_id(node: DependencyNode) -> int:
        if node.name not in ids:
            ids[node.name] = len(ids)
            stdlib[node.name] = node.is_stdlib
        return ids[node.name]

    stack = list(reversed(trees))
    while stack:
        node = stack.pop()
        source = node_id(node)
        if not node.children or node.name in expanded:
            continue
        expanded.add(node.name)
        targets = [str(node_id(child)) for child in node.children]
        edges.append(f"  {source}->{{{' '.join(targets)}}}\n")
        stack.extend(reversed(node.children))

    lines = [DOT_HEADER, *edges]
    for name, index in ids.items():
        attrs = [f'label="{_quote(name)}"']
        if stdlib[name]:
            attrs.append("stdlib=true")
        lines.append(f"  {index}[{','.join(attrs)}]\n")
    lines.append("}\n")
    return "".join(lines)


def _quote(label: str) -> str:
    """Escape a label for use inside a double-quoted DOT string."""
    return label.replace("\\", "\\\\").replace('"', '\\"')
