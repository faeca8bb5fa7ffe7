"""Comment node: free text on the canvas."""

from nodal.nodes.base import BaseNode, EditTextControl, NodeMeta


class CommentNode(BaseNode):
    meta = NodeMeta(
        id="comment",
        label="Comment",
        category="generic",
        description="A comment node.",
        resizable=True,
        controls={"comment": EditTextControl(value="Comment")},
    )
