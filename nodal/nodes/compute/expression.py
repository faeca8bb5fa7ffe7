"""Expression node: evaluates a math expression over `{variable}` inputs."""

import ast
import math
import re
from typing import Any

from nodal.nodes.base import BaseNode, Node, NodeData, NodeMeta, NodePort, Port, TextControl

VAR_REGEX = re.compile(r"\{([0-9A-Za-z_]+)\}")

_ALLOWED_BINOPS = (ast.Add, ast.Sub, ast.Mult, ast.Div, ast.Mod, ast.Pow)

# Allowed calls; each returns a float
FUNCTIONS = {
    "sqrt": math.sqrt,
    "abs": lambda x: float(abs(x)),
    "sin": math.sin,
    "cos": math.cos,
    "tan": math.tan,
    "log": math.log,
    "exp": math.exp,
    "floor": lambda x: float(math.floor(x)),
    "ceil": lambda x: float(math.ceil(x)),
    "round": lambda x, digits=0: float(round(x, int(digits))),
    "min": lambda *xs: float(min(xs)),
    "max": lambda *xs: float(max(xs)),
}

CONSTANTS = {"pi": math.pi, "e": math.e}


def expression_variables(expression: str) -> list[str]:
    """Variable names referenced as `{name}`, first occurrence order, no repeats."""
    return list(dict.fromkeys(VAR_REGEX.findall(expression)))


def _substitute(expression: str) -> tuple[str, dict[str, str]]:
    """Swap each `{name}` for a valid Python identifier; `^` means power."""
    names: dict[str, str] = {}

    def repl(match: re.Match) -> str:
        var = match.group(1)
        ident = f"_v_{var}"
        names[ident] = var
        return ident

    return VAR_REGEX.sub(repl, expression).replace("^", "**"), names


def _validate_ast(node: ast.AST, names: dict[str, str]) -> None:
    """Walk the AST and reject anything beyond arithmetic on variables, literals,
    constants and calls to the allowed math functions."""
    if isinstance(node, ast.Name):
        if node.id not in names and node.id not in CONSTANTS:
            raise ValueError(f"Unknown name '{node.id}', wrap variables in braces")
        return
    elif isinstance(node, ast.Call):
        if not isinstance(node.func, ast.Name) or node.func.id not in FUNCTIONS:
            raise ValueError(f"Unsupported function: {ast.unparse(node.func)}")
        if node.keywords:
            raise ValueError(f"Keyword arguments are not allowed in {node.func.id}()")
        for arg in node.args:
            _validate_ast(arg, names)
        return
    elif isinstance(node, ast.Constant):
        if isinstance(node.value, bool) or not isinstance(node.value, (int, float)):
            raise ValueError(f"Only numeric literals are allowed, got {type(node.value).__name__}")
        return
    elif isinstance(node, ast.BinOp):
        if not isinstance(node.op, _ALLOWED_BINOPS):
            raise ValueError(f"Unsupported operator: {type(node.op).__name__}")
        _validate_ast(node.left, names)
        _validate_ast(node.right, names)
        return
    elif isinstance(node, ast.UnaryOp):
        if not isinstance(node.op, (ast.USub, ast.UAdd)):
            raise ValueError(f"Unsupported unary operator: {type(node.op).__name__}")
        _validate_ast(node.operand, names)
        return
    else:
        raise ValueError(f"Unsupported expression element: {type(node).__name__}")


def evaluate_expression(expression: str, variables: dict[str, Any]) -> float:
    """Evaluate an expression such as `sqrt({a}) + {b} * 2` in float arithmetic.

    Results too large for a float raise OverflowError.
    """
    source, names = _substitute(expression)
    if not source.strip():
        raise ValueError("Expression is empty")
    try:
        tree = ast.parse(source.strip(), mode="eval")
    except SyntaxError as exc:
        raise ValueError(f"Invalid expression: {expression}") from exc
    _validate_ast(tree.body, names)

    # Literals evaluate as floats, like the variables below
    for node in ast.walk(tree):
        if isinstance(node, ast.Constant):
            node.value = float(node.value)

    namespace: dict[str, Any] = {"__builtins__": {}, **FUNCTIONS, **CONSTANTS}
    for ident, var in names.items():
        if var not in variables:
            raise ValueError(f"No value for variable '{var}'")
        try:
            namespace[ident] = float(variables[var])
        except (TypeError, ValueError):
            raise ValueError(f"Variable '{var}' is not a number: {variables[var]!r}") from None
    code = compile(tree, "<expression>", "eval")
    result = eval(code, namespace)
    if isinstance(result, complex):
        raise ValueError(f"Result of {expression} is not a real number")
    return result


class ExpressionNode(BaseNode):
    meta = NodeMeta(
        id="expression",
        label="Expression",
        category="compute",
        description="Dynamic math expression.",
        outputs={"result": NodePort(type="number", label="Result")},
        controls={"expression": TextControl(value="1+1")},
    )

    def on_change(self, node: Node) -> Node:
        variables = expression_variables(str(node.controls.get("expression") or ""))
        for var in variables:
            if var not in node.inputs:
                node.inputs[var] = Port(type="numberInput", label=var, value=0)
        for port_id, port in node.inputs.items():
            port.disabled = port_id not in variables
        return node

    def compute(self, data: NodeData) -> dict[str, Any]:
        expression = str(data.controls["expression"])
        variables = {var: data.single(var) for var in data.inputs}
        return {"result": evaluate_expression(expression, variables)}
