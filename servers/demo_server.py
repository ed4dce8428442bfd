"""
Small MCP server used by the integration tests and for trying the CLI:

    mcpdesk tools demo --config servers/demo.json
    mcpdesk call demo add a=2 b=3 --config servers/demo.json
"""
import json

from fastmcp import FastMCP

mcp = FastMCP("Demo")


@mcp.tool()
def add(a: int, b: int) -> int:
    """Add two numbers"""
    return a + b


@mcp.tool()
def divide(a: float, b: float) -> float:
    """Divide a by b"""
    if b == 0:
        raise ValueError("Cannot divide by zero")
    return a / b


@mcp.tool()
def greet(name: str, excited: bool = False) -> str:
    """
    Say hello.

    Args:
        name: Who to greet
        excited: Add an exclamation mark
    """
    return f"Hello, {name}{'!' if excited else '.'}"


@mcp.tool()
def lookup(item: str) -> str:
    """Look up an item in a tiny inventory, reporting a JSON status"""
    inventory = {"apple": 3, "pear": 0}
    if item not in inventory:
        return json.dumps({"status": "error", "message": f"unknown item {item}"})
    return json.dumps({"status": "success", "item": item, "count": inventory[item]})


@mcp.tool()
def read_file(path: str) -> str:
    """Pretend to read a file; always reports a plain-text error"""
    return f"Error: file not found: {path}"


if __name__ == "__main__":
    mcp.run()
