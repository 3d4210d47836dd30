"""Essay prompt templates served over MCP with an SSE stream and POST request channel."""

__version__ = "0.1.0"
