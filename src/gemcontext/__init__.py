"""gemcontext: RubyGems and Ruby release metadata for AI assistants, over MCP."""

__version__ = "0.1.0"
