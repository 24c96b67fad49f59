"""Entry point for the chm-assistant MCP server."""

from chm_assistant.server import create_server


def main() -> None:
    """Run the chm-assistant MCP server."""
    server = create_server()
    server.run(transport="stdio")


if __name__ == "__main__":
    main()
