"""
Bonus Pool Calculation Engines - MCP Server

FastMCP server exposing bonus calculation tools:
- calculate_role_bonus: two-tier group/role cascade for contract roles
- calculate_pool_role_share: even split for pool-based roles
- describe_bonus_groups: configured groups and percentages
"""

import logging

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

# Importing the tool module registers the tools with the MCP instance
from engines.tools.bonus_engine import mcp  # noqa: E402


def main():
    """Run the MCP server."""
    logger.info("Starting Bonus Pool Engines MCP Server")
    mcp.run()


if __name__ == "__main__":
    main()
