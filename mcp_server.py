#!/usr/bin/env python3
"""
MCP Server for fedora-test-analyzer.
Provides tools for listing composes and reading aggregated Fedora test results.
"""

import asyncio
import json
import logging

from fastmcp import FastMCP

import core
from fedora_testresults.config import get_port

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

mcp = FastMCP("fedora-test-analyzer")


@mcp.tool(
    name="list_composes",
    description="""List available Fedora compose IDs, newest first.
        Args:
            strategy: "known" (curated list), "probe" (check recent candidates) or "listing" (container listing)
    """
)
async def list_composes(strategy: str = "known") -> str:
    try:
        result = await asyncio.to_thread(core.get_composes, strategy)
        return json.dumps(result, indent=2)
    except Exception as e:
        logger.error(f"Error in list_composes: {str(e)}")
        return json.dumps({"success": False, "error": str(e)})


@mcp.tool(
    name="get_compose_results",
    description="""Get parsed JUnit results for every architecture of a compose.
    Args:
        compose_id: Compose ID (e.g., "Fedora-Cloud-42-20260122.0")
    """
)
async def get_compose_results(compose_id: str) -> str:
    try:
        result = await asyncio.to_thread(core.get_compose_report, compose_id)
        if result is None:
            result = {"error": f"No results for {compose_id}"}
        return json.dumps(result, indent=2)
    except Exception as e:
        logger.error(f"Error in get_compose_results: {str(e)}")
        return json.dumps({"error": str(e)})


@mcp.tool(
    name="get_distro_summary",
    description="""Get latest results, weekly series and a summary for every version of a distro.
    Args:
        distro: Distribution name (default: "fedora")
    """
)
async def get_distro_summary(distro: str = "fedora") -> str:
    try:
        result = await asyncio.to_thread(core.get_distro_data, distro, "grouped")
        if result is None:
            result = {"error": "Distro not found", "availableDistros": core.available_distros()}
        return json.dumps(result, indent=2)
    except Exception as e:
        logger.error(f"Error in get_distro_summary: {str(e)}")
        return json.dumps({"error": str(e)})


@mcp.tool(
    name="get_version_series",
    description="""Get the latest run and the last 7 days of results for one version directory.
    Days without a run are omitted from weeklyData.
    Args:
        version: Version directory name (e.g., "Fedora-Cloud-42")
    """
)
async def get_version_series(version: str) -> str:
    try:
        result = await asyncio.to_thread(core.get_version_series, version)
        return json.dumps(result, indent=2)
    except Exception as e:
        logger.error(f"Error in get_version_series: {str(e)}")
        return json.dumps({"error": str(e)})


async def main():
    port = get_port('FASTMCP_PORT', 8978)
    await mcp.run_async(transport="sse", host="0.0.0.0", port=port)


if __name__ == "__main__":
    asyncio.run(main())
