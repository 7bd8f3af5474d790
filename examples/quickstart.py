"""
Quickstart: list resources and activities of an OFSC instance.

Reads OFSC_CLIENT_ID, OFSC_CLIENT_SECRET and OFSC_INSTANCE_URL from the
environment (or a .env file) and exports the resources to CSV.
"""

import asyncio

from dotenv import load_dotenv

from ofsc import Credentials, OFSCClient, get_endpoint
from ofsc.core.models import PageProgress
from ofsc.export import write_csv

load_dotenv()


def report(progress: PageProgress) -> None:
    print(f"page {progress.page_number}: {progress.items_so_far} items so far")


async def main() -> None:
    credentials = Credentials.from_env()

    async with OFSCClient(credentials, logging_level=20) as client:
        await client.get_token()

        resources = await client.get_all_resources()
        write_csv(resources, "resources.csv")

        endpoint = get_endpoint(
            "activities",
            resources="FIELD_TEAM",
            date_from="2024-01-01",
            date_to="2024-01-31",
        )
        activities = await client.collect(endpoint, on_progress=report)
        print(f"{len(activities)} activities in January 2024")


if __name__ == "__main__":
    asyncio.run(main())
