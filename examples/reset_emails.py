"""
Reset every resource e-mail address to a non-deliverable domain.

Typical use: after cloning production into a test instance, so that the
test instance never e-mails real technicians. Safe to re-run; resources
already on the target domain are skipped.
"""

import asyncio
import os

from dotenv import load_dotenv

from ofsc import BatchConfig, Credentials, MutationStatus, OFSCClient
from ofsc.export import write_csv

load_dotenv()


async def main() -> None:
    credentials = Credentials.from_env()
    domain = os.getenv("RESET_DOMAIN", "noreply.com")

    results = []
    async with OFSCClient(
        credentials,
        batch=BatchConfig(batch_size=200, cooldown_seconds=10.0),
        show_progress=True,
        logging_level=20,
    ) as client:
        try:
            await client.reset_resources_email(domain, results=results)
        finally:
            if results:
                write_csv(
                    [
                        {
                            "id": r.entity_id,
                            "email": r.data.get("email"),
                            "newEmail": r.data.get("newEmail"),
                            "comment": r.comment,
                        }
                        for r in results
                    ],
                    "email_reset.csv",
                )

    applied = sum(1 for r in results if r.status is MutationStatus.APPLIED)
    print(f"Updated {applied} of {len(results)} resources")


if __name__ == "__main__":
    asyncio.run(main())
