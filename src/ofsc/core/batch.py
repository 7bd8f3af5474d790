from __future__ import annotations

import re
from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable, Sequence
from typing import Any

from loguru import logger
from tqdm import tqdm

from ofsc.core.models import (
    BatchConfig,
    BatchOutcome,
    Credentials,
    MutationResult,
    MutationStatus,
)
from ofsc.core.requester import ResilientRequester
from ofsc.exceptions import ValidationError
from ofsc.utils import chunked

"""
Sequential, batched mutation of many entities.

Entities are mutated one at a time, each call feeding its token to the
next, with a cooldown pause between batches to stay below the backend's
abuse thresholds.
"""


class EntityMutation(ABC):
    """
    A PATCH applied to one entity at a time.

    Subclasses must implement:
    - build_request: URL and JSON body for the entity
    - build_result: MutationResult from the backend's answer

    check_skip may be overridden to skip entities that need no call.
    """

    name: str = "mutation"

    def check_skip(self, entity: dict[str, Any]) -> MutationResult | None:
        """Return a SKIPPED result if the entity needs no call, else None."""
        return None

    @abstractmethod
    def build_request(self, entity: dict[str, Any]) -> tuple[str, dict[str, Any]]: ...

    @abstractmethod
    def build_result(self, entity: dict[str, Any], data: Any) -> MutationResult: ...


class EmailResetMutation(EntityMutation):
    """
    Moves every resource e-mail address onto ``new_domain``.

    Resources whose address already points at the new domain are skipped,
    so running the reset twice issues no calls the second time.
    """

    name = "email-reset"

    def __init__(
        self, credentials: Credentials, new_domain: str = "noreply.com"
    ) -> None:
        if not new_domain or "@" in new_domain:
            raise ValidationError(f"Invalid e-mail domain: {new_domain!r}")
        self.credentials = credentials
        self.new_domain = new_domain

    def check_skip(self, entity: dict[str, Any]) -> MutationResult | None:
        resource_id = entity.get("resourceId")
        email = entity.get("email") or ""
        if not resource_id:
            logger.warning(f"Resource ID not found for {entity}")
            return _skipped(None, email, "Missing resource id")

        normalised = email
        if "@" not in normalised:
            normalised = normalised.replace(self.new_domain, f"@{self.new_domain}", 1)
        if self.new_domain in normalised:
            return _skipped(resource_id, email, "Email already updated")
        if "@" not in email:
            return _skipped(resource_id, email, "Email has no domain part")
        return None

    def build_request(self, entity: dict[str, Any]) -> tuple[str, dict[str, Any]]:
        new_email = re.sub(r"@.*", f"@{self.new_domain}", entity["email"])
        logger.info(
            f"Updating email for {entity['resourceId']} "
            f"({entity['email']} -> {new_email}) "
            f"on {self.credentials.instance_url}"
        )
        url = f"{self.credentials.core_url}/resources/{entity['resourceId']}"
        return url, {"email": new_email}

    def build_result(self, entity: dict[str, Any], data: Any) -> MutationResult:
        data = data if isinstance(data, dict) else {}
        return MutationResult(
            entity_id=data.get("resourceId", entity["resourceId"]),
            status=MutationStatus.APPLIED,
            data={"email": entity["email"], "newEmail": data.get("email", "")},
        )


def _skipped(entity_id: Any, email: str, comment: str) -> MutationResult:
    return MutationResult(
        entity_id=entity_id,
        status=MutationStatus.SKIPPED,
        data={"email": email, "newEmail": ""},
        comment=comment,
    )


class BatchMutator:
    """
    Applies an EntityMutation to a sequence of entities in batches.

    Within a batch entities are processed strictly one after another; the
    token returned by each call is used for the next one. A cooldown is
    inserted between batches, never after the last one, and only after a
    batch that actually issued calls.
    """

    def __init__(
        self,
        requester: ResilientRequester,
        config: BatchConfig | None = None,
        sleep: Callable[[float], Awaitable[None]] | None = None,
        show_progress: bool = False,
    ) -> None:
        self.requester = requester
        self.config = config or BatchConfig()
        self.sleep = sleep or requester.sleep
        self.show_progress = show_progress

    async def apply_in_batches(
        self,
        entities: Sequence[dict[str, Any]],
        mutation: EntityMutation,
        token: str,
        results: list[MutationResult] | None = None,
    ) -> BatchOutcome:
        """
        Mutate every entity, batch by batch.

        Args:
            entities (Sequence[dict[str, Any]]): Entities in processing order
            mutation (EntityMutation): Mutation to apply
            token (str): Current bearer token
            results (list[MutationResult] | None): List to append results to as they
                are produced; stays populated if a later call fails

        Returns:
            BatchOutcome: Results, the latest token and the number of batches

        Raises:
            ValidationError: If the configured batch size is below 1
        """
        batch_size = self.config.batch_size
        if batch_size < 1:
            raise ValidationError(f"Batch size must be at least 1, got {batch_size}")
        if results is None:
            results = []

        batches = list(chunked(entities, batch_size))
        pbar = tqdm(
            total=len(entities),
            desc=f"Applying {mutation.name}",
            unit="entity",
            disable=not self.show_progress,
        )
        try:
            for index, batch in enumerate(batches):
                calls_issued = 0
                for entity in batch:
                    logger.debug(f"Total: {len(entities)}, processed: {len(results)}")
                    skipped = mutation.check_skip(entity)
                    if skipped is not None:
                        results.append(skipped)
                        pbar.update(1)
                        continue

                    url, body = mutation.build_request(entity)
                    response = await self.requester.execute(
                        url, token, method="PATCH", json_body=body
                    )
                    token = response.token
                    calls_issued += 1
                    results.append(mutation.build_result(entity, response.data))
                    pbar.update(1)

                if calls_issued and index + 1 < len(batches):
                    logger.warning(
                        f"Waiting {self.config.cooldown_seconds:g}s before next batch "
                        f"to avoid server rate limits"
                    )
                    await self.sleep(self.config.cooldown_seconds)
        finally:
            pbar.close()

        return BatchOutcome(results=results, token=token, batches=len(batches))
