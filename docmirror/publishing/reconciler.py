"""Create-or-update reconciliation against an output store."""

from __future__ import annotations

import logging

from ..core.interfaces import OutputStore
from ..core.models import PublishOutcome, PublishResult
from ..exceptions import PublishError

logger = logging.getLogger(__name__)


def publish(
    store: OutputStore,
    output_path: str,
    html: str,
    *,
    message: str,
    always_overwrite: bool = False,
) -> PublishResult:
    """Write ``html`` to ``output_path`` unless the store already holds it.

    Args:
        store: Output store to reconcile against
        output_path: Target path in the store
        html: Rendered document
        message: Commit message for the write
        always_overwrite: Write even when the stored content is identical

    Returns:
        Outcome of the reconciliation and the new revision, if any

    Raises:
        PublishError: If any store operation fails
    """
    try:
        if not store.exists(output_path):
            revision = store.upsert(output_path, html, message)
            return PublishResult(
                outcome=PublishOutcome.CREATED,
                output_path=output_path,
                revision=revision,
            )

        if not always_overwrite and store.read(output_path) == html:
            logger.debug(f"Unchanged: {output_path}")
            return PublishResult(outcome=PublishOutcome.UNCHANGED, output_path=output_path)

        revision = store.upsert(output_path, html, message)
    except PublishError:
        raise
    except Exception as e:
        raise PublishError(output_path, str(e)) from e

    return PublishResult(
        outcome=PublishOutcome.UPDATED,
        output_path=output_path,
        revision=revision,
    )
