"""Progress calculation for attempts."""

from colorquiz.database.stores import AttemptStore
from colorquiz.models.score import Progress
from colorquiz.utils.exceptions import ResourceNotFoundError


class ProgressService:
    """Counts assigned and answered questions.

    Always reads the store directly so that the completion gate never sees a
    stale count.
    """

    def __init__(self, attempt_store: AttemptStore):
        self.attempt_store = attempt_store

    async def get_progress(self, attempt_id: str) -> Progress:
        """Compute an attempt's progress.

        Args:
            attempt_id: Attempt id

        Returns:
            Progress: Assigned, answered and remaining counts

        Raises:
            ResourceNotFoundError: If the attempt does not exist
        """
        attempt = await self.attempt_store.get_attempt(attempt_id)
        if attempt is None:
            raise ResourceNotFoundError(
                f"Attempt {attempt_id} not found",
                resource_type="attempt",
                resource_id=attempt_id,
            )

        answered = await self.attempt_store.count_answers(attempt_id)
        return Progress.from_counts(attempt.assigned_count, answered)
