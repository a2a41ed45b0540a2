from abc import ABC, abstractmethod
from typing import Any


class AbstractDispatcher(ABC):
	"""Interface for fire-and-forget job submission with a push callback."""

	@abstractmethod
	async def submit(self, job: dict[str, Any], callback_url: str) -> str:
		"""Submit a job and return its correlation id without waiting for completion.

		The worker invokes ``callback_url`` once the job finishes, at a time
		outside this process's control.

		Args:
			job: JSON-serializable job payload forwarded to the worker.
			callback_url: Address the worker calls back with the encoded result.

		Returns:
			str: Correlation id assigned by the dispatcher.

		Raises:
			DispatchAppError: If the submission could not be completed.
		"""
		...

	async def close(self) -> None:
		"""Release network resources held by the dispatcher."""
		return None
