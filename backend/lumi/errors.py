from __future__ import annotations


class LumiError(Exception):
	"""Base for errors that map onto an HTTP response at the API boundary."""

	status_code: int = 500

	def __init__(self, detail: str) -> None:
		super().__init__(detail)
		self.detail = detail


class InvalidInputError(LumiError):
	status_code = 400


class PermissionDeniedError(LumiError):
	status_code = 403


class NotFoundError(LumiError):
	status_code = 404


class ConflictError(LumiError):
	status_code = 409


class ContentGenerationError(LumiError):
	status_code = 502
