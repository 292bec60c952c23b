class InvestigationError(Exception):
    pass


class RecordValidationError(InvestigationError):
    def __init__(self, name: str, detail: str) -> None:
        super().__init__(f"API response validation failed for '{name}': {detail}")
        self.name = name


class FetchError(InvestigationError):
    def __init__(self, message: str, *, name: str) -> None:
        super().__init__(message)
        self.name = name


class NetworkError(FetchError):
    pass


class FetchTimeoutError(FetchError):
    pass


class HTTPStatusError(FetchError):
    def __init__(self, name: str, status_code: int) -> None:
        super().__init__(f"HTTP {status_code} for '{name}'", name=name)
        self.status_code = status_code


class CriteriaNotMatchedError(InvestigationError):
    def __init__(self, name: str, reason: str) -> None:
        super().__init__(f"'{name}' does not match criteria: {reason}")
        self.name = name
        self.reason = reason


class NonRetryableError(InvestigationError):
    def __init__(self, context: str, attempt: int, max_attempts: int) -> None:
        super().__init__(f"non-retryable error for {context} on attempt {attempt}/{max_attempts}")
        self.context = context
        self.attempts = attempt


class RetryExhaustedError(InvestigationError):
    def __init__(self, context: str, attempts: int) -> None:
        super().__init__(f"all {attempts} attempts failed for {context}")
        self.context = context
        self.attempts = attempts
