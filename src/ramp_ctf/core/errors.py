from __future__ import annotations


class SolverError(RuntimeError):
    pass


class ValidationError(SolverError):
    def __init__(self, message: str, *, value: object = None) -> None:
        super().__init__(message)
        self.value = value


class FetchError(SolverError):
    def __init__(self, url: str, message: str, *, attempts: int = 0, status: int | None = None) -> None:
        super().__init__(message)
        self.url = url
        self.attempts = attempts
        self.status = status


class ExtractionError(SolverError):
    def __init__(self, strategy: str, message: str) -> None:
        super().__init__(f"{strategy} failed: {message}")
        self.strategy = strategy


class AllStrategiesFailedError(SolverError):
    def __init__(self, failures: list[tuple[str, str]]) -> None:
        last = failures[-1][1] if failures else "no strategies configured"
        super().__init__(f"All extraction strategies failed. Last error: {last}")
        self.failures = list(failures)
