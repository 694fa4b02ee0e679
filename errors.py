from dataclasses import dataclass, field
from typing import Any, List, Optional


class PipelineError(Exception):
    """Base for every fatal pipeline failure.

    Step exit codes start at 3; 2 stays with argparse usage errors.
    """

    step = "pipeline"
    exit_code = 1

    def __init__(self, message: str, details: Optional[List[str]] = None):
        super().__init__(message)
        self.message = message
        self.details = list(details or [])

    def __str__(self) -> str:
        if not self.details:
            return self.message
        return self.message + "\n" + "\n".join(self.details)


class GenerationError(PipelineError):
    step = "generate"
    exit_code = 3


class RelocationError(PipelineError):
    step = "relocate"
    exit_code = 4


class NormalizationError(PipelineError):
    step = "normalize"
    exit_code = 5


class ValidationError(PipelineError):
    step = "validate"
    exit_code = 6


@dataclass
class StepResult:
    ok: bool
    value: Any = None
    error: Optional[PipelineError] = None
    output: List[str] = field(default_factory=list)

    @classmethod
    def success(cls, value: Any = None, output: Optional[List[str]] = None) -> "StepResult":
        return cls(ok=True, value=value, output=list(output or []))

    @classmethod
    def failure(cls, error: PipelineError) -> "StepResult":
        return cls(ok=False, error=error)
