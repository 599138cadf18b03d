"""
Domain Exceptions

Fatal errors (ConfigError, DatasetLoadError) abort a run before the first sample.
JudgeCallError is absorbed per sample by the evaluator. PersistenceError is raised
only after the summary has been computed in memory.
"""


class QAJudgeError(Exception):
    """Base class for all qa-judge errors"""
    pass


class ConfigError(QAJudgeError):
    """Invalid or incomplete configuration"""
    pass


class DatasetLoadError(QAJudgeError):
    """The dataset could not be read or parsed"""
    pass


class InvalidScoreError(QAJudgeError):
    """The judge returned a score outside [0, 1] (one failed attempt)"""
    pass


class JudgeCallError(QAJudgeError):
    """The judge model failed or returned an invalid score after all attempts"""

    def __init__(self, message: str, attempts: int = 0, last_error: Exception | None = None):
        super().__init__(message)
        self.attempts = attempts
        self.last_error = last_error


class PersistenceError(QAJudgeError):
    """Reading or writing persisted results failed"""
    pass


class EvaluationCancelled(QAJudgeError):
    """The run was cancelled while a judge call was pending"""
    pass
