"""
llm_patcher — safely apply model-generated diffs to source files.

Public API for library usage::

    from llm_patcher import ApplyWorkflow, Config

    outcome = ApplyWorkflow(Config.load()).apply("main.go", model_output)
"""

from .config import Config
from .workflow import ApplyOutcome, ApplyState, ApplyStatus, ApplyWorkflow

__all__ = ["ApplyWorkflow", "ApplyOutcome", "ApplyState", "ApplyStatus", "Config"]
