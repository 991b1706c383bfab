from .session import PipelineSession, SessionState

__all__ = ["PipelineSession", "SessionState"]
