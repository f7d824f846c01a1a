"""Testing – doubles and pytest fixtures for code that uses authzkit."""
from authzkit.testing.fakes import RecordingDecisionSink

__all__ = ["RecordingDecisionSink"]
