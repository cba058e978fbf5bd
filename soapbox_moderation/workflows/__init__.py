"""Moderation lifecycle workflow."""

from soapbox_moderation.workflows.state import ModerationState, create_initial_state
from soapbox_moderation.workflows.moderation import ModerationWorkflow, create_workflow

__all__ = ["ModerationState", "ModerationWorkflow", "create_initial_state", "create_workflow"]
