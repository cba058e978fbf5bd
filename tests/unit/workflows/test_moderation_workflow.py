"""Unit tests for the LangGraph moderation workflow."""

from unittest.mock import DEFAULT, MagicMock

import pytest


@pytest.fixture
def decision_factory():
    """Factory for moderator decisions."""
    from soapbox_moderation.models.training_case import HumanDecision, ModeratorAction
    from soapbox_moderation.taxonomy import Category, Priority

    def _create_decision(priority="critical", category="sexual_content", action="removed", **kwargs):
        return HumanDecision(
            final_priority=Priority(priority),
            final_category=Category(category),
            action=ModeratorAction(action),
            moderator_notes=kwargs.get("moderator_notes"),
            moderator_id=kwargs.get("moderator_id", "mod-1"),
        )

    return _create_decision


@pytest.fixture
def workflow(service_factory):
    return service_factory().workflow


class TestState:
    """Tests for state helpers."""

    def test_create_initial_state(self):
        from soapbox_moderation.workflows.state import create_initial_state

        state = create_initial_state("post-1", "Hello", "post")

        assert state["content_id"] == "post-1"
        assert state["processing_step"] == "unclassified"
        assert state["classification"] is None
        assert state["decision"] is None
        assert state["outcome"] is None
        assert state["created_at"]


class TestGraph:
    """Tests for the compiled graph."""

    def test_graph_nodes(self, workflow):
        nodes = set(workflow.graph.get_graph().nodes)

        assert {"classify", "record"} <= nodes

    def test_graph_stops_before_record(self, workflow):
        workflow.classify("post-1", "Hello", "post")

        snapshot = workflow.graph.get_state({"configurable": {"thread_id": "post-1"}})

        assert snapshot.next == ("record",)

    def test_unknown_thread_is_not_pending(self, workflow):
        assert workflow.is_pending("never-seen") is False
        assert workflow.get_pending("never-seen") is None

    def test_threads_are_isolated(self, workflow):
        workflow.classify("post-1", "Looking for a hookup after church", "post")
        workflow.classify("post-2", "I feel like sermons are boring sometimes.", "post")

        assert workflow.get_pending("post-1")["classification"]["priority"] == "critical"
        assert workflow.get_pending("post-2")["classification"]["priority"] == "low"


class TestModerationWorkflow:
    """Tests for ModerationWorkflow."""

    def test_classify_holds_item_for_decision(self, workflow):
        state = workflow.classify("post-1", "Looking for a hookup after church", "discussion")

        assert state["processing_step"] == "awaiting_decision"
        assert state["classification"]["priority"] == "critical"
        assert state["classified_at"]
        assert workflow.get_pending("post-1")["content"] == "Looking for a hookup after church"
        assert len(workflow.store) == 0

    def test_record_decision_appends_case(self, workflow, decision_factory):
        workflow.classify("post-1", "I feel like sermons are boring sometimes.", "discussion")

        case = workflow.record_decision(
            "post-1", decision_factory(priority="medium", category="inappropriate_content")
        )

        assert case.outcome.value == "under_classified"
        assert case.ai_classification.priority.value == "low"
        assert case.content_type == "discussion"
        assert case.human_decision.moderator_id == "mod-1"
        assert workflow.store.all() == (case,)
        assert workflow.get_pending("post-1") is None

    def test_record_decision_completes_state(self, workflow, decision_factory):
        workflow.classify("post-1", "Looking for a hookup after church", "discussion")

        workflow.record_decision("post-1", decision_factory())

        state = workflow.graph.get_state({"configurable": {"thread_id": "post-1"}}).values
        assert state["processing_step"] == "recorded"
        assert state["outcome"] == "correct"
        assert state["recorded_at"]

    def test_recorded_correction_reaches_next_prompt(
        self, service_factory, scripted_client, decision_factory
    ):
        service = service_factory(completion_client=scripted_client)
        service.workflow.classify("post-1", "Meet me in the parking lot tonight", "post")
        service.workflow.record_decision(
            "post-1",
            decision_factory(priority="critical", moderator_notes="Solicitation"),
        )

        service.workflow.classify("post-2", "Another post", "post")

        second_prompt = scripted_client.requests[1].system_prompt
        assert "Meet me in the parking lot tonight" in second_prompt
        assert "Lesson: Be more strict with this type of content" in second_prompt
        assert "Notes: Solicitation" in second_prompt

    def test_decision_without_classification_is_rejected(self, workflow, decision_factory):
        from soapbox_moderation.exceptions import InvalidTransitionError

        with pytest.raises(InvalidTransitionError):
            workflow.record_decision("never-seen", decision_factory())

        assert len(workflow.store) == 0

    def test_second_decision_is_rejected(self, workflow, decision_factory):
        from soapbox_moderation.exceptions import InvalidTransitionError

        workflow.classify("post-1", "Hello", "post")
        workflow.record_decision("post-1", decision_factory())

        with pytest.raises(InvalidTransitionError):
            workflow.record_decision("post-1", decision_factory())

        assert len(workflow.store) == 1

    def test_store_failure_keeps_item_pending(self, service_factory, decision_factory):
        from soapbox_moderation.exceptions import TrainingStoreError

        failing_store = MagicMock()
        failing_store.recent.return_value = ()
        failing_store.append.side_effect = TrainingStoreError("database unavailable")
        workflow = service_factory(store=failing_store).workflow

        workflow.classify("post-1", "Hello", "post")

        with pytest.raises(TrainingStoreError):
            workflow.record_decision("post-1", decision_factory())

        state = workflow.get_pending("post-1")
        assert state is not None
        assert state["processing_step"] == "awaiting_decision"

    def test_decision_can_be_retried_after_store_failure(self, service_factory, store, decision_factory):
        from soapbox_moderation.exceptions import TrainingStoreError

        flaky_store = MagicMock(wraps=store)
        flaky_store.append.side_effect = [TrainingStoreError("locked"), DEFAULT]
        workflow = service_factory(store=flaky_store).workflow
        workflow.classify("post-1", "Hello", "post")

        with pytest.raises(TrainingStoreError):
            workflow.record_decision("post-1", decision_factory())
        case = workflow.record_decision("post-1", decision_factory())

        assert case.outcome.value == "under_classified"
        assert flaky_store.append.call_count == 2
        assert store.all() == (case,)
        assert workflow.get_pending("post-1") is None

    def test_discard_records_nothing(self, workflow, decision_factory):
        from soapbox_moderation.exceptions import InvalidTransitionError

        workflow.classify("post-1", "Hello", "post")

        assert workflow.discard("post-1") is True
        assert workflow.discard("post-1") is False
        assert workflow.pending() == []
        assert len(workflow.store) == 0
        with pytest.raises(InvalidTransitionError):
            workflow.record_decision("post-1", decision_factory())

    def test_reclassifying_replaces_pending_item(self, workflow):
        workflow.classify("post-1", "Hello", "post")
        workflow.classify("post-1", "Looking for a hookup after church", "post")

        pending = workflow.pending()
        assert len(pending) == 1
        assert pending[0]["classification"]["priority"] == "critical"

    @pytest.mark.asyncio
    async def test_aclassify_holds_item(self, workflow):
        state = await workflow.aclassify("post-1", "The Bible supports slavery.", "discussion")

        assert state["processing_step"] == "awaiting_decision"
        assert state["classification"]["priority"] == "high"
        assert workflow.is_pending("post-1")

    @pytest.mark.asyncio
    async def test_aclassify_does_not_call_classifier_twice(self, service_factory, scripted_client):
        workflow = service_factory(completion_client=scripted_client).workflow

        await workflow.aclassify("post-1", "Hello", "post")

        assert len(scripted_client.requests) == 1
