"""Moderation workflow using LangGraph.

Joins a classification to its later human decision:
1. classify - run the classifier with learned context
2. interrupt before ``record`` - the item waits for a moderator
3. record - resumed with the decision, appends the training case

Each content item is one checkpointed thread (``thread_id`` = content id).
Nothing is recorded for an item that never receives a decision.
"""

import logging
import threading
from datetime import datetime, timezone
from typing import Any, Optional

from langgraph.checkpoint.memory import MemorySaver
from langgraph.graph import StateGraph, START, END

from soapbox_moderation.exceptions import InvalidTransitionError
from soapbox_moderation.models.classification import ClassificationResult
from soapbox_moderation.models.training_case import AIClassification, HumanDecision, TrainingCase
from soapbox_moderation.workflows.state import ModerationState, create_initial_state

logger = logging.getLogger(__name__)

RECORD_NODE = "record"


def create_workflow(classifier, store, checkpointer=None):
    """Create the LangGraph workflow for one moderation service.

    START -> classify -> record -> END, interrupted before ``record`` until a
    human decision is supplied.

    Args:
        classifier: ModerationClassifier sharing ``store`` through its
            context builder
        store: Training store that receives recorded cases
        checkpointer: LangGraph checkpointer holding pending items. If None,
            uses an in-process MemorySaver.

    Returns:
        Compiled StateGraph workflow
    """

    def classify_node(state: ModerationState) -> dict[str, Any]:
        """Classify the content unless a classification was supplied."""
        classification = state.get("classification")
        if classification is None:
            result = classifier.classify(state["content"], state["content_type"])
            classification = result.to_dict()

        return {
            "classification": classification,
            "processing_step": "awaiting_decision",
            "classified_at": datetime.now(timezone.utc).isoformat(),
        }

    def record_node(state: ModerationState) -> dict[str, Any]:
        """Append the (AI, human) pair to the training store."""
        decision = HumanDecision.from_dict(state["decision"])
        result = ClassificationResult.from_dict(state["classification"])

        case = TrainingCase.create(
            content=state["content"],
            content_type=state["content_type"],
            ai_classification=AIClassification.from_result(result),
            human_decision=decision,
        )
        # TrainingStoreError propagates; the checkpoint stays before this node
        store.append(case)

        return {
            "training_case": case.to_dict(),
            "outcome": case.outcome.value,
            "processing_step": "recorded",
            "recorded_at": datetime.now(timezone.utc).isoformat(),
        }

    workflow = StateGraph(ModerationState)
    workflow.add_node("classify", classify_node)
    workflow.add_node(RECORD_NODE, record_node)

    workflow.add_edge(START, "classify")
    workflow.add_edge("classify", RECORD_NODE)
    workflow.add_edge(RECORD_NODE, END)

    return workflow.compile(
        checkpointer=checkpointer or MemorySaver(),
        interrupt_before=[RECORD_NODE],
    )


def _thread(content_id: str) -> dict[str, Any]:
    return {"configurable": {"thread_id": content_id}}


class ModerationWorkflow:
    """Tracks content from classification to recorded training case.

    Manages the moderation lifecycle:
    - Classification with learned context
    - Holding the item at the ``record`` interrupt while a moderator reviews
    - Resuming with the decision to record the training case
    """

    def __init__(self, classifier, store, checkpointer=None):
        """Initialize the workflow.

        Args:
            classifier: ModerationClassifier sharing ``store``
            store: Training store that receives recorded cases
            checkpointer: Optional LangGraph checkpointer
        """
        self.classifier = classifier
        self.store = store
        self.graph = create_workflow(classifier, store, checkpointer)
        self._content_ids: set[str] = set()
        # Serialises the pending check and resume for decisions and discards
        self._lock = threading.Lock()

    def _held(self, content_id: str) -> ModerationState:
        with self._lock:
            self._content_ids.add(content_id)
        return self.graph.get_state(_thread(content_id)).values

    def classify(self, content_id: str, content: str, content_type: str = "post") -> ModerationState:
        """Classify content and hold it for a human decision.

        Classifying an id that is already pending replaces the held
        classification.

        Returns:
            State at ``awaiting_decision`` carrying the classification
        """
        state = create_initial_state(content_id, content, content_type)
        self.graph.invoke(state, _thread(content_id))
        return self._held(content_id)

    async def aclassify(
        self, content_id: str, content: str, content_type: str = "post"
    ) -> ModerationState:
        """Async variant of ``classify`` using the classifier's timeout."""
        result = await self.classifier.aclassify(content, content_type)
        state = create_initial_state(
            content_id, content, content_type, classification=result.to_dict()
        )
        await self.graph.ainvoke(state, _thread(content_id))
        return self._held(content_id)

    def is_pending(self, content_id: str) -> bool:
        """Check whether the item is waiting at the ``record`` interrupt."""
        snapshot = self.graph.get_state(_thread(content_id))
        return RECORD_NODE in snapshot.next

    def record_decision(self, content_id: str, decision: HumanDecision) -> TrainingCase:
        """Resume a held item with a moderator decision.

        Args:
            content_id: Item previously passed to ``classify``
            decision: The moderator's final priority, category and action

        Returns:
            The appended TrainingCase

        Raises:
            InvalidTransitionError: If the item is not awaiting a decision
            TrainingStoreError: If the case could not be stored; the item stays
                pending so the decision can be retried
        """
        config = _thread(content_id)

        with self._lock:
            if not self.is_pending(content_id):
                raise InvalidTransitionError(
                    f"Content {content_id} has no classification awaiting a decision"
                )
            self.graph.update_state(config, {"decision": decision.to_dict()}, as_node="classify")
            final = self.graph.invoke(None, config)

        case = TrainingCase.from_dict(final["training_case"])
        logger.info(
            f"Moderator decision recorded for {content_id}: "
            f"{case.ai_classification.priority.value} -> "
            f"{decision.final_priority.value} ({case.outcome.value})"
        )
        return case

    def discard(self, content_id: str) -> bool:
        """Drop a pending classification without recording anything.

        Returns:
            True if an item was pending
        """
        with self._lock:
            if not self.is_pending(content_id):
                return False
            # Completing as the record node skips it; nothing is appended
            self.graph.update_state(
                _thread(content_id), {"processing_step": "discarded"}, as_node=RECORD_NODE
            )
        logger.info(f"Discarded pending classification for {content_id}")
        return True

    def get_pending(self, content_id: str) -> Optional[ModerationState]:
        """State of a held item, or None if it is not awaiting a decision."""
        if not self.is_pending(content_id):
            return None
        return self.graph.get_state(_thread(content_id)).values

    def pending(self) -> list[ModerationState]:
        """Items awaiting a human decision."""
        with self._lock:
            content_ids = sorted(self._content_ids)
        return [
            state for state in (self.get_pending(cid) for cid in content_ids)
            if state is not None
        ]
