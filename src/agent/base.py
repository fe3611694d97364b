"""
agent.base - Shared PLAN → THINK → EXECUTE engine.

Every capability (MoodMate, NutriCoach, ...) subclasses WellnessAgent and
supplies its intent analysis, action catalog, step handlers, output
assembly and error messages. Everything else lives here:

    PLAN     fetch context + memory, derive the intent, rank the catalog,
             assess risk
    THINK    narrate, compare up to three alternatives, pick one, turn it
             into execution steps, compute confidence and safeguards
    EXECUTE  run the steps in order over an immutable StepContext, persist
             the finalize output as a recommendation, update memory

run() never raises: every failure becomes an AgentRunResult with
success=False and a capability-specific message chosen by ErrorKind.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any, Mapping, Optional

from application.context import StepContext
from domain.exceptions import AgentError, ErrorKind, classify_error
from domain.memory import AgentMemory, MemoryView, Observation, load_memory
from domain.models import (
    AgentAction,
    AgentExecution,
    AgentPlan,
    AgentRunResult,
    AgentState,
    AgentThought,
    Alternative,
    ContextAnalysis,
    ExecutionStep,
    RiskAssessment,
    RiskFlag,
    SelectedApproach,
    StepResult,
    Urgency,
    UserContext,
    UserIntent,
)
from domain.ports import (
    ContentProvider,
    MemoryStore,
    RecommendationStore,
    UserContextProvider,
)

logger = logging.getLogger(__name__)

MUST_DO_BOOST = 0.3
CATEGORY_MATCH_BOOST = 0.1
BASE_FEASIBILITY = 0.8
MAX_ALTERNATIVES = 3


def utcnow_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def step_data(results: list[StepResult], *names: str) -> Any:
    """Data of the first successful step among *names*, in preference order."""
    by_name = {r.step: r for r in results if r.success is not False}
    for name in names:
        result = by_name.get(name)
        if result is not None and result.data is not None:
            return result.data
    return None


class WellnessAgent(ABC):
    """Base class for all wellness agents.

    Subclasses set the descriptor attributes and implement the abstract
    hooks. Agents are stateless between runs: all per-user state lives in
    the memory store, so one instance serves every user.
    """

    name: str = ""
    role: str = ""
    tools: list[str] = []
    capabilities: list[str] = []
    must_do_tasks: list[str] = []

    # Tag used when persisting the finalize output; None disables persistence.
    recommendation_type: Optional[str] = None

    def __init__(
        self,
        *,
        memory_store: MemoryStore,
        recommendation_store: RecommendationStore,
        user_context_provider: UserContextProvider,
        content_provider: ContentProvider,
    ):
        self._memory_store = memory_store
        self._recommendations = recommendation_store
        self._user_context = user_context_provider
        self._content = content_provider

    # ------------------------------------------------------------------
    # Capability hooks
    # ------------------------------------------------------------------

    @abstractmethod
    async def analyze_user_intent(
        self,
        input: Mapping[str, Any],
        user_context: UserContext,
        memory: AgentMemory,
    ) -> UserIntent:
        ...

    @abstractmethod
    def get_available_actions(self) -> list[AgentAction]:
        ...

    @abstractmethod
    async def execute_step(self, step: ExecutionStep, ctx: StepContext) -> StepResult:
        ...

    @abstractmethod
    def generate_output(
        self, results: list[StepResult], plan: AgentPlan, ctx: StepContext,
    ) -> Any:
        ...

    @abstractmethod
    def generate_error_response(
        self, kind: ErrorKind, error: BaseException, input: Mapping[str, Any],
    ) -> Any:
        ...

    # ------------------------------------------------------------------
    # Run
    # ------------------------------------------------------------------

    async def run(self, input: Optional[Mapping[str, Any]], user_id: int) -> AgentRunResult:
        """PLAN → THINK → EXECUTE for one user. Never raises."""
        input = dict(input or {})
        state = AgentState.IDLE
        try:
            user_context = await self._user_context.get_context(user_id)
            memory = await self.get_memory(user_id)

            state = AgentState.PLANNING
            plan = await self.plan(input, user_context, memory)
            logger.info("[%s] PLAN: %s", self.name, plan.intent.summary)

            state = AgentState.THINKING
            thought = self.think(plan, user_context)
            logger.info("[%s] THINK: %s", self.name, thought.selected_approach.name)

            state = AgentState.EXECUTING
            ctx = StepContext.start(
                user_id=user_id,
                input=input,
                intent=plan.intent,
                context=plan.context,
                user_context=user_context,
                memory=memory,
            )
            execution = await self.execute(thought, plan, ctx)
            logger.info(
                "[%s] EXECUTE: %s", self.name, "SUCCESS" if execution.success else "PARTIAL",
            )

            await self.update_memory(user_id, memory)

            state = AgentState.SUCCEEDED if execution.success else AgentState.FAILED
            return AgentRunResult(
                agent_name=self.name,
                success=execution.success,
                output=execution.output,
                collaboration_triggers=execution.collaboration_triggers,
                plan=plan.intent.summary,
                confidence=thought.confidence,
                memory=memory.model_dump(mode="json"),
                state=state,
            )

        except Exception as e:
            kind = classify_error(e)
            logger.exception("[%s] Critical error while %s (%s)", self.name, state.value, kind.value)
            return AgentRunResult(
                agent_name=self.name,
                success=False,
                output=self.generate_error_response(kind, e, input),
                collaboration_triggers=[],
                state=AgentState.FAILED,
                error=str(e),
                error_kind=kind.value,
            )

    # ------------------------------------------------------------------
    # PLAN
    # ------------------------------------------------------------------

    async def plan(
        self,
        input: Mapping[str, Any],
        user_context: UserContext,
        memory: AgentMemory,
    ) -> AgentPlan:
        intent = await self.analyze_user_intent(input, user_context, memory)
        context = self.analyze_context(user_context, memory)
        actions = self.prioritize_actions(self.get_available_actions(), intent)
        return AgentPlan(
            intent=intent,
            context=context,
            actions=actions,
            expected_outcome=self.predict_outcome(intent, actions),
            risk_assessment=self.assess_risks(intent, context),
        )

    def analyze_context(self, user_context: UserContext, memory: AgentMemory) -> ContextAnalysis:
        return ContextAnalysis(
            user_mood=user_context.current_mood or "neutral",
            recent_activity=list(memory.recent_activity),
            health_status=user_context.health_status or "unknown",
            preferences=dict(user_context.preferences),
            risk_factors=self.identify_risk_factors(user_context),
        )

    @staticmethod
    def identify_risk_factors(user_context: UserContext) -> list[str]:
        risks = []
        if user_context.current_mood == "depressed":
            risks.append("mental_health_concern")
        if user_context.health_status == "critical":
            risks.append("physical_health_concern")
        return risks

    @staticmethod
    def is_action_relevant(action: AgentAction, intent: UserIntent) -> bool:
        return any(cat in intent.categories for cat in action.categories)

    def calculate_action_priority(self, action: AgentAction, intent: UserIntent) -> float:
        priority = action.base_priority
        if action.name in self.must_do_tasks:
            priority += MUST_DO_BOOST
        matches = sum(1 for cat in action.categories if cat in intent.categories)
        return priority + matches * CATEGORY_MATCH_BOOST

    def prioritize_actions(self, actions: list[AgentAction], intent: UserIntent) -> list[AgentAction]:
        """Relevant actions, highest priority first (stable on ties)."""
        relevant = [a for a in actions if self.is_action_relevant(a, intent)]
        return sorted(
            relevant,
            key=lambda a: self.calculate_action_priority(a, intent),
            reverse=True,
        )

    @staticmethod
    def predict_outcome(intent: UserIntent, actions: list[AgentAction]) -> str:
        if not actions:
            return "No suitable actions identified"
        return f"Expected to {actions[0].description} with {intent.confidence * 100:g}% confidence"

    @staticmethod
    def assess_risks(intent: UserIntent, context: ContextAnalysis) -> RiskAssessment:
        risks = []
        if intent.category == "health" and context.health_status == "concerning":
            risks.append(RiskFlag(
                "high", "Health concern detected", "Recommend professional consultation",
            ))
        if intent.urgency == Urgency.HIGH and intent.confidence < 0.7:
            risks.append(RiskFlag(
                "medium", "High urgency with low confidence", "Request clarification",
            ))
        level = max((r.severity for r in risks), default=1)
        return RiskAssessment(overall_level=level, risks=risks)

    # ------------------------------------------------------------------
    # THINK
    # ------------------------------------------------------------------

    def think(self, plan: AgentPlan, user_context: UserContext) -> AgentThought:
        reasoning = self.perform_reasoning(plan)
        alternatives = self.consider_alternatives(plan)
        if not alternatives:
            raise AgentError(
                ErrorKind.NO_APPLICABLE_ACTION,
                f"No applicable action for intent: {plan.intent.summary}",
            )
        approach = self.select_best_approach(alternatives, plan)
        return AgentThought(
            reasoning=reasoning,
            alternatives=alternatives,
            selected_approach=approach,
            confidence=self.calculate_confidence(approach, plan),
            safeguards=self.identify_safeguards(approach, plan.risk_assessment),
        )

    @staticmethod
    def perform_reasoning(plan: AgentPlan) -> str:
        """Human-readable trace only; nothing branches on it."""
        return ". ".join([
            f"User intent: {plan.intent.summary}",
            f"Context: {plan.context.user_mood} mood, {plan.context.health_status} health status",
            f"Available actions: {len(plan.actions)} options identified",
            f"Risk level: {plan.risk_assessment.overall_level}/3",
        ])

    def consider_alternatives(self, plan: AgentPlan) -> list[Alternative]:
        return [
            Alternative(
                name=action.name,
                description=action.description,
                pros=list(action.benefits),
                cons=list(action.risks),
                feasibility=self.calculate_feasibility(action, plan),
            )
            for action in plan.actions[:MAX_ALTERNATIVES]
        ]

    def calculate_feasibility(self, action: AgentAction, plan: AgentPlan) -> float:
        feasibility = BASE_FEASIBILITY
        if plan.risk_assessment.overall_level >= 3:
            feasibility -= 0.2
        if all(tool in self.tools for tool in action.required_tools):
            feasibility += 0.1
        return clamp(feasibility, 0.1, 1.0)

    def select_best_approach(self, alternatives: list[Alternative], plan: AgentPlan) -> SelectedApproach:
        best = alternatives[0]
        for alternative in alternatives[1:]:
            if alternative.feasibility > best.feasibility:
                best = alternative
        return SelectedApproach(
            name=best.name,
            description=best.description,
            steps=self.generate_execution_steps(best, plan),
            estimated_duration=self.estimate_duration(best),
            success_probability=best.feasibility,
        )

    def generate_execution_steps(self, alternative: Alternative, plan: AgentPlan) -> list[ExecutionStep]:
        """Default three-step pipeline. Capabilities override for named steps."""
        return [
            ExecutionStep("prepare", "Prepare for execution", ("userInput",), "preparation_complete"),
            ExecutionStep("execute_main", alternative.description, ("preparation_complete",), "main_result"),
            ExecutionStep("finalize", "Finalize and format output", ("main_result",), "final_output"),
        ]

    @staticmethod
    def estimate_duration(alternative: Alternative) -> int:
        """Seconds."""
        return 5

    @staticmethod
    def calculate_confidence(approach: SelectedApproach, plan: AgentPlan) -> float:
        risk_penalty = plan.risk_assessment.overall_level * 0.1
        return clamp(
            (approach.success_probability + plan.intent.confidence) / 2 - risk_penalty,
            0.1,
            1.0,
        )

    @staticmethod
    def identify_safeguards(approach: SelectedApproach, risk: RiskAssessment) -> list[str]:
        safeguards = []
        if risk.overall_level >= 2:
            safeguards.append("Validate user input before proceeding")
            safeguards.append("Monitor execution for unexpected results")
        if approach.success_probability < 0.7:
            safeguards.append("Provide alternative options if primary approach fails")
        return safeguards

    # ------------------------------------------------------------------
    # EXECUTE
    # ------------------------------------------------------------------

    async def execute(self, thought: AgentThought, plan: AgentPlan, ctx: StepContext) -> AgentExecution:
        results: list[StepResult] = []
        for step in thought.selected_approach.steps:
            try:
                result = await self.execute_step(step, ctx.for_step(step))
                if (
                    step.name == "finalize"
                    and result.success is not False
                    and result.data is not None
                ):
                    await self.persist_recommendation(ctx.user_id, result.data)
            except Exception as e:
                logger.exception("[%s] Execution error in step %s", self.name, step.name)
                result = StepResult(step=step.name, success=False, error=str(e))

            results.append(result)
            if result.success is not False and result.data is not None:
                ctx = ctx.with_output(step.expected_output, result.data)

        output = self.generate_output(results, plan, ctx)
        triggers = self.identify_collaboration_needs(results, plan, ctx)
        ctx.memory.record_execution(
            [{"step": r.step, "success": r.success} for r in results],
            utcnow_iso(),
        )
        return AgentExecution(
            results=results,
            success=all(r.success is not False for r in results),
            output=output,
            collaboration_triggers=triggers,
            memory_updates=ctx.memory.model_dump(mode="json"),
        )

    async def persist_recommendation(self, user_id: int, content: Any) -> None:
        if self.recommendation_type is None or not isinstance(content, dict):
            return
        await self._recommendations.create(user_id, self.name, self.recommendation_type, content)

    def identify_collaboration_needs(
        self, results: list[StepResult], plan: AgentPlan, ctx: StepContext,
    ) -> list[str]:
        if plan.intent.category == "mood" and plan.context.user_mood == "stressed":
            return ["NutriCoach", "FlexGenie", "MindPal"]
        return []

    @staticmethod
    def unknown_step(step: ExecutionStep) -> AgentError:
        return AgentError(ErrorKind.UNKNOWN_STEP, f"Unknown step: {step.name}")

    # ------------------------------------------------------------------
    # Memory
    # ------------------------------------------------------------------

    async def get_memory(self, user_id: int) -> AgentMemory:
        return load_memory(self.name, await self._memory_store.get(user_id, self.name))

    async def update_memory(self, user_id: int, memory: AgentMemory | Mapping[str, Any]) -> AgentMemory:
        """Store *memory* as this agent's record, stamping last_update."""
        if not isinstance(memory, AgentMemory):
            memory = load_memory(self.name, memory)
        memory.last_update = utcnow_iso()
        await self._memory_store.put(user_id, self.name, memory.model_dump(mode="json"))
        return memory

    async def memory_view(self, user_id: int) -> MemoryView:
        memory = await self.get_memory(user_id)
        return memory.view(self.name)

    async def observe(self, output: AgentRunResult, user_id: int) -> None:
        """Record a summary of another agent's run in this agent's memory."""
        memory = await self.get_memory(user_id)
        memory.add_observation(Observation(
            timestamp=utcnow_iso(),
            agent=output.agent_name,
            output_type=output.agent_name,
            success=output.success,
            has_recommendations=output.has_recommendations,
            collaboration_triggered=bool(output.collaboration_triggers),
        ))
        await self.update_memory(user_id, memory)

    # ------------------------------------------------------------------
    # Descriptors
    # ------------------------------------------------------------------

    def describe(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "role": self.role,
            "tools": list(self.tools),
            "capabilities": list(self.capabilities),
            "mustDoTasks": list(self.must_do_tasks),
        }
