"""
Base Agent class and Orchestrator
Nexus Insights: Comment Intelligence
"""

from abc import ABC, abstractmethod
from typing import Any, Callable, List, Optional, Dict
from dataclasses import dataclass, field
from datetime import datetime
import logging
import traceback
import time

from models.schemas import AnalysisProgress, PipelineStep

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[AnalysisProgress], None]


def no_progress(progress: AnalysisProgress) -> None:
    pass


@dataclass
class AgentResult:
    """Standardized result envelope returned by every agent."""
    agent_name: str
    success: bool
    data: Any = None
    error: Optional[str] = None
    exception: Optional[BaseException] = None
    metadata: Dict[str, Any] = field(default_factory=dict)
    started_at: Optional[datetime] = None
    finished_at: Optional[datetime] = None

    @property
    def duration_seconds(self) -> Optional[float]:
        if self.started_at and self.finished_at:
            return (self.finished_at - self.started_at).total_seconds()
        return None

    def __repr__(self):
        status = "✅" if self.success else "❌"
        dur = f" ({self.duration_seconds:.1f}s)" if self.duration_seconds else ""
        return f"{status} {self.agent_name}{dur}"


class Agent(ABC):
    """
    Abstract base class for all pipeline agents.
    Subclasses must implement `run(data)`.

    Agents report coarse progress through an optional callback; omitting it
    changes nothing about what the agent computes.
    """

    def __init__(self, name: str, on_progress: Optional[ProgressCallback] = None):
        self.name = name
        self.logger = logging.getLogger(f"agent.{name}")
        self.on_progress: ProgressCallback = on_progress or no_progress

    @abstractmethod
    def run(self, data: Any) -> Any:
        raise NotImplementedError

    def report(self, step: PipelineStep, message: str, progress: int) -> None:
        self.on_progress(AnalysisProgress(step=step, message=message, progress=progress))

    def execute(self, data: Any) -> AgentResult:
        """
        Wraps `run()` with timing, structured logging, and error handling.
        """
        started_at = datetime.utcnow()
        self.logger.info(f"[{self.name}] Starting...")
        try:
            result = self.run(data)
            finished_at = datetime.utcnow()
            duration = (finished_at - started_at).total_seconds()
            self.logger.info(f"[{self.name}] Completed in {duration:.2f}s")
            return AgentResult(
                agent_name=self.name,
                success=True,
                data=result,
                started_at=started_at,
                finished_at=finished_at,
            )
        except Exception as e:
            finished_at = datetime.utcnow()
            self.logger.error(f"[{self.name}] Failed: {e}\n{traceback.format_exc()}")
            return AgentResult(
                agent_name=self.name,
                success=False,
                error=str(e),
                exception=e,
                started_at=started_at,
                finished_at=finished_at,
            )

    def __repr__(self):
        return f"<Agent: {self.name}>"


class Orchestrator:
    """
    Sequential agent chain. Each agent's output becomes the next agent's input.

    The chain always stops at the first failure: later stages cannot run on
    a missing input. `execute()` returns the failing AgentResult; `run()`
    re-raises the exception that caused it so callers see the original
    error type.
    """

    def __init__(self, agents: List[Agent], label: str = "pipeline"):
        self.agents = agents
        self.label = label
        self.logger = logging.getLogger("orchestrator")
        self.run_history: List[AgentResult] = []

    def execute(self, input_data: Any) -> AgentResult:
        """Execute the chain and return the last AgentResult."""
        self.run_history.clear()
        data = input_data
        total_start = time.time()

        self.logger.info(f"🚀 {self.label}: {len(self.agents)} agents")

        result: Optional[AgentResult] = None
        for i, agent in enumerate(self.agents, 1):
            self.logger.debug(f"  [{i}/{len(self.agents)}] {agent.name}")
            result = agent.execute(data)
            self.run_history.append(result)
            if not result.success:
                self.logger.error(f"  ❌ {self.label}: '{agent.name}' failed: {result.error}")
                return result
            data = result.data

        elapsed = time.time() - total_start
        self.logger.info(f"✅ {self.label}: complete in {elapsed:.2f}s")
        if result is None:
            return AgentResult(agent_name=self.label, success=True, data=input_data)
        return result

    def run(self, input_data: Any) -> Any:
        """Execute the chain and return the final output, or raise the stage's error."""
        result = self.execute(input_data)
        if not result.success:
            if result.exception is not None:
                raise result.exception
            raise RuntimeError(result.error or f"{result.agent_name} failed")
        return result.data

    def summary(self) -> str:
        lines = [f"{self.label} summary:"]
        lines.extend(f"  {r}" for r in self.run_history)
        return "\n".join(lines)
