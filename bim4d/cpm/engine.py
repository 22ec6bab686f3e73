"""
CPM (Critical Path Method) Engine.

Implements forward and backward pass calculations over day offsets, plus the
fallback heuristic used when dependency data is too sparse for a real pass.
"""

import logging

from bim4d.schemas.tasks import TaskId
from bim4d.utils.helpers import task_list_fingerprint
from .models import AnalysisMode, CPMResult, ScheduleMetrics
from .network import TaskGraph

logger = logging.getLogger(__name__)

# Slack at or below this many days counts as zero
FLOAT_TOLERANCE = 1e-9


class CriticalPathAnalyzer:
    """
    CPM calculation engine.

    Performs forward pass (early offsets), backward pass (late offsets),
    slack calculation, and critical path identification. The graph is
    assumed to be validated already; it is not re-checked for cycles.
    """

    def __init__(self, graph: TaskGraph, mode: AnalysisMode = AnalysisMode.STRICT,
                 default_duration_days: float = None):
        """
        Initialize CPM engine.

        Args:
            graph: Validated task graph
            mode: STRICT (slack-based) or HEURISTIC; never mixed in one result
            default_duration_days: If given, strict mode includes tasks with no
                                   usable schedule data at this duration instead
                                   of excluding them as unscheduled
        """
        self.graph = graph
        self.mode = AnalysisMode(mode)
        self.default_duration_days = default_duration_days

    def run(self) -> CPMResult:
        """Execute the analysis in the selected mode."""
        if self.mode == AnalysisMode.HEURISTIC:
            return self._run_heuristic()
        return self._run_strict()

    def _partition(self) -> tuple[dict[TaskId, float], list[TaskId], list[TaskId]]:
        """
        Split tasks into analysable durations, unscheduled and defaulted ids.

        Returns:
            (durations for analysed tasks, unscheduled ids, defaulted ids)
        """
        durations = {}
        unscheduled = []
        defaulted = []

        for task in self.graph.tasks:
            if task.is_scheduled():
                durations[task.id] = task.effective_duration()
            elif self.default_duration_days is not None:
                durations[task.id] = float(self.default_duration_days)
                defaulted.append(task.id)
            else:
                unscheduled.append(task.id)

        return durations, unscheduled, defaulted

    @staticmethod
    def forward_pass(graph: TaskGraph, durations: dict[TaskId, float]) -> tuple[dict, dict]:
        """
        Calculate early start and early finish offsets.

        earlyStart(t) = max(earlyFinish(p) for p in predecessors, default 0)
        earlyFinish(t) = earlyStart(t) + duration(t)
        """
        early_start = {}
        early_finish = {}

        for task_id in graph.topological_order():
            start = 0.0
            for pred_id in graph.get_predecessors(task_id):
                start = max(start, early_finish[pred_id])
            early_start[task_id] = start
            early_finish[task_id] = start + durations[task_id]

        return early_start, early_finish

    @staticmethod
    def backward_pass(graph: TaskGraph, durations: dict[TaskId, float],
                      project_finish: float) -> tuple[dict, dict]:
        """
        Calculate late start and late finish offsets, anchored at project finish.

        lateFinish(t) = min(lateStart(s) for s in successors, default projectFinish)
        lateStart(t) = lateFinish(t) - duration(t)
        """
        late_start = {}
        late_finish = {}

        for task_id in graph.reverse_topological_order():
            finish = project_finish
            for succ_id in graph.get_successors(task_id):
                finish = min(finish, late_start[succ_id])
            late_finish[task_id] = finish
            late_start[task_id] = finish - durations[task_id]

        return late_start, late_finish

    def _run_strict(self) -> CPMResult:
        durations, unscheduled, defaulted = self._partition()

        analysed = self.graph.subgraph(durations)
        dropped = len(self.graph.edges) - len(analysed.edges)
        if unscheduled:
            logger.warning(f"{len(unscheduled)} tasks have no usable schedule data and are "
                           f"excluded from critical path analysis: {unscheduled[:5]}")
        if dropped:
            logger.warning(f"{dropped} dependencies touch unscheduled tasks and were ignored")
        if defaulted:
            logger.info(f"{len(defaulted)} tasks use the default duration of "
                        f"{self.default_duration_days} days")

        early_start, early_finish = self.forward_pass(analysed, durations)

        sinks = analysed.get_end_tasks()
        project_finish = max((early_finish[tid] for tid in sinks), default=0.0)

        late_start, late_finish = self.backward_pass(analysed, durations, project_finish)

        starts = [t.start_date for t in analysed.tasks if t.start_date is not None]
        project_start = min(starts) if starts else None

        metrics = {}
        for task in self.graph.tasks:
            if task.id not in durations:
                metrics[task.id] = ScheduleMetrics(task_id=task.id, is_critical=None)
                continue

            slack = late_start[task.id] - early_start[task.id]
            if abs(slack) <= FLOAT_TOLERANCE:
                slack = 0.0
            m = ScheduleMetrics(
                task_id=task.id,
                duration_days=durations[task.id],
                early_start=early_start[task.id],
                early_finish=early_finish[task.id],
                late_start=late_start[task.id],
                late_finish=late_finish[task.id],
                slack=slack,
                is_critical=slack == 0.0,
            )
            if project_start is not None:
                m = m.project_onto(project_start)
            metrics[task.id] = m

        critical_path = [tid for tid in analysed.topological_order() if metrics[tid].is_critical]

        logger.info(f"CPM: {len(analysed)} tasks analysed, project duration {project_finish:g} days, "
                    f"{len(critical_path)} critical")

        return CPMResult(
            mode=AnalysisMode.STRICT,
            metrics=metrics,
            critical_path=critical_path,
            project_duration=project_finish,
            project_start=project_start,
            unscheduled=unscheduled,
            defaulted=defaulted,
        )

    def _run_heuristic(self) -> CPMResult:
        """
        Conservative critical flagging for sparse dependency data.

        A non-completed task is critical if another task depends on it or it
        has no end date. No early/late values are produced.
        """
        metrics = {}
        unscheduled = []

        for task in self.graph.tasks:
            if not task.is_scheduled():
                unscheduled.append(task.id)

            if task.is_completed():
                critical = False
            else:
                critical = bool(self.graph.get_successors(task.id)) or task.end_date is None

            metrics[task.id] = ScheduleMetrics(
                task_id=task.id,
                duration_days=task.effective_duration(self.default_duration_days),
                is_critical=critical,
            )

        critical_path = [tid for tid in self.graph.topological_order() if metrics[tid].is_critical]

        logger.info(f"Heuristic critical path: {len(critical_path)} of {len(self.graph)} tasks flagged")

        return CPMResult(
            mode=AnalysisMode.HEURISTIC,
            metrics=metrics,
            critical_path=critical_path,
            project_duration=None,
            project_start=self._earliest_start(),
            unscheduled=unscheduled,
        )

    def _earliest_start(self):
        starts = [t.start_date for t in self.graph.tasks if t.start_date is not None]
        return min(starts) if starts else None


class AnalysisCache:
    """
    Memoizes CPM results keyed on a fingerprint of the task list.

    Whole-graph recomputation is the default contract; callers that re-render
    often with an unchanged task list can route analysis through this cache.
    A hit returns the same CPMResult object as the first call; its metrics are
    frozen, and callers must not rebind entries of its dicts or lists.
    """

    def __init__(self, max_entries: int = 16):
        self.max_entries = max_entries
        self._entries: dict[tuple, CPMResult] = {}

    def analyze(self, tasks: list, mode: AnalysisMode = AnalysisMode.STRICT,
                default_duration_days: float = None) -> CPMResult:
        """Build the graph and run the analysis unless an identical run is cached."""
        key = (task_list_fingerprint(tasks), AnalysisMode(mode), default_duration_days)
        if key in self._entries:
            logger.debug(f"CPM cache hit for {key[0][:19]}")
            return self._entries[key]

        graph = TaskGraph.build(tasks)
        result = CriticalPathAnalyzer(graph, mode, default_duration_days).run()

        if len(self._entries) >= self.max_entries:
            # Evict oldest entry
            self._entries.pop(next(iter(self._entries)))
        self._entries[key] = result
        return result

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)
