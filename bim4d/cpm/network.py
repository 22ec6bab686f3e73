"""
Task graph for CPM calculations.

Validates a task list into an immutable dependency DAG with stable
topological ordering and network traversal.
"""

import heapq
import logging
from collections import defaultdict
from typing import Iterable, Optional

from bim4d.schemas.tasks import Task, TaskId
from .errors import CyclicDependency, DuplicateTaskId, InvalidReference
from .models import DependencyEdge

logger = logging.getLogger(__name__)


class TaskGraph:
    """
    Task dependency graph.

    Built once from a task list via TaskGraph.build and never mutated
    afterwards. Edges are finish-to-start, implied by each task's depends_on.
    """

    def __init__(self, tasks: list[Task], edges: list[DependencyEdge]):
        # Use TaskGraph.build; this constructor trusts its input
        self._tasks: dict[TaskId, Task] = {task.id: task for task in tasks}
        self._index: dict[TaskId, int] = {task.id: i for i, task in enumerate(tasks)}
        self._edges: tuple[DependencyEdge, ...] = tuple(edges)
        self._successors: dict[TaskId, list[TaskId]] = defaultdict(list)
        self._predecessors: dict[TaskId, list[TaskId]] = defaultdict(list)
        for edge in self._edges:
            self._successors[edge.predecessor].append(edge.successor)
            self._predecessors[edge.successor].append(edge.predecessor)
        self._order: Optional[tuple[TaskId, ...]] = None

    @classmethod
    def build(cls, tasks: Iterable[Task]) -> 'TaskGraph':
        """
        Validate tasks and build the graph.

        Raises:
            DuplicateTaskId: two tasks share an id
            InvalidReference: a depends_on entry matches no task
            CyclicDependency: the dependencies form a cycle
        """
        tasks = list(tasks)

        ids = set()
        for task in tasks:
            if task.id in ids:
                logger.error(f"Rejected task list: duplicate task id {task.id!r}")
                raise DuplicateTaskId(task.id)
            ids.add(task.id)

        edges = []
        for task in tasks:
            for pred_id in task.depends_on:
                if pred_id not in ids:
                    logger.error(f"Rejected task list: task {task.id!r} depends on unknown task {pred_id!r}")
                    raise InvalidReference(task.id, pred_id)
                edges.append(DependencyEdge(predecessor=pred_id, successor=task.id))

        graph = cls(tasks, edges)

        cycle = graph._find_cycle()
        if cycle:
            logger.error(f"Rejected task list: circular dependency {' -> '.join(map(str, cycle))}")
            raise CyclicDependency(cycle)

        logger.debug(f"Built {graph!r}")
        return graph

    def _find_cycle(self) -> Optional[list[TaskId]]:
        """
        Depth-first search for a back-edge.

        Returns the cycle as a path whose first and last entries are the same
        task, or None when the graph is acyclic.
        """
        white, grey, black = 0, 1, 2
        color = {tid: white for tid in self._tasks}

        for root in self._tasks:
            if color[root] != white:
                continue

            path = [root]
            color[root] = grey
            stack = [iter(self._successors.get(root, []))]

            while stack:
                advanced = False
                for nxt in stack[-1]:
                    if color[nxt] == grey:
                        return path[path.index(nxt):] + [nxt]
                    if color[nxt] == white:
                        color[nxt] = grey
                        path.append(nxt)
                        stack.append(iter(self._successors.get(nxt, [])))
                        advanced = True
                        break
                if not advanced:
                    color[path.pop()] = black
                    stack.pop()

        return None

    @property
    def tasks(self) -> list[Task]:
        """Tasks in original input order."""
        return list(self._tasks.values())

    @property
    def edges(self) -> list[DependencyEdge]:
        return list(self._edges)

    def get_task(self, task_id: TaskId) -> Optional[Task]:
        """Get a task by ID."""
        return self._tasks.get(task_id)

    def get_successors(self, task_id: TaskId) -> list[TaskId]:
        """Get ids of tasks that depend on task_id."""
        return list(self._successors.get(task_id, []))

    def get_predecessors(self, task_id: TaskId) -> list[TaskId]:
        """Get ids of tasks task_id depends on."""
        return list(self._predecessors.get(task_id, []))

    def get_start_tasks(self) -> list[TaskId]:
        """Get task IDs with no predecessors."""
        return [tid for tid in self._tasks if not self._predecessors.get(tid)]

    def get_end_tasks(self) -> list[TaskId]:
        """Get task IDs with no successors (sinks)."""
        return [tid for tid in self._tasks if not self._successors.get(tid)]

    def topological_order(self) -> list[TaskId]:
        """
        Return task IDs in topological order (predecessors before successors).

        Kahn's algorithm with a min-heap on input position, so tasks with no
        ordering constraint between them keep their original input order.
        """
        if self._order is None:
            ids = list(self._tasks)
            in_degree = {tid: len(self._predecessors.get(tid, [])) for tid in ids}

            ready = [self._index[tid] for tid in ids if in_degree[tid] == 0]
            heapq.heapify(ready)
            order = []

            while ready:
                task_id = ids[heapq.heappop(ready)]
                order.append(task_id)
                for succ_id in self._successors.get(task_id, []):
                    in_degree[succ_id] -= 1
                    if in_degree[succ_id] == 0:
                        heapq.heappush(ready, self._index[succ_id])

            self._order = tuple(order)

        return list(self._order)

    def reverse_topological_order(self) -> list[TaskId]:
        """Return task IDs in reverse topological order (successors before predecessors)."""
        return list(reversed(self.topological_order()))

    def get_all_predecessors(self, task_id: TaskId, include_self: bool = False) -> set[TaskId]:
        """Get all predecessor task IDs (transitive closure)."""
        return self._closure(task_id, self._predecessors, include_self)

    def get_all_successors(self, task_id: TaskId, include_self: bool = False) -> set[TaskId]:
        """Get all successor task IDs (transitive closure)."""
        return self._closure(task_id, self._successors, include_self)

    @staticmethod
    def _closure(task_id: TaskId, adjacency: dict, include_self: bool) -> set[TaskId]:
        result = set()
        if include_self:
            result.add(task_id)

        visited = set()
        queue = [task_id]

        while queue:
            current = queue.pop()
            if current in visited:
                continue
            visited.add(current)

            for neighbour in adjacency.get(current, []):
                result.add(neighbour)
                queue.append(neighbour)

        return result

    def subgraph(self, task_ids: Iterable[TaskId]) -> 'TaskGraph':
        """
        Create a graph restricted to the given tasks.

        Edges are kept only if both endpoints survive. Input order is
        preserved. A subgraph of a DAG is a DAG, so no re-validation happens.
        """
        keep = set(task_ids)
        tasks = [task for tid, task in self._tasks.items() if tid in keep]
        edges = [e for e in self._edges if e.predecessor in keep and e.successor in keep]
        return TaskGraph(tasks, edges)

    def get_statistics(self) -> dict:
        """Get graph statistics."""
        statuses = defaultdict(int)
        for task in self._tasks.values():
            statuses[task.status.value] += 1

        return {
            'total_tasks': len(self._tasks),
            'total_dependencies': len(self._edges),
            'start_tasks': len(self.get_start_tasks()),
            'end_tasks': len(self.get_end_tasks()),
            'statuses': dict(statuses),
        }

    def __len__(self) -> int:
        return len(self._tasks)

    def __contains__(self, task_id: TaskId) -> bool:
        return task_id in self._tasks

    def __repr__(self) -> str:
        return f"TaskGraph({len(self._tasks)} tasks, {len(self._edges)} dependencies)"
