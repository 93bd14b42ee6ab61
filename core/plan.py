"""Upstream plan loading: planner JSON -> ordered tasks + opaque plan context."""

import json
import os

from core.state import Task


def _task_from_item(item, index):
    if not isinstance(item, dict) or not item.get("file"):
        raise ValueError(f"task_flow[{index}] must be an object with a 'file' key")
    deps = item.get("dependencies") or []
    if isinstance(deps, str):
        deps = [deps]
    return Task(
        step=int(item.get("step", index + 1)),
        file=item["file"],
        description=item.get("description", ""),
        dependencies=tuple(deps),
        title=item.get("task", ""),
    )


def load_plan(source):
    """Load a planner blueprint.

    Args:
        source: A dict, a JSON string, or a path to a JSON file. Either the full
                blueprint with a "task_flow" key, or a bare list of tasks.

    Returns:
        (tasks sorted by step, plan context text)
    """
    if isinstance(source, str) and os.path.isfile(source):
        with open(source, encoding="utf-8") as fp:
            data = json.load(fp)
    elif isinstance(source, str):
        data = json.loads(source)
    else:
        data = source

    items = data.get("task_flow", []) if isinstance(data, dict) else data
    if not isinstance(items, list):
        raise ValueError("Plan must contain a 'task_flow' list")

    tasks = [_task_from_item(item, i) for i, item in enumerate(items)]
    tasks.sort(key=lambda t: t.step)

    # Everything but the task list is passed to the generator verbatim
    if isinstance(data, dict):
        context = {k: v for k, v in data.items() if k != "task_flow"}
        plan_context = json.dumps(context, indent=2) if context else ""
    else:
        plan_context = ""
    return tasks, plan_context
