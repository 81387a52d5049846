"""Best-effort task runner.

A config file names lists of registry operations. Steps run in order against a
local `FormRegistry` or a remote `FormsClient`; identifiers generated by one
step are recovered from the notification log and threaded into later steps
through `$name` placeholders. A failing step is logged and recorded, and the
run continues with the next step.

Config format (JSON):

    {
      "owner": "0xOwner",
      "tasks": {
        "seed": [
          {"op": "createForm", "args": {"title": "Survey"}},
          {"op": "addQuestionToForm", "args": {"formId": "$formId", "title": "Age", "responseType": "numeric"}},
          {"op": "addResponder", "args": {"formId": "$formId", "address": "0xR"}},
          {"op": "submitResponse", "caller": "0xR",
           "args": {"formId": "$formId", "questionIndex": "$questionIndex", "value": 46}}
        ]
      }
    }
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from .core.registry import FormRegistry


logger = logging.getLogger(__name__)


OPERATIONS: dict[str, str] = {
    "createForm": "create_form",
    "addQuestionToForm": "add_question_to_form",
    "addResponder": "add_responder",
    "addResponders": "add_responders",
    "submitResponse": "submit_response",
    "getFormDetails": "get_form_details",
    "getQuestionDetails": "get_question_details",
    "isAllowedResponder": "is_allowed_responder",
    "getResponseHistory": "get_response_history",
    "getResponderHistory": "get_responder_history",
    "getResponders": "get_responders",
    "getAllForms": "get_all_forms",
}

# Event each mutation emits.
MUTATIONS: dict[str, str] = {
    "create_form": "FormCreated",
    "add_question_to_form": "QuestionCreated",
    "add_responder": "ResponderAdded",
    "add_responders": "ResponderAdded",
    "submit_response": "ResponseSubmitted",
}

ARGUMENTS: dict[str, str] = {
    "formId": "form_id",
    "questionIndex": "question_index",
    "responseType": "response_type",
    "rawValue": "raw_value",
    "value": "raw_value",
}


@dataclass(frozen=True)
class TaskStep:
    op: str
    args: dict[str, Any] = field(default_factory=dict)
    caller: str | None = None
    save: str | None = None


@dataclass(frozen=True)
class TaskConfig:
    owner: str | None
    tasks: dict[str, tuple[TaskStep, ...]]


@dataclass
class StepResult:
    index: int
    op: str
    ok: bool
    result: Any = None
    error: str | None = None
    events: list[dict[str, Any]] = field(default_factory=list)


@dataclass
class TaskReport:
    task: str
    steps: list[StepResult] = field(default_factory=list)
    context: dict[str, Any] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return all(s.ok for s in self.steps)

    @property
    def failed(self) -> list[StepResult]:
        return [s for s in self.steps if not s.ok]


def resolve_operation(op: str) -> str:
    name = str(op).strip()
    if name in OPERATIONS:
        return OPERATIONS[name]
    if name in OPERATIONS.values():
        return name
    raise ValueError(f"Unknown operation: {op!r}")


def _parse_step(raw: Any, *, task: str, index: int) -> TaskStep:
    if not isinstance(raw, dict):
        raise ValueError(f"task {task!r} step {index} must be an object")
    if "op" not in raw:
        raise ValueError(f"task {task!r} step {index} is missing 'op'")
    args = raw.get("args", {})
    if not isinstance(args, dict):
        raise ValueError(f"task {task!r} step {index}: 'args' must be an object")
    caller = raw.get("caller")
    save = raw.get("save")
    return TaskStep(
        op=str(raw["op"]),
        args=dict(args),
        caller=str(caller) if caller is not None else None,
        save=str(save) if save is not None else None,
    )


def parse_config(data: Any) -> TaskConfig:
    if not isinstance(data, dict):
        raise ValueError("task config must be a JSON object")
    tasks_raw = data.get("tasks")
    if not isinstance(tasks_raw, dict):
        raise ValueError("task config requires a 'tasks' object")

    tasks: dict[str, tuple[TaskStep, ...]] = {}
    for name, steps in tasks_raw.items():
        if not isinstance(steps, list):
            raise ValueError(f"task {name!r} must be a list of steps")
        tasks[str(name)] = tuple(_parse_step(s, task=str(name), index=i) for i, s in enumerate(steps))

    owner = data.get("owner")
    return TaskConfig(owner=str(owner).strip() or None if owner is not None else None, tasks=tasks)


def load_config(path: str | Path) -> TaskConfig:
    with open(path, "r", encoding="utf-8") as f:
        return parse_config(json.load(f))


def _substitute(value: Any, context: dict[str, Any]) -> Any:
    if isinstance(value, str) and value.startswith("$") and len(value) > 1:
        key = value[1:]
        if key not in context:
            raise KeyError(f"No value for placeholder {value!r} in task context")
        return context[key]
    if isinstance(value, list):
        return [_substitute(v, context) for v in value]
    return value


def _event_cursor(target: Any) -> int:
    if isinstance(target, FormRegistry):
        return target.events.latest_seq()
    return int(target.event_cursor())


def _events_since(target: Any, seq: int) -> list[dict[str, Any]]:
    if isinstance(target, FormRegistry):
        return [{"seq": e.seq, "name": e.name, "args": dict(e.args)} for e in target.events.since(seq)]
    return [dict(e) for e in target.events(since=seq)]


def _same_id(a: Any, b: Any) -> bool:
    try:
        return int(a) == int(b)
    except (TypeError, ValueError):
        return False


def _own_events(method: str, kwargs: dict[str, Any], result: Any, events: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """Keep only the events produced by this step's call.

    Other clients of a shared server may commit between our cursor read and
    our scan, so events are matched on name and on the ids the call used or
    returned.
    """

    form_id = result if method == "create_form" else kwargs.get("form_id")
    if method == "add_responder":
        addresses = {str(kwargs.get("address", "")).strip()}
    else:
        addresses = {str(a).strip() for a in kwargs.get("addresses", ()) or ()}
    caller = str(kwargs.get("caller") or "").strip()

    out: list[dict[str, Any]] = []
    for ev in events:
        args = ev.get("args", {})
        if ev.get("name") != MUTATIONS[method] or not _same_id(args.get("formId"), form_id):
            continue
        if method == "add_question_to_form" and not _same_id(args.get("questionIndex"), result):
            continue
        if method in ("add_responder", "add_responders") and args.get("responder") not in addresses:
            continue
        if method == "submit_response" and (
            not _same_id(args.get("questionIndex"), kwargs.get("question_index")) or args.get("responder") != caller
        ):
            continue
        out.append(ev)
    return out


def _default_caller(target: Any, config: TaskConfig) -> str | None:
    if config.owner:
        return config.owner
    if isinstance(target, FormRegistry):
        return target.owner
    return getattr(target, "caller", None)


def run_task(
    target: Any,
    config: TaskConfig,
    task: str,
    *,
    context: dict[str, Any] | None = None,
) -> TaskReport:
    """Run one named task against `target` (a `FormRegistry` or a `FormsClient`)."""

    if task not in config.tasks:
        raise KeyError(f"Unknown task: {task!r}")

    report = TaskReport(task=task, context=dict(context or {}))
    default_caller = _default_caller(target, config)

    for index, step in enumerate(config.tasks[task]):
        try:
            method = resolve_operation(step.op)
            kwargs = {ARGUMENTS.get(k, k): _substitute(v, report.context) for k, v in step.args.items()}
            if method in MUTATIONS:
                kwargs["caller"] = step.caller or default_caller
                cursor = _event_cursor(target)
                result = getattr(target, method)(**kwargs)
                emitted = _own_events(method, kwargs, result, _events_since(target, cursor))
            else:
                result = getattr(target, method)(**kwargs)
                emitted = []
        except Exception as ex:
            logger.warning("[%s] step %d (%s) failed: %s", task, index, step.op, ex)
            report.steps.append(StepResult(index=index, op=step.op, ok=False, error=f"{type(ex).__name__}: {ex}"))
            continue

        for ev in emitted:
            report.context.update(ev.get("args", {}))
        if step.save:
            report.context[step.save] = result
        logger.info("[%s] step %d (%s) ok", task, index, step.op)
        report.steps.append(StepResult(index=index, op=step.op, ok=True, result=result, events=emitted))

    if report.failed:
        logger.warning("[%s] finished with %d failed step(s) of %d", task, len(report.failed), len(report.steps))
    else:
        logger.info("[%s] finished: %d step(s)", task, len(report.steps))
    return report
