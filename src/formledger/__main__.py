from __future__ import annotations

import argparse
import sys
import time

from .config import configure_logging, load_settings
from .core.registry import FormRegistry
from .runtime.server import run
from .sdk.client import FormsClient
from .tasks import load_config, run_task


def _serve(args: argparse.Namespace) -> int:
    srv = run(
        host=args.host,
        port=args.port,
        owner=args.owner,
        log_level=args.log_level,
        new_server=args.no_attach,
    )
    if isinstance(srv, FormsClient):
        print(f"already running: {srv.base_url}")
        return 0
    print(srv.url)

    # Block forever (so it behaves like a normal CLI server)
    while True:
        time.sleep(3600)


def _tasks(args: argparse.Namespace) -> int:
    config = load_config(args.config)
    settings = load_settings()

    url = args.url or settings.url
    if url:
        target: FormRegistry | FormsClient = FormsClient(url, caller=config.owner or args.owner or settings.owner)
    else:
        target = FormRegistry(config.owner or args.owner or settings.owner)

    report = run_task(target, config, args.task)
    for step in report.steps:
        status = "ok" if step.ok else f"FAILED ({step.error})"
        print(f"{args.task}[{step.index}] {step.op}: {status}")
    return 0 if report.ok else 1


def main(argv: list[str] | None = None) -> int:
    settings = load_settings()

    p = argparse.ArgumentParser(prog="formledger", description="formledger: owner-managed forms and response histories")
    p.add_argument("--log-level", default=settings.log_level)
    p.add_argument("--owner", default=None, help="owner identity (default: FORMLEDGER_OWNER)")
    sub = p.add_subparsers(dest="command", required=True)

    serve = sub.add_parser("serve", help="serve a registry over HTTP")
    serve.add_argument("--host", default=settings.host)
    serve.add_argument("--port", type=int, default=settings.port)
    serve.add_argument("--no-attach", action="store_true", help="always start a new server")
    serve.set_defaults(func=_serve)

    tasks = sub.add_parser("tasks", help="run a named task from a JSON config file")
    tasks.add_argument("config")
    tasks.add_argument("task")
    tasks.add_argument("--url", default=None, help="run against a server instead of a local registry")
    tasks.set_defaults(func=_tasks)

    args = p.parse_args(argv)
    configure_logging(args.log_level)
    return int(args.func(args))


if __name__ == "__main__":
    sys.exit(main())
